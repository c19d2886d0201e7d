"""Command-Line Interface handler for PageSync."""

import argparse
import logging
import os
import sys

from .config_loader import ConfigLoader
from .log_setup import parse_log_level, setup_console_logging, setup_logging_from_config
from .audio_extractor import AudioExtractor
from .transcript_cache import TranscriptCache
from .transcriber import WhisperTranscriber
from .transcript_extractor import TranscriptExtractor
from .page_validator import TranscriptValidator, format_report
from .segment_matcher import MATCHING_THRESHOLDS
from .exceptions import PageSyncError, PageMatchError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

NEXT_STEPS = """Next steps:
  1. Open the transcript file and review the text
  2. Fix any transcription errors
  3. Insert page breaks using --- (triple dash) on its own line
  4. Add page titles using '# Page N: Title'
  5. Save the edited file and set transcript_source in the config
  6. Run: pagesync validate-transcript -c {config}"""

class CLIHandler:
    """Parses arguments and orchestrates the PageSync commands."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        common.add_argument(
            "--source",
            default=None, # Default taken from config file
            help="Override source.path (the media file) from the config file."
        )
        common.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )

        parser = argparse.ArgumentParser(
            description="PageSync: split narrated audio into pages by matching an edited transcript to ASR timestamps.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        extract = subparsers.add_parser(
            "extract-transcript",
            parents=[common],
            help="Transcribe the media source and write a transcript for editing.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        extract.add_argument(
            "--device",
            default=None, # Default taken from config
            choices=["cuda", "cpu"],
            help="Override the processing device (cuda or cpu) specified in config."
        )
        extract.add_argument(
            "--force",
            action="store_true",
            help="Re-transcribe even if a cached transcript exists."
        )

        validate = subparsers.add_parser(
            "validate-transcript",
            parents=[common],
            help="Match the edited transcript to cached segments and preview page timings.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        validate.add_argument(
            "--transcript",
            default=None, # Default taken from config
            help="Override transcript_source (the edited transcript) from the config file."
        )
        validate.add_argument(
            "--matching-mode",
            default=None, # Default taken from config
            choices=list(MATCHING_THRESHOLDS),
            help="Override matching_mode from the config file."
        )
        validate.add_argument(
            "-o", "--output",
            default=None,
            help="Where to write page timestamps JSON. Defaults to the cache directory."
        )

        return parser

    def _load_config(self, args: argparse.Namespace) -> dict:
        """Loads the config, re-configures logging and applies CLI overrides."""
        config = ConfigLoader().load_config(args.config)

        log_path = setup_logging_from_config(config, parse_log_level(args.log_level))
        logger.info(f"Logging re-configured with settings from config file (log file: {log_path}).")

        if args.source:
            logger.info(f"Overriding source.path from config with CLI argument: {args.source}")
            config['source'] = dict(config.get('source') or {}, path=args.source)
        if getattr(args, 'device', None):
            logger.info(f"Overriding device from config with CLI argument: {args.device}")
            config['device'] = args.device
        if getattr(args, 'matching_mode', None):
            logger.info(f"Overriding matching_mode from config with CLI argument: {args.matching_mode}")
            config['matching_mode'] = args.matching_mode
        if getattr(args, 'transcript', None):
            config['transcript_source'] = args.transcript

        ConfigLoader().validate_config(config)
        return config

    def _run_extract(self, args: argparse.Namespace, config: dict) -> None:
        device = config.get('device', 'cuda')

        def build_transcriber():
            # The model is loaded only when the cache has to be rebuilt
            return WhisperTranscriber(
                model_name=config.get('whisper_model', 'small'),
                device=device,
                fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
                language=config.get('language')
            )

        extractor = TranscriptExtractor(
            config=config,
            audio_extractor=AudioExtractor(ffmpeg_path=config.get('ffmpeg_path')),
            transcriber_factory=build_transcriber
        )
        cache = extractor.extract(force=args.force)

        print(f"\nTranscript saved to: {cache.review_transcript_path}\n")
        print(NEXT_STEPS.format(config=args.config))

    def _run_validate(self, args: argparse.Namespace, config: dict) -> None:
        source_path = (config.get('source') or {}).get('path')
        if not source_path:
            raise ConfigurationError("No media source given. Set source.path in the config or pass --source.")
        transcript_path = config.get('transcript_source')
        if not transcript_path:
            raise ConfigurationError(
                "Missing required field: transcript_source. "
                "Point it at the edited transcript (run extract-transcript first to generate one)."
            )

        cache = TranscriptCache(config.get('cache_dir', '.pagesync-cache'), source_path)
        if not os.path.isfile(cache.segments_path):
            raise PageSyncError(
                f"Transcript cache not found: {cache.segments_path}. "
                f"Run extract-transcript first to generate it."
            )
        segments = cache.load_segments()
        metadata = cache.load_metadata()
        trimmed_duration = metadata.trimmed_duration if metadata else None

        validator = TranscriptValidator(config, show_progress=True)
        report = validator.validate(transcript_path, segments, trimmed_duration=trimmed_duration)

        print(format_report(report))
        output_path = cache.write_page_timestamps(report.timestamps, args.output)
        print(f"\nValidation passed. Page timestamps written to: {output_path}")

    def run(self, argv=None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the command."""
        args = self.parser.parse_args(argv)

        # Console only until the config names the log directory
        setup_console_logging(parse_log_level(args.log_level))

        try:
            config = self._load_config(args)
        except ConfigurationError as e:
            logger.critical(f"Invalid configuration in {args.config}: {e}")
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}")
            sys.exit(1)

        try:
            if args.command == "extract-transcript":
                self._run_extract(args, config)
            else:
                self._run_validate(args, config)
            sys.exit(0)
        except PageMatchError as e:
            # Expected outcome of editing: the user fixes the text or relaxes the mode
            logger.error(f"Page matching failed:\n{e}")
            sys.exit(1)
        except (PageSyncError, FileNotFoundError) as e:
            logger.error(f"A PageSync error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2) # Use a different exit code for unexpected crashes

def main() -> None:
    CLIHandler().run()
