"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from .exceptions import ConfigurationError
from .models import ExtractionRange
from .segment_matcher import MATCHING_THRESHOLDS, DEFAULT_MATCHING_MODE
from .time_range import is_valid_time_string

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'log_dir': 'logs',
    'log_file': 'pagesync.log',
    'temp_dir': 'temp',
    'cache_dir': '.pagesync-cache',
    'whisper_model': 'small',
    'whisper_fp16': True,
    'device': 'cuda',
    'matching_mode': DEFAULT_MATCHING_MODE,
    'min_page_duration': 3.0,
    'max_page_duration': 120.0,
    'min_page_chars': 10,
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys missing from the file take their value from DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            # e.g. a file holding just a string or a list
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config = dict(DEFAULT_CONFIG)
        config.update(loaded)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def validate_config(self, config: dict) -> None:
        """
        Checks the settings the matching workflow depends on.

        Raises:
            ConfigurationError: On an unknown matching mode, a malformed or
                                half-specified extraction range, or bad thresholds.
        """
        mode = config.get('matching_mode', DEFAULT_MATCHING_MODE)
        if mode not in MATCHING_THRESHOLDS:
            raise ConfigurationError(
                f"Invalid matching_mode '{mode}'. Choose one of: {', '.join(MATCHING_THRESHOLDS)}."
            )

        source = config.get('source') or {}
        if not isinstance(source, dict):
            raise ConfigurationError("'source' must be a mapping with 'path', 'start_time' and 'end_time'.")
        for key in ('start_time', 'end_time'):
            value = source.get(key)
            if isinstance(value, (int, float)):
                # YAML 1.1 reads unquoted 15:00 as the base-60 integer 900
                raise ConfigurationError(
                    f"source.{key} was read as the number {value}. Quote the value, e.g. \"15:00\"."
                )
            if value is not None and not is_valid_time_string(str(value)):
                raise ConfigurationError(
                    f"Invalid source.{key} format: {value}. Expected MM:SS or HH:MM:SS format."
                )
        try:
            ExtractionRange.from_config(source)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        for key in ('min_page_duration', 'max_page_duration', 'min_page_chars'):
            value = config.get(key)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"'{key}' must be a non-negative number (got {value!r}).")
        if config['min_page_duration'] > config['max_page_duration']:
            raise ConfigurationError(
                f"min_page_duration ({config['min_page_duration']}) cannot exceed "
                f"max_page_duration ({config['max_page_duration']})."
            )
        logger.debug("Configuration validated.")
