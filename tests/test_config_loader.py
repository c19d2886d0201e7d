"""Tests for YAML configuration loading and validation."""

import pytest

from pagesync.config_loader import ConfigLoader, DEFAULT_CONFIG
from pagesync.exceptions import ConfigurationError


@pytest.fixture
def write_config(tmp_path):
    def _write(text):
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


class TestLoadConfig:

    def test_defaults_are_merged(self, write_config):
        path = write_config(
            "source:\n"
            "  path: story.mp4\n"
            "matching_mode: fuzzy\n"
        )
        config = ConfigLoader().load_config(path)
        assert config["matching_mode"] == "fuzzy"
        assert config["source"] == {"path": "story.mp4"}
        assert config["cache_dir"] == DEFAULT_CONFIG["cache_dir"]
        assert config["min_page_duration"] == 3.0

    def test_defaults_not_mutated(self, write_config):
        ConfigLoader().load_config(write_config("matching_mode: strict\n"))
        assert DEFAULT_CONFIG["matching_mode"] == "tolerant"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader().load_config(str(tmp_path / "nope.yaml"))

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not a file"):
            ConfigLoader().load_config(str(tmp_path))

    @pytest.mark.parametrize("text", ["- a\n- b\n", "just a string\n", ""])
    def test_root_must_be_mapping(self, write_config, text):
        with pytest.raises(ConfigurationError, match="Root must be a mapping"):
            ConfigLoader().load_config(write_config(text))

    def test_invalid_yaml(self, write_config):
        with pytest.raises(ConfigurationError, match="Invalid YAML format"):
            ConfigLoader().load_config(write_config("source: [unclosed\n"))


class TestValidateConfig:

    def _config(self, **overrides):
        config = dict(DEFAULT_CONFIG)
        config.update(overrides)
        return config

    def test_defaults_are_valid(self):
        ConfigLoader().validate_config(self._config())

    def test_quoted_range_is_valid(self, write_config):
        path = write_config(
            "source:\n"
            "  path: story.mp4\n"
            "  start_time: \"01:30\"\n"
            "  end_time: \"15:00\"\n"
        )
        loader = ConfigLoader()
        loader.validate_config(loader.load_config(path))

    def test_unknown_matching_mode(self):
        with pytest.raises(ConfigurationError, match="Invalid matching_mode 'loose'"):
            ConfigLoader().validate_config(self._config(matching_mode="loose"))

    def test_half_specified_range(self):
        config = self._config(source={"path": "a.mp4", "end_time": "15:00"})
        with pytest.raises(ConfigurationError, match="must be specified together"):
            ConfigLoader().validate_config(config)

    def test_malformed_range(self):
        config = self._config(source={"path": "a.mp4", "start_time": "1:75", "end_time": "15:00"})
        with pytest.raises(ConfigurationError, match="Invalid source.start_time format"):
            ConfigLoader().validate_config(config)

    def test_unquoted_sexagesimal_time(self, write_config):
        # YAML 1.1 turns 15:00 into the integer 900
        path = write_config(
            "source:\n"
            "  path: story.mp4\n"
            "  start_time: 1:30\n"
            "  end_time: 15:00\n"
        )
        loader = ConfigLoader()
        config = loader.load_config(path)
        assert config["source"]["end_time"] == 900
        with pytest.raises(ConfigurationError, match="Quote the value"):
            loader.validate_config(config)

    def test_source_must_be_mapping(self):
        with pytest.raises(ConfigurationError, match="'source' must be a mapping"):
            ConfigLoader().validate_config(self._config(source="story.mp4"))

    @pytest.mark.parametrize("key,value", [
        ("min_page_duration", -1),
        ("max_page_duration", "long"),
        ("min_page_chars", True),
    ])
    def test_bad_thresholds(self, key, value):
        with pytest.raises(ConfigurationError, match=key):
            ConfigLoader().validate_config(self._config(**{key: value}))

    def test_min_duration_above_max(self):
        with pytest.raises(ConfigurationError, match="cannot exceed"):
            ConfigLoader().validate_config(self._config(min_page_duration=30, max_page_duration=10))
