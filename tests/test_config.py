"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from openslots.config import AppConfig, DefaultsConfig
from openslots.domain.models import OperatingHours


class TestDefaultsConfig:
    """Tests for DefaultsConfig."""

    def test_defaults(self):
        """Test documented defaults."""
        defaults = DefaultsConfig()

        assert defaults.session_minutes == 30
        assert defaults.exclusion_tolerance_minutes == 5
        assert defaults.get_operating_hours() == OperatingHours(start_hour=8, end_hour=17)

    @pytest.mark.parametrize(
        "values",
        [
            {"start_hour": 17, "end_hour": 8},
            {"start_hour": -1},
            {"end_hour": 25},
            {"session_minutes": 0},
            {"exclusion_tolerance_minutes": 0},
        ],
    )
    def test_invalid_values(self, values):
        """Test validation of hours and minute values."""
        with pytest.raises(ValidationError):
            DefaultsConfig(**values)


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, config_file, data_file):
        """Test loading and resolving the data file next to the config."""
        config = AppConfig.load_from_yaml(config_file)

        assert config.timezone == "America/Chicago"
        assert config.resolve_data_file(config_file) == data_file

    def test_absolute_data_file(self, tmp_path, data_file):
        """Test that absolute data paths are kept."""
        config = AppConfig(data_file=data_file)

        assert config.resolve_data_file(tmp_path / "elsewhere" / "config.yaml") == data_file

    def test_unknown_timezone(self):
        """Test timezone validation."""
        with pytest.raises(ValidationError):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_missing_file(self, tmp_path):
        """Test that a missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="config.example.yaml"):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    @pytest.mark.parametrize("content", ["- just\n- a list\n", "defaults: [unclosed\n"])
    def test_invalid_yaml(self, tmp_path, content):
        """Test malformed YAML and non-mapping roots."""
        path = tmp_path / "config.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError):
            AppConfig.load_from_yaml(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        """Test that an empty config file is valid."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        config = AppConfig.load_from_yaml(path)

        assert config.defaults == DefaultsConfig()
