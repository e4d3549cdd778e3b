"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import OperatingHours


class DefaultsConfig(BaseModel):
    """Default settings for slot search."""
    session_minutes: int = 30
    start_hour: int = 8
    end_hour: int = 17
    exclusion_tolerance_minutes: int = 5

    @field_validator("session_minutes", "exclusion_tolerance_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure minute values are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_operating_hours(self) -> OperatingHours:
        """Operating hours used when a site has none of its own."""
        return OperatingHours(start_hour=self.start_hour, end_hour=self.end_hour)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Chicago"
    data_file: Path = Path("schedule_data.json")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def resolve_data_file(self, config_path: Path) -> Path:
        """Data file path, relative paths taken from the config file's folder."""
        if self.data_file.is_absolute():
            return self.data_file
        return config_path.parent / self.data_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
