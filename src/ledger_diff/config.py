"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SourceProfile(BaseModel):
    """
    Column layout and date pattern of one export format.

    Column indices are 0-based positions in the CSV record. Sources write a
    signed amount by filling exactly one of the debit/credit columns; a
    profile may point both at the same column when the export uses a single
    signed amount column.
    """

    name: str = ""
    description: str = ""
    date_column: int = Field(ge=0)
    debit_column: int = Field(ge=0)
    credit_column: int = Field(ge=0)
    description_column: int = Field(ge=0)
    date_format: str = "%m/%d/%Y"
    encoding: str = "utf-8"
    delimiter: str = ","
    skip_rows: int = Field(default=0, ge=0)

    @property
    def max_column(self) -> int:
        """Highest column index referenced by this profile."""
        return max(
            self.date_column,
            self.debit_column,
            self.credit_column,
            self.description_column,
        )


class MatchingConfig(BaseModel):
    """Configuration for the matching engine."""

    date_tolerance_days: int = Field(default=7, ge=0)


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched Pairs"))
    source_only: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Only In Source")
    )
    ledger_only: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Only In Ledger")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    display_date_format: str = "%m/%d/%Y"
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    profiles: dict[str, SourceProfile] = Field(default_factory=dict)
    ledger_profile: str = "ledger"
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None

    @model_validator(mode="after")
    def _name_profiles(self) -> "ReconConfig":
        for key, profile in self.profiles.items():
            if not profile.name:
                profile.name = key
        return self

    def get_profile(self, name: str) -> SourceProfile:
        """
        Look up a source profile by name.

        Raises:
            ConfigurationError: If no profile has that name
        """
        try:
            return self.profiles[name]
        except KeyError:
            known = ", ".join(sorted(self.profiles)) or "none"
            raise ConfigurationError(
                f"Unknown source profile '{name}' (known profiles: {known})"
            ) from None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "profiles": {
            "card": {
                "description": "Primary bank-card export",
                "date_column": 1,
                "debit_column": 2,
                "credit_column": 2,
                "description_column": 7,
                "date_format": "%m/%d/%Y",
            },
            "card-secondary": {
                "description": "Secondary card export",
                "date_column": 0,
                "debit_column": 2,
                "credit_column": 3,
                "description_column": 1,
                "date_format": "%m/%d/%y",
            },
            "bank": {
                "description": "Bank-account export",
                "date_column": 0,
                "debit_column": 3,
                "credit_column": 4,
                "description_column": 2,
                "date_format": "%Y-%m-%d",
            },
            "ledger": {
                "description": "General-ledger / accounting export",
                "date_column": 0,
                "debit_column": 4,
                "credit_column": 5,
                "description_column": 3,
                "date_format": "%m/%d/%Y",
            },
        },
        "ledger_profile": "ledger",
        "matching": {
            "date_tolerance_days": 7,
        },
        "output": {
            "display_date_format": "%m/%d/%Y",
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched Pairs"},
                "source_only": {"enabled": True, "name": "Only In Source"},
                "ledger_only": {"enabled": True, "name": "Only In Ledger"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.debug("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# ledger-diff configuration
# Column indices are 0-based. Date formats use strptime directives.

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
