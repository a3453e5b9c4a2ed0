"""
Settings loader for CourseGate.

Loads YAML settings from the config/ directory, then applies COURSEGATE_*
environment overrides (a .env file in the working directory is honoured).
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


# Default config file (relative to project root)
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "coursegate.yaml"

ENV_PREFIX = "COURSEGATE_"


class Settings(BaseModel):
    database_path: Path = Path.home() / ".coursegate" / "coursegate.db"
    default_pass_mark_percentage: int = Field(70, ge=0, le=100)
    default_enforce_pass_mark: bool = True
    log_level: str = "INFO"


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML settings file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed mapping, or an empty dict for an empty file

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def env_overrides() -> dict[str, str]:
    """Collect COURSEGATE_* variables as lower-case setting names."""
    overrides = {}
    for field_name in Settings.model_fields:
        value = os.environ.get(ENV_PREFIX + field_name.upper())
        if value is not None:
            overrides[field_name] = value
    return overrides


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from YAML with environment overrides.

    An explicit path must exist; the default path is optional and falls
    back to built-in defaults when missing.
    """
    load_dotenv()

    if path is not None:
        values = read_config_file(path)
    elif DEFAULT_CONFIG_PATH.exists():
        values = read_config_file(DEFAULT_CONFIG_PATH)
    else:
        values = {}

    values.update(env_overrides())
    settings = Settings(**values)

    # Relative database paths are anchored at the project root, not the cwd
    if not settings.database_path.is_absolute():
        settings.database_path = PROJECT_ROOT / settings.database_path
    return settings
