"""Loading of the YAML configuration file.

The file is optional: without one, every scoring parameter takes its default
value. Environment variables are read separately (see ``environment``) and
returned alongside the parsed file.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_LOCATIONS = (
    Path("config.yaml"),
    Path("config") / "config.yaml",
)

SCHEMA_HINTS = (
    "Review config.example.yaml for correct format",
    "Check that scoring weights sum to 100",
    "Verify field types match the expected schema",
)

_TYPE_ERRORS = {
    "string_type": "string",
    "int_type": "int",
    "int_parsing": "int",
    "float_type": "float",
    "float_parsing": "float",
    "bool_type": "bool",
    "bool_parsing": "bool",
    "list_type": "list",
    "dict_type": "mapping",
}


def load_config(
    config_path: Optional[Path] = None, require_smtp: Optional[bool] = None
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load the configuration file and the environment.

    The file is ``config_path`` when given (it must exist), else the first of
    ``config.yaml`` and ``config/config.yaml`` found in the working directory.

    Args:
        config_path: Optional path to configuration file
        require_smtp: Whether SMTP environment variables are mandatory
            (defaults to whether email notifications are enabled)

    Raises:
        ConfigurationError: If the file or the environment is invalid
    """
    config_file = locate_config_file(config_path)

    if config_file is None:
        logger.info("No configuration file found, using defaults")
        app_config = AppConfig()
    else:
        logger.debug("Loading configuration from %s", config_file)
        app_config = parse_config_dict(read_config_file(config_file), source=str(config_file))

    if require_smtp is None:
        require_smtp = app_config.email_required

    return app_config, load_environment_config(require_smtp=require_smtp)


def parse_config_dict(
    config_dict: Optional[Dict[str, Any]], source: Optional[str] = None
) -> AppConfig:
    """
    Validate a raw configuration mapping into an AppConfig.

    An empty document (``None``) gives the defaults.

    Raises:
        ConfigurationError: If the mapping does not satisfy the schema
    """
    raw = {} if config_dict is None else config_dict
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(raw).__name__}",
            suggestions=SCHEMA_HINTS[:1],
            source=source,
        )

    emit_warnings(check_for_warnings(raw))

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=format_validation_errors(e),
            suggestions=SCHEMA_HINTS,
            source=source,
        ) from e


def format_validation_errors(error: ValidationError) -> List[str]:
    """One readable line per pydantic error, prefixed with the field path."""
    lines = []
    for item in error.errors():
        path = " -> ".join(str(part) for part in item["loc"]) or "(root)"
        kind = item["type"]
        if kind == "missing":
            lines.append(f"Missing required field: {path}")
        elif kind in _TYPE_ERRORS:
            lines.append(
                f"Invalid type for '{path}': expected {_TYPE_ERRORS[kind]}, got {item.get('input')!r}"
            )
        elif kind == "enum":
            lines.append(f"Invalid value for '{path}': {item['msg']}")
        else:
            lines.append(f"{path}: {item['msg']}")
    return lines


def read_config_file(config_file: Path) -> Any:
    """Parse a YAML file; I/O and syntax errors become ConfigurationError."""
    try:
        text = Path(config_file).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=["Check that the file exists and is readable"],
            source=str(config_file),
        ) from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
            source=str(config_file),
        ) from e


def locate_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Return the configuration file to load, or None to use the defaults.

    Raises:
        ConfigurationError: If an explicit path does not exist
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {path}",
                suggestions=["Copy config.example.yaml to config.yaml"],
            )
        return path

    return next((c for c in DEFAULT_CONFIG_LOCATIONS if c.exists()), None)


def validate_config_file(config_path: Path) -> bool:
    """
    Check a configuration file without reading the environment.

    Prints the outcome and returns whether the file is valid.
    """
    try:
        parse_config_dict(read_config_file(config_path), source=str(config_path))
    except ConfigurationError as e:
        print(f"✗ Configuration validation failed:\n{e}")
        return False
    print(f"✓ Configuration file {config_path} is valid")
    return True
