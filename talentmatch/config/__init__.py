"""Configuration management module for the talent match engine."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config_dict, validate_config_file
from .models import (
    AppConfig,
    AvailabilityScoring,
    BulkConfig,
    EmailConfig,
    ExperienceScoring,
    LocationScoring,
    LogFormat,
    LoggingConfig,
    LogLevel,
    NotificationConfig,
    RateScoring,
    ScoringConfig,
    ScoringWeights,
    TierThresholds,
)

__all__ = [
    # Main loader functions
    "load_config",
    "parse_config_dict",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "ScoringConfig",
    "ScoringWeights",
    "TierThresholds",
    "ExperienceScoring",
    "RateScoring",
    "AvailabilityScoring",
    "LocationScoring",
    "BulkConfig",
    "EmailConfig",
    "NotificationConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
