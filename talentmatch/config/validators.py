"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    These are settings that validate but are probably not what the operator
    meant.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    scoring = config_dict.get("scoring") or {}
    bulk = config_dict.get("bulk") or {}
    notifications = config_dict.get("notifications") or {}
    if not all(isinstance(section, dict) for section in (scoring, bulk, notifications)):
        # Structural problems are reported by schema validation
        return warning_messages

    weights = scoring.get("weights") or {}
    if isinstance(weights, dict) and weights.get("skills", 50) == 0:
        warning_messages.append(
            "Skill weight is 0: talents will be ranked without looking at their skills"
        )

    tiers = scoring.get("tiers") or {}
    weak_threshold = tiers.get("weak", 20) if isinstance(tiers, dict) else 20
    cap = scoring.get("blocked_score_cap", 19)
    if isinstance(cap, int) and isinstance(weak_threshold, int) and cap >= weak_threshold:
        warning_messages.append(
            f"blocked_score_cap ({cap}) is not below the weak tier ({weak_threshold}): "
            "talents who cannot apply may be recommended"
        )

    min_score = bulk.get("min_score", 60)
    if isinstance(min_score, int) and min_score < weak_threshold:
        warning_messages.append(
            f"Low bulk min_score ({min_score}) keeps matches that are not recommended"
        )

    max_workers = bulk.get("max_workers", 4)
    if isinstance(max_workers, int) and max_workers > 16:
        warning_messages.append(
            f"Large max_workers ({max_workers}): scoring is CPU-bound and gains little past a few threads"
        )

    notify_min = notifications.get("min_score", 60)
    if isinstance(notify_min, int) and isinstance(min_score, int) and notify_min < min_score:
        warning_messages.append(
            f"notifications.min_score ({notify_min}) is below bulk.min_score ({min_score}) "
            "and has no effect"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
