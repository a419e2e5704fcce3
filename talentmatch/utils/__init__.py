"""Utility functions for time handling and score arithmetic."""

from .numbers import clamp_score, round_half_up
from .timestamps import (
    add_days,
    as_date,
    days_between,
    ensure_utc,
    format_timestamp,
    parse_iso_date,
    utc_now,
    utc_today,
)

__all__ = [
    # Timestamps
    "utc_now",
    "utc_today",
    "ensure_utc",
    "as_date",
    "parse_iso_date",
    "add_days",
    "days_between",
    "format_timestamp",
    # Numbers
    "round_half_up",
    "clamp_score",
]
