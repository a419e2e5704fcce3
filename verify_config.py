#!/usr/bin/env python3
"""Check a configuration file against the scoring schema and print a summary."""

import sys
from pathlib import Path

from talentmatch.config import ConfigurationError, parse_config_dict
from talentmatch.config.loader import read_config_file


def verify_config_structure(config_file: Path = Path("config.example.yaml")) -> bool:
    """Validate config_file and print the effective scoring table."""
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    try:
        config = parse_config_dict(read_config_file(config_file), source=str(config_file))
    except ConfigurationError as e:
        print(f"✗ {config_file} validation failed:\n{e}")
        return False

    scoring = config.scoring
    weights = ", ".join(f"{name}={weight}" for name, weight in scoring.weights.as_dict().items())
    tiers = scoring.tiers

    print(f"✓ {config_file} structure is valid")
    print(f"  - Weights: {weights}")
    print(
        f"  - Tiers: excellent>={tiers.excellent}, good>={tiers.good}, "
        f"average>={tiers.average}, weak>={tiers.weak}"
    )
    print(f"  - Blocked score cap: {scoring.blocked_score_cap}")
    print(
        f"  - Availability grace window: {scoring.availability.grace_window_days} days, "
        f"commitment horizon: {scoring.availability.commitment_horizon_days} days"
    )
    print(f"  - Bulk threshold: {config.bulk.min_score} ({config.bulk.max_workers} workers)")
    print(
        f"  - Notifications: {'on' if config.notifications.enabled else 'off'} "
        f"(min score {config.notifications.min_score}), "
        f"email {'on' if config.email.enabled else 'off'}"
    )
    return True


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.example.yaml")
    success = verify_config_structure(path)
    sys.exit(0 if success else 1)
