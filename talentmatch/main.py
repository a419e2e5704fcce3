"""Command-line entry point for the talent match engine."""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from talentmatch.config.environment import EnvironmentConfig
from talentmatch.config.exceptions import ConfigurationError
from talentmatch.config.loader import load_config
from talentmatch.config.models import AppConfig
from talentmatch.domain.exceptions import MatchingError
from talentmatch.domain.loader import load_offer, load_talent, load_talents
from talentmatch.logging import get_logger
from talentmatch.logging.config import configure_logging
from talentmatch.matching.engine import MatchingEngine
from talentmatch.matching.utils import build_bulk_payload, build_match_payload
from talentmatch.persistence.database import close_database, init_database
from talentmatch.pipeline import OfferMatchingRun
from talentmatch.utils.timestamps import parse_iso_date

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INPUT_ERROR = 2


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str], require_smtp: Optional[bool]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and prepare runtime configuration.

    Args:
        config_path: Path to configuration file (None to search the defaults)
        log_level_override: Log level from CLI (takes precedence)
        require_smtp: Whether SMTP settings must be present (None: when email is enabled)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with the effective log level set

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path, require_smtp=require_smtp)

    # Log level priority: CLI > Environment > Config
    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="talent-match",
        description="Score freelancer profiles against a job offer",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present, else built-in defaults)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument("--offer", type=Path, required=True, help="Offer file (YAML or JSON)")

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--talent", type=Path, help="Single talent file: print the detailed report")
    mode.add_argument("--talents", type=Path, help="Talent pool file: print the ranked matches")

    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Minimum score kept in bulk mode (default: bulk.min_score)",
    )
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Store bulk matches in DATABASE_URL, skipping talents already matched",
    )
    parser.add_argument(
        "--notify",
        action="store_true",
        help="Notify talents of new matches (requires --persist)",
    )
    parser.add_argument(
        "--reference-date",
        default=None,
        help="Date availability is computed from, YYYY-MM-DD (default: today, UTC)",
    )
    return parser


def main(argv=None) -> int:
    """
    Main entry point for the talent-match command.

    Returns:
        Exit code (0 ok, 1 runtime error, 2 configuration or input error).
    """
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.talent and (args.persist or args.notify or args.threshold is not None):
        parser.error("--threshold, --persist and --notify only apply to --talents")
    if args.notify and not args.persist:
        parser.error("--notify requires --persist")
    if args.threshold is not None and not 0 <= args.threshold <= 100:
        parser.error("--threshold must be between 0 and 100")

    reference_date = None
    if args.reference_date:
        reference_date = parse_iso_date(args.reference_date)
        if reference_date is None:
            parser.error(f"--reference-date: invalid date '{args.reference_date}'")

    try:
        app_config, env_config = load_runtime_config(
            args.config, args.log_level, require_smtp=None if args.notify else False
        )
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=os.environ.get("ENVIRONMENT", "local"),
            stream=sys.stderr,
        )

        offer = load_offer(args.offer)
        engine = MatchingEngine.from_config(app_config)

        if args.talent:
            talent, commitments = load_talent(args.talent)
            result = engine.evaluate(talent, offer, commitments, reference_date)
            _print_json(build_match_payload(result))
            return EXIT_OK

        talents, commitments = load_talents(args.talents)

        if not args.persist:
            bulk = engine.match_pool(
                offer,
                talents,
                min_score=args.threshold,
                commitments=commitments,
                reference_date=reference_date,
            )
            _print_json(build_bulk_payload(bulk))
            return EXIT_OK

        init_database(env_config.database_url)
        try:
            run = OfferMatchingRun(app_config, env_config, engine=engine)
            result = run.run_for_offer(
                offer,
                talents,
                min_score=args.threshold,
                notify=args.notify,
                commitments=commitments,
                reference_date=reference_date,
            )
        finally:
            close_database()

        if result.skipped:
            logger.warning("Run skipped", extra={"event": "cli.run.skipped"})
            return EXIT_RUNTIME_ERROR

        payload = build_bulk_payload(result.bulk)
        payload["run"] = {
            "runId": result.run_id,
            "evaluated": result.evaluated,
            "excluded": result.excluded,
            "rejected": result.rejected,
            "persisted": result.persisted,
            "notified": result.notified,
            "emailed": result.emailed,
            "failed": result.failed,
        }
        _print_json(payload)
        return EXIT_RUNTIME_ERROR if result.failed else EXIT_OK

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except MatchingError as e:
        print(f"Input Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={"event": "cli.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return EXIT_RUNTIME_ERROR


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    sys.exit(main())
