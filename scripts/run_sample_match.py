#!/usr/bin/env python3
"""Sample matching harness for end-to-end validation.

Runs the bundled sample offer and talent pool through the whole pipeline
(scoring, persistence, in-app notifications) against a throwaway SQLite
database, with SMTP patched out so no email leaves the machine.

Usage:
    # Run with the bundled samples
    python scripts/run_sample_match.py

    # Custom inputs and database path
    python scripts/run_sample_match.py --offer samples/offer.yaml \
        --talents samples/talents.yaml --database /tmp/sample.db

    # Pin "today" so availability scores are reproducible
    python scripts/run_sample_match.py --reference-date 2026-10-19
"""

import argparse
import sys
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from talentmatch.config.loader import load_config
from talentmatch.domain.loader import load_offer, load_talents
from talentmatch.logging.config import configure_logging
from talentmatch.persistence.database import close_database, get_session, init_database
from talentmatch.persistence.repositories import MatchRepository, NotificationRepository
from talentmatch.pipeline import OfferMatchingRun
from talentmatch.utils.timestamps import parse_iso_date

SAMPLES_DIR = Path(__file__).parent.parent / "samples"


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_table(headers, rows):
    """Print rows as a boxed table sized to its content."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(str(cell))) for w, cell in zip(widths, row)]

    def line(left, mid, right):
        return left + mid.join("─" * (w + 2) for w in widths) + right

    print(line("┌", "┬", "┐"))
    print("│" + "│".join(f" {h:<{w}} " for h, w in zip(headers, widths)) + "│")
    print(line("├", "┼", "┤"))
    for row in rows:
        print("│" + "│".join(f" {str(c):<{w}} " for c, w in zip(row, widths)) + "│")
    print(line("└", "┴", "┘"))


def print_run_summary(result):
    print_header("Matching Run Summary")
    print_table(
        ["Metric", "Value"],
        [
            ("Talents evaluated", result.evaluated),
            ("Talents excluded (already matched)", result.excluded),
            ("Talents rejected (invalid)", result.rejected),
            ("Matches retained", result.retained),
            ("Matches persisted", result.persisted),
            ("Talents notified", result.notified),
            ("Failures", result.failed),
            ("Duration (seconds)", f"{result.duration_seconds:.2f}"),
        ],
    )


def print_matches(result):
    print_header("Ranked Matches")
    if result.bulk is None or not result.bulk.matches:
        print("No talent reached the threshold.")
        return
    print_table(
        ["Talent", "Score", "Recommendation", "Message"],
        [
            (match.talent_id, match.score, match.recommendation.value, match.message)
            for match in result.bulk.matches
        ],
    )
    for rejected in result.bulk.rejected:
        print(f"  ! talent #{rejected.index} ({rejected.talent_id}): {rejected.error}")


def parse_args():
    parser = argparse.ArgumentParser(
        description="Run the sample offer and talent pool through the matching pipeline"
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file")
    parser.add_argument("--offer", type=Path, default=SAMPLES_DIR / "offer.yaml")
    parser.add_argument("--talents", type=Path, default=SAMPLES_DIR / "talents.yaml")
    parser.add_argument(
        "--database",
        type=Path,
        default=Path("data/sample_match.db"),
        help="SQLite database file (default: data/sample_match.db)",
    )
    parser.add_argument("--threshold", type=int, default=None, help="Retention threshold")
    parser.add_argument("--reference-date", default=None, help="Reference date, YYYY-MM-DD")
    return parser.parse_args()


def main():
    load_dotenv()
    args = parse_args()

    print_header("Talent Match - Sample Run")

    try:
        app_config, env_config = load_config(args.config, require_smtp=False)
        env_config.database_url = f"sqlite:///{args.database}"
        configure_logging(level="WARNING", format_type=app_config.logging.format)
        print("✓ Configuration loaded")

        offer = load_offer(args.offer)
        talents, commitments = load_talents(args.talents)
        print(f"✓ Offer {offer.offer_id} loaded, {len(talents)} talents in the pool")

        reference_date = parse_iso_date(args.reference_date) if args.reference_date else None

        init_database(env_config.database_url)
        print(f"✓ Database initialized: {args.database}")

        run = OfferMatchingRun(app_config, env_config)
        with patch("talentmatch.notifications.smtp_client.SMTPClient.send") as mock_send:
            mock_send.return_value = None
            result = run.run_for_offer(
                offer,
                talents,
                min_score=args.threshold,
                notify=True,
                commitments=commitments,
                reference_date=reference_date,
            )

        print_run_summary(result)
        print_matches(result)

        print_header("Stored Data")
        with get_session() as session:
            stored = MatchRepository(session).best_for_offer(offer.offer_id)
            print(f"{len(stored)} match record(s) for offer {offer.offer_id}")
            for record in stored:
                inbox = NotificationRepository(session).list_for_talent(record.talent_id)
                print(
                    f"  - talent {record.talent_id}: score {record.score}, "
                    f"{len(inbox)} notification(s)"
                )

        print("\n" + "-" * 80)
        print(f"Run again to see already-matched talents excluded; rm {args.database} to reset")
        print("-" * 80 + "\n")

        close_database()
        return 1 if result.had_errors else 0

    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
