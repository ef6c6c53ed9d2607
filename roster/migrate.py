"""
CLI entrypoint for the one-shot migration shims. Run once per deployment, e.g.:

  python -m roster.migrate roles --dry-run
  python -m roster.migrate identities
  python -m roster.migrate verify

Always run `roles` before `identities`; `verify` is read-only.
"""

import argparse
import logging
import sys

from roster.core.config import get_settings
from roster.core.database import SessionLocal
from roster.services.migrations import merge_identities, migrate_role_strings, verify_identity_merge

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m roster.migrate", description="Run a roster migration shim.")
    parser.add_argument("command", choices=("roles", "identities", "verify"))
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and log every change, then roll back",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one shim; 0 on success, 1 on failure."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    db = SessionLocal()
    try:
        if args.command == "verify":
            report = verify_identity_merge(db)
            print(report.model_dump_json(indent=2))
            if not report.clean:
                logger.warning("Identity merge verification found leftover legacy references")
                return 1
            return 0
        if args.command == "roles":
            result = migrate_role_strings(db, dry_run=args.dry_run)
        else:
            result = merge_identities(
                db,
                dry_run=args.dry_run,
                default_rank_abbreviation=settings.DEFAULT_RANK_ABBREVIATION,
            )
        for line in result.log:
            print(line)
        print(result.message)
        return 0 if result.success else 1
    except Exception as e:
        db.rollback()
        logger.exception("Migration %s failed: %s", args.command, e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
