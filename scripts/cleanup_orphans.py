#!/usr/bin/env python3
"""Delete stored objects that no catalog record points at."""
from __future__ import annotations

import argparse
from datetime import timedelta

from pinvault.app import configure_logging
from pinvault.context import VaultContext
from pinvault.errors import VaultError
from pinvault.infra.files_repo import FilesRepo
from pinvault.services.cleanup_service import DEFAULT_MIN_AGE, cleanup_orphans
from pinvault.settings import Settings


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="list orphans without deleting them")
    parser.add_argument(
        "--min-age-hours",
        type=float,
        default=DEFAULT_MIN_AGE.total_seconds() / 3600,
        help="skip objects newer than this (default: %(default)s)",
    )
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    ctx = VaultContext(settings)

    try:
        report = cleanup_orphans(
            FilesRepo(ctx.mongo),
            ctx.storage,
            dry_run=args.dry_run,
            min_age=timedelta(hours=args.min_age_hours),
        )
    except VaultError as exc:
        raise SystemExit(f"Error: {exc.message}")
    finally:
        ctx.mongo.close()

    for key in report.orphans:
        print(("would delete " if args.dry_run else "orphan ") + key)
    if not args.dry_run:
        print(f"Deleted {len(report.deleted)}, failed {len(report.failed)}")
    if report.failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
