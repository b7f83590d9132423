#!/usr/bin/env python3
"""Admin script to audit and repair column positions.

Every column should hold positions 0..n-1. Databases written before deletes
renumbered their column can contain gaps.

Usage:
    uv run python scripts/check_positions.py
    uv run python scripts/check_positions.py --repair
"""

import argparse
import asyncio
import logging
import sys

from src.core.config import settings
from src.core.db_client import TaskStore
from src.services import task_service


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def check(*, repair: bool) -> bool:
    """Report column density, optionally repairing it.

    Returns:
        True if every column is dense after the run
    """
    store = await TaskStore.open(settings.sqlite_db_path, timeout=settings.store_timeout_seconds)
    try:
        groups = await task_service.check_positions(store)
        broken = [group for group in groups if not group.is_dense]

        for group in groups:
            state = "ok" if group.is_dense else "NOT DENSE"
            logger.info(f"{group.status.name}: {len(group.positions)} tasks, {state}")

        if broken and repair:
            rewritten = await task_service.repair_positions(store)
            logger.info(f"Rewrote {rewritten} positions")
            return True
        return not broken
    finally:
        await store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--repair", action="store_true", help="renumber columns that are not dense")
    args = parser.parse_args()

    if not asyncio.run(check(repair=args.repair)):
        sys.exit(1)


if __name__ == "__main__":
    main()
