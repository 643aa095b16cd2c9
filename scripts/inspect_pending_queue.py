"""Utility script to inspect or purge the pending notification queue."""

from __future__ import annotations

import argparse
import json

from app.config import get_settings
from app.infrastructure.storage import build_pending_store, serialize_pending_notification


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for queue inspection."""

    parser = argparse.ArgumentParser(
        description="List the notifications waiting for a matching client.",
    )
    parser.add_argument(
        "--user-id",
        default=None,
        help="Only show entries whose filter targets this user id",
    )
    parser.add_argument(
        "--purge",
        action="store_true",
        help="Remove the listed entries from the queue. Stop the relay first.",
    )
    return parser.parse_args()


def main() -> None:
    """Print the configured queue store as JSON."""

    args = parse_args()
    store, engine = build_pending_store(get_settings())
    try:
        stored = store.load()
        entries = [
            entry for entry in stored if not args.user_id or entry.filter.user_id == args.user_id
        ]
        print(json.dumps([serialize_pending_notification(entry) for entry in entries], indent=2))
        if args.purge:
            purged = {entry.id for entry in entries}
            store.save([entry for entry in stored if entry.id not in purged])
            print(f"Purged {len(entries)} pending notification(s).")
    finally:
        if engine is not None:
            engine.dispose()


if __name__ == "__main__":
    main()
