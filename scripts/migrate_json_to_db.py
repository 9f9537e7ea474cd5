#!/usr/bin/env python3
"""
Migrate learned pairs from the JSON store to a SQLite database.

Usage:
    python scripts/migrate_json_to_db.py --json data/store.json --db data/learned.db
"""

import argparse
import sys
from pathlib import Path

from smartform.database import SqlLearnedStore
from smartform.storage import learned_pairs, load_store


def migrate(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Copy learned pairs from JSON to database, keeping their order.

    Args:
        json_path: Path to JSON store file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    print(f"Loading learned pairs from {json_path}...")
    store = load_store(json_path)
    raw_count = len(store.get("learned", []))
    pairs = learned_pairs(store)
    skipped = raw_count - len(pairs)
    print(f"Found {len(pairs)} valid pairs in JSON store ({skipped} malformed)")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following pairs:")
        for i, pair in enumerate(pairs[:5], 1):
            print(f"  {i}. {pair.question} -> {pair.answer}")
        if len(pairs) > 5:
            print(f"  ... and {len(pairs) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    db = SqlLearnedStore(db_path)
    existing = len(db.pairs())
    if existing:
        print(f"⚠️  Database already holds {existing} pairs; new pairs are appended after them")

    try:
        migrated = db.extend(pairs)
    except Exception as e:
        print(f"❌ Failed to write pairs: {e}")
        return False

    print(f"\n✅ Migration complete!")
    print(f"   Migrated: {migrated}")
    print(f"   Skipped:  {skipped}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Migrate learned pairs from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/store.json"),
                       help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/learned.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be migrated without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    if not migrate(args.json, args.db, dry_run=args.dry_run):
        sys.exit(1)


if __name__ == "__main__":
    main()
