"""
Load sample users and incidents into the incident desk store.

Usage:
  python scripts/seed_db.py                      # dry run, shows what would be written
  python scripts/seed_db.py --apply              # write to the configured store
  python scripts/seed_db.py --apply --force-mock # write to the mock store regardless of .env

The seed file maps collection -> {doc_id: document}. ISO timestamp strings
(created_at / updated_at, including inside comments and status_history)
are converted to datetimes so they sort like real data.

Users belong to the auth provider in production; seeding them is for local
development only.
"""

import argparse
import json
import os
from typing import Any, Dict, Tuple

from app.config.firebase import get_db
from app.core.settings import settings
from app.utils.firestore_helpers import to_datetime

KNOWN_COLLECTIONS = ("users", "incidents", "notifications")
TIMESTAMP_KEYS = ("created_at", "updated_at", "timestamp")
# Firestore caps a write batch at 500 operations
BATCH_SIZE = 500


def load_seed(path: str) -> Dict[str, Dict[str, dict]]:
    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)

    unknown = [name for name in seed if name not in KNOWN_COLLECTIONS]
    if unknown:
        raise ValueError(f"Unknown collections in seed file: {unknown}")
    return seed


def prepare_document(value: Any) -> Any:
    """Recursively turn ISO timestamp strings under TIMESTAMP_KEYS into datetimes."""
    if isinstance(value, list):
        return [prepare_document(item) for item in value]
    if not isinstance(value, dict):
        return value

    prepared = {}
    for key, item in value.items():
        if key in TIMESTAMP_KEYS and isinstance(item, str):
            prepared[key] = to_datetime(item) or item
        else:
            prepared[key] = prepare_document(item)
    return prepared


def write_to_db(db: Any, seed: Dict[str, Dict[str, dict]], apply: bool = False) -> Tuple[int, int]:
    """
    Returns (documents seen, documents written).
    """
    pending = [
        (collection, doc_id, prepare_document(data))
        for collection, docs in seed.items()
        for doc_id, data in docs.items()
    ]
    for collection, doc_id, _ in pending:
        print(f"{'Writing' if apply else 'Would write'}: {collection}/{doc_id}")

    if not apply:
        return len(pending), 0

    written = 0
    for start in range(0, len(pending), BATCH_SIZE):
        chunk = pending[start:start + BATCH_SIZE]
        batch = db.batch()
        for collection, doc_id, data in chunk:
            batch.set(db.collection(collection).document(doc_id), data)
        batch.commit(timeout=settings.FIRESTORE_TIMEOUT_SECONDS)
        written += len(chunk)
    return len(pending), written


def main():
    parser = argparse.ArgumentParser(description="Seed the incident desk store")
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Use the mock DB even if Firebase is configured")
    parser.add_argument("--seed", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        print(f"Seed file not found: {args.seed}")
        return

    seed = load_seed(args.seed)

    if args.force_mock:
        print("Forcing mock DB usage for this run.")
        # get_db() reads settings on first use, so this still takes effect
        settings.USE_MOCK_DB = True

    seen, written = write_to_db(get_db(), seed, apply=args.apply)

    if args.apply:
        print(f"Seeding completed: {written}/{seen} documents written.")
    else:
        print(f"Dry run complete ({seen} documents). Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
