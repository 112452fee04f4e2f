from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SEEDED_COLLECTIONS = ("players", "questions_dd")


async def load_seed(database: Any, seed_path: str) -> int:
    """Insert the rows of a JSON seed file into the in-memory tables.

    The file holds one list of rows per table, e.g.
    ``{"players": [...], "questions_dd": [...]}``. Returns the number of rows
    inserted.
    """
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {seed_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    total = 0
    for name in SEEDED_COLLECTIONS:
        rows = data.get(name) or []
        if rows:
            await getattr(database, name).insert_many(rows)
        total += len(rows)
        logger.info("Seeded %d rows into %s", len(rows), name)
    return total
