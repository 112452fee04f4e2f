from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo import ASCENDING, AsyncMongoClient


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    MONGO_URI: Optional[str] = None
    MONGO_DB: str = "game_night"
    SEED_FILE: Optional[str] = None
    PINNED_THEME: str = "Kids e Disney"
    UNASSIGNED_TEAM_NAME: str = "No team"
    MAX_ROUNDS: int = 4
    SCORE_STEP: int = 10
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:8080"
    CORS_ORIGIN_REGEX: Optional[str] = None
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def _sort_value(value: Any):
    # MongoDB orders null/missing before any other value.
    return (value is not None, value)


@dataclass
class InMemoryUpdateResult:
    matched_count: int
    modified_count: int


class InMemoryCursor:
    def __init__(
        self,
        collection: "InMemoryCollection",
        query: Dict[str, Any],
        projection: Optional[Iterable[str]] = None,
    ):
        self._collection = collection
        self._query = query or {}
        self._projection = list(projection) if projection is not None else None
        self._sort_key: Optional[str] = None
        self._sort_direction: int = ASCENDING
        self._limit: Optional[int] = None
        self._materialised: Optional[Iterator[Dict[str, Any]]] = None

    def sort(self, key: str, direction: int = ASCENDING):
        self._sort_key = key
        self._sort_direction = direction
        return self

    def limit(self, limit: int):
        self._limit = limit
        return self

    async def _ensure_materialised(self):
        if self._materialised is not None:
            return

        docs = await self._collection._find_all(self._query)

        if self._sort_key is not None:
            reverse = self._sort_direction < 0
            # list.sort is stable, so equal keys keep insertion order.
            docs.sort(key=lambda d: _sort_value(d.get(self._sort_key)), reverse=reverse)

        if self._limit:
            docs = docs[: self._limit]

        if self._projection is not None:
            docs = [{k: d[k] for k in self._projection if k in d} for d in docs]

        self._materialised = iter(docs)

    def __aiter__(self):
        return self

    async def __anext__(self):
        await self._ensure_materialised()
        assert self._materialised is not None
        try:
            return next(self._materialised)
        except StopIteration as exc:
            raise StopAsyncIteration from exc


class InMemoryCollection:
    def __init__(self):
        self._docs: List[Dict[str, Any]] = []
        self._lock = asyncio.Lock()

    async def _find_all(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        async with self._lock:
            return [copy.deepcopy(doc) for doc in self._docs if self._matches(doc, query)]

    def find(self, query: Optional[Dict[str, Any]] = None, projection: Optional[Iterable[str]] = None):
        return InMemoryCursor(self, query or {}, projection)

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> InMemoryUpdateResult:
        async with self._lock:
            for idx, doc in enumerate(self._docs):
                if self._matches(doc, query):
                    updated = self._apply_update(copy.deepcopy(doc), update)
                    modified = int(updated != doc)
                    self._docs[idx] = updated
                    return InMemoryUpdateResult(matched_count=1, modified_count=modified)
        return InMemoryUpdateResult(matched_count=0, modified_count=0)

    async def insert_many(self, documents: Iterable[Dict[str, Any]]):
        async with self._lock:
            self._docs.extend(copy.deepcopy(doc) for doc in documents)

    def _apply_update(self, doc: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        for op, payload in update.items():
            if op == "$set":
                for key, value in payload.items():
                    doc[key] = copy.deepcopy(value)
            else:  # pragma: no cover - only $set is used today
                raise ValueError(f"Unsupported update operator: {op}")
        return doc

    def _matches(self, doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        for key, expected in (query or {}).items():
            if isinstance(expected, dict):  # pragma: no cover - extend as new operators are required
                raise ValueError(f"Unsupported query operator(s): {expected}")
            if doc.get(key) != expected:
                return False
        return True


class InMemoryDatabase:
    def __init__(self):
        self.players = InMemoryCollection()
        self.questions_dd = InMemoryCollection()


def connect(s: Settings = settings) -> Any:
    """Return the remote database when a URI is configured, else an in-memory one."""
    if s.MONGO_URI:
        return AsyncMongoClient(s.MONGO_URI)[s.MONGO_DB]
    return InMemoryDatabase()


db: Any = connect()
