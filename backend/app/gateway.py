from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from .db import db, settings
from .errors import FetchError, NotFoundError, UpdateError
from .models import QuestionDetail, QuestionSummary, Team
from .utils import dedupe, pin_last

logger = logging.getLogger(__name__)


class DataGateway:
    """Read/update access to the ``players`` and ``questions_dd`` tables."""

    def __init__(self, database: Any, pinned_theme: str, unassigned_team: str):
        self.db = database
        self.pinned_theme = pinned_theme
        self.unassigned_team = unassigned_team

    async def _fetch(self, collection, query: Dict[str, Any], projection, sort_key: str) -> List[Dict[str, Any]]:
        try:
            cursor = collection.find(query, projection).sort(sort_key, ASCENDING)
            return [doc async for doc in cursor]
        except PyMongoError as exc:
            raise FetchError(str(exc)) from exc

    async def fetch_teams(self) -> List[Team]:
        """Group player rows by team name, in the order the store sorted them."""

        rows = await self._fetch(self.db.players, {}, ["id", "player", "team_name"], "team_name")

        groups: Dict[str, List[str]] = {}
        for row in rows:
            team = row.get("team_name") or self.unassigned_team
            groups.setdefault(team, []).append(row.get("player"))

        try:
            return [
                Team(id=index, name=name, members=members)
                for index, (name, members) in enumerate(groups.items(), start=1)
            ]
        except ValidationError as exc:
            raise FetchError(f"Malformed player row: {exc}") from exc

    async def fetch_categories(self) -> List[str]:
        """Distinct themes in ascending order, with the pinned theme moved last."""

        rows = await self._fetch(self.db.questions_dd, {}, ["theme"], "theme")
        themes = dedupe(row["theme"] for row in rows if row.get("theme") is not None)
        return pin_last(themes, self.pinned_theme)

    def raffle_candidates(self, categories: List[str]) -> List[str]:
        return [c for c in categories if c and c != self.pinned_theme]

    async def fetch_question_summaries(self, theme: str) -> List[QuestionSummary]:
        rows = await self._fetch(
            self.db.questions_dd, {"theme": theme}, ["id", "question_number", "used"], "question_number"
        )
        try:
            return [QuestionSummary(**row) for row in rows]
        except ValidationError as exc:
            raise FetchError(f"Malformed question row for theme {theme!r}: {exc}") from exc

    async def fetch_question_detail(self, question_id: int) -> QuestionDetail:
        """Return the full row for ``question_id``; exactly one row must match."""

        try:
            cursor = self.db.questions_dd.find({"id": question_id}).limit(2)
            rows = [doc async for doc in cursor]
        except PyMongoError as exc:
            raise FetchError(str(exc)) from exc

        if len(rows) != 1:
            raise NotFoundError(f"Expected one question with id {question_id}, found {len(rows)}")
        try:
            return QuestionDetail(**rows[0])
        except ValidationError as exc:
            raise FetchError(f"Malformed question {question_id}: {exc}") from exc

    async def mark_used(self, question_id: int) -> None:
        """Flag a question as played. Setting an already-used question is a no-op."""

        try:
            result = await self.db.questions_dd.update_one({"id": question_id}, {"$set": {"used": True}})
        except PyMongoError as exc:
            raise UpdateError(str(exc)) from exc

        if result.matched_count == 0:
            raise NotFoundError(f"No question with id {question_id}")
        if result.modified_count == 0:
            logger.info("Question %s was already marked used", question_id)
        else:
            logger.info("Marked question %s as used", question_id)


gateway = DataGateway(db, settings.PINNED_THEME, settings.UNASSIGNED_TEAM_NAME)
