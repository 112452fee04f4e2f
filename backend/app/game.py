from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import Optional

from . import transitions as t
from .db import settings
from .errors import GatewayError, InvalidTransition
from .gateway import DataGateway, gateway
from .models import Phase, SessionState
from .views import render

logger = logging.getLogger(__name__)


class GameController:
    """Owns the single game-night session and applies host actions to it.

    Store calls run one at a time; while one is in flight the session shows
    the loading overlay. A failed call leaves the session exactly as it was.
    """

    def __init__(self, store: DataGateway, max_rounds: int = 4, rng: Optional[random.Random] = None):
        self.store = store
        self.max_rounds = max_rounds
        self.rng = rng or random.Random()
        self.state = SessionState()
        self.lock = asyncio.Lock()

    def view(self):
        return render(self.state)

    @asynccontextmanager
    async def _loading(self, action: str):
        self.state = self.state.model_copy(update={"loading": True})
        try:
            yield
        except GatewayError as exc:
            logger.error("%s failed: %s", action, exc)
            raise
        finally:
            self.state = self.state.model_copy(update={"loading": False})

    async def reset(self):
        async with self.lock:
            categories, raffle = self.state.categories, self.state.raffle_categories
            self.state = t.categories_loaded(SessionState(), categories, raffle)
            logger.info("Session reset")

    async def dismiss_rules(self):
        async with self.lock:
            self.state = t.dismiss_rules(self.state)

    async def navigate(self, target: Phase):
        async with self.lock:
            self.state = t.navigate(self.state, target)

    async def draw_teams(self):
        async with self.lock:
            t.require_phase(self.state, Phase.TEAMS)
            async with self._loading("Loading players"):
                teams = await self.store.fetch_teams()
                self.state = t.teams_drawn(self.state, teams)
            logger.info("Drew %d teams", len(teams))

    async def adjust_score(self, team_id: int, delta: int):
        async with self.lock:
            self.state = t.adjust_score(self.state, team_id, delta)

    async def toggle_lightning(self):
        async with self.lock:
            self.state = t.toggle_lightning(self.state)
            logger.info("Lightning round %s", "on" if self.state.is_lightning else "off")

    async def next_round(self):
        async with self.lock:
            self.state = t.next_round(self.state, self.max_rounds)
            logger.info("Round %d", self.state.round)

    async def load_categories(self):
        async with self.lock:
            async with self._loading("Loading categories"):
                categories = await self.store.fetch_categories()
                raffle = self.store.raffle_candidates(categories)
                self.state = t.categories_loaded(self.state, categories, raffle)

    async def _open_category(self, theme: str):
        async with self._loading(f"Loading questions for {theme!r}"):
            questions = await self.store.fetch_question_summaries(theme)
            self.state = t.category_opened(self.state, theme, questions)

    async def pick_category(self, theme: str):
        async with self.lock:
            t.require_phase(self.state, Phase.CATEGORIES)
            await self._open_category(theme)

    async def draw_category(self) -> Optional[str]:
        async with self.lock:
            t.require_phase(self.state, Phase.CATEGORIES)
            chosen = t.draw_category(self.state.raffle_categories, self.rng)
            if chosen is None:
                logger.info("No categories eligible for a draw")
                return None
            logger.info("Drew category %r", chosen)
            await self._open_category(chosen)
            return chosen

    async def open_question(self, question_id: int):
        async with self.lock:
            t.find_summary(self.state, question_id)
            async with self._loading(f"Loading question {question_id}"):
                question = await self.store.fetch_question_detail(question_id)
                self.state = t.question_opened(self.state, question)

    async def select_option(self, option: str):
        async with self.lock:
            self.state = t.select_option(self.state, option)

    async def reveal_answer(self):
        async with self.lock:
            self.state = t.reveal_answer(self.state)

    async def mark_used(self):
        async with self.lock:
            t.require_phase(self.state, Phase.QUESTION)
            if not t.can_mark_used(self.state):
                raise InvalidTransition("Answer or reveal the question before marking it used")
            question_id = self.state.current_question.id
            async with self._loading(f"Marking question {question_id} used"):
                await self.store.mark_used(question_id)
                questions = await self.store.fetch_question_summaries(self.state.current_category)
                self.state = t.marked_used(self.state, questions)


controller = GameController(gateway, max_rounds=settings.MAX_ROUNDS)
