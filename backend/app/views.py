from __future__ import annotations

from typing import Callable, Dict

from pydantic import BaseModel

from .db import settings
from .models import OPTION_LETTERS, Phase, SessionState
from .schemas import (
    CategoriesView,
    LoadingView,
    NumbersView,
    OptionOut,
    QuestionView,
    RulesView,
    TeamsView,
)
from .transitions import can_mark_used, can_reveal, option_status

HOUSE_RULES = [
    "Turn order is decided by a draw.",
    "On your turn, take a new gift from the pile or challenge someone else's gift by answering a question.",
    "Answer correctly and you keep the gift you chose. Answer wrong and you get no gift this round.",
    "Gifts can be stolen many times during the game, always by whoever answers correctly.",
    "Whispering an answer out of turn can cost you your gift or send you to the back of the line.",
    "The game ends when everyone has at least one gift or the pile runs out.",
]


def render_rules(state: SessionState) -> RulesView:
    return RulesView(rules=HOUSE_RULES)


def render_teams(state: SessionState) -> TeamsView:
    return TeamsView(
        round=state.round,
        is_lightning=state.is_lightning,
        teams_loaded=state.teams_loaded,
        teams=state.teams,
    )


def render_categories(state: SessionState) -> CategoriesView:
    return CategoriesView(
        round=state.round,
        is_lightning=state.is_lightning,
        categories=state.categories,
        pinned_category=settings.PINNED_THEME,
        can_draw=bool(state.raffle_categories),
    )


def render_numbers(state: SessionState) -> NumbersView:
    return NumbersView(
        round=state.round,
        is_lightning=state.is_lightning,
        category=state.current_category,
        questions=state.questions,
    )


def render_question(state: SessionState) -> QuestionView:
    q = state.current_question
    return QuestionView(
        round=state.round,
        is_lightning=state.is_lightning,
        category=state.current_category,
        id=q.id,
        question_number=q.question_number,
        question=q.question,
        options=[
            OptionOut(letter=letter, text=q.option_text(letter), status=option_status(state, letter))
            for letter in OPTION_LETTERS
        ],
        selected_answers=state.selected_answers,
        correct_answered=state.correct_answered,
        show_correct_answer=state.show_correct_answer,
        can_reveal=can_reveal(state),
        can_mark_used=can_mark_used(state),
    )


PHASE_VIEWS: Dict[Phase, Callable[[SessionState], BaseModel]] = {
    Phase.RULES: render_rules,
    Phase.TEAMS: render_teams,
    Phase.CATEGORIES: render_categories,
    Phase.NUMBERS: render_numbers,
    Phase.QUESTION: render_question,
}


def render(state: SessionState) -> BaseModel:
    """Build the view model for whatever screen the session is on."""
    if state.loading:
        return LoadingView()
    return PHASE_VIEWS[state.phase](state)
