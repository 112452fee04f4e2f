"""Pure state transitions, one per host action.

Every function takes the current ``SessionState`` and returns a new one;
nothing here touches the data store. Actions that are not available in the
current phase raise ``InvalidTransition`` and leave the input untouched.
"""
from __future__ import annotations

import random
from typing import Dict, FrozenSet, List, Optional

from .errors import InvalidTransition
from .models import OPTION_LETTERS, OptionStatus, Phase, QuestionDetail, QuestionSummary, SessionState, Team
from .utils import normalize_option

NAVIGATION: Dict[Phase, FrozenSet[Phase]] = {
    Phase.RULES: frozenset(),
    Phase.TEAMS: frozenset({Phase.CATEGORIES}),
    Phase.CATEGORIES: frozenset({Phase.TEAMS}),
    Phase.NUMBERS: frozenset({Phase.CATEGORIES, Phase.TEAMS}),
    Phase.QUESTION: frozenset({Phase.NUMBERS, Phase.TEAMS}),
}


def require_phase(state: SessionState, *phases: Phase) -> None:
    if state.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise InvalidTransition(f"Action requires phase {allowed}, current phase is {state.phase.value}")


def _cleared_question(state: SessionState, **update) -> SessionState:
    return state.model_copy(
        update={
            "current_question": None,
            "selected_answers": [],
            "correct_answered": False,
            "show_correct_answer": False,
            **update,
        }
    )


def dismiss_rules(state: SessionState) -> SessionState:
    require_phase(state, Phase.RULES)
    return state.model_copy(update={"phase": Phase.TEAMS})


def navigate(state: SessionState, target: Phase) -> SessionState:
    if target not in NAVIGATION[state.phase]:
        raise InvalidTransition(f"Cannot navigate from {state.phase.value} to {target.value}")
    return state.model_copy(update={"phase": target})


def teams_drawn(state: SessionState, teams: List[Team]) -> SessionState:
    require_phase(state, Phase.TEAMS)
    return state.model_copy(update={"teams": teams, "teams_loaded": True})


def adjust_score(state: SessionState, team_id: int, delta: int) -> SessionState:
    require_phase(state, Phase.TEAMS)
    if not any(t.id == team_id for t in state.teams):
        raise InvalidTransition(f"Unknown team {team_id}")
    teams = [
        t.model_copy(update={"score": t.score + delta}) if t.id == team_id else t
        for t in state.teams
    ]
    return state.model_copy(update={"teams": teams})


def toggle_lightning(state: SessionState) -> SessionState:
    require_phase(state, Phase.TEAMS)
    if state.is_lightning:
        return state.model_copy(update={"is_lightning": False})
    return state.model_copy(update={"is_lightning": True, "phase": Phase.CATEGORIES})


def next_round(state: SessionState, max_rounds: int) -> SessionState:
    require_phase(state, Phase.TEAMS)
    return state.model_copy(
        update={
            "round": min(state.round + 1, max_rounds),
            "is_lightning": False,
            "phase": Phase.CATEGORIES,
        }
    )


def categories_loaded(state: SessionState, categories: List[str], raffle: List[str]) -> SessionState:
    return state.model_copy(update={"categories": categories, "raffle_categories": raffle})


def category_opened(state: SessionState, theme: str, questions: List[QuestionSummary]) -> SessionState:
    require_phase(state, Phase.CATEGORIES)
    return _cleared_question(
        state, current_category=theme, questions=questions, phase=Phase.NUMBERS
    )


def draw_category(candidates: List[str], rng: random.Random) -> Optional[str]:
    """Uniform pick among ``candidates``; ``None`` when there is nothing to draw."""
    if not candidates:
        return None
    return rng.choice(candidates)


def find_summary(state: SessionState, question_id: int) -> QuestionSummary:
    require_phase(state, Phase.NUMBERS)
    for summary in state.questions:
        if summary.id == question_id:
            if summary.used:
                raise InvalidTransition(f"Question {question_id} has already been used")
            return summary
    raise InvalidTransition(f"Question {question_id} is not in category {state.current_category!r}")


def question_opened(state: SessionState, question: QuestionDetail) -> SessionState:
    require_phase(state, Phase.NUMBERS)
    return _cleared_question(state, current_question=question, phase=Phase.QUESTION)


def select_option(state: SessionState, option: str) -> SessionState:
    require_phase(state, Phase.QUESTION)
    letter = normalize_option(option)
    if state.correct_answered or letter in state.selected_answers:
        return state

    correct = normalize_option(state.current_question.correct_option)
    return state.model_copy(
        update={
            "selected_answers": [*state.selected_answers, letter],
            "correct_answered": letter == correct,
        }
    )


def can_reveal(state: SessionState) -> bool:
    if state.correct_answered or state.show_correct_answer or state.current_question is None:
        return False
    correct = normalize_option(state.current_question.correct_option)
    return any(s != correct for s in state.selected_answers)


def reveal_answer(state: SessionState) -> SessionState:
    require_phase(state, Phase.QUESTION)
    if not can_reveal(state):
        return state
    return state.model_copy(update={"show_correct_answer": True})


def can_mark_used(state: SessionState) -> bool:
    return state.correct_answered or state.show_correct_answer


def marked_used(state: SessionState, questions: List[QuestionSummary]) -> SessionState:
    require_phase(state, Phase.QUESTION)
    return state.model_copy(update={"questions": questions, "phase": Phase.NUMBERS})


def option_status(state: SessionState, option: str) -> OptionStatus:
    letter = normalize_option(option)
    correct = normalize_option(state.current_question.correct_option)
    selected = letter in state.selected_answers

    if (state.correct_answered or state.show_correct_answer) and letter == correct:
        return OptionStatus.CORRECT
    if selected and letter != correct:
        return OptionStatus.WRONG
    if selected:
        return OptionStatus.DISABLED
    return OptionStatus.DEFAULT


def option_statuses(state: SessionState) -> Dict[str, OptionStatus]:
    return {letter: option_status(state, letter) for letter in OPTION_LETTERS}
