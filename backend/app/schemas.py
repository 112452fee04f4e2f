from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator

from .db import settings
from .models import OPTION_LETTERS, OptionStatus, Phase, QuestionSummary, Team
from .utils import normalize_option


class ScoreIn(BaseModel):
    delta: int = settings.SCORE_STEP


class NavigateIn(BaseModel):
    target: Phase


class PickCategoryIn(BaseModel):
    theme: str


class AnswerIn(BaseModel):
    option: str

    @field_validator("option")
    @classmethod
    def _known_letter(cls, v: str) -> str:
        letter = normalize_option(v)
        if letter not in OPTION_LETTERS:
            raise ValueError(f"option must be one of {', '.join(OPTION_LETTERS)}")
        return letter


class RoundInfo(BaseModel):
    round: int
    is_lightning: bool


class LoadingView(BaseModel):
    phase: Literal["loading"] = "loading"


class RulesView(BaseModel):
    phase: Literal["rules"] = "rules"
    rules: List[str]


class TeamsView(RoundInfo):
    phase: Literal["teams"] = "teams"
    teams_loaded: bool
    teams: List[Team]


class CategoriesView(RoundInfo):
    phase: Literal["categories"] = "categories"
    categories: List[str]
    pinned_category: str
    can_draw: bool


class NumbersView(RoundInfo):
    phase: Literal["numbers"] = "numbers"
    category: Optional[str]
    questions: List[QuestionSummary]


class OptionOut(BaseModel):
    letter: str
    text: str
    status: OptionStatus


class QuestionView(RoundInfo):
    phase: Literal["question"] = "question"
    category: Optional[str]
    id: int
    question_number: int
    question: str
    options: List[OptionOut]
    selected_answers: List[str]
    correct_answered: bool
    show_correct_answer: bool
    can_reveal: bool
    can_mark_used: bool

