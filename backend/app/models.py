from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPTION_LETTERS = ("A", "B", "C", "D")


# rules -> teams -> categories -> numbers -> question -> numbers ...
class Phase(str, Enum):
    RULES = "rules"
    TEAMS = "teams"
    CATEGORIES = "categories"
    NUMBERS = "numbers"
    QUESTION = "question"


class OptionStatus(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    DISABLED = "disabled"
    DEFAULT = "default"


class Team(BaseModel):
    id: int
    name: str
    members: List[str] = Field(default_factory=list)
    score: int = 0  # local only, never written back to the store


class QuestionSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    question_number: int
    used: bool = False

    @field_validator("used", mode="before")
    @classmethod
    def _null_is_unused(cls, v):
        return bool(v)


class QuestionDetail(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    theme: str
    question_number: int
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    used: bool = False

    @field_validator("used", mode="before")
    @classmethod
    def _null_is_unused(cls, v):
        return bool(v)

    def option_text(self, letter: str) -> str:
        return getattr(self, f"option_{letter.lower()}")


class SessionState(BaseModel):
    phase: Phase = Phase.RULES
    loading: bool = False
    round: int = 1
    is_lightning: bool = False
    teams: List[Team] = Field(default_factory=list)
    teams_loaded: bool = False
    categories: List[str] = Field(default_factory=list)
    raffle_categories: List[str] = Field(default_factory=list)
    current_category: Optional[str] = None
    questions: List[QuestionSummary] = Field(default_factory=list)
    current_question: Optional[QuestionDetail] = None
    # insertion-ordered, no duplicates
    selected_answers: List[str] = Field(default_factory=list)
    correct_answered: bool = False
    show_correct_answer: bool = False
