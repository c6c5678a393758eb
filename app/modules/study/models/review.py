"""Review state for the flashcard viewer and the MCQ quiz."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FlashcardReview(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_index: int = 0
    flipped: bool = False


class MCQPhase(str, Enum):
    ANSWERING = "answering"
    ANSWERED = "answered"
    FINISHED = "finished"


class MCQReview(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_index: int = 0
    selected: Optional[str] = None
    answered: bool = False
    score: int = 0
    finished: bool = False
