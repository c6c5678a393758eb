from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.modules.study.models.items import (
    Flashcard,
    GenerationMode,
    InputKind,
    MCQItem,
    StudyItem,
)
from app.modules.study.models.review import FlashcardReview, MCQPhase, MCQReview

Theme = Literal["default", "dark", "ocean", "sunset"]


class InputUpdateRequest(BaseModel):
    input_kind: Optional[InputKind] = None
    mode: Optional[GenerationMode] = None
    text: Optional[str] = None
    generate_icons: Optional[bool] = None


class GenerateTextRequest(BaseModel):
    text: str = Field(..., description="Study material to generate from")
    mode: GenerationMode = GenerationMode.FLASHCARDS
    generate_icons: bool = False


class ThemeRequest(BaseModel):
    theme: Theme


class NavigateRequest(BaseModel):
    direction: Literal[-1, 1]


class SelectOptionRequest(BaseModel):
    option: str


class MCQReviewRead(MCQReview):
    phase: MCQPhase
    total: int


class FlashcardReviewRead(FlashcardReview):
    total: int


class StateResponse(BaseModel):
    input_kind: InputKind
    mode: GenerationMode
    text: str
    image_name: Optional[str] = None
    has_image: bool = False
    generate_icons: bool
    is_loading: bool
    loading_message: str
    error: Optional[str] = None
    flashcards: list[Flashcard] = Field(default_factory=list)
    mcqs: list[MCQItem] = Field(default_factory=list)
    flashcard_review: FlashcardReviewRead
    mcq_review: MCQReviewRead
    theme: Theme


class HistoryItemSummary(BaseModel):
    id: int
    timestamp: datetime
    input_kind: InputKind
    mode: GenerationMode
    preview: str
    item_count: int
    theme: str


class HistoryItemRead(HistoryItemSummary):
    input_summary: str
    items: list[StudyItem] = Field(default_factory=list)


class ThemeResponse(BaseModel):
    theme: Theme
    themes: list[str]


class ErrorDetail(BaseModel):
    error: str
    message: str


class ErrorResponse(BaseModel):
    """Body of a failed generation; FastAPI nests it under ``detail``."""

    detail: ErrorDetail
