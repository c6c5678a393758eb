"""Study module exports."""

from .models import (
    EncodedImage,
    Flashcard,
    FlashcardReview,
    GenerationMode,
    GenerationRequest,
    HistoryRecord,
    InputKind,
    MCQItem,
    MCQReview,
)
from .pipeline import GenerationPipeline
from .history import HistoryStore
from .state import THEMES, AppState, StudySession, build_study_session

__all__ = [
    "EncodedImage",
    "Flashcard",
    "FlashcardReview",
    "GenerationMode",
    "GenerationRequest",
    "HistoryRecord",
    "InputKind",
    "MCQItem",
    "MCQReview",
    "GenerationPipeline",
    "HistoryStore",
    "THEMES",
    "AppState",
    "StudySession",
    "build_study_session",
]
