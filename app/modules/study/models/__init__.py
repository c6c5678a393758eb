from .items import (
    ContentPart,
    EncodedImage,
    Flashcard,
    GenerationMode,
    GenerationPayload,
    GenerationRequest,
    InputKind,
    MCQItem,
    StudyItem,
)
from .history import HistoryList, HistoryRecord
from .review import FlashcardReview, MCQPhase, MCQReview

__all__ = [
    "ContentPart",
    "EncodedImage",
    "Flashcard",
    "GenerationMode",
    "GenerationPayload",
    "GenerationRequest",
    "InputKind",
    "MCQItem",
    "StudyItem",
    "HistoryList",
    "HistoryRecord",
    "FlashcardReview",
    "MCQPhase",
    "MCQReview",
]
