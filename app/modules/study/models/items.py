"""Pydantic models for generated study items and generation requests.

The item models double as the structured-output schema sent to Gemini, so the
wire names follow the service contract (``correctAnswer``) through aliases
while Python code uses snake_case attributes.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class InputKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class GenerationMode(str, Enum):
    FLASHCARDS = "flashcards"
    MCQS = "mcqs"


class Flashcard(BaseModel):
    """Simple question/answer flashcard with an optional icon data URI."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    icon: Optional[str] = None


class MCQItem(BaseModel):
    """Multiple-choice question; ``correct_answer`` is one of ``options``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str
    options: list[str]
    correct_answer: str = Field(alias="correctAnswer")
    icon: Optional[str] = None


StudyItem = Union[MCQItem, Flashcard]


class EncodedImage(BaseModel):
    """Transport-ready image: base64 payload plus its MIME type."""

    data: str
    mime_type: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class ContentPart(BaseModel):
    """One part of a multi-part generation payload: text or inline image."""

    text: Optional[str] = None
    inline_data: Optional[EncodedImage] = None


class GenerationPayload(BaseModel):
    parts: list[ContentPart] = Field(default_factory=list)


class GenerationRequest(BaseModel):
    input_kind: InputKind = InputKind.TEXT
    mode: GenerationMode = GenerationMode.FLASHCARDS
    text: Optional[str] = None
    image: Optional[EncodedImage] = None
    generate_icons: bool = False
