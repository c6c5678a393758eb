"""Instruction templates and output schemas for study generation.

The schema models are deliberately minimal (required string/array fields only)
so they stay compatible with Gemini's structured output; the richer checks run
locally after parsing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.modules.study.models.items import GenerationMode


FLASHCARDS_INSTRUCTION = (
    "Based on the following content, generate a concise set of flashcards for "
    "studying. Each flashcard should have a 'question' and an 'answer'. Return "
    "the result as a JSON array of objects, where each object has a 'question' "
    "and 'answer' key."
)

MCQS_INSTRUCTION = (
    "Based on the following content, generate a set of multiple-choice "
    "questions (MCQs) for studying. Each MCQ should have a 'question', an array "
    "of four 'options', and the 'correctAnswer'. The 'correctAnswer' must be one "
    "of the strings from the 'options' array. Return the result as a JSON array "
    "of objects."
)


class FlashcardSchema(BaseModel):
    """Structured output for one flashcard."""

    question: str
    answer: str


class MCQSchema(BaseModel):
    """Structured output for one multiple-choice question."""

    question: str
    options: list[str]
    correctAnswer: str = Field(description="Must equal one of the options")


def instruction_for(mode: GenerationMode) -> str:
    if mode == GenerationMode.MCQS:
        return MCQS_INSTRUCTION
    return FLASHCARDS_INSTRUCTION


def output_schema_for(mode: GenerationMode) -> Any:
    if mode == GenerationMode.MCQS:
        return list[MCQSchema]
    return list[FlashcardSchema]


def icon_prompt(question: str) -> str:
    return (
        f"A simple, clean, minimalist vector icon representing '{question}'. "
        "Flat design on a plain background."
    )
