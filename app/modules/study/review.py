"""Pure transitions for the two review state machines.

Every function takes the current (immutable) state and returns the next one;
nothing here touches rendering, storage or timers.
"""

from __future__ import annotations

from typing import Sequence

from app.modules.study.models.items import MCQItem
from app.modules.study.models.review import FlashcardReview, MCQPhase, MCQReview


# Flashcards -----------------------------------------------------------------
def initial_flashcard_review() -> FlashcardReview:
    return FlashcardReview()


def flip(state: FlashcardReview) -> FlashcardReview:
    return state.model_copy(update={"flipped": not state.flipped})


def reset_flip(state: FlashcardReview) -> FlashcardReview:
    if not state.flipped:
        return state
    return state.model_copy(update={"flipped": False})


def navigate(state: FlashcardReview, direction: int, total: int) -> FlashcardReview:
    """Move by one card, clamped to the deck; always lands front-side up."""
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or 1, got {direction}")
    state = reset_flip(state)
    target = state.current_index + direction
    if 0 <= target < total:
        return state.model_copy(update={"current_index": target})
    return state


# MCQs -------------------------------------------------------------------------
def initial_mcq_review() -> MCQReview:
    return MCQReview()


def restart() -> MCQReview:
    return MCQReview()


def phase(state: MCQReview) -> MCQPhase:
    if state.finished:
        return MCQPhase.FINISHED
    if state.answered:
        return MCQPhase.ANSWERED
    return MCQPhase.ANSWERING


def select_option(state: MCQReview, option: str, items: Sequence[MCQItem]) -> MCQReview:
    """Record an answer for the current question; ignored once answered."""
    if state.answered or state.finished:
        return state
    correct = option == items[state.current_index].correct_answer
    return state.model_copy(
        update={
            "selected": option,
            "answered": True,
            "score": state.score + (1 if correct else 0),
        }
    )


def next_question(state: MCQReview, total: int) -> MCQReview:
    if phase(state) != MCQPhase.ANSWERED:
        return state
    if state.current_index < total - 1:
        return state.model_copy(
            update={
                "current_index": state.current_index + 1,
                "selected": None,
                "answered": False,
            }
        )
    return state.model_copy(update={"finished": True})
