import itertools
import random

import pytest

from app.modules.study import review
from app.modules.study.models.items import MCQItem
from app.modules.study.models.review import FlashcardReview, MCQPhase, MCQReview


def _quiz(n: int) -> list[MCQItem]:
    return [
        MCQItem(
            question=f"Q{i}",
            options=[f"a{i}", f"b{i}", f"c{i}", f"d{i}"],
            correct_answer=f"a{i}",
        )
        for i in range(n)
    ]


# Flashcards -----------------------------------------------------------------------
def test_flashcard_initial_state():
    state = review.initial_flashcard_review()
    assert state == FlashcardReview(current_index=0, flipped=False)


def test_flip_toggles():
    state = review.flip(review.initial_flashcard_review())
    assert state.flipped is True
    assert review.flip(state).flipped is False


def test_navigate_resets_flip_and_moves():
    state = review.flip(FlashcardReview(current_index=1))
    moved = review.navigate(state, 1, total=3)
    assert moved == FlashcardReview(current_index=2, flipped=False)


@pytest.mark.parametrize("index,direction", [(0, -1), (2, 1)])
def test_navigate_clamps_at_edges(index, direction):
    state = FlashcardReview(current_index=index, flipped=True)
    moved = review.navigate(state, direction, total=3)
    assert moved.current_index == index
    assert moved.flipped is False


def test_navigate_rejects_other_steps():
    with pytest.raises(ValueError):
        review.navigate(FlashcardReview(), 2, total=5)


def test_navigate_never_leaves_deck():
    rng = random.Random(7)
    for total in (1, 2, 5):
        state = review.initial_flashcard_review()
        for _ in range(200):
            state = review.navigate(state, rng.choice((-1, 1)), total)
            assert 0 <= state.current_index <= total - 1


# MCQs -------------------------------------------------------------------------------
def test_mcq_initial_phase():
    assert review.phase(review.initial_mcq_review()) == MCQPhase.ANSWERING


def test_select_option_scores_correct_answer():
    items = _quiz(2)
    state = review.select_option(MCQReview(), "a0", items)
    assert state.answered and state.selected == "a0" and state.score == 1
    assert review.phase(state) == MCQPhase.ANSWERED


def test_select_option_wrong_answer_keeps_score():
    state = review.select_option(MCQReview(), "b0", _quiz(1))
    assert state.score == 0
    assert state.selected == "b0"


def test_select_option_is_idempotent_once_answered():
    items = _quiz(1)
    state = review.select_option(MCQReview(), "b0", items)
    again = review.select_option(state, "a0", items)
    assert again == state


def test_next_requires_an_answer():
    state = MCQReview()
    assert review.next_question(state, 3) == state


def test_next_advances_and_clears_selection():
    items = _quiz(3)
    state = review.select_option(MCQReview(), "a0", items)
    state = review.next_question(state, len(items))
    assert state == MCQReview(current_index=1, selected=None, answered=False, score=1)


def test_three_question_quiz_scores_two():
    items = _quiz(3)
    state = review.initial_mcq_review()
    for answer in ("a0", "b1", "a2"):
        state = review.select_option(state, answer, items)
        state = review.next_question(state, len(items))
    assert state.finished
    assert state.score == 2
    assert state.current_index == len(items) - 1 and state.answered
    assert review.phase(state) == MCQPhase.FINISHED


def test_finished_quiz_ignores_input():
    items = _quiz(1)
    state = review.next_question(review.select_option(MCQReview(), "a0", items), 1)
    assert review.select_option(state, "b0", items) == state
    assert review.next_question(state, 1) == state


def test_restart_resets_score():
    assert review.restart() == MCQReview()
    assert review.restart().score == 0


def test_score_bounds_over_every_answer_pattern():
    items = _quiz(3)
    for pattern in itertools.product(("a", "b"), repeat=3):
        state = review.initial_mcq_review()
        for i, letter in enumerate(pattern):
            state = review.select_option(state, f"{letter}{i}", items)
            assert state.score <= state.current_index + 1
            state = review.next_question(state, len(items))
        assert 0 <= state.score <= len(items)
        assert state.score == pattern.count("a")
