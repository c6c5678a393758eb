"""Single-session application state and its controller.

``StudySession`` owns one ``AppState`` and is the only writer of it. Review
actions delegate to the pure transitions in ``app.modules.study.review``; the
controller only adds sequencing (loading flags, the single in-flight
generation, the flip delay) and persistence of history and theme.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.core.logging import get_logger, log_context
from app.core.storage import LocalStorage, StorageError
from app.modules.study import review
from app.modules.study.errors import (
    EmptyInputError,
    GenerationError,
    GenerationInProgressError,
    RecordNotFoundError,
    ReviewUnavailableError,
)
from app.modules.study.generator import (
    GeminiImageGenerator,
    GeminiTextGenerator,
    ImageGenerator,
    TextGenerator,
)
from app.modules.study.history import HistoryStore
from app.modules.study.models.history import HistoryRecord
from app.modules.study.models.items import (
    EncodedImage,
    Flashcard,
    GenerationMode,
    GenerationRequest,
    InputKind,
    MCQItem,
)
from app.modules.study.models.review import FlashcardReview, MCQReview
from app.modules.study.pipeline import (
    TEXT_PROGRESS_MESSAGE,
    GenerationPipeline,
    validate_request,
)

logger = get_logger(__name__)

THEMES = ("default", "dark", "ocean", "sunset")
DEFAULT_THEME = "default"


class AppState(BaseModel):
    # Input
    input_kind: InputKind = InputKind.TEXT
    mode: GenerationMode = GenerationMode.FLASHCARDS
    text: str = ""
    image: Optional[EncodedImage] = None
    image_name: Optional[str] = None
    generate_icons: bool = False

    # Generation
    flashcards: list[Flashcard] = Field(default_factory=list)
    mcqs: list[MCQItem] = Field(default_factory=list)
    is_loading: bool = False
    loading_message: str = ""
    error: Optional[str] = None

    # Review
    flashcard_review: FlashcardReview = Field(default_factory=FlashcardReview)
    mcq_review: MCQReview = Field(default_factory=MCQReview)

    theme: str = DEFAULT_THEME


class StudySession:
    def __init__(
        self,
        pipeline: GenerationPipeline,
        history: HistoryStore,
        storage: LocalStorage,
        *,
        theme_key: str,
        flip_delay: float = 0.0,
    ) -> None:
        self.pipeline = pipeline
        self.history = history
        self.storage = storage
        self.theme_key = theme_key
        self.flip_delay = flip_delay
        self.state = AppState()
        self._generating = asyncio.Lock()

    def _set(self, **changes) -> AppState:
        self.state = self.state.model_copy(update=changes)
        return self.state

    @property
    def is_generating(self) -> bool:
        return self._generating.locked()

    def snapshot(self) -> AppState:
        return self.state.model_copy(deep=True)

    # Startup --------------------------------------------------------------
    async def load(self) -> AppState:
        await self.history.load()
        try:
            stored = await self.storage.get_item(self.theme_key)
        except StorageError as e:
            logger.warning("Theme unavailable, using default: %s", e)
            stored = None
        if stored in THEMES:
            self._set(theme=stored)
        return self.state

    # Input ------------------------------------------------------------------
    def _reset_input(self) -> dict:
        return {
            "text": "",
            "image": None,
            "image_name": None,
            "flashcards": [],
            "mcqs": [],
            "error": None,
        }

    def set_input_kind(self, kind: InputKind) -> AppState:
        return self._set(input_kind=kind, **self._reset_input())

    def set_mode(self, mode: GenerationMode) -> AppState:
        return self._set(mode=mode, **self._reset_input())

    def set_text(self, text: str) -> AppState:
        return self._set(text=text)

    def set_image(self, image: EncodedImage, name: Optional[str] = None) -> AppState:
        return self._set(image=image, image_name=name, error=None)

    def set_generate_icons(self, enabled: bool) -> AppState:
        return self._set(generate_icons=bool(enabled))

    def _request(self) -> GenerationRequest:
        s = self.state
        return GenerationRequest(
            input_kind=s.input_kind,
            mode=s.mode,
            text=s.text if s.input_kind == InputKind.TEXT else None,
            image=s.image if s.input_kind == InputKind.IMAGE else None,
            generate_icons=s.generate_icons,
        )

    # Generation -------------------------------------------------------------
    async def generate(self) -> AppState:
        if self._generating.locked():
            raise GenerationInProgressError("A generation is already running")
        async with self._generating:
            request = self._request()
            request_id = uuid.uuid4().hex[:12]
            try:
                validate_request(request)
            except EmptyInputError as e:
                self._set(error=e.user_message)
                raise

            self._set(
                is_loading=True,
                loading_message=TEXT_PROGRESS_MESSAGE,
                error=None,
                flashcards=[],
                mcqs=[],
                flashcard_review=review.initial_flashcard_review(),
                mcq_review=review.initial_mcq_review(),
            )
            try:
                items = await self.pipeline.generate(
                    request,
                    theme=self.state.theme,
                    on_progress=lambda msg: self._set(loading_message=msg),
                    request_id=request_id,
                )
            except GenerationError as e:
                logger.exception(
                    "Generation failed (%s)",
                    e.kind,
                    extra=log_context(
                        request_id=request_id,
                        mode=request.mode.value,
                        input_kind=request.input_kind.value,
                    ),
                )
                self._set(error=e.user_message)
                raise
            finally:
                self._set(is_loading=False, loading_message="")

            if request.mode == GenerationMode.MCQS:
                return self._set(mcqs=items)
            return self._set(flashcards=items)

    # Flashcard review -------------------------------------------------------
    def _require_flashcards(self) -> None:
        if not self.state.flashcards:
            raise ReviewUnavailableError("No flashcards to review")

    def flip(self) -> AppState:
        self._require_flashcards()
        return self._set(flashcard_review=review.flip(self.state.flashcard_review))

    async def navigate(self, direction: int) -> AppState:
        self._require_flashcards()
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1, got {direction}")
        self._set(flashcard_review=review.reset_flip(self.state.flashcard_review))
        if self.flip_delay > 0:
            await asyncio.sleep(self.flip_delay)
        return self._set(
            flashcard_review=review.navigate(
                self.state.flashcard_review, direction, len(self.state.flashcards)
            )
        )

    # MCQ review ---------------------------------------------------------------
    def _require_mcqs(self) -> None:
        if not self.state.mcqs:
            raise ReviewUnavailableError("No questions to review")

    def select_option(self, option: str) -> AppState:
        self._require_mcqs()
        return self._set(
            mcq_review=review.select_option(self.state.mcq_review, option, self.state.mcqs)
        )

    def next_question(self) -> AppState:
        self._require_mcqs()
        return self._set(
            mcq_review=review.next_question(self.state.mcq_review, len(self.state.mcqs))
        )

    def restart_quiz(self) -> AppState:
        return self._set(mcq_review=review.restart())

    # History ----------------------------------------------------------------
    def select_record(self, record_id: int) -> AppState:
        record: Optional[HistoryRecord] = self.history.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        theme = record.theme if record.theme in THEMES else DEFAULT_THEME
        if record.mode == GenerationMode.FLASHCARDS:
            return self._set(
                error=None,
                mode=record.mode,
                theme=theme,
                flashcards=list(record.items),
                mcqs=[],
                flashcard_review=review.initial_flashcard_review(),
            )
        return self._set(
            error=None,
            mode=record.mode,
            theme=theme,
            mcqs=list(record.items),
            flashcards=[],
            mcq_review=review.restart(),
        )

    async def clear_history(self) -> None:
        await self.history.clear()

    # Theme ------------------------------------------------------------------
    async def set_theme(self, theme: str) -> AppState:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'")
        self._set(theme=theme)
        try:
            await self.storage.set_item(self.theme_key, theme)
        except StorageError as e:
            logger.warning("Failed to persist theme: %s", e)
        return self.state


def build_study_session(
    session_maker: async_sessionmaker,
    *,
    text_generator: Optional[TextGenerator] = None,
    image_generator: Optional[ImageGenerator] = None,
) -> StudySession:
    """Wire storage, history and the Gemini-backed pipeline into one session."""
    storage = LocalStorage(session_maker)
    history = HistoryStore(storage, settings.storage.history_key)
    pipeline = GenerationPipeline(
        text_generator or GeminiTextGenerator(),
        image_generator or GeminiImageGenerator(),
        history,
        icon_mime_type=settings.generation.icon_mime_type,
    )
    return StudySession(
        pipeline,
        history,
        storage,
        theme_key=settings.storage.theme_key,
        flip_delay=settings.generation.flip_delay_seconds,
    )
