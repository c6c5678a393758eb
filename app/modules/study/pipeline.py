"""End-to-end pipeline turning text or an image into reviewable study items.

Steps run strictly in order: validate, build the payload, invoke text
generation, parse and validate, optionally enrich every item with an icon,
and persist a history record. Any failure aborts the run; nothing partial is
returned or recorded.
"""

from __future__ import annotations

import asyncio
import base64
import json
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from app.core.logging import get_logger, log_context
from app.modules.study.errors import (
    EmptyInputError,
    EmptyResultError,
    IconGenerationError,
    ParseError,
)
from app.modules.study.generator import ImageGenerator, TextGenerator
from app.modules.study.history import HistoryStore
from app.modules.study.models.history import HistoryRecord
from app.modules.study.models.items import (
    ContentPart,
    Flashcard,
    GenerationMode,
    GenerationPayload,
    GenerationRequest,
    InputKind,
    MCQItem,
    StudyItem,
)
from app.modules.study.prompts import (
    FlashcardSchema,
    MCQSchema,
    icon_prompt,
    instruction_for,
)

logger = get_logger(__name__)

MCQ_OPTION_COUNT = 4

TEXT_PROGRESS_MESSAGE = "Generating text content..."
ICON_PROGRESS_MESSAGE = "Generating icons (this may take a moment)..."

ProgressCallback = Callable[[str], None]

_FLASHCARDS_ADAPTER = TypeAdapter(list[FlashcardSchema])
_MCQS_ADAPTER = TypeAdapter(list[MCQSchema])


def validate_request(request: GenerationRequest) -> None:
    if request.input_kind == InputKind.TEXT:
        if not (request.text or "").strip():
            raise EmptyInputError("Text input is empty")
    elif request.image is None:
        raise EmptyInputError("No image selected")


def build_payload(request: GenerationRequest) -> GenerationPayload:
    """Content first (image or text), then the mode's instruction."""
    parts: list[ContentPart] = []
    if request.input_kind == InputKind.IMAGE:
        parts.append(ContentPart(inline_data=request.image))
    else:
        parts.append(ContentPart(text=request.text))
    parts.append(ContentPart(text=instruction_for(request.mode)))
    return GenerationPayload(parts=parts)


def _check_mcq(index: int, item: MCQSchema) -> MCQItem:
    if len(item.options) != MCQ_OPTION_COUNT:
        raise ParseError(
            f"MCQ {index} has {len(item.options)} options, expected {MCQ_OPTION_COUNT}"
        )
    if len(set(item.options)) != len(item.options):
        raise ParseError(f"MCQ {index} has duplicate options")
    if item.correctAnswer not in item.options:
        raise ParseError(f"MCQ {index} correct answer is not one of its options")
    return MCQItem(
        question=item.question,
        options=list(item.options),
        correct_answer=item.correctAnswer,
    )


def parse_items(raw: str | bytes, mode: GenerationMode) -> list[StudyItem]:
    """Decode the service response and check it against the documented shape."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Response is not valid JSON: {e}") from e

    try:
        if mode == GenerationMode.MCQS:
            parsed = _MCQS_ADAPTER.validate_python(data)
        else:
            parsed = _FLASHCARDS_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise ParseError(f"Response does not match the {mode.value} shape: {e}") from e

    if not parsed:
        raise EmptyResultError("Service returned no items")

    if mode == GenerationMode.MCQS:
        return [_check_mcq(i, item) for i, item in enumerate(parsed)]
    return [Flashcard(question=c.question, answer=c.answer) for c in parsed]


def new_record_id(history: Sequence[HistoryRecord], now: datetime) -> int:
    """Millisecond timestamp, bumped past the newest record to stay unique."""
    record_id = int(now.timestamp() * 1000)
    if history and record_id <= history[0].id:
        record_id = history[0].id + 1
    return record_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationPipeline:
    def __init__(
        self,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        history: HistoryStore,
        *,
        icon_mime_type: str = "image/png",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.text_generator = text_generator
        self.image_generator = image_generator
        self.history = history
        self.icon_mime_type = icon_mime_type
        self._clock = clock

    async def generate(
        self,
        request: GenerationRequest,
        *,
        theme: str = "default",
        on_progress: Optional[ProgressCallback] = None,
        request_id: Optional[str] = None,
    ) -> list[StudyItem]:
        def _progress(msg: str) -> None:
            if on_progress is not None:
                on_progress(msg)

        ctx = log_context(
            request_id=request_id,
            mode=request.mode.value,
            input_kind=request.input_kind.value,
        )

        validate_request(request)
        payload = build_payload(request)

        _progress(TEXT_PROGRESS_MESSAGE)
        logger.info("Requesting %s from text service", request.mode.value, extra=ctx)
        raw = await self.text_generator.generate(payload, request.mode)

        items = parse_items(raw, request.mode)
        logger.info("Parsed %d item(s)", len(items), extra=ctx)

        if request.generate_icons:
            _progress(ICON_PROGRESS_MESSAGE)
            items = await self.enrich_with_icons(items)
            logger.info("Attached %d icon(s)", len(items), extra=ctx)

        record = self._build_record(request, items, theme)
        await self.history.append(record)
        logger.info("Saved history record %s", record.id, extra=ctx)
        return items

    async def enrich_with_icons(self, items: list[StudyItem]) -> list[StudyItem]:
        """Request one icon per item concurrently; all succeed or none are kept."""

        async def _icon(item: StudyItem) -> str:
            data = await self.image_generator.generate_image(icon_prompt(item.question))
            encoded = base64.b64encode(data).decode("ascii")
            return f"data:{self.icon_mime_type};base64,{encoded}"

        results = await asyncio.gather(
            *(_icon(item) for item in items), return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "%d of %d icon request(s) failed: %s",
                len(failures),
                len(items),
                failures[0],
            )
            raise IconGenerationError(
                f"{len(failures)} icon request(s) failed"
            ) from failures[0]
        return [
            item.model_copy(update={"icon": uri}) for item, uri in zip(items, results)
        ]

    def _build_record(
        self, request: GenerationRequest, items: list[StudyItem], theme: str
    ) -> HistoryRecord:
        now = self._clock()
        if request.input_kind == InputKind.IMAGE and request.image is not None:
            summary = request.image.data_uri
        else:
            summary = request.text or ""
        return HistoryRecord(
            id=new_record_id(self.history.records, now),
            timestamp=now,
            input_kind=request.input_kind,
            mode=request.mode,
            input_summary=summary,
            items=list(items),
            theme=theme,
        )
