from __future__ import annotations

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.core.config import settings
from app.apis.deps import get_study_session
from app.modules.study import review
from app.modules.study.encoder import encode_upload
from app.modules.study.errors import (
    EmptyInputError,
    EncodingError,
    GenerationError,
    GenerationInProgressError,
    RecordNotFoundError,
    ReviewUnavailableError,
)
from app.modules.study.models.history import HistoryRecord
from app.modules.study.models.items import GenerationMode, InputKind
from app.modules.study.state import THEMES, StudySession
from .schemas import (
    ErrorResponse,
    FlashcardReviewRead,
    GenerateTextRequest,
    HistoryItemRead,
    HistoryItemSummary,
    InputUpdateRequest,
    MCQReviewRead,
    NavigateRequest,
    SelectOptionRequest,
    StateResponse,
    ThemeRequest,
    ThemeResponse,
)


router = APIRouter()

Session = Annotated[StudySession, Depends(get_study_session)]

PREFIX = f"/{settings.app.version}/study"

GENERATION_ERRORS = {
    409: {"model": ErrorResponse, "description": "A generation is already running"},
    422: {"model": ErrorResponse, "description": "Empty input or unsupported image"},
    502: {"model": ErrorResponse, "description": "Gemini failed or returned bad data"},
}


def _state(session: StudySession) -> StateResponse:
    s = session.snapshot()
    return StateResponse(
        input_kind=s.input_kind,
        mode=s.mode,
        text=s.text,
        image_name=s.image_name,
        has_image=s.image is not None,
        generate_icons=s.generate_icons,
        is_loading=s.is_loading,
        loading_message=s.loading_message,
        error=s.error,
        flashcards=s.flashcards,
        mcqs=s.mcqs,
        flashcard_review=FlashcardReviewRead(
            **s.flashcard_review.model_dump(), total=len(s.flashcards)
        ),
        mcq_review=MCQReviewRead(
            **s.mcq_review.model_dump(),
            phase=review.phase(s.mcq_review),
            total=len(s.mcqs),
        ),
        theme=s.theme,
    )


def _summary(record: HistoryRecord) -> dict:
    return dict(
        id=record.id,
        timestamp=record.timestamp,
        input_kind=record.input_kind,
        mode=record.mode,
        preview=record.preview,
        item_count=len(record.items),
        theme=record.theme,
    )


def _raise_generation_error(e: Exception) -> NoReturn:
    if isinstance(e, GenerationInProgressError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "generation_in_progress", "message": str(e)},
        )
    if isinstance(e, (EmptyInputError, EncodingError)):
        code = 422
    else:
        code = status.HTTP_502_BAD_GATEWAY
    raise HTTPException(
        status_code=code,
        detail={"error": e.kind, "message": e.user_message},  # type: ignore[attr-defined]
    )


async def _run_generation(session: StudySession) -> StateResponse:
    try:
        await session.generate()
    except (GenerationError, GenerationInProgressError) as e:
        _raise_generation_error(e)
    return _state(session)


def _review_guard(fn, *args):
    try:
        return fn(*args)
    except ReviewUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# State & input ----------------------------------------------------------------
@router.get(f"{PREFIX}/state", response_model=StateResponse, tags=["study"])
async def get_state(session: Session) -> StateResponse:
    return _state(session)


@router.put(f"{PREFIX}/input", response_model=StateResponse, tags=["study"])
async def update_input(req: InputUpdateRequest, session: Session) -> StateResponse:
    if req.input_kind is not None and req.input_kind != session.state.input_kind:
        session.set_input_kind(req.input_kind)
    if req.mode is not None and req.mode != session.state.mode:
        session.set_mode(req.mode)
    if req.text is not None:
        session.set_text(req.text)
    if req.generate_icons is not None:
        session.set_generate_icons(req.generate_icons)
    return _state(session)


# Generation ---------------------------------------------------------------------
@router.post(
    f"{PREFIX}/generate",
    response_model=StateResponse,
    responses=GENERATION_ERRORS,
    tags=["study"],
)
async def generate_from_text(req: GenerateTextRequest, session: Session) -> StateResponse:
    if session.is_generating:
        _raise_generation_error(GenerationInProgressError("A generation is already running"))
    if session.state.mode != req.mode:
        session.set_mode(req.mode)
    if session.state.input_kind != InputKind.TEXT:
        session.set_input_kind(InputKind.TEXT)
    session.set_text(req.text)
    session.set_generate_icons(req.generate_icons)
    return await _run_generation(session)


@router.post(
    f"{PREFIX}/generate/image",
    response_model=StateResponse,
    responses=GENERATION_ERRORS,
    tags=["study"],
)
async def generate_from_image(
    session: Session,
    file: UploadFile = File(...),
    mode: GenerationMode = Form(GenerationMode.FLASHCARDS),
    generate_icons: bool = Form(False),
) -> StateResponse:
    if session.is_generating:
        _raise_generation_error(GenerationInProgressError("A generation is already running"))
    try:
        image = await encode_upload(file)
    except EncodingError as e:
        _raise_generation_error(e)
    if session.state.mode != mode:
        session.set_mode(mode)
    if session.state.input_kind != InputKind.IMAGE:
        session.set_input_kind(InputKind.IMAGE)
    session.set_image(image, name=file.filename)
    session.set_generate_icons(generate_icons)
    return await _run_generation(session)


# Flashcard review ---------------------------------------------------------------
@router.post(f"{PREFIX}/flashcards/flip", response_model=StateResponse, tags=["review"])
async def flip_card(session: Session) -> StateResponse:
    _review_guard(session.flip)
    return _state(session)


@router.post(
    f"{PREFIX}/flashcards/navigate", response_model=StateResponse, tags=["review"]
)
async def navigate_cards(req: NavigateRequest, session: Session) -> StateResponse:
    try:
        await session.navigate(req.direction)
    except ReviewUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _state(session)


# MCQ review -----------------------------------------------------------------------
@router.post(f"{PREFIX}/mcqs/select", response_model=StateResponse, tags=["review"])
async def select_option(req: SelectOptionRequest, session: Session) -> StateResponse:
    _review_guard(session.select_option, req.option)
    return _state(session)


@router.post(f"{PREFIX}/mcqs/next", response_model=StateResponse, tags=["review"])
async def next_question(session: Session) -> StateResponse:
    _review_guard(session.next_question)
    return _state(session)


@router.post(f"{PREFIX}/mcqs/restart", response_model=StateResponse, tags=["review"])
async def restart_quiz(session: Session) -> StateResponse:
    session.restart_quiz()
    return _state(session)


# History --------------------------------------------------------------------------
@router.get(
    f"{PREFIX}/history", response_model=list[HistoryItemSummary], tags=["history"]
)
async def list_history(session: Session) -> list[HistoryItemSummary]:
    return [HistoryItemSummary(**_summary(r)) for r in session.history.records]


@router.get(
    f"{PREFIX}/history/{{record_id:int}}",
    response_model=HistoryItemRead,
    tags=["history"],
)
async def get_history_item(record_id: int, session: Session) -> HistoryItemRead:
    record = session.history.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="History record not found")
    return HistoryItemRead(
        **_summary(record), input_summary=record.input_summary, items=record.items
    )


@router.post(
    f"{PREFIX}/history/{{record_id:int}}/select",
    response_model=StateResponse,
    tags=["history"],
)
async def select_history_item(record_id: int, session: Session) -> StateResponse:
    try:
        session.select_record(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="History record not found")
    return _state(session)


@router.delete(
    f"{PREFIX}/history", status_code=status.HTTP_204_NO_CONTENT, tags=["history"]
)
async def clear_history(session: Session) -> None:
    await session.clear_history()


# Theme ------------------------------------------------------------------------------
@router.get(f"{PREFIX}/theme", response_model=ThemeResponse, tags=["theme"])
async def get_theme(session: Session) -> ThemeResponse:
    return ThemeResponse(theme=session.state.theme, themes=list(THEMES))


@router.put(f"{PREFIX}/theme", response_model=ThemeResponse, tags=["theme"])
async def set_theme(req: ThemeRequest, session: Session) -> ThemeResponse:
    await session.set_theme(req.theme)
    return ThemeResponse(theme=session.state.theme, themes=list(THEMES))
