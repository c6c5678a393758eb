"""Error kinds raised by the study generation pipeline and session controller."""

from __future__ import annotations

from app.core.storage import StorageError

GENERIC_ERROR_MESSAGE = (
    "An error occurred while generating. Please check the server logs for details."
)
EMPTY_INPUT_MESSAGE = "Please provide some content to generate."
EMPTY_RESULT_MESSAGE = (
    "Could not generate content. Please try again with a different source."
)


class GenerationError(Exception):
    """Base class for failures that abort a generation."""

    kind = "generation_error"
    user_message = GENERIC_ERROR_MESSAGE


class EmptyInputError(GenerationError):
    kind = "empty_input"
    user_message = EMPTY_INPUT_MESSAGE


class EncodingError(GenerationError):
    kind = "encoding_error"


class GenerationServiceError(GenerationError):
    kind = "generation_service_error"


class ParseError(GenerationError):
    kind = "parse_error"


class EmptyResultError(GenerationError):
    kind = "empty_result"
    user_message = EMPTY_RESULT_MESSAGE


class IconGenerationError(GenerationError):
    kind = "icon_generation_error"


class GenerationInProgressError(Exception):
    """A generation is already running for this session."""


class RecordNotFoundError(KeyError):
    pass


class ReviewUnavailableError(Exception):
    """A review action was requested with no items loaded for that mode."""


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "EMPTY_INPUT_MESSAGE",
    "EMPTY_RESULT_MESSAGE",
    "GenerationError",
    "EmptyInputError",
    "EncodingError",
    "GenerationServiceError",
    "ParseError",
    "EmptyResultError",
    "IconGenerationError",
    "GenerationInProgressError",
    "RecordNotFoundError",
    "ReviewUnavailableError",
    "StorageError",
]
