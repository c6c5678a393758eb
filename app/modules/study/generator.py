"""Gemini-backed text and image generation services.

Text generation goes through a pydantic-ai ``Agent`` with native structured
output, so Gemini itself enforces the response schema. Image generation uses
the ``google-genai`` client owned by the same ``GoogleProvider``. Provider
imports are kept lazy to avoid import-time errors when credentials are
missing.
"""

from __future__ import annotations

import base64
from typing import Optional, Protocol

from pydantic import TypeAdapter

from app.core.config import settings
from app.core.logging import get_logger
from app.modules.study.errors import GenerationServiceError, ParseError
from app.modules.study.models.items import GenerationMode, GenerationPayload
from app.modules.study.prompts import output_schema_for

logger = get_logger(__name__)


class TextGenerator(Protocol):
    async def generate(self, payload: GenerationPayload, mode: GenerationMode) -> str:
        """Return the raw structured JSON text produced for ``payload``."""
        ...


class ImageGenerator(Protocol):
    async def generate_image(self, prompt: str) -> bytes:
        """Return the bytes of one generated image."""
        ...


def _build_google_provider(api_key: Optional[str] = None):
    from pydantic_ai.providers.google import GoogleProvider

    return GoogleProvider(api_key=api_key or settings.generation.gemini_api_key)


def _build_google_model(model_name: str, provider):
    from pydantic_ai.models.google import GoogleModel

    return GoogleModel(model_name, provider=provider)


def _to_user_content(payload: GenerationPayload) -> list:
    from pydantic_ai import BinaryContent

    content: list = []
    for part in payload.parts:
        if part.inline_data is not None:
            content.append(
                BinaryContent(
                    data=base64.b64decode(part.inline_data.data),
                    media_type=part.inline_data.mime_type,
                )
            )
        if part.text is not None:
            content.append(part.text)
    return content


class GeminiTextGenerator:
    """Schema-constrained text generation (flashcards or MCQs)."""

    def __init__(self, *, model_name: Optional[str] = None, provider=None) -> None:
        self.model_name = model_name or settings.generation.text_model
        self._provider = provider

    def _agent(self, mode: GenerationMode):
        from pydantic_ai import Agent, NativeOutput

        if self._provider is None:
            self._provider = _build_google_provider()
        model = _build_google_model(self.model_name, self._provider)
        # No retries: a malformed response fails the generation outright
        return Agent(
            model=model,
            output_type=NativeOutput(output_schema_for(mode), name=f"{mode.value}_set"),
            retries=0,
        )

    async def generate(self, payload: GenerationPayload, mode: GenerationMode) -> str:
        from pydantic_ai.exceptions import UnexpectedModelBehavior

        try:
            agent = self._agent(mode)
            res = await agent.run(_to_user_content(payload))
        except UnexpectedModelBehavior as e:
            raise ParseError(f"Response did not match the {mode.value} schema: {e}") from e
        except Exception as e:  # noqa: BLE001
            raise GenerationServiceError(f"Text generation failed: {e}") from e
        adapter = TypeAdapter(output_schema_for(mode))
        return adapter.dump_json(res.output).decode("utf-8")


class GeminiImageGenerator:
    """One-image-per-prompt icon generation through Imagen."""

    def __init__(
        self,
        *,
        model_name: Optional[str] = None,
        mime_type: Optional[str] = None,
        provider=None,
    ) -> None:
        self.model_name = model_name or settings.generation.image_model
        self.mime_type = mime_type or settings.generation.icon_mime_type
        self._provider = provider

    async def generate_image(self, prompt: str) -> bytes:
        from google.genai import types

        if self._provider is None:
            # One client shared by every concurrent icon request
            self._provider = _build_google_provider()
        resp = await self._provider.client.aio.models.generate_images(
            model=self.model_name,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1, output_mime_type=self.mime_type
            ),
        )
        images = resp.generated_images or []
        if not images or images[0].image is None or not images[0].image.image_bytes:
            raise ValueError("Image service returned no image")
        logger.debug("Generated icon for prompt %r", prompt[:60])
        return images[0].image.image_bytes
