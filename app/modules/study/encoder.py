"""Binary-to-text encoding of user images for transmission to Gemini."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.modules.study.errors import EncodingError
from app.modules.study.models.items import EncodedImage

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg"}


def encode_bytes(data: bytes, mime_type: Optional[str]) -> EncodedImage:
    if not data:
        raise EncodingError("Image is empty")
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime not in SUPPORTED_MIME_TYPES:
        raise EncodingError(f"Unsupported image type: {mime_type or 'unknown'}")
    return EncodedImage(data=base64.b64encode(data).decode("ascii"), mime_type=mime)


def encode_path(path: str | Path) -> EncodedImage:
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as e:
        raise EncodingError(f"Cannot read image {p}: {e}") from e
    mime, _ = mimetypes.guess_type(p.name)
    return encode_bytes(data, mime)


async def encode_upload(upload: UploadFile) -> EncodedImage:
    """Read an uploaded file and encode it; the MIME type falls back to the filename."""
    try:
        data = await upload.read()
    except (OSError, ValueError) as e:
        raise EncodingError(f"Cannot read upload {upload.filename}: {e}") from e
    mime = upload.content_type
    if not mime or mime == "application/octet-stream":
        mime, _ = mimetypes.guess_type(upload.filename or "")
    return encode_bytes(data, mime)
