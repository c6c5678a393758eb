import base64
import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.modules.study.encoder import encode_bytes, encode_path, encode_upload
from app.modules.study.errors import EncodingError
from tests.fixtures.sample_data import PNG_BYTES


def test_encode_bytes_base64_and_data_uri():
    img = encode_bytes(PNG_BYTES, "image/png")
    assert img.mime_type == "image/png"
    assert base64.b64decode(img.data) == PNG_BYTES
    assert img.data_uri == f"data:image/png;base64,{img.data}"


def test_encode_bytes_normalizes_jpg_alias():
    assert encode_bytes(b"\xff\xd8\xff", "image/jpg").mime_type == "image/jpeg"


@pytest.mark.parametrize("data,mime", [(b"", "image/png"), (b"GIF89a", "image/gif"), (b"x", None)])
def test_encode_bytes_rejects_unusable_input(data, mime):
    with pytest.raises(EncodingError):
        encode_bytes(data, mime)


def test_encode_path_guesses_mime(tmp_path):
    p = tmp_path / "notes.png"
    p.write_bytes(PNG_BYTES)
    assert encode_path(p).mime_type == "image/png"


def test_encode_path_missing_file(tmp_path):
    with pytest.raises(EncodingError):
        encode_path(tmp_path / "missing.jpg")


async def test_encode_upload_uses_content_type():
    upload = UploadFile(
        file=io.BytesIO(PNG_BYTES),
        filename="scan",
        headers=Headers({"content-type": "image/png"}),
    )
    img = await encode_upload(upload)
    assert img.mime_type == "image/png"
    assert base64.b64decode(img.data) == PNG_BYTES


async def test_encode_upload_falls_back_to_filename():
    upload = UploadFile(file=io.BytesIO(b"\xff\xd8\xff\xe0"), filename="page.jpeg")
    img = await encode_upload(upload)
    assert img.mime_type == "image/jpeg"
