"""
Tests for image loading and data URI helpers.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from conftest import FakeUpload, make_image_bytes, run
from landing_gen.errors import ValidationError
from landing_gen.io.image_loader import (
    ImageLoader,
    decode_data_uri,
    encode_data_uri,
    parse_data_uri,
)


def test_encode_data_uri():
    assert encode_data_uri(b"abc", "image/jpeg") == "data:image/jpeg;base64,YWJj"


def test_parse_data_uri():
    assert parse_data_uri("data:image/webp;base64,AAAA") == ("image/webp", "AAAA")


def test_parse_data_uri_defaults_to_png():
    assert parse_data_uri("data:;base64,AAAA") == ("image/png", "AAAA")
    assert parse_data_uri("data:base64,AAAA") == ("image/png", "AAAA")


def test_parse_data_uri_rejects_plain_text():
    with pytest.raises(ValidationError):
        parse_data_uri("not an image")


def test_decode_data_uri_rejects_bad_base64():
    with pytest.raises(ValidationError):
        decode_data_uri("data:image/png;base64,@@@")


def test_to_data_uri_uses_detected_format(jpeg_bytes):
    loader = ImageLoader()

    # Declared type is wrong; the decoded format wins.
    data_uri = loader.to_data_uri(jpeg_bytes, declared_type="image/png")

    mime_type, payload = decode_data_uri(data_uri)
    assert mime_type == "image/jpeg"
    assert payload == jpeg_bytes


def test_to_data_uri_round_trips_pixels(png_bytes):
    data_uri = ImageLoader().to_data_uri(png_bytes)

    _, payload = decode_data_uri(data_uri)
    image = Image.open(BytesIO(payload))
    assert image.size == (32, 18)


def test_to_data_uri_rejects_non_images():
    with pytest.raises(ValidationError):
        ImageLoader().to_data_uri(b"definitely not an image", "image/png")


def test_to_data_uri_rejects_empty_file():
    with pytest.raises(ValidationError):
        ImageLoader().to_data_uri(b"")


def test_to_data_uri_rejects_large_files(png_bytes):
    loader = ImageLoader(max_bytes=10)
    with pytest.raises(ValidationError) as exc_info:
        loader.to_data_uri(png_bytes)
    assert "limit" in str(exc_info.value)


def test_to_data_uri_rejects_unsupported_formats():
    buffer = BytesIO()
    Image.new("RGB", (4, 4)).save(buffer, format="BMP")

    with pytest.raises(ValidationError):
        ImageLoader().to_data_uri(buffer.getvalue(), "image/bmp")


def test_read_uploads_keeps_order(png_bytes, jpeg_bytes):
    """Results follow upload order even when the first read is slower."""
    uploads = [
        FakeUpload(png_bytes, "image/png", delay=0.05),
        FakeUpload(jpeg_bytes, "image/jpeg"),
    ]

    images = run(ImageLoader().read_uploads(uploads))

    assert [parse_data_uri(image)[0] for image in images] == ["image/png", "image/jpeg"]
    assert base64.b64decode(parse_data_uri(images[0])[1]) == png_bytes


def test_read_uploads_drops_extra_files():
    uploads = [FakeUpload(make_image_bytes(color=color)) for color in ("red", "green", "blue")]

    images = run(ImageLoader().read_uploads(uploads))

    assert len(images) == 2


def test_read_uploads_handles_nothing():
    assert run(ImageLoader().read_uploads(None)) == []
    assert run(ImageLoader().read_uploads([])) == []


def test_read_uploads_propagates_invalid_file(png_bytes):
    uploads = [FakeUpload(png_bytes), FakeUpload(b"garbage", "image/png")]

    with pytest.raises(ValidationError):
        run(ImageLoader().read_uploads(uploads))
