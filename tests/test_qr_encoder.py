from io import BytesIO

import pytest
from PIL import Image

from app.core.exceptions import EncodingError
from app.services.qr_encoder import ImageFormat, QREncoder

PAYLOAD = "https://livingbrush.shop/qr/0b9a3c52-6a0e-4d7c-9d7e-1f0c2e4b7a11"


@pytest.fixture
def encoder():
    return QREncoder(border=4, error_correction="M")


def test_encode_is_deterministic(encoder):
    for fmt in (ImageFormat.PNG, ImageFormat.JPEG):
        first = encoder.encode(PAYLOAD, 300, fmt)
        second = encoder.encode(PAYLOAD, 300, fmt)
        assert first == second


def test_different_payloads_give_different_images(encoder):
    assert encoder.encode(PAYLOAD, 300, "PNG") != encoder.encode(PAYLOAD + "x", 300, "PNG")


def test_png_output_has_requested_size(encoder):
    data = encoder.encode(PAYLOAD, 300, ImageFormat.PNG)
    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    with Image.open(BytesIO(data)) as img:
        assert img.size == (300, 300)
        assert img.format == "PNG"


def test_jpeg_output(encoder):
    data = encoder.encode(PAYLOAD, 256, "jpeg")
    with Image.open(BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.size == (256, 256)


def test_capacity_matches_version_40_byte_mode(encoder):
    # 40-M holds 2331 bytes in byte mode
    assert encoder.capacity(300) == 2331


def test_capacity_shrinks_with_image_size(encoder):
    assert 0 < encoder.capacity(60) < encoder.capacity(100) < encoder.capacity(300)


def test_payload_over_capacity_is_rejected(encoder):
    limit = encoder.capacity(100)
    encoder.encode("a" * limit, 100, "PNG")
    with pytest.raises(EncodingError):
        encoder.encode("a" * (limit + 1), 100, "PNG")


def test_capacity_counts_utf8_bytes(encoder):
    limit = encoder.capacity(100)
    # two bytes per character in UTF-8
    with pytest.raises(EncodingError):
        encoder.encode("é" * (limit // 2 + 1), 100, "PNG")


def test_too_small_image_is_rejected(encoder):
    assert encoder.capacity(20) == 0
    with pytest.raises(EncodingError):
        encoder.encode("hi", 20, "PNG")


def test_unknown_format_is_rejected(encoder):
    with pytest.raises(EncodingError):
        encoder.encode(PAYLOAD, 300, "GIF")


def test_unknown_error_correction_level():
    with pytest.raises(ValueError):
        QREncoder(error_correction="X")


def test_format_helpers():
    assert ImageFormat.parse("png") is ImageFormat.PNG
    assert ImageFormat.JPEG.extension == "jpg"
    assert ImageFormat.PNG.media_type == "image/png"
