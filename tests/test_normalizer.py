from __future__ import annotations

import base64
from pathlib import Path

import pytest

from luxelens.image.normalizer import (
    EncodedImage,
    RawImage,
    data_uri_mime_type,
    decode_data_uri,
    infer_mime_type,
    load_image,
    normalize_image,
    strip_data_uri_prefix,
)


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("ring.png", "image/png"),
        ("RING.PNG", "image/png"),
        ("pendant.webp", "image/webp"),
        ("IMG_0042.HEIC", "image/heic"),
        ("earrings.jpeg", "image/jpeg"),
        ("bracelet", "image/jpeg"),
        ("", "image/jpeg"),
    ],
)
def test_infer_mime_type_from_extension(filename: str, expected: str) -> None:
    assert infer_mime_type(filename) == expected


def test_declared_type_is_kept(png_bytes: bytes) -> None:
    encoded = normalize_image(RawImage("ring.png", png_bytes, "image/png"))

    assert encoded.mime_type == "image/png"
    assert encoded.data_uri.startswith("data:image/png;base64,")
    assert base64.b64decode(encoded.base64) == png_bytes


def test_missing_declared_type_is_inferred_and_prefix_rewritten(png_bytes: bytes) -> None:
    encoded = normalize_image(RawImage("IMG_0042.heic", png_bytes))

    assert encoded.mime_type == "image/heic"
    assert encoded.data_uri.startswith("data:image/heic;base64,")
    assert encoded.preview == encoded.data_uri


def test_any_non_empty_declared_type_passes_through(png_bytes: bytes) -> None:
    encoded = normalize_image(RawImage("ring.webp", png_bytes, "application/octet-stream"))

    assert encoded.mime_type == "application/octet-stream"
    assert data_uri_mime_type(encoded.data_uri) == "application/octet-stream"
    assert normalize_image(encoded) is encoded


def test_encoded_image_with_octet_stream_prefix_is_repaired(png_bytes: bytes) -> None:
    payload = base64.b64encode(png_bytes).decode("ascii")
    encoded = normalize_image(
        EncodedImage(data_uri=f"data:application/octet-stream;base64,{payload}", mime_type="image/webp")
    )

    assert encoded.data_uri == f"data:image/webp;base64,{payload}"


def test_unknown_extension_without_type_defaults_to_jpeg(jpeg_bytes: bytes) -> None:
    encoded = normalize_image(RawImage("scan.bin", jpeg_bytes, ""))

    assert encoded.mime_type == "image/jpeg"
    assert encoded.data_uri.startswith("data:image/jpeg;base64,")


def test_consistent_encoded_image_is_returned_unchanged(png_bytes: bytes) -> None:
    original = normalize_image(RawImage("ring.png", png_bytes, "image/png"))

    assert normalize_image(original) is original


def test_encoded_image_with_generic_prefix_is_repaired(png_bytes: bytes) -> None:
    payload = base64.b64encode(png_bytes).decode("ascii")
    encoded = normalize_image(EncodedImage(data_uri=f"data:;base64,{payload}", mime_type="image/png"))

    assert encoded.data_uri == f"data:image/png;base64,{payload}"
    assert encoded.mime_type == "image/png"


def test_strip_data_uri_prefix_handles_plain_payload() -> None:
    assert strip_data_uri_prefix("data:image/png;base64,QUJD") == "QUJD"
    assert strip_data_uri_prefix("QUJD") == "QUJD"
    assert strip_data_uri_prefix("") == ""
    assert strip_data_uri_prefix("data:image/png;base64,") == ""


def test_decode_data_uri_rejects_garbage() -> None:
    mime_type, content = decode_data_uri("data:image/png;base64,QUJD")
    assert (mime_type, content) == ("image/png", b"ABC")
    assert decode_data_uri("data:image/png;base64,") == ("image/png", b"")

    with pytest.raises(ValueError):
        decode_data_uri("data:image/png;base64,@@not-base64@@")


def test_load_image_reads_file(tmp_path: Path, png_bytes: bytes) -> None:
    path = tmp_path / "ring.png"
    path.write_bytes(png_bytes)

    raw = load_image(path)

    assert raw.filename == "ring.png"
    assert raw.content == png_bytes
    assert raw.declared_type == "image/png"
