"""Canonicalise user-selected images into self-describing data URIs.

Uploads arrive with whatever media type the operating system reported, which is
sometimes nothing at all (HEIC and WebP files on older systems are the usual
offenders). The provider requires a concrete type for every inline image, so
the normaliser infers one from the file extension and rewrites the data-URI
prefix to match. The preview shown to the user and the payload sent upstream
therefore always agree.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "DEFAULT_MIME_TYPE",
    "EncodedImage",
    "RawImage",
    "data_uri_mime_type",
    "decode_data_uri",
    "encode_data_uri",
    "infer_mime_type",
    "load_image",
    "normalize_image",
    "strip_data_uri_prefix",
]

DEFAULT_MIME_TYPE = "image/jpeg"
EXTENSION_MIME_TYPES = {
    "png": "image/png",
    "webp": "image/webp",
    "heic": "image/heic",
}
GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream"})
_GENERIC_PREFIXES = ("data:;base64,", "data:application/octet-stream;base64,")


@dataclass(frozen=True)
class RawImage:
    filename: str
    content: bytes
    declared_type: str | None = None


@dataclass(frozen=True)
class EncodedImage:
    data_uri: str
    mime_type: str

    @property
    def preview(self) -> str:
        return self.data_uri

    @property
    def base64(self) -> str:
        return strip_data_uri_prefix(self.data_uri)


def _is_generic(mime_type: str | None) -> bool:
    return (mime_type or "").strip().lower() in GENERIC_MIME_TYPES


def infer_mime_type(filename: str) -> str:
    """Map a filename extension to a media type, defaulting to JPEG."""

    extension = Path(filename or "").suffix.lstrip(".").lower()
    return EXTENSION_MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def encode_data_uri(content: bytes, mime_type: str) -> str:
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def data_uri_mime_type(value: str) -> str | None:
    """Return the media type declared by a data URI prefix, or ``None``."""

    if not value.startswith("data:"):
        return None
    header, sep, _ = value.partition(",")
    if not sep:
        return None
    return header[len("data:"):].split(";", 1)[0]


def strip_data_uri_prefix(value: str) -> str:
    """Drop the ``data:<type>;base64,`` header, leaving the raw base64 payload.

    Values without a header are returned unchanged.
    """

    _, sep, payload = value.partition(",")
    return payload if sep else value


def decode_data_uri(value: str) -> tuple[str, bytes]:
    mime_type = data_uri_mime_type(value)
    if _is_generic(mime_type):
        mime_type = DEFAULT_MIME_TYPE
    try:
        content = base64.b64decode(strip_data_uri_prefix(value), validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ValueError("data URI does not carry a valid base64 payload") from exc
    return mime_type, content


def _rewrite_generic_prefix(data_uri: str, mime_type: str) -> str:
    for prefix in _GENERIC_PREFIXES:
        if data_uri.startswith(prefix):
            return f"data:{mime_type};base64," + data_uri[len(prefix):]
    return data_uri


def load_image(path: Path | str) -> RawImage:
    """Read an image from disk the way a browser file picker would report it."""

    path = Path(path)
    declared, _ = mimetypes.guess_type(path.name)
    return RawImage(filename=path.name, content=path.read_bytes(), declared_type=declared)


def normalize_image(image: RawImage | EncodedImage) -> EncodedImage:
    if isinstance(image, EncodedImage):
        return _normalize_encoded(image)

    declared = (image.declared_type or "").strip()
    if declared:
        return EncodedImage(data_uri=encode_data_uri(image.content, declared), mime_type=declared)

    mime_type = infer_mime_type(image.filename)
    data_uri = _rewrite_generic_prefix(encode_data_uri(image.content, declared), mime_type)
    return EncodedImage(data_uri=data_uri, mime_type=mime_type)


def _normalize_encoded(image: EncodedImage) -> EncodedImage:
    prefix_type = data_uri_mime_type(image.data_uri)
    if image.mime_type.strip() and prefix_type == image.mime_type:
        return image

    if not _is_generic(image.mime_type):
        mime_type = image.mime_type.strip()
    elif not _is_generic(prefix_type):
        mime_type = prefix_type
    else:
        mime_type = DEFAULT_MIME_TYPE
    data_uri = f"data:{mime_type};base64,{strip_data_uri_prefix(image.data_uri)}"
    return EncodedImage(data_uri=data_uri, mime_type=mime_type)
