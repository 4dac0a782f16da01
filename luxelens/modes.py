from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from .image.normalizer import EncodedImage, RawImage

__all__ = [
    "AspectRatio",
    "CATALOG_ASPECT_RATIOS",
    "CatalogInputs",
    "CreativeInputs",
    "EditInputs",
    "GenerationInputs",
    "GeneratorMode",
    "ImageInput",
]


class GeneratorMode(str, Enum):
    CATALOG = "CATALOG"
    CREATIVE = "CREATIVE"
    EDIT = "EDIT"


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    STORY = "9:16"
    WIDESCREEN = "16:9"


CATALOG_ASPECT_RATIOS = frozenset({AspectRatio.SQUARE, AspectRatio.STORY})

ImageInput = Union[RawImage, EncodedImage]


@dataclass(frozen=True)
class CatalogInputs:
    """Real product photo composited onto the look of a style reference."""

    mode: ClassVar[GeneratorMode] = GeneratorMode.CATALOG

    product: Optional[ImageInput] = None
    reference: Optional[ImageInput] = None
    aspect_ratio: AspectRatio = AspectRatio.SQUARE

    @property
    def prompt_text(self) -> str | None:
        return None


@dataclass(frozen=True)
class CreativeInputs:
    mode: ClassVar[GeneratorMode] = GeneratorMode.CREATIVE

    description: str = ""
    aspect_ratio: AspectRatio = AspectRatio.SQUARE

    @property
    def prompt_text(self) -> str | None:
        return self.description.strip() or None


@dataclass(frozen=True)
class EditInputs:
    """Source image plus free-text edit instructions; the source keeps its own shape."""

    mode: ClassVar[GeneratorMode] = GeneratorMode.EDIT

    image: Optional[ImageInput] = None
    instructions: str = ""

    @property
    def aspect_ratio(self) -> None:
        return None

    @property
    def prompt_text(self) -> str | None:
        return self.instructions.strip() or None


GenerationInputs = Union[CatalogInputs, CreativeInputs, EditInputs]
