from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .errors import InvalidInput, MissingInput
from .image.normalizer import EncodedImage, normalize_image
from .modes import (
    CATALOG_ASPECT_RATIOS,
    AspectRatio,
    CatalogInputs,
    CreativeInputs,
    EditInputs,
    GenerationInputs,
    GeneratorMode,
    ImageInput,
)

__all__ = [
    "CREATIVE_STYLE_SUFFIX",
    "DEFAULT_HISTORY_LABEL",
    "GenerationRequest",
    "build_catalog_request",
    "build_creative_request",
    "build_edit_request",
    "build_request",
    "catalog_prompt",
    "check_aspect_ratio",
    "creative_prompt",
    "edit_prompt",
    "missing_fields",
]

DEFAULT_HISTORY_LABEL = "Catalog Composite"

CREATIVE_STYLE_SUFFIX = (
    "Professional luxury jewelry product photography, cinematic lighting, "
    "macro lens framing, sharp focus on the metal and gemstones, high resolution, "
    "photorealistic detail."
)

_CATALOG_TEMPLATE = """\
Act as a professional luxury jewelry photographer.
GOAL: produce a flawless catalog photograph.

INSTRUCTIONS:
1. Extract the JEWELRY piece precisely from the first image (the product photo).
2. Preserve its exact geometry, proportions, material, metal finish, gemstone color and every detail.
3. Take the LIGHTING, BACKGROUND and MOOD strictly from the second image (the style reference).
4. Do NOT add people, hands, skin or any body part unless they already appear in the reference image.
5. The result must be a photorealistic, high-fidelity composite.
6. Output format: {ratio} aspect ratio.
"""

_EDIT_TEMPLATE = """\
Edit instructions: {instructions}

Apply only the requested change. Keep the original resolution, framing and \
photorealism of the source photograph."""


@dataclass(frozen=True)
class GenerationRequest:
    mode: GeneratorMode
    prompt: str
    images: Tuple[EncodedImage, ...] = ()
    aspect_ratio: AspectRatio | None = None
    number_of_images: int = 1


def _ratio(value: AspectRatio | str) -> AspectRatio:
    try:
        return AspectRatio(value)
    except ValueError as exc:
        raise InvalidInput(f"unsupported aspect ratio: {value!r}") from exc


def catalog_prompt(aspect_ratio: AspectRatio) -> str:
    return _CATALOG_TEMPLATE.format(ratio=aspect_ratio.value)


def creative_prompt(description: str) -> str:
    text = description.strip()
    if text.endswith((".", "!", "?")):
        return f"{text} {CREATIVE_STYLE_SUFFIX}"
    return f"{text}. {CREATIVE_STYLE_SUFFIX}"


def edit_prompt(instructions: str) -> str:
    return _EDIT_TEMPLATE.format(instructions=instructions.strip())


def missing_fields(inputs: GenerationInputs) -> List[str]:
    """Names of the required fields absent for the selected mode, in form order."""

    missing: List[str] = []
    if isinstance(inputs, CatalogInputs):
        if inputs.product is None:
            missing.append("product")
        if inputs.reference is None:
            missing.append("reference")
    elif isinstance(inputs, CreativeInputs):
        if not inputs.description or not inputs.description.strip():
            missing.append("description")
    elif isinstance(inputs, EditInputs):
        if inputs.image is None:
            missing.append("image")
        if not inputs.instructions or not inputs.instructions.strip():
            missing.append("instructions")
    else:
        raise TypeError(f"unsupported inputs type: {type(inputs).__name__}")
    return missing


def check_aspect_ratio(inputs: GenerationInputs) -> None:
    """Raise :class:`InvalidInput` when the requested output shape is not allowed for the mode."""

    if isinstance(inputs, CatalogInputs):
        ratio = _ratio(inputs.aspect_ratio)
        if ratio not in CATALOG_ASPECT_RATIOS:
            raise InvalidInput(f"catalog mode supports 1:1 or 9:16, got {ratio.value}")
    elif isinstance(inputs, CreativeInputs):
        _ratio(inputs.aspect_ratio)


def _encoded(image: ImageInput | None) -> EncodedImage | None:
    if image is None:
        return None
    return normalize_image(image)


def build_catalog_request(
    product: ImageInput | None,
    reference: ImageInput | None,
    aspect_ratio: AspectRatio | str = AspectRatio.SQUARE,
) -> GenerationRequest:
    missing = missing_fields(CatalogInputs(product=product, reference=reference))
    if missing:
        raise MissingInput(missing)
    ratio = _ratio(aspect_ratio)
    check_aspect_ratio(CatalogInputs(product=product, reference=reference, aspect_ratio=ratio))
    return GenerationRequest(
        mode=GeneratorMode.CATALOG,
        prompt=catalog_prompt(ratio),
        images=(_encoded(product), _encoded(reference)),
        aspect_ratio=ratio,
    )


def build_creative_request(
    description: str,
    aspect_ratio: AspectRatio | str = AspectRatio.SQUARE,
) -> GenerationRequest:
    if not description or not description.strip():
        raise MissingInput(["description"])
    return GenerationRequest(
        mode=GeneratorMode.CREATIVE,
        prompt=creative_prompt(description),
        aspect_ratio=_ratio(aspect_ratio),
        number_of_images=1,
    )


def build_edit_request(image: ImageInput | None, instructions: str) -> GenerationRequest:
    missing = missing_fields(EditInputs(image=image, instructions=instructions or ""))
    if missing:
        raise MissingInput(missing)
    return GenerationRequest(
        mode=GeneratorMode.EDIT,
        prompt=edit_prompt(instructions),
        images=(_encoded(image),),
    )


def build_request(inputs: GenerationInputs) -> GenerationRequest:
    if isinstance(inputs, CatalogInputs):
        return build_catalog_request(inputs.product, inputs.reference, inputs.aspect_ratio)
    if isinstance(inputs, CreativeInputs):
        return build_creative_request(inputs.description, inputs.aspect_ratio)
    if isinstance(inputs, EditInputs):
        return build_edit_request(inputs.image, inputs.instructions)
    raise TypeError(f"unsupported inputs type: {type(inputs).__name__}")
