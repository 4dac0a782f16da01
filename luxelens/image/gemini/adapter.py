from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Iterable

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from luxelens.config import ProviderConfig
from luxelens.errors import ConfigurationError, EmptyResponse, GenerationRefused, ProviderError
from luxelens.image.normalizer import encode_data_uri, strip_data_uri_prefix
from luxelens.modes import GeneratorMode
from luxelens.prompting import GenerationRequest

from .interfaces import GenerationClientProtocol

COMPOSITION_FALLBACK_MIME = "image/png"
CREATIVE_OUTPUT_MIME = "image/jpeg"


def _coerce_bytes(blob) -> bytes | None:
    if isinstance(blob, (bytes, bytearray)):
        return bytes(blob)
    if isinstance(blob, str):
        try:
            return base64.b64decode(blob)
        except (ValueError, binascii.Error):
            return None
    return None


def _candidate_parts(response) -> Iterable[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ()
    content = getattr(candidates[0], "content", None)
    return getattr(content, "parts", None) or ()


def extract_inline_image(response) -> str:
    """Return the first inline image of a ``generate_content`` response as a data URI.

    Text parts are collected while scanning; when no image turns up they are
    surfaced verbatim as the refusal reason.
    """

    explanations: list[str] = []
    for part in _candidate_parts(response):
        inline = getattr(part, "inline_data", None)
        blob = _coerce_bytes(getattr(inline, "data", None)) if inline is not None else None
        if blob:
            mime_type = getattr(inline, "mime_type", None) or COMPOSITION_FALLBACK_MIME
            return encode_data_uri(blob, mime_type)
        text = getattr(part, "text", None)
        if isinstance(text, str) and text.strip():
            explanations.append(text.strip())

    if explanations:
        raise GenerationRefused("\n".join(explanations))

    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    detail = f" (block reason: {block_reason})" if block_reason else ""
    raise EmptyResponse(f"provider returned neither an image nor an explanation{detail}")


def extract_generated_image(response) -> str:
    """Return the first Imagen result as a data URI.

    Images withheld by the safety filter carry a ``rai_filtered_reason``; those
    reasons are surfaced as the refusal text.
    """

    reasons: list[str] = []
    for generated in getattr(response, "generated_images", None) or []:
        image = getattr(generated, "image", None)
        blob = None
        if image is not None:
            blob = _coerce_bytes(getattr(image, "image_bytes", None))
        if blob:
            mime_type = getattr(image, "mime_type", None) or CREATIVE_OUTPUT_MIME
            return encode_data_uri(blob, mime_type)
        reason = getattr(generated, "rai_filtered_reason", None)
        if isinstance(reason, str) and reason.strip():
            reasons.append(reason.strip())
    if reasons:
        raise GenerationRefused("\n".join(reasons))
    raise EmptyResponse("provider returned no generated images")


@dataclass
class GeminiGenerationClient(GenerationClientProtocol):
    """Gemini image composition plus Imagen text-to-image behind one ``generate`` call.

    Exactly one provider round trip per call; nothing is retried here.
    """

    config: ProviderConfig
    client: Any | None = None

    def _resolve_client(self):
        if not self.config.api_key:
            raise ConfigurationError("provider API key is not configured (set GEMINI_API_KEY)")
        if self.client is None:
            self.client = genai.Client(api_key=self.config.api_key)
        return self.client

    def generate(self, request: GenerationRequest) -> str:
        client = self._resolve_client()
        try:
            if request.mode is GeneratorMode.CREATIVE:
                return self._generate_images(client, request)
            return self._compose(client, request)
        except genai_errors.APIError as exc:
            message = getattr(exc, "message", None) or str(exc)
            raise ProviderError(message) from exc

    def _compose(self, client, request: GenerationRequest) -> str:
        parts = [
            types.Part.from_bytes(
                data=base64.b64decode(strip_data_uri_prefix(image.data_uri)),
                mime_type=image.mime_type,
            )
            for image in request.images
        ]
        parts.append(types.Part.from_text(text=request.prompt))

        image_config = None
        if request.mode is GeneratorMode.CATALOG and request.aspect_ratio is not None:
            image_config = types.ImageConfig(aspect_ratio=request.aspect_ratio.value)
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=image_config,
        )
        response = client.models.generate_content(
            model=self.config.composition_model,
            contents=parts,
            config=config,
        )
        return extract_inline_image(response)

    def _generate_images(self, client, request: GenerationRequest) -> str:
        config = types.GenerateImagesConfig(
            number_of_images=int(request.number_of_images),
            aspect_ratio=request.aspect_ratio.value if request.aspect_ratio else None,
            output_mime_type=CREATIVE_OUTPUT_MIME,
        )
        response = client.models.generate_images(
            model=self.config.imagen_model,
            prompt=request.prompt,
            config=config,
        )
        return extract_generated_image(response)
