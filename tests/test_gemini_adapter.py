from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from google.genai import errors as genai_errors

from luxelens.config import ProviderConfig
from luxelens.errors import ConfigurationError, EmptyResponse, GenerationRefused, ProviderError
from luxelens.image.gemini import GeminiGenerationClient, extract_generated_image, extract_inline_image
from luxelens.image.normalizer import RawImage
from luxelens.modes import AspectRatio
from luxelens.prompting import build_catalog_request, build_creative_request, build_edit_request


def _content_response(*parts: Any, block_reason: str | None = None) -> SimpleNamespace:
    candidate = SimpleNamespace(content=SimpleNamespace(parts=list(parts)))
    return SimpleNamespace(
        candidates=[candidate] if parts else [],
        prompt_feedback=SimpleNamespace(block_reason=block_reason) if block_reason else None,
    )


def _image_part(data: bytes, mime_type: str | None = "image/png") -> SimpleNamespace:
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def _text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(inline_data=None, text=text)


class FakeModels:
    def __init__(self, content_response: Any = None, images_response: Any = None, error: Exception | None = None):
        self.content_response = content_response
        self.images_response = images_response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, **kwargs: Any) -> Any:
        self.calls.append({"method": "generate_content", **kwargs})
        if self.error is not None:
            raise self.error
        return self.content_response

    def generate_images(self, **kwargs: Any) -> Any:
        self.calls.append({"method": "generate_images", **kwargs})
        if self.error is not None:
            raise self.error
        return self.images_response


def _client(models: FakeModels) -> GeminiGenerationClient:
    return GeminiGenerationClient(ProviderConfig(api_key="test-key"), client=SimpleNamespace(models=models))


def test_extract_inline_image_returns_first_image() -> None:
    response = _content_response(_text_part("here you go"), _image_part(b"PNGDATA"), _image_part(b"OTHER"))

    assert extract_inline_image(response) == "data:image/png;base64,UE5HREFUQQ=="


def test_extract_inline_image_falls_back_to_png() -> None:
    response = _content_response(_image_part(b"PNGDATA", mime_type=None))

    assert extract_inline_image(response).startswith("data:image/png;base64,")


def test_text_only_response_is_a_refusal() -> None:
    response = _content_response(_text_part("I cannot add a person."), _text_part("Try another reference."))

    with pytest.raises(GenerationRefused) as excinfo:
        extract_inline_image(response)

    assert excinfo.value.explanation == "I cannot add a person.\nTry another reference."


def test_empty_response_reports_block_reason() -> None:
    with pytest.raises(EmptyResponse, match="SAFETY"):
        extract_inline_image(_content_response(block_reason="SAFETY"))


def test_extract_generated_image_defaults_to_jpeg() -> None:
    response = SimpleNamespace(
        generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b"JPEG", mime_type=None))]
    )

    assert extract_generated_image(response) == "data:image/jpeg;base64,SlBFRw=="
    with pytest.raises(EmptyResponse):
        extract_generated_image(SimpleNamespace(generated_images=[]))


def test_catalog_call_sends_images_then_prompt(png_bytes: bytes, jpeg_bytes: bytes) -> None:
    models = FakeModels(content_response=_content_response(_image_part(b"OUT")))
    request = build_catalog_request(
        RawImage("ring.png", png_bytes, "image/png"),
        RawImage("velvet.jpg", jpeg_bytes, "image/jpeg"),
        AspectRatio.STORY,
    )

    result = _client(models).generate(request)

    assert result.startswith("data:image/png;base64,")
    call = models.calls[0]
    assert call["method"] == "generate_content"
    assert call["model"] == "gemini-2.5-flash-image"
    parts = call["contents"]
    assert len(parts) == 3
    assert parts[0].inline_data.data == png_bytes
    assert parts[0].inline_data.mime_type == "image/png"
    assert parts[1].inline_data.data == jpeg_bytes
    assert parts[2].text == request.prompt
    assert call["config"].response_modalities == ["IMAGE"]
    assert call["config"].image_config.aspect_ratio == "9:16"


def test_edit_call_has_no_aspect_ratio(png_bytes: bytes) -> None:
    models = FakeModels(content_response=_content_response(_image_part(b"OUT")))
    request = build_edit_request(RawImage("ring.png", png_bytes, "image/png"), "polish the gold")

    _client(models).generate(request)

    call = models.calls[0]
    assert len(call["contents"]) == 2
    assert call["config"].image_config is None


def test_creative_call_uses_imagen() -> None:
    images = SimpleNamespace(generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b"JPEG"))])
    models = FakeModels(images_response=images)
    request = build_creative_request("emerald ring on marble pedestal", AspectRatio.WIDESCREEN)

    result = _client(models).generate(request)

    assert result.startswith("data:image/jpeg;base64,")
    call = models.calls[0]
    assert call["method"] == "generate_images"
    assert call["model"] == "imagen-4.0-generate-001"
    assert call["prompt"] == request.prompt
    assert call["config"].number_of_images == 1
    assert call["config"].aspect_ratio == "16:9"
    assert call["config"].output_mime_type == "image/jpeg"


def test_missing_api_key_fails_before_any_call() -> None:
    models = FakeModels()
    client = GeminiGenerationClient(ProviderConfig(api_key=None), client=SimpleNamespace(models=models))

    with pytest.raises(ConfigurationError):
        client.generate(build_creative_request("diamond studs"))
    assert models.calls == []


def test_sdk_errors_become_provider_errors() -> None:
    error = genai_errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
    )
    models = FakeModels(error=error)

    with pytest.raises(ProviderError) as excinfo:
        _client(models).generate(build_creative_request("diamond studs"))

    assert "Quota exceeded" in str(excinfo.value)


def test_filtered_imagen_result_is_a_refusal() -> None:
    response = SimpleNamespace(
        generated_images=[SimpleNamespace(image=None, rai_filtered_reason="Prompt mentions a minor.")]
    )

    with pytest.raises(GenerationRefused) as excinfo:
        extract_generated_image(response)

    assert excinfo.value.explanation == "Prompt mentions a minor."


def test_empty_upload_is_sent_as_empty_bytes() -> None:
    models = FakeModels(content_response=_content_response(_image_part(b"OUT")))
    request = build_edit_request(RawImage("empty.png", b"", "image/png"), "add a shadow")

    result = _client(models).generate(request)

    assert result.startswith("data:image/png;base64,")
    assert not models.calls[0]["contents"][0].inline_data.data
