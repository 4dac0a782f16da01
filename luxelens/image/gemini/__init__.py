from .adapter import GeminiGenerationClient, extract_generated_image, extract_inline_image
from .interfaces import GenerationClientProtocol

__all__ = [
    "GeminiGenerationClient",
    "GenerationClientProtocol",
    "extract_generated_image",
    "extract_inline_image",
]
