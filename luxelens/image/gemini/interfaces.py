from __future__ import annotations

from typing import Protocol

from luxelens.prompting import GenerationRequest


class GenerationClientProtocol(Protocol):
    def generate(self, request: GenerationRequest) -> str:
        """Send one request to the provider and return the image as a data URI."""
