"""User-facing text for workflow outcomes.

Portuguese is the default audience; English is kept for logs and CLI users who
ask for it with ``--lang en``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

from .errors import GenerationRefused, LuxeLensError, MissingInput, ProviderError

__all__ = ["MESSAGES", "Messages"]

MESSAGES: Dict[str, Dict[str, str]] = {
    "pt": {
        "missing_input": "Por favor, informe: {fields}.",
        "invalid_input": "Entrada inválida: {detail}",
        "configuration": "API_KEY não configurada no ambiente.",
        "refused": "A IA não gerou a imagem: {detail}",
        "empty_response": "A IA não retornou uma imagem válida. Tente novamente.",
        "provider": "Erro no serviço de geração: {detail}",
        "persistence": "Não foi possível salvar o histórico.",
        "authentication": "Credenciais inválidas. Verifique seu e-mail e senha.",
        "generic": "Ocorreu um erro desconhecido.",
        "field.product": "a foto da joia",
        "field.reference": "a imagem de referência",
        "field.description": "o prompt de criação",
        "field.image": "a imagem para editar",
        "field.instructions": "as instruções de edição",
        "conjunction": "e",
    },
    "en": {
        "missing_input": "Please provide: {fields}.",
        "invalid_input": "Invalid input: {detail}",
        "configuration": "API_KEY is not configured in the environment.",
        "refused": "The AI did not produce an image: {detail}",
        "empty_response": "The AI did not return a valid image. Please try again.",
        "provider": "Generation service error: {detail}",
        "persistence": "Could not save the history entry.",
        "authentication": "Invalid credentials. Check your e-mail and password.",
        "generic": "An unknown error occurred.",
        "field.product": "the jewelry photo",
        "field.reference": "the reference image",
        "field.description": "the creative prompt",
        "field.image": "the image to edit",
        "field.instructions": "the edit instructions",
        "conjunction": "and",
    },
}


@dataclass(frozen=True)
class Messages:
    language: str = "pt"

    @property
    def table(self) -> Mapping[str, str]:
        return MESSAGES.get(self.language, MESSAGES["pt"])

    def text(self, key: str, **values: object) -> str:
        template = self.table.get(key) or MESSAGES["pt"][key]
        return template.format(**values)

    def join_fields(self, fields: tuple[str, ...] | list[str]) -> str:
        names = [self.table.get(f"field.{name}", name) for name in fields]
        if len(names) <= 1:
            return "".join(names)
        return f"{', '.join(names[:-1])} {self.table['conjunction']} {names[-1]}"

    def describe(self, error: BaseException) -> str:
        """Render ``error`` as one human-readable sentence in the configured language."""

        if isinstance(error, MissingInput):
            return self.text("missing_input", fields=self.join_fields(error.fields))
        if isinstance(error, GenerationRefused):
            return self.text("refused", detail=error.explanation)
        if isinstance(error, ProviderError):
            detail = str(error).strip()
            return self.text("provider", detail=detail) if detail else self.text("generic")
        if isinstance(error, LuxeLensError):
            return self.text(error.message_key, detail=str(error))
        return self.text("generic")
