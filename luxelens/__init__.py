"""LuxeLens: AI-assisted jewelry photography through Gemini and Imagen."""

from __future__ import annotations

import logging
from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - type checking helper
    from .config import AppConfig, load_config
    from .pipeline import Orchestrator

__all__ = ["AppConfig", "load_config", "Orchestrator"]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def __getattr__(name: str) -> Any:  # pragma: no cover - dispatch helper
    if name in {"AppConfig", "load_config"}:
        module = import_module(".config", __name__)
    elif name == "Orchestrator":
        module = import_module(".pipeline", __name__)
    else:
        raise AttributeError(name)

    value = getattr(module, name)
    globals()[name] = value
    return value
