from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

__all__ = [
    "AppConfig",
    "HistorySettings",
    "ProviderConfig",
    "SQLiteSettings",
    "SupabaseSettings",
    "load_config",
]

DEFAULT_COMPOSITION_MODEL = "gemini-2.5-flash-image"
DEFAULT_IMAGEN_MODEL = "imagen-4.0-generate-001"
DEFAULT_LANGUAGE = "pt"
API_KEY_VARIABLES = ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class ProviderConfig:
    """Generation provider settings.

    ``api_key`` may be ``None``; the client checks it at call time so a missing
    key fails the invocation rather than the whole process.
    """

    api_key: str | None = None
    composition_model: str = DEFAULT_COMPOSITION_MODEL
    imagen_model: str = DEFAULT_IMAGEN_MODEL

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    anon_key: str
    timeout: float = 30.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", self.url.rstrip("/"))


@dataclass(frozen=True)
class SQLiteSettings:
    database: Path


HistorySettings = Union[SupabaseSettings, SQLiteSettings]


@dataclass(frozen=True)
class AppConfig:
    provider: ProviderConfig
    history: Optional[HistorySettings] = None
    language: str = DEFAULT_LANGUAGE

    @property
    def degraded(self) -> bool:
        """True when results cannot be persisted (no history backend)."""

        return self.history is None

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any] | None,
        environ: Mapping[str, str],
        *,
        base_dir: Path | None = None,
    ) -> "AppConfig":
        raw = raw or {}
        provider_data = _section(raw, "provider")
        history_data = _section(raw, "history")
        ui_data = _section(raw, "ui")

        api_key = next((environ[name] for name in API_KEY_VARIABLES if environ.get(name)), None)
        provider = ProviderConfig(
            api_key=api_key or provider_data.get("api_key") or None,
            composition_model=str(provider_data.get("composition_model") or DEFAULT_COMPOSITION_MODEL),
            imagen_model=str(provider_data.get("imagen_model") or DEFAULT_IMAGEN_MODEL),
        )

        language = str(environ.get("LUXELENS_LANG") or ui_data.get("language") or DEFAULT_LANGUAGE)
        return cls(
            provider=provider,
            history=_history_settings(history_data, environ, base_dir or Path.cwd()),
            language=language.lower(),
        )


def _section(raw: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"configuration section '{key}' must be a mapping")
    return dict(value)


def _supabase_settings(data: Mapping[str, Any], environ: Mapping[str, str]) -> SupabaseSettings | None:
    url = environ.get("SUPABASE_URL") or data.get("url") or ""
    anon_key = environ.get("SUPABASE_ANON_KEY") or data.get("anon_key") or ""
    # Unset variables sometimes leak through deployment tooling as the literal "undefined".
    if not url or not anon_key or url == "undefined":
        return None
    return SupabaseSettings(url=str(url), anon_key=str(anon_key), timeout=float(data.get("timeout", 30.0)))


def _history_settings(
    data: Mapping[str, Any],
    environ: Mapping[str, str],
    base_dir: Path,
) -> HistorySettings | None:
    backend = str(data.get("backend") or "auto").lower()
    supabase = _supabase_settings(data, environ)
    database = environ.get("LUXELENS_HISTORY_DB") or data.get("database")

    if backend == "none":
        return None
    if backend == "supabase":
        return supabase
    if backend == "sqlite":
        return SQLiteSettings(database=base_dir / (database or "history.sqlite"))
    if backend != "auto":
        raise ValueError(f"unknown history backend '{backend}'")

    if supabase is not None:
        return supabase
    if database:
        return SQLiteSettings(database=base_dir / database)
    return None


def load_config(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load ``.env`` and an optional YAML file into an :class:`AppConfig`.

    Credentials from the environment take precedence over the file.
    """

    if environ is None:
        load_dotenv()
        environ = os.environ

    data: Dict[str, Any] = {}
    base_dir = Path.cwd()
    if path is not None:
        text = path.read_text(encoding="utf-8")
        loaded = yaml.safe_load(text)
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")
        data = loaded or {}
        base_dir = path.parent
    return AppConfig.from_mapping(data, environ, base_dir=base_dir)
