from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"

ENV_PREFIX = "DREAMSCENE_"

SECRET_KEYS = {
    "DREAMSCENE_OPENAI_API_KEY",
    "DREAMSCENE_GROQ_API_KEY",
    "DREAMSCENE_FISH_AUDIO_API_KEY",
    "DREAMSCENE_VOICE_OPENAI_API_KEY",
}

VALID_LLM_PROVIDERS = {"heuristic", "ollama", "openai-compatible", "groq"}
VALID_TTS_ENGINES = {"auto", "fish-audio", "openai-compatible", "tone-fallback"}
LOCAL_VOICE_HOSTS = {"127.0.0.1", "localhost", "0.0.0.0", "::1"}
TRUE_VALUES = {"1", "true", "yes", "on"}


def _voice_api_key_required(base_url: str) -> bool:
    parsed = urlparse(base_url)
    host = (parsed.hostname or "").strip().lower()
    if not host:
        return False
    return host not in LOCAL_VOICE_HOSTS


def parse_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        values[key.strip()] = value
    return values


def apply_env_file(path: Path = ENV_PATH) -> list[str]:
    """Load ``path`` into ``os.environ``; variables already set are left alone."""
    applied: list[str] = []
    for key, value in parse_env(path).items():
        if not key.startswith(ENV_PREFIX) or key in os.environ:
            continue
        os.environ[key] = value
        applied.append(key)
    return sorted(applied)


def current_settings(path: Path = ENV_PATH) -> dict[str, str]:
    """``.env`` values overlaid with the live ``DREAMSCENE_*`` environment."""
    values = {key: value for key, value in parse_env(path).items() if key.startswith(ENV_PREFIX)}
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            values[key] = value
    return values


def normalized_settings(values: dict[str, Any]) -> dict[str, str]:
    clean: dict[str, str] = {}
    for key, value in values.items():
        clean_key = str(key).strip()
        if not clean_key.startswith(ENV_PREFIX):
            continue
        clean[clean_key] = str(value).strip()
    return clean


def masked_state(values: dict[str, str]) -> dict[str, str]:
    masked: dict[str, str] = {}
    for key, value in values.items():
        if key in SECRET_KEYS and value:
            masked[key] = "********"
        else:
            masked[key] = value
    return masked


def validate_setup(values: dict[str, str]) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    provider = values.get("DREAMSCENE_LLM_PROVIDER", "").strip().lower() or "heuristic"
    if provider not in VALID_LLM_PROVIDERS:
        errors.append(f"Unsupported LLM provider: {provider}")

    if provider == "ollama":
        if not values.get("DREAMSCENE_OLLAMA_URL", "").strip():
            errors.append("DREAMSCENE_OLLAMA_URL is required for ollama provider")
    if provider == "openai-compatible":
        if not values.get("DREAMSCENE_OPENAI_BASE_URL", "").strip():
            errors.append("DREAMSCENE_OPENAI_BASE_URL is required for openai-compatible provider")
    if provider == "groq":
        if not values.get("DREAMSCENE_GROQ_API_KEY", "").strip():
            errors.append("DREAMSCENE_GROQ_API_KEY is required for groq provider")
    if provider == "heuristic":
        warnings.append("heuristic provider selected; scene enhancement and narration use built-in fallbacks")

    allow_fallback = values.get("DREAMSCENE_LLM_ALLOW_FALLBACK", "").strip().lower()
    if allow_fallback and allow_fallback not in TRUE_VALUES and provider == "heuristic":
        warnings.append("DREAMSCENE_LLM_ALLOW_FALLBACK is off but the heuristic provider is selected")

    tts = values.get("DREAMSCENE_TTS_ENGINE", "").strip().lower() or "auto"
    if tts not in VALID_TTS_ENGINES:
        errors.append(f"Unsupported TTS engine: {tts}")
    if tts == "fish-audio" and not values.get("DREAMSCENE_FISH_AUDIO_API_KEY", "").strip():
        errors.append("DREAMSCENE_FISH_AUDIO_API_KEY is required for fish-audio TTS")
    if tts == "openai-compatible":
        tts_base_url = values.get("DREAMSCENE_VOICE_OPENAI_BASE_URL", "").strip()
        tts_api_key = values.get("DREAMSCENE_VOICE_OPENAI_API_KEY", "").strip()
        if not tts_base_url:
            errors.append("DREAMSCENE_VOICE_OPENAI_BASE_URL is required for openai-compatible TTS")
        if not values.get("DREAMSCENE_VOICE_TTS_MODEL", "").strip():
            errors.append("DREAMSCENE_VOICE_TTS_MODEL is required for openai-compatible TTS")
        if tts_base_url and _voice_api_key_required(tts_base_url) and not tts_api_key:
            errors.append("DREAMSCENE_VOICE_OPENAI_API_KEY is required for remote openai-compatible TTS")

    strict_voice = values.get("DREAMSCENE_VOICE_REQUIRE_REAL_ENGINES", "").strip().lower() in TRUE_VALUES
    if strict_voice and tts == "tone-fallback":
        errors.append("tone-fallback TTS cannot be used when DREAMSCENE_VOICE_REQUIRE_REAL_ENGINES is on")

    return {"ok": len(errors) == 0, "errors": errors, "warnings": warnings}


__all__ = [
    "ENV_PATH",
    "SECRET_KEYS",
    "apply_env_file",
    "current_settings",
    "masked_state",
    "normalized_settings",
    "parse_env",
    "validate_setup",
]
