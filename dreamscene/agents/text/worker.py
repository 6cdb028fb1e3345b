from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from dreamscene.agents.text.adapters import AdapterError, TextProviderAdapter, build_adapters

logger = logging.getLogger("dreamscene.text")

LLM_PROVIDER_ENV = "DREAMSCENE_LLM_PROVIDER"
LLM_MODEL_ENV = "DREAMSCENE_LLM_MODEL"
LLM_ALLOW_FALLBACK_ENV = "DREAMSCENE_LLM_ALLOW_FALLBACK"
LLM_TIMEOUT_ENV = "DREAMSCENE_LLM_TIMEOUT_S"

PROVIDERS = ("heuristic", "ollama", "openai-compatible", "groq")
VALID_PROVIDERS = set(PROVIDERS)
TRUE_VALUES = {"1", "true", "yes", "on"}
CLARIFICATION_PREFIXES = (
    "do you want",
    "would you like",
    "can you clarify",
    "could you describe",
    "should i",
)
NON_ACTIONABLE_HINTS = (
    "i can't",
    "i cannot",
    "i'm unable",
    "unable to",
    "as an ai",
    "need more context",
    "need more detail",
    "need more details",
)

FALLBACK_SUMMARY = (
    "In the realm between sleep and waking, where reality bends and dreams take form, "
    "you find yourself suspended in an ethereal space. Colors dance and shapes float, "
    "each element a fragment of your subconscious, weaving together a tapestry of wonder and mystery."
)


@dataclass
class LLMEngineError(RuntimeError):
    provider: str
    message: str

    def __str__(self) -> str:
        return self.message


def generate_text_response(prompt: str, allow_fallback: bool | None = None) -> str:
    cleaned = prompt.strip()
    if not cleaned:
        return ""

    fallback = _allow_fallback() if allow_fallback is None else allow_fallback
    provider = _selected_provider()
    adapters = build_adapters(timeout_s=_timeout_s())
    heuristic = adapters["heuristic"]
    selected = adapters.get(provider, heuristic)

    try:
        generated = selected.generate(cleaned)
    except AdapterError as exc:
        if fallback:
            logger.warning("provider %s failed, using heuristic: %s", provider, exc)
            return heuristic.generate(cleaned).strip()
        raise LLMEngineError(provider=provider, message=str(exc)) from exc

    text = (generated or "").strip()
    if not text:
        if not fallback:
            raise LLMEngineError(provider=provider, message=f"{provider} returned an empty text response")
        text = heuristic.generate(cleaned)
    elif _looks_like_clarification_request(text) or _looks_non_actionable(text):
        if not fallback:
            raise LLMEngineError(provider=provider, message=f"{provider} returned a non-actionable response")
        text = heuristic.generate(cleaned)
    return text.strip()


def generate_poetic_summary(description: str) -> str:
    """Two or three sentences of atmospheric narration for ``description``.

    Falls back to a fixed dream-realm passage when no real provider is
    configured or the provider fails.
    """
    cleaned = description.strip()
    if not cleaned or _selected_provider() == "heuristic":
        return FALLBACK_SUMMARY

    try:
        text = generate_text_response(_build_summary_request(cleaned), allow_fallback=False)
    except LLMEngineError as exc:
        logger.warning("poetic summary failed via %s: %s", exc.provider, exc)
        return FALLBACK_SUMMARY
    return text.strip('"').strip()


def selected_adapter() -> TextProviderAdapter:
    adapters = build_adapters(timeout_s=_timeout_s())
    return adapters.get(_selected_provider(), adapters["heuristic"])


def llm_capabilities(probe: bool = False) -> dict[str, Any]:
    selected = _selected_provider()
    allow_fallback = _allow_fallback()
    timeout_s = _timeout_s()
    adapters = build_adapters(timeout_s=timeout_s)

    providers: dict[str, dict[str, Any]] = {}
    for provider in PROVIDERS:
        try:
            capabilities = adapters[provider].capabilities(probe=probe)
        except Exception as exc:  # noqa: BLE001
            capabilities = {"ready": False, "error": str(exc)}
        providers[provider] = capabilities

    selected_ready = bool(providers.get(selected, {}).get("ready"))
    effective_provider = selected if selected_ready else ("heuristic" if allow_fallback else selected)
    selected_model = str(providers.get(selected, {}).get("model", "")).strip()

    return {
        "selected_provider": selected,
        "effective_provider": effective_provider,
        "active_provider_ready": selected_ready,
        "effective_ready": selected_ready or allow_fallback,
        "allow_fallback": allow_fallback,
        "timeout_s": timeout_s,
        "model": selected_model or os.getenv(LLM_MODEL_ENV, "").strip(),
        "providers": providers,
    }


def _selected_provider() -> str:
    selected = os.getenv(LLM_PROVIDER_ENV, "heuristic").strip().lower()
    if selected not in VALID_PROVIDERS:
        return "heuristic"
    return selected


def _allow_fallback() -> bool:
    raw = os.getenv(LLM_ALLOW_FALLBACK_ENV)
    if raw is None or not raw.strip():
        return True
    return raw.strip().lower() in TRUE_VALUES


def _timeout_s() -> float:
    raw = os.getenv(LLM_TIMEOUT_ENV, "20").strip()
    try:
        value = float(raw)
    except ValueError:
        return 20.0
    return min(max(value, 0.5), 120.0)


def _looks_like_clarification_request(text: str) -> bool:
    clean = text.strip().lower()
    if "?" not in clean:
        return False
    return any(clean.startswith(prefix) or f" {prefix}" in clean for prefix in CLARIFICATION_PREFIXES)


def _looks_non_actionable(text: str) -> bool:
    clean = text.strip().lower()
    if not clean:
        return True
    return any(hint in clean for hint in NON_ACTIONABLE_HINTS)


def _build_summary_request(description: str) -> str:
    return (
        "You are a poetic narrator. Transform this dream description into a beautiful, "
        "atmospheric narration (2-3 sentences):\n\n"
        f'"{description}"\n\n'
        "Create an evocative, dreamlike narration that captures the essence and mood. "
        "Keep it concise and poetic."
    )


__all__ = [
    "FALLBACK_SUMMARY",
    "LLMEngineError",
    "generate_poetic_summary",
    "generate_text_response",
    "llm_capabilities",
    "selected_adapter",
]
