from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

LLM_MODEL_ENV = "DREAMSCENE_LLM_MODEL"
LLM_SYSTEM_PROMPT_ENV = "DREAMSCENE_LLM_SYSTEM_PROMPT"
LLM_TEMPERATURE_ENV = "DREAMSCENE_LLM_TEMPERATURE"
LLM_MAX_TOKENS_ENV = "DREAMSCENE_LLM_MAX_TOKENS"
OLLAMA_URL_ENV = "DREAMSCENE_OLLAMA_URL"
OPENAI_BASE_URL_ENV = "DREAMSCENE_OPENAI_BASE_URL"
OPENAI_API_KEY_ENV = "DREAMSCENE_OPENAI_API_KEY"
GROQ_BASE_URL_ENV = "DREAMSCENE_GROQ_BASE_URL"
GROQ_API_KEY_ENV = "DREAMSCENE_GROQ_API_KEY"
GROQ_MODEL_ENV = "DREAMSCENE_GROQ_MODEL"

DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"


@dataclass
class AdapterError(RuntimeError):
    provider: str
    message: str

    def __str__(self) -> str:
        return self.message


class TextProviderAdapter(Protocol):
    name: str

    def generate(self, prompt: str) -> str:
        ...

    def capabilities(self, probe: bool = False) -> dict[str, Any]:
        ...


def _system_prompt() -> str:
    configured = os.getenv(LLM_SYSTEM_PROMPT_ENV, "").strip()
    if configured:
        return configured
    return (
        "You are the creative engine of a dream visualizer. "
        "Dream descriptions are turned into 3D scenes built from simple primitives "
        "(sphere, box, cylinder, cone, torus) and narrated aloud. "
        "Follow the requested output format exactly and never ask clarification questions."
    )


def _temperature() -> float:
    raw = os.getenv(LLM_TEMPERATURE_ENV, "0.8").strip()
    try:
        value = float(raw)
    except ValueError:
        return 0.8
    return min(max(value, 0.0), 2.0)


def _max_tokens() -> int:
    raw = os.getenv(LLM_MAX_TOKENS_ENV, "500").strip()
    try:
        value = int(raw)
    except ValueError:
        return 500
    return min(max(value, 32), 4096)


def _extract_chat_content(payload: dict[str, Any]) -> str:
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content", "")
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts: list[str] = []
        for row in content:
            if not isinstance(row, dict):
                continue
            text = row.get("text")
            if isinstance(text, str) and text.strip():
                parts.append(text.strip())
        return " ".join(parts).strip()
    return ""


def _model(default: str = "") -> str:
    configured = os.getenv(LLM_MODEL_ENV, "").strip()
    return configured or default


@dataclass
class HeuristicAdapter:
    name: str = "heuristic"

    def generate(self, prompt: str) -> str:
        return f"{prompt.strip()}. The dream unfolds in quiet color and slow motion."

    def capabilities(self, probe: bool = False) -> dict[str, Any]:
        return {"ready": True, "note": "Always available built-in fallback"}


@dataclass
class OllamaAdapter:
    timeout_s: float
    name: str = "ollama"

    def _url(self) -> str:
        return os.getenv(OLLAMA_URL_ENV, "http://127.0.0.1:11434").rstrip("/")

    def _model(self) -> str:
        return _model("qwen2.5:7b-instruct")

    def generate(self, prompt: str) -> str:
        model = self._model()
        if not model:
            raise AdapterError(provider=self.name, message=f"Missing {LLM_MODEL_ENV} for ollama provider")
        payload = {
            "model": model,
            "prompt": prompt,
            "system": _system_prompt(),
            "stream": False,
            "options": {"temperature": _temperature(), "num_predict": _max_tokens()},
        }
        try:
            res = httpx.post(f"{self._url()}/api/generate", json=payload, timeout=self.timeout_s)
            res.raise_for_status()
            data = res.json()
        except Exception as exc:  # noqa: BLE001
            raise AdapterError(provider=self.name, message=f"Ollama request failed: {exc}") from exc
        return str(data.get("response", "")).strip()

    def capabilities(self, probe: bool = False) -> dict[str, Any]:
        model = self._model()
        state = {
            "ready": bool(model),
            "base_url": self._url(),
            "model": model,
            "reachable": None,
            "model_available": None,
            "error": "",
        }
        if not probe:
            return state
        try:
            res = httpx.get(f"{self._url()}/api/tags", timeout=min(self.timeout_s, 5.0))
            res.raise_for_status()
            payload = res.json()
            available = False
            rows = payload.get("models", [])
            if isinstance(rows, list):
                for row in rows:
                    if isinstance(row, dict) and str(row.get("name", "")).strip() == model:
                        available = True
                        break
            state["reachable"] = True
            state["model_available"] = available
            state["ready"] = bool(model) and available
            state["error"] = "" if available else f"model '{model}' not found in ollama list"
        except Exception as exc:  # noqa: BLE001
            state["ready"] = False
            state["reachable"] = False
            state["model_available"] = False
            state["error"] = str(exc)
        return state


@dataclass
class OpenAICompatibleAdapter:
    timeout_s: float
    name: str = "openai-compatible"

    def _base_url(self) -> str:
        return os.getenv(OPENAI_BASE_URL_ENV, "http://127.0.0.1:8002/v1").rstrip("/")

    def _api_key(self) -> str:
        return os.getenv(OPENAI_API_KEY_ENV, "").strip()

    def _model(self) -> str:
        return _model("Qwen/Qwen2.5-7B-Instruct")

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"content-type": "application/json"}
        api_key = self._api_key()
        if api_key:
            headers["authorization"] = f"Bearer {api_key}"
        return headers

    def generate(self, prompt: str) -> str:
        model = self._model()
        if not model:
            raise AdapterError(provider=self.name, message=f"Missing {LLM_MODEL_ENV} for {self.name} provider")
        payload = {
            "model": model,
            "temperature": _temperature(),
            "max_tokens": _max_tokens(),
            "messages": [
                {"role": "system", "content": _system_prompt()},
                {"role": "user", "content": prompt},
            ],
        }
        try:
            res = httpx.post(
                f"{self._base_url()}/chat/completions",
                json=payload,
                headers=self._headers(),
                timeout=self.timeout_s,
            )
            res.raise_for_status()
            data = res.json()
        except Exception as exc:  # noqa: BLE001
            raise AdapterError(provider=self.name, message=f"{self.name} request failed: {exc}") from exc
        return _extract_chat_content(data)

    def capabilities(self, probe: bool = False) -> dict[str, Any]:
        model = self._model()
        state = {
            "ready": bool(model),
            "base_url": self._base_url(),
            "model": model,
            "api_key_set": bool(self._api_key()),
            "reachable": None,
            "model_available": None,
            "error": "",
        }
        if not probe:
            return state
        headers = self._headers()
        headers.pop("content-type", None)
        try:
            res = httpx.get(f"{self._base_url()}/models", headers=headers, timeout=min(self.timeout_s, 5.0))
            res.raise_for_status()
            payload = res.json()
            available = False
            rows = payload.get("data", [])
            if isinstance(rows, list):
                for row in rows:
                    if isinstance(row, dict) and str(row.get("id", "")).strip() == model:
                        available = True
                        break
            state["ready"] = bool(model) and available
            state["reachable"] = True
            state["model_available"] = available
            state["error"] = "" if available else f"model '{model}' not found in /models list"
        except Exception as exc:  # noqa: BLE001
            state["ready"] = False
            state["reachable"] = False
            state["model_available"] = False
            state["error"] = str(exc)
        return state


@dataclass
class GroqAdapter(OpenAICompatibleAdapter):
    name: str = "groq"

    def _base_url(self) -> str:
        return os.getenv(GROQ_BASE_URL_ENV, DEFAULT_GROQ_BASE_URL).rstrip("/")

    def _api_key(self) -> str:
        return os.getenv(GROQ_API_KEY_ENV, "").strip()

    def _model(self) -> str:
        configured = os.getenv(GROQ_MODEL_ENV, "").strip()
        if configured:
            return configured
        return _model(DEFAULT_GROQ_MODEL)

    def generate(self, prompt: str) -> str:
        if not self._api_key():
            raise AdapterError(provider=self.name, message=f"Missing {GROQ_API_KEY_ENV} for groq provider")
        return super().generate(prompt)

    def capabilities(self, probe: bool = False) -> dict[str, Any]:
        state = super().capabilities(probe=probe)
        if not self._api_key():
            state["ready"] = False
            state["error"] = state.get("error") or "api_key_missing"
        return state


def build_adapters(timeout_s: float) -> dict[str, TextProviderAdapter]:
    return {
        "heuristic": HeuristicAdapter(),
        "ollama": OllamaAdapter(timeout_s=timeout_s),
        "openai-compatible": OpenAICompatibleAdapter(timeout_s=timeout_s),
        "groq": GroqAdapter(timeout_s=timeout_s),
    }


__all__ = [
    "AdapterError",
    "GroqAdapter",
    "HeuristicAdapter",
    "OllamaAdapter",
    "OpenAICompatibleAdapter",
    "TextProviderAdapter",
    "build_adapters",
]
