from __future__ import annotations

import httpx
import pytest

from dreamscene.agents.text import adapters
from dreamscene.agents.text import worker


class _FakeResponse:
    def __init__(self, payload: dict) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> dict:
        return self._payload


def _chat_reply(text: str):
    def fake_post(url, json=None, headers=None, timeout=None):  # noqa: A002
        fake_post.calls.append({"url": url, "json": json, "headers": headers})
        return _FakeResponse({"choices": [{"message": {"content": text}}]})

    fake_post.calls = []
    return fake_post


def _fail_request(*args, **kwargs):  # noqa: ANN002, ANN003
    req = httpx.Request("POST", "http://127.0.0.1:1/v1/chat/completions")
    raise httpx.ConnectError("connection failed", request=req)


def test_generate_text_response_uses_heuristic_by_default(monkeypatch) -> None:
    monkeypatch.delenv("DREAMSCENE_LLM_PROVIDER", raising=False)
    text = worker.generate_text_response("moonlit garden")
    assert "moonlit garden" in text


def test_generate_text_response_falls_back_when_remote_provider_fails(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "true")
    monkeypatch.setenv("DREAMSCENE_LLM_TIMEOUT_S", "0.5")
    monkeypatch.setattr(adapters.httpx, "post", _fail_request)

    text = worker.generate_text_response("ufo landing")
    assert "ufo landing" in text


def test_generate_text_response_raises_without_fallback(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "false")
    monkeypatch.setenv("DREAMSCENE_LLM_TIMEOUT_S", "0.5")
    monkeypatch.setattr(adapters.httpx, "post", _fail_request)

    with pytest.raises(worker.LLMEngineError) as excinfo:
        worker.generate_text_response("ufo landing")
    assert excinfo.value.provider == "openai-compatible"


def test_groq_adapter_posts_chat_completion_with_bearer_key(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "groq")
    monkeypatch.setenv("DREAMSCENE_GROQ_API_KEY", "gsk-test")
    monkeypatch.delenv("DREAMSCENE_GROQ_MODEL", raising=False)
    monkeypatch.delenv("DREAMSCENE_LLM_MODEL", raising=False)
    fake_post = _chat_reply("A quiet galaxy hums beneath your feet.")
    monkeypatch.setattr(adapters.httpx, "post", fake_post)

    text = worker.generate_text_response("walking on stars")

    assert text == "A quiet galaxy hums beneath your feet."
    call = fake_post.calls[0]
    assert call["url"] == "https://api.groq.com/openai/v1/chat/completions"
    assert call["headers"]["authorization"] == "Bearer gsk-test"
    assert call["json"]["model"] == adapters.DEFAULT_GROQ_MODEL


def test_groq_adapter_without_key_raises_adapter_error(monkeypatch) -> None:
    monkeypatch.delenv("DREAMSCENE_GROQ_API_KEY", raising=False)
    with pytest.raises(adapters.AdapterError):
        adapters.GroqAdapter(timeout_s=1.0).generate("hello")


def test_clarification_reply_falls_back_to_heuristic(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "true")
    monkeypatch.setattr(adapters.httpx, "post", _chat_reply("Would you like a longer story?"))

    text = worker.generate_text_response("floating lanterns")
    assert "floating lanterns" in text
    assert "Would you like" not in text


def test_poetic_summary_uses_fallback_for_heuristic_provider(monkeypatch) -> None:
    monkeypatch.delenv("DREAMSCENE_LLM_PROVIDER", raising=False)
    assert worker.generate_poetic_summary("a purple sky") == worker.FALLBACK_SUMMARY


def test_poetic_summary_uses_provider_reply(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    fake_post = _chat_reply('"Stars drip like honey into the violet dusk."')
    monkeypatch.setattr(adapters.httpx, "post", fake_post)

    summary = worker.generate_poetic_summary("a purple sky with golden stars")

    assert summary == "Stars drip like honey into the violet dusk."
    prompt = fake_post.calls[0]["json"]["messages"][1]["content"]
    assert "poetic narrator" in prompt
    assert "a purple sky with golden stars" in prompt


def test_poetic_summary_falls_back_on_provider_failure(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "false")
    monkeypatch.setattr(adapters.httpx, "post", _fail_request)
    assert worker.generate_poetic_summary("a purple sky") == worker.FALLBACK_SUMMARY


def test_selected_adapter_follows_provider_env(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "ollama")
    assert worker.selected_adapter().name == "ollama"
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "not-a-provider")
    assert worker.selected_adapter().name == "heuristic"


def test_llm_capabilities_reports_selected_provider(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "groq")
    monkeypatch.delenv("DREAMSCENE_GROQ_API_KEY", raising=False)
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "true")
    caps = worker.llm_capabilities(probe=False)
    assert caps["selected_provider"] == "groq"
    assert set(caps["providers"]) == {"heuristic", "ollama", "openai-compatible", "groq"}
    assert caps["providers"]["groq"]["ready"] is False
    assert caps["effective_provider"] == "heuristic"


def test_poetic_summary_ignores_heuristic_fallback_setting(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "true")
    monkeypatch.setattr(adapters.httpx, "post", _fail_request)
    assert worker.generate_poetic_summary("a purple sky") == worker.FALLBACK_SUMMARY

    monkeypatch.setattr(adapters.httpx, "post", _chat_reply("Could you describe the sky? I need more detail."))
    assert worker.generate_poetic_summary("a purple sky") == worker.FALLBACK_SUMMARY


def test_generate_text_response_explicit_strict_mode(monkeypatch) -> None:
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "openai-compatible")
    monkeypatch.setenv("DREAMSCENE_LLM_ALLOW_FALLBACK", "true")
    monkeypatch.setattr(adapters.httpx, "post", _chat_reply(""))

    assert "tide pools" in worker.generate_text_response("tide pools")
    with pytest.raises(worker.LLMEngineError):
        worker.generate_text_response("tide pools", allow_fallback=False)
