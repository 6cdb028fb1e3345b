from __future__ import annotations

import os

from dreamscene.config import runtime_config


def test_parse_env_skips_comments_and_strips_quotes(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# providers\n"
        "DREAMSCENE_LLM_PROVIDER=groq\n"
        'DREAMSCENE_GROQ_API_KEY="gsk-123"\n'
        "\n"
        "not a setting\n",
        encoding="utf-8",
    )
    assert runtime_config.parse_env(env_file) == {
        "DREAMSCENE_LLM_PROVIDER": "groq",
        "DREAMSCENE_GROQ_API_KEY": "gsk-123",
    }
    assert runtime_config.parse_env(tmp_path / "missing.env") == {}


def test_apply_env_file_keeps_existing_values(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DREAMSCENE_LLM_PROVIDER=groq\nDREAMSCENE_TTS_ENGINE=fish-audio\nOTHER_SETTING=1\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "ollama")
    monkeypatch.delenv("DREAMSCENE_TTS_ENGINE", raising=False)
    monkeypatch.delenv("OTHER_SETTING", raising=False)

    applied = runtime_config.apply_env_file(env_file)

    assert applied == ["DREAMSCENE_TTS_ENGINE"]
    assert os.environ["DREAMSCENE_LLM_PROVIDER"] == "ollama"
    assert os.environ["DREAMSCENE_TTS_ENGINE"] == "fish-audio"
    assert "OTHER_SETTING" not in os.environ
    monkeypatch.delenv("DREAMSCENE_TTS_ENGINE")


def test_masked_state_hides_secrets() -> None:
    masked = runtime_config.masked_state(
        {
            "DREAMSCENE_GROQ_API_KEY": "gsk-123",
            "DREAMSCENE_FISH_AUDIO_API_KEY": "",
            "DREAMSCENE_LLM_PROVIDER": "groq",
        }
    )
    assert masked["DREAMSCENE_GROQ_API_KEY"] == "********"
    assert masked["DREAMSCENE_FISH_AUDIO_API_KEY"] == ""
    assert masked["DREAMSCENE_LLM_PROVIDER"] == "groq"


def test_validate_setup_flags_missing_keys() -> None:
    result = runtime_config.validate_setup(
        {
            "DREAMSCENE_LLM_PROVIDER": "groq",
            "DREAMSCENE_TTS_ENGINE": "fish-audio",
        }
    )
    assert result["ok"] is False
    assert "DREAMSCENE_GROQ_API_KEY is required for groq provider" in result["errors"]
    assert "DREAMSCENE_FISH_AUDIO_API_KEY is required for fish-audio TTS" in result["errors"]


def test_validate_setup_rejects_unknown_names_and_remote_voice_without_key() -> None:
    result = runtime_config.validate_setup(
        {
            "DREAMSCENE_LLM_PROVIDER": "codex-cli",
            "DREAMSCENE_TTS_ENGINE": "openai-compatible",
            "DREAMSCENE_VOICE_OPENAI_BASE_URL": "https://voice.example.com/v1",
            "DREAMSCENE_VOICE_TTS_MODEL": "tts-1",
        }
    )
    assert "Unsupported LLM provider: codex-cli" in result["errors"]
    assert "DREAMSCENE_VOICE_OPENAI_API_KEY is required for remote openai-compatible TTS" in result["errors"]


def test_validate_setup_defaults_are_ok_with_warning() -> None:
    result = runtime_config.validate_setup({})
    assert result["ok"] is True
    assert result["warnings"]


def test_current_settings_overlays_environment(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DREAMSCENE_LLM_PROVIDER=groq\nOTHER_SETTING=1\n", encoding="utf-8")
    monkeypatch.setenv("DREAMSCENE_LLM_PROVIDER", "ollama")

    values = runtime_config.current_settings(env_file)

    assert values["DREAMSCENE_LLM_PROVIDER"] == "ollama"
    assert "OTHER_SETTING" not in values


def test_normalized_settings_keeps_prefixed_keys() -> None:
    assert runtime_config.normalized_settings({" DREAMSCENE_TTS_ENGINE ": " auto ", "PATH": "/bin"}) == {
        "DREAMSCENE_TTS_ENGINE": "auto"
    }
