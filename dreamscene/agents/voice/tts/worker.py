from __future__ import annotations

import base64
import io
import logging
import math
import os
import struct
import wave

import httpx

from dreamscene.agents.voice.errors import VoiceEngineError

logger = logging.getLogger("dreamscene.voice")

TTS_ENGINE_ENV = "DREAMSCENE_TTS_ENGINE"
VOICE_REQUIRE_REAL_ENGINES_ENV = "DREAMSCENE_VOICE_REQUIRE_REAL_ENGINES"
VOICE_TIMEOUT_ENV = "DREAMSCENE_VOICE_TIMEOUT_S"
FISH_AUDIO_API_KEY_ENV = "DREAMSCENE_FISH_AUDIO_API_KEY"
FISH_AUDIO_BASE_URL_ENV = "DREAMSCENE_FISH_AUDIO_BASE_URL"
FISH_AUDIO_MODEL_ENV = "DREAMSCENE_FISH_AUDIO_MODEL"
VOICE_OPENAI_BASE_URL_ENV = "DREAMSCENE_VOICE_OPENAI_BASE_URL"
VOICE_OPENAI_API_KEY_ENV = "DREAMSCENE_VOICE_OPENAI_API_KEY"
VOICE_OPENAI_TTS_MODEL_ENV = "DREAMSCENE_VOICE_TTS_MODEL"

DEFAULT_FISH_AUDIO_BASE_URL = "https://api.fish.audio/v1"
DEFAULT_VOICE = "dreamscene-narrator"

VALID_TTS_ENGINES = {"auto", "fish-audio", "openai-compatible", "tone-fallback"}
REAL_TTS_ENGINES = {"fish-audio", "openai-compatible"}
TRUE_VALUES = {"1", "true", "yes", "on"}

TONE_SAMPLE_RATE = 16000


def synthesize_speech(text: str, voice_id: str | None = None) -> dict:
    safe_text = text.strip() or "No narration provided."
    voice = (voice_id or "").strip() or DEFAULT_VOICE

    engine, mime_type, audio = _render_voice(safe_text, voice_id)
    if require_real_voice_engines() and engine not in REAL_TTS_ENGINES:
        capabilities = tts_capabilities()
        raise VoiceEngineError(
            engine="tts",
            message=(
                "No real TTS engine is configured or available. "
                f"selected={capabilities['selected_engine']}, "
                f"fish_audio_ready={capabilities['fish_audio']['ready']}, "
                f"openai_ready={capabilities['openai_compatible']['ready']}"
            ),
        )

    logger.info("synthesized %s bytes of %s via %s", len(audio), mime_type, engine)
    return {
        "voice": voice,
        "engine": engine,
        "mime_type": mime_type,
        "audio_uri": _data_uri(mime_type, audio),
    }


def tts_capabilities() -> dict:
    fish_key = os.getenv(FISH_AUDIO_API_KEY_ENV, "").strip()
    openai_base_url = os.getenv(VOICE_OPENAI_BASE_URL_ENV, "").strip()
    openai_model = os.getenv(VOICE_OPENAI_TTS_MODEL_ENV, "").strip()
    openai_api_key = os.getenv(VOICE_OPENAI_API_KEY_ENV, "").strip()

    return {
        "selected_engine": _selected_engine(),
        "strict_real_engines": require_real_voice_engines(),
        "real_engines": sorted(REAL_TTS_ENGINES),
        "fish_audio": {
            "base_url": _fish_base_url(),
            "model": _fish_model(),
            "api_key_set": bool(fish_key),
            "ready": bool(fish_key),
        },
        "openai_compatible": {
            "base_url": openai_base_url,
            "model": openai_model,
            "api_key_set": bool(openai_api_key),
            "ready": bool(openai_base_url) and bool(openai_model),
        },
        "tone_fallback": {"ready": True},
    }


def require_real_voice_engines() -> bool:
    raw = os.getenv(VOICE_REQUIRE_REAL_ENGINES_ENV, "")
    return raw.strip().lower() in TRUE_VALUES


def _selected_engine() -> str:
    selected = os.getenv(TTS_ENGINE_ENV, "auto").strip().lower()
    if selected not in VALID_TTS_ENGINES:
        return "auto"
    return selected


def _render_voice(text: str, voice_id: str | None) -> tuple[str, str, bytes]:
    selected_engine = _selected_engine()

    if selected_engine == "fish-audio":
        return _render_with_fish_audio(text, voice_id, required=True)
    if selected_engine == "openai-compatible":
        return _render_with_openai_compatible(text, voice_id, required=True)
    if selected_engine == "tone-fallback":
        return _render_tone(text)

    for render in (_render_with_fish_audio, _render_with_openai_compatible):
        rendered = render(text, voice_id, required=False)
        if rendered is not None:
            return rendered
    return _render_tone(text)


def _render_with_fish_audio(text: str, voice_id: str | None, required: bool) -> tuple[str, str, bytes] | None:
    api_key = os.getenv(FISH_AUDIO_API_KEY_ENV, "").strip()
    if not api_key:
        if required:
            raise VoiceEngineError(engine="fish-audio", message=f"Missing {FISH_AUDIO_API_KEY_ENV}")
        return None

    payload: dict = {
        "text": text,
        "temperature": 0.9,
        "top_p": 0.9,
        "format": "mp3",
        "model": _fish_model(),
    }
    if voice_id:
        payload["reference_id"] = voice_id
    try:
        response = httpx.post(
            f"{_fish_base_url()}/tts",
            json=payload,
            headers={"authorization": f"Bearer {api_key}", "content-type": "application/json"},
            timeout=_timeout_s(),
        )
        response.raise_for_status()
        content = response.content
    except Exception as exc:  # noqa: BLE001
        if required:
            raise VoiceEngineError(engine="fish-audio", message=f"fish-audio synthesis failed: {exc}") from exc
        logger.warning("fish-audio synthesis failed: %s", exc)
        return None

    if not content:
        if required:
            raise VoiceEngineError(engine="fish-audio", message="fish-audio returned empty audio payload")
        return None
    return "fish-audio", "audio/mp3", content


def _render_with_openai_compatible(
    text: str,
    voice_id: str | None,
    required: bool,
) -> tuple[str, str, bytes] | None:
    base_url = os.getenv(VOICE_OPENAI_BASE_URL_ENV, "").strip().rstrip("/")
    model = os.getenv(VOICE_OPENAI_TTS_MODEL_ENV, "").strip()
    if not base_url or not model:
        if required:
            raise VoiceEngineError(
                engine="openai-compatible",
                message=(
                    "Missing required OpenAI-compatible TTS config: "
                    f"{VOICE_OPENAI_BASE_URL_ENV} and {VOICE_OPENAI_TTS_MODEL_ENV}"
                ),
            )
        return None

    headers = {"content-type": "application/json"}
    api_key = os.getenv(VOICE_OPENAI_API_KEY_ENV, "").strip()
    if api_key:
        headers["authorization"] = f"Bearer {api_key}"
    payload = {
        "model": model,
        "input": text,
        "voice": voice_id or "alloy",
        "format": "wav",
    }
    try:
        response = httpx.post(f"{base_url}/audio/speech", json=payload, headers=headers, timeout=_timeout_s())
        response.raise_for_status()
        content = response.content
    except Exception as exc:  # noqa: BLE001
        if required:
            raise VoiceEngineError(
                engine="openai-compatible",
                message=f"openai-compatible synthesis failed: {exc}",
            ) from exc
        logger.warning("openai-compatible synthesis failed: %s", exc)
        return None

    if not content:
        if required:
            raise VoiceEngineError(engine="openai-compatible", message="openai-compatible returned empty audio payload")
        return None
    return "openai-compatible", "audio/wav", content


def _render_tone(text: str) -> tuple[str, str, bytes]:
    duration_ms = max(500, min(len(text) * 40, 8000))
    return "tone-fallback", "audio/wav", _tone_wav(duration_ms, TONE_SAMPLE_RATE)


def _tone_wav(duration_ms: int, sample_rate: int) -> bytes:
    frames = int(sample_rate * (duration_ms / 1000.0))
    sample_bytes = bytearray()
    for frame in range(frames):
        fade = min(1.0, frame / 800.0, (frames - frame) / 800.0)
        sample = int(32767 * 0.2 * fade * math.sin(2 * math.pi * 220.0 * frame / sample_rate))
        sample_bytes.extend(struct.pack("<h", sample))

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_writer:
        wav_writer.setnchannels(1)
        wav_writer.setsampwidth(2)
        wav_writer.setframerate(sample_rate)
        wav_writer.writeframes(bytes(sample_bytes))
    return buffer.getvalue()


def _data_uri(mime_type: str, audio: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(audio).decode('ascii')}"


def _fish_base_url() -> str:
    return os.getenv(FISH_AUDIO_BASE_URL_ENV, DEFAULT_FISH_AUDIO_BASE_URL).strip().rstrip("/")


def _fish_model() -> str:
    return os.getenv(FISH_AUDIO_MODEL_ENV, "s1").strip() or "s1"


def _timeout_s() -> float:
    raw = os.getenv(VOICE_TIMEOUT_ENV, "30").strip()
    try:
        value = float(raw)
    except ValueError:
        return 30.0
    return min(max(value, 1.0), 120.0)


__all__ = ["require_real_voice_engines", "synthesize_speech", "tts_capabilities"]
