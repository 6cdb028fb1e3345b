from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from time import perf_counter

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from pydantic import BaseModel, Field

from dreamscene.agents.text.worker import generate_poetic_summary, llm_capabilities
from dreamscene.agents.visual.worker import generate_dream_scene_enhanced
from dreamscene.agents.voice.errors import VoiceEngineError
from dreamscene.agents.voice.tts.worker import synthesize_speech, tts_capabilities
from dreamscene.config.runtime_config import (
    ENV_PATH,
    apply_env_file,
    current_settings,
    masked_state,
    normalized_settings,
    validate_setup,
)
from dreamscene.protocol import SCENE_CONFIG_SCHEMA, ProtocolValidationError, ProtocolValidator
from dreamscene.scene.models import SceneConfig
from dreamscene.versioning import project_revision, project_version

apply_env_file()

protocol_validator = ProtocolValidator()
MAX_DESCRIPTION_CHARS = 4000

REQUEST_COUNTER = Counter(
    "dreamscene_orchestrator_http_requests_total",
    "Total orchestrator HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "dreamscene_orchestrator_http_latency_seconds",
    "Orchestrator request latency",
    ["method", "path"],
    buckets=(0.01, 0.03, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
DREAM_LATENCY = Histogram(
    "dreamscene_orchestrator_dream_latency_seconds",
    "Full dream processing latency",
    buckets=(0.05, 0.1, 0.2, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0),
)
THEME_COUNTER = Counter(
    "dreamscene_orchestrator_themes_total",
    "Dreams classified per theme",
    ["theme"],
)


class DreamRequest(BaseModel):
    description: str = Field(min_length=1)


class DreamProcessRequest(DreamRequest):
    voice_id: str | None = None


class SpeechRequest(BaseModel):
    text: str = Field(min_length=1)
    voice_id: str | None = None


class SetupValidateRequest(BaseModel):
    values: dict[str, str] = Field(default_factory=dict)


app = FastAPI(title="DreamScene Orchestrator", version=project_version())


@app.middleware("http")
async def metrics_middleware(request, call_next):  # type: ignore[override]
    started = perf_counter()
    response = await call_next(request)
    duration_s = perf_counter() - started
    REQUEST_COUNTER.labels(method=request.method, path=request.url.path, status=str(response.status_code)).inc()
    REQUEST_LATENCY.labels(method=request.method, path=request.url.path).observe(duration_s)
    return response


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "service": "orchestrator",
        "version": project_version(),
        "revision": project_revision(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/v1/llm/capabilities")
def llm_runtime_capabilities() -> dict:
    return llm_capabilities(probe=True)


@app.get("/v1/voice/capabilities")
def voice_runtime_capabilities() -> dict:
    return tts_capabilities()


@app.get("/v1/setup/state")
def setup_state() -> dict:
    return {"state": masked_state(current_settings(ENV_PATH))}


@app.post("/v1/setup/validate")
def setup_validate(req: SetupValidateRequest) -> dict:
    merged = {**current_settings(ENV_PATH), **normalized_settings(req.values)}
    return validate_setup(merged)


def _checked_description(description: str) -> str:
    cleaned = description.strip()
    if not cleaned:
        raise HTTPException(status_code=422, detail={"error": "description_required"})
    if len(description) > MAX_DESCRIPTION_CHARS:
        raise HTTPException(
            status_code=422,
            detail={"error": "description_too_long", "max_chars": MAX_DESCRIPTION_CHARS},
        )
    return cleaned


def _validated_scene(scene: SceneConfig) -> dict:
    payload = scene.to_dict()
    try:
        protocol_validator.validate(SCENE_CONFIG_SCHEMA, payload)
    except ProtocolValidationError as exc:
        raise HTTPException(
            status_code=500,
            detail={"error": "invalid_generated_scene", "issues": exc.issues},
        ) from exc
    return payload


async def _scene_payload(description: str) -> tuple[str, dict]:
    theme, scene = await generate_dream_scene_enhanced(description)
    THEME_COUNTER.labels(theme=theme).inc()
    return theme, _validated_scene(scene)


async def _narration(text: str, voice_id: str | None) -> dict:
    try:
        return await asyncio.to_thread(synthesize_speech, text, voice_id)
    except VoiceEngineError as exc:
        raise HTTPException(
            status_code=503,
            detail={
                "error": "tts_engine_unavailable",
                "engine": exc.engine,
                "message": str(exc),
            },
        ) from exc


@app.post("/v1/dream/scene")
async def dream_scene(req: DreamRequest) -> dict:
    description = _checked_description(req.description)
    theme, scene = await _scene_payload(description)
    return {"theme": theme, "sceneConfig": scene}


@app.post("/v1/dream/process")
async def dream_process(req: DreamProcessRequest) -> dict:
    description = _checked_description(req.description)
    started = perf_counter()

    theme, scene = await _scene_payload(description)
    summary = await asyncio.to_thread(generate_poetic_summary, description)
    narration = await _narration(summary, req.voice_id)

    DREAM_LATENCY.observe(perf_counter() - started)
    return {
        "theme": theme,
        "sceneConfig": scene,
        "summary": summary,
        "narration": narration,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/v1/voice/synthesize")
async def voice_synthesize(req: SpeechRequest) -> dict:
    text = req.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail={"error": "text_required"})
    narration = await _narration(text, req.voice_id)
    return {
        "narration": narration,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
