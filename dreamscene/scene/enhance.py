from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from typing import Any

from dreamscene.agents.text.adapters import TextProviderAdapter
from dreamscene.protocol import SCENE_OBJECT_SCHEMA, ProtocolValidator
from dreamscene.scene.models import SceneConfig, SceneObject, theme_family

logger = logging.getLogger("dreamscene.enhance")

MAX_ENHANCEMENT_OBJECTS = 3

ENHANCEMENT_CATALOG: dict[str, tuple[str, str]] = {
    "cosmic": (
        "planets, stars, and celestial objects",
        "nebula wisps (torus), asteroid belt (small spheres), cosmic rings (torus), "
        "glowing orbs (sphere with emissive), space crystals (cone/cylinder)",
    ),
    "garden": (
        "flowers, trees, and mushrooms",
        "butterfly paths (small moving spheres), garden stones (sphere), fountain center (cylinder), "
        "flower petals (small spheres), hanging fruits (sphere)",
    ),
    "underwater": (
        "fish, coral, and kelp",
        "treasure chest (box), sea anemone (cone), school of fish (multiple small spheres), "
        "water currents (cylinder), sea shells (cone)",
    ),
}

_OUTPUT_FORMAT = """Add ONLY 2-3 objects in this JSON format:
[
  {
    "type": "sphere|box|cylinder|cone|torus",
    "position": [x, y, z],
    "scale": [x, y, z],
    "color": "#hexcolor",
    "properties": {}
  }
]

Respond with ONLY the JSON array of new objects."""


def build_enhancement_prompt(theme: str, text: str) -> str:
    family = theme_family(theme)
    contents, elements = ENHANCEMENT_CATALOG[family]
    return (
        f"You are enhancing a {family} scene. The base scene has {contents}. "
        f'Add 2-3 creative variations based on: "{text.strip()}"\n\n'
        f"Available {family} elements: {elements}.\n\n"
        f"{_OUTPUT_FORMAT}"
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not allowed")


def extract_object_array(text: str) -> list[dict[str, Any]] | None:
    """Return the first JSON array of objects embedded in ``text``.

    Models often wrap the array in prose or code fences, so every ``[`` is
    tried as a decode start until one yields a non-empty list of dicts.
    Fragments containing ``NaN`` or ``Infinity`` are rejected whole.
    """
    decoder = json.JSONDecoder(parse_constant=_reject_constant)
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, list) and value and all(isinstance(row, dict) for row in value):
            return value
        start = text.find("[", start + 1)
    return None


def _accepted_objects(rows: list[dict[str, Any]]) -> list[SceneObject]:
    validator = ProtocolValidator()
    accepted: list[SceneObject] = []
    for row in rows:
        if len(accepted) >= MAX_ENHANCEMENT_OBJECTS:
            break
        if not validator.is_valid(SCENE_OBJECT_SCHEMA, row):
            logger.debug("dropping invalid enhancement object: %s", row)
            continue
        accepted.append(SceneObject.from_dict(row))
    return accepted


async def enhance_scene(
    base: SceneConfig,
    theme: str,
    text: str,
    adapter: TextProviderAdapter,
) -> SceneConfig:
    """Append up to three LLM-proposed objects to ``base``.

    Never raises: any provider or parsing failure returns ``base`` as is.
    """
    prompt = build_enhancement_prompt(theme, text)
    try:
        raw = await asyncio.to_thread(adapter.generate, prompt)
        rows = extract_object_array(raw or "")
        if rows is None:
            logger.warning("enhancement skipped: no object array in %s response", adapter.name)
            return base
        added = _accepted_objects(rows)
    except Exception as exc:  # noqa: BLE001
        logger.warning("enhancement failed via %s: %s", getattr(adapter, "name", "unknown"), exc)
        return base

    if not added:
        logger.warning("enhancement skipped: no valid objects from %s", adapter.name)
        return base
    logger.info("enhanced %s scene with %s objects", theme, len(added))
    return replace(base, objects=base.objects + tuple(added))


__all__ = [
    "ENHANCEMENT_CATALOG",
    "MAX_ENHANCEMENT_OBJECTS",
    "build_enhancement_prompt",
    "enhance_scene",
    "extract_object_array",
]
