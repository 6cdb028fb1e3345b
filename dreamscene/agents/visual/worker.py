from __future__ import annotations

import logging
import random

from dreamscene.agents.text.adapters import TextProviderAdapter
from dreamscene.agents.text.worker import selected_adapter
from dreamscene.scene.classifier import classify_scene
from dreamscene.scene.enhance import enhance_scene
from dreamscene.scene.generators import generate_curated_scene
from dreamscene.scene.models import SceneConfig

logger = logging.getLogger("dreamscene.visual")


def generate_dream_scene(description: str, rng: random.Random | None = None) -> tuple[str, SceneConfig]:
    theme = classify_scene(description)
    scene = generate_curated_scene(theme, description, rng=rng)
    logger.info("classified dream as %s, generated %s objects", theme, len(scene.objects))
    return theme, scene


async def generate_dream_scene_enhanced(
    description: str,
    adapter: TextProviderAdapter | None = None,
    rng: random.Random | None = None,
) -> tuple[str, SceneConfig]:
    theme, scene = generate_dream_scene(description, rng=rng)
    active = adapter if adapter is not None else selected_adapter()
    if active.name == "heuristic":
        return theme, scene
    return theme, await enhance_scene(scene, theme, description, active)


__all__ = ["generate_dream_scene", "generate_dream_scene_enhanced"]
