from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Callable

from dreamscene.scene.materials import get_material, get_material_with_color, resolve_contextual
from dreamscene.scene.models import (
    DEFAULT_THEME,
    Camera,
    Environment,
    LightSpec,
    Lighting,
    MaterialProperties,
    SceneConfig,
    SceneObject,
    Vec3,
)

SMALL_VIEWER_CUES = ("tiny", "small", "shrunk", "miniature", "ant-sized", "the size of")
SMALL_VIEWER_SCALE = 2.5

FLOWER_PALETTE = ("#ff6b9d", "#feca57", "#ff9ff3", "#54a0ff", "#5f27cd", "#ff3838")
LANTERN_PALETTE = ("#ff9c41", "#ffc641", "#ff7c41", "#ffe141")
WILDFLOWER_PALETTE = ("#ff4081", "#e040fb", "#7c4dff", "#ff5252", "#ffeb3b")
ORBIT_PALETTE = ("#ff6b6b", "#4ecdc4", "#45b7d1")
CORAL_PALETTE = ("#ff7f50", "#ff6347", "#ffa500", "#ff1493", "#da70d6")
FISH_PALETTE = ("#ff6b35", "#f7931e", "#40e0d0", "#ff69b4", "#9370db", "#00ced1", "#32cd32", "#ff4500")
BASKETBALL_PALETTE = ("#ee6730", "#d35400", "#f39c12")
JELLYFISH_PALETTE = ("#4cc9f0", "#4895ef", "#4361ee", "#3f37c9", "#f72585")
TENTACLE_PALETTE = ("#4cc9f0", "#4895ef", "#4361ee")
GLASS_PLANET_PALETTE = ("#88c6db", "#c0fdff", "#a0ced9", "#97d8ec", "#acd8aa")
LIGHT_RING_PALETTE = ("#ffcc00", "#ff5e5b", "#d65bd1")
OUTER_RING_PALETTE = ("#84dfff", "#91f5ad", "#fdffab", "#ffd3ba", "#fca3cc")

COSMIC_STAR_COUNT = 8
COSMIC_ORBIT_COUNT = 3
GARDEN_FLOWER_COUNT = 6
GARDEN_TREE_COUNT = 3
GARDEN_MUSHROOM_COUNT = 4
CORAL_COUNT = 5
BASKETBALL_CORAL_COUNT = 3
KELP_COUNT = 4
FISH_COUNT = 8
BASKETBALL_COUNT = 25
BUBBLE_COUNT = 12
BASKETBALL_BUBBLE_COUNT = 20
SEA_ROCK_COUNT = 6
LANTERN_TREE_COUNT = 7
LANTERN_COUNT = 12
LANTERN_FLOWER_COUNT = 15
STALACTITE_COUNT = 15
STALAGMITE_COUNT = 12
JELLYFISH_COUNT = 15
TENTACLES_PER_JELLYFISH = 4
CAVE_ROCK_COUNT = 8
GLASS_PLANET_COUNT = 5
LIGHT_RING_COUNT = 3
GLASS_STAR_COUNT = 20


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def _spread(rng: random.Random, span: float) -> float:
    return rng.uniform(-span / 2.0, span / 2.0)


def _random_euler(rng: random.Random) -> Vec3:
    return (rng.uniform(0.0, math.pi), rng.uniform(0.0, math.pi), rng.uniform(0.0, math.pi))


def _lantern_material() -> MaterialProperties:
    return replace(
        get_material_with_color("luminous", "#ff5e00"),
        emissive_intensity=0.8,
        has_trail=True,
        has_particles=True,
    )


def _scaled(obj: SceneObject, factor: float) -> SceneObject:
    position = (obj.position[0] * factor, obj.position[1] * factor, obj.position[2] * factor)
    scale = obj.scale or (1.0, 1.0, 1.0)
    return replace(obj, position=position, scale=(scale[0] * factor, scale[1] * factor, scale[2] * factor))


def _has_any(text: str, cues: tuple[str, ...]) -> bool:
    return any(cue in text for cue in cues)


def generate_cosmic_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "cosmic"
    objects: list[SceneObject] = [
        SceneObject(
            type="sphere",
            position=(0.0, 0.0, -5.0),
            scale=(3.0, 3.0, 3.0),
            color="#4a90e2",
            properties=replace(resolve_contextual(theme, "focal", "sphere"), emissive="#1a4480", metalness=0.8),
        )
    ]

    for _ in range(COSMIC_STAR_COUNT):
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 20), _spread(rng, 15), _spread(rng, 20)),
                scale=(0.1, 0.1, 0.1),
                color="#ffffff",
                properties=get_material_with_color("cosmic_star", "#ffff88"),
            )
        )

    phase = rng.uniform(0.0, 2.0 * math.pi / COSMIC_ORBIT_COUNT)
    for idx in range(COSMIC_ORBIT_COUNT):
        angle = phase + (idx / COSMIC_ORBIT_COUNT) * 2.0 * math.pi
        radius = 8.0 + idx * 2.0
        objects.append(
            SceneObject(
                type="sphere",
                position=(math.cos(angle) * radius, math.sin(angle) * 2.0, math.sin(angle) * radius),
                scale=(0.8, 0.8, 0.8),
                color=ORBIT_PALETTE[idx % len(ORBIT_PALETTE)],
                properties=replace(get_material("metal"), metalness=0.9),
            )
        )

    objects.append(
        SceneObject(
            type="torus",
            position=(0.0, 0.0, -5.0),
            rotation=(math.pi / 4, 0.0, math.pi / 6),
            scale=(5.0, 5.0, 5.0),
            color="#9b59b6",
            properties=resolve_contextual(theme, "midground", "torus"),
        )
    )

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=LightSpec(color="#1a1a2e", intensity=0.3),
            directional=LightSpec(color="#4a90e2", intensity=0.8, position=(5.0, 10.0, 10.0)),
        ),
        camera=Camera(position=(0.0, 5.0, 15.0), look_at=(0.0, 0.0, -5.0)),
        environment=Environment(sky_color="#0f0f23", fog_color="#1a1a2e", fog_density=0.01),
    )


def generate_garden_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "garden"
    text = (description or "").lower()
    small_viewer = _has_any(text, SMALL_VIEWER_CUES)
    lanterns = "lantern" in text

    objects: list[SceneObject] = [
        SceneObject(
            type="box",
            position=(0.0, -2.0, 0.0),
            scale=(20.0, 0.2, 20.0),
            color="#2d5016",
            properties=resolve_contextual(theme, "background", "box"),
        )
    ]

    for idx in range(GARDEN_FLOWER_COUNT):
        x, z = _spread(rng, 15), _spread(rng, 15)
        bloom_color = FLOWER_PALETTE[idx % len(FLOWER_PALETTE)]
        objects.append(
            SceneObject(
                type="cylinder",
                position=(x, -0.5, z),
                scale=(0.1, 1.5, 0.1),
                color="#4a7c59",
                properties=get_material("garden_leaf"),
            )
        )
        objects.append(
            SceneObject(
                type="sphere",
                position=(x, 0.7, z),
                scale=(0.8, 0.8, 0.8),
                color=bloom_color,
                properties=replace(resolve_contextual(theme, "foreground", "sphere"), emissive=bloom_color),
            )
        )

    for _ in range(GARDEN_TREE_COUNT):
        x, z = _spread(rng, 12), _spread(rng, 12)
        objects.append(
            SceneObject(
                type="cylinder",
                position=(x, 1.0, z),
                scale=(0.3, 3.0, 0.3),
                color="#8b4513",
                properties=resolve_contextual(theme, "midground", "cylinder"),
            )
        )
        objects.append(
            SceneObject(
                type="sphere",
                position=(x, 3.5, z),
                scale=(2.0, 2.0, 2.0),
                color="#228b22",
                properties=replace(get_material("garden_leaf"), roughness=0.7),
            )
        )

    for idx in range(GARDEN_MUSHROOM_COUNT):
        x, z = _spread(rng, 10), _spread(rng, 10)
        if lanterns:
            objects.append(
                SceneObject(
                    type="sphere",
                    position=(x, rng.uniform(0.5, 3.0), z),
                    scale=(0.5, 0.7, 0.5),
                    color=LANTERN_PALETTE[idx % len(LANTERN_PALETTE)],
                    properties=_lantern_material(),
                )
            )
            continue
        objects.append(
            SceneObject(
                type="cylinder",
                position=(x, -1.3, z),
                scale=(0.1, 0.4, 0.1),
                color="#f5f5dc",
                properties=resolve_contextual(theme, "detail", "cylinder"),
            )
        )
        objects.append(
            SceneObject(
                type="sphere",
                position=(x, -0.7, z),
                scale=(0.5, 0.3, 0.5),
                color="#dc143c",
                properties=replace(get_material("organic"), roughness=0.4),
            )
        )

    camera = Camera(position=(0.0, 8.0, 12.0), look_at=(0.0, 0.0, 0.0))
    if small_viewer:
        objects = [_scaled(obj, SMALL_VIEWER_SCALE) for obj in objects]
        camera = Camera(position=(0.0, -4.2, 14.0), look_at=(0.0, 2.0, 0.0))

    ambient = LightSpec(color="#87ceeb", intensity=0.6)
    environment = Environment(sky_color="#87ceeb", fog_color="#98fb98", fog_density=0.005)
    if lanterns:
        ambient = LightSpec(color="#87ceeb", intensity=0.4)
        environment = Environment(sky_color="#2b2350", fog_color="#3b2f4a", fog_density=0.005)

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=ambient,
            directional=LightSpec(color="#ffd700", intensity=1.2, position=(5.0, 10.0, 5.0)),
        ),
        camera=camera,
        environment=environment,
    )


def generate_underwater_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "underwater"
    text = (description or "").lower()
    basketball = "basketball" in text
    coral_count = BASKETBALL_CORAL_COUNT if basketball else CORAL_COUNT
    bubble_count = BASKETBALL_BUBBLE_COUNT if basketball else BUBBLE_COUNT

    objects: list[SceneObject] = [
        SceneObject(
            type="box",
            position=(0.0, -3.0, 0.0),
            scale=(25.0, 0.5, 25.0),
            color="#8b7355",
            properties=get_material("underwater_sand"),
        )
    ]

    for idx in range(coral_count):
        coral_color = CORAL_PALETTE[idx % len(CORAL_PALETTE)]
        objects.append(
            SceneObject(
                type="cone",
                position=(_spread(rng, 20), -1.5, _spread(rng, 20)),
                scale=(1.0, 2.0, 1.0),
                color=coral_color,
                properties=replace(resolve_contextual(theme, "midground", "cone"), emissive=coral_color),
            )
        )

    for _ in range(KELP_COUNT):
        objects.append(
            SceneObject(
                type="cylinder",
                position=(_spread(rng, 15), 1.0, _spread(rng, 15)),
                scale=(0.2, 6.0, 0.2),
                color="#556b2f",
                properties=resolve_contextual(theme, "background", "cylinder"),
            )
        )

    if basketball:
        for idx in range(BASKETBALL_COUNT):
            objects.append(
                SceneObject(
                    type="sphere",
                    position=(_spread(rng, 20), rng.uniform(-1.0, 6.0), _spread(rng, 20)),
                    rotation=_random_euler(rng),
                    scale=(0.6, 0.6, 0.6),
                    color=BASKETBALL_PALETTE[idx % len(BASKETBALL_PALETTE)],
                    properties=replace(
                        get_material("organic"),
                        roughness=0.7,
                        floating=True,
                        float_amplitude=0.4,
                        float_speed=0.6,
                    ),
                )
            )
    else:
        for idx in range(FISH_COUNT):
            objects.append(
                SceneObject(
                    type="sphere",
                    position=(_spread(rng, 18), rng.uniform(-1.0, 5.0), _spread(rng, 18)),
                    rotation=(0.0, rng.uniform(0.0, 2.0 * math.pi), 0.0),
                    scale=(1.2, 0.6, 0.4),
                    color=FISH_PALETTE[idx % len(FISH_PALETTE)],
                    properties=replace(resolve_contextual(theme, "foreground", "sphere"), metalness=0.5, roughness=0.2),
                )
            )

    for _ in range(bubble_count):
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 20), rng.uniform(0.0, 8.0), _spread(rng, 20)),
                scale=(0.2, 0.2, 0.2),
                color="#ffffff",
                properties=get_material("underwater_water"),
            )
        )

    for _ in range(SEA_ROCK_COUNT):
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 18), -2.2, _spread(rng, 18)),
                scale=(1.5, 1.0, 1.5),
                color="#696969",
                properties=replace(get_material("organic"), roughness=0.9),
            )
        )

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=LightSpec(color="#4682b4", intensity=0.7),
            directional=LightSpec(color="#87ceeb", intensity=0.9, position=(2.0, 8.0, 3.0)),
        ),
        camera=Camera(position=(0.0, 3.0, 15.0), look_at=(0.0, 0.0, 0.0)),
        environment=Environment(sky_color="#4682b4", fog_color="#5f9ea0", fog_density=0.02),
    )


def generate_lantern_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "lantern"
    objects: list[SceneObject] = [
        SceneObject(
            type="box",
            position=(0.0, -2.0, 0.0),
            scale=(25.0, 0.2, 25.0),
            color="#243010",
            properties=resolve_contextual(theme, "background", "box"),
        )
    ]

    for _ in range(LANTERN_TREE_COUNT):
        x, z = _spread(rng, 20), _spread(rng, 20)
        objects.append(
            SceneObject(
                type="cylinder",
                position=(x, 1.0, z),
                scale=(0.4, 5.0, 0.4),
                color="#3d2817",
                properties=resolve_contextual(theme, "midground", "cylinder"),
            )
        )
        objects.append(
            SceneObject(
                type="sphere",
                position=(x, 4.5, z),
                scale=(2.5, 3.0, 2.5),
                color="#114322",
                properties=replace(get_material("garden_leaf"), roughness=0.7),
            )
        )

    for idx in range(LANTERN_COUNT):
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 18), rng.uniform(2.0, 7.0), _spread(rng, 18)),
                scale=(0.7, 1.0, 0.7),
                color=LANTERN_PALETTE[idx % len(LANTERN_PALETTE)],
                properties=_lantern_material(),
            )
        )

    for step in range(-10, 10):
        objects.append(
            SceneObject(
                type="box",
                position=(float(step), -1.9, step * 0.5),
                scale=(1.0, 0.05, 1.0),
                color="#85714e",
                properties=replace(get_material("garden_stone"), roughness=1.0),
            )
        )

    for idx in range(LANTERN_FLOWER_COUNT):
        flower_color = WILDFLOWER_PALETTE[idx % len(WILDFLOWER_PALETTE)]
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 20), -1.2, _spread(rng, 20)),
                scale=(0.3, 0.3, 0.3),
                color=flower_color,
                properties=replace(get_material_with_color("garden_flower", flower_color), roughness=0.3),
            )
        )

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=LightSpec(color="#3b2f4a", intensity=0.4),
            directional=LightSpec(color="#fffbe8", intensity=0.8, position=(5.0, 8.0, 5.0)),
        ),
        camera=Camera(position=(0.0, 6.0, 15.0), look_at=(0.0, 3.0, 0.0)),
        environment=Environment(sky_color="#12131e", fog_color="#2e284a", fog_density=0.02),
    )


def generate_jellyfish_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "jellyfish"
    rock = replace(get_material("organic"), roughness=0.9)
    objects: list[SceneObject] = [
        SceneObject(
            type="cylinder",
            position=(0.0, 0.0, 0.0),
            rotation=(0.0, 0.0, 0.0),
            scale=(25.0, 20.0, 25.0),
            color="#162037",
            properties=replace(get_material("organic"), roughness=1.0, side="back"),
        ),
        SceneObject(
            type="box",
            position=(0.0, -9.5, 0.0),
            scale=(40.0, 1.0, 40.0),
            color="#0a1625",
            properties=rock,
        ),
        SceneObject(
            type="box",
            position=(0.0, 10.0, 0.0),
            scale=(40.0, 1.0, 40.0),
            color="#0a1625",
            properties=rock,
        ),
    ]

    for _ in range(STALACTITE_COUNT):
        height = rng.uniform(2.0, 5.0)
        objects.append(
            SceneObject(
                type="cone",
                position=(_spread(rng, 20), 8.5 - height / 2.0, _spread(rng, 20)),
                rotation=(math.pi, 0.0, 0.0),
                scale=(0.5, height, 0.5),
                color="#19293b",
                properties=rock,
            )
        )

    for _ in range(STALAGMITE_COUNT):
        height = rng.uniform(1.5, 4.5)
        objects.append(
            SceneObject(
                type="cone",
                position=(_spread(rng, 20), -9.0 + height / 2.0, _spread(rng, 20)),
                scale=(0.6, height, 0.6),
                color="#19293b",
                properties=rock,
            )
        )

    dome = replace(
        get_material_with_color("ethereal", "#4cc9f0"),
        emissive_intensity=1.0,
        opacity=0.8,
        has_trail=True,
        has_particles=True,
    )
    tentacle = replace(resolve_contextual(theme, "detail", "cylinder"), opacity=0.6)
    for idx in range(JELLYFISH_COUNT):
        x, y, z = _spread(rng, 18), rng.uniform(-4.0, 10.0), _spread(rng, 18)
        size = rng.uniform(0.4, 1.0)
        objects.append(
            SceneObject(
                type="sphere",
                position=(x, y, z),
                scale=(size, size * 0.7, size),
                color=JELLYFISH_PALETTE[idx % len(JELLYFISH_PALETTE)],
                properties=dome,
            )
        )
        for strand in range(TENTACLES_PER_JELLYFISH):
            angle = (strand / TENTACLES_PER_JELLYFISH) * 2.0 * math.pi
            length = size * rng.uniform(0.8, 1.3)
            objects.append(
                SceneObject(
                    type="cylinder",
                    position=(x + math.cos(angle) * size * 0.4, y - length / 2.0, z + math.sin(angle) * size * 0.4),
                    scale=(size * 0.05, length, size * 0.05),
                    color=TENTACLE_PALETTE[strand % len(TENTACLE_PALETTE)],
                    properties=tentacle,
                )
            )

    for _ in range(CAVE_ROCK_COUNT):
        size = rng.uniform(0.5, 2.0)
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 20), -8.0, _spread(rng, 20)),
                rotation=_random_euler(rng),
                scale=(size, size * 0.6, size),
                color="#243b47",
                properties=replace(get_material("organic"), roughness=1.0),
            )
        )

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=LightSpec(color="#0a3a64", intensity=0.3),
            directional=LightSpec(color="#4cc9f0", intensity=0.5, position=(0.0, 5.0, 5.0)),
        ),
        camera=Camera(position=(0.0, 0.0, 15.0), look_at=(0.0, 0.0, 0.0)),
        environment=Environment(sky_color="#0a1625", fog_color="#0a2540", fog_density=0.04),
    )


def generate_glass_scene(description: str, rng: random.Random | None = None) -> SceneConfig:
    rng = _rng(rng)
    theme = "glass"
    glass = get_material("glass")
    objects: list[SceneObject] = [
        SceneObject(
            type="sphere",
            position=(0.0, 0.0, -5.0),
            scale=(4.0, 4.0, 4.0),
            color="#a7c5eb",
            properties=replace(
                glass,
                opacity=0.6,
                refraction_ratio=0.98,
                reflectivity=1.0,
                emissive="#a7c5eb",
                emissive_intensity=0.2,
                has_particles=True,
            ),
        )
    ]

    orbit: list[Vec3] = []
    for idx in range(GLASS_PLANET_COUNT):
        angle = (idx / GLASS_PLANET_COUNT) * 2.0 * math.pi
        position = (math.cos(angle) * 12.0, _spread(rng, 6), math.sin(angle) * 12.0)
        orbit.append(position)
        size = rng.uniform(0.8, 2.3)
        objects.append(
            SceneObject(
                type="sphere",
                position=position,
                scale=(size, size, size),
                color=GLASS_PLANET_PALETTE[idx % len(GLASS_PLANET_PALETTE)],
                properties=replace(glass, opacity=0.7, refraction_ratio=0.95, has_particles=True),
            )
        )

    for idx in range(LIGHT_RING_COUNT):
        ring_scale = idx * 1.2 + 5.0
        ring_color = LIGHT_RING_PALETTE[idx % len(LIGHT_RING_PALETTE)]
        objects.append(
            SceneObject(
                type="torus",
                position=(0.0, 0.0, -5.0),
                rotation=(math.pi / 3 * idx, math.pi / 4, 0.0),
                scale=(ring_scale, ring_scale, 0.1),
                color=ring_color,
                properties=replace(
                    resolve_contextual(theme, "focal", "torus"),
                    opacity=0.4,
                    emissive=ring_color,
                    emissive_intensity=0.8,
                    has_trail=True,
                ),
            )
        )

    for idx, position in enumerate(orbit):
        size = rng.uniform(1.0, 2.5)
        ring_color = OUTER_RING_PALETTE[idx % len(OUTER_RING_PALETTE)]
        objects.append(
            SceneObject(
                type="torus",
                position=position,
                rotation=_random_euler(rng),
                scale=(size, size, 0.05),
                color=ring_color,
                properties=replace(
                    resolve_contextual(theme, "detail", "torus"),
                    opacity=0.5,
                    emissive=ring_color,
                    emissive_intensity=0.6,
                ),
            )
        )

    for _ in range(GLASS_STAR_COUNT):
        objects.append(
            SceneObject(
                type="sphere",
                position=(_spread(rng, 40), _spread(rng, 30), _spread(rng, 40)),
                scale=(0.1, 0.1, 0.1),
                color="#ffffff",
                properties=replace(get_material_with_color("cosmic_star", "#ffffff"), emissive_intensity=1.0),
            )
        )

    return SceneConfig(
        objects=tuple(objects),
        lighting=Lighting(
            ambient=LightSpec(color="#050c24", intensity=0.2),
            directional=LightSpec(color="#ffffff", intensity=0.6, position=(10.0, 10.0, 10.0)),
        ),
        camera=Camera(position=(0.0, 0.0, 20.0), look_at=(0.0, 0.0, 0.0)),
        environment=Environment(sky_color="#000000", fog_color="#050a1c", fog_density=0.01),
    )


SceneGenerator = Callable[..., SceneConfig]

_GENERATORS: dict[str, SceneGenerator] = {
    "cosmic": generate_cosmic_scene,
    "garden": generate_garden_scene,
    "underwater": generate_underwater_scene,
    "lantern": generate_lantern_scene,
    "jellyfish": generate_jellyfish_scene,
    "glass": generate_glass_scene,
}


def generate_curated_scene(theme: str, description: str, rng: random.Random | None = None) -> SceneConfig:
    generator = _GENERATORS.get(str(theme), _GENERATORS[DEFAULT_THEME])
    return generator(description, rng)


__all__ = [
    "SMALL_VIEWER_CUES",
    "generate_cosmic_scene",
    "generate_curated_scene",
    "generate_garden_scene",
    "generate_glass_scene",
    "generate_jellyfish_scene",
    "generate_lantern_scene",
    "generate_underwater_scene",
]
