from __future__ import annotations

import random
from collections import Counter

import pytest

from dreamscene.protocol import SCENE_CONFIG_SCHEMA, ProtocolValidator
from dreamscene.scene import generators
from dreamscene.scene.models import PRIMITIVES, THEMES


def _types(scene) -> Counter:
    return Counter(obj.type for obj in scene.objects)


def test_cosmic_scene_has_fixed_population() -> None:
    scene = generators.generate_cosmic_scene("golden stars", rng=random.Random(3))
    assert len(scene.objects) == 13
    assert _types(scene) == Counter({"sphere": 12, "torus": 1})
    assert scene.lighting.ambient.color == "#1a1a2e"
    assert scene.environment.sky_color == "#0f0f23"
    assert scene.camera.look_at == (0.0, 0.0, -5.0)


def test_cosmic_stars_stay_inside_bounds() -> None:
    scene = generators.generate_cosmic_scene("", rng=random.Random(11))
    stars = scene.objects[1:9]
    for star in stars:
        x, y, z = star.position
        assert -10.0 <= x <= 10.0
        assert -7.5 <= y <= 7.5
        assert -10.0 <= z <= 10.0
        assert star.properties.pulsate is True


def test_same_seed_gives_same_scene() -> None:
    first = generators.generate_underwater_scene("reef", rng=random.Random(42))
    second = generators.generate_underwater_scene("reef", rng=random.Random(42))
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_garden_counts_and_lantern_substitution() -> None:
    plain = generators.generate_garden_scene("a meadow of tulips", rng=random.Random(1))
    assert len(plain.objects) == 1 + 6 * 2 + 3 * 2 + 4 * 2
    assert plain.environment.sky_color == "#87ceeb"

    lit = generators.generate_garden_scene("lanterns over the tulips", rng=random.Random(1))
    assert len(lit.objects) == 1 + 6 * 2 + 3 * 2 + 4
    lanterns = [obj for obj in lit.objects if obj.properties.has_trail]
    assert len(lanterns) == 4
    assert lit.lighting.ambient.intensity == 0.4
    assert lit.environment.sky_color == "#2b2350"
    assert lit.environment.fog_color == "#3b2f4a"


def test_garden_small_viewer_scales_world() -> None:
    normal = generators.generate_garden_scene("a garden", rng=random.Random(5))
    tiny = generators.generate_garden_scene("a garden and I was tiny", rng=random.Random(5))
    assert len(normal.objects) == len(tiny.objects)
    ground, tiny_ground = normal.objects[0], tiny.objects[0]
    assert tiny_ground.scale == pytest.approx(tuple(v * 2.5 for v in ground.scale))
    assert tiny_ground.position == pytest.approx(tuple(v * 2.5 for v in ground.position))
    assert tiny.camera.position == (0.0, -4.2, 14.0)
    assert tiny.camera.look_at == (0.0, 2.0, 0.0)


def test_underwater_counts_and_basketball_variant() -> None:
    sea = generators.generate_underwater_scene("fish in the sea", rng=random.Random(2))
    assert len(sea.objects) == 1 + 5 + 4 + 8 + 12 + 6
    assert _types(sea)["cone"] == 5

    balls = generators.generate_underwater_scene("basketballs under the sea", rng=random.Random(2))
    assert len(balls.objects) == 1 + 3 + 4 + 25 + 20 + 6
    assert _types(balls)["cone"] == 3


def test_narrative_variant_counts() -> None:
    lantern = generators.generate_lantern_scene("", rng=random.Random(0))
    assert len(lantern.objects) == 1 + 7 * 2 + 12 + 20 + 15

    jellyfish = generators.generate_jellyfish_scene("", rng=random.Random(0))
    assert len(jellyfish.objects) == 3 + 15 + 12 + 15 * 5 + 8

    glass = generators.generate_glass_scene("", rng=random.Random(0))
    assert len(glass.objects) == 1 + 5 + 3 + 5 + 20
    assert _types(glass)["torus"] == 8


def test_unknown_theme_falls_back_to_cosmic() -> None:
    scene = generators.generate_curated_scene("volcano", "", rng=random.Random(0))
    assert len(scene.objects) == 13
    assert scene.environment.sky_color == "#0f0f23"


@pytest.mark.parametrize("theme", THEMES)
def test_every_theme_produces_schema_valid_scene(theme: str) -> None:
    scene = generators.generate_curated_scene(theme, "tiny lanterns and basketballs", rng=random.Random(9))
    assert scene.objects
    assert all(obj.type in PRIMITIVES for obj in scene.objects)
    ProtocolValidator().validate(SCENE_CONFIG_SCHEMA, scene.to_dict())
