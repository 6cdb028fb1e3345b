from __future__ import annotations

import pytest

from dreamscene.scene.classifier import classify_scene, score_themes


def test_floating_sky_with_stars_ties_toward_cosmic() -> None:
    text = "I was floating in a purple sky with golden stars"
    assert score_themes(text) == {"cosmic": 1, "garden": 1, "underwater": 0}
    assert classify_scene(text) == "cosmic"


def test_floating_counts_as_garden() -> None:
    text = "floating flowers, ocean fish"
    assert score_themes(text) == {"cosmic": 0, "garden": 2, "underwater": 2}
    assert classify_scene(text) == "garden"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("A meadow full of tulips and a tall tree", "garden"),
        ("Swimming past coral reefs with a whale in the deep sea", "underwater"),
        ("A comet crossing the galaxy near a ringed planet", "cosmic"),
    ],
)
def test_base_themes(text: str, expected: str) -> None:
    assert classify_scene(text) == expected


def test_no_keywords_defaults_to_cosmic() -> None:
    assert classify_scene("I was late for an exam in a hallway") == "cosmic"
    assert classify_scene("") == "cosmic"


def test_tie_resolves_toward_earlier_theme() -> None:
    # one cosmic ("moon"), one garden ("rose"), one underwater ("fish")
    text = "a moon, a rose and a fish"
    assert score_themes(text) == {"cosmic": 1, "garden": 1, "underwater": 1}
    assert classify_scene(text) == "cosmic"

    assert classify_scene("a rose and a fish") == "garden"


def test_matching_is_case_insensitive_substring() -> None:
    assert score_themes("STARFISH")["cosmic"] == 1
    assert score_themes("STARFISH")["underwater"] == 1


def test_narrative_variants_override_scores() -> None:
    assert classify_scene("Paper lanterns drifting through a garden at night") == "lantern"
    assert classify_scene("Glowing jellyfish in an underwater cave") == "jellyfish"
    assert classify_scene("A glass planet spinning in deep space") == "glass"


def test_variant_needs_both_cues() -> None:
    assert classify_scene("a single lantern on a table") == "garden"
    assert classify_scene("a glass of water") == "underwater"
