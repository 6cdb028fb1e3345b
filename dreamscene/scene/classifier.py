from __future__ import annotations

from dreamscene.scene.models import BASE_THEMES, DEFAULT_THEME

COSMIC_KEYWORDS = (
    "star",
    "space",
    "galaxy",
    "nebula",
    "planet",
    "cosmic",
    "universe",
    "constellation",
    "meteor",
    "comet",
    "void",
    "celestial",
    "aurora",
    "moon",
    "orbit",
    "astral",
    "light",
)
GARDEN_KEYWORDS = (
    "flower",
    "tree",
    "garden",
    "forest",
    "leaf",
    "petal",
    "bloom",
    "grass",
    "vine",
    "stem",
    "branch",
    "meadow",
    "rose",
    "lily",
    "sunflower",
    "tulip",
    "lantern",
    "floating",
    "nature",
)
UNDERWATER_KEYWORDS = (
    "ocean",
    "sea",
    "water",
    "fish",
    "coral",
    "wave",
    "underwater",
    "deep",
    "current",
    "bubble",
    "kelp",
    "reef",
    "whale",
    "dolphin",
    "seaweed",
    "jellyfish",
    "pulsing",
    "bioluminescent",
    "glow",
)

# Scored in BASE_THEMES order; equal scores resolve toward the earlier theme.
THEME_KEYWORDS: dict[str, tuple[str, ...]] = dict(
    zip(BASE_THEMES, (COSMIC_KEYWORDS, GARDEN_KEYWORDS, UNDERWATER_KEYWORDS))
)


def _narrative_variant(text: str) -> str | None:
    if "lantern" in text and ("garden" in text or "tree" in text):
        return "lantern"
    if "jellyfish" in text and ("underwater" in text or "cave" in text):
        return "jellyfish"
    if "glass" in text and "planet" in text and "space" in text:
        return "glass"
    return None


def score_themes(description: str) -> dict[str, int]:
    """Count keyword substrings per base theme (not tokenized: "starfish" hits "star")."""
    text = (description or "").lower()
    return {theme: sum(1 for word in keywords if word in text) for theme, keywords in THEME_KEYWORDS.items()}


def classify_scene(description: str) -> str:
    text = (description or "").lower()
    variant = _narrative_variant(text)
    if variant is not None:
        return variant

    scores = score_themes(text)
    best = max(scores.values())
    if best == 0:
        return DEFAULT_THEME
    for theme, score in scores.items():
        if score == best:
            return theme
    return DEFAULT_THEME


__all__ = ["THEME_KEYWORDS", "classify_scene", "score_themes"]
