from __future__ import annotations

from dataclasses import dataclass, replace

from dreamscene.scene.models import MaterialProperties, theme_family

ROLES = ("background", "midground", "foreground", "focal", "detail")

_ROLE_INTENSITY = {
    "focal": 1.0,
    "foreground": 0.8,
    "midground": 0.6,
    "background": 0.4,
    "detail": 0.3,
}
_DEFAULT_ROLE_INTENSITY = 0.5
FALLBACK_PRESET = "organic"


@dataclass
class UnknownMaterialError(LookupError):
    preset: str

    def __str__(self) -> str:
        return f"unknown material preset: {self.preset!r}"


_PRESETS: dict[str, MaterialProperties] = {
    "cosmic_star": MaterialProperties(
        metalness=0.1,
        roughness=0.1,
        emissive="#ffff88",
        emissive_intensity=0.8,
        pulsate=True,
        pulsate_speed=2.0,
        env_map_intensity=0.5,
    ),
    "cosmic_planet": MaterialProperties(
        metalness=0.2,
        roughness=0.8,
        env_map_intensity=0.7,
        rotate=True,
        rotate_speed=(0.0, 0.002, 0.0),
    ),
    "cosmic_nebula": MaterialProperties(
        metalness=0.0,
        roughness=0.2,
        transparent=True,
        opacity=0.6,
        emissive="#9b59b6",
        emissive_intensity=0.4,
        floating=True,
        float_amplitude=0.5,
        float_speed=0.8,
    ),
    "cosmic_crystal": MaterialProperties(
        metalness=0.0,
        roughness=0.1,
        transparent=True,
        opacity=0.8,
        clearcoat=1.0,
        clearcoat_roughness=0.1,
        emissive="#4a90e2",
        emissive_intensity=0.3,
        env_map_intensity=1.0,
    ),
    "cosmic_ring": MaterialProperties(
        metalness=0.8,
        roughness=0.3,
        transparent=True,
        opacity=0.7,
        emissive="#7a288a",
        emissive_intensity=0.2,
        rotate=True,
        rotate_speed=(0.0, 0.01, 0.0),
    ),
    "garden_flower": MaterialProperties(
        metalness=0.0,
        roughness=0.6,
        emissive="#ff69b4",
        emissive_intensity=0.1,
        floating=True,
        float_amplitude=0.1,
        float_speed=1.5,
    ),
    "garden_leaf": MaterialProperties(
        metalness=0.0,
        roughness=0.8,
        transparent=True,
        opacity=0.9,
        floating=True,
        float_amplitude=0.05,
        float_speed=0.5,
    ),
    "garden_bark": MaterialProperties(metalness=0.0, roughness=0.9, env_map_intensity=0.2),
    "garden_ground": MaterialProperties(metalness=0.0, roughness=1.0, env_map_intensity=0.1),
    "garden_stone": MaterialProperties(metalness=0.1, roughness=0.9, env_map_intensity=0.3),
    "underwater_coral": MaterialProperties(
        metalness=0.0,
        roughness=0.7,
        emissive="#ff7f50",
        emissive_intensity=0.2,
        floating=True,
        float_amplitude=0.02,
        float_speed=0.3,
    ),
    "underwater_fish": MaterialProperties(
        metalness=0.4,
        roughness=0.2,
        env_map_intensity=0.8,
        floating=True,
        float_amplitude=0.3,
        float_speed=2.0,
    ),
    "underwater_kelp": MaterialProperties(
        metalness=0.0,
        roughness=0.8,
        transparent=True,
        opacity=0.9,
        floating=True,
        float_amplitude=0.8,
        float_speed=0.4,
    ),
    "underwater_water": MaterialProperties(
        metalness=0.0,
        roughness=0.1,
        transparent=True,
        opacity=0.3,
        env_map_intensity=1.0,
        floating=True,
        float_amplitude=0.1,
        float_speed=1.0,
    ),
    "underwater_sand": MaterialProperties(metalness=0.1, roughness=0.9, env_map_intensity=0.2),
    "glass": MaterialProperties(
        metalness=0.0,
        roughness=0.1,
        transparent=True,
        opacity=0.2,
        clearcoat=1.0,
        clearcoat_roughness=0.1,
        env_map_intensity=1.0,
    ),
    "metal": MaterialProperties(metalness=1.0, roughness=0.2, env_map_intensity=1.0),
    "organic": MaterialProperties(metalness=0.0, roughness=0.8, env_map_intensity=0.3),
    "luminous": MaterialProperties(
        metalness=0.1,
        roughness=0.3,
        emissive="#ffffff",
        emissive_intensity=0.5,
        pulsate=True,
        pulsate_speed=1.0,
    ),
    "ethereal": MaterialProperties(
        metalness=0.0,
        roughness=0.2,
        transparent=True,
        opacity=0.4,
        emissive="#e6e6fa",
        emissive_intensity=0.3,
        floating=True,
        float_amplitude=0.2,
        float_speed=0.8,
    ),
}

PRESET_NAMES = tuple(_PRESETS)


@dataclass(frozen=True)
class ContextRule:
    preset: str
    scaled_field: str | None = None
    factor: float = 1.0


# (family, primitive, role); role None matches any role.
_CONTEXT_RULES: dict[tuple[str, str, str | None], ContextRule] = {
    ("cosmic", "sphere", "focal"): ContextRule("cosmic_planet", "emissive_intensity"),
    ("cosmic", "sphere", "background"): ContextRule("cosmic_star", "emissive_intensity", 0.3),
    ("cosmic", "torus", None): ContextRule("cosmic_ring", "opacity"),
    ("garden", "sphere", "foreground"): ContextRule("garden_flower", "emissive_intensity"),
    ("garden", "cylinder", None): ContextRule("garden_bark"),
    ("garden", "box", "background"): ContextRule("garden_ground"),
    ("underwater", "cone", None): ContextRule("underwater_coral", "emissive_intensity"),
    ("underwater", "sphere", "foreground"): ContextRule("underwater_fish", "env_map_intensity"),
    ("underwater", "cylinder", None): ContextRule("underwater_kelp"),
}


def role_intensity(role: str) -> float:
    return _ROLE_INTENSITY.get(str(role), _DEFAULT_ROLE_INTENSITY)


def get_material(preset: str) -> MaterialProperties:
    material = _PRESETS.get(preset)
    if material is None:
        raise UnknownMaterialError(preset=str(preset))
    return material


def get_material_with_color(preset: str, color: str) -> MaterialProperties:
    """Return the preset with its emissive glow tinted to ``color``.

    Presets without an emissive channel are returned unchanged.
    """
    material = get_material(preset)
    if material.emissive is None:
        return material
    return replace(material, emissive=color)


def resolve_contextual(theme: str, role: str, primitive: str) -> MaterialProperties:
    family = theme_family(theme)
    rule = _CONTEXT_RULES.get((family, primitive, role)) or _CONTEXT_RULES.get((family, primitive, None))
    if rule is None:
        return get_material(FALLBACK_PRESET)
    material = get_material(rule.preset)
    if rule.scaled_field is None:
        return material
    return replace(material, **{rule.scaled_field: round(role_intensity(role) * rule.factor, 4)})


__all__ = [
    "FALLBACK_PRESET",
    "PRESET_NAMES",
    "ROLES",
    "UnknownMaterialError",
    "get_material",
    "get_material_with_color",
    "resolve_contextual",
    "role_intensity",
]
