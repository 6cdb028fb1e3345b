from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

Vec3 = tuple[float, float, float]

PRIMITIVES = ("sphere", "box", "cylinder", "cone", "torus")

THEMES = ("cosmic", "garden", "underwater", "lantern", "jellyfish", "glass")
BASE_THEMES = ("cosmic", "garden", "underwater")
DEFAULT_THEME = "cosmic"

# Narrative sub-variants reuse the vocabulary of their base family.
THEME_FAMILY = {
    "cosmic": "cosmic",
    "garden": "garden",
    "underwater": "underwater",
    "lantern": "garden",
    "jellyfish": "underwater",
    "glass": "cosmic",
}

# python attribute -> renderer key
_PROPERTY_KEYS = {
    "emissive": "emissive",
    "emissive_intensity": "emissiveIntensity",
    "metalness": "metalness",
    "roughness": "roughness",
    "transparent": "transparent",
    "opacity": "opacity",
    "env_map_intensity": "envMapIntensity",
    "clearcoat": "clearcoat",
    "clearcoat_roughness": "clearcoatRoughness",
    "pulsate": "pulsate",
    "pulsate_speed": "pulsateSpeed",
    "floating": "float",
    "float_amplitude": "floatAmplitude",
    "float_speed": "floatSpeed",
    "rotate": "rotate",
    "rotate_speed": "rotateSpeed",
    "has_trail": "hasTrail",
    "has_particles": "hasParticles",
    "side": "side",
    "refraction_ratio": "refractionRatio",
    "reflectivity": "reflectivity",
}
_PROPERTY_ATTRS = {key: attr for attr, key in _PROPERTY_KEYS.items()}


def theme_family(theme: str) -> str:
    return THEME_FAMILY.get(str(theme), DEFAULT_THEME)


def _vec3(value: Any) -> Vec3:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"expected a 3-component vector, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass(frozen=True)
class MaterialProperties:
    """Renderer hints attached to a placed object.

    Every field is optional; unset fields are left out of the serialized
    payload so the renderer applies its own defaults.
    """

    emissive: str | None = None
    emissive_intensity: float | None = None
    metalness: float | None = None
    roughness: float | None = None
    transparent: bool | None = None
    opacity: float | None = None
    env_map_intensity: float | None = None
    clearcoat: float | None = None
    clearcoat_roughness: float | None = None
    pulsate: bool | None = None
    pulsate_speed: float | None = None
    floating: bool | None = None
    float_amplitude: float | None = None
    float_speed: float | None = None
    rotate: bool | None = None
    rotate_speed: Vec3 | None = None
    has_trail: bool | None = None
    has_particles: bool | None = None
    side: str | None = None
    refraction_ratio: float | None = None
    reflectivity: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for row in fields(self):
            value = getattr(self, row.name)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = list(value)
            payload[_PROPERTY_KEYS[row.name]] = value
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> MaterialProperties:
        if not payload:
            return cls()
        values: dict[str, Any] = {}
        for key, value in payload.items():
            attr = _PROPERTY_ATTRS.get(str(key))
            if attr is None or value is None:
                continue
            if attr == "rotate_speed":
                value = _vec3(value) if isinstance(value, (list, tuple)) else (0.0, float(value), 0.0)
            values[attr] = value
        return cls(**values)


@dataclass(frozen=True)
class SceneObject:
    type: str
    position: Vec3
    rotation: Vec3 | None = None
    scale: Vec3 | None = None
    color: str | None = None
    properties: MaterialProperties = field(default_factory=MaterialProperties)

    def __post_init__(self) -> None:
        if self.type not in PRIMITIVES:
            raise ValueError(f"unsupported primitive type: {self.type!r}")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "position": list(self.position)}
        if self.rotation is not None:
            payload["rotation"] = list(self.rotation)
        if self.scale is not None:
            payload["scale"] = list(self.scale)
        if self.color is not None:
            payload["color"] = self.color
        properties = self.properties.to_dict()
        if properties:
            payload["properties"] = properties
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> SceneObject:
        rotation = payload.get("rotation")
        scale = payload.get("scale")
        color = payload.get("color")
        return cls(
            type=str(payload.get("type", "")),
            position=_vec3(payload.get("position")),
            rotation=_vec3(rotation) if rotation is not None else None,
            scale=_vec3(scale) if scale is not None else None,
            color=str(color) if color is not None else None,
            properties=MaterialProperties.from_dict(payload.get("properties")),
        )


@dataclass(frozen=True)
class LightSpec:
    color: str
    intensity: float
    position: Vec3 | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"color": self.color, "intensity": self.intensity}
        if self.position is not None:
            payload["position"] = list(self.position)
        return payload


@dataclass(frozen=True)
class Lighting:
    ambient: LightSpec
    directional: LightSpec | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ambient": self.ambient.to_dict()}
        if self.directional is not None:
            payload["directional"] = self.directional.to_dict()
        return payload


@dataclass(frozen=True)
class Camera:
    position: Vec3
    look_at: Vec3

    def to_dict(self) -> dict[str, Any]:
        return {"position": list(self.position), "lookAt": list(self.look_at)}


@dataclass(frozen=True)
class Environment:
    sky_color: str | None = None
    fog_color: str | None = None
    fog_density: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.sky_color is not None:
            payload["skyColor"] = self.sky_color
        if self.fog_color is not None:
            payload["fogColor"] = self.fog_color
        if self.fog_density is not None:
            payload["fogDensity"] = self.fog_density
        return payload


@dataclass(frozen=True)
class SceneConfig:
    objects: tuple[SceneObject, ...]
    lighting: Lighting
    camera: Camera
    environment: Environment = field(default_factory=Environment)

    def to_dict(self) -> dict[str, Any]:
        return {
            "objects": [obj.to_dict() for obj in self.objects],
            "lighting": self.lighting.to_dict(),
            "camera": self.camera.to_dict(),
            "environment": self.environment.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> SceneConfig:
        lighting = payload.get("lighting", {})
        ambient = lighting.get("ambient", {})
        directional = lighting.get("directional")
        camera = payload.get("camera", {})
        environment = payload.get("environment", {}) or {}
        return cls(
            objects=tuple(SceneObject.from_dict(row) for row in payload.get("objects", [])),
            lighting=Lighting(
                ambient=LightSpec(color=str(ambient.get("color")), intensity=float(ambient.get("intensity"))),
                directional=(
                    LightSpec(
                        color=str(directional.get("color")),
                        intensity=float(directional.get("intensity")),
                        position=_vec3(directional.get("position")),
                    )
                    if isinstance(directional, dict)
                    else None
                ),
            ),
            camera=Camera(position=_vec3(camera.get("position")), look_at=_vec3(camera.get("lookAt"))),
            environment=Environment(
                sky_color=environment.get("skyColor"),
                fog_color=environment.get("fogColor"),
                fog_density=environment.get("fogDensity"),
            ),
        )


__all__ = [
    "BASE_THEMES",
    "DEFAULT_THEME",
    "PRIMITIVES",
    "THEMES",
    "THEME_FAMILY",
    "Camera",
    "Environment",
    "LightSpec",
    "Lighting",
    "MaterialProperties",
    "SceneConfig",
    "SceneObject",
    "Vec3",
    "theme_family",
]
