from dreamscene.scene.classifier import classify_scene, score_themes
from dreamscene.scene.enhance import enhance_scene, extract_object_array
from dreamscene.scene.generators import generate_curated_scene
from dreamscene.scene.materials import (
    UnknownMaterialError,
    get_material,
    get_material_with_color,
    resolve_contextual,
)
from dreamscene.scene.models import (
    Camera,
    Environment,
    LightSpec,
    Lighting,
    MaterialProperties,
    SceneConfig,
    SceneObject,
)

__all__ = [
    "Camera",
    "Environment",
    "LightSpec",
    "Lighting",
    "MaterialProperties",
    "SceneConfig",
    "SceneObject",
    "UnknownMaterialError",
    "classify_scene",
    "enhance_scene",
    "extract_object_array",
    "generate_curated_scene",
    "get_material",
    "get_material_with_color",
    "resolve_contextual",
    "score_themes",
]
