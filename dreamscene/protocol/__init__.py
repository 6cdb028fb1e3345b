from dreamscene.protocol.schema_validation import (
    SCENE_CONFIG_SCHEMA,
    SCENE_OBJECT_SCHEMA,
    ProtocolValidationError,
    ProtocolValidator,
)

__all__ = [
    "SCENE_CONFIG_SCHEMA",
    "SCENE_OBJECT_SCHEMA",
    "ProtocolValidationError",
    "ProtocolValidator",
]
