from dreamscene.protocol import SCENE_CONFIG_SCHEMA, SCENE_OBJECT_SCHEMA, ProtocolValidationError, ProtocolValidator


def _scene(**overrides) -> dict:
    payload = {
        "objects": [{"type": "sphere", "position": [0, 2, 0], "scale": [2, 2, 2], "color": "#9b59b6"}],
        "lighting": {"ambient": {"color": "#404040", "intensity": 0.5}},
        "camera": {"position": [0, 3, 10], "lookAt": [0, 0, 0]},
        "environment": {"skyColor": "#1a1a2e", "fogColor": "#16213e", "fogDensity": 0.02},
    }
    payload.update(overrides)
    return payload


def test_protocol_validator_accepts_valid_scene() -> None:
    ProtocolValidator().validate(SCENE_CONFIG_SCHEMA, _scene())


def test_protocol_validator_rejects_bad_primitive() -> None:
    validator = ProtocolValidator()
    try:
        validator.validate(SCENE_OBJECT_SCHEMA, {"type": "pyramid", "position": [0, 0, 0]})
    except ProtocolValidationError as exc:
        assert exc.issues
        assert exc.issues[0]["path"] == "type"
        return
    raise AssertionError("Expected ProtocolValidationError for unknown primitive")


def test_protocol_validator_reports_nested_paths() -> None:
    scene = _scene(objects=[{"type": "box", "position": [0, 0]}], camera={"position": [0, 0, 0]})
    try:
        ProtocolValidator().validate(SCENE_CONFIG_SCHEMA, scene)
    except ProtocolValidationError as exc:
        paths = {issue["path"] for issue in exc.issues}
        assert "objects.0.position" in paths
        assert "camera" in paths
        assert SCENE_CONFIG_SCHEMA in str(exc)
        return
    raise AssertionError("Expected ProtocolValidationError for malformed scene")


def test_is_valid_checks_colors_and_fog() -> None:
    validator = ProtocolValidator()
    assert not validator.is_valid(SCENE_OBJECT_SCHEMA, {"type": "cone", "position": [0, 0, 0], "color": "red"})
    assert not validator.is_valid(SCENE_CONFIG_SCHEMA, _scene(environment={"fogDensity": 0}))
    assert validator.is_valid(SCENE_CONFIG_SCHEMA, _scene(environment={}))
