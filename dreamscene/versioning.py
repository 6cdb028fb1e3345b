from __future__ import annotations

import os
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "dreamscene"


@lru_cache(maxsize=1)
def project_version() -> str:
    try:
        resolved = version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"
    return resolved.strip() or "0.0.0"


def project_revision() -> str:
    return str(os.getenv("DREAMSCENE_BUILD_REVISION", "")).strip() or "dev"


__all__ = ["project_revision", "project_version"]
