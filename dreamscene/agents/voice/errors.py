from __future__ import annotations

from dataclasses import dataclass


@dataclass
class VoiceEngineError(RuntimeError):
    engine: str
    message: str

    def __str__(self) -> str:
        return self.message


__all__ = ["VoiceEngineError"]
