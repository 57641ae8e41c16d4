"""
voxscribe.engine.base - Engine call contract.
"""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel


class EngineOutcome(BaseModel):
    """What an engine reports back for one file.

    text is only meaningful when success is True. error carries the
    failure reason, or a non-fatal diagnostic alongside a success.
    """

    success: bool
    text: str = ""
    error: str | None = None

    @classmethod
    def failure(cls, message: str) -> EngineOutcome:
        return cls(success=False, text="", error=message)


class TranscriptionEngine(Protocol):
    async def transcribe(self, audio_path: str) -> EngineOutcome | dict[str, Any]: ...
