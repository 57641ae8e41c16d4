"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
import yaml

from voxscribe.config import VoxscribeConfig
from voxscribe.engine.base import EngineOutcome


class FakePicker:
    """Returns queued answers in order; None means the user cancelled."""

    def __init__(self, *answers: str | None) -> None:
        self.answers = list(answers)
        self.calls = 0

    def __call__(self) -> str | None:
        self.calls += 1
        return self.answers.pop(0) if self.answers else None


class FakeEngine:
    """Engine double.

    With gated=True each call waits on self.release before answering, so a
    test can act while the call is in flight.
    """

    def __init__(
        self,
        outcome: EngineOutcome | dict[str, Any] | None = None,
        error: Exception | None = None,
        gated: bool = False,
    ) -> None:
        self.outcome = outcome if outcome is not None else EngineOutcome(success=True, text="test")
        self.error = error
        self.gated = gated
        self.calls: list[str] = []
        self.started: asyncio.Event | None = None
        self.release: asyncio.Event | None = None

    async def transcribe(self, audio_path: str) -> EngineOutcome | dict[str, Any]:
        self.calls.append(audio_path)
        if self.gated:
            if self.started is None:
                self.started = asyncio.Event()
                self.release = asyncio.Event()
            self.started.set()
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.outcome


class FakeClipboard:
    def __init__(self) -> None:
        self.contents: str | None = None

    def copy(self, text: str) -> None:
        self.contents = text


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    """A small placeholder audio file."""
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 125)
    return path


@pytest.fixture
def resource_dir(tmp_path: Path) -> Path:
    """A resource directory laid out like a packaged whisper.cpp install."""
    res = tmp_path / "resources"
    (res / "models").mkdir(parents=True)
    cli = res / "whisper-cli"
    cli.write_text("#!/bin/sh\n")
    cli.chmod(0o755)
    (res / "models" / "ggml-tiny.bin").write_bytes(b"ggml")
    return res


@pytest.fixture
def whisper_config(resource_dir: Path, tmp_path: Path) -> VoxscribeConfig:
    output_dir = tmp_path / "out"
    return VoxscribeConfig(
        whisper_cli=resource_dir / "whisper-cli",
        resource_dir=resource_dir,
        output_dir=output_dir,
    )


@pytest.fixture
def config_file(tmp_path: Path, resource_dir: Path) -> Path:
    """A voxscribe.yaml pointing at the fake resource directory."""
    path = tmp_path / "voxscribe.yaml"
    with open(path, "w") as f:
        yaml.dump(
            {
                "resource_dir": str(resource_dir),
                "model": "tiny",
                "language": "en",
                "threads": 2,
            },
            f,
        )
    return path


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()
