"""
voxscribe.engine - Speech-to-text engine adapters.

An engine takes one absolute audio path and returns an EngineOutcome.
The bundled adapter drives the whisper.cpp command-line tool.
"""

from __future__ import annotations

from voxscribe.engine.base import EngineOutcome, TranscriptionEngine
from voxscribe.engine.whisper_cli import WhisperCliEngine

__all__ = ["EngineOutcome", "TranscriptionEngine", "WhisperCliEngine"]
