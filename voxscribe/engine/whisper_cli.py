"""
voxscribe.engine.whisper_cli - whisper.cpp command-line engine.

Runs whisper-cli once per file, asking it to write a .txt transcript into
a temp directory. When that file cannot be read, the transcript is
recovered from stdout by dropping whisper's own diagnostic lines.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import tempfile
import time
from pathlib import Path

from voxscribe.config import VoxscribeConfig, resolve_model_path, resolve_whisper_cli
from voxscribe.engine.base import EngineOutcome
from voxscribe.exceptions import TranscriptionError
from voxscribe.io import read_text

logger = logging.getLogger(__name__)

DIAGNOSTIC_PREFIXES = ("whisper_", "system_info", "main:")
DIAGNOSTIC_MARKERS = (
    "processing",
    "load time",
    "mel time",
    "sample time",
    "encode time",
    "decode time",
    "batchd time",
    "prompt time",
    "total time",
    "fallbacks",
)
BLANK_AUDIO = "[BLANK_AUDIO]"


class WhisperCliEngine:
    """Transcribes audio files with the whisper-cli binary."""

    def __init__(self, config: VoxscribeConfig) -> None:
        self.config = config

    async def transcribe(self, audio_path: str) -> EngineOutcome:
        """Transcribe one file without blocking the event loop.

        Engine-level problems (missing file, binary or model, bad exit)
        come back as failed outcomes.

        Raises:
            TranscriptionError: If the engine itself breaks
        """
        try:
            return await asyncio.to_thread(self.transcribe_sync, audio_path)
        except Exception as e:
            raise TranscriptionError(f"whisper-cli engine error: {e}") from e

    def transcribe_sync(self, audio_path: str) -> EngineOutcome:
        if not Path(audio_path).exists():
            return EngineOutcome.failure("Audio file not found")

        cli_path = resolve_whisper_cli(self.config)
        if cli_path is None or not cli_path.exists():
            where = cli_path if cli_path is not None else "PATH"
            return EngineOutcome.failure(f"whisper-cli not found at: {where}")

        model_path = resolve_model_path(self.config)
        if model_path is None or not model_path.exists():
            where = model_path if model_path is not None else self.config.model_filename
            return EngineOutcome.failure(f"Model not found at: {where}")

        output_base = self._output_base()
        cmd = build_command(cli_path, model_path, audio_path, output_base, self.config)
        logger.debug("Running %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            return EngineOutcome.failure(f"Failed to launch whisper-cli: {e}")

        output_txt = Path(f"{output_base}.txt")
        try:
            text = read_text(output_txt).strip()
            output_txt.unlink(missing_ok=True)
        except OSError as e:
            logger.debug("No transcript file at %s (%s), using stdout", output_txt, e)
            text = extract_text_from_stdout(proc.stdout)
            if not text:
                return EngineOutcome.failure(f"Could not read transcription output: {e}")

        if proc.returncode == 0:
            return EngineOutcome(success=True, text=text)
        if text:
            return EngineOutcome(
                success=True,
                text=text,
                error=f"whisper-cli exited with status {proc.returncode}",
            )
        return EngineOutcome.failure(f"whisper-cli exited with an error. STDERR: {proc.stderr}")

    def _output_base(self) -> Path:
        output_dir = self.config.output_dir or Path(tempfile.gettempdir())
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir / f"whisper_output_{int(time.time())}_{os.getpid()}"


def build_command(
    cli_path: Path,
    model_path: Path,
    audio_path: str,
    output_base: Path,
    config: VoxscribeConfig,
) -> list[str]:
    """Build the whisper-cli argument list for one file."""
    cmd = [
        str(cli_path),
        "-f",
        audio_path,
        "-m",
        str(model_path),
        "-l",
        config.language,
        "-t",
        str(config.threads),
        "-otxt",
        "-of",
        str(output_base),
    ]
    if config.print_progress:
        cmd.append("-pp")
    return cmd


def is_diagnostic_line(line: str) -> bool:
    """Check whether a stdout line is whisper chatter rather than transcript."""
    stripped = line.strip()
    if not stripped or stripped == BLANK_AUDIO:
        return True
    if stripped.startswith(DIAGNOSTIC_PREFIXES):
        return True
    return any(marker in stripped for marker in DIAGNOSTIC_MARKERS)


def extract_text_from_stdout(stdout: str) -> str:
    """Recover transcript lines from whisper-cli stdout."""
    lines = [line.strip() for line in stdout.splitlines() if not is_diagnostic_line(line)]
    return "\n".join(lines)
