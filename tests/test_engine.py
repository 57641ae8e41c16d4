"""Tests for voxscribe.engine.whisper_cli module."""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path
from typing import Any

import pytest

from voxscribe.config import VoxscribeConfig
from voxscribe.engine.base import EngineOutcome
from voxscribe.engine.whisper_cli import (
    WhisperCliEngine,
    build_command,
    extract_text_from_stdout,
    is_diagnostic_line,
)

WHISPER_STDOUT = """whisper_init_from_file_with_params_no_state: loading model
system_info: n_threads = 4 / 8 | AVX = 1
main: processing 'song.mp3' (160000 samples, 10.0 sec), 4 threads
[BLANK_AUDIO]

Hello there.
General Kenobi.
whisper_print_timings:     load time =    45.12 ms
     total time =   812.00 ms
"""


def fake_run(
    returncode: int = 0,
    transcript: str | None = "hello world\n",
    stdout: str = "",
    stderr: str = "",
    calls: list | None = None,
):
    """Build a subprocess.run stand-in that writes the -otxt output file."""

    def _run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        if calls is not None:
            calls.append(cmd)
        if transcript is not None:
            base = cmd[cmd.index("-of") + 1]
            Path(f"{base}.txt").write_text(transcript, encoding="utf-8")
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    return _run


class TestStdoutFiltering:
    def test_diagnostic_lines(self) -> None:
        assert is_diagnostic_line("whisper_init: loading")
        assert is_diagnostic_line("system_info: AVX = 1")
        assert is_diagnostic_line("main: processing 'x.wav'")
        assert is_diagnostic_line("   load time =  1.0 ms")
        assert is_diagnostic_line("fallbacks =   0 p /   0 h")
        assert is_diagnostic_line("[BLANK_AUDIO]")
        assert is_diagnostic_line("   ")

    def test_transcript_lines_kept(self) -> None:
        assert not is_diagnostic_line("Hello there.")
        assert not is_diagnostic_line("  [00:00:00.000 --> 00:00:02.000]  Hi")

    def test_extract_text(self) -> None:
        assert extract_text_from_stdout(WHISPER_STDOUT) == "Hello there.\nGeneral Kenobi."

    def test_extract_nothing(self) -> None:
        assert extract_text_from_stdout("whisper_init: x\n\n[BLANK_AUDIO]\n") == ""


class TestBuildCommand:
    def test_arguments(self, tmp_path: Path) -> None:
        config = VoxscribeConfig(language="en", threads=8)
        cmd = build_command(
            Path("/opt/whisper-cli"),
            Path("/opt/models/ggml-tiny.bin"),
            "/tmp/song.mp3",
            tmp_path / "whisper_output_1",
            config,
        )
        assert cmd[0] == "/opt/whisper-cli"
        assert cmd[cmd.index("-f") + 1] == "/tmp/song.mp3"
        assert cmd[cmd.index("-m") + 1] == "/opt/models/ggml-tiny.bin"
        assert cmd[cmd.index("-l") + 1] == "en"
        assert cmd[cmd.index("-t") + 1] == "8"
        assert "-otxt" in cmd
        assert cmd[cmd.index("-of") + 1] == str(tmp_path / "whisper_output_1")
        assert cmd[-1] == "-pp"

    def test_no_progress_flag(self, tmp_path: Path) -> None:
        config = VoxscribeConfig(print_progress=False)
        cmd = build_command(Path("w"), Path("m"), "a.wav", tmp_path / "o", config)
        assert "-pp" not in cmd


class TestPreconditions:
    def test_missing_audio(self, whisper_config: VoxscribeConfig, tmp_path: Path) -> None:
        engine = WhisperCliEngine(whisper_config)
        outcome = engine.transcribe_sync(str(tmp_path / "missing.wav"))
        assert outcome == EngineOutcome(success=False, text="", error="Audio file not found")

    def test_missing_cli(self, whisper_config: VoxscribeConfig, audio_file: Path) -> None:
        config = whisper_config.model_copy(update={"whisper_cli": audio_file.parent / "nope"})
        outcome = WhisperCliEngine(config).transcribe_sync(str(audio_file))
        assert not outcome.success
        assert "whisper-cli not found" in outcome.error

    def test_missing_model(
        self, whisper_config: VoxscribeConfig, audio_file: Path, resource_dir: Path
    ) -> None:
        (resource_dir / "models" / "ggml-tiny.bin").unlink()
        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))
        assert not outcome.success
        assert "Model not found" in outcome.error


class TestRun:
    def test_reads_output_file(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        calls: list = []
        monkeypatch.setattr(subprocess, "run", fake_run(transcript="  hello world\n", calls=calls))

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert outcome == EngineOutcome(success=True, text="hello world")
        assert len(calls) == 1
        base = calls[0][calls[0].index("-of") + 1]
        assert not Path(f"{base}.txt").exists()
        assert Path(base).parent == whisper_config.output_dir

    def test_output_base_name(self, whisper_config: VoxscribeConfig) -> None:
        base = WhisperCliEngine(whisper_config)._output_base()
        prefix, epoch, pid = base.name.rsplit("_", 2)
        assert prefix == "whisper_output"
        assert epoch.isdigit()
        assert pid == str(os.getpid())

    def test_falls_back_to_stdout(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(subprocess, "run", fake_run(transcript=None, stdout=WHISPER_STDOUT))

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert outcome.success
        assert outcome.text == "Hello there.\nGeneral Kenobi."

    def test_no_output_anywhere(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(subprocess, "run", fake_run(transcript=None, stdout="main: processing\n"))

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert not outcome.success
        assert outcome.error.startswith("Could not read transcription output")

    def test_nonzero_exit_without_text(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(
            subprocess, "run", fake_run(returncode=2, transcript="", stderr="bad model magic")
        )

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert not outcome.success
        assert "bad model magic" in outcome.error

    def test_nonzero_exit_with_text_is_success_with_warning(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(subprocess, "run", fake_run(returncode=1, transcript="partial"))

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert outcome.success
        assert outcome.text == "partial"
        assert "status 1" in outcome.error

    def test_launch_failure(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        def _raise(cmd, **kwargs):
            raise PermissionError("Permission denied")

        monkeypatch.setattr(subprocess, "run", _raise)

        outcome = WhisperCliEngine(whisper_config).transcribe_sync(str(audio_file))

        assert not outcome.success
        assert outcome.error.startswith("Failed to launch whisper-cli")

    def test_async_wrapper(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        monkeypatch.setattr(subprocess, "run", fake_run(transcript="async text"))

        outcome = asyncio.run(WhisperCliEngine(whisper_config).transcribe(str(audio_file)))

        assert outcome.text == "async text"


class TestRealWhisper:
    @pytest.mark.slow
    def test_transcribe_real_audio(self) -> None:
        pytest.skip("Requires whisper-cli, a ggml model and an audio file - run manually")


class TestUnexpectedErrors:
    def test_wrapped_in_transcription_error(
        self, whisper_config: VoxscribeConfig, audio_file: Path, monkeypatch
    ) -> None:
        from voxscribe.exceptions import TranscriptionError

        def _broken(self):
            raise PermissionError("output dir is read-only")

        monkeypatch.setattr(WhisperCliEngine, "_output_base", _broken)

        with pytest.raises(TranscriptionError, match="read-only"):
            asyncio.run(WhisperCliEngine(whisper_config).transcribe(str(audio_file)))
