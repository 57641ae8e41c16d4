"""
voxscribe.validation - Dependency checks and input validation.

Validates the whisper.cpp setup and audio inputs before transcribing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from voxscribe.config import (
    VoxscribeConfig,
    resolve_model_path,
    resolve_whisper_cli,
    whisper_cli_name,
)
from voxscribe.exceptions import DependencyError, ValidationError
from voxscribe.selection import ACCEPTED_EXTENSIONS
from voxscribe.utils import has_accepted_extension

WHISPER_INSTALL_HINT = (
    "Build whisper.cpp (https://github.com/ggml-org/whisper.cpp) and put "
    "whisper-cli on PATH, or set whisper_cli / resource_dir in voxscribe.yaml"
)


def check_whisper_cli(config: VoxscribeConfig) -> Path:
    """Check that the whisper-cli binary can be found.

    Returns:
        Path to the binary

    Raises:
        DependencyError: If the binary is missing
    """
    cli_path = resolve_whisper_cli(config)
    if cli_path is None:
        raise DependencyError(
            whisper_cli_name(),
            "whisper-cli not found in PATH",
            WHISPER_INSTALL_HINT,
        )
    if not cli_path.exists():
        raise DependencyError(
            whisper_cli_name(),
            f"whisper-cli not found at {cli_path}",
            WHISPER_INSTALL_HINT,
        )
    return cli_path


def check_model(config: VoxscribeConfig) -> Path:
    """Check that the configured ggml model file exists.

    Returns:
        Path to the model

    Raises:
        DependencyError: If the model is missing
    """
    hint = (
        f"Download {config.model_filename} with whisper.cpp's "
        "models/download-ggml-model.sh and set model_path or resource_dir"
    )
    model_path = resolve_model_path(config)
    if model_path is None:
        raise DependencyError(config.model_filename, "no model_path or resource_dir set", hint)
    if not model_path.exists():
        raise DependencyError(config.model_filename, f"model not found at {model_path}", hint)
    return model_path


def validate_audio_file(path: Path) -> None:
    """Validate that a path is an existing, accepted audio file.

    Raises:
        ValidationError: If the file is missing, not a file, or of an
            unaccepted type
    """
    if not path.exists():
        raise ValidationError(f"Audio file not found: {path}")
    if not path.is_file():
        raise ValidationError(f"Not a file: {path}")
    if not has_accepted_extension(path, ACCEPTED_EXTENSIONS):
        raise ValidationError(
            f"Unsupported file type: {path.suffix or '(none)'} "
            f"(accepted: {', '.join(ACCEPTED_EXTENSIONS)})"
        )


def run_preflight_checks(config: VoxscribeConfig) -> dict[str, Any]:
    """Run every dependency check and collect the results.

    Returns:
        Dict with 'passed' and a 'checks' list of
        {'component', 'ok', 'details'} entries
    """
    checks = []
    for component, check in (("whisper-cli", check_whisper_cli), ("Model", check_model)):
        try:
            found = check(config)
            checks.append({"component": component, "ok": True, "details": str(found)})
        except DependencyError as e:
            details = e.message
            if e.install_hint:
                details += f"\n{e.install_hint}"
            checks.append({"component": component, "ok": False, "details": details})

    return {"passed": all(c["ok"] for c in checks), "checks": checks}
