"""
voxscribe.config - YAML config loading, CLI overrides, validation.

Handles locating voxscribe.yaml, merging command-line overrides on top of
it, and resolving where the whisper-cli binary and its model live.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from voxscribe.exceptions import ConfigError

CONFIG_FILENAME = "voxscribe.yaml"

WHISPER_MODELS = {
    "tiny",
    "tiny.en",
    "base",
    "base.en",
    "small",
    "small.en",
    "medium",
    "medium.en",
    "large-v1",
    "large-v2",
    "large-v3",
    "large-v3-turbo",
}


class VoxscribeConfig(BaseModel):
    """Resolved configuration for the transcription engine."""

    model_config = ConfigDict(protected_namespaces=())

    whisper_cli: Path | None = None
    resource_dir: Path | None = None

    model: str = "tiny"
    model_path: Path | None = None

    language: str = "ru"
    threads: int = Field(default=4, gt=0)
    print_progress: bool = True

    output_dir: Path | None = None

    config_path: Path | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        if v not in WHISPER_MODELS:
            raise ValueError(f"model must be one of: {sorted(WHISPER_MODELS)}")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("language must not be empty")
        return v

    @property
    def model_filename(self) -> str:
        return f"ggml-{self.model}.bin"


def whisper_cli_name() -> str:
    """Platform-specific name of the whisper.cpp command-line binary."""
    return "whisper-cli.exe" if sys.platform == "win32" else "whisper-cli"


def resolve_whisper_cli(config: VoxscribeConfig) -> Path | None:
    """Locate the whisper-cli binary.

    An explicit path wins, then the resource directory, then PATH. The
    returned path is not guaranteed to exist; callers check that.
    """
    if config.whisper_cli is not None:
        return config.whisper_cli
    if config.resource_dir is not None:
        return config.resource_dir / whisper_cli_name()
    found = shutil.which(whisper_cli_name())
    return Path(found) if found else None


def resolve_model_path(config: VoxscribeConfig) -> Path | None:
    """Locate the ggml model file.

    Inside a resource directory the model is looked up under models/ first,
    then next to the binary.
    """
    if config.model_path is not None:
        return config.model_path
    if config.resource_dir is None:
        return None
    nested = config.resource_dir / "models" / config.model_filename
    if nested.exists():
        return nested
    return config.resource_dir / config.model_filename


def find_config_file(start: Path | None = None) -> Path | None:
    """Find voxscribe.yaml by walking up from start (default: cwd)."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge overrides on top of base. None values in overrides are ignored."""
    merged = base.copy()
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def _resolve_relative_paths(raw: dict[str, Any], config_dir: Path) -> None:
    for key in ("whisper_cli", "resource_dir", "model_path", "output_dir"):
        value = raw.get(key)
        if value and not Path(value).expanduser().is_absolute():
            raw[key] = str(config_dir / value)
        elif value:
            raw[key] = str(Path(value).expanduser())


def load_config(
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> VoxscribeConfig:
    """Load and validate configuration.

    Args:
        config_file: Explicit config path; if None, voxscribe.yaml is searched
            for from the current directory upwards and defaults are used when
            none is found
        overrides: Values (typically from CLI options) that take precedence

    Returns:
        Validated VoxscribeConfig

    Raises:
        FileNotFoundError: If an explicit config_file does not exist
        ConfigError: If the file is not valid YAML or holds invalid values
    """
    if config_file is not None and not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    path = config_file or find_config_file()
    raw: dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")
        _resolve_relative_paths(raw, path.parent)
        raw["config_path"] = str(path)

    merged = merge_config(raw, overrides or {})

    try:
        return VoxscribeConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
