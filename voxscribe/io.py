"""
voxscribe.io - Reading whisper output and saving transcripts.

Used by the engine to collect whisper output and by the CLI to save
transcripts.
"""

from __future__ import annotations

import os
from pathlib import Path


def read_text(path: Path) -> str:
    """Read text file with UTF-8 encoding.

    Undecodable bytes are replaced rather than raising, since whisper
    output can contain partial multi-byte sequences.

    Args:
        path: Path to text file

    Returns:
        File contents as string
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def transcript_destination(destination: Path, audio_path: Path) -> Path:
    """Where a transcript for audio_path lands when saved to destination.

    An existing directory gets ``<audio stem>.txt`` inside it; anything
    else is taken as the file name.
    """
    if destination.is_dir():
        return destination / f"{audio_path.stem}.txt"
    return destination


def save_transcript(destination: Path, text: str, audio_path: Path) -> Path:
    """Save transcript text exactly as given.

    The text is written to a hidden ``.<name>.partial`` sibling and moved
    over the target once flushed, so an interrupted save never leaves a
    truncated transcript. Line endings are not translated.

    Args:
        destination: Output file, or a directory to save into
        text: Transcript text
        audio_path: Source audio, used to name the file in a directory

    Returns:
        Path of the saved transcript
    """
    target = transcript_destination(destination, audio_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_name(f".{target.name}.partial")
    try:
        with open(partial, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(partial, target)
    except OSError:
        partial.unlink(missing_ok=True)
        raise
    return target
