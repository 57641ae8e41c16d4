"""
voxscribe.utils - Shared utility functions.

Contains common functions used across multiple modules to avoid duplication.
"""

from __future__ import annotations

from pathlib import Path


def format_size(size_bytes: int | None) -> str:
    """Format a byte count in human-readable format.

    Args:
        size_bytes: Size in bytes, or None when unknown

    Returns:
        Formatted string such as "1.5 MB", or "-" when the size is unknown
    """
    if size_bytes is None:
        return "-"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def has_accepted_extension(path: str | Path, extensions: tuple[str, ...]) -> bool:
    """Check a path's extension against an allow-list (case-insensitive).

    Args:
        path: File path to check
        extensions: Accepted extensions without the leading dot

    Returns:
        True if the final suffix is in the allow-list
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix in {ext.lower() for ext in extensions}
