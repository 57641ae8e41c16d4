"""
voxscribe.selection - The currently chosen audio file.

SelectionManager owns the single Selection and is the only thing allowed
to replace or clear it. The picker it asks is any callable returning a path
or None when the user backs out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

ACCEPTED_EXTENSIONS: tuple[str, ...] = ("mp3", "wav", "ogg", "m4a", "webm", "flac")


class FilePicker(Protocol):
    def __call__(self) -> str | None: ...


SelectionListener = Callable[["Selection | None"], None]


@dataclass(frozen=True)
class Selection:
    """A picked audio file."""

    path: str
    display_name: str
    size_bytes: int | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> Selection:
        absolute = Path(path).expanduser().absolute()
        try:
            size: int | None = absolute.stat().st_size
        except OSError:
            size = None
        return cls(path=str(absolute), display_name=absolute.name, size_bytes=size)


class SelectionManager:
    """Holds the current Selection and tells listeners when it changes."""

    def __init__(self, picker: FilePicker) -> None:
        self.picker = picker
        self._selection: Selection | None = None
        self._listeners: list[SelectionListener] = []

    @property
    def selection(self) -> Selection | None:
        return self._selection

    def subscribe(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    def pick_file(self) -> Selection | None:
        """Ask the picker for a file.

        Returns:
            The new Selection, or None if the user cancelled. Cancelling
            leaves the current selection and any result untouched.
        """
        path = self.picker()
        if not path:
            logger.debug("File pick cancelled")
            return None

        self._selection = Selection.from_path(path)
        logger.info("Selected %s", self._selection.path)
        self._notify()
        return self._selection

    def clear(self) -> None:
        """Drop the current selection. Safe to call repeatedly."""
        self._selection = None
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._selection)

