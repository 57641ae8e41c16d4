"""
voxscribe.clipboard - System clipboard access through tkinter.
"""

from __future__ import annotations

from typing import Protocol


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class TkClipboard:
    """Clipboard backed by a hidden Tk root.

    The root is kept alive for the lifetime of this object; on X11 the
    clipboard contents disappear with the window that owns them.
    """

    def __init__(self) -> None:
        self._root = None

    def copy(self, text: str) -> None:
        if self._root is None:
            import tkinter as tk

            self._root = tk.Tk()
            self._root.withdraw()
        self._root.clipboard_clear()
        self._root.clipboard_append(text)
        self._root.update()

    def close(self) -> None:
        if self._root is not None:
            self._root.destroy()
            self._root = None
