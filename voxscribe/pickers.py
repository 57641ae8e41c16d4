"""
voxscribe.pickers - File-picker collaborators.

Each picker is a zero-argument callable returning an absolute path, or
None when the user cancels.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from voxscribe.exceptions import ValidationError
from voxscribe.selection import ACCEPTED_EXTENSIONS
from voxscribe.utils import has_accepted_extension


def audio_filetypes() -> list[tuple[str, str]]:
    """File-type filter for native dialogs."""
    patterns = " ".join(f"*.{ext}" for ext in ACCEPTED_EXTENSIONS)
    return [("Audio files", patterns)]


class DialogPicker:
    """Native open-file dialog via tkinter."""

    def __init__(self, title: str = "Select an audio file") -> None:
        self.title = title

    def __call__(self) -> str | None:
        import tkinter as tk
        from tkinter import filedialog

        root = tk.Tk()
        root.withdraw()
        try:
            path = filedialog.askopenfilename(
                parent=root,
                title=self.title,
                filetypes=audio_filetypes(),
            )
        finally:
            root.destroy()
        if not path:
            return None
        return str(Path(path).absolute())


class PromptPicker:
    """Terminal prompt; an empty answer cancels."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def __call__(self) -> str | None:
        accepted = ", ".join(ACCEPTED_EXTENSIONS)
        while True:
            answer = Prompt.ask(
                f"Audio file ({accepted}) [dim]- leave empty to cancel[/dim]",
                console=self.console,
                default="",
                show_default=False,
            ).strip()
            if not answer:
                return None

            path = Path(answer).expanduser()
            if not path.is_file():
                self.console.print(f"[red]File not found: {path}[/red]")
                continue
            if not has_accepted_extension(path, ACCEPTED_EXTENSIONS):
                self.console.print(f"[red]Unsupported file type. Accepted: {accepted}[/red]")
                continue
            return str(path.absolute())


class PathPicker:
    """Returns a path given up front, e.g. on the command line."""

    def __init__(self, path: str | Path) -> None:
        if not has_accepted_extension(path, ACCEPTED_EXTENSIONS):
            raise ValidationError(
                f"Unsupported file type: {Path(path).name} "
                f"(accepted: {', '.join(ACCEPTED_EXTENSIONS)})"
            )
        self.path = Path(path).expanduser().absolute()

    def __call__(self) -> str | None:
        return str(self.path)
