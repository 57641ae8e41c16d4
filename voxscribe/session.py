"""
voxscribe.session - What the user interface talks to.

TranscriberSession wires a SelectionManager and a TranscriptionOrchestrator
together and turns their state into a flat SessionView for rendering.
Validation problems become a notice on the view instead of an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from voxscribe.clipboard import Clipboard
from voxscribe.engine.base import TranscriptionEngine
from voxscribe.exceptions import ValidationError
from voxscribe.orchestrator import RequestState, TranscriptionOrchestrator, TranscriptionRequest
from voxscribe.selection import FilePicker, Selection, SelectionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionView:
    """Snapshot of everything the UI shows."""

    display_name: str | None
    path: str | None
    size_bytes: int | None
    state: RequestState
    result_text: str | None
    error: str | None
    warning: str | None
    notice: str | None
    can_transcribe: bool
    can_copy: bool


class TranscriberSession:
    def __init__(
        self,
        picker: FilePicker,
        engine: TranscriptionEngine,
        clipboard: Clipboard | None = None,
    ) -> None:
        self.selection = SelectionManager(picker)
        self.orchestrator = TranscriptionOrchestrator(self.selection, engine)
        self.clipboard = clipboard
        self.notice: str | None = None

    def pick(self) -> Selection | None:
        self.notice = None
        return self.selection.pick_file()

    def clear(self) -> None:
        self.notice = None
        self.selection.clear()

    async def transcribe(self) -> TranscriptionRequest | None:
        """Start a transcription, or record why it could not start."""
        self.notice = None
        try:
            return await self.orchestrator.transcribe()
        except ValidationError as e:
            logger.info("Transcription not started: %s", e)
            self.notice = str(e)
            return None

    def copy_result(self) -> bool:
        """Copy the result text verbatim. Returns False if there is none."""
        request = self.orchestrator.request
        if request is None or request.result_text is None or self.clipboard is None:
            return False
        self.clipboard.copy(request.result_text)
        self.notice = "Copied to clipboard"
        return True

    def view(self) -> SessionView:
        current = self.selection.selection
        request = self.orchestrator.request
        result_text = request.result_text if request else None
        return SessionView(
            display_name=current.display_name if current else None,
            path=current.path if current else None,
            size_bytes=current.size_bytes if current else None,
            state=self.orchestrator.state,
            result_text=result_text,
            error=request.error_message if request else None,
            warning=request.warning if request else None,
            notice=self.notice,
            can_transcribe=self.orchestrator.can_transcribe,
            can_copy=result_text is not None and self.clipboard is not None,
        )
