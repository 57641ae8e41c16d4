"""
voxscribe.orchestrator - Transcription request state machine.

At most one engine call runs at a time. The visible request moves
IDLE -> REQUESTED -> SUCCEEDED | FAILED; a new attempt is only started by
calling transcribe() again once the previous one has finished.

Picking a new file or clearing the selection while a call is running
detaches that request: the visible state drops back to IDLE straight away,
and whatever the engine eventually returns is recorded on the detached
request but never shown. The running call still counts as busy, so no
second call can start until it returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from voxscribe.engine.base import EngineOutcome, TranscriptionEngine
from voxscribe.exceptions import NoSelectionError, RequestInFlightError
from voxscribe.selection import Selection, SelectionManager

logger = logging.getLogger(__name__)

FALLBACK_ERROR = "Transcription failed for an unknown reason"


class RequestState(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestState.SUCCEEDED, RequestState.FAILED)


@dataclass
class TranscriptionRequest:
    """One attempt to transcribe a selection."""

    source_path: str
    state: RequestState = RequestState.REQUESTED
    result_text: str | None = None
    error_message: str | None = None
    warning: str | None = None

    def succeed(self, text: str, warning: str | None = None) -> None:
        self.state = RequestState.SUCCEEDED
        self.result_text = text
        self.warning = warning

    def fail(self, message: str) -> None:
        self.state = RequestState.FAILED
        self.error_message = message


StateListener = Callable[[RequestState], None]


class TranscriptionOrchestrator:
    """Issues engine calls for the current selection and tracks the outcome."""

    def __init__(self, selection: SelectionManager, engine: TranscriptionEngine) -> None:
        self.selection = selection
        self.engine = engine
        self._request: TranscriptionRequest | None = None
        self._in_flight: TranscriptionRequest | None = None
        self._listeners: list[StateListener] = []
        selection.subscribe(self._on_selection_changed)

    @property
    def request(self) -> TranscriptionRequest | None:
        """The request whose state is currently shown, if any."""
        return self._request

    @property
    def state(self) -> RequestState:
        if self._request is None:
            return RequestState.IDLE
        return self._request.state

    @property
    def busy(self) -> bool:
        """True while an engine call is running, attached or not."""
        return self._in_flight is not None

    @property
    def can_transcribe(self) -> bool:
        return self.selection.selection is not None and not self.busy

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def transcribe(self) -> TranscriptionRequest:
        """Run one transcription of the current selection.

        Returns:
            The request in its terminal state. If the selection changed
            while the engine was running, the request is detached and
            self.request no longer points at it.

        Raises:
            NoSelectionError: If nothing is selected
            RequestInFlightError: If another call has not returned yet
        """
        current = self.selection.selection
        if current is None:
            raise NoSelectionError()
        if self._in_flight is not None:
            raise RequestInFlightError()

        request = TranscriptionRequest(source_path=current.path)
        self._request = request
        self._in_flight = request
        logger.info("Transcribing %s", request.source_path)
        self._notify()

        try:
            await self._run(request)
        finally:
            self._in_flight = None

        if self._request is request:
            self._notify()
        else:
            logger.info(
                "Discarding %s result for %s: selection changed while it was running",
                request.state.value,
                request.source_path,
            )
        return request

    async def _run(self, request: TranscriptionRequest) -> None:
        try:
            raw = await self.engine.transcribe(request.source_path)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error("Engine call failed for %s: %s", request.source_path, message)
            request.fail(message)
            return

        try:
            outcome = _coerce_outcome(raw)
        except (PydanticValidationError, TypeError) as e:
            logger.error("Malformed engine response for %s: %s", request.source_path, e)
            request.fail(f"Malformed engine response: {e}")
            return

        if outcome.success:
            if outcome.error:
                logger.warning("Engine warning for %s: %s", request.source_path, outcome.error)
            request.succeed(outcome.text, warning=outcome.error or None)
        else:
            message = outcome.error or FALLBACK_ERROR
            logger.warning("Engine reported failure for %s: %s", request.source_path, message)
            request.fail(message)

    def _on_selection_changed(self, selection: Selection | None) -> None:
        if self._request is None:
            return
        if self._request is self._in_flight:
            logger.debug("Detaching in-flight request for %s", self._request.source_path)
        self._request = None
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.state)


def _coerce_outcome(raw: Any) -> EngineOutcome:
    if isinstance(raw, EngineOutcome):
        return raw
    if isinstance(raw, dict):
        return EngineOutcome.model_validate(raw)
    raise TypeError(f"expected EngineOutcome or dict, got {type(raw).__name__}")
