"""
voxscribe.exceptions - Custom exception classes.

All Voxscribe-specific exceptions inherit from VoxscribeError.
"""


class VoxscribeError(Exception):
    """Base exception for all Voxscribe errors."""

    pass


class ConfigError(VoxscribeError):
    """Configuration loading or validation error."""

    pass


class ValidationError(VoxscribeError):
    """User input rejected before any work was started."""

    pass


class NoSelectionError(ValidationError):
    """Transcription was triggered with no audio file selected."""

    def __init__(self, message: str = "No audio file selected"):
        super().__init__(message)


class RequestInFlightError(ValidationError):
    """Transcription was triggered while another one is still running."""

    def __init__(self, message: str = "A transcription is already in progress"):
        super().__init__(message)


class TranscriptionError(VoxscribeError):
    """The transcription engine could not be invoked."""

    pass


class DependencyError(VoxscribeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
