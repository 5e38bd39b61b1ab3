# backend/upload_server/exceptions.py
"""
Custom exceptions for the upload server.

Centralized location for all custom exception classes. Every error that
can reach the HTTP layer carries the status code it maps to.
"""

from typing import Optional

from .enums import PipelineStage


class UploadServerError(Exception):
    """Base exception for all upload-server errors."""

    status_code: int = 500
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInputError(UploadServerError):
    """Missing file, undeterminable extension, bad MIME category or missing identity."""

    status_code = 400
    default_message = "Invalid input"


class UnauthorizedError(UploadServerError):
    """Ownership or privilege mismatch, or a missing/invalid token."""

    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(UploadServerError):
    """Target file is absent."""

    status_code = 404
    default_message = "File not found"


class PayloadTooLargeError(UploadServerError):
    """Upload exceeds the configured size cap."""

    status_code = 413
    default_message = "File too large"


class StorageFailureError(UploadServerError):
    """Disk write or permission errors."""

    status_code = 500
    default_message = "An error occurred"


class ThumbnailGenerationError(UploadServerError):
    """Image could not be decoded, resized or encoded."""

    status_code = 500
    default_message = "Error generating thumbnail"


class PipelineStageError(UploadServerError):
    """Failure of one stage of the video derivative pipeline."""

    status_code = 500
    stage: PipelineStage = PipelineStage.PROBE


class ProbeFailureError(PipelineStageError):
    """Container metadata could not be read. Fatal."""

    stage = PipelineStage.PROBE
    default_message = "Error reading video metadata"


class ScreenshotFailureError(PipelineStageError):
    """No usable frames could be extracted. Fatal."""

    stage = PipelineStage.SCREENSHOTS
    default_message = "Error generating thumbnail"


class DerivativeDegradedError(PipelineStageError):
    """Palette or GIF stage failed. Never leaves the pipeline."""

    stage = PipelineStage.PALETTE
    default_message = "Animated preview unavailable"

    def __init__(self, stage: PipelineStage, message: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class PipelineTimeoutError(UploadServerError):
    """An external process or the whole pipeline exceeded its time budget."""

    status_code = 504
    default_message = "Media processing timed out"


class CommandTimeoutError(PipelineTimeoutError):
    """A single ffmpeg/ffprobe invocation exceeded its timeout and was killed."""

    default_message = "External media command timed out"


class ClientDisconnectedError(UploadServerError):
    """The client went away before processing finished."""

    status_code = 499
    default_message = "Client closed request"
