"""Exception hierarchy for the request/upload core."""

from __future__ import annotations

from enum import StrEnum


class CourseStudioError(Exception):
    """Base exception for all course-studio errors."""


# -- backend calls ---------------------------------------------------------


class ApiError(CourseStudioError):
    """A backend call did not produce a usable response."""


class Unreachable(ApiError):
    """No network path to the backend."""

    def __init__(self, message: str = "Unable to reach the server") -> None:
        super().__init__(message)


class SessionExpired(ApiError):
    """Session renewal failed; the session has been torn down."""

    def __init__(self, message: str = "Session expired, sign in again") -> None:
        super().__init__(message)


class BackendError(ApiError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, message: str, *, details: str | None = None) -> None:
        self.status = status
        self.message = message
        self.details = details
        super().__init__(f"{status}: {message}")


# -- content ingest --------------------------------------------------------


class IngestStage(StrEnum):
    REGISTER = "register"
    TRANSFER = "transfer"
    FINALIZE = "finalize"


class IngestError(CourseStudioError):
    """A content ingest aborted. ``stage`` names the step that failed."""

    stage: IngestStage


class RegistrationError(IngestError):
    """The draft content record could not be created; no bytes were sent."""

    stage = IngestStage.REGISTER

    def __init__(self, message: str, *, cause: ApiError | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class UploadError(IngestError):
    """Both the direct and the relayed transfer failed."""

    stage = IngestStage.TRANSFER

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: str | None = None,
    ) -> None:
        self.status = status
        self.details = details
        super().__init__(message)


class FinalizeError(IngestError):
    """Bytes landed in storage but the metadata commit failed.

    The draft identified by ``content_id`` has an orphaned storage object that
    operators may need to reconcile.
    """

    stage = IngestStage.FINALIZE

    def __init__(self, message: str, *, content_id: str, cause: ApiError | None = None) -> None:
        self.content_id = content_id
        self.cause = cause
        super().__init__(message)


# -- module authoring ------------------------------------------------------


class ValidationKind(StrEnum):
    MISSING_SELECTION = "missing_selection"
    MISSING_FILE = "missing_file"
    INVALID_VIDEO_URL = "invalid_video_url"
    EMPTY_TEXT = "empty_text"
    MIXED_INPUTS = "mixed_inputs"
    MISSING_TITLE = "missing_title"


_VALIDATION_MESSAGES = {
    ValidationKind.MISSING_SELECTION: "Select an existing content item",
    ValidationKind.MISSING_FILE: "Choose a file to upload",
    ValidationKind.INVALID_VIDEO_URL: "Enter a valid YouTube URL",
    ValidationKind.EMPTY_TEXT: "The text content is empty",
    ValidationKind.MIXED_INPUTS: "Inputs from more than one source mode were provided",
    ValidationKind.MISSING_TITLE: "The module title is required",
}


class SourceValidationError(CourseStudioError):
    """Caller input problem detected before anything is sent to the backend."""

    def __init__(self, kind: ValidationKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or _VALIDATION_MESSAGES[kind])
