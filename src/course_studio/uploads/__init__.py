"""Upload pipeline — direct and relayed transfer of file bytes to storage."""

from course_studio.uploads.transport import TransferStrategy, UploadSession, UploadTransport

__all__ = ["TransferStrategy", "UploadSession", "UploadTransport"]
