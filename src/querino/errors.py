"""Exception taxonomy with stable error codes and HTTP status mapping."""

from __future__ import annotations

from typing import Any


class ErrorCodes:
    INTERNAL_ERROR = "QRN-API-0500"
    DOC_NOT_FOUND = "QRN-DOC-0404"
    VERSION_NOT_FOUND = "QRN-VER-0404"
    VERSION_CONFLICT = "QRN-VER-0409"
    RESTORE_INCOMPLETE = "QRN-VER-0500"


class QuerinoError(Exception):
    """Base exception for all application errors."""

    retryable = False

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INTERNAL_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class DocumentNotFoundError(QuerinoError):
    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(
            f"Document {document_id} not found",
            code=ErrorCodes.DOC_NOT_FOUND,
            status_code=404,
            details={"document_id": document_id},
        )


class VersionNotFoundError(QuerinoError):
    def __init__(self, document_id: str, version_number: int) -> None:
        self.document_id = document_id
        self.version_number = version_number
        super().__init__(
            f"Version v{version_number} of document {document_id} not found",
            code=ErrorCodes.VERSION_NOT_FOUND,
            status_code=404,
            details={"document_id": document_id, "version_number": version_number},
        )


class VersionConflictError(QuerinoError):
    """Another writer already created this version number for the document.

    Callers should refetch the current maximum version number and retry with
    the corrected number instead of resubmitting the stale one.
    """

    retryable = True

    def __init__(self, document_id: str, version_number: int) -> None:
        self.document_id = document_id
        self.version_number = version_number
        super().__init__(
            f"Version v{version_number} already exists for document {document_id}",
            code=ErrorCodes.VERSION_CONFLICT,
            status_code=409,
            details={"document_id": document_id, "version_number": version_number},
        )


class RestoreIncompleteError(QuerinoError):
    """The live document was restored but the restore version was not recorded."""

    def __init__(self, document_id: str, restored_version: int) -> None:
        self.document_id = document_id
        self.restored_version = restored_version
        super().__init__(
            f"Document {document_id} was restored to v{restored_version} "
            "but the version history entry could not be created",
            code=ErrorCodes.RESTORE_INCOMPLETE,
            status_code=500,
            details={"document_id": document_id, "restored_version": restored_version},
        )
