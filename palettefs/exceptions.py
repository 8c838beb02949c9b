"""Custom exception hierarchy for PaletteFS."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Lookup errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"

    # Validation errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Persistence errors
    CORRUPT_PERSISTED_STATE = "CORRUPT_PERSISTED_STATE"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PaletteFSException(Exception):
    """
    Base exception for all PaletteFS errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class FileRecordNotFoundError(PaletteFSException):
    """File record not found in the namespace or the store."""

    def __init__(self, file_ref: Any):
        super().__init__(
            f"File not found: {file_ref}",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"file": str(file_ref)}
        )


class FolderNotFoundError(PaletteFSException):
    """Folder path does not resolve in the namespace."""

    def __init__(self, folder_path: str):
        super().__init__(
            f"Folder not found: {folder_path}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_path": folder_path}
        )


class InvalidArgumentError(PaletteFSException):
    """Caller input violates an invariant; the operation was aborted."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.INVALID_ARGUMENT,
            status_code=400,
            details=details
        )


class CorruptPersistedStateError(PaletteFSException):
    """Stored metadata or record content cannot be interpreted."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Corrupt persisted state at {key}: {reason}",
            ErrorCode.CORRUPT_PERSISTED_STATE,
            status_code=500,
            details={"key": key, "reason": reason}
        )


class PersistenceError(PaletteFSException):
    """Key-value store operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.PERSISTENCE_ERROR,
            status_code=500,
            details=details
        )
