"""
Custom exceptions for document handling and reconciliation.
"""
from pathlib import Path
from typing import Any, Dict, Optional


class RbacSyncError(Exception):
    """Base exception for sync errors."""

    def __init__(
        self,
        message: str,
        original_exception: Optional[Exception] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception
        self.metadata = metadata or {}

    def __str__(self) -> str:
        base = self.message
        if self.metadata:
            base += f" | Metadata: {self.metadata}"
        if self.original_exception:
            base += f" | Original: {str(self.original_exception)}"
        return base


class MissingRolesError(RbacSyncError):
    """Raised when a permission block declares no roles."""

    def __init__(self, collection: str, action: str):
        message = f"Permission block {collection}/{action} is missing roles"
        metadata = {"collection": collection, "action": action}
        super().__init__(message, metadata=metadata)
        self.collection = collection
        self.action = action


class DocumentParseError(RbacSyncError):
    """Raised when a document is not valid YAML or has the wrong shape."""

    def __init__(
        self,
        path: Path,
        reason: str,
        original_exception: Optional[Exception] = None,
    ):
        message = f"Malformed document '{path}': {reason}"
        super().__init__(message, original_exception, {"path": str(path)})
        self.path = path


class DocumentReadError(RbacSyncError):
    """Raised when an existing document cannot be read."""

    def __init__(self, path: Path, original_exception: Optional[Exception] = None):
        message = f"Failed to read document '{path}'"
        super().__init__(message, original_exception, {"path": str(path)})
        self.path = path


class DocumentWriteError(RbacSyncError):
    """Raised when a document cannot be written or removed."""

    def __init__(self, path: Path, original_exception: Optional[Exception] = None):
        message = f"Failed to write document '{path}'"
        super().__init__(message, original_exception, {"path": str(path)})
        self.path = path


class ImportFailedError(RbacSyncError):
    """Raised when one or more collections failed to import."""

    def __init__(self, failures: Dict[str, BaseException]):
        names = ", ".join(sorted(failures))
        message = f"Failed to import permissions for: {names}"
        super().__init__(message, metadata={"collections": sorted(failures)})
        self.failures = failures
