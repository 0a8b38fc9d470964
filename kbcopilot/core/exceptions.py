"""
Exception hierarchy for the knowledge-base copilot.

Three families cover every failure the core can surface: caller input
faults (ValidationError), failed or timed-out calls to the embedding or
chat model services (UpstreamServiceError), and relational store faults
(StorageError). All exceptions carry a details dict for logging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeBaseError):
    """Raised when caller input is malformed (empty text, bad pagination, bad tool args)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UpstreamServiceError(KnowledgeBaseError):
    """Raised when an external model service call fails or times out."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize upstream service error.

        Args:
            message: Error message
            service: Name of the upstream service (embedding, chat)
            details: Additional context
        """
        details = details or {}
        if service:
            details["service"] = service
        super().__init__(message, details)


class EmbeddingServiceError(UpstreamServiceError):
    """Raised when embedding generation fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, service="embedding", details=details)


class ModelServiceError(UpstreamServiceError):
    """Raised when the chat model stream fails or stalls."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, service="chat", details=details)


class StorageError(KnowledgeBaseError):
    """Raised when the relational store is unreachable or rejects a write."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Operation that failed (save, query, delete, list)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class SessionBusyError(KnowledgeBaseError):
    """Raised when a session already has an exchange in flight."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize session busy error.

        Args:
            session_id: ID of the busy session
            details: Additional context
        """
        details = details or {}
        details["session_id"] = session_id
        super().__init__(f"Session {session_id} already has an exchange in progress", details)


class UnsupportedFileTypeError(ValidationError):
    """Raised when an uploaded file is not a supported text format."""

    def __init__(self, filename: str, allowed: list[str]) -> None:
        super().__init__(
            f"Unsupported file type: {filename}",
            field="files",
            details={"filename": filename, "allowed_extensions": allowed},
        )


class DocumentNotFoundError(KnowledgeBaseError):
    """Raised when a document has no stored chunks."""

    def __init__(self, document_id: str) -> None:
        super().__init__("Document not found", {"document_id": document_id})
