"""Application services."""

from kbcopilot.application.services.document_service import DocumentService

__all__ = ["DocumentService"]
