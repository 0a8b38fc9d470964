"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_document_service,
    get_orchestrator,
    get_service_cache,
    get_vector_store,
)

__all__ = [
    "ServiceCache",
    "get_document_service",
    "get_orchestrator",
    "get_service_cache",
    "get_vector_store",
]
