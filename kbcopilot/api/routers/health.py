"""
Health check API endpoints.

Routes: GET /health, GET /health/vector-store

Dependencies: kbcopilot.boundary.vdb
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from kbcopilot.api.deps import get_vector_store
from kbcopilot.boundary.vdb.base import VectorStore


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/vector-store", response_model=HealthResponse)
async def health_check_vector_store(
    vector_store: VectorStore = Depends(get_vector_store),
) -> HealthResponse:
    """Vector store health check; StorageError becomes a 503."""
    await vector_store.ping()
    return HealthResponse(status="healthy", message="Vector store accessible")
