"""
API routes module.

FastAPI routers for the document, chat and health endpoints.
"""

from fastapi import APIRouter

from .routers import (
    chat_router,
    chat_stream_router,
    health_router,
    upload_router,
)

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(upload_router)
api_router.include_router(chat_router)
api_router.include_router(chat_stream_router)

__all__ = ["api_router"]
