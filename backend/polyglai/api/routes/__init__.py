"""API routes module."""

from .assessments import router as assessments_router
from .recordings import router as recordings_router
from .speech import router as speech_router

__all__ = ["recordings_router", "assessments_router", "speech_router"]
