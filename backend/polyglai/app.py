"""
PolyglAI Backend - FastAPI Application

Pronunciation practice: record a phrase, transcribe it and score it.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (parent of backend/)
# Must happen before importing modules that use environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from polyglai.api.dependencies import cleanup_dependencies, init_dependencies  # noqa: E402
from polyglai.api.routes import (  # noqa: E402
    assessments_router,
    recordings_router,
    speech_router,
)
from polyglai.config import (  # noqa: E402
    CORS_ALLOWED_HEADERS,
    CORS_ALLOWED_METHODS,
    get_cors_allow_credentials,
    get_cors_origins,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager for startup/shutdown events.

    Startup:
    - Initialize singleton dependencies

    Shutdown:
    - Abandon an unfinished recording
    - Close HTTP connections
    """
    logger.info("Starting PolyglAI backend...")

    await init_dependencies()
    logger.info("Dependencies initialized")

    yield

    logger.info("Shutting down PolyglAI backend...")
    await cleanup_dependencies()
    logger.info("Shutdown complete")


app = FastAPI(
    title="PolyglAI API",
    description="Pronunciation assessment for language learners",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration - loaded from environment with restrictive defaults
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=get_cors_allow_credentials(),
    allow_methods=CORS_ALLOWED_METHODS,
    allow_headers=CORS_ALLOWED_HEADERS,
)

# Register API routers
app.include_router(recordings_router)
app.include_router(assessments_router)
app.include_router(speech_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "polyglai-backend",
        "version": "0.1.0",
    }


def main() -> None:
    """Run the API with uvicorn (``polyglai-api`` console script)."""
    import uvicorn

    uvicorn.run(
        "polyglai.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
