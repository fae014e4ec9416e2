"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from .routes import router
from .workspace import Workspace

# Global workspace instance
_workspace: Optional[Workspace] = None


def get_workspace() -> Workspace:
    """Get the global workspace instance."""
    global _workspace
    if _workspace is None:
        _workspace = Workspace.from_settings()
    return _workspace


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    workspace = get_workspace()
    await workspace.initialize()
    yield
    # Shutdown
    await workspace.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Lukunde",
        description="School gradebook sheets with rules and shareable access codes",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
