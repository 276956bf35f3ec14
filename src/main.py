from __future__ import annotations

import logging

from fastapi import FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.dependencies import Collaborators
from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.history_routes import router as history_router
from src.infrastructure.api.routes.render_routes import router as render_router
from src.infrastructure.api.routes.session_routes import router as session_router
from src.infrastructure.config import Settings
from src.infrastructure.sessions.session_store import SessionStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    collaborators: Collaborators | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Reframe Backend",
        version="0.1.0",
        description="""
        ## Reframe Backend API

        Scene revision and generation lineage for the Reframe visual editor.

        ### Features
        - **Editing Sessions**: Upload an image, analyze it into a structured scene,
          edit the scene and see which fields changed
        - **Rendering**: Re-synthesize an image from the edited scene; repeated
          renders of the same scene and prompt are served from a cache
        - **Version History**: Ordered lineage of uploads, analyses, edits and
          renders, with provenance for every rendered output

        ### Error Responses
        - **400 Bad Request**: Missing image or scene, or content filtered by safety settings
        - **404 Not Found**: Session or output does not exist
        - **422 Unprocessable Entity**: Validation error in request body
        - **429 Too Many Requests**: Image model rate limit; wait and retry
        - **502 Bad Gateway**: Prompt or image model failed
        """,
    )
    app.state.settings = settings
    app.state.session_store = SessionStore(
        cache_max_entries=settings.cache_max_entries,
        object_matching=settings.object_matching,
    )
    app.state.collaborators = collaborators or Collaborators.from_settings(settings)
    add_default_middlewares(app, settings)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Reframe API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "reframe-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(session_router)
    app.include_router(render_router)
    app.include_router(history_router)
    return app
