"""
FastAPI Application - REST API for the wizard opponent.

Endpoints:
    POST   /api/v1/wizard/move      Choose the wizard's cell (never fails)
    POST   /api/v1/wizard/analyze   Rank every legal cell of a position
    GET    /api/v1/wizard/errors    Counted engine errors
    DELETE /api/v1/wizard/cache     Flush the evaluation cache
    GET    /health                  Health check
    GET    /                        API info

The state value table is loaded once when the application starts.
All responses are JSON with explicit Pydantic schemas.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from .. import __version__
from ..config import EngineSettings, configure_logging

logger = logging.getLogger(__name__)


def create_app(service=None, settings: Optional[EngineSettings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional WizardService instance (creates new if not provided)
        settings: Optional EngineSettings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install 'piscari[api]'"
        )

    from ..errors import InvalidBoardError, ValueTableNotLoadedError
    from ..strategy.move_evaluator import MoveEvaluator
    from .service import WizardService
    from .schemas import (
        # Request models
        MoveRequest,
        AnalyzeRequest,
        # Response models
        MoveResponse,
        AnalyzeResponse,
        ErrorStatsResponse,
        CacheClearedResponse,
        HealthResponse,
        ErrorResponse,
        # Enums
        ErrorCode,
    )

    settings = settings or EngineSettings.from_env()
    configure_logging(settings.log_level)

    wizard_service = service or WizardService(engine=MoveEvaluator.from_settings(settings))

    @asynccontextmanager
    async def lifespan(app):
        await wizard_service.initialize()
        yield

    app = FastAPI(
        title="Piscari Wizard API",
        description="""
Wizard opponent for Piscari, a 3x3 food-chain tic-tac-toe.

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_BOARD` | Board, rolled icon or color failed validation |
| `TABLE_NOT_LOADED` | State value table is unavailable |
| `INTERNAL_ERROR` | Unexpected failure |

`POST /move` never answers with these: it falls back to a simple
heuristic instead.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    # =========================================================================
    # Wizard Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/wizard/move",
        response_model=MoveResponse,
        tags=["Wizard"],
        summary="Choose the wizard's cell for a roll",
    )
    async def wizard_move(request: MoveRequest) -> MoveResponse:
        """
        Choose where the wizard plays its rolled icon.

        `cell` is null only when no cell is legal (the turn is forfeit).
        Malformed boards are answered by the fallback heuristic.
        """
        return await wizard_service.suggest_move(request)

    @app.post(
        "/api/v1/wizard/analyze",
        response_model=AnalyzeResponse,
        responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
        tags=["Wizard"],
        summary="Rank every legal cell of a position",
    )
    async def wizard_analyze(request: AnalyzeRequest):
        try:
            return wizard_service.analyze(request)
        except InvalidBoardError as exc:
            return make_error_response(
                ErrorCode.INVALID_BOARD,
                str(exc),
                status_code=422,
                details={"errors": exc.errors},
            )
        except ValueTableNotLoadedError as exc:
            return make_error_response(ErrorCode.TABLE_NOT_LOADED, str(exc), status_code=503)
        except Exception as exc:
            logger.exception("Analysis failed")
            return make_error_response(
                ErrorCode.INTERNAL_ERROR,
                f"Analysis failed: {exc}",
                status_code=500,
            )

    @app.get(
        "/api/v1/wizard/errors",
        response_model=ErrorStatsResponse,
        tags=["Wizard"],
        summary="Counted engine errors",
    )
    async def wizard_errors() -> ErrorStatsResponse:
        return wizard_service.error_stats()

    @app.delete(
        "/api/v1/wizard/cache",
        response_model=CacheClearedResponse,
        tags=["Wizard"],
        summary="Flush the evaluation cache",
    )
    async def wizard_clear_cache() -> CacheClearedResponse:
        return wizard_service.clear_cache()

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return wizard_service.health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Piscari Wizard API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    app.state.wizard_service = wizard_service
    return app
