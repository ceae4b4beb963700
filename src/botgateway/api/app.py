"""
FastAPI application factory for the Bot Gateway.

Wires storage, the chat orchestrator and routers together with request
timing, metrics and uniform `{"message": ...}` error bodies.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..services.catalog import CatalogService, create_catalog_repository
from ..services.chat_orchestrator import ChatOrchestrator
from ..services.history import create_history_repository
from ..shared import get_logger, get_metrics, get_settings, setup_logging
from ..shared.exceptions import AuthorizationError, ResolutionMissingError
from ..shared.infrastructure.database import close_database_connections
from .models import ErrorResponse
from .routers import bot_api, health

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def build_orchestrator() -> ChatOrchestrator:
    """Orchestrator over the storage backend selected by settings."""
    return ChatOrchestrator(
        catalog=CatalogService(create_catalog_repository()),
        history=create_history_repository(),
    )


def create_app(orchestrator: Optional[ChatOrchestrator] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator; built from settings at startup when omitted

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        logger = get_logger(__name__)
        logger.info(f"Starting {settings.app_name} {settings.app_version} (storage: {settings.storage_backend})")

        if orchestrator is not None:
            app.state.orchestrator = orchestrator
        else:
            app.state.orchestrator = build_orchestrator()

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        if settings.storage_backend == "postgres":
            close_database_connections()

    app = FastAPI(
        title=settings.app_name,
        description="Retrieval-augmented chat API for configured bots",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if settings.enable_metrics:
            get_metrics().record_api_request(
                endpoint=request.url.path,
                method=request.method,
                duration_seconds=process_time,
                status_code=response.status_code
            )

        return response

    @app.exception_handler(AuthorizationError)
    async def authorization_exception_handler(request: Request, exc: AuthorizationError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=exc.message).model_dump()
        )

    @app.exception_handler(ResolutionMissingError)
    async def resolution_exception_handler(request: Request, exc: ResolutionMissingError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=exc.message).model_dump()
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=str(exc.detail)).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors
        )
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(message=f"Invalid request: {detail}").model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger = get_logger(__name__)
        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=INTERNAL_ERROR_MESSAGE).model_dump()
        )

    app.include_router(bot_api.router)
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])

    return app
