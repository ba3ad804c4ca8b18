"""FastAPI application for the trackhub service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from trackhub import __version__
from trackhub.config import Settings, build_store
from trackhub.sync import (
    ErrorKind,
    LocalMirror,
    RemoteStore,
    SyncEngine,
    SyncError,
    VersionConflict,
)

from .models import ConflictResponse, ErrorResponse, HealthResponse
from .routes import router

logger = logging.getLogger(__name__)

HTTP_413_PAYLOAD_TOO_LARGE = 413

ERROR_STATUS = {
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_A_DIRECTORY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_A_DOCUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.REMOTE_UNAVAILABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.MIRROR_SYNC_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_CODES = {
    ErrorKind.NOT_A_DOCUMENT: "NOT_A_FILE",
}

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    HTTP_413_PAYLOAD_TOO_LARGE: "PAYLOAD_TOO_LARGE",
}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RemoteStore] = None,
    mirror: Optional[LocalMirror] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Service settings; read from the environment when omitted
        store: Remote store; built from ``settings`` when omitted
        mirror: Local mirror; rooted at ``settings.mirror_root`` when omitted
    """
    if settings is None:
        settings = Settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if store is None:
        store = build_store(settings)
    if mirror is None:
        mirror = LocalMirror(settings.mirror_root)

    engine = SyncEngine(
        store=store,
        mirror=mirror,
        ref=settings.github_branch,
        records_dir=settings.records_dir,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting trackhub ({store.describe()}, mirror={mirror.root})")
        yield
        logger.info("Shutting down trackhub")
        store.close()

    app = FastAPI(
        title="trackhub",
        description="Documents stored in a GitHub repository with a local mirror",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        """Reject bodies larger than the configured limit."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            body_size = int(content_length)
        elif "chunked" in request.headers.get("transfer-encoding", "").lower():
            # no declared length; the body is cached for the route
            body_size = len(await request.body())
        else:
            body_size = 0

        if body_size > settings.max_body_bytes:
            return JSONResponse(
                status_code=HTTP_413_PAYLOAD_TOO_LARGE,
                content=ErrorResponse(
                    message="Request body too large",
                    error_code="PAYLOAD_TOO_LARGE",
                ).model_dump(),
            )
        return await call_next(request)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        """Health check endpoint."""
        return HealthResponse(status="ok", service="trackhub", remote=store.describe())

    app.include_router(router, prefix="/api", tags=["documents"])

    # Exception handlers
    @app.exception_handler(SyncError)
    async def sync_error_handler(request: Request, exc: SyncError):
        """Translate sync failures into HTTP responses by error kind."""
        status_code = ERROR_STATUS[exc.kind]
        error_code = ERROR_CODES.get(exc.kind, exc.kind.value)

        if isinstance(exc, VersionConflict):
            logger.warning(f"Version conflict on {exc.path}: {exc}")
            body = ConflictResponse(
                message=str(exc),
                error_code=error_code,
                path=exc.path,
                expected_sha=exc.expected_version_tag,
            )
            return JSONResponse(status_code=status_code, content=body.model_dump())

        if status_code >= 500:
            logger.error(f"{exc.kind.value} for {exc.path}: {exc} ({exc.cause!r})")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(message=str(exc), error_code=error_code).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are bad requests, not 422s."""
        locations = [error.get("loc") or ("body",) for error in exc.errors()]
        fields = sorted(
            {loc[-1] for loc in locations if isinstance(loc[-1], str)} - {"body"}
        )
        message = f"Missing or invalid {'/'.join(fields)}" if fields else "Bad request"
        body = ErrorResponse(message=message, error_code="BAD_REQUEST")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with consistent error format."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                message=str(exc.detail),
                error_code=HTTP_ERROR_CODES.get(exc.status_code),
            ).model_dump(),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                message="Internal server error", error_code="INTERNAL_ERROR"
            ).model_dump(),
        )

    if settings.static_dir:
        app.mount(
            "/", StaticFiles(directory=settings.static_dir, html=True), name="static"
        )

    return app
