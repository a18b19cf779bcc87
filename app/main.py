# =============================================================================
# FastAPI Application — Factory, Lifespan, Error Handlers
# =============================================================================
#
# STARTUP (lifespan):
#   1. Validate the signing secret (fail closed outside tests)
#   2. Probe the OS secure random source
#   3. Build the async engine and check the key store is reachable
#   4. Create the api_keys table if configured
#   5. Wire SqlKeyStore → CredentialService onto app.state
#
# Any failure raises FatalStartupError from the lifespan, so the server
# never starts accepting requests.
#
# ERROR MAPPING:
#   ClientInputError, RequestValidationError → 400 {success:false, message}
#   StorageError                             → 500 {success:false, "Database error"}
#   any other exception                      → 500 {success:false, "Internal error"}
# =============================================================================

from __future__ import annotations

import logging
import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.health import router as health_router
from app.api.keys import router as keys_router
from app.config import Settings, get_settings
from app.db.engine import (
    build_engine,
    build_session_factory,
    check_connection,
    create_tables,
)
from app.errors import ClientInputError, FatalStartupError, StorageError
from app.models.responses import ErrorResponse
from app.services.credentials import CredentialService
from app.services.keystore import SqlKeyStore

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    """Install the root log handler at `level`."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def _check_random_source() -> None:
    try:
        secrets.token_bytes(1)
    except (NotImplementedError, OSError) as e:
        raise FatalStartupError("Secure random source unavailable") from e


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the key store and credential service; dispose the engine on shutdown."""
    settings: Settings = app.state.settings
    settings.validate_for_startup()
    _check_random_source()

    engine = build_engine(settings)
    try:
        await check_connection(engine)
        if settings.db_create_tables:
            await create_tables(engine)
    except FatalStartupError:
        await engine.dispose()
        raise

    store = SqlKeyStore(build_session_factory(engine))
    app.state.engine = engine
    app.state.credential_service = CredentialService(store, settings.hmac_secret)
    logger.info(
        "%s %s started (environment=%s)",
        settings.app_name, settings.app_version, settings.environment,
    )

    yield

    await engine.dispose()
    logger.info("%s stopped", settings.app_name)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


async def _client_input_handler(
    request: Request, exc: ClientInputError,
) -> JSONResponse:
    return _error(400, str(exc))


async def _request_validation_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error(400, f"Invalid request body: {detail}")


async def _storage_error_handler(
    request: Request, exc: StorageError,
) -> JSONResponse:
    # Detail was already logged by the store; callers get a generic message.
    logger.error("Storage error on %s %s", request.method, request.url.path)
    return _error(500, "Database error")


async def _unhandled_error_handler(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return _error(500, "Internal error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClientInputError, _client_input_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Issue, validate, list and revoke API keys",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(keys_router)

    # Static UI last: the "/" mount matches every path not routed above.
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app
