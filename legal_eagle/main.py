"""
FastAPI application bootstrap with: \n
- Lifespan-managed initialization of the database schema and the connection registry \n
- CORS configured for the frontend \n
- Exception handlers mapping the error taxonomy to `{"error": ...}` bodies \n
- WebSocket endpoint for real-time chat delivery \n

Environment contract (from `settings`): \n
- FRONTEND_URL: allowed CORS origin. \n
- LOG_LEVEL: root logging level. \n
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import legal_eagle.database.entities  # noqa: F401
from legal_eagle.api.fast_api import router
from legal_eagle.database.config.config import settings
from legal_eagle.database.config.connection_engine import connection_engine, metadata
from legal_eagle.errors import AppError
from legal_eagle.realtime.connection_registry import ConnectionRegistry
from legal_eagle.realtime.socket_handler import handle_socket

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding):
        * Create missing tables.
        * Attach a fresh `ConnectionRegistry` to `app.state`.
    - On shutdown (after yielding):
        * Dispose of the engine's connection pool.
    """
    logger.info("Application starting up...")
    metadata.create_all(bind=connection_engine, checkfirst=True)
    app.state.connection_registry = ConnectionRegistry()
    try:
        yield
    finally:
        connection_engine.dispose()
        logger.info("Application shutting down...")


app = FastAPI(title="Legal Eagle API", lifespan=lifespan)
"""Instantiates the FastAPI application object with the lifespan handler above."""

# -----------------------
# CORS configuration
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------
# Error handling
# -----------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Report request validation failures as 400 with the first problem as the message.
    """
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# -----------------------
# API routes
# -----------------------
app.include_router(router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Real-time chat endpoint.

    Protocol
    --------
    - Frames are JSON objects `{"event": <name>, "data": {...}}`.
    - The first useful frame is `authenticate {token}`; see `legal_eagle.realtime.socket_handler`.
    - Errors are reported as `error` / `authError` frames; the socket stays open.
    """
    await handle_socket(websocket, websocket.app.state.connection_registry)
