"""FastAPI application with lifespan, error handlers and health endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reddit_notion import __version__
from reddit_notion.auth.router import router as auth_router
from reddit_notion.config import get_settings
from reddit_notion.errors import MalformedInputError, ServiceError
from reddit_notion.logging_config import configure_logging
from reddit_notion.notion.router import router as notion_router
from reddit_notion.reddit.router import router as reddit_router
from reddit_notion.storage.db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, load config, create tables."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    await init_db()
    yield


app = FastAPI(
    title="Reddit to Notion",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.include_router(auth_router)
app.include_router(reddit_router)
app.include_router(notion_router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render any ServiceError as {"error", "retryable"} with its status code."""
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "retryable": exc.retryable},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request input as a 400 before any outbound call."""
    error = MalformedInputError("Invalid request")
    return JSONResponse(
        status_code=error.status_code,
        content={
            "error": error.detail,
            "retryable": error.retryable,
            "details": _validation_details(exc),
        },
    )


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "reddit-notion",
        "version": __version__,
    }
