"""
FastAPI application entry point for the Proco backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from proco.config import Settings, get_settings
from proco.dependencies import AppContext, build_context
from proco.routes import router

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
    )


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), _reason(exc.status_code))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request body", _reason(400))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Server error", str(exc))


@asynccontextmanager
async def lifespan(app: FastAPI):
    built_here = False
    if app.state.context is None:
        # Pinging MongoDB blocks for up to the connect timeout.
        app.state.context = await run_in_threadpool(build_context, app.state.settings)
        built_here = True
    try:
        yield
    finally:
        if built_here:
            app.state.context.close()


def create_app(
    context: Optional[AppContext] = None, settings: Optional[Settings] = None
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Proco Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
