"""
FastAPI application entry point for the chat relay.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.routes import MESSAGES_REQUIRED, router
from backend.schemas import ErrorResponse
from shared.config import get_settings

logger = logging.getLogger(__name__)


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    # A malformed `messages` field reads the same as a missing one.
    if any("messages" in error.get("loc", ()) for error in exc.errors()):
        message = MESSAGES_REQUIRED
    else:
        message = "Invalid request body."
    return JSONResponse(
        status_code=400, content=ErrorResponse(error=message).model_dump()
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Spark Chat Relay", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    if not settings.openai_api_key:
        logger.error("Missing OPENAI_API_KEY; /chat requests will fail")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
