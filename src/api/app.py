"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
exception handlers and router registration.

Every error response has the shape {"error": "<generic message>"}.
Internal detail is logged, never returned.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.admission import AdmissionRejectedError
from src.api.chat import GENERIC_ERROR_MESSAGE, rate_limit_headers
from src.api.chat import router as chat_router
from src.api.routes import router as extract_router
from src.completion import UpstreamError
from src.models.validation import InvalidChatRequestError
from src.parsing.pdf_parser import PDFParseError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting Document Chat API...")
    yield
    logger.info("Shutting down Document Chat API...")


async def admission_rejected_handler(request: Request, exc: AdmissionRejectedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": "Too Many Requests"},
        headers={
            "Retry-After": str(exc.decision.retry_after),
            **rate_limit_headers(exc.decision),
        },
    )


async def invalid_request_handler(request: Request, exc: InvalidChatRequestError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(f"[API {request.url.path}] Internal Error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR_MESSAGE},
    )


async def pdf_parse_error_handler(request: Request, exc: PDFParseError) -> JSONResponse:
    logger.warning(f"[API {request.url.path}] PDF parse error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Failed to parse PDF"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug(f"[API {request.url.path}] Request validation failed: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"[API {request.url.path}] Unhandled error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR_MESSAGE},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Document Chat API",
        description=(
            "Chat with an uploaded PDF. Extracts document text and streams "
            "language model answers grounded in it, with per-client "
            "request admission control."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(AdmissionRejectedError, admission_rejected_handler)
    application.add_exception_handler(InvalidChatRequestError, invalid_request_handler)
    application.add_exception_handler(UpstreamError, upstream_error_handler)
    application.add_exception_handler(PDFParseError, pdf_parse_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    application.include_router(chat_router)
    application.include_router(extract_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "document-chat"}

    return application


app = create_app()
