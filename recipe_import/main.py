"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from recipe_import.api.routes import health, recipes, tags
from recipe_import.config import settings
from recipe_import.core.request_id import get_request_id
from recipe_import.middleware.logging import RequestLoggingMiddleware
from recipe_import.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from recipe_import.middleware.security import (
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    setup_compression,
    setup_cors,
)
from recipe_import.utils.exceptions import (
    ExtractionFailed,
    FetchError,
    RecipeImportException,
    ValidationError,
)
from recipe_import.utils.logging_config import setup_logging

# Setup logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Recipe Import API",
    description="Imports recipes from web pages, PDF text and OCR text",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic error contexts may hold exception instances
    return [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()

    logger.warning(
        f"Validation error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "detail": jsonable_errors(exc),
            "request_id": request_id,
            "message": "Request validation failed. Check the 'detail' field for specific errors.",
        },
    )


@app.exception_handler(RecipeImportException)
async def recipe_import_exception_handler(request: Request, exc: RecipeImportException) -> JSONResponse:
    """Map the service's exceptions to HTTP responses."""
    request_id = get_request_id()

    if isinstance(exc, ExtractionFailed):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        error_message = "Extraction failed"
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
        error_message = "Validation error"
    elif isinstance(exc, FetchError):
        status_code = status.HTTP_502_BAD_GATEWAY
        error_message = "Fetch failed"
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error_message = "Internal server error"

    if status_code >= 500:
        logger.error(f"Exception: {error_message}", extra={"exception": str(exc)}, exc_info=True)
    else:
        logger.warning(f"Exception: {error_message}", extra={"exception": str(exc)})

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_message,
            "detail": str(exc),
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id()

    logger.error(f"Unexpected exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
            "request_id": request_id,
        },
    )


# Add middleware (order matters!)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_compression(app)
setup_cors(app)

app.include_router(health.router)
app.include_router(recipes.router)
app.include_router(tags.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    logger.info("Recipe Import API starting up...")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Rate limit: {settings.rate_limit_per_hour} requests/hour")
    logger.info(f"Document limit: {settings.max_document_chars} characters")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("Recipe Import API shutting down...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Recipe Import API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
