from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import traceback
from typing import Callable

from ..exceptions import AllModelsExhaustedError, ContentAIError, OutputValidationError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            # Log the error
            logger.error(
                f"Unhandled exception: {str(e)}\n"
                f"Path: {request.url.path}\n"
                f"Method: {request.method}\n"
                f"Traceback: {traceback.format_exc()}"
            )

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": "An unexpected error occurred",
                    "detail": str(e) if request.app.debug else None
                }
            )


async def content_ai_error_handler(request: Request, exc: ContentAIError) -> JSONResponse:
    if isinstance(exc, AllModelsExhaustedError):
        logger.warning(f"{request.url.path}: all models failed ({exc.status_code}): {exc.message}")
    elif isinstance(exc, OutputValidationError) or exc.status_code >= 500:
        logger.error(f"{request.url.path}: {type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"{request.url.path}: rejected ({exc.status_code}): {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    if errors and errors[0].get("loc"):
        field = errors[0]["loc"][-1]
        message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentAIError, content_ai_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_middleware(ErrorHandlerMiddleware)
