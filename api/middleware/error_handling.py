from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from api.schemas.responses import ErrorResponse
from core.logging import get_api_logger_safe, get_error_logger_safe
from core.utils.exceptions import InvalidTask, NoEnabledAgents, UnsupportedProviderError

logger = get_api_logger_safe("api.middleware.error_handling")
error_logger = get_error_logger_safe("api.middleware.error_handling")


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Global error handling middleware"""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException as e:
            # Let FastAPI handle HTTP exceptions normally
            raise e
        except Exception as e:
            error_logger.error(
                "Unhandled API exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
                exc_info=True
            )

            return JSONResponse(
                status_code=500,
                content=ErrorResponse(
                    error="Internal server error",
                    message="An unexpected error occurred",
                    path=request.url.path,
                ).model_dump(mode="json", exclude_none=True)
            )


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def register_exception_handlers(app: FastAPI) -> None:
    """Map structural validation errors to 400 and unknown providers to 404"""

    @app.exception_handler(InvalidTask)
    async def invalid_task_handler(request: Request, exc: InvalidTask):
        logger.info("Rejected invalid task", path=request.url.path, field=exc.field, error=exc.message)
        return _failure(400, exc.message)

    @app.exception_handler(NoEnabledAgents)
    async def no_agents_handler(request: Request, exc: NoEnabledAgents):
        logger.info("Rejected task without usable agents", path=request.url.path)
        return _failure(400, exc.message)

    @app.exception_handler(UnsupportedProviderError)
    async def unsupported_provider_handler(request: Request, exc: UnsupportedProviderError):
        return _failure(404, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        logger.info("Rejected malformed request", path=request.url.path, errors=len(errors))
        return _failure(400, f"{location}: {message}" if location else message)
