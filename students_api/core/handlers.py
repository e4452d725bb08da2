# students_api/core/handlers.py
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from students_api.core.exceptions import ErrorKind, StudentsAPIError
from students_api.core.logging import logger
from students_api.schemas.response import general_error


def error_status(kind: ErrorKind) -> int:
    match kind:
        case ErrorKind.INPUT | ErrorKind.VALIDATION:
            return status.HTTP_400_BAD_REQUEST
        case ErrorKind.NOT_FOUND:
            return status.HTTP_404_NOT_FOUND
        case ErrorKind.STORAGE:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# 1. Errors raised by our own handlers, repository and validation
async def students_api_exception_handler(request: Request, exc: StudentsAPIError):
    logger.error(f"{exc.message}: {exc.error or ''}", extra={"path": request.url.path})
    return JSONResponse(
        status_code=error_status(exc.kind),
        content=general_error(exc.message, exc.error),
    )


# 2. Routing errors (unknown URL, wrong method)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = "Invalid request method"
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Resource not found"
    else:
        message = str(exc.detail)

    logger.error(f"{message}: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=general_error(message, exc.detail),
        headers=getattr(exc, "headers", None),
    )


# 3. Anything else (bugs, library errors); details stay in the log
async def general_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled Exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=general_error("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudentsAPIError, students_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
