from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

GENERIC_ERROR = "Internal server error"
GENERIC_DETAIL = "Something went wrong"


def error_payload(exc: BaseException, is_development: bool) -> Dict[str, Any]:
    """Body for a 500 response; the raw message is only exposed in development."""
    return {
        "error": GENERIC_ERROR,
        "message": str(exc) if is_development else GENERIC_DETAIL,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and wrong methods on known paths are both "not found"
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED) and exc.detail in (
            "Not Found",
            "Method Not Allowed",
        ):
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
