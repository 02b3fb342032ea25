# src/shared/http.py
"""
Общий HTTP слой сервисов.
CORS для всех ответов, обработчики доменных ошибок и ошибок валидации.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.common.exceptions import FreightCoreError
from src.common.logger import log_error, log_warning
from src.shared.models.common import ErrorResponse

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "authorization, x-client-info, apikey, content-type",
    "access-control-allow-methods": "POST, OPTIONS",
    "access-control-max-age": "86400",
}

_HTTP_ERROR_CODES = {
    404: "not_found",
    405: "method_not_allowed",
}


def error_response(status_code: int, error_code: str, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    """Формирует JSON ответ в формате ErrorResponse."""
    body = ErrorResponse(error_code=error_code, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def domain_error_handler(request: Request, exc: FreightCoreError) -> JSONResponse:
    if exc.status_code >= 500:
        await log_error(f"{request.method} {request.url.path}: {exc.error_code} {exc.message}")
    else:
        await log_warning(f"{request.method} {request.url.path}: {exc.error_code} {exc.message}")
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details or None)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return error_response(400, "invalid_input", "Missing or malformed fields", {"errors": errors})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    return error_response(exc.status_code, error_code, str(exc.detail))


def install_http_handlers(app: FastAPI) -> None:
    """
    Подключает к приложению CORS middleware и обработчики ошибок.

    OPTIONS отвечает 204 без обращения к маршрутам. Необработанные
    исключения превращаются в 500 unexpected_error с CORS заголовками.
    """

    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next: Any) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception as e:
            await log_error(f"{request.method} {request.url.path}: {e}", exc_info=True)
            response = error_response(500, "unexpected_error", str(e) or "Unexpected error")

        response.headers.update(CORS_HEADERS)
        return response

    app.add_exception_handler(FreightCoreError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
