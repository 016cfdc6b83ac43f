from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrdine.api.middleware.request_id import get_request_id
from qrdine.application.ports.gateway import GatewayError, RecordNotFoundError, RowShapeError
from qrdine.application.use_cases.analytics_export import InvalidDateRangeError
from qrdine.application.use_cases.delete_orders import ConfirmationRequiredError
from qrdine.application.use_cases.order_status import InvalidOrderStatusError
from qrdine.application.use_cases.place_order import MenuItemNotFoundError, VariantRequiredError
from qrdine.application.use_cases.quick_actions import QuickActionNotFoundError
from qrdine.application.use_cases.submit_order import (
    EmptyCartError,
    OrderSubmissionError,
    PartialOrderWriteError,
)

logger = logging.getLogger(__name__)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.warning(
                "request_failed",
                extra={"code": code, "error": str(exc), "error_type": type(exc).__name__},
            )
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (EmptyCartError, 400, "EMPTY_CART"),
        (VariantRequiredError, 400, "VARIANT_REQUIRED"),
        (MenuItemNotFoundError, 404, "MENU_ITEM_NOT_FOUND"),
        (QuickActionNotFoundError, 404, "QUICK_ACTION_NOT_FOUND"),
        (InvalidOrderStatusError, 400, "INVALID_ORDER_STATUS"),
        (InvalidDateRangeError, 400, "INVALID_DATE_RANGE"),
        (ConfirmationRequiredError, 400, "CONFIRMATION_REQUIRED"),
        (OrderSubmissionError, 503, "ORDER_SUBMISSION_FAILED"),
        (PartialOrderWriteError, 503, "ORDER_SUBMISSION_FAILED"),
        (RecordNotFoundError, 404, "NOT_FOUND"),
        (RowShapeError, 502, "DATA_INTEGRITY_ERROR"),
        (GatewayError, 503, "GATEWAY_UNAVAILABLE"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
