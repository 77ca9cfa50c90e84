"""Mapping of classified orchestrator errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ...application.treasury.dtos import (
    InsufficientFundsResponseDTO,
    OperationErrorResponseDTO,
)
from ...domain.errors import InsufficientFunds, OperationError


def insufficient_funds_response(
    error: InsufficientFunds,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    body = InsufficientFundsResponseDTO.from_error(error)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
    )


def operation_error_response(
    error: OperationError,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    *,
    insufficient_funds_status: int = status.HTTP_400_BAD_REQUEST,
) -> JSONResponse:
    if isinstance(error, InsufficientFunds):
        return insufficient_funds_response(error, insufficient_funds_status)
    body = OperationErrorResponseDTO.from_error(error)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OperationError)
    async def handle_operation_error(
        request: Request, exc: OperationError
    ) -> JSONResponse:
        return operation_error_response(exc)
