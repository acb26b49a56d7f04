"""Uniform JSON envelope for every API response."""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ApiResponse(BaseModel):
    """``{statusCode, data, message, success}`` envelope."""

    statusCode: int
    data: Any = None
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data: Any, message: str = "Success", status_code: int = 200) -> "ApiResponse":
        return cls(statusCode=status_code, data=data, message=message, success=status_code < 400)

    @classmethod
    def error(cls, status_code: int, message: str) -> "ApiResponse":
        return cls(statusCode=status_code, data=None, message=message, success=False)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(status_code, message).model_dump(),
        headers=headers,
    )
