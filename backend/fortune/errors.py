"""Error codes and exceptions for the HTTP shell."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes returned by the API."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_BET = "INVALID_BET"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    SPIN_REFUSED = "SPIN_REFUSED"
    ACTION_REFUSED = "ACTION_REFUSED"
    UNKNOWN_MODIFIER_TARGET = "UNKNOWN_MODIFIER_TARGET"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_BET: 400,
    ErrorCode.INSUFFICIENT_FUNDS: 402,
    ErrorCode.SPIN_REFUSED: 409,
    ErrorCode.ACTION_REFUSED: 409,
    ErrorCode.UNKNOWN_MODIFIER_TARGET: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Whether retrying later can succeed without changing the request
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.INVALID_BET: False,
    ErrorCode.INSUFFICIENT_FUNDS: False,
    ErrorCode.SPIN_REFUSED: True,
    ErrorCode.ACTION_REFUSED: True,
    ErrorCode.UNKNOWN_MODIFIER_TARGET: False,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    error: ErrorBody


class GameError(Exception):
    """Base API error that maps to an error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )
