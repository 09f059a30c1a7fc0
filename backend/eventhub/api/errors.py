"""
Maps domain error codes to HTTP responses.

The services never pick status codes; this table is the only place that does.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from eventhub.core.logging import get_logger
from eventhub.domain.errors import DomainError, ErrorCode
from eventhub.schemas.event import ErrorResponse

logger = get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_CAPACITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_JOINED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_FULL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.JOIN_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info("domain_error", code=exc.code.value, status_code=status_code)

    headers = {"Retry-After": "1"} if exc.code is ErrorCode.STORAGE_UNAVAILABLE else None
    body = ErrorResponse(code=exc.code.value, message=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)
