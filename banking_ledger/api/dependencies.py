"""
Shared API dependencies and result translation
"""

from typing import TypeVar

from fastapi import HTTPException, Request, status

from ..errors import ErrorCode, OperationResult
from ..store import LedgerStore


T = TypeVar('T')

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_FUNDS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SAME_ACCOUNT_TRANSFER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ACCOUNT_INACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_CARD_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.PERSISTENCE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_store(request: Request) -> LedgerStore:
    """The LedgerStore the application was created with"""
    return request.app.state.store


def unwrap_result(result: OperationResult[T]) -> T:
    """Return a successful result's value or raise the matching HTTP error"""
    if result.success:
        return result.value
    raise HTTPException(
        status_code=STATUS_BY_CODE.get(result.error_code, status.HTTP_400_BAD_REQUEST),
        detail=result.error.to_dict()
    )
