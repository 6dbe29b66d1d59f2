"""
Error Taxonomy Module

Typed ledger errors raised by the engine components and the discriminated
OperationResult the store hands back to UI callers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


T = TypeVar('T')


class ErrorCode(Enum):
    """Stable, reportable failure codes"""
    NOT_FOUND = "not_found"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SAME_ACCOUNT_TRANSFER = "same_account_transfer"
    PERSISTENCE_FAILURE = "persistence_failure"
    ACCOUNT_INACTIVE = "account_inactive"
    INVALID_CARD_STATE = "invalid_card_state"


class LedgerError(Exception):
    """Base class for all ledger errors"""
    code: ErrorCode = ErrorCode.NOT_FOUND

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses and logs"""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": {k: str(v) for k, v in self.details.items()}
        }


class NotFound(LedgerError):
    """Unknown user, account, card or payee"""
    code = ErrorCode.NOT_FOUND


class InvalidAmount(LedgerError):
    """Non-positive or non-numeric amount"""
    code = ErrorCode.INVALID_AMOUNT


class InsufficientFunds(LedgerError):
    code = ErrorCode.INSUFFICIENT_FUNDS


class SameAccountTransfer(LedgerError):
    code = ErrorCode.SAME_ACCOUNT_TRANSFER


class PersistenceFailure(LedgerError):
    """Persistence gateway read or write error"""
    code = ErrorCode.PERSISTENCE_FAILURE


class AccountInactive(LedgerError):
    """Account is inactive or closed and cannot be transacted on"""
    code = ErrorCode.ACCOUNT_INACTIVE


class InvalidCardState(LedgerError):
    """Card status transition not allowed from the current state"""
    code = ErrorCode.INVALID_CARD_STATE


@dataclass
class OperationResult(Generic[T]):
    """
    Outcome of a store operation

    Exactly one of value/error is meaningful: success results carry the
    value, failures carry the typed LedgerError.
    """
    success: bool
    value: Optional[T] = None
    error: Optional[LedgerError] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> 'OperationResult[T]':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: LedgerError) -> 'OperationResult[T]':
        return cls(success=False, error=error)

    @property
    def error_code(self) -> Optional[ErrorCode]:
        """Code of the failure, None on success"""
        return self.error.code if self.error else None

    def unwrap(self) -> T:
        """Return the value or re-raise the failure"""
        if not self.success:
            raise self.error
        return self.value
