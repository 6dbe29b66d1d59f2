"""
Account endpoints

Handlers are plain functions; FastAPI runs them in its thread pool because
the store blocks on its locks and on SQLite.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status

from .dependencies import get_store, unwrap_result
from .schemas import AccountNumberRequest
from ..account_numbers import format_account_number
from ..store import LedgerStore


router = APIRouter()


@router.get("/accounts")
def list_accounts(user_id: str, store: LedgerStore = Depends(get_store)):
    """List a user's accounts with interest accrued up to now"""
    accounts = unwrap_result(store.get_accounts(user_id))
    return {"accounts": [a.to_dict() for a in accounts]}


@router.get("/accounts/{account_id}")
def get_account(user_id: str, account_id: str, store: LedgerStore = Depends(get_store)):
    account = unwrap_result(store.get_account(user_id, account_id))
    data = account.to_dict()
    data["display_number"] = format_account_number(account.account_number)
    return data


@router.post("/accounts/{account_id}/close")
def close_account(user_id: str, account_id: str, store: LedgerStore = Depends(get_store)):
    """Close an account; its history stays in the ledger"""
    account = unwrap_result(store.close_account(user_id, account_id))
    return account.to_dict()


@router.get("/accounts/{account_id}/statements/{year}/{month}")
def get_statement(
    user_id: str,
    account_id: str,
    year: int,
    month: int,
    store: LedgerStore = Depends(get_store)
):
    """Monthly statement of an account"""
    statement = unwrap_result(store.get_statement(user_id, account_id, year, month))
    data = statement.to_dict()
    data["entries"] = [e.to_dict() for e in statement.entries]
    return data


@router.post("/account-numbers", status_code=status.HTTP_201_CREATED)
def generate_account_number(
    user_id: str,
    request: AccountNumberRequest,
    store: LedgerStore = Depends(get_store)
):
    """Mint the next account number for a user"""
    number = unwrap_result(store.generate_account_number(user_id, request.account_type))
    return {
        "account_number": number,
        "display_number": format_account_number(number),
    }


@router.get("/transactions")
def list_transactions(
    user_id: str,
    account_id: Optional[str] = None,
    store: LedgerStore = Depends(get_store)
):
    """Ledger entries newest first"""
    entries = unwrap_result(store.get_transactions(user_id, account_id))
    return {"transactions": [e.to_dict() for e in entries]}
