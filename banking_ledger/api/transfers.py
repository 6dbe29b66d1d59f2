"""
Money movement endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_store, unwrap_result
from .schemas import BillPaymentRequest, DepositRequest, TransferRequest, WithdrawRequest
from ..store import LedgerStore


router = APIRouter()


@router.post("/transfers", status_code=status.HTTP_201_CREATED)
def transfer(user_id: str, request: TransferRequest, store: LedgerStore = Depends(get_store)):
    """Transfer between two of the user's accounts"""
    receipt = unwrap_result(store.transfer(
        user_id,
        request.from_account_id,
        request.to_account_id,
        request.amount,
        request.description,
        request.category
    ))
    return receipt.to_dict()


@router.post("/deposits", status_code=status.HTTP_201_CREATED)
def deposit(user_id: str, request: DepositRequest, store: LedgerStore = Depends(get_store)):
    receipt = unwrap_result(store.deposit(
        user_id, request.account_id, request.amount, request.description
    ))
    return receipt.to_dict()


@router.post("/withdrawals", status_code=status.HTTP_201_CREATED)
def withdraw(user_id: str, request: WithdrawRequest, store: LedgerStore = Depends(get_store)):
    receipt = unwrap_result(store.withdraw(
        user_id, request.account_id, request.amount, request.description
    ))
    return receipt.to_dict()


@router.get("/payees")
def list_payees(user_id: str, store: LedgerStore = Depends(get_store)):
    payees = unwrap_result(store.get_payees(user_id))
    return {"payees": [p.to_dict() for p in payees]}


@router.post("/bill-payments", status_code=status.HTTP_201_CREATED)
def pay_bill(user_id: str, request: BillPaymentRequest, store: LedgerStore = Depends(get_store)):
    """Pay one of the user's payees"""
    receipt = unwrap_result(store.pay_bill(
        user_id, request.from_account_id, request.payee_id, request.amount
    ))
    return receipt.to_dict()
