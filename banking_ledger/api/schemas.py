"""
Pydantic schemas for API requests
"""

from typing import Optional
from pydantic import BaseModel, Field

from ..accounts import AccountType


class TransferRequest(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: str = Field(..., description="Decimal amount as string")
    description: str = "Transfer"
    category: Optional[str] = None


class DepositRequest(BaseModel):
    account_id: str
    amount: str = Field(..., description="Decimal amount as string")
    description: str = "Mobile Deposit"


class WithdrawRequest(BaseModel):
    account_id: str
    amount: str = Field(..., description="Decimal amount as string")
    description: str = "Withdrawal"


class BillPaymentRequest(BaseModel):
    from_account_id: str
    payee_id: str
    amount: str = Field(..., description="Decimal amount as string")


class AccountNumberRequest(BaseModel):
    account_type: AccountType


class BudgetCategoryRequest(BaseModel):
    limit: str = Field(..., description="Monthly limit as decimal string")
    color: Optional[str] = None


class CardLimitRequest(BaseModel):
    limit: str = Field(..., description="Card limit as decimal string")


class CardFeaturesRequest(BaseModel):
    contactless: Optional[bool] = None
    online_transactions: Optional[bool] = None
    international_transactions: Optional[bool] = None
    atm_withdrawals: Optional[bool] = None
