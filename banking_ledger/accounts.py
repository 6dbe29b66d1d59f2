"""
Account Module

Customer-facing accounts held in a user's ledger. The balance is
authoritative and only moves through ledger appends and interest accrual;
opening_balance and accrued_interest make the ledger invariant checkable:

    balance == opening_balance + sum(entry amounts) + accrued_interest
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum

from .clock import parse_datetime
from .money import ZERO, round_cents, to_decimal


class AccountType(Enum):
    """Banking product types"""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    LOAN = "loan"


class AccountStatus(Enum):
    """Account lifecycle states"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    CLOSED = "closed"  # Marked, never removed


@dataclass
class Account:
    """Bank account owned by a single user"""
    account_id: str
    user_id: str
    account_type: AccountType
    account_number: str
    account_name: str
    balance: Decimal
    open_date: datetime
    available_balance: Optional[Decimal] = None
    interest_rate: Decimal = ZERO  # Annual rate as a fraction, e.g. 0.0425
    credit_limit: Optional[Decimal] = None
    status: AccountStatus = AccountStatus.ACTIVE
    last_interest_date: Optional[datetime] = None
    opening_balance: Decimal = ZERO
    accrued_interest: Decimal = ZERO

    def __post_init__(self):
        # Negative rates would shrink balances on accrual
        if self.interest_rate < ZERO:
            self.interest_rate = ZERO

    @property
    def is_savings(self) -> bool:
        return self.account_type == AccountType.SAVINGS

    def can_transact(self) -> bool:
        """Check if account can process transactions"""
        return self.status == AccountStatus.ACTIVE

    def spendable_balance(self) -> Decimal:
        """
        Funds available for a debit

        Uses available_balance when present, else balance. A credit limit
        does not extend it.
        """
        if self.available_balance is not None:
            return self.available_balance
        return self.balance

    def apply_amount(self, amount: Decimal) -> None:
        """Move balance and available balance by the same signed amount"""
        self.balance = self.balance + amount
        if self.available_balance is not None:
            self.available_balance = self.available_balance + amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            'account_id': self.account_id,
            'user_id': self.user_id,
            'account_type': self.account_type.value,
            'account_number': self.account_number,
            'account_name': self.account_name,
            'balance': str(self.balance),
            'available_balance': (str(self.available_balance)
                                  if self.available_balance is not None else None),
            'interest_rate': str(self.interest_rate),
            'credit_limit': str(self.credit_limit) if self.credit_limit is not None else None,
            'status': self.status.value,
            'open_date': self.open_date.isoformat(),
            'last_interest_date': (self.last_interest_date.isoformat()
                                   if self.last_interest_date else None),
            'opening_balance': str(self.opening_balance),
            'accrued_interest': str(self.accrued_interest),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Create instance from a stored dictionary"""
        available = data.get('available_balance')
        credit_limit = data.get('credit_limit')
        last_interest = data.get('last_interest_date')

        return cls(
            account_id=data['account_id'],
            user_id=data['user_id'],
            account_type=AccountType(data['account_type']),
            account_number=data['account_number'],
            account_name=data.get('account_name', ''),
            balance=Decimal(data['balance']),
            available_balance=Decimal(available) if available is not None else None,
            interest_rate=Decimal(data.get('interest_rate') or '0'),
            credit_limit=Decimal(credit_limit) if credit_limit is not None else None,
            status=AccountStatus(data.get('status', 'active')),
            open_date=parse_datetime(data['open_date']),
            last_interest_date=parse_datetime(last_interest) if last_interest else None,
            opening_balance=Decimal(data.get('opening_balance') or '0'),
            accrued_interest=Decimal(data.get('accrued_interest') or '0'),
        )

    @classmethod
    def from_seed(
        cls,
        data: Dict[str, Any],
        user_id: str,
        account_number: str,
        default_open_date: datetime,
        default_interest_rate: Decimal
    ) -> 'Account':
        """
        Build an account from a reference seed record

        Seed records use the dashboard's camelCase keys and numeric amounts.
        """
        account_type = AccountType(data['accountType'])
        balance = round_cents(to_decimal(data.get('balance', 0)))

        available = data.get('availableBalance')
        available_balance = round_cents(to_decimal(available)) if available is not None else balance

        rate = data.get('interestRate')
        if rate is None and account_type == AccountType.SAVINGS:
            interest_rate = default_interest_rate
        else:
            interest_rate = to_decimal(rate or 0)

        credit_limit = data.get('creditLimit')
        open_date = data.get('openDate')
        last_interest = data.get('lastInterestDate')

        return cls(
            account_id=data['accountId'],
            user_id=user_id,
            account_type=account_type,
            account_number=account_number,
            account_name=data.get('accountName', account_type.value.title()),
            balance=balance,
            available_balance=available_balance,
            interest_rate=max(interest_rate, ZERO),
            credit_limit=round_cents(to_decimal(credit_limit)) if credit_limit is not None else None,
            status=AccountStatus(data.get('status', 'active')),
            open_date=parse_datetime(open_date) if open_date else default_open_date,
            last_interest_date=parse_datetime(last_interest) if last_interest else None,
        )
