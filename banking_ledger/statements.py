"""
Statement Module

Monthly account statements derived from the Transaction Ledger.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .accounts import Account
from .budget import month_bounds
from .ledger import Transaction
from .money import ZERO


@dataclass
class Statement:
    """Ledger activity of one account over one calendar month"""
    statement_id: str
    account_id: str
    period_start: datetime
    period_end: datetime
    opening_balance: Decimal
    closing_balance: Decimal
    total_deposits: Decimal
    total_withdrawals: Decimal
    entries: List[Transaction] = field(default_factory=list)
    is_available: bool = False  # Only completed months are final

    @property
    def transaction_count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'statement_id': self.statement_id,
            'account_id': self.account_id,
            'period_start': self.period_start.isoformat(),
            'period_end': self.period_end.isoformat(),
            'opening_balance': str(self.opening_balance),
            'closing_balance': str(self.closing_balance),
            'total_deposits': str(self.total_deposits),
            'total_withdrawals': str(self.total_withdrawals),
            'transaction_count': self.transaction_count,
            'is_available': self.is_available,
        }


def build_statement(
    account: Account,
    entries: List[Transaction],
    year: int,
    month: int,
    now: datetime
) -> Statement:
    """
    Build the statement of an account for a calendar month

    Balances are reconstructed from the account's opening balance and its
    ledger entries; interest accrued without a ledger entry is not part of
    a statement.

    Args:
        account: Account the statement is for
        entries: The account's ledger entries, any order
        year: Statement year
        month: Statement month (1-12)
        now: Current instant, decides whether the month is complete
    """
    start, end = month_bounds(datetime(year, month, 1, tzinfo=timezone.utc))

    ordered = sorted(entries, key=lambda e: e.date)
    before = [e for e in ordered if e.date < start]
    during = [e for e in ordered if start <= e.date < end]

    opening = account.opening_balance + sum((e.amount for e in before), ZERO)
    deposits = sum((e.amount for e in during if e.is_credit), ZERO)
    withdrawals = sum((-e.amount for e in during if e.is_debit), ZERO)

    return Statement(
        statement_id=f"{account.account_id}-{year:04d}-{month:02d}",
        account_id=account.account_id,
        period_start=start,
        period_end=end,
        opening_balance=opening,
        closing_balance=opening + deposits - withdrawals,
        total_deposits=deposits,
        total_withdrawals=withdrawals,
        entries=during,
        is_available=now >= end,
    )
