"""
Transaction Ledger Module

Append-only log of account-scoped entries. The ledger is the only writer of
account balances: appending an entry and moving the owning account's balance
happen together, and all validation runs before either is touched.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from enum import Enum

from .clock import parse_datetime
from .errors import InvalidAmount, NotFound
from .money import ZERO, round_cents, to_decimal

if TYPE_CHECKING:
    from .store import UserLedger


class TransactionType(Enum):
    """Direction of a ledger entry"""
    DEBIT = "debit"    # Negative amount
    CREDIT = "credit"  # Positive amount


class TransactionStatus(Enum):
    """States of a ledger entry"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class EntryDraft:
    """An entry as requested by a caller, before the ledger assigns id and balance"""
    account_id: str
    date: datetime
    description: str
    amount: Decimal
    category: str
    status: TransactionStatus = TransactionStatus.COMPLETED


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry

    amount is signed (credit positive, debit negative) and always agrees
    with type; balance is the account balance right after this entry.
    """
    transaction_id: str
    account_id: str
    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    status: TransactionStatus
    balance: Decimal

    def __post_init__(self):
        if self.amount == ZERO:
            raise InvalidAmount("Ledger entry amount cannot be zero")

        if (self.amount > ZERO) != (self.type == TransactionType.CREDIT):
            raise InvalidAmount(
                f"Entry type {self.type.value} does not agree with amount {self.amount}"
            )

    @property
    def is_debit(self) -> bool:
        return self.type == TransactionType.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.type == TransactionType.CREDIT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            'transaction_id': self.transaction_id,
            'account_id': self.account_id,
            'date': self.date.isoformat(),
            'description': self.description,
            'amount': str(self.amount),
            'type': self.type.value,
            'category': self.category,
            'status': self.status.value,
            'balance': str(self.balance),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Create instance from a stored dictionary"""
        return cls(
            transaction_id=data['transaction_id'],
            account_id=data['account_id'],
            date=parse_datetime(data['date']),
            description=data['description'],
            amount=Decimal(data['amount']),
            type=TransactionType(data['type']),
            category=data['category'],
            status=TransactionStatus(data['status']),
            balance=Decimal(data['balance']),
        )

    @classmethod
    def from_seed(cls, data: Dict[str, Any]) -> 'Transaction':
        """
        Import a historical entry from reference seed data

        The entry type is authoritative; the amount's sign is normalised
        to agree with it.
        """
        entry_type = TransactionType(data['type'])
        magnitude = abs(round_cents(to_decimal(data['amount'])))
        amount = magnitude if entry_type == TransactionType.CREDIT else -magnitude

        return cls(
            transaction_id=data['transactionId'],
            account_id=data['accountId'],
            date=parse_datetime(data['date']),
            description=data.get('description', ''),
            amount=amount,
            type=entry_type,
            category=data.get('category', 'Other'),
            status=TransactionStatus(data.get('status', 'completed')),
            balance=round_cents(to_decimal(data.get('balance', 0))),
        )


class TransactionLedger:
    """
    Ledger view over one user's accounts and entries

    Operates directly on the UserLedger it is given; callers wanting
    all-or-nothing behaviour across several appends work on a copy.
    """

    def __init__(self, user_ledger: 'UserLedger'):
        self.user_ledger = user_ledger

    def append(self, draft: EntryDraft) -> Transaction:
        """
        Append an entry and move the owning account's balance

        Args:
            draft: Requested entry; amount is signed

        Returns:
            The stored Transaction with its id and running balance

        Raises:
            NotFound: If the account does not exist
            InvalidAmount: If the amount is zero or not cent-aligned numeric
        """
        account = self.user_ledger.accounts.get(draft.account_id)
        if account is None:
            raise NotFound(f"Account {draft.account_id} not found", account_id=draft.account_id)

        amount = to_decimal(draft.amount)
        if amount != round_cents(amount):
            raise InvalidAmount(f"Amount {amount} has sub-cent precision")
        if amount == ZERO:
            raise InvalidAmount("Ledger entry amount cannot be zero")

        entry = Transaction(
            transaction_id=self._next_transaction_id(),
            account_id=draft.account_id,
            date=draft.date,
            description=draft.description,
            amount=amount,
            type=TransactionType.CREDIT if amount > ZERO else TransactionType.DEBIT,
            category=draft.category,
            status=draft.status,
            balance=account.balance + amount,
        )

        account.apply_amount(amount)
        self.user_ledger.transactions.append(entry)
        self.user_ledger.next_sequence += 1

        return entry

    def query(self, account_id: Optional[str] = None) -> List[Transaction]:
        """
        Entries newest first by date

        Entries sharing a date are returned in reverse insertion order,
        so the most recently written comes first.
        """
        indexed = [
            (position, entry)
            for position, entry in enumerate(self.user_ledger.transactions)
            if account_id is None or entry.account_id == account_id
        ]
        indexed.sort(key=lambda item: (item[1].date, item[0]), reverse=True)
        return [entry for _, entry in indexed]

    def entries_for_account(self, account_id: str) -> List[Transaction]:
        """Entries for one account in insertion order"""
        return [e for e in self.user_ledger.transactions if e.account_id == account_id]

    def balance_from_entries(self, account_id: str) -> Decimal:
        """
        Recompute an account balance from its opening balance, entries and
        accrued interest; equals Account.balance whenever the ledger is consistent.
        """
        account = self.user_ledger.accounts.get(account_id)
        if account is None:
            raise NotFound(f"Account {account_id} not found", account_id=account_id)

        total = sum((e.amount for e in self.entries_for_account(account_id)), ZERO)
        return account.opening_balance + total + account.accrued_interest

    def _next_transaction_id(self) -> str:
        existing = {e.transaction_id for e in self.user_ledger.transactions}
        sequence = self.user_ledger.next_sequence
        transaction_id = f"TXN{sequence:08d}"
        while transaction_id in existing:
            sequence += 1
            transaction_id = f"TXN{sequence:08d}"
        self.user_ledger.next_sequence = sequence
        return transaction_id
