"""
Transfer Processing Module

Moves money between a user's accounts, and out to or in from external
parties, through the Transaction Ledger. Every precondition is checked
before the first leg is appended, so a rejected transfer leaves no entries
and no balance change behind.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .accounts import Account
from .clock import Clock, parse_datetime, utc_now
from .errors import AccountInactive, InsufficientFunds, NotFound, SameAccountTransfer
from .ledger import EntryDraft, Transaction, TransactionLedger
from .money import parse_amount, round_cents, to_decimal

if TYPE_CHECKING:
    from .store import UserLedger


DEFAULT_TRANSFER_CATEGORY = "Transfer"


@dataclass
class Payee:
    """External party a user pays bills to"""
    payee_id: str
    name: str
    account_number: str
    category: str
    is_favorite: bool = False
    is_active: bool = True
    last_payment_date: Optional[datetime] = None
    last_payment_amount: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payee_id': self.payee_id,
            'name': self.name,
            'account_number': self.account_number,
            'category': self.category,
            'is_favorite': self.is_favorite,
            'is_active': self.is_active,
            'last_payment_date': (self.last_payment_date.isoformat()
                                  if self.last_payment_date else None),
            'last_payment_amount': (str(self.last_payment_amount)
                                    if self.last_payment_amount is not None else None),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payee':
        last_date = data.get('last_payment_date')
        last_amount = data.get('last_payment_amount')
        return cls(
            payee_id=data['payee_id'],
            name=data['name'],
            account_number=data.get('account_number', ''),
            category=data.get('category', 'Bills'),
            is_favorite=data.get('is_favorite', False),
            is_active=data.get('is_active', True),
            last_payment_date=parse_datetime(last_date) if last_date else None,
            last_payment_amount=Decimal(last_amount) if last_amount is not None else None,
        )

    @classmethod
    def from_seed(cls, data: Dict[str, Any]) -> 'Payee':
        last_date = data.get('lastPaymentDate')
        last_amount = data.get('lastPaymentAmount')
        return cls(
            payee_id=data['payeeId'],
            name=data['name'],
            account_number=data.get('accountNumber', ''),
            category=data.get('category', 'Bills'),
            is_favorite=data.get('isFavorite', False),
            is_active=data.get('isActive', True),
            last_payment_date=parse_datetime(last_date) if last_date else None,
            last_payment_amount=round_cents(to_decimal(last_amount)) if last_amount is not None else None,
        )


@dataclass
class TransferReceipt:
    """Entries written by a successful transfer"""
    amount: Decimal
    description: str
    date: datetime
    debit_entry: Optional[Transaction] = None
    credit_entry: Optional[Transaction] = None

    @property
    def entries(self) -> List[Transaction]:
        return [e for e in (self.debit_entry, self.credit_entry) if e is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'amount': str(self.amount),
            'description': self.description,
            'date': self.date.isoformat(),
            'entries': [e.to_dict() for e in self.entries],
        }


class TransferProcessor:
    """
    Applies transfers, deposits, withdrawals and bill payments to one
    user's ledger
    """

    def __init__(self, user_ledger: 'UserLedger', clock: Clock = utc_now):
        self.user_ledger = user_ledger
        self.ledger = TransactionLedger(user_ledger)
        self.clock = clock

    def transfer(
        self,
        from_account_id: str,
        to_account_id: Optional[str],
        amount: Any,
        description: str,
        category: str = DEFAULT_TRANSFER_CATEGORY
    ) -> TransferReceipt:
        """
        Transfer funds out of an account

        Args:
            from_account_id: Account to debit
            to_account_id: Account to credit, or None for an external debit
            amount: Positive amount to move
            description: Shared by both legs
            category: Budget category of both legs

        Returns:
            TransferReceipt with the debit leg and, for internal transfers,
            the credit leg

        Raises:
            InvalidAmount: Non-numeric or non-positive amount
            NotFound: Unknown source or destination account
            SameAccountTransfer: Source equals destination
            AccountInactive: Source or destination not active
            InsufficientFunds: Source cannot cover the amount
        """
        value = parse_amount(amount)
        source = self._require_account(from_account_id)

        destination = None
        if to_account_id is not None:
            if to_account_id == from_account_id:
                raise SameAccountTransfer(
                    f"Cannot transfer from account {from_account_id} to itself",
                    account_id=from_account_id
                )
            destination = self._require_account(to_account_id)

        self._require_active(source)
        if destination is not None:
            self._require_active(destination)

        spendable = source.spendable_balance()
        if spendable < value:
            raise InsufficientFunds(
                f"Insufficient funds in account {from_account_id}",
                account_id=from_account_id,
                requested=value,
                available=spendable
            )

        now = self.clock()
        receipt = TransferReceipt(amount=value, description=description, date=now)
        receipt.debit_entry = self.ledger.append(EntryDraft(
            account_id=from_account_id,
            date=now,
            description=description,
            amount=-value,
            category=category,
        ))

        if destination is not None:
            receipt.credit_entry = self.ledger.append(EntryDraft(
                account_id=to_account_id,
                date=now,
                description=description,
                amount=value,
                category=category,
            ))

        return receipt

    def deposit(
        self,
        account_id: str,
        amount: Any,
        description: str = "Deposit",
        category: str = "Deposit"
    ) -> TransferReceipt:
        """Credit an account from outside the user's ledger (e.g. mobile check deposit)"""
        value = parse_amount(amount)
        account = self._require_account(account_id)
        self._require_active(account)

        now = self.clock()
        entry = self.ledger.append(EntryDraft(
            account_id=account_id,
            date=now,
            description=description,
            amount=value,
            category=category,
        ))
        return TransferReceipt(amount=value, description=description, date=now, credit_entry=entry)

    def withdraw(
        self,
        account_id: str,
        amount: Any,
        description: str = "Withdrawal",
        category: str = "Withdrawal"
    ) -> TransferReceipt:
        """Debit an account to the outside world"""
        return self.transfer(account_id, None, amount, description, category)

    def pay_bill(self, from_account_id: str, payee_id: str, amount: Any) -> TransferReceipt:
        """
        Pay a payee from an account

        The debit leg is categorised with the payee's category so it counts
        against the matching budget line.
        """
        payee = self.user_ledger.payees.get(payee_id)
        if payee is None or not payee.is_active:
            raise NotFound(f"Payee {payee_id} not found", payee_id=payee_id)

        receipt = self.transfer(
            from_account_id, None, amount,
            description=f"Payment to {payee.name}",
            category=payee.category
        )

        payee.last_payment_date = receipt.date
        payee.last_payment_amount = receipt.amount
        return receipt

    def _require_account(self, account_id: str) -> Account:
        account = self.user_ledger.accounts.get(account_id)
        if account is None:
            raise NotFound(f"Account {account_id} not found", account_id=account_id)
        return account

    def _require_active(self, account: Account) -> None:
        if not account.can_transact():
            raise AccountInactive(
                f"Account {account.account_id} is {account.status.value}",
                account_id=account.account_id
            )
