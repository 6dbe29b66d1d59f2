"""
User Ledger Store Module

Owns one ledger (accounts, transactions, budget, cards, payees) per user.
A user's ledger is bootstrapped from reference seed data on first access and
persisted as a complete snapshot through the Persistence Gateway.

Every operation runs read-modify-write under the user's lock: it works on a
copy of the cached ledger, saves the copy, and only then makes it the cached
ledger. A failed save therefore leaves both the cache and the stored snapshot
as they were, and the operation reports PersistenceFailure instead of
success. Interest accrual and budget spend are refreshed on every operation,
reads included.
"""

from copy import deepcopy
from decimal import Decimal
from datetime import MAXYEAR, MINYEAR, datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar
import threading

from .account_numbers import generate_account_number
from .accounts import Account, AccountStatus, AccountType
from .budget import Budget, recompute, set_category_limit
from .cards import Card
from .clock import Clock, parse_datetime, utc_now
from .config import LedgerConfig, get_config
from .errors import AccountInactive, LedgerError, NotFound, OperationResult, PersistenceFailure
from .interest import accrue
from .ledger import Transaction, TransactionLedger
from .logging_config import get_logger, log_action, setup_logging
from .money import ZERO
from .seed import JsonSeedSource, SeedSource, demo_seed_source
from .statements import Statement, build_statement
from .storage import InMemoryGateway, PersistenceGateway, SQLiteGateway
from .transfers import Payee, TransferProcessor, TransferReceipt


T = TypeVar('T')

SNAPSHOT_VERSION = 1


@dataclass
class UserLedger:
    """Everything the store holds for one user"""
    user_id: str
    accounts: Dict[str, Account] = field(default_factory=dict)
    transactions: List[Transaction] = field(default_factory=list)
    budget: Budget = field(default_factory=Budget)
    cards: Dict[str, Card] = field(default_factory=dict)
    payees: Dict[str, Payee] = field(default_factory=dict)
    next_sequence: int = 1
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def copy(self) -> 'UserLedger':
        return deepcopy(self)

    def get_account(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFound(f"Account {account_id} not found", account_id=account_id)
        return account

    def get_card(self, card_id: str) -> Card:
        card = self.cards.get(card_id)
        if card is None:
            raise NotFound(f"Card {card_id} not found", card_id=card_id)
        return card

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable snapshot"""
        return {
            'version': SNAPSHOT_VERSION,
            'user_id': self.user_id,
            'accounts': [a.to_dict() for a in self.accounts.values()],
            'transactions': [t.to_dict() for t in self.transactions],
            'budget': self.budget.to_dict(),
            'cards': [c.to_dict() for c in self.cards.values()],
            'payees': [p.to_dict() for p in self.payees.values()],
            'next_sequence': self.next_sequence,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserLedger':
        """Create instance from a stored snapshot"""
        accounts = [Account.from_dict(a) for a in data.get('accounts', [])]
        cards = [Card.from_dict(c) for c in data.get('cards', [])]
        payees = [Payee.from_dict(p) for p in data.get('payees', [])]

        return cls(
            user_id=data['user_id'],
            accounts={a.account_id: a for a in accounts},
            transactions=[Transaction.from_dict(t) for t in data.get('transactions', [])],
            budget=Budget.from_dict(data.get('budget', {})),
            cards={c.card_id: c for c in cards},
            payees={p.payee_id: p for p in payees},
            next_sequence=data.get('next_sequence', 1),
            created_at=parse_datetime(data['created_at']),
            updated_at=parse_datetime(data['updated_at']),
        )


def bootstrap_user_ledger(
    user_id: str,
    seed: Dict[str, Any],
    config: LedgerConfig,
    now: datetime
) -> UserLedger:
    """
    Build a user's first ledger from reference seed data

    Account numbers are minted from the account type, the user id and the
    account's position. Each account's opening balance is derived from its
    seeded balance minus its seeded entries, so the ledger is consistent
    from the start.
    """
    default_open_date = parse_datetime(config.default_open_date)
    default_rate = Decimal(config.default_interest_rate)

    accounts: Dict[str, Account] = {}
    for position, record in enumerate(seed.get('accounts', []), start=1):
        number = generate_account_number(record['accountType'], user_id, position)
        account = Account.from_seed(record, user_id, number, default_open_date, default_rate)
        accounts[account.account_id] = account

    transactions = [
        Transaction.from_seed(record)
        for record in seed.get('transactions', [])
        if record.get('accountId') in accounts
    ]

    for account in accounts.values():
        seeded_total = sum((t.amount for t in transactions if t.account_id == account.account_id), ZERO)
        account.opening_balance = account.balance - seeded_total

    cards = [Card.from_seed(record) for record in seed.get('cards', [])]
    payees = [Payee.from_seed(record) for record in seed.get('payees', [])]

    budget_seed = seed.get('budget')
    budget = Budget.from_seed(budget_seed) if budget_seed else Budget()

    return UserLedger(
        user_id=user_id,
        accounts=accounts,
        transactions=transactions,
        budget=recompute(budget, transactions, now=now),
        cards={c.card_id: c for c in cards},
        payees={p.payee_id: p for p in payees},
        next_sequence=len(transactions) + 1,
        created_at=now,
        updated_at=now,
    )


class LedgerStore:
    """
    Entry point for everything the UI does with a user's money

    Every public method returns an OperationResult; ledger errors are
    reported through it, never raised.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        seed_source: Optional[SeedSource] = None,
        config: Optional[LedgerConfig] = None,
        clock: Clock = utc_now
    ):
        self.gateway = gateway
        self.seed_source = seed_source or demo_seed_source()
        self.config = config or get_config()
        self.clock = clock
        self.logger = get_logger("banking_ledger.store")

        self._ledgers: Dict[str, UserLedger] = {}
        self._user_locks: Dict[str, threading.RLock] = {}
        self._lock = threading.RLock()

    # Reads

    def get(self, user_id: str) -> OperationResult[UserLedger]:
        """Complete copy of a user's ledger"""
        return self._run(user_id, "get_ledger", lambda ledger, now: ledger)

    def get_accounts(self, user_id: str) -> OperationResult[List[Account]]:
        return self._run(user_id, "get_accounts",
                         lambda ledger, now: list(ledger.accounts.values()))

    def get_account(self, user_id: str, account_id: str) -> OperationResult[Account]:
        return self._run(user_id, "get_account",
                         lambda ledger, now: ledger.get_account(account_id))

    def get_transactions(
        self,
        user_id: str,
        account_id: Optional[str] = None
    ) -> OperationResult[List[Transaction]]:
        """Ledger entries newest first, optionally for one account"""
        def operation(ledger: UserLedger, now: datetime) -> List[Transaction]:
            if account_id is not None:
                ledger.get_account(account_id)
            return TransactionLedger(ledger).query(account_id)

        return self._run(user_id, "get_transactions", operation)

    def get_budget(self, user_id: str) -> OperationResult[Budget]:
        return self._run(user_id, "get_budget", lambda ledger, now: ledger.budget)

    def get_cards(self, user_id: str) -> OperationResult[List[Card]]:
        return self._run(user_id, "get_cards", lambda ledger, now: list(ledger.cards.values()))

    def get_payees(self, user_id: str) -> OperationResult[List[Payee]]:
        return self._run(user_id, "get_payees",
                         lambda ledger, now: [p for p in ledger.payees.values() if p.is_active])

    def get_statement(
        self,
        user_id: str,
        account_id: str,
        year: int,
        month: int
    ) -> OperationResult[Statement]:
        """Monthly statement of one account"""
        def operation(ledger: UserLedger, now: datetime) -> Statement:
            account = ledger.get_account(account_id)
            if not 1 <= month <= 12 or not MINYEAR <= year < MAXYEAR:
                raise NotFound(f"No statement period {year}-{month}", account_id=account_id)
            entries = TransactionLedger(ledger).entries_for_account(account_id)
            return build_statement(account, entries, year, month, now)

        return self._run(user_id, "get_statement", operation)

    def generate_account_number(
        self,
        user_id: str,
        account_type: AccountType
    ) -> OperationResult[str]:
        """Next account number for a user, numbered after their existing accounts"""
        return self._run(
            user_id, "generate_account_number",
            lambda ledger, now: generate_account_number(
                account_type, user_id, len(ledger.accounts) + 1
            )
        )

    # Money movement

    def transfer(
        self,
        user_id: str,
        from_account_id: str,
        to_account_id: Optional[str],
        amount: Any,
        description: str,
        category: Optional[str] = None
    ) -> OperationResult[TransferReceipt]:
        """
        Transfer between two of the user's accounts, or out of one when
        to_account_id is None
        """
        return self._run(
            user_id, "transfer",
            lambda ledger, now: self._processor(ledger, now).transfer(
                from_account_id, to_account_id, amount, description,
                category or self.config.transfer_category
            ),
            writes=True,
            resource=f"account:{from_account_id}",
            extra={"to_account": to_account_id, "amount": str(amount)}
        )

    def deposit(
        self,
        user_id: str,
        account_id: str,
        amount: Any,
        description: str = "Mobile Deposit"
    ) -> OperationResult[TransferReceipt]:
        return self._run(
            user_id, "deposit",
            lambda ledger, now: self._processor(ledger, now).deposit(account_id, amount, description),
            writes=True,
            resource=f"account:{account_id}",
            extra={"amount": str(amount)}
        )

    def withdraw(
        self,
        user_id: str,
        account_id: str,
        amount: Any,
        description: str = "Withdrawal"
    ) -> OperationResult[TransferReceipt]:
        return self._run(
            user_id, "withdraw",
            lambda ledger, now: self._processor(ledger, now).withdraw(account_id, amount, description),
            writes=True,
            resource=f"account:{account_id}",
            extra={"amount": str(amount)}
        )

    def pay_bill(
        self,
        user_id: str,
        from_account_id: str,
        payee_id: str,
        amount: Any
    ) -> OperationResult[TransferReceipt]:
        return self._run(
            user_id, "pay_bill",
            lambda ledger, now: self._processor(ledger, now).pay_bill(from_account_id, payee_id, amount),
            writes=True,
            resource=f"payee:{payee_id}",
            extra={"from_account": from_account_id, "amount": str(amount)}
        )

    def close_account(self, user_id: str, account_id: str) -> OperationResult[Account]:
        """Mark an account closed; it stays in the ledger with its history"""
        def operation(ledger: UserLedger, now: datetime) -> Account:
            account = ledger.get_account(account_id)
            if account.status == AccountStatus.CLOSED:
                raise AccountInactive(f"Account {account_id} is already closed", account_id=account_id)
            account.status = AccountStatus.CLOSED
            return account

        return self._run(user_id, "close_account", operation, writes=True,
                         resource=f"account:{account_id}")

    # Budget

    def update_budget_category(
        self,
        user_id: str,
        category: str,
        limit: Any,
        color: Optional[str] = None
    ) -> OperationResult[Budget]:
        def operation(ledger: UserLedger, now: datetime) -> Budget:
            updated = set_category_limit(ledger.budget, category, limit, color)
            ledger.budget = recompute(updated, ledger.transactions, now=now)
            return ledger.budget

        return self._run(user_id, "update_budget_category", operation, writes=True,
                         resource=f"budget:{category}", extra={"limit": str(limit)})

    # Cards

    def freeze_card(self, user_id: str, card_id: str) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "freeze_card", lambda card: card.freeze())

    def unfreeze_card(self, user_id: str, card_id: str) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "unfreeze_card", lambda card: card.unfreeze())

    def toggle_card_status(self, user_id: str, card_id: str) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "toggle_card_status",
                                    lambda card: card.toggle_freeze())

    def report_card_lost(self, user_id: str, card_id: str) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "report_card_lost",
                                    lambda card: card.report_lost())

    def update_card_limit(self, user_id: str, card_id: str, limit: Any) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "update_card_limit",
                                    lambda card: card.update_limit(limit))

    def update_card_features(self, user_id: str, card_id: str, **flags: bool) -> OperationResult[Card]:
        return self._card_operation(user_id, card_id, "update_card_features",
                                    lambda card: card.update_features(**flags))

    # Internals

    def _card_operation(
        self,
        user_id: str,
        card_id: str,
        action: str,
        mutate: Callable[[Card], None]
    ) -> OperationResult[Card]:
        def operation(ledger: UserLedger, now: datetime) -> Card:
            card = ledger.get_card(card_id)
            mutate(card)
            return card

        return self._run(user_id, action, operation, writes=True, resource=f"card:{card_id}")

    def _processor(self, ledger: UserLedger, now: datetime) -> TransferProcessor:
        return TransferProcessor(ledger, clock=lambda: now)

    def _run(
        self,
        user_id: str,
        action: str,
        operation: Callable[[UserLedger, datetime], T],
        writes: bool = False,
        resource: Optional[str] = None,
        extra: Optional[dict] = None
    ) -> OperationResult[T]:
        """
        Run an operation against a working copy of the user's ledger

        The copy is saved and becomes the cached ledger when the operation
        writes or when refreshing derived values changed it. Returned values
        are copies, so callers cannot reach into the store.
        """
        try:
            with self._user_lock(user_id):
                current = self._load(user_id)
                working = current.copy()
                now = self.clock()

                refreshed = self._refresh_derived(working, now)
                value = operation(working, now)

                if writes:
                    self._refresh_derived(working, now)

                if writes or refreshed:
                    working.updated_at = now
                    self._commit(user_id, working)

                result = deepcopy(value)
        except LedgerError as e:
            level = "error" if isinstance(e, PersistenceFailure) else "warning"
            log_action(
                self.logger, level, f"{action} failed: {e.message}",
                user_id=user_id, action=action, resource=resource,
                extra={"error_code": e.code.value, **(extra or {})}
            )
            return OperationResult.fail(e)

        if writes:
            log_action(
                self.logger, "info", f"{action} completed",
                user_id=user_id, action=action, resource=resource, extra=extra
            )
        return OperationResult.ok(result)

    def _refresh_derived(self, ledger: UserLedger, now: datetime) -> bool:
        """Accrue savings interest and recompute budget spend; True if anything changed"""
        changed = False

        for account_id, account in ledger.accounts.items():
            accrued = accrue(account, now, self.config.days_in_year)
            if accrued is not account:
                ledger.accounts[account_id] = accrued
                changed = True

        budget = recompute(ledger.budget, ledger.transactions, now=now)
        if budget != ledger.budget:
            ledger.budget = budget
            changed = True

        return changed

    def _user_lock(self, user_id: str) -> threading.RLock:
        with self._lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._user_locks[user_id] = lock
            return lock

    def _load(self, user_id: str) -> UserLedger:
        """Cached ledger, else the persisted snapshot, else a fresh bootstrap"""
        with self._lock:
            cached = self._ledgers.get(user_id)
        if cached is not None:
            return cached

        snapshot = self._gateway_call(lambda: self.gateway.load(user_id), user_id, "load")
        if snapshot is not None:
            ledger = UserLedger.from_dict(snapshot)
        else:
            seed = self.seed_source.for_user(user_id)
            if seed is None:
                raise NotFound(f"User {user_id} not found", user_id=user_id)

            ledger = bootstrap_user_ledger(user_id, seed, self.config, self.clock())
            self._gateway_call(lambda: self.gateway.save(user_id, ledger.to_dict()), user_id, "save")
            log_action(
                self.logger, "info", "User ledger bootstrapped from seed data",
                user_id=user_id, action="bootstrap",
                extra={"accounts": len(ledger.accounts), "transactions": len(ledger.transactions)}
            )

        with self._lock:
            self._ledgers[user_id] = ledger
        return ledger

    def _commit(self, user_id: str, ledger: UserLedger) -> None:
        self._gateway_call(lambda: self.gateway.save(user_id, ledger.to_dict()), user_id, "save")
        with self._lock:
            self._ledgers[user_id] = ledger

    def _gateway_call(self, call: Callable[[], T], user_id: str, operation: str) -> T:
        try:
            return call()
        except PersistenceFailure:
            raise
        except Exception as e:
            raise PersistenceFailure(
                f"Persistence {operation} failed for {user_id}: {e}", user_id=user_id
            ) from e


def create_store(config: Optional[LedgerConfig] = None) -> LedgerStore:
    """Build a store from configuration"""
    config = config or get_config()
    setup_logging(config.log_level, log_format=config.log_format)

    if config.storage_backend == "sqlite":
        gateway: PersistenceGateway = SQLiteGateway(config.database_path)
    elif config.storage_backend == "memory":
        gateway = InMemoryGateway()
    else:
        raise ValueError(f"Unknown storage backend: {config.storage_backend}")

    seed_source = JsonSeedSource(config.seed_data_path) if config.seed_data_path else demo_seed_source()
    return LedgerStore(gateway, seed_source, config)
