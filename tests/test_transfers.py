"""
Test suite for transfer processing

Tests transfers, deposits, withdrawals and bill payments against a single
user's ledger. CRITICAL: a rejected operation must leave no entries behind.
"""

import pytest
from decimal import Decimal
from datetime import datetime, timezone, timedelta

from banking_ledger.accounts import Account, AccountType, AccountStatus
from banking_ledger.errors import (
    AccountInactive, InsufficientFunds, InvalidAmount, NotFound, SameAccountTransfer
)
from banking_ledger.ledger import TransactionLedger, TransactionType
from banking_ledger.store import UserLedger
from banking_ledger.transfers import Payee, TransferProcessor


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_account(account_id, account_type, balance, credit_limit=None):
    return Account(
        account_id=account_id,
        user_id="user001",
        account_type=account_type,
        account_number=f"{account_id}-number",
        account_name=account_id,
        balance=Decimal(balance),
        available_balance=Decimal(balance),
        credit_limit=Decimal(credit_limit) if credit_limit else None,
        open_date=NOW - timedelta(days=30),
        opening_balance=Decimal(balance),
    )


class TestTransferProcessor:
    """Test money movement between accounts"""

    def setup_method(self):
        self.user_ledger = UserLedger(
            user_id="user001",
            accounts={
                "CHK": make_account("CHK", AccountType.CHECKING, '500.00'),
                "SAV": make_account("SAV", AccountType.SAVINGS, '1000.00'),
                "CC": make_account("CC", AccountType.CREDIT, '-1000.00', credit_limit='5000.00'),
            },
            payees={
                "PAY1": Payee(payee_id="PAY1", name="City Power", account_number="888",
                              category="Utilities"),
                "PAY2": Payee(payee_id="PAY2", name="Old Landlord", account_number="777",
                              category="Housing", is_active=False),
            },
        )
        self.processor = TransferProcessor(self.user_ledger, clock=lambda: NOW)

    def balance(self, account_id):
        return self.user_ledger.accounts[account_id].balance

    def test_internal_transfer(self):
        """Test that a transfer writes a debit and a credit leg"""
        receipt = self.processor.transfer("CHK", "SAV", "250", "Move to savings")

        assert self.balance("CHK") == Decimal('250.00')
        assert self.balance("SAV") == Decimal('1250.00')

        debit, credit = receipt.debit_entry, receipt.credit_entry
        assert debit.type == TransactionType.DEBIT
        assert debit.amount == Decimal('-250.00')
        assert credit.type == TransactionType.CREDIT
        assert credit.amount == Decimal('250.00')
        assert debit.date == credit.date == NOW
        assert debit.description == credit.description == "Move to savings"
        assert debit.category == "Transfer"
        assert len(self.user_ledger.transactions) == 2

    def test_transfer_of_entire_balance(self):
        self.processor.transfer("CHK", "SAV", Decimal('500.00'), "All of it")
        assert self.balance("CHK") == Decimal('0.00')

    def test_insufficient_funds(self):
        """Test that an overdraw is rejected with no entries written"""
        with pytest.raises(InsufficientFunds):
            self.processor.transfer("CHK", "SAV", "600", "Too much")

        assert self.balance("CHK") == Decimal('500.00')
        assert self.balance("SAV") == Decimal('1000.00')
        assert self.user_ledger.transactions == []

    def test_same_account(self):
        with pytest.raises(SameAccountTransfer):
            self.processor.transfer("CHK", "CHK", "10", "Loop")
        assert self.user_ledger.transactions == []

    def test_invalid_amounts(self):
        """Test that zero, negative and non-numeric amounts are rejected"""
        for amount in ["0", "-5", "abc", None, True]:
            with pytest.raises(InvalidAmount):
                self.processor.transfer("CHK", "SAV", amount, "Bad")
        assert self.user_ledger.transactions == []

    def test_unknown_destination(self):
        """Test that an unknown destination leaves the source untouched"""
        with pytest.raises(NotFound):
            self.processor.transfer("CHK", "NOPE", "10", "Nowhere")
        assert self.balance("CHK") == Decimal('500.00')
        assert self.user_ledger.transactions == []

    def test_unknown_source(self):
        with pytest.raises(NotFound):
            self.processor.transfer("NOPE", "SAV", "10", "Nowhere")

    def test_closed_destination(self):
        self.user_ledger.accounts["SAV"].status = AccountStatus.CLOSED
        with pytest.raises(AccountInactive):
            self.processor.transfer("CHK", "SAV", "10", "Closed")
        assert self.user_ledger.transactions == []

    def test_credit_account_cannot_draw_on_limit(self):
        """Test that a credit account in debt is refused even within its limit"""
        with pytest.raises(InsufficientFunds):
            self.processor.transfer("CC", "CHK", "600", "Cash advance")

        assert self.balance("CC") == Decimal('-1000.00')
        assert self.balance("CHK") == Decimal('500.00')
        assert self.user_ledger.transactions == []

    def test_credit_account_spends_positive_balance(self):
        self.processor.deposit("CC", "1100", "Payment")
        self.processor.withdraw("CC", "100", "Purchase")
        assert self.balance("CC") == Decimal('0.00')

        with pytest.raises(InsufficientFunds):
            self.processor.withdraw("CC", "0.01", "One more")

    def test_withdraw_has_no_credit_leg(self):
        receipt = self.processor.withdraw("CHK", "40", "ATM")
        assert receipt.credit_entry is None
        assert receipt.entries == [receipt.debit_entry]
        assert receipt.debit_entry.category == "Withdrawal"

    def test_deposit(self):
        receipt = self.processor.deposit("CHK", "75.25", "Check #104")
        assert receipt.credit_entry.amount == Decimal('75.25')
        assert receipt.debit_entry is None
        assert self.balance("CHK") == Decimal('575.25')

    def test_pay_bill(self):
        """Test that a bill payment uses the payee's name and category"""
        receipt = self.processor.pay_bill("CHK", "PAY1", "120")

        assert receipt.debit_entry.description == "Payment to City Power"
        assert receipt.debit_entry.category == "Utilities"
        assert self.balance("CHK") == Decimal('380.00')

        payee = self.user_ledger.payees["PAY1"]
        assert payee.last_payment_amount == Decimal('120.00')
        assert payee.last_payment_date == NOW

    def test_pay_inactive_payee(self):
        with pytest.raises(NotFound):
            self.processor.pay_bill("CHK", "PAY2", "10")
        assert self.user_ledger.transactions == []

    def test_ledger_invariant_after_mixed_operations(self):
        """Test that balances equal opening balance plus entries for every account"""
        self.processor.transfer("CHK", "SAV", "100", "Save")
        self.processor.deposit("CHK", "20.50")
        self.processor.withdraw("SAV", "300")
        self.processor.pay_bill("CHK", "PAY1", "45.10")
        self.processor.transfer("SAV", "CC", "250", "Pay card")

        ledger = TransactionLedger(self.user_ledger)
        for account_id, account in self.user_ledger.accounts.items():
            assert ledger.balance_from_entries(account_id) == account.balance
