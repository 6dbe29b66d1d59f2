"""
Interest Accrual Module

Day-prorated simple interest for savings accounts, computed lazily when an
account is read. Accrual adjusts the balance directly and does not write a
ledger entry; the amount is tracked in Account.accrued_interest instead.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from .accounts import Account
from .money import ZERO, round_cents

SECONDS_PER_DAY = 86400


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole elapsed days from start to end, zero if end is not later"""
    elapsed = (end - start).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // SECONDS_PER_DAY)


def calculate_interest(
    balance: Decimal,
    annual_rate: Decimal,
    days: int,
    days_in_year: int = 365
) -> Decimal:
    """
    Simple interest for a number of days, rounded to cents

    Non-positive balances, rates or day counts accrue nothing.
    """
    if days <= 0 or annual_rate <= ZERO or balance <= ZERO:
        return ZERO

    daily_rate = annual_rate / Decimal(days_in_year)
    return round_cents(balance * daily_rate * Decimal(days))


def accrue(account: Account, as_of: datetime, days_in_year: int = 365) -> Account:
    """
    Bring a savings account's interest up to as_of

    Returns the account unchanged (same object) when nothing accrues,
    otherwise a new Account with balance, available balance and
    accrued_interest increased and last_interest_date moved to as_of.
    """
    if not account.is_savings:
        return account

    since = account.last_interest_date or account.open_date
    if since is None:
        return account

    days = whole_days_between(since, as_of)
    if days == 0:
        return account

    interest = calculate_interest(account.balance, account.interest_rate, days, days_in_year)

    available = account.available_balance
    if available is not None:
        available = available + interest

    return replace(
        account,
        balance=account.balance + interest,
        available_balance=available,
        accrued_interest=account.accrued_interest + interest,
        last_interest_date=as_of,
    )
