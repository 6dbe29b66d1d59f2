"""
Budget Tracking Module

A user's monthly budget. Category spend is a cache derived from the
Transaction Ledger: recompute() rebuilds it from debit entries in the
budget period and never fails on odd input.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from .clock import parse_datetime, utc_now
from .ledger import Transaction, TransactionType
from .money import ZERO, parse_amount, round_cents, to_decimal

DEFAULT_CATEGORY_COLOR = "#9e9e9e"


@dataclass(frozen=True)
class BudgetCategory:
    """Spending line of a budget"""
    limit: Decimal
    spent: Decimal = ZERO
    color: str = DEFAULT_CATEGORY_COLOR

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent

    @property
    def percent_used(self) -> Decimal:
        if self.limit <= ZERO:
            return ZERO
        return round_cents(self.spent / self.limit * Decimal('100'))


@dataclass
class Budget:
    """Monthly budget; monthly_limit is advisory"""
    categories: Dict[str, BudgetCategory] = field(default_factory=dict)
    monthly_limit: Decimal = ZERO
    period_start: Optional[datetime] = None

    @property
    def total_spent(self) -> Decimal:
        return sum((c.spent for c in self.categories.values()), ZERO)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'categories': {
                name: {'limit': str(c.limit), 'spent': str(c.spent), 'color': c.color}
                for name, c in self.categories.items()
            },
            'monthly_limit': str(self.monthly_limit),
            'period_start': self.period_start.isoformat() if self.period_start else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        period_start = data.get('period_start')
        return cls(
            categories={
                name: BudgetCategory(
                    limit=Decimal(c['limit']),
                    spent=Decimal(c.get('spent') or '0'),
                    color=c.get('color', DEFAULT_CATEGORY_COLOR),
                )
                for name, c in data.get('categories', {}).items()
            },
            monthly_limit=Decimal(data.get('monthly_limit') or '0'),
            period_start=parse_datetime(period_start) if period_start else None,
        )

    @classmethod
    def from_seed(cls, data: Dict[str, Any]) -> 'Budget':
        """
        Build a budget from a reference seed record

        Seed categories are a list of {category, limit, spent, color}; a
        repeated category name keeps its first occurrence.
        """
        categories: Dict[str, BudgetCategory] = {}
        for item in data.get('categories', []):
            name = item['category']
            if name in categories:
                continue
            categories[name] = BudgetCategory(
                limit=round_cents(to_decimal(item.get('limit', 0))),
                spent=round_cents(to_decimal(item.get('spent', 0))),
                color=item.get('color', DEFAULT_CATEGORY_COLOR),
            )

        total_limit = data.get('totalLimit')
        if total_limit is None:
            monthly_limit = sum((c.limit for c in categories.values()), ZERO)
        else:
            monthly_limit = round_cents(to_decimal(total_limit))

        return cls(categories=categories, monthly_limit=monthly_limit)


def month_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of the calendar month containing moment"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def recompute(
    budget: Budget,
    transactions: Iterable[Transaction],
    period_start: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> Budget:
    """
    Rebuild category spend from the ledger

    Sums the absolute amounts of debit entries dated within the calendar
    month that contains period_start (default: the month containing now)
    and overwrites each budget category's spent. Categories with no
    matching debits drop to zero; debits in categories the budget does not
    track are ignored. Limits are left untouched.

    Returns:
        A new Budget; the input is not modified
    """
    start, end = month_bounds(period_start or now or utc_now())

    totals: Dict[str, Decimal] = {}
    for entry in transactions:
        if entry.type != TransactionType.DEBIT:
            continue
        if not (start <= entry.date < end):
            continue
        totals[entry.category] = totals.get(entry.category, ZERO) + abs(entry.amount)

    categories = {
        name: replace(category, spent=totals.get(name, ZERO))
        for name, category in budget.categories.items()
    }
    return replace(budget, categories=categories, period_start=start)


def set_category_limit(
    budget: Budget,
    category: str,
    limit: Any,
    color: Optional[str] = None
) -> Budget:
    """
    Add a category or change its limit

    monthly_limit is reset to the sum of category limits. Spend is kept;
    the next recompute() refreshes it.
    """
    value = parse_amount(limit)
    categories = dict(budget.categories)

    existing = categories.get(category)
    if existing is None:
        categories[category] = BudgetCategory(limit=value, color=color or DEFAULT_CATEGORY_COLOR)
    else:
        categories[category] = replace(existing, limit=value, color=color or existing.color)

    monthly_limit = sum((c.limit for c in categories.values()), ZERO)
    return replace(budget, categories=categories, monthly_limit=monthly_limit)
