"""
Card Module

Debit and credit cards attached to a user's accounts, with the card status
state machine:

    active <-> frozen        (freeze / unfreeze, reversible)
    active | frozen -> blocked   (report lost or stolen, terminal)

Entering frozen or blocked switches every feature off. Unfreezing does not
switch them back on; they have to be re-enabled explicitly.
"""

from decimal import Decimal
from dataclasses import dataclass, field, fields
from typing import Any, Dict
from enum import Enum

from .errors import InvalidCardState, NotFound
from .money import ZERO, parse_amount, round_cents, to_decimal


class CardType(Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class CardStatus(Enum):
    """Card lifecycle states"""
    ACTIVE = "active"
    FROZEN = "frozen"    # Temporarily suspended by the user
    BLOCKED = "blocked"  # Reported lost or stolen, terminal


@dataclass
class CardFeatures:
    """Per-card usage switches"""
    contactless: bool = True
    online_transactions: bool = True
    international_transactions: bool = False
    atm_withdrawals: bool = True

    def disable_all(self) -> None:
        for feature in fields(self):
            setattr(self, feature.name, False)

    def any_enabled(self) -> bool:
        return any(getattr(self, feature.name) for feature in fields(self))

    def to_dict(self) -> Dict[str, bool]:
        return {feature.name: getattr(self, feature.name) for feature in fields(self)}


FEATURE_SEED_KEYS = {
    'contactless': 'contactless',
    'onlineTransactions': 'online_transactions',
    'internationalTransactions': 'international_transactions',
    'atmWithdrawals': 'atm_withdrawals',
}


@dataclass
class Card:
    """Payment card linked to an account"""
    card_id: str
    account_id: str
    card_type: CardType
    card_number: str
    limit: Decimal
    spent: Decimal = ZERO
    status: CardStatus = CardStatus.ACTIVE
    features: CardFeatures = field(default_factory=CardFeatures)

    def __post_init__(self):
        # A card that is not active never has features switched on
        if self.status != CardStatus.ACTIVE:
            self.features.disable_all()

    @property
    def is_active(self) -> bool:
        return self.status == CardStatus.ACTIVE

    @property
    def is_blocked(self) -> bool:
        return self.status == CardStatus.BLOCKED

    def freeze(self) -> None:
        """Temporarily suspend an active card"""
        if self.status != CardStatus.ACTIVE:
            raise InvalidCardState(
                f"Cannot freeze card {self.card_id} in {self.status.value} state",
                card_id=self.card_id
            )
        self.status = CardStatus.FROZEN
        self.features.disable_all()

    def unfreeze(self) -> None:
        """Reactivate a frozen card; features stay off"""
        if self.status != CardStatus.FROZEN:
            raise InvalidCardState(
                f"Cannot unfreeze card {self.card_id} in {self.status.value} state",
                card_id=self.card_id
            )
        self.status = CardStatus.ACTIVE

    def toggle_freeze(self) -> None:
        if self.status == CardStatus.ACTIVE:
            self.freeze()
        else:
            self.unfreeze()

    def report_lost(self) -> None:
        """Block the card permanently"""
        if self.status == CardStatus.BLOCKED:
            raise InvalidCardState(f"Card {self.card_id} is already blocked", card_id=self.card_id)
        self.status = CardStatus.BLOCKED
        self.features.disable_all()

    def update_limit(self, limit: Any) -> None:
        value = parse_amount(limit)
        if self.status == CardStatus.BLOCKED:
            raise InvalidCardState(
                f"Cannot change the limit of blocked card {self.card_id}",
                card_id=self.card_id
            )
        self.limit = value

    def update_features(self, **flags: bool) -> None:
        """
        Switch individual features on or off

        Only active cards accept feature changes. Unknown feature names
        raise NotFound.
        """
        if self.status != CardStatus.ACTIVE:
            raise InvalidCardState(
                f"Cannot change features of card {self.card_id} in {self.status.value} state",
                card_id=self.card_id
            )

        known = {feature.name for feature in fields(CardFeatures)}
        unknown = set(flags) - known
        if unknown:
            raise NotFound(f"Unknown card features: {', '.join(sorted(unknown))}", card_id=self.card_id)

        for name, enabled in flags.items():
            setattr(self.features, name, bool(enabled))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'card_id': self.card_id,
            'account_id': self.account_id,
            'card_type': self.card_type.value,
            'card_number': self.card_number,
            'limit': str(self.limit),
            'spent': str(self.spent),
            'status': self.status.value,
            'features': self.features.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Card':
        return cls(
            card_id=data['card_id'],
            account_id=data['account_id'],
            card_type=CardType(data['card_type']),
            card_number=data.get('card_number', ''),
            limit=Decimal(data['limit']),
            spent=Decimal(data.get('spent') or '0'),
            status=CardStatus(data.get('status', 'active')),
            features=CardFeatures(**data.get('features', {})),
        )

    @classmethod
    def from_seed(cls, data: Dict[str, Any]) -> 'Card':
        features = CardFeatures(**{
            attr: bool(data[key]) for key, attr in FEATURE_SEED_KEYS.items() if key in data
        })
        return cls(
            card_id=data['id'],
            account_id=data.get('accountId', ''),
            card_type=CardType(data.get('cardType', 'debit')),
            card_number=data.get('cardNumber', ''),
            limit=round_cents(to_decimal(data.get('limit', 0))),
            spent=round_cents(to_decimal(data.get('spent', 0))),
            status=CardStatus(data.get('status', 'active')),
            features=features,
        )
