"""
Test suite for card module

Tests the card status state machine and limit/feature updates.
"""

import pytest
from decimal import Decimal

from banking_ledger.cards import Card, CardFeatures, CardStatus, CardType
from banking_ledger.errors import InvalidAmount, InvalidCardState, NotFound


def make_card(status=CardStatus.ACTIVE):
    return Card(
        card_id="CARD001",
        account_id="ACC001",
        card_type=CardType.DEBIT,
        card_number="4532-1234-5678-9012",
        limit=Decimal('2500.00'),
        status=status,
    )


class TestCardStateMachine:
    """Test freeze, unfreeze and block transitions"""

    def setup_method(self):
        self.card = make_card()

    def test_freeze_disables_features(self):
        """Test that freezing switches every feature off"""
        self.card.freeze()

        assert self.card.status == CardStatus.FROZEN
        assert not self.card.features.any_enabled()

    def test_unfreeze_keeps_features_off(self):
        """Test that unfreezing does not re-enable features"""
        self.card.freeze()
        self.card.unfreeze()

        assert self.card.status == CardStatus.ACTIVE
        assert not self.card.features.any_enabled()

    def test_freeze_twice_rejected(self):
        self.card.freeze()
        with pytest.raises(InvalidCardState):
            self.card.freeze()

    def test_unfreeze_active_rejected(self):
        with pytest.raises(InvalidCardState):
            self.card.unfreeze()

    def test_toggle(self):
        self.card.toggle_freeze()
        assert self.card.status == CardStatus.FROZEN
        self.card.toggle_freeze()
        assert self.card.status == CardStatus.ACTIVE

    def test_report_lost_is_terminal(self):
        """Test that a blocked card cannot be unfrozen, toggled or blocked again"""
        self.card.report_lost()
        assert self.card.is_blocked
        assert not self.card.features.any_enabled()

        with pytest.raises(InvalidCardState):
            self.card.unfreeze()
        with pytest.raises(InvalidCardState):
            self.card.toggle_freeze()
        with pytest.raises(InvalidCardState):
            self.card.report_lost()
        assert self.card.status == CardStatus.BLOCKED

    def test_report_lost_from_frozen(self):
        self.card.freeze()
        self.card.report_lost()
        assert self.card.status == CardStatus.BLOCKED

    def test_inactive_card_built_with_features_off(self):
        """Test that a card loaded in a non-active state has no features on"""
        card = make_card(status=CardStatus.FROZEN)
        assert not card.features.any_enabled()


class TestCardUpdates:
    """Test limit and feature changes"""

    def setup_method(self):
        self.card = make_card()

    def test_update_limit(self):
        self.card.update_limit("3000")
        assert self.card.limit == Decimal('3000.00')

    def test_update_limit_invalid_amount(self):
        with pytest.raises(InvalidAmount):
            self.card.update_limit("-1")
        assert self.card.limit == Decimal('2500.00')

    def test_update_limit_on_frozen_card(self):
        self.card.freeze()
        self.card.update_limit("100")
        assert self.card.limit == Decimal('100.00')

    def test_update_limit_on_blocked_card(self):
        self.card.report_lost()
        with pytest.raises(InvalidCardState):
            self.card.update_limit("100")

    def test_update_features(self):
        self.card.update_features(international_transactions=True, contactless=False)
        assert self.card.features.international_transactions
        assert not self.card.features.contactless
        assert self.card.features.online_transactions

    def test_update_unknown_feature(self):
        with pytest.raises(NotFound):
            self.card.update_features(teleportation=True)

    def test_update_features_on_frozen_card(self):
        self.card.freeze()
        with pytest.raises(InvalidCardState):
            self.card.update_features(contactless=True)


class TestCardSerialisation:
    """Test seed import and snapshot round trip"""

    def test_from_seed(self):
        card = Card.from_seed({
            "id": "CARD002",
            "accountId": "ACC003",
            "cardType": "credit",
            "cardNumber": "5412-7534-9821-0043",
            "status": "active",
            "limit": 5000,
            "spent": 1250.75,
            "internationalTransactions": True,
            "atmWithdrawals": False,
        })

        assert card.card_type == CardType.CREDIT
        assert card.spent == Decimal('1250.75')
        assert card.features == CardFeatures(international_transactions=True, atm_withdrawals=False)

    def test_dict_round_trip(self):
        card = make_card()
        card.update_features(atm_withdrawals=False)
        assert Card.from_dict(card.to_dict()) == card
