"""
Unit tests for the Odoo loyalty card to Hostex voucher sync.
"""

from __future__ import annotations

from typing import Dict, List
from unittest.mock import Mock

import pytest

from hostex_bridge.hostex_api.errors import HostexError
from hostex_bridge.odoo_api.errors import OdooNetworkError
from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.schemas.properties import LoyaltyToVoucherConfig
from hostex_bridge.schemas.vouchers import CreateVoucherInput, LoyaltyCard, Voucher
from hostex_bridge.services.loyalty_voucher_sync import (
    DEFAULT_LOYALTY_CONFIG,
    LoyaltySyncSummary,
    build_voucher_input,
    sync_loyalty_cards_to_vouchers,
)


class InMemoryHostex:
    def __init__(self, existing: Dict[str, List[str]] | None = None):
        self.vouchers: Dict[str, List[Voucher]] = {}
        self.created: List[CreateVoucherInput] = []
        for account, codes in (existing or {}).items():
            self.vouchers[account] = [Voucher(id=i, code=c) for i, c in enumerate(codes, 1)]

    def get_vouchers(
        self, thirdparty_account_id: str, page: int = 1, page_size: int = 1000
    ) -> List[Voucher]:
        return list(self.vouchers.get(thirdparty_account_id, []))

    def create_voucher(self, voucher: CreateVoucherInput) -> int:
        account = self.vouchers.setdefault(voucher.thirdparty_account_id, [])
        voucher_id = 1000 + len(self.created)
        account.append(
            Voucher(
                id=voucher_id,
                code=voucher.code,
                discount=voucher.discount,
                discount_type=voucher.discount_type,
            )
        )
        self.created.append(voucher)
        return voucher_id


def odoo_with(cards: List[LoyaltyCard]) -> Mock:
    odoo = Mock()
    odoo.get_loyalty_cards.return_value = cards
    return odoo


@pytest.fixture
def single_property() -> PropertyRegistry:
    return PropertyRegistry.from_dict({"123456": {"thirdparty_account_id": "422121"}})


@pytest.mark.unit
def test_card_becomes_uppercase_voucher(single_property: PropertyRegistry) -> None:
    """Test a card maps to an uppercased code, rounded discount and default config."""
    hostex = InMemoryHostex()
    card = LoyaltyCard(id=1, code="loyal-abc", points=42.5, expiration_date="2026-12-31")

    summary = sync_loyalty_cards_to_vouchers(hostex, odoo_with([card]), single_property)

    assert summary == LoyaltySyncSummary(created=1)
    payload = hostex.created[0]
    assert payload.code == "LOYAL-ABC"
    assert payload.discount == 43
    assert payload.discount_type == "flat"
    assert payload.minimum_stay == 1
    assert payload.number_of_redemption == 1
    assert payload.stay_period == 1
    assert payload.earliest_check_in is None
    assert payload.latest_check_out is None
    assert payload.expired_at == "2026-12-31"


@pytest.mark.unit
def test_sync_is_idempotent(single_property: PropertyRegistry) -> None:
    """Test running the sync twice creates each voucher only once."""
    hostex = InMemoryHostex()
    odoo = odoo_with([LoyaltyCard(id=1, code="ABC", points=10)])

    first = sync_loyalty_cards_to_vouchers(hostex, odoo, single_property)
    second = sync_loyalty_cards_to_vouchers(hostex, odoo, single_property)

    assert first.created == 1
    assert second.created == 0
    assert second.skipped == 1
    assert len(hostex.created) == 1


@pytest.mark.unit
def test_existing_code_matches_case_insensitively(single_property: PropertyRegistry) -> None:
    """Test a card whose code already exists in another case is skipped."""
    hostex = InMemoryHostex({"422121": ["abc"]})

    summary = sync_loyalty_cards_to_vouchers(
        hostex, odoo_with([LoyaltyCard(id=1, code="ABC", points=10)]), single_property
    )

    assert summary == LoyaltySyncSummary(skipped=1)
    assert hostex.created == []


@pytest.mark.unit
def test_cards_without_code_or_points_are_skipped(single_property: PropertyRegistry) -> None:
    """Test cards with no code, no points or a non-positive balance are ignored."""
    cards = [
        LoyaltyCard.model_validate({"id": 1, "code": False, "points": 10}),
        LoyaltyCard(id=2, code="ZERO", points=0),
        LoyaltyCard(id=3, code="NEG", points=-5),
        LoyaltyCard.model_validate({"id": 4, "code": "NONE", "points": False}),
    ]
    hostex = Mock()

    summary = sync_loyalty_cards_to_vouchers(hostex, odoo_with(cards), single_property)

    assert summary == LoyaltySyncSummary(skipped=4)
    hostex.get_vouchers.assert_not_called()
    hostex.create_voucher.assert_not_called()


@pytest.mark.unit
def test_property_config_overrides_defaults(property_registry: PropertyRegistry) -> None:
    """Test each property's discount type, minimum stay and redemptions are applied."""
    hostex = InMemoryHostex()

    sync_loyalty_cards_to_vouchers(
        hostex, odoo_with([LoyaltyCard(id=1, code="PCT", points=15)]), property_registry
    )

    by_account = {v.thirdparty_account_id: v for v in hostex.created}
    assert by_account["422121"].discount_type == "flat"
    assert by_account["422122"].discount_type == "percent"
    assert by_account["422122"].minimum_stay == 2
    assert by_account["422122"].number_of_redemption == 3


@pytest.mark.unit
def test_card_failure_is_counted(single_property: PropertyRegistry) -> None:
    """Test a failing create is counted and the next card is still processed."""
    hostex = Mock()
    hostex.get_vouchers.return_value = []
    hostex.create_voucher.side_effect = [HostexError("Duplicate code"), 77]
    cards = [LoyaltyCard(id=1, code="A", points=5), LoyaltyCard(id=2, code="B", points=5)]

    summary = sync_loyalty_cards_to_vouchers(hostex, odoo_with(cards), single_property)

    assert summary == LoyaltySyncSummary(created=1, errors=1)


@pytest.mark.unit
def test_property_without_account_is_skipped() -> None:
    """Test properties without a thirdparty_account_id create nothing."""
    registry = PropertyRegistry.from_dict({"1": {}})
    hostex = Mock()

    summary = sync_loyalty_cards_to_vouchers(
        hostex, odoo_with([LoyaltyCard(id=1, code="A", points=5)]), registry
    )

    assert summary == LoyaltySyncSummary()
    hostex.create_voucher.assert_not_called()


@pytest.mark.unit
def test_card_fetch_failure_propagates(single_property: PropertyRegistry) -> None:
    """Test the job fails as a whole when Odoo cannot be reached."""
    odoo = Mock()
    odoo.get_loyalty_cards.side_effect = OdooNetworkError("Connection refused")

    with pytest.raises(OdooNetworkError):
        sync_loyalty_cards_to_vouchers(Mock(), odoo, single_property)


@pytest.mark.unit
def test_no_properties_skips_odoo() -> None:
    """Test Odoo is not queried when no property is configured."""
    odoo = Mock()

    summary = sync_loyalty_cards_to_vouchers(Mock(), odoo, PropertyRegistry())

    assert summary == LoyaltySyncSummary()
    odoo.get_loyalty_cards.assert_not_called()


@pytest.mark.unit
def test_build_voucher_input_falls_back_to_single_use() -> None:
    """Test missing minimum stay and redemptions default to 1."""
    config = LoyaltyToVoucherConfig(discount_type="percent")

    payload = build_voucher_input(LoyaltyCard(id=1, code="x", points=2.5), "42", config)

    assert payload.discount == 3
    assert payload.minimum_stay == 1
    assert payload.number_of_redemption == 1
    assert DEFAULT_LOYALTY_CONFIG.discount_type == "flat"
