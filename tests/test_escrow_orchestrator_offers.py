from __future__ import annotations

import pytest

from localmoney.common.exceptions.errors import (
    OfferError,
    PriceError,
    ValidationError,
    WalletError,
)
from localmoney.core.types import OfferDirection, OfferStatus
from tests.factory_builders import (
    MAKER,
    SOL_MINT,
    SOL_USD_FEED,
    STRANGER,
    FakeFeed,
    FakeLedger,
    FakeOracle,
    build_offer,
    build_orchestrator,
    make_address,
)

SOL = 1_000_000_000


def _funded_ledger(amount: int = 10 * SOL) -> FakeLedger:
    ledger = FakeLedger()
    ledger.balances[(MAKER, SOL_MINT)] = amount
    return ledger


@pytest.mark.asyncio
async def test_create_offer_prices_one_token_and_submits() -> None:
    oracle = FakeOracle()
    orchestrator, ledger, _ = build_orchestrator(ledger=_funded_ledger(), oracle=oracle)

    address = await orchestrator.create_offer("sell", 5 * SOL, SOL, 5 * SOL, "USD", "SOL")

    (ix,) = ledger.submitted
    assert ix.name == "create_offer"
    assert ix.accounts["offer"] == address
    assert ix.args["price_per_token"] == 10_000
    assert ix.signer == MAKER

    created = await orchestrator.get_offer(address)
    assert created.direction == OfferDirection.SELL
    assert created.status == OfferStatus.ACTIVE
    assert (created.min_amount, created.max_amount) == (SOL, 5 * SOL)


@pytest.mark.asyncio
async def test_create_offer_rejects_min_above_max_before_any_call() -> None:
    oracle = FakeOracle()
    orchestrator, ledger, _ = build_orchestrator(ledger=_funded_ledger(), oracle=oracle)

    with pytest.raises(ValidationError):
        await orchestrator.create_offer("buy", SOL, 3 * SOL, 2 * SOL, "USD", "SOL")

    assert ledger.submitted == []
    assert oracle.fetch_calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("direction", "fiat", "denom"),
    [
        ("sideways", "USD", "SOL"),
        ("buy", "XYZ", "SOL"),
        ("buy", "USD", "DOGE"),
    ],
)
async def test_create_offer_rejects_unsupported_inputs(direction: str, fiat: str, denom: str) -> None:
    orchestrator, ledger, _ = build_orchestrator(ledger=_funded_ledger())

    with pytest.raises(ValidationError):
        await orchestrator.create_offer(direction, SOL, SOL, 2 * SOL, fiat, denom)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_create_offer_requires_connected_wallet() -> None:
    orchestrator, ledger, _ = build_orchestrator(identity=None, ledger=_funded_ledger())

    with pytest.raises(WalletError):
        await orchestrator.create_offer("sell", SOL, SOL, 2 * SOL, "USD", "SOL")

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_create_offer_rejects_insufficient_balance() -> None:
    orchestrator, ledger, _ = build_orchestrator(ledger=_funded_ledger(SOL // 2))

    with pytest.raises(ValidationError, match="Insufficient"):
        await orchestrator.create_offer("sell", SOL, SOL, 2 * SOL, "USD", "SOL")

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_create_offer_surfaces_price_failure() -> None:
    oracle = FakeOracle({SOL_USD_FEED: FakeFeed(price=100, confidence=2)})
    orchestrator, ledger, _ = build_orchestrator(ledger=_funded_ledger(), oracle=oracle)

    with pytest.raises(PriceError):
        await orchestrator.create_offer("sell", SOL, SOL, 2 * SOL, "USD", "SOL")

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_successful_mutation_invalidates_offer_cache() -> None:
    ledger = _funded_ledger()
    ledger.add_offer(build_offer())
    orchestrator, ledger, indexer = build_orchestrator(ledger=ledger)
    assert len(await orchestrator.get_my_offers()) == 1

    await orchestrator.create_offer("buy", SOL, SOL, 2 * SOL, "USD", "SOL")

    assert indexer._offers.scanned_at == 0.0
    assert len(await orchestrator.get_my_offers(MAKER)) == 2


@pytest.mark.asyncio
async def test_update_offer_merges_fields_and_checks_bounds() -> None:
    ledger = FakeLedger()
    offer = build_offer()
    ledger.add_offer(offer)
    orchestrator, ledger, _ = build_orchestrator(ledger=ledger)

    with pytest.raises(ValidationError):
        await orchestrator.update_offer(offer.address, min_amount=offer.max_amount + 1)

    assert await orchestrator.update_offer(offer.address, unit_price=12_345) is True
    updated = await orchestrator.get_offer(offer.address)
    assert updated.unit_price == 12_345
    assert updated.min_amount == offer.min_amount
    assert ledger.submitted[-1].args == {"price_per_token": 12_345}


@pytest.mark.asyncio
async def test_only_creator_may_mutate_offer() -> None:
    ledger = FakeLedger()
    offer = build_offer()
    ledger.add_offer(offer)
    orchestrator, ledger, _ = build_orchestrator(identity=STRANGER, ledger=ledger)

    with pytest.raises(OfferError, match="creator"):
        await orchestrator.pause_offer(offer.address)
    with pytest.raises(OfferError, match="creator"):
        await orchestrator.cancel_offer(offer.address)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_pause_and_resume_follow_status_machine() -> None:
    ledger = FakeLedger()
    offer = build_offer()
    ledger.add_offer(offer)
    orchestrator, ledger, _ = build_orchestrator(ledger=ledger)

    assert await orchestrator.pause_offer(offer.address) is True
    assert (await orchestrator.get_offer(offer.address)).status == OfferStatus.PAUSED

    with pytest.raises(OfferError):
        await orchestrator.pause_offer(offer.address)

    assert await orchestrator.resume_offer(offer.address) is True
    assert (await orchestrator.get_offer(offer.address)).status == OfferStatus.ACTIVE

    with pytest.raises(OfferError):
        await orchestrator.resume_offer(offer.address)


@pytest.mark.asyncio
async def test_cancel_offer_then_cancel_again_reports_not_found() -> None:
    ledger = FakeLedger()
    offer = build_offer()
    ledger.add_offer(offer)
    orchestrator, ledger, _ = build_orchestrator(ledger=ledger)

    assert await orchestrator.cancel_offer(offer.address) is True
    assert ledger.submitted[-1].name == "close_offer"

    with pytest.raises(OfferError, match="Offer not found"):
        await orchestrator.cancel_offer(offer.address)


@pytest.mark.asyncio
async def test_get_offers_returns_active_only() -> None:
    ledger = FakeLedger()
    ledger.add_offer(build_offer())
    ledger.add_offer(build_offer(address=make_address("offer-2"), status=OfferStatus.PAUSED))
    orchestrator, _, _ = build_orchestrator(ledger=ledger)

    offers = await orchestrator.get_offers()

    assert [offer.status for offer in offers] == [OfferStatus.ACTIVE]
