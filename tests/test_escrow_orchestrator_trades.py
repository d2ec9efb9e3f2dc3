from __future__ import annotations

import pytest

from localmoney.application.instructions import profile_seeds
from localmoney.common.exceptions.errors import (
    OfferError,
    TokenError,
    TradeError,
    ValidationError,
    WalletError,
)
from localmoney.core.types import OfferStatus, TradeStatus
from tests.factory_builders import (
    MAKER,
    PRICE_PROGRAM,
    PROFILE_PROGRAM,
    SOL_MINT,
    STRANGER,
    TAKER,
    FakeLedger,
    LedgerProgramError,
    build_offer,
    build_orchestrator,
    build_trade,
    make_address,
)

SOL = 1_000_000_000


def _ledger_with_offer(**offer_overrides) -> FakeLedger:
    ledger = FakeLedger()
    ledger.add_offer(build_offer(**offer_overrides))
    ledger.balances[(TAKER, SOL_MINT)] = 10 * SOL
    return ledger


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [SOL // 2, 6 * SOL])
async def test_open_trade_out_of_range_never_submits(amount: int) -> None:
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=_ledger_with_offer())

    with pytest.raises(ValidationError, match="between"):
        await orchestrator.open_trade(make_address("offer-1"), amount)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_open_trade_requires_active_offer() -> None:
    ledger = _ledger_with_offer(status=OfferStatus.PAUSED)
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    with pytest.raises(OfferError, match="not active"):
        await orchestrator.open_trade(make_address("offer-1"), 2 * SOL)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_open_trade_rejects_insufficient_balance() -> None:
    ledger = _ledger_with_offer()
    ledger.balances[(TAKER, SOL_MINT)] = SOL
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    with pytest.raises(ValidationError, match="Insufficient"):
        await orchestrator.open_trade(make_address("offer-1"), 2 * SOL)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_open_trade_submits_single_create_instruction() -> None:
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=_ledger_with_offer())

    address = await orchestrator.open_trade(make_address("offer-1"), 2 * SOL)

    (ix,) = ledger.submitted
    assert ix.name == "create_trade"
    assert ix.accounts["trade"] == address
    assert ix.accounts["maker_token_account"] == await ledger.get_asset_account(MAKER, SOL_MINT)
    assert ix.accounts["taker_token_account"] == await ledger.get_asset_account(TAKER, SOL_MINT)
    assert ix.accounts["escrow_account"] == make_address("escrow-1")

    trade = await orchestrator.get_trade(address)
    assert trade.status == TradeStatus.CREATED
    assert trade.amount == 2 * SOL
    # 2 SOL × 10000 cents
    assert trade.price == 20_000


@pytest.mark.asyncio
async def test_open_trade_rejects_offer_priced_away_from_market() -> None:
    # 시세 100 USD, 단가 106 USD (6% 초과)
    ledger = _ledger_with_offer(unit_price=10_600)
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    with pytest.raises(ValidationError, match="deviates from the SOL/USD market price"):
        await orchestrator.open_trade(make_address("offer-1"), 2 * SOL)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_open_trade_accepts_price_within_tolerance() -> None:
    ledger = _ledger_with_offer(unit_price=10_400)
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    address = await orchestrator.open_trade(make_address("offer-1"), 2 * SOL, fiat="USD")

    assert (await orchestrator.get_trade(address)).price == 20_800


@pytest.mark.asyncio
async def test_open_trade_on_own_offer_is_rejected() -> None:
    ledger = _ledger_with_offer()
    ledger.balances[(MAKER, SOL_MINT)] = 10 * SOL
    orchestrator, ledger, _ = build_orchestrator(identity=MAKER, ledger=ledger)

    with pytest.raises(ValidationError):
        await orchestrator.open_trade(make_address("offer-1"), 2 * SOL)


@pytest.mark.asyncio
async def test_fund_trade_moves_created_trade_to_open() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.CREATED)
    ledger.add_trade(trade)
    ledger.balances[(TAKER, SOL_MINT)] = trade.amount
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    assert await orchestrator.fund_trade(trade.address) is True
    assert ledger.submitted[-1].args == {"amount": trade.amount}
    assert (await orchestrator.get_trade(trade.address)).status == TradeStatus.OPEN

    with pytest.raises(TradeError):
        await orchestrator.fund_trade(trade.address)


@pytest.mark.asyncio
async def test_fund_trade_requires_participant() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.CREATED)
    ledger.add_trade(trade)
    ledger.balances[(STRANGER, SOL_MINT)] = trade.amount
    orchestrator, ledger, _ = build_orchestrator(identity=STRANGER, ledger=ledger)

    with pytest.raises(TradeError, match="participants"):
        await orchestrator.fund_trade(trade.address)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_complete_trade_passes_oracle_and_profile_accounts() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.OPEN)
    ledger.add_trade(trade)
    orchestrator, ledger, _ = build_orchestrator(identity=MAKER, ledger=ledger)

    assert await orchestrator.complete_trade(trade.address) is True

    ix = ledger.submitted[-1]
    assert ix.name == "complete_trade"
    assert ix.accounts["price_oracle"] == PRICE_PROGRAM
    assert ix.accounts["price_program"] == PRICE_PROGRAM
    assert ix.accounts["profile_program"] == PROFILE_PROGRAM
    assert ix.accounts["taker_profile"] == ledger.find_program_address(profile_seeds(TAKER), PROFILE_PROGRAM)[0]
    assert ix.accounts["maker_profile"] == ledger.find_program_address(profile_seeds(MAKER), PROFILE_PROGRAM)[0]
    assert (await orchestrator.get_trade(trade.address)).status == TradeStatus.COMPLETED


@pytest.mark.asyncio
async def test_cancelled_trade_is_listed_by_status() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.CREATED)
    ledger.add_trade(trade)
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)
    assert await orchestrator.get_trades_by_status(TAKER, ["cancelled"]) == []

    assert await orchestrator.cancel_trade(trade.address) is True

    assert ledger.submitted[-1].accounts["maker_token_account"] == await ledger.get_asset_account(
        MAKER, SOL_MINT
    )
    cancelled = await orchestrator.get_trades_by_status(TAKER, ["cancelled"])
    assert [t.address for t in cancelled] == [trade.address]


@pytest.mark.asyncio
async def test_dispute_on_completed_trade_is_invalid_status() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.COMPLETED)
    ledger.add_trade(trade)
    orchestrator, ledger, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    with pytest.raises(TradeError, match="Invalid trade status for this operation"):
        await orchestrator.dispute_trade(trade.address)

    assert ledger.submitted == []


@pytest.mark.asyncio
async def test_dispute_open_trade() -> None:
    ledger = FakeLedger()
    trade = build_trade(status=TradeStatus.OPEN)
    ledger.add_trade(trade)
    orchestrator, ledger, _ = build_orchestrator(identity=MAKER, ledger=ledger)

    assert await orchestrator.dispute_trade(trade.address) is True
    assert (await orchestrator.get_trade(trade.address)).status == TradeStatus.DISPUTED


@pytest.mark.asyncio
async def test_trade_operations_require_wallet() -> None:
    orchestrator, ledger, _ = build_orchestrator(identity=None, ledger=FakeLedger())

    with pytest.raises(WalletError):
        await orchestrator.cancel_trade(make_address("trade-1"))
    with pytest.raises(WalletError):
        await orchestrator.get_trades()


@pytest.mark.asyncio
async def test_missing_trade_is_trade_not_found() -> None:
    orchestrator, _, _ = build_orchestrator(identity=TAKER, ledger=FakeLedger())

    with pytest.raises(TradeError, match="Trade not found"):
        await orchestrator.complete_trade(make_address("missing"))


@pytest.mark.asyncio
async def test_get_token_balance_resolves_symbol_to_mint() -> None:
    ledger = FakeLedger()
    ledger.balances[(TAKER, SOL_MINT)] = 42
    orchestrator, _, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    assert await orchestrator.get_token_balance(TAKER, "SOL") == 42
    assert await orchestrator.get_token_balance(TAKER, SOL_MINT) == 42


@pytest.mark.asyncio
async def test_missing_token_account_is_token_error() -> None:
    ledger = FakeLedger()

    async def _missing(identity: str, denom: str) -> int:
        raise LedgerProgramError("could not find account")

    ledger.get_balance = _missing
    orchestrator, _, _ = build_orchestrator(identity=TAKER, ledger=ledger)

    with pytest.raises(TokenError, match="Token account not found"):
        await orchestrator.get_token_balance(TAKER, "SOL")
