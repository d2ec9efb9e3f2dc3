"""
에스크로 오케스트레이터

오퍼/트레이드 생명주기를 단일 진입점으로 제공합니다.
모든 쓰기는 로컬 검증과 최신 원장 조회 이후에만 수행되며,
성공한 쓰기 직후 인덱서 캐시를 비웁니다.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

from localmoney.application.instructions import (
    cancel_trade_ix,
    complete_trade_ix,
    create_offer_ix,
    create_trade_ix,
    deposit_escrow_ix,
    dispute_trade_ix,
    offer_seeds,
    offer_status_ix,
    profile_seeds,
    trade_seeds,
    update_offer_ix,
)
from localmoney.common.exceptions.errors import (
    OfferError,
    TradeError,
    ValidationError,
    WalletError,
)
from localmoney.common.logger import PipelineLogger
from localmoney.core.decorators import translate_errors
from localmoney.core.dto.internal.ledger import OfferDomain, TradeDomain
from localmoney.core.dto.io.ledger import LedgerInstructionDTO
from localmoney.core.protocols import LedgerClient, Signer
from localmoney.core.types import ErrorKind, OfferDirection, OfferStatus, TradeStatus
from localmoney.core.units import (
    format_fiat,
    from_smallest_unit,
    get_fiat,
    get_token,
    shorten_address,
    trade_fiat_total,
)
from localmoney.infra.ledger.indexer import LedgerIndexer
from localmoney.infra.price.oracle_gateway import PriceOracleGateway

logger = PipelineLogger.get_logger("escrow_orchestrator", "app")


def _require_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer")


class EscrowOrchestrator:
    """오퍼/트레이드 생명주기 파사드 (DI)

    Args:
        ledger: 원장 클라이언트
        signer: 지갑 서명자
        indexer: 오퍼/트레이드 인덱서
        price_gateway: 가격 게이트웨이
        offer_program_id: 오퍼 프로그램 주소
        trade_program_id: 트레이드 프로그램 주소
        profile_program_id: 프로필 프로그램 주소
    """

    def __init__(
        self,
        ledger: LedgerClient,
        signer: Signer,
        indexer: LedgerIndexer,
        price_gateway: PriceOracleGateway,
        offer_program_id: str,
        trade_program_id: str,
        profile_program_id: str,
    ) -> None:
        self._ledger = ledger
        self._signer = signer
        self._indexer = indexer
        self._price = price_gateway
        self._offer_program_id = offer_program_id
        self._trade_program_id = trade_program_id
        self._profile_program_id = profile_program_id

    def _require_identity(self) -> str:
        identity = self._signer.identity
        if not identity:
            raise WalletError("Wallet not connected")
        return identity

    async def _submit(self, ix: LedgerInstructionDTO) -> str:
        signed = await self._signer.sign_transaction(ix)
        signature = await self._ledger.submit(signed)
        self._indexer.clear_cache()
        await logger.ainfo(
            "Instruction submitted",
            instruction=ix.name,
            program_id=ix.program_id,
            signature=signature,
        )
        return signature

    @staticmethod
    def _require_creator(offer: OfferDomain, identity: str) -> None:
        if offer.creator != identity:
            raise OfferError("Only the offer creator can modify this offer")

    # ------------------------------------------------------------------
    # Offer lifecycle
    # ------------------------------------------------------------------
    @translate_errors(ErrorKind.OFFER, "Failed to create offer")
    async def create_offer(
        self,
        direction: OfferDirection | str,
        amount: int,
        min_amount: int,
        max_amount: int,
        fiat: str,
        denom: str,
    ) -> str:
        """오퍼 생성 후 오퍼 주소 반환.

        amount/min_amount/max_amount는 자산 최소 단위, denom은 심볼 또는 mint 주소.
        """
        _require_positive("amount", amount)
        _require_positive("min_amount", min_amount)
        _require_positive("max_amount", max_amount)
        if min_amount > max_amount:
            raise ValidationError("Minimum amount cannot be greater than maximum amount")
        try:
            direction = OfferDirection(direction)
        except ValueError as e:
            raise ValidationError(f"Unknown offer direction: {direction}", e) from e
        token = get_token(denom)
        fiat_info = get_fiat(fiat)
        maker = self._require_identity()

        unit_price = await self._price.calculate_offer_price(1, token.symbol, fiat_info.code)
        if unit_price <= 0:
            raise ValidationError(f"Invalid {token.symbol}/{fiat_info.code} price: {unit_price}")

        balance = await self._ledger.get_balance(maker, token.mint)
        if balance < amount:
            raise ValidationError(
                f"Insufficient {token.symbol} balance: {balance} < {amount}"
            )

        offer_address, _ = self._ledger.find_program_address(
            offer_seeds(maker, token.mint, direction, min_amount, max_amount),
            self._offer_program_id,
        )
        await self._submit(
            create_offer_ix(
                self._offer_program_id,
                offer=offer_address,
                maker=maker,
                denom=token.mint,
                direction=direction,
                amount=amount,
                unit_price=unit_price,
                min_amount=min_amount,
                max_amount=max_amount,
            )
        )
        logger.info(
            "Offer created",
            offer=offer_address,
            direction=direction.value,
            unit_price=format_fiat(unit_price, fiat_info.code),
        )
        return offer_address

    @translate_errors(ErrorKind.OFFER, "Failed to update offer")
    async def update_offer(
        self,
        address: str,
        unit_price: int | None = None,
        min_amount: int | None = None,
        max_amount: int | None = None,
    ) -> bool:
        if unit_price is None and min_amount is None and max_amount is None:
            raise ValidationError("Nothing to update")
        for name, value in (
            ("unit_price", unit_price),
            ("min_amount", min_amount),
            ("max_amount", max_amount),
        ):
            if value is not None:
                _require_positive(name, value)
        identity = self._require_identity()

        offer = await self._indexer.fetch_offer(address)
        self._require_creator(offer, identity)
        if offer.status == OfferStatus.CLOSED:
            raise OfferError("Offer is closed")

        merged_min = offer.min_amount if min_amount is None else min_amount
        merged_max = offer.max_amount if max_amount is None else max_amount
        if merged_min > merged_max:
            raise ValidationError("Minimum amount cannot be greater than maximum amount")

        await self._submit(
            update_offer_ix(
                self._offer_program_id,
                offer,
                unit_price=unit_price,
                min_amount=min_amount,
                max_amount=max_amount,
            )
        )
        return True

    async def _transition_offer(
        self, address: str, expected: OfferStatus, instruction: str
    ) -> bool:
        identity = self._require_identity()
        offer = await self._indexer.fetch_offer(address)
        self._require_creator(offer, identity)
        if offer.status != expected:
            raise OfferError(
                f"Offer must be {expected.value} to {instruction.removesuffix('_offer')} "
                f"(current: {offer.status.value})"
            )
        await self._submit(
            offer_status_ix(self._offer_program_id, instruction, offer.address, identity)
        )
        return True

    @translate_errors(ErrorKind.OFFER, "Failed to pause offer")
    async def pause_offer(self, address: str) -> bool:
        return await self._transition_offer(address, OfferStatus.ACTIVE, "pause_offer")

    @translate_errors(ErrorKind.OFFER, "Failed to resume offer")
    async def resume_offer(self, address: str) -> bool:
        return await self._transition_offer(address, OfferStatus.PAUSED, "resume_offer")

    @translate_errors(ErrorKind.OFFER, "Failed to cancel offer")
    async def cancel_offer(self, address: str) -> bool:
        identity = self._require_identity()
        offer = await self._indexer.fetch_offer(address)
        self._require_creator(offer, identity)
        if offer.status == OfferStatus.CLOSED:
            raise OfferError("Offer is already closed")

        await self._submit(
            offer_status_ix(self._offer_program_id, "close_offer", offer.address, identity)
        )
        return True

    # ------------------------------------------------------------------
    # Trade lifecycle
    # ------------------------------------------------------------------
    @translate_errors(ErrorKind.TRADE, "Failed to open trade")
    async def open_trade(self, offer_address: str, amount: int, fiat: str = "USD") -> str:
        """오퍼에 대해 트레이드를 열고 트레이드 주소 반환.

        amount는 자산 최소 단위, fiat은 오퍼 단가의 통화.
        오퍼 단가가 시세에서 허용 편차 이상 벗어나면 제출 전에 거절한다.
        """
        _require_positive("amount", amount)
        fiat_info = get_fiat(fiat)
        taker = self._require_identity()

        offer = await self._indexer.fetch_offer(offer_address)
        if not offer.is_active:
            raise OfferError(f"Offer is not active (current: {offer.status.value})")
        if offer.creator == taker:
            raise ValidationError("Cannot open a trade on your own offer")
        if not offer.accepts(amount):
            raise ValidationError(
                f"Amount must be between {offer.min_amount} and {offer.max_amount}"
            )
        token = get_token(offer.denom)

        balance = await self._ledger.get_balance(taker, offer.denom)
        if balance < amount:
            raise ValidationError(f"Insufficient {token.symbol} balance: {balance} < {amount}")

        price = trade_fiat_total(amount, offer.unit_price, token.decimals)
        if not await self._price.validate_price(
            price, from_smallest_unit(amount, token.decimals), token.symbol, fiat_info.code
        ):
            raise ValidationError(
                f"Offer price {format_fiat(price, fiat_info.code)} deviates from the "
                f"{token.symbol}/{fiat_info.code} market price"
            )

        maker_account, taker_account = await asyncio.gather(
            self._ledger.get_asset_account(offer.creator, offer.denom),
            self._ledger.get_asset_account(taker, offer.denom),
        )
        escrow_account = self._ledger.new_account()
        trade_address, _ = self._ledger.find_program_address(
            trade_seeds(taker, escrow_account), self._trade_program_id
        )

        await self._submit(
            create_trade_ix(
                self._trade_program_id,
                trade=trade_address,
                offer=offer,
                taker=taker,
                maker_asset_account=maker_account,
                taker_asset_account=taker_account,
                escrow_account=escrow_account,
                amount=amount,
                price=price,
            )
        )
        logger.info(
            "Trade opened",
            trade=trade_address,
            offer=shorten_address(offer.address),
            amount=amount,
        )
        return trade_address

    @translate_errors(ErrorKind.TRADE, "Failed to fund trade")
    async def fund_trade(self, trade_address: str) -> bool:
        depositor = self._require_identity()
        trade = await self._indexer.fetch_trade(trade_address)
        if trade.status != TradeStatus.CREATED:
            raise TradeError(
                f"Trade must be {TradeStatus.CREATED.value} to fund escrow "
                f"(current: {trade.status.value})"
            )
        if not trade.involves(depositor):
            raise TradeError("Only trade participants can fund escrow")

        balance = await self._ledger.get_balance(depositor, trade.denom)
        if balance < trade.amount:
            raise ValidationError(f"Insufficient balance: {balance} < {trade.amount}")

        depositor_account = await self._ledger.get_asset_account(depositor, trade.denom)
        await self._submit(
            deposit_escrow_ix(self._trade_program_id, trade, depositor, depositor_account)
        )
        return True

    @translate_errors(ErrorKind.TRADE, "Failed to complete trade")
    async def complete_trade(self, trade_address: str) -> bool:
        signer = self._require_identity()
        trade = await self._indexer.fetch_trade(trade_address)

        taker_account = await self._ledger.get_asset_account(trade.taker, trade.denom)
        oracle = await self._price.get_oracle_accounts()
        taker_profile, _ = self._ledger.find_program_address(
            profile_seeds(trade.taker), self._profile_program_id
        )
        maker_profile, _ = self._ledger.find_program_address(
            profile_seeds(trade.maker), self._profile_program_id
        )

        await self._submit(
            complete_trade_ix(
                self._trade_program_id,
                trade,
                signer=signer,
                taker_asset_account=taker_account,
                price_oracle=oracle.price_state,
                price_program=oracle.price_program,
                taker_profile=taker_profile,
                maker_profile=maker_profile,
                profile_program=self._profile_program_id,
            )
        )
        return True

    @translate_errors(ErrorKind.TRADE, "Failed to cancel trade")
    async def cancel_trade(self, trade_address: str) -> bool:
        signer = self._require_identity()
        trade = await self._indexer.fetch_trade(trade_address)
        maker_account = await self._ledger.get_asset_account(trade.maker, trade.denom)

        await self._submit(
            cancel_trade_ix(
                self._trade_program_id,
                trade,
                signer=signer,
                maker_asset_account=maker_account,
            )
        )
        return True

    @translate_errors(ErrorKind.TRADE, "Failed to dispute trade")
    async def dispute_trade(self, trade_address: str) -> bool:
        # 상태 검증은 프로그램이 수행 (InvalidTradeStatus → TradeError)
        disputer = self._require_identity()
        await self._submit(dispute_trade_ix(self._trade_program_id, trade_address, disputer))
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_offers(self) -> list[OfferDomain]:
        return await self._indexer.get_active_offers()

    async def get_my_offers(self, owner: str | None = None) -> list[OfferDomain]:
        return await self._indexer.get_offers_by_owner(owner or self._require_identity())

    async def get_trades(self, owner: str | None = None) -> list[TradeDomain]:
        return await self._indexer.scan_trades(owner or self._require_identity())

    async def get_trades_by_status(
        self, owner: str | None, statuses: Iterable[TradeStatus | str]
    ) -> list[TradeDomain]:
        return await self._indexer.get_trades_by_status(
            owner or self._require_identity(), statuses
        )

    async def get_offer(self, address: str) -> OfferDomain:
        return await self._indexer.fetch_offer(address)

    async def get_trade(self, address: str) -> TradeDomain:
        return await self._indexer.fetch_trade(address)

    @translate_errors(ErrorKind.TOKEN, "Failed to fetch token balance")
    async def get_token_balance(self, owner: str, denom: str) -> int:
        return await self._ledger.get_balance(owner, get_token(denom).mint)
