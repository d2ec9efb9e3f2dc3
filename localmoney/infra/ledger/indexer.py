from __future__ import annotations

import asyncio
import time
from typing import Callable, Iterable, Sequence, TypeVar

from localmoney.common.exceptions.errors import (
    AccountDecodeError,
    OfferError,
    TradeError,
    ValidationError,
)
from localmoney.common.logger import PipelineLogger
from localmoney.core.decorators import translate_errors
from localmoney.core.dto.internal.ledger import (
    OfferDomain,
    OfferSnapshotDomain,
    TradeDomain,
    TradeSnapshotDomain,
)
from localmoney.core.dto.io.ledger import ProgramAccountDTO
from localmoney.core.protocols import LedgerClient
from localmoney.core.types import ErrorKind, OfferStatus, TradeStatus
from localmoney.core.units import shorten_address
from localmoney.infra.ledger.codec import (
    TRADE_MAKER_OFFSET,
    TRADE_TAKER_OFFSET,
    decode_key,
    decode_offer,
    decode_trade,
    offer_filters,
    trade_filters,
)

logger = PipelineLogger.get_logger("ledger_indexer", "ledger")

RecordT = TypeVar("RecordT", OfferDomain, TradeDomain)


class LedgerIndexer:
    """오퍼/트레이드 계정 조회 + 스냅샷 캐시.

    - 오퍼: scan_interval_sec 동안 스냅샷 재사용 (비어 있지 않을 때만)
    - 트레이드: 호출마다 maker/taker 슬롯을 모두 스캔
    - 스냅샷은 불변이며 통째로 교체된다. 스캔 실패 시 기존 스냅샷 유지.
    - clear_cache()는 세대를 올린다. 스캔 도중 세대가 바뀌면
      결과는 반환만 하고 스냅샷으로 저장하지 않는다.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        offer_program_id: str,
        trade_program_id: str,
        scan_interval_sec: float = 30.0,
    ) -> None:
        self._ledger = ledger
        self._offer_program_id = offer_program_id
        self._trade_program_id = trade_program_id
        self._scan_interval_sec = max(0.0, scan_interval_sec)

        self._offers = OfferSnapshotDomain()
        self._trades = TradeSnapshotDomain()
        self._lock = asyncio.Lock()
        self._generation = 0

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------
    @translate_errors(ErrorKind.OFFER, "Failed to scan offers")
    async def scan_offers(self) -> list[OfferDomain]:
        if self._offers.is_fresh(time.time(), self._scan_interval_sec):
            return list(self._offers.offers.values())

        async with self._lock:
            now = time.time()
            if self._offers.is_fresh(now, self._scan_interval_sec):
                return list(self._offers.offers.values())

            generation = self._generation
            accounts = await self._ledger.get_program_accounts(
                self._offer_program_id, offer_filters()
            )
            offers = self._decode_all(accounts, decode_offer, "offer")
            cached = generation == self._generation
            if cached:
                self._offers = OfferSnapshotDomain.build(offers, scanned_at=now)

            logger.info(
                "Offer scan complete",
                accounts=len(accounts),
                offers=len(offers),
                skipped=len(accounts) - len(offers),
                cached=cached,
            )
            return offers

    async def get_offers_by_owner(self, owner: str) -> list[OfferDomain]:
        return [offer for offer in await self.scan_offers() if offer.creator == owner]

    async def get_active_offers(self) -> list[OfferDomain]:
        return [offer for offer in await self.scan_offers() if offer.status == OfferStatus.ACTIVE]

    @translate_errors(ErrorKind.OFFER, "Failed to fetch offer")
    async def fetch_offer(self, address: str) -> OfferDomain:
        """캐시를 거치지 않는 단건 조회 (변경 판단용)"""
        account = await self._ledger.get_account(address)
        if account is None:
            raise OfferError("Offer not found")
        try:
            return decode_offer(address, account.data)
        except AccountDecodeError as e:
            raise OfferError(f"Invalid offer account: {address}", e) from e

    def get_cached_offer(self, address: str) -> OfferDomain | None:
        return self._offers.offers.get(address)

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------
    @translate_errors(ErrorKind.TRADE, "Failed to scan trades")
    async def scan_trades(self, owner: str) -> list[TradeDomain]:
        try:
            decode_key(owner)
        except ValueError as e:
            raise ValidationError(f"Invalid owner address: {owner}", e) from e

        generation = self._generation
        as_maker, as_taker = await asyncio.gather(
            self._ledger.get_program_accounts(
                self._trade_program_id, trade_filters(owner, TRADE_MAKER_OFFSET)
            ),
            self._ledger.get_program_accounts(
                self._trade_program_id, trade_filters(owner, TRADE_TAKER_OFFSET)
            ),
        )

        # 양쪽 슬롯 결과를 주소 기준으로 병합
        merged: dict[str, ProgramAccountDTO] = {}
        for account in (*as_maker, *as_taker):
            merged.setdefault(account.address, account)

        trades = self._decode_all(list(merged.values()), decode_trade, "trade")
        cached = generation == self._generation
        if cached:
            self._trades = TradeSnapshotDomain.build(trades, scanned_at=time.time())

        logger.info(
            "Trade scan complete",
            owner=shorten_address(owner),
            maker_accounts=len(as_maker),
            taker_accounts=len(as_taker),
            trades=len(trades),
            cached=cached,
        )
        return trades

    async def get_trades_by_status(
        self, owner: str, statuses: Iterable[TradeStatus | str]
    ) -> list[TradeDomain]:
        try:
            wanted = {TradeStatus(status) for status in statuses}
        except ValueError as e:
            raise ValidationError(f"Unknown trade status in {statuses!r}", e) from e
        return [trade for trade in await self.scan_trades(owner) if trade.status in wanted]

    @translate_errors(ErrorKind.TRADE, "Failed to fetch trade")
    async def fetch_trade(self, address: str) -> TradeDomain:
        """캐시를 거치지 않는 단건 조회 (변경 판단용)"""
        account = await self._ledger.get_account(address)
        if account is None:
            raise TradeError("Trade not found")
        try:
            return decode_trade(address, account.data)
        except AccountDecodeError as e:
            raise TradeError(f"Invalid trade account: {address}", e) from e

    def get_cached_trade(self, address: str) -> TradeDomain | None:
        return self._trades.trades.get(address)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def clear_cache(self) -> None:
        self._generation += 1
        self._offers = OfferSnapshotDomain()
        self._trades = TradeSnapshotDomain()
        logger.debug("Index cache cleared")

    @staticmethod
    def _decode_all(
        accounts: Sequence[ProgramAccountDTO],
        decode: Callable[[str, bytes], RecordT],
        label: str,
    ) -> list[RecordT]:
        """계정 단위 디코딩. 실패한 계정은 경고 후 건너뛴다."""
        records: list[RecordT] = []
        for account in accounts:
            try:
                records.append(decode(account.address, account.data))
            except AccountDecodeError as e:
                logger.warning(
                    f"Skipping undecodable {label} account",
                    address=account.address,
                    error=str(e),
                )
        return records
