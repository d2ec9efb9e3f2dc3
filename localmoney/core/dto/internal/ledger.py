from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from localmoney.core.types import OfferDirection, OfferStatus, TradeStatus


@dataclass(slots=True, frozen=True, match_args=False, kw_only=True)
class OfferDomain:
    """원장 오퍼 레코드 (내부 불변 DTO).

    - unit_price: 토큰 1개(whole unit)당 법정화폐 최소 단위 가격
    - min_amount/max_amount: 자산 최소 단위
    """

    address: str
    creator: str
    denom: str
    direction: OfferDirection
    unit_price: int
    min_amount: int
    max_amount: int
    status: OfferStatus
    created_at: int
    updated_at: int

    @property
    def is_active(self) -> bool:
        return self.status == OfferStatus.ACTIVE

    def accepts(self, amount: int) -> bool:
        return self.min_amount <= amount <= self.max_amount


@dataclass(slots=True, frozen=True, match_args=False, kw_only=True)
class TradeDomain:
    """원장 트레이드 레코드 (내부 불변 DTO).

    - amount: 자산 최소 단위
    - price: 전체 수량에 대한 법정화폐 최소 단위 가격
    - offer: 원 오퍼 주소. 원장 계정에는 저장되지 않아 디코딩 시 None
    """

    address: str
    maker: str
    taker: str
    denom: str
    amount: int
    price: int
    escrow_account: str
    status: TradeStatus
    created_at: int
    updated_at: int
    bump: int
    offer: str | None = None

    def involves(self, identity: str) -> bool:
        return identity in (self.maker, self.taker)


def _frozen_offers() -> Mapping[str, OfferDomain]:
    return MappingProxyType({})


def _frozen_trades() -> Mapping[str, TradeDomain]:
    return MappingProxyType({})


@dataclass(slots=True, frozen=True, repr=False, match_args=False, kw_only=True)
class OfferSnapshotDomain:
    """오퍼 인덱스 스냅샷. 통째로 교체되며 제자리 변경하지 않는다.

    scanned_at == 0.0 이면 아직 스캔되지 않은 상태.
    """

    offers: Mapping[str, OfferDomain] = field(default_factory=_frozen_offers)
    scanned_at: float = 0.0

    @classmethod
    def build(cls, offers: list[OfferDomain], scanned_at: float | None = None) -> OfferSnapshotDomain:
        return cls(
            offers=MappingProxyType({offer.address: offer for offer in offers}),
            scanned_at=time.time() if scanned_at is None else scanned_at,
        )

    def is_fresh(self, now: float, interval: float) -> bool:
        return bool(self.offers) and (now - self.scanned_at) < interval


@dataclass(slots=True, frozen=True, repr=False, match_args=False, kw_only=True)
class TradeSnapshotDomain:
    """마지막으로 조회한 트레이드 스냅샷."""

    trades: Mapping[str, TradeDomain] = field(default_factory=_frozen_trades)
    scanned_at: float = 0.0

    @classmethod
    def build(cls, trades: list[TradeDomain], scanned_at: float | None = None) -> TradeSnapshotDomain:
        return cls(
            trades=MappingProxyType({trade.address: trade for trade in trades}),
            scanned_at=time.time() if scanned_at is None else scanned_at,
        )
