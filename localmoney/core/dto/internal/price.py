from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum


class PriceSource(StrEnum):
    ORACLE = "oracle"
    HTTP = "http"


@dataclass(slots=True, frozen=True, match_args=False, kw_only=True)
class CachedPriceDomain:
    """가격 캐시 엔트리 (TTL 판단은 게이트웨이가 수행)"""

    symbol: str
    fiat: str
    price: Decimal
    confidence: Decimal | None
    fetched_at: float
    source: PriceSource

    def is_fresh(self, now: float, ttl: float) -> bool:
        return (now - self.fetched_at) < ttl


@dataclass(slots=True, frozen=True, match_args=False, kw_only=True)
class OracleAccountsDomain:
    """트레이드 완료 명령에 필요한 가격 계정 묶음"""

    price_state: str
    price_program: str
