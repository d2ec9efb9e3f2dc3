from __future__ import annotations

from enum import StrEnum
from typing import Final


class OfferDirection(StrEnum):
    """오퍼 방향 (메이커 기준)

    - BUY: 메이커가 자산을 사려는 오퍼
    - SELL: 메이커가 자산을 팔려는 오퍼
    """

    BUY = "buy"
    SELL = "sell"


class OfferStatus(StrEnum):
    """오퍼 상태 (active ⇄ paused, active|paused → closed)"""

    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class TradeStatus(StrEnum):
    """트레이드 상태

    created → open → in_progress → {completed | cancelled}
    {open, in_progress} → disputed
    """

    CREATED = "created"
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


class FeedStatus(StrEnum):
    """오라클 피드 상태"""

    UNKNOWN = "unknown"
    TRADING = "trading"
    HALTED = "halted"
    AUCTION = "auction"


# 원장 계정 내 u8 인코딩 (선언 순서 = 바이트 값)
OFFER_DIRECTION_CODES: Final[tuple[OfferDirection, ...]] = tuple(OfferDirection)
OFFER_STATUS_CODES: Final[tuple[OfferStatus, ...]] = tuple(OfferStatus)

# 트레이드 프로그램 enum 순서: Created, EscrowDeposited, Completed, Cancelled, Disputed
# in_progress는 원장에 대응 바이트가 없다
TRADE_STATUS_CODES: Final[tuple[TradeStatus, ...]] = (
    TradeStatus.CREATED,
    TradeStatus.OPEN,
    TradeStatus.COMPLETED,
    TradeStatus.CANCELLED,
    TradeStatus.DISPUTED,
)
