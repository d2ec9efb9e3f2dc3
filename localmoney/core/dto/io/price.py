from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from localmoney.core.dto.io._base import ExternalResponseDTO


class PriceFeedResponseDTO(ExternalResponseDTO):
    """보조 가격 API 응답 (`GET /price?symbol=&currency=`)

    Example:
        {"symbol": "SOL", "price": 101.25, "timestamp": 1700000000000}
    """

    symbol: str = Field(..., description="토큰 심볼")
    price: Decimal = Field(..., description="1 토큰당 법정화폐 가격")
    timestamp: int | float | None = Field(None, description="가격 산출 시각")
