"""지원 토큰/법정화폐 레지스트리 및 단위 변환 유틸리티"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Final

from localmoney.common.exceptions.errors import ValidationError


@dataclass(slots=True, frozen=True, kw_only=True)
class TokenInfo:
    symbol: str
    name: str
    decimals: int
    mint: str


@dataclass(slots=True, frozen=True, kw_only=True)
class FiatInfo:
    code: str
    name: str
    symbol: str
    decimals: int = 2


SUPPORTED_TOKENS: Final[dict[str, TokenInfo]] = {
    "SOL": TokenInfo(
        symbol="SOL",
        name="Solana",
        decimals=9,
        mint="So11111111111111111111111111111111111111112",
    ),
    "USDC": TokenInfo(
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",  # Mainnet USDC
    ),
}

SUPPORTED_FIATS: Final[dict[str, FiatInfo]] = {
    "USD": FiatInfo(code="USD", name="US Dollar", symbol="$"),
    "EUR": FiatInfo(code="EUR", name="Euro", symbol="€"),
    "GBP": FiatInfo(code="GBP", name="British Pound", symbol="£"),
}

# 최소 단위 자릿수 (미등록 통화는 2자리로 간주)
FIAT_DECIMALS: Final[dict[str, int]] = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "JPY": 0,
    "KRW": 0,
}


def get_token(symbol_or_mint: str) -> TokenInfo:
    """심볼 또는 mint 주소로 토큰 조회. 미지원이면 ValidationError."""
    token = SUPPORTED_TOKENS.get(symbol_or_mint.upper())
    if token is not None:
        return token
    for candidate in SUPPORTED_TOKENS.values():
        if candidate.mint == symbol_or_mint:
            return candidate
    raise ValidationError(f"Unsupported token: {symbol_or_mint}")


def get_fiat(code: str) -> FiatInfo:
    fiat = SUPPORTED_FIATS.get(code.upper())
    if fiat is None:
        raise ValidationError(f"Unsupported fiat currency: {code}")
    return fiat


def fiat_decimals(code: str) -> int:
    return FIAT_DECIMALS.get(code.upper(), 2)


def to_smallest_unit(amount: Decimal | int | str, decimals: int) -> int:
    """whole 단위 → 최소 단위 (소수점 이하 잔여분은 버림)"""
    scaled = Decimal(str(amount)).scaleb(decimals)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_DOWN))


def from_smallest_unit(amount: int, decimals: int) -> Decimal:
    return Decimal(amount).scaleb(-decimals)


def round_to_fiat_unit(value: Decimal, fiat: str) -> int:
    """법정화폐 금액을 최소 단위 정수로 반올림 (ROUND_HALF_UP)"""
    return int(value.scaleb(fiat_decimals(fiat)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_fiat(amount: int, fiat: str) -> str:
    """최소 단위 금액 표시 (예: 12345, USD → "$123.45")"""
    decimals = fiat_decimals(fiat)
    value = from_smallest_unit(amount, decimals)
    info = SUPPORTED_FIATS.get(fiat.upper())
    prefix = info.symbol if info else ""
    suffix = "" if info else f" {fiat.upper()}"
    return f"{prefix}{value:,.{decimals}f}{suffix}"


def shorten_address(address: str, chars: int = 4) -> str:
    """주소 축약 (예: "So11...1112")"""
    if len(address) <= chars * 2 + 3:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def trade_fiat_total(amount: int, unit_price: int, decimals: int) -> int:
    """자산 최소 단위 수량 × (whole 토큰당 법정화폐 최소 단위 가격) → 법정화폐 최소 단위 합계"""
    total = from_smallest_unit(amount, decimals) * unit_price
    return int(total.quantize(Decimal(1), rounding=ROUND_HALF_UP))
