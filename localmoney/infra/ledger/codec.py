"""원장 계정 바이트 코덱 (Anchor 레이아웃, little-endian)

Offer:
    discriminator[8] | creator[32] | denom[32] | unit_price u64 | min_amount u64 |
    max_amount u64 | direction u8 | status u8 | created_at i64 | updated_at i64

Trade (170 bytes, 원 오퍼 주소는 저장되지 않음):
    discriminator[8] | maker[32] | taker[32] | amount u64 | price u64 |
    denom[32] | escrow_account[32] | status u8 | created_at i64 | updated_at i64 | bump u8
"""

from __future__ import annotations

import hashlib
import struct
from typing import Final

import base58

from localmoney.common.exceptions.errors import AccountDecodeError
from localmoney.core.dto.internal.ledger import OfferDomain, TradeDomain
from localmoney.core.dto.io.ledger import MemcmpFilterDTO
from localmoney.core.types import (
    OFFER_DIRECTION_CODES,
    OFFER_STATUS_CODES,
    TRADE_STATUS_CODES,
    OfferDirection,
    OfferStatus,
    TradeStatus,
)

KEY_SIZE: Final[int] = 32


def account_discriminator(name: str) -> bytes:
    """Anchor 계정 판별자: sha256("account:<Name>")의 앞 8바이트"""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


OFFER_DISCRIMINATOR: Final[bytes] = account_discriminator("Offer")
TRADE_DISCRIMINATOR: Final[bytes] = account_discriminator("Trade")

OFFER_LAYOUT: Final[struct.Struct] = struct.Struct("<8s32s32sQQQBBqq")
TRADE_LAYOUT: Final[struct.Struct] = struct.Struct("<8s32s32sQQ32s32sBqqB")

# memcmp 필터 오프셋
TRADE_MAKER_OFFSET: Final[int] = 8
TRADE_TAKER_OFFSET: Final[int] = TRADE_MAKER_OFFSET + KEY_SIZE


def encode_key(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def decode_key(address: str) -> bytes:
    """base58 주소 → 32바이트. 길이가 다르면 ValueError."""
    try:
        raw = base58.b58decode(address)
    except ValueError as e:
        raise ValueError(f"Invalid address: {address}") from e
    if len(raw) != KEY_SIZE:
        raise ValueError(f"Invalid address length ({len(raw)} bytes): {address}")
    return raw


def _code_of(value: str, codes: tuple[str, ...], label: str) -> int:
    if value not in codes:
        raise ValueError(f"{label} {value!r} has no ledger encoding")
    return codes.index(value)


def _enum_at(codes: tuple, code: int, label: str, address: str):
    if code >= len(codes):
        raise AccountDecodeError(f"{address}: unknown {label} code {code}")
    return codes[code]


def decode_offer(address: str, data: bytes) -> OfferDomain:
    if len(data) < OFFER_LAYOUT.size:
        raise AccountDecodeError(
            f"{address}: offer account too short ({len(data)} < {OFFER_LAYOUT.size})"
        )
    (
        disc,
        creator,
        denom,
        unit_price,
        min_amount,
        max_amount,
        direction,
        status,
        created_at,
        updated_at,
    ) = OFFER_LAYOUT.unpack_from(data)
    if disc != OFFER_DISCRIMINATOR:
        raise AccountDecodeError(f"{address}: not an offer account")

    return OfferDomain(
        address=address,
        creator=encode_key(creator),
        denom=encode_key(denom),
        direction=_enum_at(OFFER_DIRECTION_CODES, direction, "direction", address),
        unit_price=unit_price,
        min_amount=min_amount,
        max_amount=max_amount,
        status=_enum_at(OFFER_STATUS_CODES, status, "offer status", address),
        created_at=created_at,
        updated_at=updated_at,
    )


def decode_trade(address: str, data: bytes) -> TradeDomain:
    if len(data) < TRADE_LAYOUT.size:
        raise AccountDecodeError(
            f"{address}: trade account too short ({len(data)} < {TRADE_LAYOUT.size})"
        )
    (
        disc,
        maker,
        taker,
        amount,
        price,
        denom,
        escrow_account,
        status,
        created_at,
        updated_at,
        bump,
    ) = TRADE_LAYOUT.unpack_from(data)
    if disc != TRADE_DISCRIMINATOR:
        raise AccountDecodeError(f"{address}: not a trade account")

    return TradeDomain(
        address=address,
        maker=encode_key(maker),
        taker=encode_key(taker),
        denom=encode_key(denom),
        amount=amount,
        price=price,
        escrow_account=encode_key(escrow_account),
        status=_enum_at(TRADE_STATUS_CODES, status, "trade status", address),
        created_at=created_at,
        updated_at=updated_at,
        bump=bump,
    )


def encode_offer(offer: OfferDomain) -> bytes:
    """OfferDomain → 계정 바이트 (localnet 픽스처/테스트용)"""
    return OFFER_LAYOUT.pack(
        OFFER_DISCRIMINATOR,
        decode_key(offer.creator),
        decode_key(offer.denom),
        offer.unit_price,
        offer.min_amount,
        offer.max_amount,
        _code_of(OfferDirection(offer.direction), OFFER_DIRECTION_CODES, "direction"),
        _code_of(OfferStatus(offer.status), OFFER_STATUS_CODES, "offer status"),
        offer.created_at,
        offer.updated_at,
    )


def encode_trade(trade: TradeDomain) -> bytes:
    """TradeDomain → 계정 바이트 (localnet 픽스처/테스트용)"""
    return TRADE_LAYOUT.pack(
        TRADE_DISCRIMINATOR,
        decode_key(trade.maker),
        decode_key(trade.taker),
        trade.amount,
        trade.price,
        decode_key(trade.denom),
        decode_key(trade.escrow_account),
        _code_of(TradeStatus(trade.status), TRADE_STATUS_CODES, "trade status"),
        trade.created_at,
        trade.updated_at,
        trade.bump,
    )


def offer_filters() -> list[MemcmpFilterDTO]:
    return [MemcmpFilterDTO.from_raw(0, OFFER_DISCRIMINATOR)]


def trade_filters(owner: str, offset: int) -> list[MemcmpFilterDTO]:
    """트레이드 판별자 + 소유자 키(maker 또는 taker 슬롯) 필터"""
    return [
        MemcmpFilterDTO.from_raw(0, TRADE_DISCRIMINATOR),
        MemcmpFilterDTO.from_raw(offset, decode_key(owner)),
    ]
