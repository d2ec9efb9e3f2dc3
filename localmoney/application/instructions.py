"""원장 프로그램 명령 빌더 및 PDA 시드 정의

명령은 LedgerInstructionDTO로만 표현되며, 직렬화/서명은 Signer 구현이 담당합니다.
"""

from __future__ import annotations

import struct

from localmoney.core.dto.internal.ledger import OfferDomain, TradeDomain
from localmoney.core.dto.io.ledger import LedgerInstructionDTO
from localmoney.core.types import OFFER_DIRECTION_CODES, OfferDirection
from localmoney.infra.ledger.codec import decode_key


def _u64(value: int) -> bytes:
    return struct.pack("<Q", value)


# ========================================
# PDA 시드
# ========================================


def offer_seeds(
    maker: str, denom: str, direction: OfferDirection, min_amount: int, max_amount: int
) -> list[bytes]:
    return [
        b"offer",
        decode_key(maker),
        decode_key(denom),
        bytes([OFFER_DIRECTION_CODES.index(OfferDirection(direction))]),
        _u64(min_amount),
        _u64(max_amount),
    ]


def trade_seeds(taker: str, escrow_account: str) -> list[bytes]:
    return [b"trade", decode_key(taker), decode_key(escrow_account)]


def profile_seeds(owner: str) -> list[bytes]:
    return [b"profile", decode_key(owner)]


# ========================================
# 오퍼 프로그램
# ========================================


def create_offer_ix(
    program_id: str,
    *,
    offer: str,
    maker: str,
    denom: str,
    direction: OfferDirection,
    amount: int,
    unit_price: int,
    min_amount: int,
    max_amount: int,
) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="create_offer",
        accounts={"offer": offer, "maker": maker, "token_mint": denom},
        args={
            "amount": amount,
            "price_per_token": unit_price,
            "min_amount": min_amount,
            "max_amount": max_amount,
            "offer_type": OfferDirection(direction).value,
        },
        signer=maker,
    )


def update_offer_ix(
    program_id: str,
    offer: OfferDomain,
    *,
    unit_price: int | None = None,
    min_amount: int | None = None,
    max_amount: int | None = None,
) -> LedgerInstructionDTO:
    args: dict[str, int | str | bool] = {}
    if unit_price is not None:
        args["price_per_token"] = unit_price
    if min_amount is not None:
        args["min_amount"] = min_amount
    if max_amount is not None:
        args["max_amount"] = max_amount
    return LedgerInstructionDTO(
        program_id=program_id,
        name="update_offer",
        accounts={"offer": offer.address, "maker": offer.creator},
        args=args,
        signer=offer.creator,
    )


def offer_status_ix(program_id: str, name: str, offer: str, maker: str) -> LedgerInstructionDTO:
    """pause_offer / resume_offer / close_offer"""
    return LedgerInstructionDTO(
        program_id=program_id,
        name=name,
        accounts={"offer": offer, "maker": maker},
        signer=maker,
    )


# ========================================
# 트레이드 프로그램
# ========================================


def create_trade_ix(
    program_id: str,
    *,
    trade: str,
    offer: OfferDomain,
    taker: str,
    maker_asset_account: str,
    taker_asset_account: str,
    escrow_account: str,
    amount: int,
    price: int,
) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="create_trade",
        accounts={
            "trade": trade,
            "maker": offer.creator,
            "taker": taker,
            "token_mint": offer.denom,
            "maker_token_account": maker_asset_account,
            "taker_token_account": taker_asset_account,
            "escrow_account": escrow_account,
        },
        args={"amount": amount, "price": price},
        signer=taker,
    )


def deposit_escrow_ix(
    program_id: str, trade: TradeDomain, depositor: str, depositor_asset_account: str
) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="deposit_escrow",
        accounts={
            "trade": trade.address,
            "escrow_account": trade.escrow_account,
            "depositor": depositor,
            "depositor_token_account": depositor_asset_account,
        },
        args={"amount": trade.amount},
        signer=depositor,
    )


def complete_trade_ix(
    program_id: str,
    trade: TradeDomain,
    *,
    signer: str,
    taker_asset_account: str,
    price_oracle: str,
    price_program: str,
    taker_profile: str,
    maker_profile: str,
    profile_program: str,
) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="complete_trade",
        accounts={
            "trade": trade.address,
            "signer": signer,
            "escrow_account": trade.escrow_account,
            "taker_token_account": taker_asset_account,
            "price_oracle": price_oracle,
            "price_program": price_program,
            "taker_profile": taker_profile,
            "maker_profile": maker_profile,
            "profile_program": profile_program,
        },
        signer=signer,
    )


def cancel_trade_ix(
    program_id: str, trade: TradeDomain, *, signer: str, maker_asset_account: str
) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="cancel_trade",
        accounts={
            "trade": trade.address,
            "signer": signer,
            "escrow_account": trade.escrow_account,
            "maker_token_account": maker_asset_account,
        },
        signer=signer,
    )


def dispute_trade_ix(program_id: str, trade: str, disputer: str) -> LedgerInstructionDTO:
    return LedgerInstructionDTO(
        program_id=program_id,
        name="dispute_trade",
        accounts={"trade": trade, "disputer": disputer},
        signer=disputer,
    )
