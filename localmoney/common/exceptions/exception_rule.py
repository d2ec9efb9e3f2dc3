from __future__ import annotations

from typing import Final

from localmoney.common.exceptions.errors import (
    ERROR_BY_KIND,
    LocalMoneyError,
    UnknownError,
)
from localmoney.core.dto.internal.common import RuleDomain
from localmoney.core.types import PAYLOAD_EXCEPTIONS, TRANSPORT_EXCEPTIONS, ErrorKind

# 원장 계정 부재를 나타내는 메시지 조각
ACCOUNT_MISSING_PATTERNS: Final[tuple[str, ...]] = (
    "Account not found",
    "AccountNotInitialized",
    "AccountDoesNotExist",
    "could not find account",
)

# 1) 지갑 규칙 (모든 경계 공통)
RULES_WALLET: list[RuleDomain] = [
    RuleDomain(
        patterns=("User rejected", "WalletSignTransactionError"),
        result=(ErrorKind.WALLET, "Transaction rejected by wallet"),
    ),
    RuleDomain(
        patterns=("WalletNotConnected", "Wallet not connected"),
        result=(ErrorKind.WALLET, "Wallet not connected"),
    ),
]

# 2) 토큰/잔고 규칙 (모든 경계 공통)
RULES_TOKEN: list[RuleDomain] = [
    RuleDomain(
        patterns=("TokenAccountNotFound",),
        result=(ErrorKind.TOKEN, "Token account not found"),
    ),
    RuleDomain(
        patterns=("InsufficientFunds", "insufficient funds", "insufficient lamports"),
        result=(ErrorKind.TOKEN, "Insufficient funds"),
    ),
    # 프로그램이 토큰 계정을 지목한 계정 부재 (예: "caused by account: taker_token_account")
    RuleDomain(
        patterns=ACCOUNT_MISSING_PATTERNS,
        requires=("token_account",),
        result=(ErrorKind.TOKEN, "Token account not found"),
    ),
    RuleDomain(
        kinds=(ErrorKind.TOKEN,),
        patterns=ACCOUNT_MISSING_PATTERNS,
        result=(ErrorKind.TOKEN, "Token account not found"),
    ),
]

# 3) 트레이드 규칙 (구체 -> 포괄)
RULES_TRADE: list[RuleDomain] = [
    RuleDomain(
        patterns=("InvalidTradeStatus", "invalid trade status"),
        result=(ErrorKind.TRADE, "Invalid trade status for this operation"),
    ),
    RuleDomain(
        kinds=(ErrorKind.TRADE,),
        patterns=ACCOUNT_MISSING_PATTERNS,
        result=(ErrorKind.TRADE, "Trade not found"),
    ),
]

# 4) 오퍼 규칙 (구체 -> 포괄)
RULES_OFFER: list[RuleDomain] = [
    RuleDomain(
        patterns=("InvalidStatus", "InvalidOfferStatus"),
        result=(ErrorKind.OFFER, "Invalid offer status for this operation"),
    ),
    RuleDomain(
        patterns=("InvalidAmounts",),
        result=(ErrorKind.OFFER, "Invalid offer amounts"),
    ),
    RuleDomain(
        patterns=("InvalidPrice",),
        result=(ErrorKind.OFFER, "Invalid offer price"),
    ),
    RuleDomain(
        kinds=(ErrorKind.OFFER,),
        patterns=ACCOUNT_MISSING_PATTERNS,
        result=(ErrorKind.OFFER, "Offer not found"),
    ),
]

# 5) 가격 경계 규칙 (전송/페이로드)
RULES_PRICE: list[RuleDomain] = [
    RuleDomain(
        kinds=(ErrorKind.PRICE,),
        exc=TRANSPORT_EXCEPTIONS,
        result=(ErrorKind.PRICE, "Price service unavailable"),
    ),
    RuleDomain(
        kinds=(ErrorKind.PRICE,),
        exc=PAYLOAD_EXCEPTIONS,
        result=(ErrorKind.PRICE, "Malformed price response"),
    ),
]

# 6) 전체 규칙 (구체 -> 포괄 순서를 유지하며 결합)
# 주의: 매칭 우선순위를 보장하기 위해 선언 순서를 유지합니다.
RULES: list[RuleDomain] = [
    *RULES_WALLET,
    *RULES_TOKEN,
    *RULES_TRADE,
    *RULES_OFFER,
    *RULES_PRICE,
]


def translate_error(
    err: BaseException,
    kind: ErrorKind | str = ErrorKind.UNKNOWN,
    default_message: str = "Unknown error",
) -> LocalMoneyError:
    """예외 → LocalMoneyError 변환기 (규칙 테이블 기반)

    - 이미 분류된 LocalMoneyError는 그대로 반환합니다.
    - 규칙은 "구체 → 포괄" 순서로 선언되어 가장 특수한 규칙이 먼저 매칭됩니다.
    - 매칭되는 규칙이 없으면 UnknownError를 반환합니다.
    """
    if isinstance(err, LocalMoneyError):
        return err

    kind = ErrorKind(kind)
    for rule in RULES:
        if rule.matches(err, kind):
            result_kind, message = rule.result
            return ERROR_BY_KIND[result_kind](message, err)

    return UnknownError(default_message, err)
