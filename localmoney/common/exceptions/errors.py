"""클라이언트 코어 예외 계층

모든 공개 연산은 값을 반환하거나 LocalMoneyError 하위 예외를 발생시킵니다.
원시 전송/원장 예외는 `translate_error`를 거쳐 이 계층으로만 노출됩니다.
"""

from __future__ import annotations

from localmoney.core.types import ErrorKind


class LocalMoneyError(Exception):
    """분류된 클라이언트 예외 베이스

    Attributes:
        kind: 에러 분류 (ErrorKind)
        message: 사용자에게 노출 가능한 메시지
        cause: 원인 예외 (없으면 None)
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class WalletError(LocalMoneyError):
    kind = ErrorKind.WALLET


class TokenError(LocalMoneyError):
    kind = ErrorKind.TOKEN


class OfferError(LocalMoneyError):
    kind = ErrorKind.OFFER


class TradeError(LocalMoneyError):
    kind = ErrorKind.TRADE


class PriceError(LocalMoneyError):
    """가격 조회/검증 실패 (페어 정보 포함)"""

    kind = ErrorKind.PRICE

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        *,
        symbol: str | None = None,
        fiat: str | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.symbol = symbol
        self.fiat = fiat


class ValidationError(LocalMoneyError):
    """네트워크 호출 이전의 로컬 검증 실패"""

    kind = ErrorKind.VALIDATION


class UnknownError(LocalMoneyError):
    kind = ErrorKind.UNKNOWN


class AccountDecodeError(ValueError):
    """원장 계정 바이트 디코딩 실패 (계정 단위로 복구됨)"""


ERROR_BY_KIND: dict[ErrorKind, type[LocalMoneyError]] = {
    ErrorKind.WALLET: WalletError,
    ErrorKind.TOKEN: TokenError,
    ErrorKind.OFFER: OfferError,
    ErrorKind.TRADE: TradeError,
    ErrorKind.PRICE: PriceError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.UNKNOWN: UnknownError,
}
