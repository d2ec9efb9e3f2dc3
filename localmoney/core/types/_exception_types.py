"""트라이/캐치 블록에서 사용할 예외 타입 정의 모듈.

광범위한 Exception 사용을 지양하고, 의도한 예외만 명시적으로 처리하기 위해 사용합니다.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Any, Awaitable, Callable, Final

import aiohttp
import orjson
from pydantic import ValidationError as PydanticValidationError

# ----------------------------------------------------------------------------
# Type Definitions & Enums
# ----------------------------------------------------------------------------

# Callables
AsyncWrappedCallable = Callable[..., Awaitable[Any]]
ErrorWrappedDecorator = Callable[[AsyncWrappedCallable], AsyncWrappedCallable]


class ErrorKind(StrEnum):
    """에러 분류 (닫힌 집합)"""

    WALLET = "wallet"
    TOKEN = "token"
    OFFER = "offer"
    TRADE = "trade"
    PRICE = "price"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


# ----------------------------------------------------------------------------
# Exception Constants
# ----------------------------------------------------------------------------

# 1. 네트워크/전송 관련 예외
# - aiohttp.ClientError: HTTP 연결/응답 실패
# - asyncio.TimeoutError: 시간 초과
# - ConnectionError, OSError: 소켓 레벨 에러
TRANSPORT_EXCEPTIONS: Final[tuple[type[BaseException], ...]] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
    OSError,
)

# 2. 페이로드 해석 관련 예외
# - orjson.JSONDecodeError: JSON 파싱 실패
# - PydanticValidationError: 응답 스키마 불일치
PAYLOAD_EXCEPTIONS: Final[tuple[type[BaseException], ...]] = (
    orjson.JSONDecodeError,
    PydanticValidationError,
    ValueError,
    TypeError,
    KeyError,
)
