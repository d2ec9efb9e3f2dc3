from __future__ import annotations

import functools
from typing import Any, Callable

from localmoney.common.exceptions.errors import LocalMoneyError
from localmoney.common.exceptions.exception_rule import translate_error
from localmoney.common.logger import PipelineLogger
from localmoney.core.types import AsyncWrappedCallable, ErrorKind, ErrorWrappedDecorator

logger = PipelineLogger.get_logger("error_decorator", "core")


def translate_errors(
    kind: ErrorKind,
    message: str | None = None,
    level: str = "error",
) -> ErrorWrappedDecorator:
    """공개 async 경계에서 예외를 LocalMoneyError로 변환하는 데코레이터.

    Args:
        kind: 경계 분류 (offer, trade, price 등)
        message: 규칙에 매칭되지 않을 때 UnknownError에 실을 메시지
        level: "error" or "warning"

    Note:
        Exception 하위만 포착합니다. asyncio.CancelledError(BaseException)는
        변환 없이 그대로 전파됩니다.
    """

    def decorator(func: AsyncWrappedCallable) -> AsyncWrappedCallable:
        phase = func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except LocalMoneyError as e:
                logger.warning(
                    f"{phase} failed: {e.message}",
                    phase=phase,
                    error_kind=e.kind.value,
                )
                raise
            except Exception as e:
                translated = translate_error(e, kind, message or f"{phase} failed")
                log: Callable[..., None] = logger.error if level == "error" else logger.warning
                log(
                    f"{phase} failed: {translated.message} ({type(e).__name__}: {e})",
                    phase=phase,
                    error_kind=translated.kind.value,
                )
                raise translated from e

        return wrapper

    return decorator
