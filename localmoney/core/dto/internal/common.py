from __future__ import annotations

from dataclasses import dataclass

from localmoney.core.types import ErrorKind

ExceptionTypes = type[BaseException] | tuple[type[BaseException], ...]


@dataclass(slots=True, frozen=True, repr=False, match_args=False, kw_only=True)
class RuleDomain:
    """예외 분류 규칙 한 줄.

    - kinds: 규칙이 적용되는 호출 분류 (빈 튜플이면 전체)
    - exc: isinstance 매칭 대상 타입 (단일 또는 튜플)
    - patterns: 예외 이름/메시지에 포함되어야 하는 문자열 (하나라도 포함되면 매칭, 빈 튜플이면 생략)
    - requires: 모두 포함되어야 하는 문자열 (patterns와 함께 쓰이는 추가 조건)
    - result: (결과 분류, 사용자 메시지)
    """

    kinds: tuple[ErrorKind, ...] = ()
    exc: ExceptionTypes = Exception
    patterns: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    result: tuple[ErrorKind, str]

    def matches(self, err: BaseException, kind: ErrorKind) -> bool:
        if self.kinds and kind not in self.kinds:
            return False
        if not isinstance(err, self.exc):
            return False
        haystack = f"{type(err).__name__}: {err}".lower()
        if not all(part.lower() in haystack for part in self.requires):
            return False
        return not self.patterns or any(pattern.lower() in haystack for pattern in self.patterns)
