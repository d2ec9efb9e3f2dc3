"""I/O 경계 DTO 기반 클래스

외부(원장 RPC, 가격 API)와 주고받는 모든 값은 이 베이스를 거쳐 검증됩니다.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# ========================================
# ConfigDict 최적화 (전역 설정)
# ========================================

OPTIMIZED_CONFIG = ConfigDict(
    # 런타임 검증
    use_enum_values=True,  # Enum → 값 직렬화
    extra="forbid",  # 알 수 없는 필드 금지
    validate_default=True,  # 기본값도 검증
    str_strip_whitespace=True,  # 문자열 자동 트림
    # 불변성
    frozen=True,
    arbitrary_types_allowed=False,
)

# 외부 응답 파싱용 (알 수 없는 필드는 무시)
LENIENT_CONFIG = ConfigDict(
    use_enum_values=True,
    extra="ignore",
    validate_default=True,
    str_strip_whitespace=True,
    frozen=True,
    arbitrary_types_allowed=False,
)


class BaseIOModelDTO(BaseModel):
    """I/O 경계용 공통 Pydantic v2 베이스 모델.

    특징:
    - 불변 객체 (frozen=True)
    - Enum 직렬화를 값(value)로 고정
    - 알 수 없는 필드 금지 (extra="forbid")
    """

    model_config = OPTIMIZED_CONFIG


class ExternalResponseDTO(BaseModel):
    """외부 서비스 응답 베이스 (추가 필드 허용, 불변)."""

    model_config = LENIENT_CONFIG
