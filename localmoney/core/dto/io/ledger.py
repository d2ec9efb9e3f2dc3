from __future__ import annotations

from typing import Any

import base58
from pydantic import Field, field_validator

from localmoney.core.dto.io._base import BaseIOModelDTO


class MemcmpFilterDTO(BaseIOModelDTO):
    """프로그램 계정 스캔용 바이트 비교 필터.

    `data`는 base58 인코딩 문자열이며, 계정 데이터의 `offset` 위치부터
    디코딩된 바이트와 일치하는 계정만 반환됩니다.
    """

    offset: int = Field(..., ge=0, description="비교 시작 바이트 오프셋")
    data: str = Field(..., min_length=1, description="base58 인코딩된 비교 바이트")

    @classmethod
    def from_raw(cls, offset: int, raw: bytes) -> MemcmpFilterDTO:
        return cls(offset=offset, data=base58.b58encode(raw).decode("ascii"))

    def raw(self) -> bytes:
        return base58.b58decode(self.data)


class ProgramAccountDTO(BaseIOModelDTO):
    """원장에서 읽어온 계정 (주소 + 원시 데이터)."""

    address: str = Field(..., min_length=1)
    data: bytes

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> Any:
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        return value


class LedgerInstructionDTO(BaseIOModelDTO):
    """서명 대상 프로그램 명령.

    - program_id: 대상 프로그램 주소
    - name: 명령 이름 (create_offer, create_trade, ...)
    - accounts: 역할 이름 → 계정 주소
    - args: 명령 인자 (정수/문자열/불리언)
    - signer: 서명자 identity
    """

    program_id: str
    name: str
    accounts: dict[str, str] = Field(default_factory=dict)
    args: dict[str, int | str | bool] = Field(default_factory=dict)
    signer: str
