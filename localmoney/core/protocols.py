"""외부 협력자 인터페이스 (구조적 타입)

지갑 서명, 원장 RPC, 오라클 피드는 이 모듈의 Protocol만 만족하면
어떤 구현이든 주입할 수 있습니다.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol, Sequence, runtime_checkable

from localmoney.core.dto.io.ledger import (
    LedgerInstructionDTO,
    MemcmpFilterDTO,
    ProgramAccountDTO,
)


@runtime_checkable
class Signer(Protocol):
    """지갑 서명자. identity가 None이면 연결되지 않은 상태."""

    @property
    def identity(self) -> str | None: ...

    async def sign_transaction(self, tx: LedgerInstructionDTO) -> Any: ...

    async def sign_all_transactions(self, txs: Sequence[LedgerInstructionDTO]) -> list[Any]: ...


@runtime_checkable
class LedgerClient(Protocol):
    async def get_program_accounts(
        self, program_id: str, filters: Sequence[MemcmpFilterDTO]
    ) -> Sequence[ProgramAccountDTO]: ...

    async def get_account(self, address: str) -> ProgramAccountDTO | None: ...

    async def submit(self, signed: Any) -> str: ...

    async def get_balance(self, identity: str, denom: str) -> int: ...

    def find_program_address(self, seeds: Sequence[bytes], program_id: str) -> tuple[str, int]: ...

    async def get_asset_account(self, owner: str, denom: str) -> str: ...

    def new_account(self) -> str: ...


class OracleFeed(Protocol):
    status: str
    price: Decimal | float | int
    confidence: Decimal | float | int | None


@runtime_checkable
class OracleFeedClient(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def get_latest_price_feeds(self, addresses: Sequence[str]) -> Sequence[OracleFeed]: ...
