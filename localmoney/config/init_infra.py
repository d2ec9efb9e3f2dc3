from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from localmoney.config.settings import LedgerSettings, PriceSettings
from localmoney.core.protocols import OracleFeedClient
from localmoney.infra.price.oracle_gateway import PriceOracleGateway


@asynccontextmanager
async def init_price_gateway(
    oracle: OracleFeedClient | None,
    price_config: PriceSettings,
    ledger_config: LedgerSettings,
) -> AsyncIterator[PriceOracleGateway]:
    """PriceOracleGateway 생성 및 정리 (오라클 연결은 첫 사용 시)"""
    gateway = PriceOracleGateway(
        oracle=oracle,
        feeds=price_config.feeds,
        price_state_account=ledger_config.price_state_account,
        price_program_id=ledger_config.price_program_id,
        fallback_url=price_config.fallback_url,
        api_key=price_config.api_key,
        cache_ttl_sec=price_config.cache_ttl_sec,
        confidence_ratio=price_config.confidence_ratio,
        tolerance=price_config.tolerance,
        timeout_sec=price_config.timeout_sec,
    )
    try:
        yield gateway
    finally:
        await gateway.cleanup()
