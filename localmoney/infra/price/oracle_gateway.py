"""
가격 오라클 게이트웨이

주 오라클 피드에서 가격을 읽고, 피드가 없는 페어는 보조 HTTP API로 조회합니다.
성공한 가격은 (symbol, fiat) 단위로 TTL 동안 캐시됩니다.
"""

from __future__ import annotations

import asyncio
import time
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Mapping

import aiohttp
import orjson

from localmoney.common.exceptions.errors import PriceError
from localmoney.common.logger import PipelineLogger
from localmoney.core.dto.internal.price import (
    CachedPriceDomain,
    OracleAccountsDomain,
    PriceSource,
)
from localmoney.core.dto.io.price import PriceFeedResponseDTO
from localmoney.core.protocols import OracleFeed, OracleFeedClient
from localmoney.core.types import FeedStatus
from localmoney.core.units import round_to_fiat_unit

logger = PipelineLogger.get_logger("price_gateway", "price")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _feed_status(value: Any) -> str:
    """피드 상태 정규화 (문자열 또는 Enum 모두 허용)"""
    if isinstance(value, str):
        return value.lower()
    return str(getattr(value, "name", value)).lower()


class PriceOracleGateway:
    """오라클 피드 + HTTP 보조 API 가격 조회 + TTL 캐시."""

    def __init__(
        self,
        oracle: OracleFeedClient | None,
        feeds: Mapping[str, str],
        price_state_account: str,
        price_program_id: str,
        fallback_url: str,
        api_key: str | None = None,
        cache_ttl_sec: float = 60.0,
        confidence_ratio: float = 0.01,
        tolerance: float = 0.05,
        timeout_sec: float = 10.0,
    ) -> None:
        self._oracle = oracle
        self._feeds = {pair.upper(): address for pair, address in feeds.items()}
        self._price_state_account = price_state_account
        self._price_program_id = price_program_id
        self._fallback_url = fallback_url.rstrip("/")
        self._api_key = api_key
        self._cache_ttl_sec = max(0.0, cache_ttl_sec)
        self._confidence_ratio = _to_decimal(confidence_ratio)
        self._tolerance = _to_decimal(tolerance)
        self._timeout_sec = max(0.1, timeout_sec)

        self._session: aiohttp.ClientSession | None = None
        self._cache: Mapping[str, CachedPriceDomain] = MappingProxyType({})
        self._connected = False
        self._connect_lock = asyncio.Lock()
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> PriceOracleGateway:
        await self._ensure_connected()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def _ensure_connected(self) -> None:
        """오라클 연결 1회 (지연 초기화)"""
        if self._connected:
            return

        async with self._connect_lock:
            if self._connected:
                return
            if self._oracle is not None:
                try:
                    await self._oracle.start()
                except Exception as e:
                    raise PriceError("Failed to initialize price oracle connection", e) from e
            self._connected = True
            await logger.ainfo("Price oracle connected", feeds=len(self._feeds))

    async def _ensure_session(self) -> None:
        """HTTP 세션을 생성하거나 재사용합니다."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=20, limit_per_host=10)
            timeout = aiohttp.ClientTimeout(total=self._timeout_sec)
            self._session = aiohttp.ClientSession(connector=connector, timeout=timeout)

    async def cleanup(self) -> None:
        """오라클 연결 종료, HTTP 세션 종료, 캐시 비우기 (여러 번 호출해도 안전)"""
        try:
            if self._oracle is not None and self._connected:
                await self._oracle.stop()
        except Exception as e:
            await logger.aerror("Failed to stop price oracle connection", error=str(e))
        finally:
            self._connected = False
            if self._session is not None and not self._session.closed:
                await self._session.close()
            self._session = None
            self._cache = MappingProxyType({})

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------
    def _cached(self, key: str) -> CachedPriceDomain | None:
        entry = self._cache.get(key)
        if entry is not None and entry.is_fresh(time.time(), self._cache_ttl_sec):
            return entry
        return None

    async def get_token_price(self, symbol: str, fiat: str) -> Decimal:
        """1 토큰당 법정화폐 가격 (캐시 우선)"""
        symbol, fiat = symbol.upper(), fiat.upper()
        key = f"{symbol}-{fiat}"

        if (entry := self._cached(key)) is not None:
            return entry.price

        await self._ensure_connected()

        async with self._lock:
            if (entry := self._cached(key)) is not None:
                return entry.price

            try:
                entry = await self._fetch(symbol, fiat)
            except PriceError:
                raise
            except Exception as e:
                raise self._failure(symbol, fiat, f"{type(e).__name__}: {e}", e) from e

            self._cache = MappingProxyType({**self._cache, key: entry})
            logger.debug(
                "Price refreshed",
                pair=f"{symbol}/{fiat}",
                price=str(entry.price),
                source=entry.source.value,
            )
            return entry.price

    async def _fetch(self, symbol: str, fiat: str) -> CachedPriceDomain:
        feed_address = self._feeds.get(f"{symbol}/{fiat}")
        if feed_address is not None and self._oracle is not None:
            return await self._fetch_from_oracle(symbol, fiat, feed_address)
        return await self._fetch_from_http(symbol, fiat)

    async def _fetch_from_oracle(self, symbol: str, fiat: str, feed_address: str) -> CachedPriceDomain:
        assert self._oracle is not None
        feeds = await self._oracle.get_latest_price_feeds([feed_address])
        if not feeds:
            raise self._failure(symbol, fiat, "Price feed not available")

        feed: OracleFeed = feeds[0]
        if _feed_status(feed.status) != FeedStatus.TRADING:
            raise self._failure(symbol, fiat, "Price feed not trading")

        price = _to_decimal(feed.price)
        confidence = None if feed.confidence is None else _to_decimal(feed.confidence)
        if price <= 0:
            raise self._failure(symbol, fiat, f"Invalid price: {price}")
        # 신뢰구간이 가격의 1%를 넘으면 거부
        if confidence is not None and confidence > price * self._confidence_ratio:
            raise self._failure(symbol, fiat, "Price confidence too low")

        return CachedPriceDomain(
            symbol=symbol,
            fiat=fiat,
            price=price,
            confidence=confidence,
            fetched_at=time.time(),
            source=PriceSource.ORACLE,
        )

    async def _fetch_from_http(self, symbol: str, fiat: str) -> CachedPriceDomain:
        status, body = await self._http_get(
            f"{self._fallback_url}/price",
            params={"symbol": symbol, "currency": fiat},
        )
        if not 200 <= status < 300:
            raise self._failure(symbol, fiat, f"HTTP error! status: {status}")

        payload = PriceFeedResponseDTO.model_validate(orjson.loads(body))
        if payload.price <= 0:
            raise self._failure(symbol, fiat, f"Invalid price: {payload.price}")

        return CachedPriceDomain(
            symbol=symbol,
            fiat=fiat,
            price=payload.price,
            confidence=None,
            fetched_at=time.time(),
            source=PriceSource.HTTP,
        )

    async def _http_get(self, url: str, params: dict[str, str]) -> tuple[int, bytes]:
        await self._ensure_session()
        assert self._session is not None

        headers = {"X-API-Key": self._api_key} if self._api_key else None
        async with self._session.get(url, params=params, headers=headers) as response:
            return response.status, await response.read()

    @staticmethod
    def _failure(
        symbol: str, fiat: str, reason: str, cause: BaseException | None = None
    ) -> PriceError:
        logger.warning("Price fetch failed", pair=f"{symbol}/{fiat}", reason=reason)
        return PriceError(
            f"Failed to fetch price for {symbol}/{fiat}: {reason}",
            cause,
            symbol=symbol,
            fiat=fiat,
        )

    async def calculate_offer_price(
        self, amount: Decimal | int | str, symbol: str, fiat: str
    ) -> int:
        """amount(whole 단위) × 가격 → 법정화폐 최소 단위 정수 (ROUND_HALF_UP)"""
        price = await self.get_token_price(symbol, fiat)
        try:
            return round_to_fiat_unit(_to_decimal(amount) * price, fiat)
        except (InvalidOperation, ValueError) as e:
            raise PriceError(
                f"Failed to calculate offer price for {amount} {symbol}",
                e,
                symbol=symbol,
                fiat=fiat,
            ) from e

    async def validate_price(
        self,
        proposed: int | Decimal,
        amount: Decimal | int | str,
        symbol: str,
        fiat: str,
        tolerance: float | Decimal | None = None,
    ) -> bool:
        """|proposed - fair| <= fair × tolerance (정확한 Decimal 연산)"""
        fair = Decimal(await self.calculate_offer_price(amount, symbol, fiat))
        allowed = self._tolerance if tolerance is None else _to_decimal(tolerance)
        return abs(_to_decimal(proposed) - fair) <= fair * allowed

    async def get_oracle_accounts(self) -> OracleAccountsDomain:
        """트레이드 완료에 필요한 가격 상태 계정/프로그램 주소"""
        await self._ensure_connected()
        return OracleAccountsDomain(
            price_state=self._price_state_account,
            price_program=self._price_program_id,
        )
