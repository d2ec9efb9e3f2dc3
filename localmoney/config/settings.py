"""통합 Settings 모듈 - 환경변수 기반

이 모듈의 역할:
    1. 코드에 합리적인 기본값 제공 (devnet 기준)
    2. 환경변수로 오버라이드 (우선순위 높음)
    3. 타입 안전성 보장 (Pydantic 자동 검증)

설정 우선순위:
    1. 환경변수 (최우선) - export LEDGER_TRADE_PROGRAM_ID=...
    2. .env 파일 - config/.env
    3. 코드 기본값 (settings.py 내부)

사용 예시:
    # 프로덕션 (환경변수 오버라이드)
    export LEDGER_OFFER_PROGRAM_ID=...
    export PRICE_FALLBACK_URL=https://prices.example.com
    export PRICE_API_KEY=...
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# 설정 파일 경로
config_dir = Path(__file__).parent.parent / "config"


def env_settings(prefix: str) -> SettingsConfigDict:
    """환경변수 + .env 통합 설정

    Args:
        prefix: 환경변수 접두사 (예: LEDGER_, PRICE_)

    Returns:
        Pydantic 설정 딕셔너리
    """
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=config_dir / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """애플리케이션 일반 설정

    환경변수 오버라이드:
        APP_DEBUG: 로그 레벨을 DEBUG로 강제 (기본: false)
    """

    debug: bool = False

    model_config = env_settings("APP_")


class LedgerSettings(BaseSettings):
    """원장(Ledger) 프로그램 주소 설정

    환경변수 오버라이드:
        LEDGER_OFFER_PROGRAM_ID: 오퍼 프로그램 주소
        LEDGER_TRADE_PROGRAM_ID: 트레이드(에스크로) 프로그램 주소
        LEDGER_PRICE_PROGRAM_ID: 가격 검증 프로그램 주소
        LEDGER_PRICE_STATE_ACCOUNT: 가격 프로그램 상태 계정
        LEDGER_PROFILE_PROGRAM_ID: 프로필 프로그램 주소
    """

    offer_program_id: str = "FSnCsffRYjRwbpzFCkbwSFtgfSNbxrpYUsq84opqG4wW"
    trade_program_id: str = "2ebQZghoJAExZ64eUuw5xq7GVycibtsyA2yPKgfNSYNj"
    price_program_id: str = "5XkzWi5XrzgZGTw6YAYm4brCsRTYGCZpNiZJkMWwWUx5"
    price_state_account: str = "5XkzWi5XrzgZGTw6YAYm4brCsRTYGCZpNiZJkMWwWUx5"
    profile_program_id: str = "8FJf3ymGwZ2ctUP85QRCsE2kMcuQY5Eu7X3dyXr7XakD"

    model_config = env_settings("LEDGER_")


class IndexerSettings(BaseSettings):
    """인덱서 설정

    환경변수 오버라이드:
        INDEXER_SCAN_INTERVAL_SEC: 오퍼 전체 스캔 최소 간격 (기본: 30초)
    """

    scan_interval_sec: float = 30.0

    model_config = env_settings("INDEXER_")


class PriceSettings(BaseSettings):
    """가격 오라클 설정

    환경변수 오버라이드:
        PRICE_CACHE_TTL_SEC: 가격 캐시 TTL (기본: 60초)
        PRICE_CONFIDENCE_RATIO: 허용 신뢰구간 비율 (기본: 0.01 = 1%)
        PRICE_TOLERANCE: validate_price 기본 허용 편차 (기본: 0.05 = 5%)
        PRICE_FALLBACK_URL: 보조 HTTP 가격 API 주소
        PRICE_API_KEY: 보조 API 키 (보안상 환경변수 권장)
        PRICE_TIMEOUT_SEC: 보조 API HTTP 타임아웃 (기본: 10초)
        PRICE_FEEDS: 페어별 오라클 피드 주소 (JSON, 예: {"SOL/USD": "..."})
    """

    cache_ttl_sec: float = 60.0
    confidence_ratio: float = 0.01
    tolerance: float = 0.05
    fallback_url: str = "http://localhost:3001"
    api_key: str | None = None  # 선택사항 (환경변수로만)
    timeout_sec: float = 10.0
    feeds: dict[str, str] = {
        "SOL/USD": "H6ARHf6YXhGYeQfUzQNGk6rDNnLBQKrenN712K4AQJEG",
        "USDC/USD": "Gnt27xtC473ZT2Mw5u8wZ68Z3gULkSTb5DuxJy7eJotD",
    }

    model_config = env_settings("PRICE_")


class LoggingSettings(BaseSettings):
    """로깅 설정

    환경변수 오버라이드:
        LOG_LEVEL: 로깅 레벨 (기본: INFO)
        LOG_TO_FILE: 파일 로깅 여부 (기본: false)
        LOG_DIR: 로그 디렉토리 (기본: logs)
    """

    level: str = "INFO"
    to_file: bool = False
    dir: str = "logs"

    model_config = env_settings("LOG_")


# ========================================
# 설정 인스턴스
# ========================================
# 환경변수 로드 (환경변수 없으면 기본값 사용)

app_settings = AppSettings()
ledger_settings = LedgerSettings()
indexer_settings = IndexerSettings()
price_settings = PriceSettings()
logging_settings = LoggingSettings()
