"""
Dependency Injection Containers

아키텍처:
- InfrastructureContainer: 원장 인덱서, 가격 게이트웨이 + Settings 주입
- ApplicationContainer: 최상위 컨테이너 (EscrowOrchestrator)

주요 패턴:
- Dependency Provider: 외부 협력자 (LedgerClient, Signer, OracleFeedClient)
- Resource Provider: 가격 게이트웨이 async init/cleanup 자동 관리
- Object Provider: settings.py 인스턴스 주입

사용 예시:
    container = ApplicationContainer(
        ledger_client=providers.Object(rpc_client),
        signer=providers.Object(wallet),
        oracle_client=providers.Object(oracle),
    )
    await container.init_resources()
    orchestrator = await container.orchestrator()
    ...
    await container.shutdown_resources()
"""

from dependency_injector import containers, providers

from localmoney.application.orchestrator import EscrowOrchestrator
from localmoney.config.init_infra import init_price_gateway
from localmoney.config.settings import (
    indexer_settings,
    ledger_settings,
    price_settings,
)
from localmoney.infra.ledger.indexer import LedgerIndexer


# ========================================
# 1. Infrastructure Container (인프라 레이어)
# ========================================
class InfrastructureContainer(containers.DeclarativeContainer):
    """인프라 컨테이너

    - 인덱서는 싱글톤 (스냅샷 캐시 공유)
    - 가격 게이트웨이는 Resource (cleanup 자동 호출)
    """

    # ===== Settings 주입 (DI) =====
    ledger_config = providers.Object(ledger_settings)
    indexer_config = providers.Object(indexer_settings)
    price_config = providers.Object(price_settings)

    # ===== 외부 협력자 =====
    ledger_client = providers.Dependency()
    # 오라클 클라이언트가 없으면 모든 페어를 HTTP 보조 API로 조회
    oracle_client = providers.Dependency(default=providers.Object(None))

    price_gateway = providers.Resource(
        init_price_gateway,
        oracle=oracle_client,
        price_config=price_config,
        ledger_config=ledger_config,
    )

    indexer = providers.Singleton(
        LedgerIndexer,
        ledger=ledger_client,
        offer_program_id=ledger_config.provided.offer_program_id,
        trade_program_id=ledger_config.provided.trade_program_id,
        scan_interval_sec=indexer_config.provided.scan_interval_sec,
    )


# ========================================
# 2. Application Container (최상위)
# ========================================
class ApplicationContainer(containers.DeclarativeContainer):
    """최상위 애플리케이션 컨테이너"""

    ledger_client = providers.Dependency()
    signer = providers.Dependency()
    oracle_client = providers.Dependency(default=providers.Object(None))

    infra = providers.Container(
        InfrastructureContainer,
        ledger_client=ledger_client,
        oracle_client=oracle_client,
    )

    orchestrator = providers.Singleton(
        EscrowOrchestrator,
        ledger=ledger_client,
        signer=signer,
        indexer=infra.indexer,
        price_gateway=infra.price_gateway,
        offer_program_id=infra.ledger_config.provided.offer_program_id,
        trade_program_id=infra.ledger_config.provided.trade_program_id,
        profile_program_id=infra.ledger_config.provided.profile_program_id,
    )
