from __future__ import annotations

import asyncio
import logging
import queue
import sys
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from localmoney.config.settings import app_settings, logging_settings

# LogRecord 예약 속성 (extra로 덮어쓰면 logging이 KeyError를 발생시킴)
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class PipelineLogger:
    """
    클라이언트 코어 전용 로깅 시스템
    큐 기반 비동기 처리, 컴포넌트별 로깅 기능 제공
    """

    @classmethod
    def get_logger(cls, name: str, component: str | None = None, **kwargs) -> PipelineLogger:
        """
        로거 인스턴스를 반환하는 간단한 팩토리 메서드.
        표준 logging.getLogger가 이름 단위로 사실상 싱글톤이므로
        별도 레지스트리 없이 인스턴스를 생성합니다.
        """
        return cls(name, component, **kwargs)

    def __init__(
        self,
        name: str,
        component: str | None = None,
        level: int | str | None = None,
        log_to_file: bool | None = None,
        log_to_console: bool = True,
        log_dir: str | None = None,
        rotation: str = "midnight",
    ):
        """
        로거 초기화

        Args:
            name: 로거 이름
            component: 컴포넌트 이름 (ledger, price, app, core)
            level: 로깅 레벨 (기본: LOG_LEVEL, APP_DEBUG=true면 DEBUG)
            log_to_file: 파일에 로깅 여부 (기본: LOG_TO_FILE)
            log_to_console: 콘솔에 로깅 여부
            log_dir: 로그 디렉토리 (기본: LOG_DIR)
            rotation: 로그 로테이션 주기
        """
        self.name = name
        self.component = component
        self.level = level or ("DEBUG" if app_settings.debug else logging_settings.level.upper())
        self.log_to_file = logging_settings.to_file if log_to_file is None else log_to_file
        self.log_to_console = log_to_console
        self.log_dir = log_dir or logging_settings.dir
        self.rotation = rotation

        # 무제한 버퍼로 설정해 queue.Full 예외 방지
        self.log_queue: queue.Queue = queue.Queue()

        self._setup_logger()

    def _setup_logger(self) -> None:
        """
        로거, 핸들러, 포맷터 설정
        """
        self.logger_name = f"localmoney.{self.component}.{self.name}" if self.component else f"localmoney.{self.name}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(self.level)

        # 기존 핸들러 제거
        if self.logger.hasHandlers():
            self.logger.handlers.clear()

        self.formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(component)s] %(message)s"
        )

        handlers: list[logging.Handler] = []

        if self.log_to_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(self.formatter)
            handlers.append(console)

        if self.log_to_file:
            log_filename = self._get_log_filename()
            # 디렉터리만 생성하고 파일 생성은 핸들러에 위임
            Path(log_filename).parent.mkdir(parents=True, exist_ok=True)

            file_handler = TimedRotatingFileHandler(
                filename=log_filename,
                when=self.rotation,
                backupCount=7,  # 7일치 로그 유지
            )
            file_handler.setFormatter(self.formatter)
            handlers.append(file_handler)

        self.queue_handler = QueueHandler(self.log_queue)
        self.logger.addHandler(self.queue_handler)
        # 루트 로거로 중복 전파하지 않음
        self.logger.propagate = False

        self.listener = QueueListener(self.log_queue, *handlers, respect_handler_level=True)
        self.listener.start()

    def _get_log_filename(self) -> str:
        today = datetime.now().strftime("%Y-%m-%d")
        component_part = f"{self.component}/" if self.component else ""
        return f"{self.log_dir}/{component_part}{self.name}_{today}.log"

    def _process_message(self, level: int, msg: str, extra: dict[str, Any] | None = None) -> None:
        """
        메시지 처리 및 로깅
        """
        log_extra: dict[str, Any] = {"component": self.component or "main"}

        exc_info_param = None
        stack_info_param = False

        if extra:
            exc_info_param = extra.pop("exc_info", None)
            stack_info_param = bool(extra.pop("stack_info", False))

            # 'extra' 키가 있으면 그 내용을 풀어서 병합
            if "extra" in extra:
                nested_extra = extra.pop("extra")
                if isinstance(nested_extra, dict):
                    log_extra.update(nested_extra)

            log_extra.update(extra)

        safe_extra = {
            (f"ctx_{key}" if key in _RESERVED_RECORD_KEYS else key): value
            for key, value in log_extra.items()
        }

        self.logger.log(
            level, msg, exc_info=exc_info_param, stack_info=stack_info_param, extra=safe_extra
        )

    async def alog(self, level: int, msg: str, **kwargs) -> None:
        """
        비동기적으로 로그 메시지 기록
        - 실행 중인 이벤트 루프가 있으면 스레드 풀로 위임
        - 루프가 없으면 동기 처리(로그는 QueueHandler로 빠르게 반환)
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._process_message(level, msg, kwargs)
            return
        await loop.run_in_executor(None, self._process_message, level, msg, kwargs)

    def debug(self, msg: str, **kwargs) -> None:
        self._process_message(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs) -> None:
        self._process_message(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs) -> None:
        self._process_message(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs) -> None:
        self._process_message(logging.ERROR, msg, kwargs)

    async def ainfo(self, msg: str, **kwargs) -> None:
        await self.alog(logging.INFO, msg, **kwargs)

    async def aerror(self, msg: str, **kwargs) -> None:
        await self.alog(logging.ERROR, msg, **kwargs)

    def close(self) -> None:
        """
        리소스 정리
        """
        self.listener.stop()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass
