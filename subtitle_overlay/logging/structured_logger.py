"""
구조화 로깅 모듈입니다.

역할:
- python-json-logger를 사용한 JSON 포맷 로그 출력
- RotatingFileHandler로 로그 파일 자동 순환 (10MB, 5개 보존)
- 모든 레코드에 렌더러 컨텍스트 부여: session_id, 출력 대상(display/layer),
  컴포넌트 이름 (subtitle_overlay.layout.geometry → "layout")
- 로그 레벨 및 포맷(json/text)을 설정에서 제어

사용 예시:
    >>> setup_logging(config)
    >>> logger = StructuredLogger.get(__name__)
    >>> logger.info("자막 준비 완료", extra={"lines": 2})
"""

from __future__ import annotations

import logging
import logging.handlers
import uuid
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

from subtitle_overlay.config.schema import AppConfig

_SESSION_ID: str = ""

_PACKAGE_PREFIX = "subtitle_overlay."

# 로그 파일 순환 기준
_LOG_FILENAME = "app.log"
_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUP_COUNT = 5


def setup_logging(config: AppConfig, session_id: Optional[str] = None) -> None:
    """
    애플리케이션 전체 로깅 설정을 초기화합니다.

    여러 번 호출해도 root 로거의 기존 핸들러를 닫고 다시 붙이므로
    핸들러가 중복되지 않습니다.

    파라미터:
        config: AppConfig 인스턴스
        session_id: 세션 식별자. None이면 config.system.session_id 또는 UUID 사용
    """
    global _SESSION_ID

    _SESSION_ID = session_id or config.system.session_id or str(uuid.uuid4())

    log_level = getattr(logging, config.system.log_level, logging.INFO)
    context = _RenderContextFilter(
        session_id=_SESSION_ID,
        target=f"{config.display.display_num}:{config.display.layer}",
    )
    if config.system.log_format == "json":
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = _TextFormatter(session_id=_SESSION_ID)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    for handler in (logging.StreamHandler(), _create_file_handler(Path(config.system.log_dir))):
        if handler is None:
            continue
        handler.setLevel(log_level)
        handler.addFilter(context)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        f"로깅 초기화: level={config.system.log_level}, "
        f"format={config.system.log_format}, session={_SESSION_ID}, target={context.target}"
    )


def component_of(logger_name: str) -> str:
    """
    로거 이름에서 컴포넌트 이름을 구합니다.

    패키지 내부 로거는 하위 패키지 이름, 그 외(main 등)는 로거 이름 전체입니다.
    """
    if logger_name.startswith(_PACKAGE_PREFIX):
        return logger_name[len(_PACKAGE_PREFIX):].split(".", 1)[0]
    return logger_name


def _create_file_handler(log_dir: Path) -> Optional[logging.Handler]:
    """app.log 순환 파일 핸들러를 만듭니다. 디렉토리 생성 실패 시 None."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=log_dir / _LOG_FILENAME,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        logging.warning(f"로그 파일 핸들러 생성 실패: {exc}")
        return None


class _RenderContextFilter(logging.Filter):
    """레코드에 session_id, target, component 속성을 붙이는 필터입니다."""

    def __init__(self, session_id: str = "", target: str = "") -> None:
        super().__init__()
        self.session_id = session_id
        self.target = target

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id
        record.target = self.target
        record.component = component_of(record.name)
        return True


class _JsonFormatter(jsonlogger.JsonFormatter):
    """
    렌더러 컨텍스트 필드를 포함하는 JSON 포맷터입니다.

    필터를 거치지 않은 레코드(핸들러를 직접 붙인 경우)는 생성자 기본값을 씁니다.
    """

    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        self._session_id = session_id

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["session_id"] = getattr(record, "session_id", self._session_id)
        log_record["module"] = record.name
        log_record["component"] = getattr(record, "component", component_of(record.name))
        log_record["level"] = record.levelname


class _TextFormatter(logging.Formatter):
    """session_id 앞 8자리와 컴포넌트 이름을 포함하는 텍스트 포맷터입니다."""

    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt=f"%(asctime)s [{session_id[:8] if session_id else 'no-sid'}] "
                f"%(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class StructuredLogger:
    """
    모듈별 로거를 반환하는 팩토리 클래스입니다.

    표준 logging.Logger를 그대로 반환하므로 기존 logging API와 완전히 호환됩니다.
    """

    @staticmethod
    def get(name: str) -> logging.Logger:
        return logging.getLogger(name)

    @staticmethod
    def get_session_id() -> str:
        """현재 세션 ID를 반환합니다."""
        return _SESSION_ID
