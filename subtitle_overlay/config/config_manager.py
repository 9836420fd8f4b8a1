"""
subtitle-overlay 설정 관리 모듈입니다.

역할:
- YAML 설정 파일을 로드하고 Pydantic 스키마로 유효성 검증
- 환경변수 오버라이드 지원 (접두사: SOV_)
- 명령행 등에서 넘어온 dot-notation 오버라이드 적용 (with_overrides)
- dot-notation 기반 설정값 조회 (예: "subtitle.max_lines")

환경변수와 명령행 오버라이드는 모두 "section.field" 또는
"section.subsection.field" 경로로 바꾼 뒤 같은 방식으로 원본 딕셔너리에 적용됩니다.

설정은 렌더러 생성 시 한 번만 적용되므로 파일 감시/핫스왑은 지원하지 않습니다.

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml")
    >>> config = manager.with_overrides({"subtitle.centered": True})
    >>> manager.get("display.screen_height")
    1080
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from subtitle_overlay.config.schema import AppConfig

logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사
ENV_PREFIX = "SOV_"


class ConfigLoadError(Exception):
    """설정 파일 로드 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """
    설정 스키마 검증 실패 시 발생하는 에러입니다.

    errors에는 "필드 경로: 메시지" 형식의 문자열이 들어 있습니다.
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConfigFileNotFoundError(ConfigLoadError):
    """설정 파일을 찾을 수 없을 때 발생하는 에러입니다."""
    pass


class ConfigManager:
    """
    YAML 설정 파일을 로드하고 조회하는 매니저 클래스입니다.

    처리 흐름:
        YAML 파싱 → SOV_ 환경변수 오버라이드 → AppConfig 검증
        (이후 필요하면 with_overrides()로 한 번 더 덮어쓰기)

    검증에 실패하면 ConfigValidationError를 던지고 이전 설정은 그대로 둡니다.
    """

    def __init__(self) -> None:
        self._config: Optional[AppConfig] = None
        # 설정 출처 (파일 경로 또는 "<defaults>")
        self._source: Optional[str] = None

    @property
    def config(self) -> Optional[AppConfig]:
        return self._config

    @property
    def source(self) -> Optional[str]:
        return self._source

    def load(self, filepath: str | Path) -> AppConfig:
        """
        YAML 설정 파일을 로드하고 Pydantic 스키마로 검증합니다.

        에러:
            ConfigFileNotFoundError: 파일이 존재하지 않을 때
            ConfigValidationError: 스키마 검증 실패 시
            ConfigLoadError: YAML 파싱 실패 등 기타 에러
        """
        filepath = Path(filepath)
        if not filepath.exists():
            error_message = f"설정 파일을 찾을 수 없습니다: {filepath}"
            logger.error(error_message)
            raise ConfigFileNotFoundError(error_message)

        return self._activate(self._parse_yaml_file(filepath), str(filepath))

    def load_default(self) -> AppConfig:
        """설정 파일 없이 기본값과 환경변수 오버라이드만으로 설정을 생성합니다."""
        return self._activate({}, "<defaults>")

    def with_overrides(self, overrides: Mapping[str, Any]) -> AppConfig:
        """
        현재 설정에 dot-notation 오버라이드를 적용하고 다시 검증합니다.

        파라미터:
            overrides: {"subtitle.max_lines": 2, "display.preview": True} 형태

        반환값:
            AppConfig: 새 설정 객체 (현재 설정도 교체됨)

        에러:
            RuntimeError: 설정이 로드되지 않은 상태에서 호출 시
            ConfigValidationError: 오버라이드 결과가 스키마를 위반할 때
        """
        current = self._require_config()
        if not overrides:
            return current

        raw_config = current.model_dump()
        for dotted_key, value in overrides.items():
            _set_dotted(raw_config, dotted_key, value)
            logger.info(f"설정 오버라이드: {dotted_key} = {value}")

        self._config = _validate(raw_config)
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        dot-notation으로 설정값을 조회합니다.

        예: "subtitle.font.bold_path" -> config.subtitle.font.bold_path

        에러:
            RuntimeError: 설정이 로드되지 않은 상태에서 호출 시
        """
        current_value: Any = self._require_config()
        for part in key.split("."):
            if not isinstance(current_value, BaseModel) or part not in type(current_value).model_fields:
                logger.debug(f"설정 키 '{key}'에서 '{part}'를 찾을 수 없어 기본값 반환")
                return default
            current_value = getattr(current_value, part)
        return current_value

    def validate_schema(self, raw_config: dict) -> bool:
        """딕셔너리가 AppConfig 스키마를 만족하면 True를 반환합니다."""
        try:
            _validate(raw_config)
        except ConfigValidationError as exc:
            logger.warning(f"스키마 검증 실패: {exc.errors}")
            return False
        return True

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _activate(self, raw_config: dict, source: str) -> AppConfig:
        """환경변수 오버라이드 후 검증하고 활성 설정으로 등록합니다."""
        for dotted_key, value in env_overrides(os.environ).items():
            _set_dotted(raw_config, dotted_key, value)
            logger.info(f"환경변수 오버라이드: {dotted_key} = {value}")

        config = _validate(raw_config)
        self._config = config
        self._source = source

        logger.info(
            f"설정 로드 완료 ({source}): "
            f"screen={config.display.screen_width}x{config.display.screen_height}, "
            f"font_ratio={config.subtitle.font_ratio}, max_lines={config.subtitle.max_lines}"
        )
        return config

    def _require_config(self) -> AppConfig:
        if self._config is None:
            error_message = "설정이 아직 로드되지 않았습니다. load()를 먼저 호출하세요."
            logger.error(error_message)
            raise RuntimeError(error_message)
        return self._config

    def _parse_yaml_file(self, filepath: Path) -> dict:
        """
        YAML 파일을 딕셔너리로 파싱합니다. 빈 파일은 빈 딕셔너리입니다.

        에러:
            ConfigLoadError: 파일 읽기/파싱 실패 또는 최상위가 매핑이 아닐 때
        """
        try:
            with open(filepath, "r", encoding="utf-8") as config_file:
                raw_data = yaml.safe_load(config_file)
        except yaml.YAMLError as yaml_error:
            error_message = f"YAML 파싱 에러 ({filepath}): {yaml_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from yaml_error
        except OSError as file_error:
            error_message = f"설정 파일 읽기 에러 ({filepath}): {file_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from file_error

        if raw_data is None:
            logger.warning(f"설정 파일이 비어있어 기본값을 사용합니다: {filepath}")
            return {}
        if not isinstance(raw_data, dict):
            raise ConfigLoadError(
                f"설정 파일의 최상위 구조가 매핑이 아닙니다: {type(raw_data).__name__}"
            )
        return raw_data


# =============================================================================
# 오버라이드 경로 처리
# =============================================================================

def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    SOV_ 환경변수를 dot-notation 오버라이드로 변환합니다.

    - SOV_SUBTITLE_MAX_LINES -> subtitle.max_lines
    - SOV_SUBTITLE_FONT_RATIO -> subtitle.font_ratio (스키마 필드가 우선)
    - SOV_SUBTITLE_FONT_BOLD_PATH -> subtitle.font.bold_path

    스키마에 없는 섹션은 무시합니다. 값은 대상 필드 타입에 맞춰 변환하므로
    SOV_SYSTEM_SESSION_ID=20261018 같은 숫자 모양 문자열도 str 필드에는 그대로 들어갑니다.
    """
    overrides: dict[str, Any] = {}
    for env_key, env_value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        dotted_key = env_key_to_path(env_key[len(ENV_PREFIX):].lower())
        if dotted_key is None:
            logger.debug(f"환경변수 '{env_key}' 무시 (설정 경로 없음)")
            continue
        overrides[dotted_key] = convert_env_value(env_value, field_type(dotted_key))
    return overrides


def env_key_to_path(key: str) -> Optional[str]:
    """
    밑줄로 이어진 소문자 키를 스키마 필드 경로로 바꿉니다.

    섹션 이름 다음은 먼저 필드 전체 이름으로 찾고, 없으면 하위 섹션 이름과
    필드 이름으로 나누어 찾습니다. 하위 섹션의 필드가 아니면 section.field로 둡니다.
    """
    section_name, _, field_name = key.partition("_")
    section_fields = _model_fields(AppConfig)
    if section_name not in section_fields or not field_name:
        return None

    fields = _model_fields(section_fields[section_name])
    if field_name not in fields:
        sub_name, _, sub_field = field_name.partition("_")
        if sub_field and sub_field in _model_fields(fields.get(sub_name)):
            return f"{section_name}.{sub_name}.{sub_field}"
    return f"{section_name}.{field_name}"


def field_type(dotted_key: str) -> Any:
    """dot-notation 경로가 가리키는 스키마 필드 타입을 반환합니다. 없으면 None."""
    model: Any = AppConfig
    for part in dotted_key.split("."):
        model = _model_fields(model).get(part)
        if model is None:
            return None
    return model


def convert_env_value(value: str, target: Any = None) -> Any:
    """
    환경변수 문자열을 설정값으로 변환합니다.

    target이 str이면 그대로, bool / int / float이면 해당 타입으로 변환합니다.
    변환할 수 없는 값은 문자열로 남겨 스키마 검증에서 걸러지게 합니다.
    target을 모르면 bool / int / float / str 순서로 추정합니다.
    """
    if target is str:
        return value

    lowered = value.lower()
    if target in (None, bool) and lowered in ("true", "false"):
        return lowered == "true"
    if target is bool:
        return value

    casts = (target,) if target in (int, float) else (int, float)
    for cast in casts:
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def _set_dotted(raw_config: dict, dotted_key: str, value: Any) -> None:
    """중첩 딕셔너리의 dot-notation 경로에 값을 넣습니다 (중간 딕셔너리 생성)."""
    *parents, leaf = dotted_key.split(".")
    node = raw_config
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[leaf] = value


def _validate(raw_config: dict) -> AppConfig:
    """
    딕셔너리를 AppConfig로 검증합니다.

    에러:
        ConfigValidationError: Pydantic 검증 실패 시 (필드별 메시지 포함)
    """
    try:
        return AppConfig(**raw_config)
    except ValidationError as validation_error:
        errors = [
            f"{'.'.join(str(loc) for loc in detail['loc'])}: {detail['msg']}"
            for detail in validation_error.errors()
        ]
        for error in errors:
            logger.error(f"설정 검증 실패 - {error}")
        raise ConfigValidationError(
            f"설정 스키마 검증 실패: {'; '.join(errors)}", errors
        ) from validation_error


def _model_fields(model: Any) -> dict[str, Any]:
    """Pydantic 모델 클래스의 필드 이름 → 타입 맵을 반환합니다. 모델이 아니면 빈 딕셔너리."""
    if not isinstance(model, type) or not issubclass(model, BaseModel):
        return {}
    return {name: info.annotation for name, info in model.model_fields.items()}
