"""
ConfigManager 단위 테스트

검증 항목:
- YAML 로드 및 Pydantic 검증
- 파일 없음 / 스키마 위반 / YAML 문법 오류 에러
- SOV_ 환경변수 오버라이드 (섹션 필드, 중첩 필드)
- dot-notation 조회
"""

from __future__ import annotations

import pytest
import yaml

from subtitle_overlay.config.config_manager import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigManager,
    ConfigValidationError,
    convert_env_value,
    env_key_to_path,
    env_overrides,
    field_type,
)
from subtitle_overlay.config.schema import AppConfig


# =============================================================================
# 픽스처
# =============================================================================

@pytest.fixture(autouse=True)
def clear_sov_env(monkeypatch):
    """테스트 환경에 남아있는 SOV_ 환경변수를 제거합니다."""
    import os

    for key in list(os.environ):
        if key.startswith("SOV_"):
            monkeypatch.delenv(key, raising=False)


def _write_yaml(tmp_path, data) -> str:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(config_path)


# =============================================================================
# 로드
# =============================================================================

class TestLoad:
    def test_load_valid_yaml(self, tmp_path):
        """정상 YAML이 AppConfig로 로드되고 현재 설정으로 등록되는지 확인합니다."""
        path = _write_yaml(tmp_path, {
            "display": {"screen_width": 1280, "screen_height": 720},
            "subtitle": {"font_ratio": 0.05, "centered": True, "max_lines": 2},
        })
        manager = ConfigManager()
        config = manager.load(path)

        assert isinstance(config, AppConfig)
        assert config.display.screen_width == 1280
        assert config.subtitle.centered is True
        assert manager.config is config

    def test_missing_sections_use_defaults(self, tmp_path):
        """YAML에 없는 섹션은 기본값으로 채워지는지 확인합니다."""
        path = _write_yaml(tmp_path, {"subtitle": {"max_lines": 4}})
        config = ConfigManager().load(path)
        assert config.display.screen_height == 1080
        assert config.subtitle.font.color == "#DDDDDD"

    def test_empty_file_uses_defaults(self, tmp_path):
        """빈 설정 파일은 기본 설정과 같은지 확인합니다."""
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")
        config = ConfigManager().load(config_path)
        assert config == AppConfig()

    def test_file_not_found(self, tmp_path):
        """존재하지 않는 파일은 ConfigFileNotFoundError인지 확인합니다."""
        with pytest.raises(ConfigFileNotFoundError):
            ConfigManager().load(tmp_path / "nope.yaml")

    def test_file_not_found_is_load_error(self, tmp_path):
        """ConfigFileNotFoundError가 ConfigLoadError의 하위 클래스로 잡히는지 확인합니다."""
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "data",
        [
            {"subtitle": {"max_lines": 0}},
            {"subtitle": {"font_ratio": 0}},
            {"display": {"screen_height": -1}},
            {"system": {"log_format": "xml"}},
            {"subtitle": {"font": {"color": "red"}}},
            {"subtitle": {"font": {"outline_width": -2}}},
        ],
    )
    def test_validation_error(self, tmp_path, data):
        """범위를 벗어난 값은 ConfigValidationError인지 확인합니다."""
        path = _write_yaml(tmp_path, data)
        with pytest.raises(ConfigValidationError):
            ConfigManager().load(path)

    def test_invalid_yaml_syntax(self, tmp_path):
        """YAML 문법 오류는 ConfigLoadError인지 확인합니다."""
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("subtitle: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(config_path)

    def test_non_mapping_root(self, tmp_path):
        """최상위가 매핑이 아닌 YAML은 거부되는지 확인합니다."""
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(config_path)

    def test_failed_load_keeps_previous_config(self, tmp_path):
        """로드 실패 시 이전 설정이 유지되는지 확인합니다."""
        manager = ConfigManager()
        good = manager.load(_write_yaml(tmp_path, {"subtitle": {"max_lines": 2}}))
        bad_path = tmp_path / "bad.yaml"
        bad_path.write_text(yaml.safe_dump({"subtitle": {"max_lines": 0}}), encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            manager.load(bad_path)
        assert manager.config is good

    def test_log_level_normalized(self, tmp_path):
        """소문자 로그 레벨이 대문자로 정규화되는지 확인합니다."""
        path = _write_yaml(tmp_path, {"system": {"log_level": "debug"}})
        assert ConfigManager().load(path).system.log_level == "DEBUG"


# =============================================================================
# 환경변수 오버라이드
# =============================================================================

class TestEnvOverrides:
    def test_section_field_override(self, tmp_path, monkeypatch):
        """SOV_SECTION_FIELD 환경변수가 YAML 값을 덮어쓰는지 확인합니다."""
        monkeypatch.setenv("SOV_SUBTITLE_MAX_LINES", "5")
        monkeypatch.setenv("SOV_DISPLAY_PREVIEW", "false")
        config = ConfigManager().load(_write_yaml(tmp_path, {"subtitle": {"max_lines": 2}}))
        assert config.subtitle.max_lines == 5
        assert config.display.preview is False

    def test_underscore_field_not_treated_as_subsection(self, tmp_path, monkeypatch):
        """밑줄이 들어간 필드 이름을 하위 섹션으로 오인하지 않는지 확인합니다."""
        monkeypatch.setenv("SOV_SUBTITLE_FONT_RATIO", "0.07")
        config = ConfigManager().load(_write_yaml(tmp_path, {}))
        assert config.subtitle.font_ratio == pytest.approx(0.07)

    def test_nested_field_override(self, tmp_path, monkeypatch):
        """하위 섹션(font) 필드도 환경변수로 덮어쓸 수 있는지 확인합니다."""
        monkeypatch.setenv("SOV_SUBTITLE_FONT_BOLD_PATH", "/tmp/bold.ttf")
        monkeypatch.setenv("SOV_SUBTITLE_FONT_OUTLINE_WIDTH", "4")
        config = ConfigManager().load(_write_yaml(tmp_path, {}))
        assert config.subtitle.font.bold_path == "/tmp/bold.ttf"
        assert config.subtitle.font.outline_width == 4

    def test_load_default_applies_env(self, monkeypatch):
        """설정 파일 없이도 환경변수 오버라이드가 적용되는지 확인합니다."""
        monkeypatch.setenv("SOV_SUBTITLE_CENTERED", "true")
        config = ConfigManager().load_default()
        assert config.subtitle.centered is True

    def test_invalid_env_value_rejected(self, tmp_path, monkeypatch):
        """환경변수 값도 스키마 검증을 거치는지 확인합니다."""
        monkeypatch.setenv("SOV_SUBTITLE_MAX_LINES", "0")
        with pytest.raises(ConfigValidationError):
            ConfigManager().load(_write_yaml(tmp_path, {}))

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("FALSE", False), ("42", 42), ("0.5", 0.5), ("text", "text")],
    )
    def test_convert_env_value(self, raw, expected):
        assert convert_env_value(raw) == expected

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("subtitle_max_lines", "subtitle.max_lines"),
            ("subtitle_font_ratio", "subtitle.font_ratio"),
            ("subtitle_font_italic_path", "subtitle.font.italic_path"),
            ("display_layer", "display.layer"),
            ("unknown_field", None),
            ("subtitle", None),
        ],
    )
    def test_env_key_to_path(self, key, expected):
        """환경변수 키가 스키마 필드 경로로 풀리는지 확인합니다."""
        assert env_key_to_path(key) == expected

    def test_env_overrides_ignores_other_prefixes(self):
        """SOV_ 접두사가 없거나 섹션이 없는 변수는 무시되는지 확인합니다."""
        environ = {"SOV_SYSTEM_LOG_LEVEL": "debug", "PATH": "/usr/bin", "SOV_BOGUS_X": "1"}
        assert env_overrides(environ) == {"system.log_level": "debug"}

    def test_numeric_looking_string_fields_stay_strings(self, monkeypatch):
        """숫자처럼 보이는 값도 str 필드에는 문자열 그대로 들어가는지 확인합니다."""
        monkeypatch.setenv("SOV_SYSTEM_SESSION_ID", "20261018")
        monkeypatch.setenv("SOV_SUBTITLE_FONT_COLOR", "112233")
        config = ConfigManager().load_default()
        assert config.system.session_id == "20261018"
        assert config.subtitle.font.color == "112233"

    @pytest.mark.parametrize(
        "raw,target,expected",
        [
            ("0042", str, "0042"),
            ("true", str, "true"),
            ("3", float, 3.0),
            ("7", int, 7),
            ("False", bool, False),
            ("maybe", bool, "maybe"),
            ("x", int, "x"),
        ],
    )
    def test_convert_env_value_by_field_type(self, raw, target, expected):
        """대상 필드 타입에 맞춰 변환하고, 변환할 수 없으면 문자열로 남기는지 확인합니다."""
        converted = convert_env_value(raw, target)
        assert converted == expected
        assert type(converted) is type(expected)

    def test_field_type_resolves_schema_annotation(self):
        """dot-notation 경로가 스키마 필드 타입으로 풀리는지 확인합니다."""
        assert field_type("system.session_id") is str
        assert field_type("subtitle.font.outline_width") is int
        assert field_type("subtitle.font_ratio") is float
        assert field_type("subtitle.unknown") is None


# =============================================================================
# dot-notation 오버라이드
# =============================================================================

class TestWithOverrides:
    def test_before_load_raises(self):
        """로드 전에 오버라이드를 적용하면 RuntimeError인지 확인합니다."""
        with pytest.raises(RuntimeError):
            ConfigManager().with_overrides({"subtitle.centered": True})

    def test_overrides_applied_and_revalidated(self):
        """dot-notation 오버라이드가 적용되고 현재 설정이 교체되는지 확인합니다."""
        manager = ConfigManager()
        manager.load_default()
        config = manager.with_overrides({"subtitle.max_lines": 1, "display.preview": True})
        assert config.subtitle.max_lines == 1
        assert config.display.preview is True
        assert manager.config is config

    def test_nested_override(self):
        """하위 섹션 경로 오버라이드가 적용되는지 확인합니다."""
        manager = ConfigManager()
        manager.load_default()
        config = manager.with_overrides({"subtitle.font.outline_width": 3})
        assert config.subtitle.font.outline_width == 3

    def test_empty_overrides_keep_config(self):
        """오버라이드가 없으면 같은 설정 객체를 돌려주는지 확인합니다."""
        manager = ConfigManager()
        loaded = manager.load_default()
        assert manager.with_overrides({}) is loaded

    def test_invalid_override_keeps_previous_config(self):
        """오버라이드 검증 실패 시 이전 설정이 유지되고 필드 경로가 에러에 담기는지 확인합니다."""
        manager = ConfigManager()
        loaded = manager.load_default()
        with pytest.raises(ConfigValidationError) as exc_info:
            manager.with_overrides({"subtitle.max_lines": 0})
        assert manager.config is loaded
        assert any(error.startswith("subtitle.max_lines") for error in exc_info.value.errors)


# =============================================================================
# 조회 / 스키마 검증
# =============================================================================

class TestGet:
    def test_get_before_load_raises(self):
        """로드 전 조회는 RuntimeError인지 확인합니다."""
        with pytest.raises(RuntimeError):
            ConfigManager().get("display.layer")

    def test_get_dot_notation(self):
        """dot-notation 조회가 중첩 필드까지 따라가는지 확인합니다."""
        manager = ConfigManager()
        manager.load_default()
        assert manager.get("display.screen_height") == 1080
        assert manager.get("subtitle.font.outline_width") == 2

    def test_get_missing_returns_default(self):
        """없는 키는 기본값을 돌려주는지 확인합니다."""
        manager = ConfigManager()
        manager.load_default()
        assert manager.get("subtitle.unknown", "fallback") == "fallback"

    def test_validate_schema(self):
        """validate_schema가 예외 대신 bool을 돌려주는지 확인합니다."""
        manager = ConfigManager()
        assert manager.validate_schema({"subtitle": {"max_lines": 1}}) is True
        assert manager.validate_schema({"subtitle": {"max_lines": -1}}) is False
