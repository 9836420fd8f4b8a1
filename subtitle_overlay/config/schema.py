"""
subtitle-overlay 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, display, subtitle)을 독립적인 중첩 모델로 분리
- 필드별 기본값, 허용 범위, 유효성 검증(validator)을 포함

설정은 렌더러 생성 시점에만 읽힙니다. 해상도나 폰트 비율이 바뀌면
SubtitleRenderer를 다시 생성해야 합니다.

사용 예시:
    >>> from subtitle_overlay.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.subtitle.max_lines)
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field, field_validator

# 모듈 로거 설정
logger = logging.getLogger(__name__)

# "#RRGGBB" 또는 "#RRGGBBAA" 형식
_HEX_COLOR_PATTERN = re.compile(r"^#?[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")


def _check_hex_color(value: str) -> str:
    """HEX 색상 문자열 형식을 검증합니다."""
    if not _HEX_COLOR_PATTERN.match(value):
        error_message = f"색상은 #RRGGBB 또는 #RRGGBBAA 형식이어야 합니다. 입력값: '{value}'"
        raise ValueError(error_message)
    return value


# =============================================================================
# system 섹션: 시스템 전역 설정
# =============================================================================

class SystemConfig(BaseModel):
    """
    시스템 전역 설정을 정의하는 모델입니다.

    역할:
    - 로깅 레벨 및 포맷 지정
    - 세션 식별자 관리
    """
    # 로그 출력 레벨
    log_level: str = Field(default="INFO", description="로그 레벨 (DEBUG | INFO | WARNING | ERROR)")
    # 로그 출력 포맷
    log_format: str = Field(default="text", description="로그 포맷 (json | text)")
    # 로그 파일 저장 디렉토리 경로
    log_dir: str = Field(default="output/logs", description="로그 저장 디렉토리")
    # 세션 고유 식별자 (빈 문자열이면 UUID로 자동 생성)
    session_id: str = Field(default="", description="세션 ID (비어있으면 UUID 자동생성)")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """로그 레벨이 유효한 Python 로깅 레벨인지 검증합니다."""
        allowed_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        # 대소문자 구분 없이 비교 후 대문자로 정규화
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            error_message = f"log_level은 {allowed_levels} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """로그 포맷이 지원되는 형식인지 검증합니다."""
        allowed_formats = ("json", "text")
        if value not in allowed_formats:
            error_message = f"log_format은 {allowed_formats} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# display 섹션: 화면 및 오버레이 레이어 설정
# =============================================================================

class DisplayConfig(BaseModel):
    """
    출력 화면 및 오버레이 레이어 설정입니다.

    역할:
    - 디스플레이 번호와 오버레이 레이어 번호 지정
    - 화면 해상도 지정 (지오메트리 계산의 입력)
    - OpenCV 프리뷰 창 사용 여부
    """
    # 디스플레이 번호 (0 = 기본 화면)
    display_num: int = Field(default=0, description="디스플레이 번호")
    # 오버레이 레이어 번호 (값이 클수록 위에 표시)
    layer: int = Field(default=2, description="오버레이 레이어 번호")
    # 화면 가로 픽셀 수
    screen_width: int = Field(default=1920, description="화면 가로 해상도")
    # 화면 세로 픽셀 수
    screen_height: int = Field(default=1080, description="화면 세로 해상도")
    # OpenCV 프리뷰 창 사용 여부 (False면 메모리 오버레이)
    preview: bool = Field(default=False, description="OpenCV 프리뷰 사용 여부")

    @field_validator("screen_width", "screen_height")
    @classmethod
    def validate_screen_size(cls, value: int) -> int:
        """화면 크기가 양수인지 검증합니다."""
        if value <= 0:
            error_message = f"화면 크기는 양수여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# subtitle 섹션: 자막 레이아웃 및 폰트 설정
# =============================================================================

class FontConfig(BaseModel):
    """
    자막 폰트 렌더링 설정입니다.

    역할:
    - 보통/굵게/기울임 폰트 파일 경로 지정
    - 기본 글자색, 배경 박스 색상, 외곽선 스타일 설정
    """
    # 보통 폰트 파일 경로
    normal_path: str = Field(
        default="/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        description="보통 폰트 파일 경로",
    )
    # 굵은 폰트 파일 경로
    bold_path: str = Field(
        default="/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
        description="굵은 폰트 파일 경로",
    )
    # 기울임 폰트 파일 경로
    italic_path: str = Field(
        default="/usr/share/fonts/truetype/freefont/FreeSansOblique.ttf",
        description="기울임 폰트 파일 경로",
    )
    # 색상 태그가 없을 때 사용하는 글자색
    color: str = Field(default="#DDDDDD", description="기본 글자색 (HEX)")
    # 배경(고스트) 박스 색상 (HEX + 투명도)
    background_color: str = Field(default="#00000080", description="배경 박스 색상 (HEX + 투명도)")
    # 외곽선 색상
    outline_color: str = Field(default="#000000", description="외곽선 색상")
    # 외곽선 두께
    outline_width: int = Field(default=2, description="외곽선 두께")

    @field_validator("color", "background_color", "outline_color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        """색상 문자열 형식을 검증합니다."""
        return _check_hex_color(value)

    @field_validator("outline_width")
    @classmethod
    def validate_outline_width(cls, value: int) -> int:
        """외곽선 두께가 음수가 아닌지 검증합니다."""
        if value < 0:
            error_message = f"outline_width는 0 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


class SubtitleConfig(BaseModel):
    """
    자막 레이아웃 동작 설정을 정의하는 모델입니다.

    역할:
    - 화면 높이 대비 폰트 크기 비율 지정
    - 가운데 정렬 및 배경 박스 사용 여부
    - 동시에 표시할 최대 줄 수
    - 폰트 하위 설정 포함
    """
    # 폰트 크기 = 화면 높이 × font_ratio
    font_ratio: float = Field(default=0.055, description="화면 높이 대비 폰트 크기 비율")
    # 가운데 정렬 여부 (False면 좌측 정렬 마진 사용)
    centered: bool = Field(default=False, description="가운데 정렬 여부")
    # 줄마다 반투명 배경 박스 표시 여부
    ghost_box: bool = Field(default=True, description="배경 박스 표시 여부")
    # 최대 표시 줄 수 (초과분은 오래된 줄부터 버림)
    max_lines: int = Field(default=3, description="최대 표시 줄 수")
    # 폰트 설정
    font: FontConfig = Field(default_factory=FontConfig, description="폰트 설정")

    @field_validator("font_ratio")
    @classmethod
    def validate_font_ratio(cls, value: float) -> float:
        """폰트 비율이 (0, 1] 범위인지 검증합니다."""
        if not 0.0 < value <= 1.0:
            error_message = f"font_ratio는 0 초과 1 이하여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("max_lines")
    @classmethod
    def validate_max_lines(cls, value: int) -> int:
        """최대 줄 수가 1 이상인지 검증합니다."""
        if value < 1:
            error_message = f"max_lines는 1 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> import yaml
        >>> with open("config.yaml") as f:
        ...     raw = yaml.safe_load(f)
        >>> config = AppConfig(**raw)
        >>> print(config.display.screen_height)
        1080
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 화면 및 레이어 설정
    display: DisplayConfig = Field(default_factory=DisplayConfig, description="디스플레이 설정")
    # 자막 레이아웃 설정
    subtitle: SubtitleConfig = Field(default_factory=SubtitleConfig, description="자막 설정")
