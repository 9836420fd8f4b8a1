"""
색상 변환 모듈입니다.

역할:
- 태그에서 추출한 6자리 소문자 HEX 문자열 ↔ 24비트 RGB 정수 변환
- 설정의 HEX 색상 문자열(#RRGGBB / #RRGGBBAA) → RGB(A) 튜플 변환
- ColorRef → 실제 RGBA 값 해석 (Palette)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from subtitle_overlay.config.schema import FontConfig
from subtitle_overlay.markup import ColorKind, ColorRef

logger = logging.getLogger(__name__)

_LOWER_HEX6 = re.compile(r"^[0-9a-f]{6}$")

RGBA = tuple[int, int, int, int]


def hex_to_int(hex_digits: str) -> int:
    """
    6자리 소문자 HEX 문자열을 RGB 정수로 변환합니다.

    태그 파서가 소문자로 정규화한 값만 받습니다. 대문자나 길이가 다른 입력은
    ValueError로 거부합니다.

    파라미터:
        hex_digits: 예) "ff8040"

    반환값:
        int: 예) 0xFF8040
    """
    if not isinstance(hex_digits, str) or not _LOWER_HEX6.match(hex_digits):
        raise ValueError(f"6자리 소문자 HEX 문자열이 필요합니다. 입력값: {hex_digits!r}")
    return int(hex_digits, 16)


def int_to_hex(value: int) -> str:
    """RGB 정수를 6자리 소문자 HEX 문자열로 변환합니다."""
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"RGB 값은 0x000000~0xFFFFFF 범위여야 합니다. 입력값: {value}")
    return f"{value:06x}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    HEX 색상 문자열을 RGB 튜플로 변환합니다.

    파라미터:
        hex_color: "#FFFFFF" 또는 "#FFFFFFFF" (8자리면 앞 6자리만 사용)
    """
    hex_color = hex_color.lstrip("#")
    r = int(hex_color[0:2], 16)
    g = int(hex_color[2:4], 16)
    b = int(hex_color[4:6], 16)
    return (r, g, b)


def hex_to_rgba(hex_color: str) -> RGBA:
    """
    HEX 색상 문자열(투명도 포함)을 RGBA 튜플로 변환합니다.

    파라미터:
        hex_color: "#00000080" = 검정 50% 투명, 6자리면 알파 255
    """
    hex_color = hex_color.lstrip("#")
    r, g, b = hex_to_rgb(hex_color[:6])
    a = int(hex_color[6:8], 16) if len(hex_color) == 8 else 255
    return (r, g, b, a)


def rgb_int_to_rgba(value: int) -> RGBA:
    """24비트 RGB 정수를 불투명 RGBA 튜플로 변환합니다."""
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF, 255)


@dataclass(frozen=True)
class Palette:
    """
    ColorRef를 RGBA로 해석하는 색상표입니다.

    필드:
        default_color: INHERIT에 쓰는 기본 글자색
        background_fill: 배경 박스 색상
        outline: 외곽선 색상
    """
    default_color: RGBA = (221, 221, 221, 255)
    background_fill: RGBA = (0, 0, 0, 128)
    outline: RGBA = (0, 0, 0, 255)

    @classmethod
    def from_font_config(cls, font_cfg: FontConfig) -> "Palette":
        """폰트 설정의 HEX 색상으로 색상표를 만듭니다."""
        return cls(
            default_color=hex_to_rgba(font_cfg.color),
            background_fill=hex_to_rgba(font_cfg.background_color),
            outline=hex_to_rgba(font_cfg.outline_color),
        )

    def resolve(self, color: ColorRef) -> RGBA:
        if color.kind is ColorKind.INHERIT:
            return self.default_color
        if color.kind is ColorKind.BACKGROUND_FILL:
            return self.background_fill
        if color.kind is ColorKind.OUTLINE:
            return self.outline
        return rgb_int_to_rgba(color.rgb)
