"""
자막 마크업 모듈 패키지

공통 데이터 타입:
- FontStyle: 런(run)의 폰트 스타일
- ColorKind / ColorRef: 색상 참조 (상속, 배경 박스, 외곽선, 명시 RGB)
- StyledRun: 스타일이 적용된 텍스트 조각
- ParserState: 줄 사이에 이어지는 bold/italic/color 상태
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FontStyle(Enum):
    """런에 적용되는 폰트 변형입니다. bold와 italic이 모두 켜지면 ITALIC입니다."""
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"


class ColorKind(Enum):
    """색상 참조 종류입니다."""
    INHERIT = "inherit"
    BACKGROUND_FILL = "background_fill"
    OUTLINE = "outline"
    EXPLICIT = "explicit"


# 정수 색상 코드 (로그/비교용)
_LEGACY_CODES = {
    ColorKind.INHERIT: -1,
    ColorKind.BACKGROUND_FILL: -2,
    ColorKind.OUTLINE: 0,
}


@dataclass(frozen=True)
class ColorRef:
    """
    색상 참조입니다.

    필드:
        kind: 색상 종류
        rgb: 24비트 RGB 값 (kind가 EXPLICIT일 때만 의미 있음)

    명시적인 검정(0x000000)은 EXPLICIT이므로 OUTLINE과 구분됩니다.
    """
    kind: ColorKind
    rgb: int = 0

    @classmethod
    def explicit(cls, rgb: int) -> "ColorRef":
        """명시 RGB 색상 참조를 만듭니다."""
        if not 0 <= rgb <= 0xFFFFFF:
            raise ValueError(f"RGB 값은 0x000000~0xFFFFFF 범위여야 합니다. 입력값: {rgb}")
        return cls(ColorKind.EXPLICIT, rgb)

    @property
    def is_inherit(self) -> bool:
        return self.kind is ColorKind.INHERIT

    @property
    def legacy_code(self) -> int:
        """-1(상속), -2(배경 박스), 0(외곽선) 또는 RGB 정수를 반환합니다."""
        if self.kind is ColorKind.EXPLICIT:
            return self.rgb
        return _LEGACY_CODES[self.kind]


INHERIT = ColorRef(ColorKind.INHERIT)
BACKGROUND_FILL = ColorRef(ColorKind.BACKGROUND_FILL)
OUTLINE = ColorRef(ColorKind.OUTLINE)


@dataclass(frozen=True)
class StyledRun:
    """
    태그 파서가 만든 텍스트 조각입니다.

    필드:
        text: 표시할 텍스트 (태그 제거됨)
        font_style: 폰트 변형
        color: 색상 참조 (INHERIT이면 기본 글자색)
    """
    text: str
    font_style: FontStyle = FontStyle.NORMAL
    color: ColorRef = INHERIT


# 한 줄의 런 목록 (읽는 순서)
FormattedLine = list[StyledRun]


@dataclass(frozen=True)
class ParserState:
    """
    한 자막 이벤트의 모든 줄에 걸쳐 이어지는 파서 상태입니다.

    닫히지 않은 태그는 다음 줄까지 유지됩니다.
    """
    bold: bool = False
    italic: bool = False
    color: ColorRef = INHERIT

    @property
    def font_style(self) -> FontStyle:
        if self.italic:
            return FontStyle.ITALIC
        if self.bold:
            return FontStyle.BOLD
        return FontStyle.NORMAL


__all__ = [
    "BACKGROUND_FILL",
    "ColorKind",
    "ColorRef",
    "FontStyle",
    "FormattedLine",
    "INHERIT",
    "OUTLINE",
    "ParserState",
    "StyledRun",
]
