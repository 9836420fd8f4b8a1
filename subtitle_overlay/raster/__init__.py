"""
래스터라이저 모듈 패키지

레이아웃 엔진이 사용하는 그리기 인터페이스와 공통 데이터 타입:
- Glyph / GlyphRun: 배치된 글리프 (레이아웃 엔진 안에서만 위치 수정)
- Rasterizer: 캔버스 생성, 텍스트 셰이핑, 채우기/외곽선 그리기 프로토콜
- RasterizerError: 셰이핑/그리기 실패
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from PIL import Image

from subtitle_overlay.markup import FontStyle

RGBA = tuple[int, int, int, int]


class RasterizerError(RuntimeError):
    """텍스트 셰이핑 또는 그리기에 실패했을 때 발생하는 에러입니다."""
    pass


@dataclass
class Glyph:
    """
    기준선(baseline) 좌표에 배치된 글리프 하나입니다.

    필드:
        char: 문자
        x: 글리프 원점 x
        y: 기준선 y
    """
    char: str
    x: float
    y: float


@dataclass
class GlyphRun:
    """
    한 StyledRun을 셰이핑한 결과입니다.

    필드:
        text: 원본 텍스트
        font_style: 사용한 폰트 변형
        glyphs: 배치된 글리프 목록
        advance: 런 전체의 가로 진행 폭
    """
    text: str
    font_style: FontStyle
    glyphs: list[Glyph] = field(default_factory=list)
    advance: float = 0.0

    def shift(self, dx: float) -> None:
        """모든 글리프를 가로로 dx만큼 옮깁니다."""
        for glyph in self.glyphs:
            glyph.x += dx


class Rasterizer(Protocol):
    """
    레이아웃 엔진이 요구하는 그리기 인터페이스입니다.

    호출 순서:
        begin() → [shape_text() / fill_rect() / fill_path() / stroke_path() / release()]*
        → finish() 또는 discard()
    """

    def begin(self, width: int, height: int) -> None:
        """투명한 새 캔버스를 시작합니다."""
        ...

    def shape_text(self, font_style: FontStyle, x: float, y: float, text: str) -> GlyphRun:
        """(x, y) 기준선에서 시작하도록 텍스트를 배치합니다. 실패 시 RasterizerError."""
        ...

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        ...

    def fill_path(self, glyph_run: GlyphRun, color: RGBA) -> None:
        """글리프를 채웁니다. 이어지는 stroke_path()를 위해 경로를 보존합니다."""
        ...

    def stroke_path(self, glyph_run: GlyphRun, color: RGBA, width: int) -> None:
        """보존된 경로에 외곽선을 그립니다 (외곽선이 채우기 아래에 깔림)."""
        ...

    def release(self, glyph_run: GlyphRun) -> None:
        """글리프 버퍼를 해제합니다."""
        ...

    def finish(self) -> Image.Image:
        """완성된 RGBA 캔버스를 넘기고 내부 참조를 끊습니다."""
        ...

    def discard(self) -> None:
        """그리던 캔버스를 버립니다."""
        ...


__all__ = ["Glyph", "GlyphRun", "RGBA", "Rasterizer", "RasterizerError"]
