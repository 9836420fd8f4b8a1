"""
레이아웃 모듈 패키지

공통 데이터 타입:
- CanvasGeometry: 텍스트 캔버스와 비트맵 캔버스의 고정 치수
- LineLayout: 레이아웃 엔진이 계산한 한 줄의 배치 결과
- GeometryError: 지오메트리 계산 입력 오류
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class GeometryError(ValueError):
    """화면 크기/폰트 비율/줄 수로 캔버스를 만들 수 없을 때 발생하는 에러입니다."""
    pass


@dataclass(frozen=True)
class CanvasGeometry:
    """
    초기화 시 한 번 계산되는 캔버스 치수입니다.

    필드 (텍스트 캔버스):
        screen_width, screen_height: 화면 해상도
        font_size: 폰트 픽셀 크기
        padding: 폰트 크기의 1/4
        line_height: font_size + padding
        max_lines: 최대 표시 줄 수
        image_width: 텍스트 캔버스 가로 (16의 배수)
        image_height: 텍스트 캔버스 세로 (16의 배수)
        left_margin: 화면 왼쪽에서 캔버스까지의 거리
        top_margin: 화면 위쪽에서 캔버스까지의 거리
        left_aligned_margin: 좌측 정렬 시 캔버스 안에서의 시작 x

    필드 (비트맵 캔버스):
        scaled_image_width, scaled_image_height: DVD 자막 좌표계 캔버스 크기
        scaled_padding: 비트맵 하단 여백
        vscale, hscale: 텍스트 좌표계 / 비트맵 좌표계 배율
    """
    screen_width: int
    screen_height: int
    font_size: int
    padding: int
    line_height: int
    max_lines: int
    image_width: int
    image_height: int
    left_margin: int
    top_margin: int
    left_aligned_margin: int
    scaled_image_width: int
    scaled_image_height: int
    scaled_padding: int
    vscale: float
    hscale: float


@dataclass
class LineLayout:
    """
    레이아웃 엔진이 한 줄을 배치한 결과입니다 (검사/로깅용).

    필드:
        line_index: 입력 줄 목록에서의 인덱스
        x: 줄(배경 박스)의 시작 x
        baseline_y: 글리프 기준선 y
        cursor_y: 줄 하단 커서 y
        box_width: 배경 박스 너비 (좌우 padding 포함)
        advances: 런별 진행 폭
        glyph_start_x: 첫 글리프 x (런이 없으면 None)
    """
    line_index: int
    x: int
    baseline_y: int
    cursor_y: int
    box_width: int
    advances: list[float] = field(default_factory=list)
    glyph_start_x: Optional[float] = None


__all__ = ["CanvasGeometry", "GeometryError", "LineLayout"]
