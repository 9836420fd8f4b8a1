"""
자막 레이아웃 엔진 모듈입니다.

역할:
- 파싱된 줄(가장 최근 줄이 마지막)을 텍스트 캔버스 아래에서 위로 쌓기
- 런별 진행 폭을 누적하여 줄 너비와 배경 박스 크기 계산
- 가운데 정렬 모드에서 줄 전체 글리프를 가로로 이동
- 배경 박스 → 글자 채우기 → 외곽선 순서로 그리기
- 래스터라이저 실패 시 레이아웃 전체 중단

정수 좌표는 진행 폭을 누적할 때마다 소수점 이하를 버립니다.

사용 예시:
    >>> engine = LayoutEngine(geometry, rasterizer, palette, centered=True, ghost_box=True)
    >>> if engine.layout(parse_lines(lines)):
    ...     canvas = engine.take_canvas()
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from PIL import Image

from subtitle_overlay.layout import CanvasGeometry, LineLayout
from subtitle_overlay.markup import BACKGROUND_FILL, OUTLINE, FormattedLine
from subtitle_overlay.markup.color import Palette
from subtitle_overlay.raster import GlyphRun, Rasterizer, RasterizerError

logger = logging.getLogger(__name__)

# 외곽선 두께 기본값 (px)
DEFAULT_OUTLINE_WIDTH = 2


def visible_lines(
    formatted_lines: Sequence[FormattedLine],
    max_lines: int,
) -> list[tuple[int, FormattedLine]]:
    """
    표시할 줄을 (원래 인덱스, 줄) 목록으로 반환합니다.

    max_lines를 넘으면 앞쪽(오래된) 줄을 버리고 최근 줄만 원래 순서대로 남깁니다.
    """
    start = max(0, len(formatted_lines) - max_lines)
    return [(index, formatted_lines[index]) for index in range(start, len(formatted_lines))]


class LayoutEngine:
    """
    StyledRun 줄 목록을 텍스트 캔버스에 배치하고 그리는 클래스입니다.

    layout()은 성공 여부만 반환하고, 완성된 캔버스는 take_canvas()로 가져갑니다.
    마지막 레이아웃의 줄별 배치 결과는 last_layout에 남습니다.
    """

    def __init__(
        self,
        geometry: CanvasGeometry,
        rasterizer: Rasterizer,
        palette: Optional[Palette] = None,
        centered: bool = False,
        ghost_box: bool = False,
        outline_width: int = DEFAULT_OUTLINE_WIDTH,
    ) -> None:
        self._geometry = geometry
        self._rasterizer = rasterizer
        self._palette = palette or Palette()
        self._centered = centered
        self._ghost_box = ghost_box
        self._outline_width = outline_width

        self._canvas: Optional[Image.Image] = None
        self.last_layout: list[LineLayout] = []

    @property
    def geometry(self) -> CanvasGeometry:
        return self._geometry

    def layout(self, formatted_lines: Sequence[FormattedLine]) -> bool:
        """
        줄 목록을 새 캔버스에 그립니다.

        처리 순서 (가장 최근 줄부터 위로):
        1. 런별 셰이핑, 진행 폭 누적 (박스 너비 초기값 = 2 × padding)
        2. 가운데 정렬이면 줄 전체 글리프 이동
        3. 배경 박스 채우기
        4. 런별 글자 채우기 → 외곽선 → 글리프 해제

        파라미터:
            formatted_lines: parse_lines() 결과 (가장 최근 줄이 마지막)

        반환값:
            bool: 모든 줄을 그렸으면 True, 래스터라이저 실패로 중단되면 False
        """
        geometry = self._geometry
        self.discard_canvas()
        self.last_layout = []

        self._rasterizer.begin(geometry.image_width, geometry.image_height)

        cursor_y = geometry.image_height - geometry.padding
        lines = visible_lines(formatted_lines, geometry.max_lines)

        try:
            for line_index, runs in reversed(lines):
                line_layout = self._layout_line(line_index, runs, cursor_y)
                self.last_layout.append(line_layout)
                cursor_y -= geometry.font_size + geometry.padding

        except RasterizerError as exc:
            logger.warning(f"레이아웃 중단 (래스터라이저 실패): {exc}")
            self._rasterizer.discard()
            self.last_layout = []
            return False

        self._canvas = self._rasterizer.finish()
        logger.debug(
            f"레이아웃 완료: lines={len(lines)}/{len(formatted_lines)}, "
            f"centered={self._centered}, ghost_box={self._ghost_box}"
        )
        return True

    def take_canvas(self) -> Optional[Image.Image]:
        """완성된 캔버스를 넘기고 엔진의 참조를 끊습니다."""
        canvas = self._canvas
        self._canvas = None
        return canvas

    def discard_canvas(self) -> None:
        if self._canvas is not None:
            self._canvas.close()
            self._canvas = None

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _layout_line(self, line_index: int, runs: FormattedLine, cursor_y: int) -> LineLayout:
        geometry = self._geometry
        padding = geometry.padding
        baseline_y = cursor_y - (padding // 4)

        box_width = padding * 2
        cursor_x = geometry.left_aligned_margin
        glyph_runs: list[GlyphRun] = []

        try:
            # 1단계: 셰이핑 및 진행 폭 누적
            for run in runs:
                glyph_run = self._rasterizer.shape_text(
                    run.font_style, cursor_x + padding, baseline_y, run.text
                )
                glyph_runs.append(glyph_run)
                cursor_x = int(cursor_x + glyph_run.advance)
                box_width = int(box_width + glyph_run.advance)

            # 2단계: 정렬
            if self._centered:
                line_x = (geometry.image_width // 2) - (box_width // 2)
                delta = line_x - geometry.left_aligned_margin
                for glyph_run in glyph_runs:
                    glyph_run.shift(delta)
            else:
                line_x = geometry.left_aligned_margin

            # 3단계: 배경 박스 (빈 줄은 빈칸으로 남김)
            if self._ghost_box and glyph_runs:
                self._rasterizer.fill_rect(
                    line_x,
                    cursor_y - geometry.font_size,
                    box_width,
                    geometry.font_size + padding,
                    self._palette.resolve(BACKGROUND_FILL),
                )

            line_layout = LineLayout(
                line_index=line_index,
                x=line_x,
                baseline_y=baseline_y,
                cursor_y=cursor_y,
                box_width=box_width,
                advances=[glyph_run.advance for glyph_run in glyph_runs],
                glyph_start_x=(
                    glyph_runs[0].glyphs[0].x
                    if glyph_runs and glyph_runs[0].glyphs
                    else None
                ),
            )

            # 4단계: 채우기 후 외곽선
            for run, glyph_run in zip(runs, glyph_runs):
                self._rasterizer.fill_path(glyph_run, self._palette.resolve(run.color))

            outline = self._palette.resolve(OUTLINE)
            for glyph_run in glyph_runs:
                self._rasterizer.stroke_path(glyph_run, outline, self._outline_width)

        finally:
            for glyph_run in glyph_runs:
                self._rasterizer.release(glyph_run)

        return line_layout
