"""
자막 렌더러 모듈입니다.

역할:
- 초기화 시 캔버스 지오메트리, 폰트, 색상표, 오버레이 두 개 준비
- 텍스트 자막: 태그 파싱 → 레이아웃 → TextCanvas
- 비트맵 자막: 비트맵 컴포지터 → ImageCanvas
- 캔버스 수명 관리: EMPTY → PREPARED_TEXT | PREPARED_IMAGE → EMPTY
- show_next()로 준비된 캔버스를 해당 오버레이에 넘기고 다른 오버레이는 숨김

한 번에 하나의 캔버스만 준비되므로 두 오버레이가 동시에 오래된 내용을
표시하는 일이 없습니다.

사용 예시:
    >>> with SubtitleRenderer(config) as renderer:
    ...     if renderer.prepare(Subtitle.from_text(["<i>Hello</i>"])):
    ...         renderer.show_next()
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from subtitle_overlay.compositor import ImageCanvas, SubtitleImage
from subtitle_overlay.compositor.bitmap_compositor import composite
from subtitle_overlay.config.schema import AppConfig
from subtitle_overlay.display import Overlay, OverlayPlacement
from subtitle_overlay.layout import CanvasGeometry
from subtitle_overlay.layout.geometry import geometry_from_config
from subtitle_overlay.layout.layout_engine import LayoutEngine
from subtitle_overlay.markup.color import Palette
from subtitle_overlay.markup.tag_parser import TagParser
from subtitle_overlay.raster import Rasterizer
from subtitle_overlay.renderer import CanvasState, Subtitle, TextCanvas

logger = logging.getLogger(__name__)

PreparedCanvas = Union[TextCanvas, ImageCanvas]


def create_overlays(config: AppConfig, geometry: CanvasGeometry) -> tuple[Overlay, Overlay]:
    """
    설정에 맞는 (텍스트 오버레이, 비트맵 오버레이)를 만듭니다.

    두 오버레이 모두 화면의 같은 사각형에 놓이며, 비트맵 오버레이는
    DVD 좌표계 버퍼를 그 사각형 크기로 확대해서 표시합니다.
    """
    text_placement = OverlayPlacement(
        x=geometry.left_margin,
        y=geometry.top_margin,
        width=geometry.image_width,
        height=geometry.image_height,
    )
    bitmap_placement = OverlayPlacement(
        x=geometry.left_margin,
        y=geometry.top_margin,
        width=geometry.image_width,
        height=geometry.image_height,
        source_width=geometry.scaled_image_width,
        source_height=geometry.scaled_image_height,
    )

    layer = config.display.layer
    if config.display.preview:
        from subtitle_overlay.display.opencv_overlay import OpenCVOverlay
        return (
            OpenCVOverlay(f"subtitle-text (layer {layer})", text_placement),
            OpenCVOverlay(f"subtitle-bitmap (layer {layer})", bitmap_placement),
        )

    from subtitle_overlay.display.memory_overlay import MemoryOverlay
    return (
        MemoryOverlay("text", text_placement),
        MemoryOverlay("bitmap", bitmap_placement),
    )


class SubtitleRenderer:
    """
    자막 캔버스를 준비하고 오버레이에 표시하는 클래스입니다.

    단일 스레드에서 동기적으로 사용합니다. 이전 이벤트의 prepare()가 끝나기 전에
    다음 이벤트의 prepare()를 호출하면 안 됩니다.
    """

    def __init__(
        self,
        config: AppConfig,
        text_overlay: Optional[Overlay] = None,
        bitmap_overlay: Optional[Overlay] = None,
        rasterizer: Optional[Rasterizer] = None,
    ) -> None:
        """
        파라미터:
            config: 전체 애플리케이션 설정
            text_overlay, bitmap_overlay: 주입할 오버레이 (None이면 설정으로 생성)
            rasterizer: 주입할 래스터라이저 (None이면 PillowRasterizer)
        """
        subtitle_cfg = config.subtitle
        self._geometry = geometry_from_config(config)

        if rasterizer is None:
            from subtitle_overlay.raster.pillow_rasterizer import PillowRasterizer
            rasterizer = PillowRasterizer(subtitle_cfg.font, self._geometry.font_size)

        self._parser = TagParser()
        self._layout_engine = LayoutEngine(
            geometry=self._geometry,
            rasterizer=rasterizer,
            palette=Palette.from_font_config(subtitle_cfg.font),
            centered=subtitle_cfg.centered,
            ghost_box=subtitle_cfg.ghost_box,
            outline_width=subtitle_cfg.font.outline_width,
        )

        if text_overlay is None or bitmap_overlay is None:
            default_text, default_bitmap = create_overlays(config, self._geometry)
            if text_overlay is None:
                text_overlay = default_text
            if bitmap_overlay is None:
                bitmap_overlay = default_bitmap
        self._text_overlay = text_overlay
        self._bitmap_overlay = bitmap_overlay

        self._prepared: Optional[PreparedCanvas] = None

        logger.info(
            f"SubtitleRenderer 초기화 완료: display={config.display.display_num}, "
            f"layer={config.display.layer}, centered={subtitle_cfg.centered}, "
            f"ghost_box={subtitle_cfg.ghost_box}, max_lines={subtitle_cfg.max_lines}"
        )

    # =========================================================================
    # 공개 인터페이스
    # =========================================================================

    @property
    def geometry(self) -> CanvasGeometry:
        return self._geometry

    @property
    def layout_engine(self) -> LayoutEngine:
        return self._layout_engine

    @property
    def text_overlay(self) -> Overlay:
        return self._text_overlay

    @property
    def bitmap_overlay(self) -> Overlay:
        return self._bitmap_overlay

    @property
    def state(self) -> CanvasState:
        if isinstance(self._prepared, TextCanvas):
            return CanvasState.PREPARED_TEXT
        if isinstance(self._prepared, ImageCanvas):
            return CanvasState.PREPARED_IMAGE
        return CanvasState.EMPTY

    @property
    def prepared_canvas(self) -> Optional[PreparedCanvas]:
        return self._prepared

    def prepare(self, subtitle: Subtitle) -> bool:
        """
        자막 이벤트의 캔버스를 준비합니다. 기존 캔버스는 먼저 해제합니다.

        반환값:
            bool: 캔버스가 준비되었으면 True. 비트맵이 캔버스를 벗어나거나
                래스터라이저가 실패하면 False (표시할 것 없음)
        """
        self.unprepare()

        if subtitle.is_image:
            return self._prepare_image(
                SubtitleImage(subtitle.width, subtitle.height, subtitle.image_data)
            )
        return self._prepare_text(subtitle.text_lines)

    def prepare_lines(self, lines: Sequence[str]) -> bool:
        """마크업 텍스트 줄로 캔버스를 준비합니다."""
        self.unprepare()
        return self._prepare_text(lines)

    def show_next(self) -> None:
        """
        준비된 캔버스를 해당 오버레이에 넘기고 다른 오버레이를 숨깁니다.

        넘긴 뒤에는 캔버스를 해제하여 EMPTY 상태로 돌아갑니다.
        준비된 캔버스가 없으면 아무것도 하지 않습니다.
        """
        prepared = self._prepared
        if isinstance(prepared, ImageCanvas):
            self._text_overlay.hide_element()
            self._bitmap_overlay.set_image_data(prepared.pixels)
        elif isinstance(prepared, TextCanvas):
            self._bitmap_overlay.hide_element()
            self._text_overlay.set_image_data(prepared.pixels)
        else:
            return

        self.unprepare()

    def hide(self) -> None:
        """두 오버레이를 모두 숨깁니다 (준비 상태와 무관)."""
        self._text_overlay.hide_element()
        self._bitmap_overlay.hide_element()

    def unprepare(self) -> None:
        """준비된 캔버스를 해제합니다. 여러 번 호출해도 안전합니다."""
        if self._prepared is not None:
            self._prepared.release()
            self._prepared = None

    def close(self) -> None:
        """캔버스를 해제하고 두 오버레이를 닫습니다."""
        self.unprepare()
        self._text_overlay.close()
        self._bitmap_overlay.close()
        logger.info("SubtitleRenderer 종료")

    def __enter__(self) -> "SubtitleRenderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _prepare_text(self, lines: Sequence[str]) -> bool:
        formatted_lines = self._parser.parse(lines)

        if not self._layout_engine.layout(formatted_lines):
            return False

        self._prepared = TextCanvas(self._layout_engine.take_canvas())
        logger.debug(f"텍스트 캔버스 준비 완료: lines={len(formatted_lines)}")
        return True

    def _prepare_image(self, image: SubtitleImage) -> bool:
        canvas = composite(image, self._geometry)
        if canvas is None:
            return False

        self._prepared = canvas
        logger.debug(f"비트맵 캔버스 준비 완료: {image.width}x{image.height}, padding={canvas.padding}")
        return True
