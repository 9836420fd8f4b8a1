"""
Pillow 기반 래스터라이저 모듈입니다.

역할:
- 보통/굵게/기울임 폰트를 고정 픽셀 크기로 미리 로드
- font.getlength()로 글리프별 위치와 런의 진행 폭 계산
- RGBA 캔버스에 배경 박스, 글자 채우기, 외곽선 그리기
- 폰트 파일이 없으면 Pillow 기본 폰트로 폴백

외곽선은 Pillow 내장 stroke_width/stroke_fill 파라미터로 그립니다.
Pillow는 외곽선을 먼저 그리고 그 위에 채우기를 덮으므로, fill_path()에서
보존해 둔 채우기 색으로 다시 그리면 외곽선이 글자 아래에 깔립니다.

사용 예시:
    >>> rasterizer = PillowRasterizer(config.subtitle.font, font_size=54)
    >>> rasterizer.begin(1808, 144)
    >>> run = rasterizer.shape_text(FontStyle.BOLD, 310, 120, "Hello")
"""

from __future__ import annotations

import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from subtitle_overlay.config.schema import FontConfig
from subtitle_overlay.markup import FontStyle
from subtitle_overlay.raster import RGBA, Glyph, GlyphRun, RasterizerError

logger = logging.getLogger(__name__)

# 기준선 왼쪽 앵커 (글리프 원점)
_BASELINE_ANCHOR = "ls"


class PillowRasterizer:
    """
    Rasterizer 프로토콜의 Pillow 구현입니다.

    캔버스는 begin()마다 새로 만들고 finish()/discard()로 넘기거나 버립니다.
    """

    def __init__(self, font_cfg: FontConfig, font_size: int) -> None:
        """
        파라미터:
            font_cfg: 폰트 파일 경로 설정
            font_size: 모든 폰트 변형에 적용할 픽셀 크기
        """
        self._font_size = font_size
        self._font_cache: dict[str, ImageFont.FreeTypeFont] = {}
        self._fonts: dict[FontStyle, ImageFont.FreeTypeFont] = {
            FontStyle.NORMAL: self._load_font(font_cfg.normal_path, font_size),
            FontStyle.BOLD: self._load_font(font_cfg.bold_path, font_size),
            FontStyle.ITALIC: self._load_font(font_cfg.italic_path, font_size),
        }

        self._image: Optional[Image.Image] = None
        self._draw: Optional[ImageDraw.ImageDraw] = None
        # fill_path()로 채운 런의 채우기 색 (id(run) → RGBA)
        self._preserved_fills: dict[int, RGBA] = {}

        logger.info(f"PillowRasterizer 초기화 완료: font_size={font_size}")

    @property
    def font_size(self) -> int:
        return self._font_size

    def font_for(self, font_style: FontStyle) -> ImageFont.FreeTypeFont:
        return self._fonts[font_style]

    # =========================================================================
    # 캔버스 수명
    # =========================================================================

    def begin(self, width: int, height: int) -> None:
        self.discard()
        self._image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._image, "RGBA")

    def finish(self) -> Image.Image:
        image = self._require_image()
        self._image = None
        self._draw = None
        self._preserved_fills.clear()
        return image

    def discard(self) -> None:
        if self._image is not None:
            self._image.close()
        self._image = None
        self._draw = None
        self._preserved_fills.clear()

    # =========================================================================
    # 셰이핑 / 그리기
    # =========================================================================

    def shape_text(self, font_style: FontStyle, x: float, y: float, text: str) -> GlyphRun:
        """
        텍스트를 기준선 (x, y)에서 시작하도록 글리프 단위로 배치합니다.

        글리프 x는 앞 문자열의 getlength()로 구하므로 커닝이 반영됩니다.

        에러:
            RasterizerError: 폰트가 텍스트를 측정하지 못할 때
        """
        font = self._fonts[font_style]
        try:
            glyphs = [
                Glyph(char=char, x=x + font.getlength(text[:index]), y=y)
                for index, char in enumerate(text)
            ]
            advance = float(font.getlength(text))
        except (OSError, ValueError, UnicodeError) as exc:
            raise RasterizerError(f"텍스트 셰이핑 실패: {text!r} ({exc})") from exc

        return GlyphRun(text=text, font_style=font_style, glyphs=glyphs, advance=advance)

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        if width <= 0 or height <= 0:
            return
        draw = self._require_draw()
        # Pillow rectangle은 끝 좌표를 포함
        draw.rectangle((x, y, x + width - 1, y + height - 1), fill=color)

    def fill_path(self, glyph_run: GlyphRun, color: RGBA) -> None:
        self._draw_glyphs(glyph_run, fill=color)
        self._preserved_fills[id(glyph_run)] = color

    def stroke_path(self, glyph_run: GlyphRun, color: RGBA, width: int) -> None:
        if width <= 0:
            return
        fill = self._preserved_fills.get(id(glyph_run), color)
        # 선 두께는 경로 양쪽으로 반씩 나뉘므로 바깥쪽 절반만 사용
        stroke_width = max(1, round(width / 2))
        self._draw_glyphs(glyph_run, fill=fill, stroke_width=stroke_width, stroke_fill=color)

    def release(self, glyph_run: GlyphRun) -> None:
        self._preserved_fills.pop(id(glyph_run), None)
        glyph_run.glyphs.clear()

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _draw_glyphs(self, glyph_run: GlyphRun, fill: RGBA, **stroke) -> None:
        draw = self._require_draw()
        font = self._fonts[glyph_run.font_style]
        try:
            for glyph in glyph_run.glyphs:
                if glyph.char.isspace():
                    continue
                draw.text(
                    (glyph.x, glyph.y),
                    glyph.char,
                    font=font,
                    fill=fill,
                    anchor=_BASELINE_ANCHOR,
                    **stroke,
                )
        except (OSError, ValueError, UnicodeError) as exc:
            raise RasterizerError(f"글리프 그리기 실패: {glyph_run.text!r} ({exc})") from exc

    def _require_image(self) -> Image.Image:
        if self._image is None:
            raise RasterizerError("begin()이 호출되지 않았습니다")
        return self._image

    def _require_draw(self) -> ImageDraw.ImageDraw:
        self._require_image()
        return self._draw

    def _load_font(self, font_path: str, font_size: int) -> ImageFont.FreeTypeFont:
        """
        폰트를 로드합니다. 캐시에 없으면 새로 로드하여 캐시에 저장합니다.

        폰트 파일이 없으면 같은 크기의 Pillow 기본 폰트로 폴백합니다.
        """
        cache_key = f"{font_path}:{font_size}"
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        try:
            font = ImageFont.truetype(font_path, font_size)
        except (IOError, OSError):
            logger.warning(
                f"폰트 파일을 찾을 수 없습니다: {font_path}. 기본 폰트로 폴백합니다."
            )
            font = ImageFont.load_default(font_size)

        self._font_cache[cache_key] = font
        return font
