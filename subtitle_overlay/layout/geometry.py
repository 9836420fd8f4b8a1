"""
캔버스 지오메트리 계산 모듈입니다.

역할:
- 화면 해상도와 폰트 비율로 폰트 크기, 여백, 줄 높이 계산
- 텍스트 캔버스 크기 계산 (디스플레이 stride 요구에 맞춰 16의 배수)
- 화면 내 캔버스 위치(left/top margin)와 좌측 정렬 마진 계산
- DVD 자막(폰트 30px 기준) 좌표계로의 배율과 비트맵 캔버스 크기 계산

모든 정수 값은 소수점 이하를 버립니다 (반올림하지 않음).
폰트 크기와 DVD 배율은 단정밀도(float32)로 계산합니다. 배정밀도로 계산하면
경계값에서 비트맵 캔버스 높이가 한 행씩 달라집니다 (예: 1280x720, 0.05, 3줄 → 119).

사용 예시:
    >>> geometry = compute_geometry(1920, 1080, 0.05, max_lines=2)
    >>> geometry.font_size, geometry.padding, geometry.image_height
    (54, 13, 144)
"""

from __future__ import annotations

import logging

import numpy as np

from subtitle_overlay.config.schema import AppConfig
from subtitle_overlay.layout import CanvasGeometry, GeometryError

logger = logging.getLogger(__name__)

# 캔버스가 화면 가장자리를 넘지 않도록 가로에서 빼는 여유 폭
SCREEN_WIDTH_OVERSHOOT = 100

# 폰트 59px 기준으로 자막 한 줄은 대체로 1300px을 넘지 않음
ASSUMED_LONGEST_LINE_PIXELS = 1300

# DVD 자막 폰트 크기 가정 (px)
DVD_FONT_SIZE = 30

# DVD 픽셀 종횡비 보정
DVD_HORIZONTAL_STRETCH = 1.42

# 캔버스 세로 여유
IMAGE_HEIGHT_SLACK = 5


def compute_geometry(
    screen_width: int,
    screen_height: int,
    font_ratio: float,
    max_lines: int,
) -> CanvasGeometry:
    """
    화면 해상도와 폰트 비율로 캔버스 지오메트리를 계산합니다.

    파라미터:
        screen_width: 화면 가로 픽셀 수
        screen_height: 화면 세로 픽셀 수
        font_ratio: 화면 높이 대비 폰트 크기 비율 (0 초과 1 이하)
        max_lines: 최대 표시 줄 수 (1 이상)

    반환값:
        CanvasGeometry: 계산된 고정 치수

    에러:
        GeometryError: 입력이 범위를 벗어나거나 캔버스 크기가 0 이하일 때
    """
    if screen_width <= 0 or screen_height <= 0:
        raise GeometryError(f"화면 크기는 양수여야 합니다: {screen_width}x{screen_height}")
    if not 0.0 < font_ratio <= 1.0:
        raise GeometryError(f"font_ratio는 0 초과 1 이하여야 합니다: {font_ratio}")
    if max_lines < 1:
        raise GeometryError(f"max_lines는 1 이상이어야 합니다: {max_lines}")

    # 화면 높이 × 비율 (float32)
    scaled_font = np.float32(screen_height) * np.float32(font_ratio)
    font_size = int(scaled_font)
    padding = font_size // 4
    line_height = font_size + padding

    # 16의 배수로 올림
    image_height = (max_lines * line_height) + IMAGE_HEIGHT_SLACK
    image_height = (image_height + 15) & ~15

    # 16의 배수로 내림
    image_width = (screen_width - SCREEN_WIDTH_OVERSHOOT) & ~15
    if image_width <= 0 or font_size <= 0:
        raise GeometryError(
            f"캔버스를 만들 수 없는 화면 크기입니다: {screen_width}x{screen_height}, "
            f"font_ratio={font_ratio}"
        )

    left_margin = (screen_width - image_width) // 2
    top_margin = screen_height - image_height - (line_height // 2)

    left_aligned_margin = _left_aligned_margin(screen_width, screen_height, left_margin)

    vscale = scaled_font / np.float32(DVD_FONT_SIZE)
    # 종횡비 보정 곱셈만 배정밀도로 한 뒤 float32로 저장
    hscale = np.float32(float(vscale) * DVD_HORIZONTAL_STRETCH)

    geometry = CanvasGeometry(
        screen_width=screen_width,
        screen_height=screen_height,
        font_size=font_size,
        padding=padding,
        line_height=line_height,
        max_lines=max_lines,
        image_width=image_width,
        image_height=image_height,
        left_margin=left_margin,
        top_margin=top_margin,
        left_aligned_margin=left_aligned_margin,
        scaled_image_width=int(np.float32(image_width) / hscale),
        scaled_image_height=int(np.float32(image_height) / vscale),
        scaled_padding=int(np.float32(padding) / vscale),
        vscale=float(vscale),
        hscale=float(hscale),
    )

    logger.info(
        f"캔버스 지오메트리 계산: font_size={font_size}, padding={padding}, "
        f"image={image_width}x{image_height}, "
        f"scaled={geometry.scaled_image_width}x{geometry.scaled_image_height}, "
        f"margin=({left_margin}, {top_margin})"
    )
    return geometry


def geometry_from_config(config: AppConfig) -> CanvasGeometry:
    """AppConfig의 display/subtitle 섹션으로 지오메트리를 계산합니다."""
    return compute_geometry(
        screen_width=config.display.screen_width,
        screen_height=config.display.screen_height,
        font_ratio=config.subtitle.font_ratio,
        max_lines=config.subtitle.max_lines,
    )


def _left_aligned_margin(screen_width: int, screen_height: int, left_margin: int) -> int:
    """
    좌측 정렬 시 캔버스 안에서 텍스트가 시작하는 x를 계산합니다.

    가장 긴 줄(1300px)이 화면 가운데쯤 오도록 잡고, 화면이 그보다 좁으면
    가로-세로 차이의 절반을 씁니다. 캔버스 자체의 left_margin만큼은 뺍니다.
    """
    margin = 0
    if screen_width > ASSUMED_LONGEST_LINE_PIXELS:
        margin = (screen_width - ASSUMED_LONGEST_LINE_PIXELS) // 2
    elif screen_width > screen_height:
        margin = (screen_width - screen_height) // 2

    if margin > left_margin:
        margin -= left_margin
    return margin
