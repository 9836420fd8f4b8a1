"""
비트맵 자막 컴포지터 모듈입니다.

역할:
- DVD/PGS 등에서 디코딩된 단일 채널 자막 비트맵을 고정 크기 캔버스에 배치
- 가로는 가운데 정렬 (나머지는 오른쪽), 세로는 하단 여백 scaled_padding 고정
- 캔버스보다 크거나 여백이 음수가 되는 비트맵은 거부 (None 반환)

사용 예시:
    >>> canvas = composite(SubtitleImage(720, 60, pixels), geometry)
    >>> if canvas is not None:
    ...     overlay.set_image_data(canvas.pixels)
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from subtitle_overlay.compositor import BitmapPadding, ImageCanvas, SubtitleImage
from subtitle_overlay.layout import CanvasGeometry

logger = logging.getLogger(__name__)


def compute_padding(
    image_width: int,
    image_height: int,
    geometry: CanvasGeometry,
) -> BitmapPadding:
    """
    비트맵 캔버스 안에서의 여백을 계산합니다. 음수 검사는 하지 않습니다.

    canvas 가로와 비트맵 가로가 모두 홀수일 수 있으므로 나머지는 오른쪽에 붙습니다.
    """
    canvas_width = geometry.scaled_image_width
    canvas_height = geometry.scaled_image_height

    left = (canvas_width // 2) - (image_width // 2)
    right = canvas_width - image_width - left

    bottom = geometry.scaled_padding
    top = canvas_height - image_height - bottom

    return BitmapPadding(top=top, bottom=bottom, left=left, right=right)


def composite(image: SubtitleImage, geometry: CanvasGeometry) -> Optional[ImageCanvas]:
    """
    자막 비트맵을 여백과 함께 비트맵 캔버스로 만듭니다.

    파라미터:
        image: 단일 채널 자막 비트맵
        geometry: 캔버스 지오메트리

    반환값:
        Optional[ImageCanvas]: 완성된 캔버스, 거부되면 None
    """
    canvas_width = geometry.scaled_image_width
    canvas_height = geometry.scaled_image_height

    if not (1 <= image.width <= canvas_width and 1 <= image.height <= canvas_height):
        logger.debug(
            f"비트맵 자막 거부 (크기 초과): {image.width}x{image.height}, "
            f"canvas={canvas_width}x{canvas_height}"
        )
        return None

    expected_size = image.width * image.height
    if len(image.pixels) < expected_size:
        logger.debug(
            f"비트맵 자막 거부 (픽셀 부족): {len(image.pixels)} < {expected_size}"
        )
        return None

    padding = compute_padding(image.width, image.height, geometry)
    if min(padding.top, padding.bottom, padding.left, padding.right) < 0:
        logger.debug(f"비트맵 자막 거부 (여백 음수): {padding}")
        return None

    source = np.frombuffer(image.pixels, dtype=np.uint8, count=expected_size)
    source = source.reshape(image.height, image.width)

    pixels = np.zeros((canvas_height, canvas_width), dtype=np.uint8)
    pixels[
        padding.top:padding.top + image.height,
        padding.left:padding.left + image.width,
    ] = source

    return ImageCanvas(pixels=pixels, padding=padding)
