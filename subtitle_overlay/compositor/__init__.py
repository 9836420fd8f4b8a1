"""
비트맵 컴포지터 모듈 패키지

공통 데이터 타입:
- SubtitleImage: 외부에서 디코딩된 단일 채널 자막 비트맵
- BitmapPadding: 비트맵 주변 여백
- ImageCanvas: 비트맵 오버레이용으로 완성된 캔버스
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class SubtitleImage:
    """
    사전 렌더링된 자막 비트맵입니다.

    필드:
        width: 가로 픽셀 수
        height: 세로 픽셀 수
        pixels: 단일 채널(알파/휘도) 픽셀, 행 우선, 행 패딩 없음
    """
    width: int
    height: int
    pixels: bytes


@dataclass(frozen=True)
class BitmapPadding:
    """비트맵 캔버스에서 원본 비트맵 주변의 여백(픽셀)입니다."""
    top: int
    bottom: int
    left: int
    right: int


@dataclass
class ImageCanvas:
    """
    비트맵 오버레이에 넘길 단일 채널 캔버스입니다.

    필드:
        pixels: (scaled_image_height, scaled_image_width) uint8 배열
        padding: 원본 비트맵 주변 여백
    """
    pixels: Optional[np.ndarray]
    padding: BitmapPadding

    @property
    def width(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[0])

    def to_bytes(self) -> bytes:
        return b"" if self.pixels is None else self.pixels.tobytes()

    def release(self) -> None:
        self.pixels = None


__all__ = ["BitmapPadding", "ImageCanvas", "SubtitleImage"]
