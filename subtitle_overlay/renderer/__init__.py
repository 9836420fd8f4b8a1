"""
자막 렌더러 모듈 패키지

공통 데이터 타입:
- Subtitle: 렌더러 입력 (텍스트 줄 또는 비트맵)
- TextCanvas: 텍스트 오버레이용으로 완성된 RGBA 캔버스
- CanvasState: 렌더러의 준비 상태
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import numpy as np
from PIL import Image


class CanvasState(Enum):
    """렌더러가 보유한 캔버스 상태입니다."""
    EMPTY = "empty"
    PREPARED_TEXT = "prepared_text"
    PREPARED_IMAGE = "prepared_image"


@dataclass
class Subtitle:
    """
    자막 한 이벤트입니다.

    필드:
        text_lines: 마크업 텍스트 줄 목록 (가장 최근 줄이 마지막)
        is_image: True면 비트맵 자막
        width, height: 비트맵 크기
        image_data: 단일 채널 비트맵 픽셀 (행 우선)
    """
    text_lines: list[str] = field(default_factory=list)
    is_image: bool = False
    width: int = 0
    height: int = 0
    image_data: bytes = b""

    @classmethod
    def from_text(cls, lines: Sequence[str]) -> "Subtitle":
        return cls(text_lines=list(lines))

    @classmethod
    def from_image(cls, width: int, height: int, image_data: bytes) -> "Subtitle":
        return cls(is_image=True, width=width, height=height, image_data=image_data)


@dataclass
class TextCanvas:
    """
    텍스트 오버레이에 넘길 RGBA 캔버스입니다.

    필드:
        image: Pillow RGBA 이미지 (release() 후 None)
    """
    image: Optional[Image.Image]

    @property
    def pixels(self) -> Optional[np.ndarray]:
        """(H, W, 4) RGBA 배열을 반환합니다."""
        return None if self.image is None else np.asarray(self.image)

    def to_bytes(self) -> bytes:
        return b"" if self.image is None else self.image.tobytes()

    def release(self) -> None:
        if self.image is not None:
            self.image.close()
            self.image = None


__all__ = ["CanvasState", "Subtitle", "TextCanvas"]
