"""
디스플레이 오버레이 모듈 패키지

공통 데이터 타입:
- OverlayPlacement: 화면 내 오버레이 위치와 (선택) 원본 해상도
- Overlay: 렌더러가 사용하는 오버레이 인터페이스
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np


@dataclass(frozen=True)
class OverlayPlacement:
    """
    오버레이 배치 정보입니다.

    필드:
        x, y: 화면 좌상단 기준 위치
        width, height: 화면에 표시되는 크기
        source_width, source_height: 입력 버퍼 크기 (없으면 width/height와 동일,
            다르면 표시 크기로 확대)
    """
    x: int
    y: int
    width: int
    height: int
    source_width: Optional[int] = None
    source_height: Optional[int] = None

    @property
    def source_size(self) -> tuple[int, int]:
        return (
            self.source_width if self.source_width is not None else self.width,
            self.source_height if self.source_height is not None else self.height,
        )

    @property
    def is_scaled(self) -> bool:
        return self.source_size != (self.width, self.height)


class Overlay(Protocol):
    """
    렌더러가 완성된 캔버스를 넘기는 오버레이 인터페이스입니다.

    text 오버레이는 (H, W, 4) RGBA, bitmap 오버레이는 (H, W) 단일 채널 배열을 받습니다.
    """

    placement: OverlayPlacement

    def set_image_data(self, pixels: np.ndarray) -> None:
        """버퍼를 표시합니다."""
        ...

    def hide_element(self) -> None:
        """오버레이를 숨깁니다."""
        ...

    def close(self) -> None:
        ...


__all__ = ["Overlay", "OverlayPlacement"]
