"""
메모리 오버레이 모듈입니다.

화면 없이 동작하는 오버레이 구현으로, 마지막으로 표시한 버퍼와
표시/숨김 이력을 기록합니다. 헤드리스 실행과 테스트에 사용합니다.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from subtitle_overlay.display import OverlayPlacement

logger = logging.getLogger(__name__)


class MemoryOverlay:
    """
    표시된 버퍼를 메모리에 보관하는 오버레이입니다.

    set_image_data()는 입력 버퍼를 복사해 두므로 호출자가 버퍼를 해제해도
    frame은 유지됩니다.
    """

    def __init__(self, name: str, placement: OverlayPlacement) -> None:
        self.name = name
        self.placement = placement
        self.frame: Optional[np.ndarray] = None
        self.visible: bool = False
        self.show_count: int = 0
        self.hide_count: int = 0
        self.closed: bool = False

    def set_image_data(self, pixels: np.ndarray) -> None:
        expected = self.placement.source_size
        if (pixels.shape[1], pixels.shape[0]) != expected:
            raise ValueError(
                f"{self.name} 오버레이 버퍼 크기 불일치: "
                f"{pixels.shape[1]}x{pixels.shape[0]} != {expected[0]}x{expected[1]}"
            )
        self.frame = np.array(pixels, copy=True)
        self.visible = True
        self.show_count += 1
        logger.debug(f"{self.name} 오버레이 표시: {expected[0]}x{expected[1]}")

    def hide_element(self) -> None:
        self.visible = False
        self.hide_count += 1

    def close(self) -> None:
        self.frame = None
        self.visible = False
        self.closed = True
