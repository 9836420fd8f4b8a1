"""
OpenCV 프리뷰 오버레이 모듈입니다.

역할:
- 오버레이 버퍼를 OpenCV imshow 창으로 출력 (창 위치 = 오버레이 위치)
- 단일 채널 비트맵은 표시 크기로 최근접 보간 확대 후 회색조로 출력
- RGBA 텍스트 캔버스는 검정 배경 위에 알파 합성하여 출력
- hide_element()는 검정 화면으로 교체

하드웨어 오버레이가 없는 개발 환경에서 결과를 눈으로 확인하는 용도입니다.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from subtitle_overlay.display import OverlayPlacement

logger = logging.getLogger(__name__)


class OpenCVOverlay:
    """
    OpenCV 창 하나를 오버레이 하나로 사용하는 클래스입니다.
    """

    def __init__(self, window_name: str, placement: OverlayPlacement) -> None:
        self.window_name = window_name
        self.placement = placement
        self._window_open = False

    def set_image_data(self, pixels: np.ndarray) -> None:
        """
        버퍼를 BGR 프레임으로 변환하여 창에 표시합니다.

        파라미터:
            pixels: (H, W) 단일 채널 또는 (H, W, 4) RGBA 배열
        """
        try:
            frame = self._to_bgr(pixels)
            self._show(frame)
        except cv2.error as exc:
            logger.error(f"OpenCV 화면 출력 실패 ({self.window_name}): {exc}")

    def hide_element(self) -> None:
        if not self._window_open:
            return
        blank = np.zeros((self.placement.height, self.placement.width, 3), dtype=np.uint8)
        try:
            self._show(blank)
        except cv2.error as exc:
            logger.error(f"OpenCV 화면 숨김 실패 ({self.window_name}): {exc}")

    def close(self) -> None:
        """OpenCV 창을 닫습니다."""
        if not self._window_open:
            return
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error as exc:
            logger.debug(f"OpenCV 창 닫기 실패 ({self.window_name}): {exc}")
        self._window_open = False

    # =========================================================================
    # 내부 메서드
    # =========================================================================

    def _to_bgr(self, pixels: np.ndarray) -> np.ndarray:
        if pixels.ndim == 2:
            if self.placement.is_scaled:
                pixels = cv2.resize(
                    pixels,
                    (self.placement.width, self.placement.height),
                    interpolation=cv2.INTER_NEAREST,
                )
            return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)

        # RGBA → 검정 배경 알파 합성 → BGR
        rgb = pixels[:, :, :3].astype(np.uint16)
        alpha = pixels[:, :, 3:4].astype(np.uint16)
        blended = ((rgb * alpha) // 255).astype(np.uint8)
        return cv2.cvtColor(blended, cv2.COLOR_RGB2BGR)

    def _show(self, frame: np.ndarray) -> None:
        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            cv2.moveWindow(self.window_name, self.placement.x, self.placement.y)
            self._window_open = True
        cv2.imshow(self.window_name, frame)
        cv2.waitKey(1)
