"""
비트맵 컴포지터 단위 테스트

검증 항목:
- 캔버스와 같은 크기의 비트맵은 여백 0
- 캔버스보다 큰 비트맵, 여백이 음수가 되는 비트맵 거부
- 가로 가운데 정렬(나머지는 오른쪽), 하단 여백 고정
- 픽셀 복사 위치와 행 순서
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from subtitle_overlay.compositor import BitmapPadding, ImageCanvas, SubtitleImage
from subtitle_overlay.compositor.bitmap_compositor import composite, compute_padding
from subtitle_overlay.layout.geometry import compute_geometry


# =============================================================================
# 테스트 헬퍼
# =============================================================================

def _make_geometry(width: int = 21, height: int = 10, padding: int = 2):
    """작은 비트맵 캔버스를 가진 지오메트리를 만듭니다."""
    base = compute_geometry(1920, 1080, 0.05, 2)
    return replace(
        base,
        scaled_image_width=width,
        scaled_image_height=height,
        scaled_padding=padding,
    )


def _make_image(width: int, height: int) -> SubtitleImage:
    """각 픽셀 값이 (행 * 16 + 열 + 1)인 비트맵을 만듭니다."""
    pixels = np.array(
        [[(row * 16 + col + 1) % 256 for col in range(width)] for row in range(height)],
        dtype=np.uint8,
    )
    return SubtitleImage(width, height, pixels.tobytes())


# =============================================================================
# 여백 계산
# =============================================================================

class TestComputePadding:
    def test_odd_remainder_goes_right(self):
        """가로 여백이 홀수로 남으면 나머지 1px이 오른쪽으로 가는지 확인합니다."""
        padding = compute_padding(6, 4, _make_geometry(width=21, height=10, padding=2))
        assert padding == BitmapPadding(top=4, bottom=2, left=7, right=8)

    def test_bottom_fixed_at_scaled_padding(self):
        """하단 여백이 항상 scaled_padding으로 고정되는지 확인합니다."""
        padding = compute_padding(5, 3, _make_geometry(padding=3))
        assert padding.bottom == 3
        assert padding.top == 10 - 3 - 3


# =============================================================================
# 합성
# =============================================================================

class TestComposite:
    def test_exact_size_has_zero_padding(self):
        """캔버스와 같은 크기의 비트맵은 네 방향 여백이 모두 0인지 확인합니다."""
        geometry = _make_geometry(width=8, height=5, padding=0)
        canvas = composite(_make_image(8, 5), geometry)
        assert isinstance(canvas, ImageCanvas)
        assert canvas.padding == BitmapPadding(top=0, bottom=0, left=0, right=0)

    def test_pixels_placed_with_padding(self):
        """비트맵 픽셀이 여백만큼 떨어진 위치에 그대로 복사되는지 확인합니다."""
        geometry = _make_geometry(width=21, height=10, padding=2)
        image = _make_image(6, 4)
        canvas = composite(image, geometry)

        assert canvas.pixels.shape == (10, 21)
        assert canvas.pixels.dtype == np.uint8
        source = np.frombuffer(image.pixels, dtype=np.uint8).reshape(4, 6)
        np.testing.assert_array_equal(canvas.pixels[4:8, 7:13], source)

    def test_surrounding_pixels_are_zero(self):
        """비트맵 바깥 영역이 모두 0(투명)으로 채워지는지 확인합니다."""
        canvas = composite(_make_image(6, 4), _make_geometry())
        mask = np.ones_like(canvas.pixels, dtype=bool)
        mask[4:8, 7:13] = False
        assert not canvas.pixels[mask].any()

    def test_top_row_first(self):
        """원본의 첫 행이 캔버스 위쪽에 놓이는지 확인합니다."""
        canvas = composite(_make_image(3, 2), _make_geometry())
        top = canvas.padding.top
        left = canvas.padding.left
        assert canvas.pixels[top, left] == 1
        assert canvas.pixels[top + 1, left] == 17

    def test_canvas_size_and_bytes(self):
        geometry = _make_geometry(width=21, height=10)
        canvas = composite(_make_image(6, 4), geometry)
        assert (canvas.width, canvas.height) == (21, 10)
        assert len(canvas.to_bytes()) == 21 * 10

    @pytest.mark.parametrize("width,height", [(22, 4), (6, 11), (0, 4), (6, 0)])
    def test_out_of_bounds_rejected(self, width, height):
        """캔버스보다 크거나 폭/높이가 0인 비트맵은 거부되는지 확인합니다."""
        image = SubtitleImage(width, height, bytes(max(width * height, 0)))
        assert composite(image, _make_geometry()) is None

    def test_negative_top_padding_rejected(self):
        """상단 여백이 음수가 되는 비트맵은 거부되는지 확인합니다."""
        # 높이 9 + 하단 여백 2 > 캔버스 높이 10
        assert composite(_make_image(6, 9), _make_geometry(height=10, padding=2)) is None

    def test_exact_size_rejected_when_bottom_padding_nonzero(self):
        """하단 여백이 있으면 캔버스와 같은 높이의 비트맵도 거부되는지 확인합니다."""
        assert composite(_make_image(21, 10), _make_geometry(padding=2)) is None

    def test_short_pixel_buffer_rejected(self):
        """픽셀 버퍼가 width × height보다 짧으면 거부되는지 확인합니다."""
        image = SubtitleImage(6, 4, bytes(6 * 4 - 1))
        assert composite(image, _make_geometry()) is None

    def test_release_clears_pixels(self):
        """release() 후 픽셀 버퍼와 크기가 비워지는지 확인합니다."""
        canvas = composite(_make_image(6, 4), _make_geometry())
        canvas.release()
        assert canvas.pixels is None
        assert canvas.to_bytes() == b""
        assert (canvas.width, canvas.height) == (0, 0)
