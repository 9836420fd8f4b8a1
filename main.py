"""
subtitle-overlay 명령행 진입점

역할:
- 설정 파일 로드 및 커맨드라인 오버라이드
- 마크업 텍스트 줄 또는 회색조 비트맵을 SubtitleRenderer로 렌더링
- 결과 캔버스를 PNG로 저장하거나 OpenCV 프리뷰 창에 표시

실행 예시:
    텍스트 자막을 PNG로 저장:
        python main.py "<b>Hello</b> {\\c&hff0000&}World{\\c}" "second line" --output out.png

    비트맵 자막을 프리뷰 창으로 확인:
        python main.py --bitmap sub.png --preview --duration 5
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from subtitle_overlay.config.config_manager import ConfigLoadError, ConfigManager
from subtitle_overlay.config.schema import AppConfig
from subtitle_overlay.layout import GeometryError
from subtitle_overlay.logging import setup_logging
from subtitle_overlay.renderer import Subtitle, TextCanvas
from subtitle_overlay.renderer.subtitle_renderer import SubtitleRenderer

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="subtitle-overlay: 자막 오버레이 캔버스 렌더러"
    )
    parser.add_argument(
        "lines", nargs="*", help="마크업 자막 줄 (가장 최근 줄이 마지막)"
    )
    parser.add_argument(
        "--config", default="config.yaml", help="설정 파일 경로 (기본: config.yaml, 없으면 기본값)"
    )
    parser.add_argument(
        "--lines-file", help="자막 줄을 읽을 텍스트 파일 (한 줄 = 자막 한 줄)"
    )
    parser.add_argument(
        "--bitmap", help="비트맵 자막 이미지 경로 (회색조로 변환하여 사용)"
    )
    parser.add_argument(
        "--output", help="완성된 캔버스를 저장할 PNG 경로"
    )
    parser.add_argument(
        "--preview", action="store_true", help="OpenCV 프리뷰 창에 표시"
    )
    parser.add_argument(
        "--duration", type=int, default=3, help="프리뷰 표시 시간 (초, 기본: 3)"
    )
    parser.add_argument(
        "--centered", action="store_true", help="가운데 정렬 (config.yaml 오버라이드)"
    )
    parser.add_argument(
        "--max-lines", type=int, help="최대 표시 줄 수 (config.yaml 오버라이드)"
    )
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> AppConfig:
    """설정 파일을 로드하고 커맨드라인 오버라이드를 적용합니다."""
    manager = ConfigManager()
    if Path(args.config).exists():
        config = manager.load(args.config)
    else:
        config = manager.load_default()

    overrides: dict[str, object] = {}
    if args.preview:
        overrides["display.preview"] = True
    if args.centered:
        overrides["subtitle.centered"] = True
    if args.max_lines is not None:
        overrides["subtitle.max_lines"] = args.max_lines
    return manager.with_overrides(overrides)


def _read_subtitle(args: argparse.Namespace) -> Subtitle:
    """인자에서 자막 이벤트를 만듭니다."""
    if args.bitmap:
        from PIL import Image

        with Image.open(args.bitmap) as source:
            gray = source.convert("L")
            return Subtitle.from_image(gray.width, gray.height, gray.tobytes())

    lines = list(args.lines)
    if args.lines_file:
        lines.extend(Path(args.lines_file).read_text(encoding="utf-8").splitlines())
    return Subtitle.from_text(lines)


def _save_canvas(renderer: SubtitleRenderer, output: str) -> None:
    """준비된 캔버스를 PNG로 저장합니다."""
    from PIL import Image

    canvas = renderer.prepared_canvas
    if isinstance(canvas, TextCanvas):
        canvas.image.save(output)
    else:
        Image.fromarray(canvas.pixels).save(output)
    logger.info(f"캔버스 저장 완료: {output}")


def main(argv: Optional[list[str]] = None) -> int:
    """명령행 메인 함수입니다. 종료 코드를 반환합니다."""
    args = _parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigLoadError as exc:
        print(f"설정 로드 실패: {exc}", file=sys.stderr)
        return 2

    setup_logging(config)

    try:
        subtitle = _read_subtitle(args)
    except OSError as exc:
        # PIL.UnidentifiedImageError 포함
        logger.error(f"자막 입력 읽기 실패: {exc}")
        return 2

    if not subtitle.is_image and not subtitle.text_lines:
        logger.error("렌더링할 자막 줄이 없습니다")
        return 2

    try:
        renderer = SubtitleRenderer(config)
    except GeometryError as exc:
        logger.error(f"캔버스 지오메트리 계산 실패: {exc}")
        return 2

    with renderer:
        if not renderer.prepare(subtitle):
            logger.warning("표시할 캔버스가 없습니다 (비트맵 크기 초과 또는 렌더링 실패)")
            return 1

        if args.output:
            _save_canvas(renderer, args.output)

        renderer.show_next()

        if config.display.preview:
            import cv2
            cv2.waitKey(max(1, args.duration * 1000))
            renderer.hide()

    return 0


def cli() -> None:
    """콘솔 스크립트 진입점입니다."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
