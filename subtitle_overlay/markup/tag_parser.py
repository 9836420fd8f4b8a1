"""
자막 태그 파서 모듈입니다.

역할:
- HTML 스타일 태그(<b>, <i>, <font color=...>)와 중괄호 이스케이프 태그
  ({\\b1}, {\\i0}, {\\c&hBBGGRR&} ...)를 해석하여 StyledRun 목록으로 변환
- bold/italic/color 상태를 ParserState 값으로 줄 사이에 전달
- 인식하지 못한 태그는 상태 변경 없이 제거

parse_line()은 (줄, 이전 상태) -> (런 목록, 새 상태) 형태의 순수 함수입니다.

사용 예시:
    >>> lines = parse_lines(["<b>Hello</b> {\\\\c&hff0000&}World{\\\\c}"])
    >>> [run.text for run in lines[0]]
    ['Hello', ' ', 'World']
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, Optional

from subtitle_overlay.markup import INHERIT, ColorRef, FormattedLine, ParserState, StyledRun
from subtitle_overlay.markup.color import hex_to_int

logger = logging.getLogger(__name__)

# <...> 또는 {\...} 토큰
TAG_PATTERN = re.compile(r"(<[^>]*>|\{\\[^\}]*\})", re.IGNORECASE)

# <font ... color="#rrggbb"> 의 색상 속성 (소문자화된 태그에 적용)
FONT_COLOR_PATTERN = re.compile(r"color[ \t]*=[ \t\"']*#?([a-f0-9]{6})")

# {\c&hBBGGRR&} (소문자화된 태그에 적용)
CURLY_COLOR_PATTERN = re.compile(r"^\{\\c&h([a-f0-9]{2})([a-f0-9]{2})([a-f0-9]{2})&\}$")

_BOLD_ON = ("<b>", "{\\b1}")
_BOLD_OFF = ("</b>", "{\\b0}")
_ITALIC_ON = ("<i>", "{\\i1}")
_ITALIC_OFF = ("</i>", "{\\i0}")
_COLOR_OFF = ("</font>", "{\\c}")


def apply_tag(tag: str, state: ParserState) -> ParserState:
    """
    태그 하나를 현재 상태에 적용한 새 상태를 반환합니다.

    닫는 태그는 해당 상태가 켜져 있을 때만 효과가 있고,
    알 수 없는 태그는 상태를 그대로 돌려줍니다.

    파라미터:
        tag: 원문 태그 (대소문자 무관)
        state: 현재 파서 상태

    반환값:
        ParserState: 태그가 적용된 상태
    """
    full_tag = tag.lower()

    if full_tag in _BOLD_ON:
        return replace(state, bold=True)
    if full_tag in _BOLD_OFF and state.bold:
        return replace(state, bold=False)
    if full_tag in _ITALIC_ON:
        return replace(state, italic=True)
    if full_tag in _ITALIC_OFF and state.italic:
        return replace(state, italic=False)
    if full_tag in _COLOR_OFF and not state.color.is_inherit:
        return replace(state, color=INHERIT)

    if full_tag.startswith("<font"):
        match = FONT_COLOR_PATTERN.search(full_tag, 5)
        if match:
            return replace(state, color=ColorRef.explicit(hex_to_int(match.group(1))))
        return state

    match = CURLY_COLOR_PATTERN.match(full_tag)
    if match:
        # 이스케이프는 B, G, R 순서
        rgb_hex = match.group(3) + match.group(2) + match.group(1)
        return replace(state, color=ColorRef.explicit(hex_to_int(rgb_hex)))

    return state


def parse_line(
    line: str,
    state: Optional[ParserState] = None,
) -> tuple[FormattedLine, ParserState]:
    """
    마크업 한 줄을 StyledRun 목록으로 변환합니다.

    태그 사이의 텍스트는 태그가 적용되기 전 상태로 런이 됩니다.
    빈 줄은 빈 목록을 반환합니다.

    파라미터:
        line: 마크업이 포함된 자막 한 줄
        state: 이전 줄에서 이어진 상태 (None이면 초기 상태)

    반환값:
        tuple[FormattedLine, ParserState]: (런 목록, 줄 끝의 상태)
    """
    if state is None:
        state = ParserState()

    text = line.strip()
    runs: FormattedLine = []
    old_pos = 0

    for match in TAG_PATTERN.finditer(text):
        if match.start() != old_pos:
            runs.append(StyledRun(text[old_pos:match.start()], state.font_style, state.color))
        state = apply_tag(match.group(0), state)
        old_pos = match.end()

    if old_pos < len(text):
        runs.append(StyledRun(text[old_pos:], state.font_style, state.color))

    return runs, state


def parse_lines(
    lines: Iterable[str],
    state: Optional[ParserState] = None,
) -> list[FormattedLine]:
    """
    한 자막 이벤트의 모든 줄을 파싱합니다. 상태는 줄 사이에 이어집니다.

    파라미터:
        lines: 자막 줄 목록 (가장 최근 줄이 마지막)
        state: 시작 상태 (None이면 초기 상태)

    반환값:
        list[FormattedLine]: 입력과 같은 순서의 런 목록
    """
    formatted_lines: list[FormattedLine] = []
    for line in lines:
        runs, state = parse_line(line, state)
        formatted_lines.append(runs)

    logger.debug(
        f"태그 파싱 완료: lines={len(formatted_lines)}, "
        f"runs={sum(len(runs) for runs in formatted_lines)}"
    )
    return formatted_lines


def strip_tags(line: str) -> str:
    """줄에서 모든 태그를 제거한 평문을 반환합니다 (앞뒤 공백 제거 포함)."""
    return TAG_PATTERN.sub("", line.strip())


class TagParser:
    """
    parse_lines()를 객체 형태로 감싼 파서입니다.

    렌더러처럼 파서를 주입받는 쪽에서 사용합니다. 상태는 parse() 호출마다
    새로 시작하므로 이벤트 사이에는 이어지지 않습니다.
    """

    def parse(self, lines: Iterable[str]) -> list[FormattedLine]:
        return parse_lines(lines, ParserState())
