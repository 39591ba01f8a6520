"""구문 강조 RTF → 줄 단위 서식 조각.

에디터/하이라이터가 내보낸 코드 RTF에서 색상표(colortbl)와
글자 서식(\\cf, \\b, \\i, \\ul)만 읽어 Span 목록으로 만든다.
그림·글꼴표·스타일시트 등 나머지 그룹은 무시한다.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, replace
from typing import Optional


class RtfParseError(ValueError):
    """RTF 문서로 해석할 수 없음."""


@dataclass(frozen=True)
class Span:
    """같은 서식이 이어지는 텍스트 조각."""

    text: str
    color: Optional[str] = None      # RRGGBB, None이면 자동 색
    bold: bool = False
    italic: bool = False
    underline: bool = False


@dataclass(frozen=True)
class _State:
    color_ref: int = 0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    uc: int = 1                      # \u 뒤에 건너뛸 대체 문자 수
    destination: str = ""            # "" | "colortbl" | "skip"


_TOKEN = re.compile(
    r"\\([a-zA-Z]+)(-?\d+)? ?"       # 제어어 (+숫자 인자, 구분 공백 1개)
    r"|\\'([0-9a-fA-F]{2})"          # 코드 페이지 바이트
    r"|\\(.)"                        # 제어 기호
    r"|([{}])"
    r"|([\r\n]+)"                   # 원문 줄바꿈은 무시
    r"|([^\\{}\r\n]+)",
    re.DOTALL,
)

_SKIP_DESTINATIONS = {
    "fonttbl", "stylesheet", "info", "pict", "object", "generator",
    "header", "footer", "listtable", "listoverridetable", "themedata",
    "colorschememapping", "latentstyles", "rsidtbl", "xmlnstbl",
}


def parse_rtf(rtf: str) -> list[list[Span]]:
    """RTF 본문을 줄 목록으로 파싱한다. 각 줄은 Span 목록.

    줄은 \\par / \\line 으로 나뉘며, 문서 끝의 빈 줄 하나는 버린다.

    Raises:
        RtfParseError: {\\rtf 로 시작하지 않거나 중괄호 짝이 맞지 않을 때
    """
    if not rtf.lstrip().startswith("{\\rtf"):
        raise RtfParseError("RTF 문서가 아닙니다 ({\\rtf 헤더 없음)")

    colors: list[Optional[str]] = []
    rgb: dict[str, int] = {}
    codepage = 1252
    pending = bytearray()
    fallback_skip = 0

    stack: list[_State] = []
    state = _State()
    group_opened = False
    lines: list[list[Span]] = [[]]

    def emit(text: str):
        if state.destination or not text:
            return
        line = lines[-1]
        span = Span(text, _color(colors, state.color_ref), state.bold, state.italic, state.underline)
        if line and _same_format(line[-1], span):
            line[-1] = replace(line[-1], text=line[-1].text + text)
        else:
            line.append(span)

    def flush_bytes():
        if pending:
            emit(pending.decode(f"cp{codepage}", errors="replace"))
            pending.clear()

    def new_line():
        if not state.destination:
            lines.append([])

    for m in _TOKEN.finditer(rtf):
        word, param, hex_byte, symbol, brace, _newline, text = m.groups()
        starts_group = group_opened
        group_opened = False

        if hex_byte is not None:
            if fallback_skip:
                fallback_skip -= 1
                continue
            pending.append(int(hex_byte, 16))
            continue
        flush_bytes()

        if brace == "{":
            stack.append(state)
            group_opened = True
        elif brace == "}":
            if not stack:
                raise RtfParseError("닫는 중괄호가 여는 중괄호보다 많습니다")
            state = stack.pop()
            fallback_skip = 0
        elif word is not None:
            value = int(param) if param is not None else None
            if fallback_skip and word != "u":
                fallback_skip = 0
            if word in _SKIP_DESTINATIONS:
                state = replace(state, destination="skip")
            elif word == "colortbl":
                state = replace(state, destination="colortbl")
            elif state.destination == "colortbl":
                if word in ("red", "green", "blue"):
                    rgb[word] = value or 0
            elif state.destination:
                continue
            elif word == "ansicpg" and value:
                codepage = _known_codepage(value, codepage)
            elif word == "cf":
                state = replace(state, color_ref=value or 0)
            elif word in ("b", "i", "ul"):
                on = value is None or value != 0
                key = {"b": "bold", "i": "italic", "ul": "underline"}[word]
                state = replace(state, **{key: on})
            elif word == "ulnone":
                state = replace(state, underline=False)
            elif word == "plain":
                state = replace(state, color_ref=0, bold=False, italic=False, underline=False)
            elif word in ("par", "line"):
                new_line()
            elif word == "tab":
                emit("\t")
            elif word == "uc":
                state = replace(state, uc=value or 0)
            elif word == "u" and value is not None:
                emit(chr(value + 0x10000 if value < 0 else value))
                fallback_skip = state.uc
        elif symbol is not None:
            if symbol == "*" and starts_group:
                state = replace(state, destination="skip")
            elif symbol in "\\{}":
                emit(symbol)
            elif symbol == "~":
                emit("\u00a0")
            elif symbol in "\r\n":
                new_line()
        elif text is not None:
            if state.destination == "colortbl":
                for ch in text:
                    if ch == ";":
                        colors.append(_hex(rgb) if rgb else None)
                        rgb = {}
                continue
            if fallback_skip:
                skipped = min(fallback_skip, len(text))
                text = text[skipped:]
                fallback_skip -= skipped
            emit(text)

    flush_bytes()
    if stack:
        raise RtfParseError("닫히지 않은 그룹이 있습니다")

    if not lines[-1]:
        lines.pop()
    return lines


def line_text(line: list[Span]) -> str:
    return "".join(span.text for span in line)


def _color(colors: list[Optional[str]], ref: int) -> Optional[str]:
    if 0 <= ref < len(colors):
        return colors[ref]
    return None


def _hex(rgb: dict[str, int]) -> str:
    return "".join(f"{rgb.get(c, 0):02X}" for c in ("red", "green", "blue"))


def _same_format(a: Span, b: Span) -> bool:
    return (a.color, a.bold, a.italic, a.underline) == (b.color, b.bold, b.italic, b.underline)


def _known_codepage(value: int, current: int) -> int:
    try:
        codecs.lookup(f"cp{value}")
    except LookupError:
        return current
    return value
