"""문서 조립 엔진 — 레코드 × 템플릿 → 블록 시퀀스.

직렬화(python-docx)와 분리된 순수 단계로, 결과 AssembledDocument는
DocxWriter가 그대로 문단/페이지 나누기/푸터로 옮긴다.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal, Optional

from ..records.models import Record, strip_ansi
from ..records.rtf import RtfParseError, Span, line_text, parse_rtf
from ..template_resolver.models import TemplateSpec, TextFormat
from ..template_resolver.resolver import PlaceholderResolver, TemplateResolver

logger = logging.getLogger(__name__)

OnError = Literal["abort", "skip"]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class RecordResolutionError(RuntimeError):
    """레코드 치환 실패 (on_error="abort"일 때)."""


@dataclass
class Block:
    """문서의 문단 하나 (또는 페이지 나누기)."""

    kind: Literal["text", "page_break"]
    text: str = ""
    fmt: Optional[TextFormat] = None       # 크기/정렬/런 서식
    role: str = ""                         # question | solution_title | solution | ... | page_footer
    record_index: Optional[int] = None     # 원본 Record.index
    spans: Optional[list[Span]] = None     # 구문 강조 조각 (있으면 run 여러 개)


@dataclass
class AssembledDocument:
    """조립 결과: 본문 블록 + 문서 공통 푸터."""

    blocks: list[Block] = field(default_factory=list)
    footer: Optional[Block] = None
    record_count: int = 0                  # 블록 묶음으로 들어간 레코드 수
    skipped: list[str] = field(default_factory=list)

    @property
    def content_blocks(self) -> list[Block]:
        return [b for b in self.blocks if b.kind == "text"]

    @property
    def page_break_count(self) -> int:
        return sum(1 for b in self.blocks if b.kind == "page_break")

    def texts(self) -> list[str]:
        """본문 텍스트 블록의 텍스트를 순서대로 반환."""
        return [b.text for b in self.content_blocks]


def split_lines(text: str) -> list[str]:
    """Word 문단은 줄바꿈을 담을 수 없으므로 줄 단위로 나눈다.

    줄바꿈은 \\n, \\r\\n, \\r만 인정한다. 폼 피드 같은 다른 제어 문자는 줄 안에 남는다.
    빈 문자열은 빈 목록, 마지막 줄바꿈은 빈 줄을 만들지 않는다.
    """
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def highlighted_lines(code: str, code_rtf: str) -> Optional[list[list[Span]]]:
    """code_rtf를 줄별 Span으로 바꾼다. 줄 텍스트가 code와 다르면 None."""
    try:
        lines = parse_rtf(code_rtf)
    except RtfParseError as e:
        logger.warning(f"code_rtf 파싱 실패, 일반 텍스트로 출력: {e}")
        return None
    if [line_text(line) for line in lines] != split_lines(code):
        logger.warning("code_rtf 텍스트가 code와 달라 일반 텍스트로 출력합니다")
        return None
    return lines


class DocumentAssembler(ABC):
    """문서 조립 추상 인터페이스."""

    @abstractmethod
    def assemble(self, records: list[Record], template: TemplateSpec) -> AssembledDocument:
        """레코드를 index 순으로 정렬해 블록 시퀀스를 만든다."""


class DefaultDocumentAssembler(DocumentAssembler):
    """문제 → 풀이 → 실행 결과 → 페이지 나누기 순서의 기본 구현체."""

    def __init__(
        self,
        resolver: Optional[TemplateResolver] = None,
        footer_text: str = "Made by H",
        footer_size: str = "10pt",
        on_error: OnError = "abort",
        strip_ansi_output: bool = True,
    ):
        self._resolver = resolver or PlaceholderResolver()
        self._footer_fmt = TextFormat(text=footer_text, size=footer_size, alignment="right")
        self._on_error = on_error
        self._strip_ansi = strip_ansi_output

    def assemble(self, records: list[Record], template: TemplateSpec) -> AssembledDocument:
        doc = AssembledDocument()

        # 안정 정렬: 같은 index는 입력 순서 유지
        ordered = sorted(records, key=lambda r: r.index)

        for n, record in enumerate(ordered, start=1):
            variables = {
                "question": record.question,
                "solution": record.code,
                "output": strip_ansi(record.output) if self._strip_ansi else record.output,
                "n": n,
            }
            result = self._resolver.resolve(template, variables)
            if not result.is_success:
                msg = f"[index={record.index}] 템플릿 치환 실패: {result.error}"
                if self._on_error == "abort":
                    raise RecordResolutionError(msg)
                logger.warning(f"{msg} (건너뜀)")
                doc.skipped.append(msg)
                continue

            highlighted = None
            if record.code_rtf and template.solution.text.strip() == "{solution}":
                highlighted = highlighted_lines(record.code, record.code_rtf)
            doc.blocks.extend(self._record_blocks(result.template, record.index, highlighted))
            doc.record_count += 1
            logger.debug(f"레코드 조립 완료: n={n}, index={record.index}")

        doc.footer = Block(
            kind="text",
            text=self._footer_fmt.text,
            fmt=self._footer_fmt,
            role="page_footer",
        )
        return doc

    def _record_blocks(
        self,
        resolved: TemplateSpec,
        record_index: int,
        highlighted: Optional[list[list[Span]]] = None,
    ) -> list[Block]:
        blocks: list[Block] = []

        def label(fmt: TextFormat, role: str):
            # 라벨은 비어 있어도 문단 1개를 차지한다
            for line in split_lines(fmt.text) or [""]:
                blocks.append(Block("text", line, fmt, role, record_index))

        def body(fmt: TextFormat, role: str):
            for line in split_lines(fmt.text):
                blocks.append(Block("text", line, fmt, role, record_index))

        if resolved.header is not None:
            label(resolved.header, "header")
        label(resolved.question, "question")

        label(resolved.solution.title, "solution_title")
        if highlighted is not None:
            for line in highlighted:
                blocks.append(
                    Block("text", line_text(line), resolved.solution, "solution", record_index, spans=line)
                )
        else:
            body(resolved.solution, "solution")

        label(resolved.output.title, "output_title")
        body(resolved.output, "output")

        if resolved.footer is not None:
            label(resolved.footer, "footer")

        blocks.append(Block("page_break", role="page_break", record_index=record_index))
        return blocks
