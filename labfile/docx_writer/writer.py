"""DOCX 직렬화 — AssembledDocument → .docx 파일.

블록 하나가 문단 하나가 된다 (구문 강조 줄은 조각마다 run 1개).
문서 공통 푸터는 첫 섹션의 페이지 푸터에 들어가 모든 페이지가 공유한다.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from docx import Document
from docx.document import Document as DocumentType
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from ..docx_assembler.assembler import AssembledDocument, Block
from ..records.rtf import Span
from ..template_resolver.models import TextFormat

logger = logging.getLogger(__name__)

# numTab은 대응하는 문단 정렬이 없어 상속값을 유지한다
ALIGNMENT_MAP = {
    "start": WD_ALIGN_PARAGRAPH.LEFT,
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "end": WD_ALIGN_PARAGRAPH.RIGHT,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "both": WD_ALIGN_PARAGRAPH.JUSTIFY,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
    "distribute": WD_ALIGN_PARAGRAPH.DISTRIBUTE,
    "mediumKashida": WD_ALIGN_PARAGRAPH.JUSTIFY_MED,
    "highKashida": WD_ALIGN_PARAGRAPH.JUSTIFY_HI,
    "lowKashida": WD_ALIGN_PARAGRAPH.JUSTIFY_LOW,
    "thaiDistribute": WD_ALIGN_PARAGRAPH.THAI_JUSTIFY,
    "numTab": None,
}

# XML 1.0에 넣을 수 없는 제어 문자 (탭/줄바꿈 제외)
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def xml_safe(text: str) -> str:
    """Word XML에 쓸 수 없는 제어 문자(ESC, BEL, 백스페이스 등)를 지운다."""
    return _XML_ILLEGAL.sub("", text)


class DocxWriter(ABC):
    """DOCX 직렬화 추상 인터페이스."""

    @abstractmethod
    def build(self, document: AssembledDocument) -> DocumentType:
        """블록 시퀀스로 python-docx Document를 만든다."""

    @abstractmethod
    def write(self, document: AssembledDocument, output_path: Path) -> Path:
        """빌드 후 파일로 저장 (기존 파일은 덮어쓴다)."""


class PythonDocxWriter(DocxWriter):
    """python-docx 기반 구현체."""

    def build(self, document: AssembledDocument) -> DocumentType:
        doc = Document()

        for block in document.blocks:
            if block.kind == "page_break":
                doc.add_page_break()
            else:
                paragraph = doc.add_paragraph()
                self._fill_paragraph(doc, paragraph, block)

        if document.footer is not None:
            self._set_page_footer(doc, document.footer)

        return doc

    def write(self, document: AssembledDocument, output_path: Path) -> Path:
        output_path = Path(output_path)
        doc = self.build(document)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(output_path))
        logger.info(f"DOCX 저장: {output_path} (문단 {len(document.content_blocks)}개)")
        return output_path

    def _set_page_footer(self, doc: DocumentType, block: Block):
        """첫 섹션 푸터에 캡션을 넣는다. 헤더는 만들지 않는다."""
        footer = doc.sections[0].footer
        footer.is_linked_to_previous = False
        # 새 푸터 파트에는 빈 문단이 하나 들어 있다
        paragraph = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
        self._fill_paragraph(doc, paragraph, block)

    def _fill_paragraph(self, doc: DocumentType, paragraph, block: Block):
        fmt = block.fmt
        pieces = block.spans if block.spans is not None else [Span(block.text)]
        runs = [paragraph.add_run(xml_safe(span.text)) for span in pieces]
        if fmt is None:
            return

        if fmt.style:
            self._apply_style(doc, paragraph, runs, fmt.style)

        alignment = ALIGNMENT_MAP.get(fmt.alignment) if fmt.alignment else None
        if alignment is not None:
            paragraph.alignment = alignment

        pf = paragraph.paragraph_format
        if fmt.line_spacing is not None:
            pf.line_spacing = fmt.line_spacing
        if fmt.margin_top:
            pf.space_before = Pt(fmt.margin_top)
        if fmt.margin_bottom:
            pf.space_after = Pt(fmt.margin_bottom)
        if fmt.indent:
            pf.left_indent = Pt(fmt.indent)

        for run, span in zip(runs, pieces):
            self._apply_run_format(run, fmt)
            self._apply_span_format(run, span)

    @staticmethod
    def _apply_run_format(run, fmt: TextFormat):
        half_points = fmt.half_points
        if half_points is not None:
            run.font.size = Pt(half_points / 2)
        if fmt.bold:
            run.bold = True
        if fmt.italic:
            run.italic = True
        if fmt.underline:
            run.underline = True
        if fmt.font:
            run.font.name = fmt.font
            # 한글 등 동아시아 문자는 eastAsia 글꼴을 따른다
            run._element.rPr.rFonts.set(qn("w:eastAsia"), fmt.font)
        if fmt.color:
            run.font.color.rgb = RGBColor.from_string(fmt.color)

    @staticmethod
    def _apply_span_format(run, span: Span):
        """구문 강조 조각의 서식을 템플릿 서식 위에 덧씌운다."""
        if span.bold:
            run.bold = True
        if span.italic:
            run.italic = True
        if span.underline:
            run.underline = True
        if span.color:
            run.font.color.rgb = RGBColor.from_string(span.color)

    def _apply_style(self, doc: DocumentType, paragraph, runs: list, name: str):
        """문단 스타일은 문단에, 문자 스타일(Strong, Emphasis 등)은 run에 적용한다."""
        style = self._ensure_style(doc, name)
        if style.type == WD_STYLE_TYPE.PARAGRAPH:
            paragraph.style = style
        elif style.type == WD_STYLE_TYPE.CHARACTER:
            for run in runs:
                run.style = style
        else:
            logger.warning(f"문단/문자 스타일이 아니라 적용하지 않습니다: {name} ({style.type})")

    @staticmethod
    def _ensure_style(doc: DocumentType, name: str):
        """템플릿에만 있는 스타일명은 문단 스타일로 추가한다."""
        if name not in doc.styles:
            doc.styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)
            logger.debug(f"문단 스타일 추가: {name}")
        return doc.styles[name]
