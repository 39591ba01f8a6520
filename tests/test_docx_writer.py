"""DOCX 직렬화 테스트.

조립 결과를 파일로 저장한 뒤 python-docx로 다시 열어 검증한다.
검증 항목:
  1. 블록 순서 = 문단 순서, 페이지 나누기 위치
  2. 페이지 푸터 (오른쪽 정렬, 10pt)
  3. 런/문단 서식 (크기, 굵게, 글꼴, 색상, 정렬, 스타일)
  4. 구문 강조 조각 → run 여러 개, XML에 쓸 수 없는 제어 문자 제거
"""

from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from labfile.docx_assembler.assembler import AssembledDocument, Block, DefaultDocumentAssembler
from labfile.docx_writer.writer import PythonDocxWriter
from labfile.records.models import Record
from labfile.records.rtf import Span
from labfile.template_resolver.models import TemplateSpec, TextFormat


def make_template() -> TemplateSpec:
    return TemplateSpec(
        question=TextFormat(text="{question}", bold=True, size=24),
        solution=TextFormat(
            text="{solution}", size=20, font="Consolas", color="#336699",
            title=TextFormat(text="Solution {n}:", alignment="center", style="Code Label"),
        ),
        output=TextFormat(text="{output}", size="9pt", title=TextFormat(text="Output {n}:")),
    )


def is_page_break(paragraph) -> bool:
    return 'w:type="page"' in paragraph._p.xml


def write(tmp_path: Path, records: list[Record]) -> Path:
    doc = DefaultDocumentAssembler().assemble(records, make_template())
    return PythonDocxWriter().write(doc, tmp_path / "out" / "Labfile.docx")


def test_paragraph_sequence(tmp_path):
    path = write(tmp_path, [
        Record(index=2, question="Q2", code="x = 2\nprint(x)", output="2"),
        Record(index=1, question="Q1", code="print(1)", output="1"),
    ])

    doc = Document(str(path))
    sequence = ["<page-break>" if is_page_break(p) else p.text for p in doc.paragraphs]

    assert sequence == [
        "Q1", "Solution 1:", "print(1)", "Output 1:", "1", "<page-break>",
        "Q2", "Solution 2:", "x = 2", "print(x)", "Output 2:", "2", "<page-break>",
    ]


def test_page_footer(tmp_path):
    path = write(tmp_path, [Record(index=1, question="Q", code="c", output="o")])

    doc = Document(str(path))
    footer = doc.sections[0].footer
    texts = [p.text for p in footer.paragraphs if p.text]

    assert texts == ["Made by H"]
    paragraph = footer.paragraphs[0]
    assert paragraph.alignment == WD_ALIGN_PARAGRAPH.RIGHT
    assert paragraph.runs[0].font.size == Pt(10)


def test_empty_document_has_only_footer(tmp_path):
    path = write(tmp_path, [])

    doc = Document(str(path))
    assert [p.text for p in doc.paragraphs if p.text] == []
    assert not any(is_page_break(p) for p in doc.paragraphs)
    assert doc.sections[0].footer.paragraphs[0].text == "Made by H"


def test_run_formatting(tmp_path):
    path = write(tmp_path, [Record(index=1, question="Q", code="print(1)", output="1")])

    doc = Document(str(path))
    by_text = {p.text: p for p in doc.paragraphs if p.text}

    question_run = by_text["Q"].runs[0]
    assert question_run.bold is True
    assert question_run.font.size == Pt(12)

    code_run = by_text["print(1)"].runs[0]
    assert code_run.font.size == Pt(10)
    assert code_run.font.name == "Consolas"
    assert code_run._element.rPr.rFonts.get(qn("w:eastAsia")) == "Consolas"
    assert code_run.font.color.rgb == RGBColor(0x33, 0x66, 0x99)

    assert by_text["1"].runs[0].font.size == Pt(9)

    title = by_text["Solution 1:"]
    assert title.alignment == WD_ALIGN_PARAGRAPH.CENTER
    assert title.style.name == "Code Label"


def test_alignment_without_word_equivalent(tmp_path):
    fmt = TextFormat(text="tab", alignment="numTab")
    document = AssembledDocument(blocks=[Block("text", "tab", fmt)])

    doc = PythonDocxWriter().build(document)

    assert doc.paragraphs[0].text == "tab"
    assert doc.paragraphs[0].alignment is None


def test_overwrites_existing_file(tmp_path):
    target = tmp_path / "Labfile.docx"
    target.write_bytes(b"old")

    document = DefaultDocumentAssembler().assemble(
        [Record(index=1, question="Q", code="", output="")], make_template()
    )
    PythonDocxWriter().write(document, target)

    assert Document(str(target)).paragraphs[0].text == "Q"


def test_character_style_applied_to_run():
    """Strong / Emphasis는 문자 스타일이라 run에 적용된다."""
    fmt = TextFormat(text="굵게", style="Strong")
    document = AssembledDocument(blocks=[Block("text", "굵게", fmt)])

    doc = PythonDocxWriter().build(document)

    paragraph = doc.paragraphs[0]
    assert paragraph.text == "굵게"
    assert paragraph.style.name == "Normal"
    assert paragraph.runs[0].style.name == "Strong"


def test_korean_text_uses_east_asia_font(tmp_path):
    fmt = TextFormat(text="한글", font="D2Coding")
    document = AssembledDocument(blocks=[Block("text", "한글 출력", fmt)])

    path = PythonDocxWriter().write(document, tmp_path / "Labfile.docx")

    run = Document(str(path)).paragraphs[0].runs[0]
    assert run.font.name == "D2Coding"
    assert run._element.rPr.rFonts.get(qn("w:eastAsia")) == "D2Coding"


def test_control_characters_removed(tmp_path):
    text = "\x1b[32mok\x1b[0m\x07\x08\tdone"
    document = AssembledDocument(blocks=[Block("text", text, TextFormat(text=text))])

    path = PythonDocxWriter().write(document, tmp_path / "Labfile.docx")

    assert Document(str(path)).paragraphs[0].text == "[32mok[0m\tdone"


def test_spans_become_runs(tmp_path):
    fmt = TextFormat(text="{solution}", size=20, font="Consolas", color="336699")
    spans = [Span("def", color="0000FF", bold=True), Span(" f():"), Span("  # c", color="008000", italic=True)]
    document = AssembledDocument(blocks=[Block("text", "def f():  # c", fmt, "solution", 1, spans=spans)])

    path = PythonDocxWriter().write(document, tmp_path / "Labfile.docx")

    runs = Document(str(path)).paragraphs[0].runs
    assert [r.text for r in runs] == ["def", " f():", "  # c"]
    assert all(r.font.size == Pt(10) and r.font.name == "Consolas" for r in runs)
    assert runs[0].font.color.rgb == RGBColor(0x00, 0x00, 0xFF)
    assert runs[0].bold is True
    # 색이 없는 조각은 템플릿 색상을 따른다
    assert runs[1].font.color.rgb == RGBColor(0x33, 0x66, 0x99)
    assert runs[1].bold is None
    assert runs[2].italic is True


def test_empty_highlighted_line_is_empty_paragraph():
    fmt = TextFormat(text="{solution}")
    document = AssembledDocument(blocks=[Block("text", "", fmt, "solution", 1, spans=[])])

    doc = PythonDocxWriter().build(document)

    assert doc.paragraphs[0].text == ""
    assert doc.paragraphs[0].runs == []
