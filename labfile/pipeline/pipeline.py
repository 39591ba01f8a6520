"""Labfile 생성 파이프라인 — ABC 인터페이스 + 구현체."""

from __future__ import annotations

import logging
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path

from lxml import etree

from ..docx_assembler.assembler import DocumentAssembler, RecordResolutionError
from ..docx_writer.writer import DocxWriter
from ..records.models import RecordLoadError, load_records
from ..template_resolver.loader import TemplateLoadError, load_template
from .models import PipelineConfig, PipelineResult

logger = logging.getLogger(__name__)

_NS_W = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


class LabfilePipeline(ABC):
    """Labfile 생성 파이프라인 추상 인터페이스."""

    @abstractmethod
    def run(self, config: PipelineConfig) -> PipelineResult:
        """템플릿과 레코드를 읽어 최종 DOCX를 생성한다."""


class DefaultLabfilePipeline(LabfilePipeline):
    """템플릿 로드 → 레코드 로드 → 조립 → 저장의 기본 구현체.

    어느 단계든 실패하면 그 자리에서 중단하고 errors에 남긴다.
    """

    def __init__(self, assembler: DocumentAssembler, writer: DocxWriter):
        self._assembler = assembler
        self._writer = writer

    def run(self, config: PipelineConfig) -> PipelineResult:
        output_path = config.output_path

        try:
            template = load_template(config.template_path)
            records = load_records(
                config.records_path,
                allow_duplicate_index=config.allow_duplicate_index,
            )
        except (TemplateLoadError, RecordLoadError) as e:
            logger.error(str(e))
            return PipelineResult(outputPath=output_path, errors=[str(e)])

        try:
            document = self._assembler.assemble(records, template)
        except RecordResolutionError as e:
            logger.error(str(e))
            return PipelineResult(outputPath=output_path, errors=[str(e)])

        try:
            self._writer.write(document, output_path)
        except (OSError, ValueError) as e:
            msg = f"DOCX 저장 실패: {output_path} ({e})"
            logger.error(msg)
            return PipelineResult(
                outputPath=output_path,
                recordCount=document.record_count,
                skipped=document.skipped,
                errors=[msg],
            )

        page_breaks = self._count_page_breaks(output_path)
        logger.info(f"생성 완료: {output_path} (레코드 {document.record_count}건, 페이지 나누기 {page_breaks}개)")

        if config.remove_records:
            self._remove_records(config.records_path)

        return PipelineResult(
            outputPath=output_path,
            recordCount=document.record_count,
            pageBreakCount=page_breaks,
            skipped=document.skipped,
        )

    @staticmethod
    def _remove_records(records_path: Path):
        """성공 후 레코드 파일 정리. 실패해도 생성 결과는 유지한다."""
        try:
            records_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"레코드 파일 삭제 실패: {records_path} ({e})")
            return
        logger.info(f"레코드 파일 삭제: {records_path}")

    @staticmethod
    def _count_page_breaks(docx_path: Path) -> int:
        """DOCX ZIP 내 document.xml의 페이지 나누기 수를 카운트한다."""
        with zipfile.ZipFile(str(docx_path), "r") as z:
            root = etree.fromstring(z.read("word/document.xml"))
        return len(root.xpath("//w:br[@w:type='page']", namespaces={"w": _NS_W}))
