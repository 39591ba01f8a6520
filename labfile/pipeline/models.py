"""파이프라인 설정 및 결과 모델."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class PipelineConfig(BaseModel):
    """Labfile 생성 파이프라인 설정.

    경로 기본값은 작업 디렉토리 기준 (format.yml / output.json / Labfile.docx).
    조립 정책(푸터, on_error, ANSI 제거)은 DocumentAssembler 생성 시 정한다.
    """
    template_path: Path = Field(Path("format.yml"), alias="templatePath")
    records_path: Path = Field(Path("output.json"), alias="recordsPath")
    output_path: Path = Field(Path("Labfile.docx"), alias="outputPath")
    allow_duplicate_index: bool = Field(False, alias="allowDuplicateIndex")
    remove_records: bool = Field(False, alias="removeRecords")

    model_config = {"populate_by_name": True}


class PipelineResult(BaseModel):
    """파이프라인 실행 결과."""
    output_path: Path = Field(alias="outputPath")
    record_count: int = Field(0, alias="recordCount")
    page_break_count: int = Field(0, alias="pageBreakCount")
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def is_success(self) -> bool:
        return len(self.errors) == 0
