"""Labfile 생성 CLI.

사용법:
  # 현재 디렉토리의 format.yml + output.json → Labfile.docx
  labfile-generate

  # 다른 작업 디렉토리
  labfile-generate ~/labs/week3

  # 경로 지정 + 치환 실패 레코드는 건너뛰기
  labfile-generate --template my_format.yml --records results.json \\
      --output out/Labfile.docx --skip-invalid
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import FOOTER_SIZE, FOOTER_TEXT, LABFILE_OUTPUT_PATH, LABFILE_RECORDS_PATH
from .docx_assembler.assembler import DefaultDocumentAssembler
from .docx_writer.writer import PythonDocxWriter
from .pipeline.models import PipelineConfig
from .pipeline.pipeline import DefaultLabfilePipeline
from .template_resolver.resolver import PlaceholderResolver
from ._resources import get_template_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="문제/풀이/실행 결과 → Labfile DOCX 생성")

    parser.add_argument(
        "workdir", nargs="?", default=None,
        help="작업 디렉토리 (기본: 현재 디렉토리). 상대 경로는 이 디렉토리 기준",
    )

    # 입출력
    parser.add_argument("--template", default=None, help="템플릿 YAML (기본: format.yml)")
    parser.add_argument("--records", default=None, help=f"레코드 JSON (기본: {LABFILE_RECORDS_PATH})")
    parser.add_argument("--output", default=None, help=f"출력 DOCX (기본: {LABFILE_OUTPUT_PATH})")
    parser.add_argument("--footer-text", default=FOOTER_TEXT, help="페이지 푸터 캡션")

    # 정책
    parser.add_argument("--skip-invalid", action="store_true", help="치환 실패 레코드는 건너뛰기 (기본: 중단)")
    parser.add_argument("--allow-duplicate-index", action="store_true", help="중복 index 허용")
    parser.add_argument("--keep-ansi", action="store_true", help="실행 결과의 터미널 색상 코드 유지")
    parser.add_argument("--remove-records", action="store_true", help="성공 후 레코드 JSON 삭제")
    parser.add_argument("-v", "--verbose", action="store_true", help="상세 로그")

    return parser


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """CLI 인자 → PipelineConfig. 상대 경로는 workdir 기준으로 해석한다."""
    workdir = Path(args.workdir).expanduser() if args.workdir else Path.cwd()

    def under_workdir(value: str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else workdir / path

    template_path = under_workdir(args.template) if args.template else get_template_path(workdir)

    return PipelineConfig(
        templatePath=template_path,
        recordsPath=under_workdir(args.records or LABFILE_RECORDS_PATH),
        outputPath=under_workdir(args.output or LABFILE_OUTPUT_PATH),
        allowDuplicateIndex=args.allow_duplicate_index,
        removeRecords=args.remove_records,
    )


def build_assembler(args: argparse.Namespace) -> DefaultDocumentAssembler:
    """CLI 인자 → 조립 정책 (푸터, 치환 실패 처리, ANSI 제거)."""
    return DefaultDocumentAssembler(
        resolver=PlaceholderResolver(),
        footer_text=args.footer_text,
        footer_size=FOOTER_SIZE,
        on_error="skip" if args.skip_invalid else "abort",
        strip_ansi_output=not args.keep_ansi,
    )


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = build_config(args)

    print(f"템플릿: {config.template_path}")
    print(f"레코드: {config.records_path}")
    print(f"출력: {config.output_path}")
    print()

    pipeline = DefaultLabfilePipeline(
        assembler=build_assembler(args),
        writer=PythonDocxWriter(),
    )
    result = pipeline.run(config)

    print()
    if result.skipped:
        print(f"건너뛴 레코드 {len(result.skipped)}건:")
        for s in result.skipped:
            print(f"  - {s}")

    if result.is_success:
        print(f"생성 완료: {result.output_path}")
        print(f"레코드 수: {result.record_count}")
    else:
        print("에러 발생:", file=sys.stderr)
        for e in result.errors:
            print(f"  - {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
