"""레코드(문제 + 풀이 코드 + 실행 결과) 데이터 모델.

output.json의 항목 하나가 Record 하나이며, 문서에서 한 페이지 분량의
블록 묶음이 된다.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# CSI 시퀀스: ESC [ + 매개변수·중간 바이트 + 종료 바이트
_ANSI_CSI = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


class RecordLoadError(ValueError):
    """레코드 파일을 읽거나 검증할 수 없음."""


@dataclass(frozen=True)
class Record:
    """문서에 실릴 문제 1건."""

    index: int       # 정렬 기준 (치환 변수 n과는 별개)
    question: str
    code: str        # {solution}으로 치환되는 풀이 코드
    output: str      # 캡처된 실행 결과
    code_rtf: Optional[str] = None   # 구문 강조된 풀이 코드 (RTF)


def strip_ansi(text: str) -> str:
    """터미널 제어 시퀀스(ESC[...m 색상, ESC[2K 줄 지우기 등)를 제거한다.

    시퀀스 하나만 지우며 뒤따르는 텍스트와 줄바꿈은 그대로 둔다.
    """
    return _ANSI_CSI.sub("", text)


def _to_record(item: object, position: int) -> Record:
    if not isinstance(item, dict):
        raise RecordLoadError(f"{position}번째 항목이 객체가 아닙니다: {item!r}")
    if "index" not in item:
        raise RecordLoadError(f"{position}번째 항목에 index가 없습니다")

    index = item["index"]
    if isinstance(index, bool) or not isinstance(index, int):
        raise RecordLoadError(f"{position}번째 항목의 index가 정수가 아닙니다: {index!r}")

    return Record(
        index=index,
        question=str(item.get("question", "")),
        code=str(item.get("code", "")),
        output=str(item.get("output", item.get("output_rtf", ""))),
        code_rtf=_optional_str(item.get("code_rtf")),
    )


def _optional_str(value: object) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def load_records(path: Path | str, allow_duplicate_index: bool = False) -> list[Record]:
    """JSON 배열에서 Record 목록을 로드한다 (파일 순서 유지, 정렬은 조립 단계에서).

    Args:
        path: output.json 경로
        allow_duplicate_index: True면 중복 index를 허용 (입력 순서대로 안정 정렬)
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise RecordLoadError(f"레코드 파일을 읽을 수 없습니다: {path} ({e})") from e
    except json.JSONDecodeError as e:
        raise RecordLoadError(f"레코드 JSON 파싱 실패: {path} ({e})") from e

    if not isinstance(raw, list):
        raise RecordLoadError(f"레코드 파일 최상위는 배열이어야 합니다: {path}")

    records = [_to_record(item, i + 1) for i, item in enumerate(raw)]

    duplicates = sorted(idx for idx, cnt in Counter(r.index for r in records).items() if cnt > 1)
    if duplicates:
        if not allow_duplicate_index:
            raise RecordLoadError(f"중복된 index: {duplicates}")
        logger.warning(f"중복된 index {duplicates}, 입력 순서대로 배치합니다")

    logger.info(f"레코드 {len(records)}건 로드: {path}")
    return records
