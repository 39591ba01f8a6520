"""리소스 경로 관리 — 템플릿 파일의 단일 진입점.

우선순위:
  1. set_template_path() API로 명시 지정
  2. 환경변수 LABFILE_TEMPLATE_PATH
  3. 작업 디렉토리의 format.yml
  4. importlib.resources (패키지 번들 기본 템플릿)
"""

from __future__ import annotations

import os
from importlib.resources import files
from pathlib import Path

DEFAULT_TEMPLATE_NAME = "format.yml"

_custom_template_path: Path | None = None


def set_template_path(path: Path | str | None) -> None:
    """커스텀 템플릿 파일을 지정한다. None이면 지정을 해제한다."""
    global _custom_template_path
    _custom_template_path = Path(path) if path is not None else None


def get_template_path(workdir: Path | None = None) -> Path:
    """사용할 템플릿 파일 경로를 반환한다.

    Args:
        workdir: format.yml을 찾을 디렉토리. None이면 현재 작업 디렉토리.
    """
    if _custom_template_path is not None:
        return _custom_template_path
    env = os.getenv("LABFILE_TEMPLATE_PATH")
    if env:
        return Path(env)
    local = (workdir or Path.cwd()) / DEFAULT_TEMPLATE_NAME
    if local.exists():
        return local
    return get_bundled_template_path()


def get_bundled_template_path() -> Path:
    """패키지에 번들된 기본 템플릿 경로."""
    return Path(str(files("labfile") / "templates" / DEFAULT_TEMPLATE_NAME))
