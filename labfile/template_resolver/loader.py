"""format.yml 로더."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TemplateSpec

logger = logging.getLogger(__name__)


class TemplateLoadError(ValueError):
    """템플릿 파일을 읽거나 검증할 수 없음. 실행 전체를 중단한다."""


def load_template(path: Path | str) -> TemplateSpec:
    """YAML 템플릿을 읽어 TemplateSpec으로 검증한다."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise TemplateLoadError(f"템플릿 파일을 읽을 수 없습니다: {path} ({e})") from e
    except yaml.YAMLError as e:
        raise TemplateLoadError(f"템플릿 YAML 파싱 실패: {path} ({e})") from e

    if not isinstance(raw, dict):
        raise TemplateLoadError(f"템플릿 최상위는 매핑이어야 합니다: {path}")

    try:
        spec = TemplateSpec.model_validate(raw)
    except ValidationError as e:
        raise TemplateLoadError(f"템플릿 구조 오류: {path}\n{e}") from e

    missing = spec.missing_fields()
    if missing:
        raise TemplateLoadError(f"템플릿 필수 필드 누락: {', '.join(missing)} ({path})")

    logger.debug(f"템플릿 로드: {path}")
    return spec
