"""템플릿 플레이스홀더 치환 엔진 — ABC 인터페이스 + 구현체."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from .models import TemplateSpec, TextFormat

PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")

# 치환 대상 최상위 필드 (title은 한 단계 아래까지)
TEMPLATE_FIELDS = ("header", "question", "solution", "output", "footer")


def substitute(text: str, variables: Mapping[str, Any]) -> str:
    """text의 {이름} 토큰을 variables 값으로 치환한다.

    없는 이름은 빈 문자열이 된다. 치환된 값은 다시 검사하지 않는다.
    """
    def _lookup(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_lookup, text)


class ResolveResult(BaseModel):
    """레코드 1건에 대한 치환 결과. 성공 시 template, 실패 시 error."""
    template: Optional[TemplateSpec] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error is None and self.template is not None


class TemplateResolver(ABC):
    """템플릿 치환 추상 인터페이스."""

    @abstractmethod
    def resolve(
        self, template: Union[TemplateSpec, Mapping[str, Any]], variables: Mapping[str, Any]
    ) -> ResolveResult:
        """변수를 주입한 새 TemplateSpec을 반환한다. 입력 template은 변경하지 않는다."""


class PlaceholderResolver(TemplateResolver):
    """{name} 패턴 기반 치환 구현체 (copy-on-resolve)."""

    def resolve(self, template, variables) -> ResolveResult:
        if isinstance(template, TemplateSpec):
            spec = template
        else:
            try:
                spec = TemplateSpec.model_validate(template)
            except ValidationError as e:
                return ResolveResult(error=f"템플릿 구조 오류: {e}")

        missing = spec.missing_fields()
        if missing:
            return ResolveResult(error=f"템플릿 필수 필드 누락: {', '.join(missing)}")

        updates = {}
        for name in TEMPLATE_FIELDS:
            fmt = getattr(spec, name, None)
            if fmt is not None:
                updates[name] = self._resolve_format(fmt, variables)
        return ResolveResult(template=spec.model_copy(update=updates))

    @staticmethod
    def _resolve_format(fmt: TextFormat, variables: Mapping[str, Any]) -> TextFormat:
        title = None
        if fmt.title is not None:
            title = fmt.title.model_copy(update={"text": substitute(fmt.title.text, variables)})
        return fmt.model_copy(update={"text": substitute(fmt.text, variables), "title": title})
