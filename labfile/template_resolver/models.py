"""Labfile 템플릿 데이터 모델.

format.yml의 각 필드(question / solution / output / header / footer)를
TextFormat으로 표현한다. 로드 시점에 pydantic이 구조와 값을 검증한다.
"""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

Alignment = Literal[
    "start",
    "center",
    "end",
    "both",
    "justify",
    "mediumKashida",
    "distribute",
    "numTab",
    "highKashida",
    "lowKashida",
    "thaiDistribute",
    "left",
    "right",
]

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(pt|hp)?\s*$", re.IGNORECASE)
_COLOR_PATTERN = re.compile(r"^[0-9A-Fa-f]{6}$")


def parse_size(value: Union[int, float, str, None]) -> Optional[int]:
    """텍스트 크기를 half-point 정수로 변환한다.

    숫자는 half-point 그대로, 문자열은 "10pt"(포인트) / "20hp"·"20"(half-point).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"잘못된 텍스트 크기: {value!r}")
    if isinstance(value, (int, float)):
        if value <= 0:
            raise ValueError(f"텍스트 크기는 양수여야 합니다: {value!r}")
        return round(value)
    m = _SIZE_PATTERN.match(value)
    if not m:
        raise ValueError(f"잘못된 텍스트 크기: {value!r} (예: 24, \"12pt\")")
    number = float(m.group(1))
    unit = (m.group(2) or "hp").lower()
    half_points = number * 2 if unit == "pt" else number
    if half_points <= 0:
        raise ValueError(f"텍스트 크기는 양수여야 합니다: {value!r}")
    return round(half_points)


class TextFormat(BaseModel):
    """템플릿 필드 하나의 서식 정의.

    text의 {name} 플레이스홀더가 레코드 값으로 치환된다.
    title은 섹션 라벨(예: "Solution {n}:")로 쓰이는 하위 서식.
    """
    text: str
    size: Optional[Union[int, float, str]] = None
    title: Optional[TextFormat] = None
    alignment: Optional[Alignment] = Field(
        None, validation_alias=AliasChoices("alignment", "align")
    )
    bold: bool = False
    italic: bool = Field(False, validation_alias=AliasChoices("italic", "italics"))
    underline: bool = False
    font: Optional[str] = None
    color: Optional[str] = None               # RRGGBB (# 허용)
    style: Optional[str] = None               # 문단 스타일명 (예: "Normal", "Quote")
    line_spacing: Optional[float] = Field(
        None, validation_alias=AliasChoices("line_spacing", "lineSpacing")
    )
    margin_top: float = Field(0, validation_alias=AliasChoices("margin_top", "marginTop"))
    margin_bottom: float = Field(0, validation_alias=AliasChoices("margin_bottom", "marginBottom"))
    indent: float = 0                         # 왼쪽 들여쓰기 (pt)

    model_config = {"populate_by_name": True}

    @field_validator("size")
    @classmethod
    def _check_size(cls, v):
        parse_size(v)
        return v

    @field_validator("color")
    @classmethod
    def _check_color(cls, v):
        if v is None:
            return v
        hex_value = v.lstrip("#")
        if not _COLOR_PATTERN.match(hex_value):
            raise ValueError(f"잘못된 색상 값: {v!r} (예: \"#1A1A2E\")")
        return hex_value.upper()

    @property
    def half_points(self) -> Optional[int]:
        return parse_size(self.size)


class TemplateSpec(BaseModel):
    """format.yml 전체. 레코드 1건을 문서 블록으로 만드는 규칙."""
    question: TextFormat
    solution: TextFormat
    output: TextFormat
    header: Optional[TextFormat] = None
    footer: Optional[TextFormat] = None

    model_config = {"populate_by_name": True}

    def missing_fields(self) -> list[str]:
        """조립에 필요한데 비어 있는 필드 경로 목록."""
        missing = []
        for name in ("question", "solution", "output"):
            fmt = getattr(self, name, None)
            if fmt is None or not isinstance(getattr(fmt, "text", None), str):
                missing.append(f"{name}.text")
        for name in ("solution", "output"):
            fmt = getattr(self, name, None)
            if fmt is None:
                continue
            title = getattr(fmt, "title", None)
            if title is None or not isinstance(getattr(title, "text", None), str):
                missing.append(f"{name}.title.text")
        return missing
