from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

FieldPath = tuple[str | int, ...]


class Level(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"


_LEVEL_ALIASES = {
    "failure-note": Level.NOTE,
    "error: internal compiler error": Level.ERROR,
}


class Span(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    file: str = Field(validation_alias=AliasChoices("file", "file_name"))
    line: int = Field(validation_alias=AliasChoices("line", "line_start"))
    column: int = Field(validation_alias=AliasChoices("column", "column_start"))
    line_end: int | None = None
    column_end: int | None = None
    is_primary: bool = False
    label: str | None = None


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    level: Level
    message: str
    code: str | None = None
    spans: tuple[Span, ...] = ()
    children: tuple["Diagnostic", ...] = ()

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _LEVEL_ALIASES.get(value, value)
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _unwrap_code(cls, value: Any) -> Any:
        # rustc emits {"code": "E0425", "explanation": "..."}
        if isinstance(value, dict):
            return value.get("code")
        return value


Diagnostic.model_rebuild()  # necessary for recursive types


class TextField(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: FieldPath
    original: str


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    translated: str
    created_at: datetime
