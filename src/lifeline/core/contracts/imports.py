"""Import contracts: the outcome of a successful import and a rejected row."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ImportKind = Literal["csv", "json"]
RowField = Literal["category", "start", "end"]


class ImportReport(BaseModel):
    """Summary returned to the caller after an import commits."""

    kind: ImportKind
    imported: int = Field(ge=0, description="Events newly written to the store.")
    skipped_blank: int = Field(default=0, ge=0, description="Rows missing title or start.")
    skipped_duplicate: int = Field(default=0, ge=0, description="Rows already in the store.")


class RowIssue(BaseModel):
    """First validation failure found in a CSV import."""

    line: int = Field(ge=1, description="1-indexed line number, header counted.")
    field: RowField
    value: str
    message: str


__all__ = ["ImportKind", "ImportReport", "RowField", "RowIssue"]
