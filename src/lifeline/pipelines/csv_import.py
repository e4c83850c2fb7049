"""CSV import pipeline: parse, validate, dedup and merge rows into the store.

Input format
------------
Line 1 is a header (its content is ignored, only its presence matters). Every
following non-blank line is ``Category,Title,StartDate,EndDate,Notes`` with
dates as ``YYYY-MM-DD``. Any field may be wrapped in double quotes to embed
literal commas; a quote character toggles "inside quotes" mode and is not
kept, there is no escaping.

Passes
------
1. **Validate** every row. Rows missing a title or a start date are skipped
   silently. The first bad category, start date or end date stops the pass
   and comes back as an ``Err(RowIssue)`` carrying the line number.
2. **Commit** only if the whole validation pass succeeded: drop rows whose
   ``(category, title, start)`` already exists in the store, then append the
   rest with fresh ids in one store mutation. Repeated rows within the file
   are all appended.

A failed import therefore never changes the store.

Line numbers count non-blank lines, header included, so the first data row is
line 2 even if blank lines precede it.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime

from lifeline.core.contracts.event import Category, EventDraft, LifeEvent
from lifeline.core.contracts.imports import ImportReport, RowField, RowIssue
from lifeline.core.errors import ValidationError
from lifeline.core.result import Result, collect, err, ok
from lifeline.core.settings import get_logger
from lifeline.core.store.memory import EventStore

logger = get_logger("lifeline.import.csv")

CSV_TEMPLATE = "\n".join(
    [
        "Category,Title,Start Date,End Date,Notes",
        'Residence,"My First Apartment",2023-01-01,2024-01-01,"Great location near downtown"',
        'Job,"Software Developer",2023-06-01,,"Working at a tech startup"',
        'Vehicle,"Honda Civic",2022-03-15,2024-03-15,"Reliable car for commuting"',
    ]
)

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FIELDS = 5


class RowValidationError(ValidationError):
    """A CSV row failed validation; `issue` pinpoints the line and value."""

    def __init__(self, issue: RowIssue) -> None:
        super().__init__(issue.message)
        self.issue = issue


def split_lines(text: str) -> list[str]:
    """Split on newlines and drop blank lines."""
    return [line for line in text.split("\n") if line.strip()]


def parse_csv_line(line: str) -> list[str]:
    """Split one line on commas that are not inside double quotes.

    >>> parse_csv_line('Job, "Dev, senior" ,2020-01-01,,')
    ['Job', 'Dev, senior', '2020-01-01', '', '']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


@dataclass(frozen=True, slots=True)
class CsvRow:
    """Five positional fields of one data line plus its line number."""

    line: int
    category: str
    title: str
    start: str
    end: str
    notes: str

    @classmethod
    def from_fields(cls, line: int, fields: list[str]) -> CsvRow:
        padded = (fields + [""] * _FIELDS)[:_FIELDS]
        return cls(line, *padded)

    @property
    def incomplete(self) -> bool:
        return not self.title or not self.start


@dataclass(frozen=True, slots=True)
class ValidatedImport:
    """Output of the validation pass: accepted drafts and the blank-row count."""

    drafts: list[EventDraft]
    skipped_blank: int


def parse_day(value: str) -> Result[date, str]:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    if not _ISO_DAY.match(value):
        return err(value)
    try:
        return ok(datetime.strptime(value, "%Y-%m-%d").date())
    except ValueError:
        return err(value)


def _bad(row: CsvRow, field: RowField, value: str, message: str) -> RowIssue:
    return RowIssue(line=row.line, field=field, value=value, message=message)


def validate_row(row: CsvRow) -> Result[EventDraft, RowIssue]:
    """Check category, then start, then end; the first failure wins."""
    if row.category not in Category.names():
        return err(
            _bad(
                row,
                "category",
                row.category,
                f'Invalid category "{row.category}" on line {row.line}. '
                f"Must be one of: {', '.join(Category.names())}",
            )
        )
    start = parse_day(row.start)
    if start.is_err():
        return err(
            _bad(row, "start", row.start, f'Invalid start date "{row.start}" on line {row.line}')
        )
    end = parse_day(row.end) if row.end else ok(None)
    if end.is_err():
        return err(_bad(row, "end", row.end, f'Invalid end date "{row.end}" on line {row.line}'))
    return end.map(
        lambda end_day: EventDraft(
            category=Category(row.category),
            title=row.title,
            start=start.unwrap(),
            end=end_day,
            notes=row.notes,
        )
    )


class CSVImportPipeline:
    """Validate-then-commit CSV import bound to one `EventStore`."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def rows(self, text: str) -> list[CsvRow]:
        """Map the data lines of `text` to rows (header dropped).

        Raises
        ------
        ValidationError
            Fewer than two non-blank lines (no header or no data row).
        """
        lines = split_lines(text)
        if len(lines) < 2:
            raise ValidationError("CSV must have at least a header row and one data row")
        return [
            CsvRow.from_fields(number, parse_csv_line(line))
            for number, line in enumerate(lines[1:], start=2)
        ]

    def validate(self, text: str) -> Result[ValidatedImport, RowIssue]:
        """Run the validation pass without touching the store."""
        rows = self.rows(text)
        complete = [r for r in rows if not r.incomplete]
        checked: Iterator[Result[EventDraft, RowIssue]] = (validate_row(r) for r in complete)
        return collect(checked).map(
            lambda drafts: ValidatedImport(drafts=drafts, skipped_blank=len(rows) - len(complete))
        )

    def run(self, text: str) -> ImportReport:
        """Import `text`; all-or-nothing.

        Raises
        ------
        ValidationError
            The file has no data rows, or a row failed validation
            (`RowValidationError`, with the offending line number).
        """
        outcome = self.validate(text)
        if outcome.is_err():
            issue = outcome.unwrap_err()
            logger.warning("CSV import rejected: %s", issue.message)
            raise RowValidationError(issue)

        validated = outcome.unwrap()
        existing = {e.dedup_key() for e in self._store.events()}
        fresh: list[LifeEvent] = []
        for draft in validated.drafts:
            if (draft.category, draft.title, draft.start) in existing:
                continue
            fresh.append(LifeEvent.model_validate({**draft.model_dump(), "id": self._store.new_id()}))

        appended = self._store.extend(fresh)
        report = ImportReport(
            kind="csv",
            imported=appended,
            skipped_blank=validated.skipped_blank,
            skipped_duplicate=len(validated.drafts) - appended,
        )
        logger.info(
            "CSV import: %d added, %d duplicate, %d blank",
            report.imported,
            report.skipped_duplicate,
            report.skipped_blank,
        )
        return report


def csv_template() -> str:
    """Return the downloadable template text."""
    return CSV_TEMPLATE


__all__ = [
    "CSV_TEMPLATE",
    "CSVImportPipeline",
    "CsvRow",
    "RowValidationError",
    "ValidatedImport",
    "csv_template",
    "parse_csv_line",
    "parse_day",
    "split_lines",
    "validate_row",
]
