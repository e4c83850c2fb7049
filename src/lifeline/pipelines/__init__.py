"""Import/export pipelines that write into the event store.

- :class:`CSVImportPipeline`: validate-then-merge CSV import (``csv_import.py``).
- :class:`JSONCodec`: whole-store JSON export and replace-import (``json_codec.py``).
"""

from __future__ import annotations

from .csv_import import CSV_TEMPLATE, CSVImportPipeline, RowValidationError, csv_template
from .json_codec import JSONCodec, dump_events

__all__ = [
    "CSV_TEMPLATE",
    "CSVImportPipeline",
    "JSONCodec",
    "RowValidationError",
    "csv_template",
    "dump_events",
]
