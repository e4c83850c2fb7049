"""Error taxonomy shared by the store, the import pipelines and the outer surfaces.

- `ValidationError`: bad category, date or required field. The caller must
  correct the input and resubmit.
- `FormatError`: an import document that is not JSON, not an array, or holds
  elements that are not events.
- `NotFoundError`: an operation referenced an id the store does not hold.

`ValidationError` and `FormatError` are `ValueError`s so generic handlers
(e.g. the API's 400 mapping) pick them up; `NotFoundError` is a `LookupError`.
"""

from __future__ import annotations


class LifelineError(Exception):
    """Base class for every error raised by the Lifeline core."""


class ValidationError(LifelineError, ValueError):
    """Input failed a field-level rule (category, date, title)."""


class FormatError(LifelineError, ValueError):
    """An import document has the wrong structure."""


class NotFoundError(LifelineError, LookupError):
    """No event with the requested id exists."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id!r} not found")
        self.event_id = event_id


__all__ = ["LifelineError", "ValidationError", "FormatError", "NotFoundError"]
