"""Lifeline: record personal life events and ask what was true on a given day."""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
