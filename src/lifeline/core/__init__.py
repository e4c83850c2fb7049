"""Core package for Lifeline: contracts, store, query engine and projector."""

from __future__ import annotations

__all__ = ["__doc__"]
