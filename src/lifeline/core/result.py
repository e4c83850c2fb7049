"""Lightweight, typed Result container for explicit success/failure returns.

Motivation
----------
The CSV import runs a full validation pass before anything touches the store.
Each row validator returns a `Result` instead of raising, so the pass can stop
at the first `Err` and hand it back with its line number, and the commit pass
only ever sees rows that are known to be good.

- `Ok(value)` / `Err(error)` variants,
- combinators: `map`, `flat_map`,
- helpers: `unwrap`, `unwrap_err`,
- `collect`: fold an iterable of results into one, stopping at the first `Err`.

Example
-------
>>> from lifeline.core.result import ok, err, Result
>>> def parse_int(x: str) -> Result[int, str]:
...     return ok(int(x)) if x.isdigit() else err("not a digit")
>>> ok("42").flat_map(parse_int).unwrap()
42
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class Result(Generic[T, E]):
    """Sum type representing either success (`Ok[T]`) or failure (`Err[E]`)."""

    # ----- Introspection -----------------------------------------------------
    def is_ok(self) -> bool:
        """Return ``True`` if this is an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` if this is an :class:`Err` value."""
        return isinstance(self, Err)

    # ----- Unwraps -----------------------------------------------------------
    def unwrap(self) -> T:
        """Return the inner value if ``Ok``, else raise ``RuntimeError``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def unwrap_err(self) -> E:
        """Return the error value if ``Err``, else raise."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")

    # ----- Combinators -------------------------------------------------------
    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Apply ``fn`` to the success value; propagate error unchanged."""
        if isinstance(self, Ok):
            return Ok(fn(cast(Ok[T, E], self).value))
        return cast(Result[U, E], self)

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain computations that already return a :class:`Result`."""
        if isinstance(self, Ok):
            return fn(cast(Ok[T, E], self).value)
        return cast(Result[U, E], self)


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


# ----- Convenience constructors ----------------------------------------------
def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` with better type inference at call sites."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` with better type inference at call sites."""
    return Err(error)


def collect(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
    """Gather every `Ok` value in order, or return the first `Err` encountered.

    The iterable is consumed lazily, so producers after the first failure are
    never evaluated.
    """
    values: list[T] = []
    for res in results:
        if isinstance(res, Err):
            return cast(Result[list[T], E], res)
        values.append(res.unwrap())
    return Ok(values)


__all__ = ["Result", "Ok", "Err", "ok", "err", "collect"]
