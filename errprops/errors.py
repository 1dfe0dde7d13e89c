from __future__ import annotations

"""Typed error taxonomy for errprops itself.

These are the only exceptions the library raises on its own behalf. Property
lookups never raise: a missing key is a normal `(None, False)` result.
"""

__all__ = [
    "ErrpropsError",
    "ConfigError",
    "FormatSpecError",
    "NotAnErrorError",
    "format_error",
]


class ErrpropsError(Exception):
    """Base class for errors raised by errprops."""
    pass


class ConfigError(ErrpropsError):
    """Settings file unreadable, unknown keys, wrong types or values."""
    pass


class FormatSpecError(ErrpropsError, ValueError):
    """Format spec contains something other than the '+' and '#' flags."""
    pass


class NotAnErrorError(ErrpropsError, TypeError):
    """A non-exception value was handed to from_error()."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
