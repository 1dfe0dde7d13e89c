"""Immutable key/value decoration of error values.

`from_error(err)` wraps any exception in a chain root that forwards cause,
stack trace and formatting to it. Each `with_value(key, value)` returns a new
link on top of the receiver; nothing is ever modified in place, so chains
can share suffixes and be read from any number of threads.

    err = from_error(exc).with_value("id", 42)
    str(err)          # same as str(exc)
    f"{err}"          # "[id=42] " + str(exc)
    f"{err:+}"        # verbose: keys, values and exc rendered with '+'
"""
from __future__ import annotations
from io import StringIO
from traceback import StackSummary
from typing import Any, Iterator, Optional, Tuple

from .capabilities import FormatFlags, Sink, as_props, cause_of, stacktrace_of
from .config import get_settings
from .errors import NotAnErrorError
from .formatting import render_error, render_value

__all__ = ["PropError", "from_error"]


class PropError(Exception):
    """An exception carrying key/value pairs on top of a wrapped error.

    Never construct directly; use `from_error()` and `with_value()`.
    `str()` is always the wrapped error's message. The pairs show up only
    in flag-aware renderings (`format()`, f-strings) and through `get()`.
    """

    def __new__(cls, *args: Any, **kwargs: Any) -> "PropError":
        if cls is PropError:
            raise TypeError("PropError cannot be instantiated directly; use from_error()")
        return super().__new__(cls, *args, **kwargs)

    def _root(self) -> "_BaseError":
        raise NotImplementedError

    @property
    def error(self) -> BaseException:
        """The exception this chain decorates."""
        return self._root()._error

    def cause(self) -> Optional[BaseException]:
        return cause_of(self.error)

    def stacktrace(self) -> Optional[StackSummary]:
        return stacktrace_of(self.error)

    def get(self, key: Any) -> Tuple[Any, bool]:
        raise NotImplementedError

    def with_value(self, key: Any, value: Any) -> "PropError":
        """Return a copy of this error with `key` set to `value`. `self` is unchanged."""
        return _KeyValueError(self, key, value)

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """Yield this chain's pairs newest first, shadowed pairs included."""
        node: PropError = self
        while isinstance(node, _KeyValueError):
            yield node._key, node._value
            node = node._predecessor

    # ---- formatting ----

    def format_to(self, sink: Sink, flags: FormatFlags) -> None:
        settings = get_settings()
        first = True
        for key, value in self.items():
            sink.write(settings.open_bracket if first else settings.pair_separator)
            first = False
            render_value(key, sink, flags)
            sink.write(settings.key_value_separator)
            render_value(value, sink, flags)
        if not first:
            sink.write(settings.close_bracket)
        self._root()._format_base(sink, flags)

    def __format__(self, spec: str) -> str:
        buf = StringIO()
        self.format_to(buf, FormatFlags.parse(spec))
        return buf.getvalue()

    def __str__(self) -> str:
        return str(self.error)

    def __repr__(self) -> str:
        pairs = list(self.items())
        pairs.reverse()
        calls = "".join(f".with_value({k!r}, {v!r})" for k, v in pairs)
        return f"from_error({self.error!r}){calls}"


class _BaseError(PropError):
    """Chain root: no pairs of its own, forwards everything to the wrapped error."""

    def __init__(self, error: BaseException):
        super().__init__(error)
        self._error = error

    def _root(self) -> "_BaseError":
        return self

    def get(self, key: Any) -> Tuple[Any, bool]:
        props = as_props(self._error)
        if props is not None:
            return props.get(key)
        return None, False

    def _format_base(self, sink: Sink, flags: FormatFlags) -> None:
        render_error(self._error, sink, flags)


class _KeyValueError(PropError):
    """One key/value pair stacked on a predecessor in the decoration chain."""

    def __init__(self, predecessor: PropError, key: Any, value: Any):
        root = predecessor._root()
        super().__init__(root._error)
        self._predecessor = predecessor
        self._base = root
        self._key = key
        self._value = value

    @property
    def key(self) -> Any:
        return self._key

    @property
    def value(self) -> Any:
        return self._value

    @property
    def predecessor(self) -> PropError:
        return self._predecessor

    def _root(self) -> _BaseError:
        return self._base

    def get(self, key: Any) -> Tuple[Any, bool]:
        # Walks the decoration chain only; the cause chain is lookup.get's job.
        node: PropError = self
        while isinstance(node, _KeyValueError):
            if node._key == key:
                return node._value, True
            node = node._predecessor
        return node.get(key)


def from_error(err: BaseException) -> PropError:
    """Return a PropError that can carry properties for `err`. `err` is not modified.

    Intended for a fluent style:

        raise from_error(exc).with_value("user", uid).with_value("attempt", n)
    """
    if not isinstance(err, BaseException):
        raise NotAnErrorError(f"from_error() needs an exception, got {type(err).__name__}")
    return _BaseError(err)
