# errprops/wrapping.py
"""Errors that carry a cause and the stack they were created on.

`new()` and `wrap()` give the capability interfaces first-party implementors:
both record a stack trace at creation time, `Wrapped` reports its cause, and
both render themselves under the '+' and '#' format flags.
"""
from __future__ import annotations
from io import StringIO
from traceback import StackSummary
from typing import Optional
import sys
import traceback

from .capabilities import FormatFlags, Sink, cause_of
from .config import get_settings
from .formatting import format_stack, render_error

__all__ = ["Fundamental", "Wrapped", "new", "root_cause", "wrap"]


def _capture(skip: int) -> Optional[StackSummary]:
    # skip counts frames above _capture: 1 is the factory, 2 its caller.
    settings = get_settings()
    if not settings.capture_stacktrace:
        return None
    return traceback.extract_stack(sys._getframe(skip + 1), limit=settings.stack_limit)


class _Traced(Exception):
    def __init__(self, message: str, stack: Optional[StackSummary] = None):
        super().__init__(message)
        self._message = message
        self._stack = stack

    @property
    def message(self) -> str:
        return self._message

    def stacktrace(self) -> Optional[StackSummary]:
        if self._stack is not None:
            return self._stack
        if self.__traceback__ is not None:
            return traceback.extract_tb(self.__traceback__)
        return None

    def _write_stack(self, sink: Sink) -> None:
        trace = format_stack(self.stacktrace())
        if trace:
            sink.write("\n")
            sink.write(trace)

    def __format__(self, spec: str) -> str:
        buf = StringIO()
        self.format_to(buf, FormatFlags.parse(spec))
        return buf.getvalue()

    def format_to(self, sink: Sink, flags: FormatFlags) -> None:
        raise NotImplementedError


class Fundamental(_Traced):
    """A root error: message plus the stack it was created on. No cause."""

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._message!r})"

    def format_to(self, sink: Sink, flags: FormatFlags) -> None:
        if flags.plus:
            sink.write(self._message)
            self._write_stack(sink)
        elif flags.sharp:
            sink.write(repr(self))
        else:
            sink.write(self._message)


class Wrapped(_Traced):
    """Annotates a cause with a message and the stack `wrap()` was called on."""

    def __init__(self, cause: BaseException, message: str, stack: Optional[StackSummary] = None):
        super().__init__(message, stack)
        self._cause = cause
        self.__cause__ = cause

    def cause(self) -> BaseException:
        return self._cause

    def __str__(self) -> str:
        if not self._message:
            return str(self._cause)
        return f"{self._message}: {self._cause}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._cause!r}, {self._message!r})"

    def format_to(self, sink: Sink, flags: FormatFlags) -> None:
        if flags.plus:
            render_error(self._cause, sink, flags)
            if self._message:
                sink.write("\n")
                sink.write(self._message)
            self._write_stack(sink)
        elif flags.sharp:
            sink.write(repr(self))
        else:
            sink.write(str(self))


def new(message: str) -> Fundamental:
    """Return an error with `message` and the caller's stack trace."""
    return Fundamental(message, _capture(1))


def wrap(err: Optional[BaseException], message: str) -> Optional[Wrapped]:
    """Return `err` annotated with `message` and the caller's stack trace.

    Returns None when `err` is None, so `return wrap(maybe_err, "...")` is safe.
    """
    if err is None:
        return None
    return Wrapped(err, message, _capture(1))


def root_cause(err: Optional[BaseException]) -> Optional[BaseException]:
    """Follow causes until reaching an error that has none."""
    if err is None:
        return None
    while True:
        c = cause_of(err)
        if c is None:
            return err
        err = c
