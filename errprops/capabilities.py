# errprops/capabilities.py
from __future__ import annotations
from dataclasses import dataclass
from traceback import StackSummary
from typing import Any, Optional, Protocol, Tuple, runtime_checkable
import traceback

from .errors import FormatSpecError

__all__ = [
    "FlagAwareFormatter",
    "FormatFlags",
    "HasCause",
    "HasProps",
    "HasStacktrace",
    "Sink",
    "as_cause",
    "as_formatter",
    "as_props",
    "as_stacktrace",
    "cause_of",
    "stacktrace_of",
]


@dataclass(frozen=True)
class FormatFlags:
    """Detail flags threaded unchanged through a whole rendering.

    plus  -- verbose ('+'): stack traces, verbose renderings of values.
    sharp -- debug ('#'): repr() renderings.
    """

    plus: bool = False
    sharp: bool = False

    @classmethod
    def parse(cls, spec: str) -> "FormatFlags":
        bad = set(spec) - {"+", "#"}
        if bad:
            raise FormatSpecError(
                f"unsupported format spec {spec!r}: only '+' and '#' flags are allowed"
            )
        return cls(plus="+" in spec, sharp="#" in spec)


# ---- Protocols (capabilities) ----


class Sink(Protocol):
    def write(self, s: str) -> Any: ...


@runtime_checkable
class HasCause(Protocol):
    def cause(self) -> Optional[BaseException]: ...


@runtime_checkable
class HasStacktrace(Protocol):
    def stacktrace(self) -> Optional[StackSummary]: ...


@runtime_checkable
class HasProps(Protocol):
    # Node-local only: implementations must not look into their cause.
    def get(self, key: Any) -> Tuple[Any, bool]: ...


@runtime_checkable
class FlagAwareFormatter(Protocol):
    def format_to(self, sink: Sink, flags: FormatFlags) -> None: ...


# ---- capability queries ----


def _implements(obj: Any, proto: type, member: str) -> bool:
    # runtime_checkable only checks presence; a plain `cause` field must not qualify.
    return isinstance(obj, proto) and callable(getattr(obj, member, None))


def as_cause(err: Any) -> Optional[HasCause]:
    return err if _implements(err, HasCause, "cause") else None


def as_stacktrace(err: Any) -> Optional[HasStacktrace]:
    return err if _implements(err, HasStacktrace, "stacktrace") else None


def as_props(err: Any) -> Optional[HasProps]:
    return err if _implements(err, HasProps, "get") else None


def as_formatter(err: Any) -> Optional[FlagAwareFormatter]:
    return err if _implements(err, FlagAwareFormatter, "format_to") else None


def cause_of(err: Any) -> Optional[BaseException]:
    """Immediate cause of `err`, or None.

    An explicit `cause()` wins. Native exceptions chained with
    `raise ... from ...` report `__cause__`; `__context__` is never a cause.
    """
    if err is None:
        return None
    c = as_cause(err)
    if c is not None:
        return c.cause()
    if isinstance(err, BaseException):
        return err.__cause__
    return None


def stacktrace_of(err: Any) -> Optional[StackSummary]:
    """Stack trace of `err`: explicit `stacktrace()` first, then the frames it was raised through."""
    if err is None:
        return None
    s = as_stacktrace(err)
    if s is not None:
        return s.stacktrace()
    if isinstance(err, BaseException) and err.__traceback__ is not None:
        return traceback.extract_tb(err.__traceback__)
    return None
