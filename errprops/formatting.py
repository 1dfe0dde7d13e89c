"""Flag-aware rendering of keys, values and wrapped errors.

Every function takes the sink and the active `FormatFlags` and passes the
flags on unchanged, so one `format(err, "+")` call renders the whole chain,
down to the innermost wrapped error, at the same level of detail.
"""
from __future__ import annotations
from io import StringIO
from traceback import StackSummary
from typing import Any, Optional

from .capabilities import FormatFlags, Sink, as_formatter, stacktrace_of
from .config import get_settings

__all__ = ["format_stack", "render", "render_error", "render_value"]


def format_stack(stack: Optional[StackSummary], limit: Optional[int] = None) -> str:
    """Render frames the way tracebacks do, keeping the `limit` frames nearest the error."""
    if not stack:
        return ""
    if limit is None:
        limit = get_settings().traceback_limit
    frames = list(stack)
    if limit is not None:
        frames = frames[-limit:] if limit else []
    return "".join(StackSummary.from_list(frames).format()).rstrip("\n")


def render_error(err: BaseException, sink: Sink, flags: FormatFlags) -> None:
    f = as_formatter(err)
    if f is not None:
        f.format_to(sink, flags)
        return
    if flags.plus:
        sink.write(str(err))
        trace = format_stack(stacktrace_of(err))
        if trace:
            sink.write("\n")
            sink.write(trace)
    elif flags.sharp:
        sink.write(repr(err))
    else:
        sink.write(str(err))


def render_value(obj: Any, sink: Sink, flags: FormatFlags) -> None:
    # '+' wins over '#' for keys and values.
    f = as_formatter(obj)
    if f is not None:
        f.format_to(sink, flags)
    elif flags.plus:
        if isinstance(obj, BaseException):
            render_error(obj, sink, flags)
        else:
            sink.write(str(obj))
    elif flags.sharp:
        sink.write(repr(obj))
    else:
        sink.write(str(obj))


def render(obj: Any, flags: FormatFlags) -> str:
    """Render `obj` (error or value) to a string."""
    buf = StringIO()
    if isinstance(obj, BaseException):
        render_error(obj, buf, flags)
    else:
        render_value(obj, buf, flags)
    return buf.getvalue()
