from __future__ import annotations

from errprops import cause_of, new, root_cause, stacktrace_of, wrap
from errprops.config import Settings, use_settings
from errprops.wrapping import Fundamental, Wrapped


def test_new_records_callers_stack():
    err = new("hello")
    assert isinstance(err, Fundamental)
    assert str(err) == "hello"
    assert err.message == "hello"
    assert cause_of(err) is None

    stack = err.stacktrace()
    assert stack
    assert stack[-1].name == "test_new_records_callers_stack"
    assert stack[-1].filename.endswith("test_wrapping.py")


def test_wrap_chains_messages_and_causes():
    cause = new("cause")
    middle = wrap(cause, "middle")
    outer = wrap(middle, "outer")

    assert isinstance(outer, Wrapped)
    assert str(outer) == "outer: middle: cause"
    assert outer.cause() is middle
    assert outer.__cause__ is middle
    assert root_cause(outer) is cause
    assert outer.stacktrace()[-1].name == "test_wrap_chains_messages_and_causes"


def test_wrap_with_empty_message_keeps_cause_message():
    assert str(wrap(ValueError("root"), "")) == "root"


def test_wrap_none_is_none():
    assert wrap(None, "nothing") is None
    assert root_cause(None) is None


def test_root_cause_of_uncaused_error_is_itself():
    e = ValueError("x")
    assert root_cause(e) is e


def test_root_cause_follows_native_chaining():
    root = ValueError("root")
    try:
        try:
            raise root
        except ValueError as e:
            raise RuntimeError("outer") from e
    except RuntimeError as outer:
        assert root_cause(outer) is root


def test_stack_capture_can_be_disabled():
    with use_settings(Settings(capture_stacktrace=False)):
        err = new("no stack")
    assert err.stacktrace() is None
    assert format(err, "+") == "no stack"


def test_uncaptured_error_falls_back_to_raise_traceback():
    with use_settings(Settings(capture_stacktrace=False)):
        err = new("raised")
    try:
        raise err
    except Fundamental as e:
        stack = e.stacktrace()
    assert stack is not None
    assert stack[-1].name == "test_uncaptured_error_falls_back_to_raise_traceback"
    assert stacktrace_of(err) is not None


def test_stack_limit_bounds_capture():
    with use_settings(Settings(stack_limit=1)):
        err = new("short")
    stack = err.stacktrace()
    assert len(stack) == 1
    assert stack[0].name == "test_stack_limit_bounds_capture"


def test_sharp_rendering():
    err = wrap(new("root"), "outer")
    assert format(err, "#") == "Wrapped(Fundamental('root'), 'outer')"
    assert format(err) == "outer: root"


def test_traceback_limit_applies_to_verbose_rendering():
    err = new("msg")
    with use_settings(Settings(traceback_limit=1)):
        out = format(err, "+")
    lines = out.splitlines()
    assert lines[0] == "msg"
    assert "test_traceback_limit_applies_to_verbose_rendering" in lines[1]
    # one frame: the File line plus its source line
    assert len(lines) == 3
