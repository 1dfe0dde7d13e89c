from __future__ import annotations

import pytest

import errprops
from errprops import from_error
from errprops.errors import (
    ConfigError,
    ErrpropsError,
    FormatSpecError,
    NotAnErrorError,
    format_error,
)


def test_error_hierarchy():
    # Every typed error must be an ErrpropsError
    assert issubclass(ConfigError, ErrpropsError)
    assert issubclass(FormatSpecError, ErrpropsError)
    assert issubclass(NotAnErrorError, ErrpropsError)
    # ...and keep the builtin it specializes catchable
    assert issubclass(FormatSpecError, ValueError)
    assert issubclass(NotAnErrorError, TypeError)


def test_format_error_prefix_and_message():
    e = ConfigError("errprops: unknown key(s) foo")
    s = format_error(e)
    assert s.startswith("ConfigError:")
    assert "unknown key" in s
    # Empty message uses class name only
    assert format_error(FormatSpecError("")) == "FormatSpecError"


def test_format_error_uses_wrapped_message_for_prop_errors():
    err = from_error(ValueError("bad input")).with_value("field", "age")
    assert format_error(err).endswith(": bad input")
    assert "field" not in format_error(err)


def test_errors_module_all_is_sorted():
    assert errprops.errors.__all__ == sorted(errprops.errors.__all__)


def test_not_an_error_message_names_the_type():
    with pytest.raises(NotAnErrorError) as ei:
        from_error(42)  # type: ignore[arg-type]
    assert "int" in str(ei.value)
