"""errprops — key/value properties on exceptions.

    err = errprops.from_error(exc).with_value("id", 42)
    errprops.get(err, "id")            # (42, True)
    errprops.get_optional(err, "nope") # None

Properties are found through any chain of causes, so a value attached deep
inside a wrapped error is visible from every error that wraps it.
This module also resolves `__version__` from the installed metadata.
"""
from __future__ import annotations

from . import errors as errors  # re-export for star-import; noqa: F401
from .capabilities import (
    FlagAwareFormatter,
    FormatFlags,
    HasCause,
    HasProps,
    HasStacktrace,
    cause_of,
    stacktrace_of,
)
from .config import Settings, get_settings, load_settings, use_settings
from .lookup import get, get_optional
from .props import PropError, from_error
from .wrapping import new, root_cause, wrap

from importlib.metadata import version as _pkg_version, PackageNotFoundError


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("errprops")
    except PackageNotFoundError:
        return None


__version__ = _version_from_metadata() or "0+unknown"

# Star-export surface (deterministic ordering). Tests require __all__ to be lexicographically sorted.
__all__ = [
    "FlagAwareFormatter",
    "FormatFlags",
    "HasCause",
    "HasProps",
    "HasStacktrace",
    "PropError",
    "Settings",
    "__version__",
    "cause_of",
    "errors",
    "from_error",
    "get",
    "get_optional",
    "get_settings",
    "load_settings",
    "new",
    "root_cause",
    "stacktrace_of",
    "use_settings",
    "wrap",
]
