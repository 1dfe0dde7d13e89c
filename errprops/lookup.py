from __future__ import annotations
from typing import Any, Optional, Tuple

from .capabilities import as_props, cause_of

__all__ = ["get", "get_optional"]


def get(err: Optional[BaseException], key: Any) -> Tuple[Any, bool]:
    """Return `(value, True)` for the nearest `key` in `err`'s causal ancestry.

    Resolution, starting at `err`:
      - if the error carries properties, its own (newest) value for `key` wins;
      - else move on to its cause and repeat;
      - an error without a cause ends the search with `(None, False)`.

    Values set closer to `err` shadow values set deeper in its cause chain.
    """
    while err is not None:
        props = as_props(err)
        if props is not None:
            value, ok = props.get(key)
            if ok:
                return value, True
        err = cause_of(err)
    return None, False


def get_optional(err: Optional[BaseException], key: Any, default: Any = None) -> Any:
    """Like `get` but returns only the value, or `default` if `key` isn't set."""
    value, ok = get(err, key)
    return value if ok else default
