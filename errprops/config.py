from __future__ import annotations
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Iterator, Optional
import logging
import os
import threading

import yaml

from .errors import ConfigError, format_error

_logger = logging.getLogger(__name__)
_LOG_ONCE_KEYS = set()
_LOG_ONCE_LOCK = threading.Lock()

CONFIG_ENV = "ERRPROPS_CONFIG"


def _log_once(key: str, level: int, msg: str) -> None:
    with _LOG_ONCE_LOCK:
        if key in _LOG_ONCE_KEYS:
            return
        _LOG_ONCE_KEYS.add(key)
    _logger.log(level, msg)


@dataclass(frozen=True)
class Settings:
    """Rendering and stack-capture knobs.

    The bracket/separator defaults render `[b=2,a=1] cause`.
    """

    open_bracket: str = "["
    close_bracket: str = "] "
    pair_separator: str = ","
    key_value_separator: str = "="
    traceback_limit: Optional[int] = None  # frames shown in verbose renderings
    capture_stacktrace: bool = True
    stack_limit: Optional[int] = None  # frames captured by new()/wrap()


_STR_KEYS = {"open_bracket", "close_bracket", "pair_separator", "key_value_separator"}
_LIMIT_KEYS = {"traceback_limit", "stack_limit"}
_BOOL_KEYS = {"capture_stacktrace"}


# ---- small helpers --------------------------------------------------------

def _parse_bool_env(v: str) -> Optional[bool]:
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    return None


def _parse_limit_env(v: str) -> Optional[int]:
    s = str(v).strip().lower()
    if s in {"", "none", "unlimited"}:
        return None
    n = int(s)
    if n < 0:
        raise ValueError(f"negative limit {n}")
    return n


def _validate(data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"errprops: unknown key(s) {', '.join(unknown)}")
    out: Dict[str, Any] = {}
    for k, v in data.items():
        if k in _STR_KEYS:
            if not isinstance(v, str):
                raise ConfigError(f"errprops.{k} must be a string, got {type(v).__name__}")
        elif k in _LIMIT_KEYS:
            if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 0):
                raise ConfigError(f"errprops.{k} must be a non-negative integer or null")
        elif k in _BOOL_KEYS:
            if not isinstance(v, bool):
                raise ConfigError(f"errprops.{k} must be a boolean")
        out[k] = v
    return out


def _apply_env_overrides(settings: Settings) -> Settings:
    """
    Merge env overrides into loaded settings (no effect if env vars absent).
    Supported:
      - ERRPROPS_TRACEBACK_LIMIT=<n>|none
      - ERRPROPS_STACK_LIMIT=<n>|none
      - ERRPROPS_CAPTURE_STACKTRACE=true|false
    Unparseable values are logged once and ignored.
    """
    overrides: Dict[str, Any] = {}
    for env, key in (
        ("ERRPROPS_TRACEBACK_LIMIT", "traceback_limit"),
        ("ERRPROPS_STACK_LIMIT", "stack_limit"),
    ):
        raw = os.getenv(env)
        if raw is None:
            continue
        try:
            overrides[key] = _parse_limit_env(raw)
        except ValueError:
            _log_once(f"env:{env}:{raw}", logging.WARNING, f"ignoring {env}={raw!r}: not a limit")

    raw = os.getenv("ERRPROPS_CAPTURE_STACKTRACE")
    if raw is not None:
        b = _parse_bool_env(raw)
        if b is None:
            _log_once(
                f"env:ERRPROPS_CAPTURE_STACKTRACE:{raw}",
                logging.WARNING,
                f"ignoring ERRPROPS_CAPTURE_STACKTRACE={raw!r}: not a boolean",
            )
        else:
            overrides["capture_stacktrace"] = b

    return replace(settings, **overrides) if overrides else settings


# ---- loader ---------------------------------------------------------------

def load_settings(path: str | None = None) -> Settings:
    """
    Load settings from a YAML file, then apply env overrides.
    Behavior:
      * `path` defaults to $ERRPROPS_CONFIG; no path or a missing file yields defaults.
      * The mapping may be nested under a top-level `errprops:` key.
      * Unknown keys and wrongly typed values raise ConfigError.
    """
    path = path or os.getenv(CONFIG_ENV)
    if not path:
        return _apply_env_overrides(Settings())

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        _logger.debug("errprops settings file %s not found; using defaults", path)
        return _apply_env_overrides(Settings())
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"errprops: cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"errprops: cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"errprops: {path} must contain a mapping")
    if "errprops" in data:
        section = data["errprops"] or {}
        if not isinstance(section, dict):
            raise ConfigError("errprops: 'errprops' section must be a mapping")
        data = section

    _logger.debug("errprops settings loaded from %s", path)
    return _apply_env_overrides(Settings(**_validate(data)))


# ---- active settings ------------------------------------------------------

# Holds the settings for the current task/thread; None means "load on first use".
_ACTIVE: ContextVar[Optional[Settings]] = ContextVar("ERRPROPS_SETTINGS", default=None)
_DEFAULT: Optional[Settings] = None
_DEFAULT_LOCK = threading.Lock()


def get_settings() -> Settings:
    """Return the active settings, loading process defaults on first use.

    Never raises: a broken settings file is logged once and the defaults
    (plus env overrides) are used.
    """
    global _DEFAULT
    s = _ACTIVE.get()
    if s is not None:
        return s
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            try:
                _DEFAULT = load_settings()
            except ConfigError as e:
                _log_once(
                    f"load:{e}", logging.WARNING, f"using default settings: {format_error(e)}"
                )
                _DEFAULT = _apply_env_overrides(Settings())
        return _DEFAULT


def set_settings(settings: Optional[Settings]) -> Token:
    """Activate settings for the current context and return a reset token."""
    return _ACTIVE.set(settings)


def reset_settings(token: Token) -> None:
    """Reset the settings context back to a previous state using the token."""
    _ACTIVE.reset(token)


def clear_cached_defaults() -> None:
    """Forget the lazily loaded process defaults (re-read env on next use)."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        _DEFAULT = None


@contextmanager
def use_settings(settings: Settings) -> Iterator[Settings]:
    """Scope `settings` to a with-block."""
    token = set_settings(settings)
    try:
        yield settings
    finally:
        reset_settings(token)
