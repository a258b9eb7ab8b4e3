"""DEBUG-level call tracing for the distance, query and layout modules."""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxstring = 80
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6

_WRAPPED_FLAG = "_protoscape_traced"


def _summarize_array(value: np.ndarray, max_items: int) -> str:
    head = f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype}"
    if value.size == 0:
        return head + ")"
    if value.size <= max_items:
        return head + f", values={np.round(value, 6).tolist()!r})"
    return head + f", min={float(value.min()):.6g}, max={float(value.max()):.6g})"


def _summarize_sequence(value: Sequence[Any], max_items: int) -> str:
    kinds = {type(item).__name__ for item in value}
    if len(value) > max_items and len(kinds) == 1:
        # long homogeneous lists (edges, nodes) are summarized by count only
        return f"[{len(value)} x {kinds.pop()}]"
    shown = [safe_repr(item, max_items=max_items) for item in list(value)[:max_items]]
    if len(value) > max_items:
        shown.append(f"... +{len(value) - max_items}")
    open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
    return open_br + ", ".join(shown) + close_br


def safe_repr(value: Any, *, max_items: int = 5, max_length: int = 300) -> str:
    """Compact, exception-free representation used in trace lines."""

    if isinstance(value, np.ndarray):
        return _summarize_array(value, max_items)
    if isinstance(value, (list, tuple)):
        return _summarize_sequence(value, max_items)
    if isinstance(value, dict):
        items = [f"{k!r}: {safe_repr(v, max_items=max_items)}" for k, v in list(value.items())[:max_items]]
        if len(value) > max_items:
            items.append(f"... +{len(value) - max_items}")
        return "{" + ", ".join(items) + "}"
    try:
        rendered = _repr.repr(value)
    except Exception as exc:  # pragma: no cover - repr of foreign objects
        rendered = f"<unrepresentable {type(value).__name__}: {exc!r}>"
    if len(rendered) > max_length:
        rendered = rendered[:max_length] + "..."
    return rendered


def _describe_call(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [safe_repr(arg) for arg in args]
    parts.extend(f"{key}={safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(parts)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator logging entry, exit and exceptions of a callable at DEBUG."""

    def decorator(func: F) -> F:
        if getattr(func, _WRAPPED_FLAG, False):
            return func
        label = name or getattr(func, "__qualname__", repr(func))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            traced = logger.isEnabledFor(logging.DEBUG)
            if traced:
                logger.debug("-> %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                if traced:
                    logger.debug("!! %s raised %s: %s", label, type(exc).__name__, exc)
                raise
            if traced:
                logger.debug("<- %s = %s", label, safe_repr(result) if log_result else "...")
            return result

        setattr(wrapper, _WRAPPED_FLAG, True)
        return cast(F, wrapper)

    return decorator


def _trace_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr, value in list(cls.__dict__.items()):
        qualified = f"{cls.__name__}.{attr}"
        if attr.startswith("__") or attr in skip or qualified in skip:
            continue
        if isinstance(value, (staticmethod, classmethod)):
            func = value.__func__
            if getattr(func, "__module__", None) == cls.__module__:
                setattr(cls, attr, type(value)(debug_log_call(logger, name=qualified)(func)))
        elif inspect.isfunction(value) and value.__module__ == cls.__module__:
            setattr(cls, attr, debug_log_call(logger, name=qualified)(value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = True,
) -> None:
    """Wrap the functions (and class methods) defined in a module namespace."""

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(str(module_name))
    skipped: Set[str] = set(skip or ())

    for attr, value in list(namespace.items()):
        if attr in skipped:
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[attr] = debug_log_call(logger, name=attr)(value)
        elif wrap_methods and inspect.isclass(value) and value.__module__ == module_name:
            _trace_class(value, logger, skipped)


__all__ = ["apply_debug_logging", "debug_log_call", "safe_repr"]
