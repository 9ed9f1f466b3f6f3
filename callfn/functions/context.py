"""Per-call metadata available to registered functions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import TypeAdapter

from callfn.schemas.invoke import Accountability

T = TypeVar("T")

_current: ContextVar[CallContext] = ContextVar("callfn_call_context")


@dataclass(frozen=True, slots=True)
class CallContext:
    """
    Out-of-band data that travels with a call but is not part of its payload.

    ``accountability`` and ``trigger`` are kept exactly as the caller sent
    them; the dispatcher never looks inside.
    """

    function_name: str
    accountability: dict[str, Any] | None = None
    trigger: dict[str, Any] | None = None


@contextmanager
def bind_context(ctx: CallContext) -> Iterator[CallContext]:
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


def current_context() -> CallContext:
    """
    Return the context of the call running in this task or thread.

    Raises
    ------
    LookupError
        If no dispatched call is in progress.
    """

    try:
        return _current.get()
    except LookupError:
        raise LookupError("No function call is in progress.") from None


def accountability_from_context(ctx: CallContext | None = None) -> Accountability | None:
    ctx = ctx or current_context()
    if ctx.accountability is None:
        return None
    return Accountability.model_validate(ctx.accountability)


def trigger_from_context(ctx: CallContext | None = None) -> dict[str, Any] | None:
    ctx = ctx or current_context()
    return ctx.trigger


def decode_trigger(target: type[T], ctx: CallContext | None = None) -> T | None:
    """Validate the raw trigger document into ``target``."""
    raw = trigger_from_context(ctx)
    if raw is None:
        return None
    return TypeAdapter(target).validate_python(raw)
