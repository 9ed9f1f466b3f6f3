"""
Function registry and per-call context.

Host code creates a :class:`FunctionRegistry`, registers its functions with
:meth:`FunctionRegistry.register` and hands the registry to
:func:`callfn.main.mount` before the server starts.
"""

from __future__ import annotations

from .context import (
    CallContext,
    accountability_from_context,
    current_context,
    decode_trigger,
    trigger_from_context,
)
from .registry import FunctionDescriptor, FunctionRegistry, Shape, describe

__all__ = [
    "CallContext",
    "FunctionDescriptor",
    "FunctionRegistry",
    "Shape",
    "accountability_from_context",
    "current_context",
    "decode_trigger",
    "describe",
    "trigger_from_context",
]
