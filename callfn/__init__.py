"""
callfn - expose Python functions to a workflow engine over one HTTP endpoint.
"""

__version__ = "0.1.0"

from callfn.core.errors import (
    BadRequest,
    ConfigurationDefect,
    DispatchError,
    FunctionNotFound,
    InternalError,
    RemoteFunctionError,
    Unauthorized,
)
from callfn.functions import (
    CallContext,
    FunctionDescriptor,
    FunctionRegistry,
    Shape,
    accountability_from_context,
    current_context,
    decode_trigger,
    trigger_from_context,
)
from callfn.main import create_app, mount
from callfn.schemas.invoke import Accountability

__all__ = [
    "Accountability",
    "BadRequest",
    "CallContext",
    "ConfigurationDefect",
    "DispatchError",
    "FunctionDescriptor",
    "FunctionNotFound",
    "FunctionRegistry",
    "InternalError",
    "RemoteFunctionError",
    "Shape",
    "Unauthorized",
    "accountability_from_context",
    "create_app",
    "current_context",
    "decode_trigger",
    "mount",
    "trigger_from_context",
]
