"""Registry of functions exposed through the dispatch endpoint."""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, get_type_hints

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError
from starlette.concurrency import run_in_threadpool

from callfn.core.errors import BadRequest, ConfigurationDefect, InternalError
from callfn.functions.context import CallContext, bind_context

logger = logging.getLogger("callfn.registry")

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class Shape(enum.Enum):
    NO_PARAM_NO_RETURN = (False, False)
    NO_PARAM_WITH_RETURN = (False, True)
    PARAM_NO_RETURN = (True, False)
    PARAM_WITH_RETURN = (True, True)

    @property
    def takes_payload(self) -> bool:
        return self.value[0]

    @property
    def returns_value(self) -> bool:
        return self.value[1]


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    """
    A registered function together with its classified shape.

    The adapters are built once at registration so a request never has to
    inspect the function again.
    """

    name: str
    func: Callable[..., Any]
    shape: Shape
    is_async: bool
    payload_type: Any = None
    payload_adapter: TypeAdapter[Any] | None = field(default=None, repr=False)
    result_adapter: TypeAdapter[Any] | None = field(default=None, repr=False)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)

    def decode_payload(self, raw: Any) -> Any:
        if self.payload_adapter is None:
            return None
        try:
            return self.payload_adapter.validate_python(raw)
        except ValidationError as exc:
            raise BadRequest(
                f"cannot decode request payload for {self.name!r}: {exc}"
            ) from exc

    async def invoke(self, ctx: CallContext, payload: Any = None) -> Any:
        args = (ctx, payload) if self.shape.takes_payload else (ctx,)
        if self.is_async:
            with bind_context(ctx):
                result = await self.func(*args)
        else:
            result = await run_in_threadpool(self._call_bound, ctx, args)
        return result if self.shape.returns_value else None

    def encode_result(self, value: Any) -> bytes:
        if self.result_adapter is None:
            raise InternalError(f"function {self.name!r} does not return a value")
        try:
            return self.result_adapter.dump_json(value)
        except PydanticSerializationError as exc:
            raise InternalError(f"cannot encode response data: {exc}") from exc

    def _call_bound(self, ctx: CallContext, args: tuple[Any, ...]) -> Any:
        # Runs on a worker thread; the context variable has to be set there.
        with bind_context(ctx):
            return self.func(*args)


def _build_adapter(name: str, role: str, annotation: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(annotation)
    except PydanticUserError as exc:
        raise ConfigurationDefect(
            f"Function '{name}': unsupported {role} type {annotation!r}."
        ) from exc


def describe(name: str, func: Callable[..., Any]) -> FunctionDescriptor:
    """
    Classify ``func`` into one of the supported shapes.

    Supported signatures are ``f(ctx)`` and ``f(ctx, payload: P)``, sync or
    async, returning ``None`` or an annotated value.

    Raises
    ------
    ConfigurationDefect
        If the signature is anything else.
    """

    if not callable(func):
        raise ConfigurationDefect(f"Function '{name}' is not callable.")
    # Instances with __call__ carry their annotations on the method.
    target = func if inspect.isroutine(func) else type(func).__call__

    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError) as exc:
        raise ConfigurationDefect(
            f"Function '{name}' has no inspectable signature."
        ) from exc
    if any(param.kind not in _POSITIONAL for param in params):
        raise ConfigurationDefect(
            f"Function '{name}' may only take positional parameters."
        )
    if len(params) not in (1, 2):
        raise ConfigurationDefect(
            f"Function '{name}' must take (ctx) or (ctx, payload); "
            f"got {len(params)} parameters."
        )

    try:
        hints = get_type_hints(target)
    except (NameError, TypeError) as exc:
        raise ConfigurationDefect(
            f"Function '{name}' has unresolvable annotations: {exc}"
        ) from exc

    if "return" not in hints:
        raise ConfigurationDefect(
            f"Function '{name}' needs a return annotation (use '-> None' "
            "when it returns nothing)."
        )
    return_type = hints["return"]
    returns_value = return_type not in (None, type(None))

    takes_payload = len(params) == 2
    payload_type = None
    payload_adapter = None
    if takes_payload:
        payload_name = params[1].name
        if payload_name not in hints:
            raise ConfigurationDefect(
                f"Function '{name}': parameter '{payload_name}' needs a type annotation."
            )
        payload_type = hints[payload_name]
        payload_adapter = _build_adapter(name, "payload", payload_type)

    result_adapter = _build_adapter(name, "return", return_type) if returns_value else None

    return FunctionDescriptor(
        name=name,
        func=func,
        shape=Shape((takes_payload, returns_value)),
        is_async=inspect.iscoroutinefunction(target),
        payload_type=payload_type,
        payload_adapter=payload_adapter,
        result_adapter=result_adapter,
    )


def _function_name(name: str | None, func: Callable[..., Any]) -> str:
    if name is not None:
        return name
    try:
        return func.__name__
    except AttributeError:
        raise ConfigurationDefect(
            f"Cannot infer a name for {func!r}; pass one explicitly."
        ) from None


class FunctionRegistry:
    """
    Name to descriptor mapping, filled at startup and read-only once served.

    Example
    -------
    >>> registry = FunctionRegistry()
    >>> @registry.register("Ping")
    ... def ping(ctx) -> str:
    ...     return "pong"
    """

    def __init__(self) -> None:
        self._functions: dict[str, FunctionDescriptor] = {}
        self._frozen = False

    def register(
        self,
        name: str | Callable[..., Any] | None = None,
        func: Callable[..., Any] | None = None,
    ) -> Any:
        """
        Register ``func`` under ``name`` and return its descriptor.

        Without ``func`` this returns a decorator, usable as
        ``@registry.register`` or ``@registry.register("Name")``. ``name``
        defaults to ``func.__name__``; names are case sensitive.
        """

        if func is None and callable(name):
            name, func = None, name
        if func is not None:
            return self._add(_function_name(name, func), func)

        def decorator(fn: Callable[..., Any]) -> FunctionDescriptor:
            return self._add(_function_name(name, fn), fn)

        return decorator

    def _add(self, name: str, func: Callable[..., Any]) -> FunctionDescriptor:
        if self._frozen:
            raise RuntimeError(
                f"Cannot register '{name}': the registry is already being served."
            )
        if not name:
            raise ConfigurationDefect("Function name cannot be empty.")
        if name in self._functions:
            raise ConfigurationDefect(f"Function '{name}' already registered.")
        descriptor = describe(name, func)
        self._functions[name] = descriptor
        logger.debug("Registered function %s (%s).", name, descriptor.shape.name)
        return descriptor

    def resolve(self, name: str) -> FunctionDescriptor | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        return sorted(self._functions)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)
