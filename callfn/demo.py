"""Example functions used by ``main.py serve`` and the test-suite."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from callfn.functions import (
    CallContext,
    FunctionRegistry,
    accountability_from_context,
)

logger = logging.getLogger("callfn.demo")

registry = FunctionRegistry()


class FooExample(BaseModel):
    foo: str = ""
    bar: int = 0


class Foo(BaseModel):
    Bar: int


@registry.register("NoParamsNoReturn")
def no_params_no_return(ctx: CallContext) -> None:
    logger.info("NoParamsNoReturn called")


@registry.register("NoParamsWithReturn")
def no_params_with_return(ctx: CallContext) -> str:
    return "foo-value"


@registry.register("ParamWithReturn")
def param_with_return(ctx: CallContext, foo: FooExample) -> FooExample:
    foo.foo += "new-foo-value"
    foo.bar = 42
    return foo


@registry.register("Accountability")
def accountability(ctx: CallContext) -> dict | None:
    info = accountability_from_context(ctx)
    logger.info("Accountability: %r", info)
    if info is None:
        return None
    return info.model_dump(by_alias=True, exclude_none=True)


@registry.register("Error")
def error(ctx: CallContext) -> None:
    raise RuntimeError("error message")


@registry.register("Echo")
async def echo(ctx: CallContext, foo: Foo) -> Foo:
    foo.Bar += 1
    return foo
