from __future__ import annotations

import pytest
from pydantic import BaseModel

from callfn import (
    Accountability,
    CallContext,
    accountability_from_context,
    current_context,
    decode_trigger,
    trigger_from_context,
)
from callfn.functions.context import bind_context


class ItemsTrigger(BaseModel):
    event: str
    keys: list[int] = []


def test_current_context_outside_a_call() -> None:
    with pytest.raises(LookupError):
        current_context()


def test_bind_context_is_scoped() -> None:
    outer = CallContext(function_name="Outer")
    inner = CallContext(function_name="Inner")
    with bind_context(outer):
        assert current_context() is outer
        with bind_context(inner):
            assert current_context() is inner
        assert current_context() is outer
    with pytest.raises(LookupError):
        current_context()


def test_accountability_is_decoded_on_demand() -> None:
    ctx = CallContext(
        function_name="Fn",
        accountability={
            "user": "u-1",
            "role": "r-1",
            "admin": True,
            "userAgent": "Directus",
            "share": "s-9",
        },
    )
    info = accountability_from_context(ctx)
    assert isinstance(info, Accountability)
    assert info.user == "u-1"
    assert info.admin is True
    assert info.app is False
    assert info.user_agent == "Directus"
    # Unknown fields are kept, not dropped.
    assert info.model_extra == {"share": "s-9"}
    # The raw document stays untouched.
    assert ctx.accountability["userAgent"] == "Directus"


def test_accessors_use_the_bound_context() -> None:
    ctx = CallContext(
        function_name="Fn",
        accountability={"user": "u-2"},
        trigger={"event": "items.update", "keys": [3]},
    )
    with bind_context(ctx):
        assert accountability_from_context().user == "u-2"
        assert trigger_from_context() == {"event": "items.update", "keys": [3]}
        assert decode_trigger(ItemsTrigger) == ItemsTrigger(event="items.update", keys=[3])


def test_null_flags_in_accountability_are_accepted() -> None:
    ctx = CallContext(
        function_name="Fn",
        accountability={"user": "u-3", "admin": None, "app": None},
    )
    info = accountability_from_context(ctx)
    assert info.user == "u-3"
    assert info.admin is None
    assert info.app is None


def test_missing_metadata_is_none() -> None:
    ctx = CallContext(function_name="Fn")
    assert accountability_from_context(ctx) is None
    assert trigger_from_context(ctx) is None
    assert decode_trigger(ItemsTrigger, ctx) is None
