from __future__ import annotations

import asyncio

import pytest

from cqrs_ddd_outbox.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


def test_generate_correlation_id_is_unique() -> None:
    assert generate_correlation_id() != generate_correlation_id()


def test_scope_restores_previous_value() -> None:
    with correlation_scope("outer"):
        with correlation_scope("inner") as cid:
            assert cid == "inner"
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
    assert get_correlation_id() is None


def test_scope_restores_on_error() -> None:
    with pytest.raises(RuntimeError), correlation_scope("cid-1"):
        raise RuntimeError("boom")

    assert get_correlation_id() is None


@pytest.mark.asyncio
async def test_set_correlation_id_is_task_local() -> None:
    seen: list[str | None] = []

    async def child() -> None:
        set_correlation_id("child")
        seen.append(get_correlation_id())

    await asyncio.create_task(child())

    assert seen == ["child"]
    assert get_correlation_id() is None
