"""Tests for the bootstrap record repository."""

from __future__ import annotations

import pytest

from droploop.domain.treasury.entities import BootstrapResult, Cluster
from droploop.infrastructure.treasury.state_tree_repository_impl import (
    StateTreeRepositoryImpl,
)
from tests.fixtures import InMemoryKeyValueStore


def make_result(**overrides) -> BootstrapResult:
    values = {
        "tree_public_key": "Tree111111111111111111111111111111111111111",
        "signature": "sig-1",
        "admin_public_key": "Admin11111111111111111111111111111111111111",
        "cluster": Cluster.DEVNET,
    }
    values.update(overrides)
    return BootstrapResult(**values)


@pytest.mark.asyncio
async def test_save_and_get(
    state_tree_repository: StateTreeRepositoryImpl, kv_store: InMemoryKeyValueStore
) -> None:
    result = make_result()
    await state_tree_repository.save(result)

    stored = await state_tree_repository.get(Cluster.DEVNET, result.admin_public_key)

    assert stored == result
    assert kv_store.keys() == [f"state_tree:devnet:{result.admin_public_key}"]


@pytest.mark.asyncio
async def test_records_are_scoped_by_cluster(
    state_tree_repository: StateTreeRepositoryImpl,
) -> None:
    result = make_result()
    await state_tree_repository.save(result)

    stored = await state_tree_repository.get(Cluster.TESTNET, result.admin_public_key)
    assert stored is None


@pytest.mark.asyncio
async def test_already_initialized_flag_is_not_persisted(
    state_tree_repository: StateTreeRepositoryImpl,
) -> None:
    result = make_result(already_initialized=True)
    await state_tree_repository.save(result)

    stored = await state_tree_repository.get(Cluster.DEVNET, result.admin_public_key)
    assert stored is not None
    assert not stored.already_initialized


@pytest.mark.asyncio
async def test_delete(state_tree_repository: StateTreeRepositoryImpl) -> None:
    result = make_result()
    await state_tree_repository.save(result)

    admin = result.admin_public_key
    assert await state_tree_repository.delete(Cluster.DEVNET, admin) == 1
    assert await state_tree_repository.get(Cluster.DEVNET, admin) is None
