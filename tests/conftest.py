"""Shared pytest fixtures for admin identity tests."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock

import pytest
from solders.keypair import Keypair

from droploop.domain.shared import NetworkClientFactory
from droploop.domain.treasury.entities import AdminCredential, CredentialEncoding
from droploop.infrastructure.locks import LocalIdentityLock
from droploop.infrastructure.treasury.state_tree_repository_impl import (
    StateTreeRepositoryImpl,
)
from tests.fixtures import FakeNetworkClient, InMemoryKeyValueStore


@pytest.fixture
def admin_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def admin_credential(admin_keypair: Keypair) -> AdminCredential:
    return AdminCredential.from_keypair(admin_keypair, CredentialEncoding.BASE64)


@pytest.fixture
def admin_key_base64(admin_keypair: Keypair) -> str:
    return base64.b64encode(bytes(admin_keypair)).decode("utf-8")


@pytest.fixture
def admin_key_byte_list(admin_keypair: Keypair) -> str:
    return ",".join(str(b) for b in bytes(admin_keypair))


@pytest.fixture
def network() -> FakeNetworkClient:
    return FakeNetworkClient()


@pytest.fixture
def network_factory(network: FakeNetworkClient) -> NetworkClientFactory:
    return lambda: network


@pytest.fixture
def identity_lock() -> LocalIdentityLock:
    return LocalIdentityLock(acquire_timeout=1.0)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def state_tree_repository(kv_store: InMemoryKeyValueStore) -> StateTreeRepositoryImpl:
    return StateTreeRepositoryImpl(kv_store)


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for ``asyncio.sleep`` that records requested delays."""
    return AsyncMock(return_value=None)
