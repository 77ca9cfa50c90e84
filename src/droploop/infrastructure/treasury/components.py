"""Builders turning admin settings into infrastructure components."""

from __future__ import annotations

import logging
from typing import Optional

from ...application.treasury.use_cases.state_tree import StateTreeBootstrapper
from ...domain.shared import IdentityLock, NetworkClientFactory
from ...domain.treasury.repositories import StateTreeRepository
from ...envs.admin_env import Settings
from ..database import get_database_client
from ..locks import LocalIdentityLock, RedisIdentityLock
from ..solana.compressed_token_program import CompressedTokenProgram
from ..solana.network_client import NetworkConfig, create_network_client
from ..storage import RedisKeyValueStore
from .state_tree_repository_impl import StateTreeRepositoryImpl

logger = logging.getLogger(__name__)


def network_config_from_settings(settings: Settings) -> NetworkConfig:
    return NetworkConfig(
        cluster=settings.cluster,
        endpoint=settings.rpc_endpoint,
        timeout=settings.rpc_timeout_seconds,
    )


def network_client_factory(settings: Settings) -> NetworkClientFactory:
    config = network_config_from_settings(settings)
    return lambda: create_network_client(config)


def build_identity_lock(settings: Settings) -> IdentityLock:
    if settings.database_url:
        return RedisIdentityLock(
            get_database_client(settings),
            acquire_timeout=settings.lock_timeout_seconds,
        )
    logger.info("ADMIN_DATABASE_URL not set; identity lock is process-local")
    return LocalIdentityLock(acquire_timeout=settings.lock_timeout_seconds)


def build_state_tree_repository(settings: Settings) -> Optional[StateTreeRepository]:
    if not settings.database_url:
        return None
    return StateTreeRepositoryImpl(RedisKeyValueStore(get_database_client(settings)))


def build_state_tree_bootstrapper(
    settings: Settings,
    identity_lock: IdentityLock,
    repository: Optional[StateTreeRepository],
) -> StateTreeBootstrapper:
    return StateTreeBootstrapper(
        CompressedTokenProgram(),
        identity_lock,
        repository,
        required_lamports=settings.bootstrap_required_lamports,
        confirm_timeout_seconds=settings.confirm_timeout_seconds,
    )
