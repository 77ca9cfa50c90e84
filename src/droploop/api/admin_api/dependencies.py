"""Dependencies for the Admin API."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends

from ...application.treasury.use_cases.balance import BalanceGate, BalanceOracle
from ...application.treasury.use_cases.credentials import resolve_admin_credential
from ...application.treasury.use_cases.state_tree import StateTreeSetupService
from ...domain.shared import IdentityLock, NetworkClientFactory
from ...domain.treasury.entities import AdminCredential
from ...domain.treasury.repositories import StateTreeRepository
from ...envs.admin_env import Settings, get_settings
from ...infrastructure.treasury.components import (
    build_identity_lock,
    build_state_tree_bootstrapper,
    build_state_tree_repository,
    network_client_factory,
)


@lru_cache()
def get_settings_dependency() -> Settings:
    return get_settings()


@lru_cache()
def get_identity_lock_dependency() -> IdentityLock:
    return build_identity_lock(get_settings_dependency())


@lru_cache()
def get_state_tree_repository_dependency() -> Optional[StateTreeRepository]:
    return build_state_tree_repository(get_settings_dependency())


def get_network_client_factory() -> NetworkClientFactory:
    return network_client_factory(get_settings_dependency())


def get_admin_credential(
    settings: Settings = Depends(get_settings_dependency),
) -> AdminCredential:
    """Resolve the admin credential once per request."""
    return resolve_admin_credential(
        settings.admin_private_key_value(),
        cluster=settings.cluster,
        allow_ephemeral=settings.allow_ephemeral_admin,
    )


def get_state_tree_setup_service(
    settings: Settings = Depends(get_settings_dependency),
    identity_lock: IdentityLock = Depends(get_identity_lock_dependency),
    repository: Optional[StateTreeRepository] = Depends(
        get_state_tree_repository_dependency
    ),
    factory: NetworkClientFactory = Depends(get_network_client_factory),
) -> StateTreeSetupService:
    return StateTreeSetupService(
        build_state_tree_bootstrapper(settings, identity_lock, repository),
        factory,
        admin_private_key=settings.admin_private_key_value(),
        cluster=settings.cluster,
        allow_ephemeral=settings.allow_ephemeral_admin,
    )


async def require_admin_funds(
    settings: Settings = Depends(get_settings_dependency),
    credential: AdminCredential = Depends(get_admin_credential),
    factory: NetworkClientFactory = Depends(get_network_client_factory),
) -> int:
    """Balance gate for fee-paying handlers.

    Returns the observed balance or raises ``InsufficientFunds``, which the
    app turns into the structured insufficiency body.
    """
    async with factory() as network:
        gate = BalanceGate(BalanceOracle(network))
        return await gate.ensure_sufficient(
            credential.public_key, settings.min_required_lamports
        )
