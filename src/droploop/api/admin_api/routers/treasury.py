"""Admin identity balance and readiness routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from prometheus_client import Counter

from ....application.treasury.dtos import (
    AdminBalanceResponseDTO,
    InsufficientFundsResponseDTO,
    ReadinessResponseDTO,
)
from ....application.treasury.use_cases.balance import BalanceGate, BalanceOracle
from ....domain.errors import InsufficientFunds
from ....domain.shared import NetworkClientFactory
from ....domain.treasury.entities import AdminCredential
from ....envs.admin_env import Settings
from ..dependencies import (
    get_admin_credential,
    get_network_client_factory,
    get_settings_dependency,
)

router = APIRouter(tags=["admin"])

balance_gate_checks_total = Counter(
    "droploop_balance_gate_checks_total",
    "Balance gate evaluations by result",
    ["result"],
)


@router.get(
    "/balance",
    response_model=AdminBalanceResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_admin_balance(
    settings: Settings = Depends(get_settings_dependency),
    credential: AdminCredential = Depends(get_admin_credential),
    factory: NetworkClientFactory = Depends(get_network_client_factory),
) -> AdminBalanceResponseDTO:
    async with factory() as network:
        lamports = await BalanceOracle(network).get_balance(credential.public_key)
    return AdminBalanceResponseDTO.build(
        credential.public_key,
        settings.cluster.value,
        lamports,
        settings.min_required_lamports,
    )


@router.get(
    "/readiness",
    response_model=ReadinessResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": InsufficientFundsResponseDTO}},
)
async def get_readiness(
    required: Optional[int] = Query(
        None, ge=0, description="Minimum lamports; defaults to MIN_REQUIRED_LAMPORTS"
    ),
    settings: Settings = Depends(get_settings_dependency),
    credential: AdminCredential = Depends(get_admin_credential),
    factory: NetworkClientFactory = Depends(get_network_client_factory),
) -> ReadinessResponseDTO:
    """Run the balance gate a mint handler would run, without minting."""
    minimum = settings.min_required_lamports if required is None else required
    async with factory() as network:
        gate = BalanceGate(BalanceOracle(network))
        try:
            current = await gate.ensure_sufficient(credential.public_key, minimum)
        except InsufficientFunds:
            balance_gate_checks_total.labels(result="insufficient").inc()
            raise
    balance_gate_checks_total.labels(result="sufficient").inc()
    return ReadinessResponseDTO(
        public_key=credential.public_key,
        current_lamports=current,
        required_lamports=minimum,
    )
