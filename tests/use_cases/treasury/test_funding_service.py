"""Use case tests for FundingService - fresh balance, plan, execute."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from droploop.application.treasury.use_cases.funding import FundingService
from droploop.domain.errors import FundingAborted, FundingUnavailable
from droploop.domain.treasury.entities import Cluster, LAMPORTS_PER_SOL
from droploop.infrastructure.locks import LocalIdentityLock
from tests.fixtures import FakeNetworkClient

SOL = LAMPORTS_PER_SOL
ADMIN = "AdminPublicKey1111111111111111111111111111111"


def make_service(
    network: FakeNetworkClient, lock: LocalIdentityLock, sleep: AsyncMock
) -> FundingService:
    return FundingService(
        network,
        lock,
        ceiling=2 * SOL,
        delay_seconds=2.0,
        confirm_timeout_seconds=0.05,
        sleep=sleep,
    )


@pytest.mark.asyncio
async def test_funds_up_to_target(
    network: FakeNetworkClient, identity_lock: LocalIdentityLock, no_sleep: AsyncMock
) -> None:
    network.balances[ADMIN] = SOL // 2

    report = await make_service(network, identity_lock, no_sleep).fund_to_target(
        ADMIN, 2 * SOL
    )

    assert report.initial_balance == SOL // 2
    assert report.final_balance == 2 * SOL
    assert report.funded == 3 * SOL // 2
    assert [o.amount for o in report.outcomes] == [3 * SOL // 2]


@pytest.mark.asyncio
async def test_rerun_after_partial_failure_requests_only_remaining_shortfall(
    network: FakeNetworkClient, identity_lock: LocalIdentityLock, no_sleep: AsyncMock
) -> None:
    service = make_service(network, identity_lock, no_sleep)
    network.hanging_signatures.add("sig-2")

    with pytest.raises(FundingAborted):
        await service.fund_to_target(ADMIN, 5 * SOL)
    assert network.balances[ADMIN] == 2 * SOL

    network.hanging_signatures.clear()
    report = await service.fund_to_target(ADMIN, 5 * SOL)

    assert report.initial_balance == 2 * SOL
    assert [o.amount for o in report.outcomes] == [2 * SOL, 1 * SOL]
    assert report.final_balance == 5 * SOL


@pytest.mark.asyncio
async def test_already_funded_submits_nothing(
    network: FakeNetworkClient, identity_lock: LocalIdentityLock, no_sleep: AsyncMock
) -> None:
    network.balances[ADMIN] = 3 * SOL

    report = await make_service(network, identity_lock, no_sleep).fund_to_target(
        ADMIN, 2 * SOL
    )

    assert report.plan.is_empty
    assert report.outcomes == []
    assert network.airdrop_calls == []


@pytest.mark.asyncio
async def test_mainnet_refuses_funding(
    identity_lock: LocalIdentityLock, no_sleep: AsyncMock
) -> None:
    network = FakeNetworkClient(Cluster.MAINNET_BETA)

    with pytest.raises(FundingUnavailable, match="mainnet-beta"):
        await make_service(network, identity_lock, no_sleep).fund_to_target(
            ADMIN, 2 * SOL
        )
    assert network.airdrop_calls == []


@pytest.mark.asyncio
async def test_mainnet_with_enough_balance_is_fine(
    identity_lock: LocalIdentityLock, no_sleep: AsyncMock
) -> None:
    network = FakeNetworkClient(Cluster.MAINNET_BETA, balances={ADMIN: 2 * SOL})
    report = await make_service(network, identity_lock, no_sleep).fund_to_target(
        ADMIN, 2 * SOL
    )
    assert report.plan.is_empty
