"""Use case bringing the admin identity up to a target balance."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from ....domain.errors import FundingUnavailable
from ....domain.shared import IdentityLock, NetworkClientProtocol
from ....domain.treasury.entities import FundingReport
from .balance import BalanceOracle
from .funding_executor import FundingExecutor
from .funding_planner import plan_funding

logger = logging.getLogger(__name__)


class FundingService:
    """Service orchestrating the funding path.

    Every run queries the balance fresh and plans from it, so re-running after
    a partial failure only requests what is still missing.
    """

    def __init__(
        self,
        network: NetworkClientProtocol,
        identity_lock: IdentityLock,
        *,
        ceiling: int,
        delay_seconds: float = 2.0,
        confirm_timeout_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.network = network
        self.identity_lock = identity_lock
        self.ceiling = ceiling
        self.oracle = BalanceOracle(network)
        self.executor = FundingExecutor(
            network,
            delay_seconds=delay_seconds,
            confirm_timeout_seconds=confirm_timeout_seconds,
            sleep=sleep,
        )

    async def fund_to_target(self, public_key: str, target: int) -> FundingReport:
        """Fund ``public_key`` until its balance reaches ``target`` lamports.

        Raises:
            FundingUnavailable: the cluster has no faucet and funding is needed.
            FundingAborted: a request failed; already confirmed requests stay.
            NetworkError: the balance could not be read.
        """
        async with self.identity_lock.hold(public_key):
            initial = await self.oracle.get_balance(public_key)
            plan = plan_funding(initial, target, self.ceiling)

            if plan.is_empty:
                logger.info(
                    "%s already holds %d lamports (target %d); nothing to fund",
                    public_key,
                    initial,
                    target,
                )
                return FundingReport(
                    public_key=public_key,
                    initial_balance=initial,
                    final_balance=initial,
                    plan=plan,
                )

            if not self.network.cluster.has_faucet:
                raise FundingUnavailable(
                    f"No faucet on {self.network.cluster.value}; "
                    f"{plan.shortfall} lamports must be transferred manually"
                )

            logger.info(
                "Funding %s: %d -> %d lamports in %d request(s)",
                public_key,
                initial,
                target,
                len(plan.requests),
            )
            outcomes = await self.executor.execute(plan, public_key)
            final = await self.oracle.get_balance(public_key)

        return FundingReport(
            public_key=public_key,
            initial_balance=initial,
            final_balance=final,
            plan=plan,
            outcomes=outcomes,
        )
