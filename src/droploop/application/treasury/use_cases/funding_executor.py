"""Sequential execution of a funding plan against the network."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from prometheus_client import Counter

from ....domain.errors import FundingAborted, NetworkError
from ....domain.shared import NetworkClientProtocol
from ....domain.treasury.entities import (
    FundingOutcome,
    FundingPlan,
    FundingRequest,
    FundingStatus,
)

logger = logging.getLogger(__name__)

funding_requests_total = Counter(
    "droploop_funding_requests_total",
    "Funding requests submitted for the admin identity",
    ["status"],
)
funding_lamports_total = Counter(
    "droploop_funding_lamports_total",
    "Lamports confirmed by funding requests",
)


class FundingExecutor:
    """Runs funding requests strictly one at a time.

    Each request is submitted and confirmed at the ``confirmed`` level before
    the next one starts; a fixed delay separates consecutive requests. The
    first failure aborts the rest of the plan. Failed requests are not
    retried here.
    """

    def __init__(
        self,
        network: NetworkClientProtocol,
        *,
        delay_seconds: float = 2.0,
        confirm_timeout_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.network = network
        self.delay_seconds = delay_seconds
        self.confirm_timeout_seconds = confirm_timeout_seconds
        self._sleep = sleep

    async def execute(self, plan: FundingPlan, public_key: str) -> list[FundingOutcome]:
        """Execute ``plan`` for ``public_key`` and return one outcome per request.

        Raises:
            FundingAborted: a request failed; ``outcomes`` holds everything
                recorded so far, the failed request last.
        """
        outcomes: list[FundingOutcome] = []
        total = len(plan.requests)

        for position, request in enumerate(plan.requests):
            logger.info(
                "Funding request %d/%d: %d lamports to %s",
                position + 1,
                total,
                request.amount,
                public_key,
            )
            outcome = await self._execute_one(request, public_key)
            outcomes.append(outcome)
            funding_requests_total.labels(status=outcome.status.value).inc()
            if outcome.status is FundingStatus.CONFIRMED:
                funding_lamports_total.inc(request.amount)

            if outcome.error is not None:
                raise FundingAborted(
                    f"Funding request {position + 1} of {total} failed; "
                    f"{total - position - 1} request(s) not attempted",
                    outcomes=outcomes,
                    details=outcome.error,
                )

            if position < total - 1 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

        return outcomes

    async def _execute_one(
        self, request: FundingRequest, public_key: str
    ) -> FundingOutcome:
        signature: Optional[str] = None
        try:
            signature = await self.network.request_airdrop(public_key, request.amount)
            await self._confirm(signature)
        except NetworkError as e:
            logger.error(
                "Funding request %d failed (signature=%s): %s",
                request.index,
                signature,
                e,
            )
            return FundingOutcome(
                index=request.index,
                amount=request.amount,
                status=FundingStatus.FAILED,
                signature=signature,
                error=str(e),
            )

        # The request landed; a failed read afterwards still stops the plan
        try:
            balance_after = await self.network.get_balance(public_key)
        except NetworkError as e:
            logger.error(
                "Balance read after funding request %d failed: %s", request.index, e
            )
            return FundingOutcome(
                index=request.index,
                amount=request.amount,
                status=FundingStatus.CONFIRMED,
                signature=signature,
                error=f"balance read failed: {e}",
            )

        logger.info(
            "Funding request %d confirmed: %s, balance now %d lamports",
            request.index,
            signature,
            balance_after,
        )
        return FundingOutcome(
            index=request.index,
            amount=request.amount,
            status=FundingStatus.CONFIRMED,
            signature=signature,
            balance_after=balance_after,
        )

    async def _confirm(self, signature: str) -> None:
        try:
            await asyncio.wait_for(
                self.network.confirm_transaction(signature),
                timeout=self.confirm_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Confirmation of {signature} timed out after "
                f"{self.confirm_timeout_seconds:g}s"
            ) from e
