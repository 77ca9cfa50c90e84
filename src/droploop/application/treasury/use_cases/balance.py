"""Balance queries and the fee-paying precondition gate."""

from __future__ import annotations

import logging

from ....domain.errors import InsufficientFunds
from ....domain.shared import NetworkClientProtocol

logger = logging.getLogger(__name__)


class BalanceOracle:
    """Reads the spendable balance of an identity. Never retries."""

    def __init__(self, network: NetworkClientProtocol):
        self.network = network

    async def get_balance(self, public_key: str) -> int:
        balance = await self.network.get_balance(public_key)
        logger.debug("Balance of %s is %d lamports", public_key, balance)
        return balance


class BalanceGate:
    """Precondition for fee-paying operations.

    Performs exactly one balance query and one comparison. It never triggers
    funding; that is an operator action.
    """

    def __init__(self, oracle: BalanceOracle):
        self.oracle = oracle

    async def ensure_sufficient(self, public_key: str, required_minimum: int) -> int:
        """Return the observed balance, or raise ``InsufficientFunds``."""
        current = await self.oracle.get_balance(public_key)
        if current < required_minimum:
            logger.warning(
                "Admin %s has %d lamports, %d required",
                public_key,
                current,
                required_minimum,
            )
            raise InsufficientFunds(current=current, required=required_minimum)
        return current
