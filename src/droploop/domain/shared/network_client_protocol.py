"""Protocol interface for blockchain network client implementations.

Services receive a factory returning an object satisfying this protocol, so
use cases can run against a fake network in tests. Implementations do not
retry: every transport failure surfaces as ``NetworkError``.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, Type, TYPE_CHECKING
from types import TracebackType

if TYPE_CHECKING:
    from solders.instruction import Instruction
    from solders.keypair import Keypair

    from ..treasury.entities import Cluster


class NetworkClientProtocol(Protocol):
    """Thin handle to one RPC endpoint of one cluster."""

    cluster: "Cluster"
    endpoint: str

    async def get_balance(self, public_key: str) -> int:
        """Return the spendable balance of ``public_key`` in lamports."""
        ...

    async def request_airdrop(self, public_key: str, lamports: int) -> str:
        """Submit a faucet funding transaction and return its signature."""
        ...

    async def confirm_transaction(self, signature: str) -> None:
        """Block until ``signature`` reaches the confirmed commitment level.

        Raises:
            TransactionRejected: the transaction landed with an error.
            NetworkError: transport failure or the node gave up waiting.
        """
        ...

    async def send_instructions(
        self,
        instructions: Sequence["Instruction"],
        payer: "Keypair",
        signers: Sequence["Keypair"] = (),
    ) -> str:
        """Compile, sign and submit a v0 transaction; return its signature.

        Raises:
            TransactionRejected: preflight simulation or the node rejected it.
            NetworkError: transport failure.
        """
        ...

    async def account_exists(self, public_key: str) -> bool:
        ...

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        ...

    async def aclose(self) -> None:
        ...

    async def __aenter__(self: "NetworkClientProtocol") -> "NetworkClientProtocol":
        ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        ...


NetworkClientFactory = Callable[[], NetworkClientProtocol]
