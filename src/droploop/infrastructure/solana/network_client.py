"""Solana RPC handle built on solana-py's ``AsyncClient``.

This layer translates transport and RPC failures into domain errors. It does
not retry or cache anything.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Type
from types import TracebackType

import httpx
from pydantic import BaseModel
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ...domain.errors import NetworkError, TransactionRejected
from ...domain.treasury.entities import Cluster


class NetworkConfig(BaseModel):
    """What a network handle is bound to."""

    cluster: Cluster
    endpoint: str
    timeout: float = 10.0


def _pubkey(public_key: str) -> Pubkey:
    try:
        return Pubkey.from_string(public_key)
    except ValueError as e:
        raise ValueError(f"Invalid public key: {public_key}") from e


def _rpc_error_logs(error: Any) -> list[str]:
    data = getattr(error, "data", None)
    logs = getattr(data, "logs", None)
    return list(logs) if logs else []


def _rpc_error_message(error: Any) -> str:
    return getattr(error, "message", None) or str(error)


class SolanaNetworkClient:
    """Asynchronous client for one Solana RPC endpoint.

    Mirrors the surface the orchestrator needs: balances, faucet funding,
    confirmation and v0 transaction submission.
    """

    def __init__(self, config: NetworkConfig) -> None:
        self.cluster = config.cluster
        self.endpoint = config.endpoint
        self._client = AsyncClient(
            config.endpoint, commitment=Confirmed, timeout=config.timeout
        )

    async def get_balance(self, public_key: str) -> int:
        try:
            resp = await self._client.get_balance(
                _pubkey(public_key), commitment=Confirmed
            )
        except (SolanaRpcException, httpx.HTTPError) as e:
            raise NetworkError(f"Balance query for {public_key} failed: {e}") from e
        except RPCException as e:
            message = _rpc_error_message(e.args[0])
            raise NetworkError(
                f"Balance query for {public_key} rejected: {message}"
            ) from e
        return resp.value

    async def request_airdrop(self, public_key: str, lamports: int) -> str:
        try:
            resp = await self._client.request_airdrop(
                _pubkey(public_key), lamports, commitment=Confirmed
            )
        except (SolanaRpcException, httpx.HTTPError) as e:
            raise NetworkError(f"Airdrop request failed: {e}") from e
        except RPCException as e:
            raise NetworkError(
                f"Airdrop request rejected: {_rpc_error_message(e.args[0])}"
            ) from e
        return str(resp.value)

    async def confirm_transaction(self, signature: str) -> None:
        try:
            resp = await self._client.confirm_transaction(
                Signature.from_string(signature), commitment=Confirmed
            )
        except UnconfirmedTxError as e:
            raise NetworkError(f"Transaction {signature} was not confirmed: {e}") from e
        except (SolanaRpcException, httpx.HTTPError) as e:
            raise NetworkError(f"Confirmation of {signature} failed: {e}") from e
        except RPCException as e:
            raise NetworkError(
                f"Confirmation of {signature} rejected: {_rpc_error_message(e.args[0])}"
            ) from e

        statuses = resp.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise TransactionRejected(
                f"Transaction {signature} failed on chain", details=str(status.err)
            )

    async def send_instructions(
        self,
        instructions: Sequence[Instruction],
        payer: Keypair,
        signers: Sequence[Keypair] = (),
    ) -> str:
        try:
            blockhash_resp = await self._client.get_latest_blockhash(Confirmed)
        except (SolanaRpcException, httpx.HTTPError, RPCException) as e:
            raise NetworkError(f"Could not fetch latest blockhash: {e}") from e

        message = MessageV0.try_compile(
            payer.pubkey(),
            list(instructions),
            [],
            blockhash_resp.value.blockhash,
        )
        transaction = VersionedTransaction(message, [payer, *signers])

        try:
            resp = await self._client.send_transaction(
                transaction,
                opts=TxOpts(skip_preflight=False, preflight_commitment=Confirmed),
            )
        except (SolanaRpcException, httpx.HTTPError) as e:
            raise NetworkError(f"Transaction submission failed: {e}") from e
        except RPCException as e:
            error = e.args[0] if e.args else e
            raise TransactionRejected(
                _rpc_error_message(error), logs=_rpc_error_logs(error)
            ) from e
        return str(resp.value)

    async def account_exists(self, public_key: str) -> bool:
        try:
            resp = await self._client.get_account_info(
                _pubkey(public_key), commitment=Confirmed
            )
        except (SolanaRpcException, httpx.HTTPError, RPCException) as e:
            raise NetworkError(f"Account lookup for {public_key} failed: {e}") from e
        return resp.value is not None

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        try:
            resp = await self._client.get_minimum_balance_for_rent_exemption(size)
        except (SolanaRpcException, httpx.HTTPError, RPCException) as e:
            raise NetworkError(f"Rent exemption query failed: {e}") from e
        return resp.value

    async def aclose(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "SolanaNetworkClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


def create_network_client(config: NetworkConfig) -> SolanaNetworkClient:
    """Return a reusable RPC handle bound to ``config``."""
    return SolanaNetworkClient(config)
