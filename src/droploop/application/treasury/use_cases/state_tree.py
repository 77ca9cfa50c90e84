"""One-time bootstrap of the compressed-token state tree."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from solders.keypair import Keypair

from ....domain.errors import BootstrapError, NetworkError, TransactionRejected
from ....domain.shared import (
    IdentityLock,
    NetworkClientFactory,
    NetworkClientProtocol,
    StateTreeProgramProtocol,
)
from ....domain.treasury.entities import AdminCredential, BootstrapResult, Cluster
from ....domain.treasury.repositories import StateTreeRepository
from .balance import BalanceGate, BalanceOracle
from .credentials import resolve_admin_credential

logger = logging.getLogger(__name__)


class BootstrapState(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class StateTreeBootstrapper:
    """Creates the state tree once per cluster and admin identity.

    Failures are classified for the caller:

    - ``NetworkError``: transport or timeout during submission/confirmation;
    - ``BootstrapError``: the compression program or runtime rejected the
      transaction, or the instructions could not be built;
    - ``InsufficientFunds``: the admin cannot pay for the bootstrap.

    Without a record store an existing tree cannot be detected, so only a
    forced bootstrap is allowed.

    Credential problems never reach this class; they are raised while
    resolving the credential, before any network call.
    """

    def __init__(
        self,
        program: StateTreeProgramProtocol,
        identity_lock: IdentityLock,
        repository: Optional[StateTreeRepository] = None,
        *,
        required_lamports: int = 0,
        confirm_timeout_seconds: float = 60.0,
        tree_keypair_factory: Callable[[], Keypair] = Keypair,
    ):
        self.program = program
        self.identity_lock = identity_lock
        self.repository = repository
        self.required_lamports = required_lamports
        self.confirm_timeout_seconds = confirm_timeout_seconds
        self._tree_keypair_factory = tree_keypair_factory
        self.state = BootstrapState.NOT_STARTED

    async def initialize(
        self,
        credential: AdminCredential,
        network: NetworkClientProtocol,
        *,
        force: bool = False,
    ) -> BootstrapResult:
        admin = credential.public_key
        async with self.identity_lock.hold(admin):
            if not force:
                existing = await self._find_existing(network.cluster, admin, network)
                if existing is not None:
                    self.state = BootstrapState.CONFIRMED
                    return existing

            if self.required_lamports > 0:
                gate = BalanceGate(BalanceOracle(network))
                await gate.ensure_sufficient(admin, self.required_lamports)

            try:
                result = await self._submit_and_confirm(credential, network)
            except Exception:
                self.state = BootstrapState.FAILED
                raise

            self.state = BootstrapState.CONFIRMED
            await self._record(result)
            return result

    async def _find_existing(
        self, cluster: Cluster, admin: str, network: NetworkClientProtocol
    ) -> Optional[BootstrapResult]:
        if self.repository is None:
            logger.warning(
                "No bootstrap record store configured; refusing to bootstrap for %s "
                "without force",
                admin,
            )
            raise BootstrapError(
                "Cannot check for an existing state tree without a record store",
                stage="precheck",
                details=(
                    "Set ADMIN_DATABASE_URL so bootstrap records are kept, or "
                    "retry with force to create a new state tree anyway."
                ),
            )

        record = await self.repository.get(cluster, admin)
        if record is None:
            return None

        if not await network.account_exists(record.tree_public_key):
            logger.warning(
                "Recorded state tree %s no longer exists on %s; bootstrapping again",
                record.tree_public_key,
                cluster.value,
            )
            return None

        logger.info(
            "State tree %s already initialized on %s",
            record.tree_public_key,
            cluster.value,
        )
        return record.model_copy(update={"already_initialized": True})

    async def _submit_and_confirm(
        self, credential: AdminCredential, network: NetworkClientProtocol
    ) -> BootstrapResult:
        tree = self._tree_keypair_factory()
        tree_public_key = str(tree.pubkey())
        logger.info(
            "Bootstrapping state tree %s for admin %s on %s",
            tree_public_key,
            credential.public_key,
            network.cluster.value,
        )

        try:
            instructions = await self.program.build_bootstrap_instructions(
                network, credential.public_key, tree_public_key
            )
        except NetworkError:
            raise
        except Exception as e:
            raise BootstrapError(
                "Could not build state tree instructions", stage="build", details=str(e)
            ) from e

        try:
            signature = await network.send_instructions(
                instructions, credential.keypair, [tree]
            )
        except TransactionRejected as e:
            raise BootstrapError(
                f"State tree transaction rejected: {e.message}",
                stage="submit",
                details=e.details,
            ) from e

        self.state = BootstrapState.PENDING
        logger.info("State tree transaction submitted: %s", signature)

        try:
            await asyncio.wait_for(
                network.confirm_transaction(signature),
                timeout=self.confirm_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"State tree transaction {signature} not confirmed within "
                f"{self.confirm_timeout_seconds:g}s"
            ) from e
        except TransactionRejected as e:
            raise BootstrapError(
                f"State tree transaction {signature} failed: {e.message}",
                stage="confirm",
                details=e.details,
            ) from e

        logger.info("State tree %s confirmed: %s", tree_public_key, signature)
        return BootstrapResult(
            tree_public_key=tree_public_key,
            signature=signature,
            admin_public_key=credential.public_key,
            cluster=network.cluster,
        )

    async def _record(self, result: BootstrapResult) -> None:
        if self.repository is None:
            return
        try:
            await self.repository.save(result)
        except NetworkError as e:
            raise BootstrapError(
                "State tree created but its record could not be saved",
                stage="record",
                details=(
                    f"tree={result.tree_public_key} signature={result.signature}: {e}"
                ),
            ) from e


class StateTreeSetupService:
    """Bootstrap path: resolve credential, open the network, bootstrap."""

    def __init__(
        self,
        bootstrapper: StateTreeBootstrapper,
        network_client_factory: NetworkClientFactory,
        *,
        admin_private_key: Optional[str],
        cluster: Cluster,
        allow_ephemeral: bool = False,
    ):
        self.bootstrapper = bootstrapper
        self.network_client_factory = network_client_factory
        self._admin_private_key = admin_private_key
        self.cluster = cluster
        self.allow_ephemeral = allow_ephemeral

    def resolve_credential(self) -> AdminCredential:
        return resolve_admin_credential(
            self._admin_private_key,
            cluster=self.cluster,
            allow_ephemeral=self.allow_ephemeral,
        )

    async def initialize(self, *, force: bool = False) -> BootstrapResult:
        credential = self.resolve_credential()
        async with self.network_client_factory() as network:
            return await self.bootstrapper.initialize(credential, network, force=force)
