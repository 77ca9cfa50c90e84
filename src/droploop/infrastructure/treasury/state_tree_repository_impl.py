from __future__ import annotations

from typing import Optional

from ...domain.treasury.entities import BootstrapResult, Cluster
from ...domain.treasury.repositories import StateTreeRepository
from ..storage import KeyValueStore


class StateTreeRepositoryImpl(StateTreeRepository):
    """Bootstrap records as JSON under ``state_tree:{cluster}:{admin}``."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def _key(cluster: Cluster, admin_public_key: str) -> str:
        return f"state_tree:{cluster.value}:{admin_public_key}"

    async def get(
        self, cluster: Cluster, admin_public_key: str
    ) -> Optional[BootstrapResult]:
        raw = await self.store.get(self._key(cluster, admin_public_key))
        if not raw:
            return None
        return BootstrapResult.model_validate_json(raw)

    async def save(self, result: BootstrapResult) -> BootstrapResult:
        stored = result.model_copy(update={"already_initialized": False})
        await self.store.set(
            self._key(result.cluster, result.admin_public_key),
            stored.model_dump_json(),
        )
        return result

    async def delete(self, cluster: Cluster, admin_public_key: str) -> int:
        return await self.store.delete(self._key(cluster, admin_public_key))
