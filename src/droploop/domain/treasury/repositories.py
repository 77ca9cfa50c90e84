"""Treasury domain repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .entities import BootstrapResult, Cluster


class StateTreeRepository(ABC):
    """Remembers which state tree was bootstrapped per cluster and admin identity."""

    @abstractmethod
    async def get(
        self, cluster: Cluster, admin_public_key: str
    ) -> Optional[BootstrapResult]:
        pass

    @abstractmethod
    async def save(self, result: BootstrapResult) -> BootstrapResult:
        pass

    @abstractmethod
    async def delete(self, cluster: Cluster, admin_public_key: str) -> int:
        pass
