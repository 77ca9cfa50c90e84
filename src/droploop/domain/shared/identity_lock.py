"""Serialization of operations that mutate one signing identity."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class IdentityLock(ABC):
    """Mutex scoped to a public identity.

    Funding, bootstrap and mint operations for the admin identity must hold it
    for their whole submit/confirm cycle.
    """

    @abstractmethod
    def hold(self, public_key: str) -> AbstractAsyncContextManager[None]:
        """Return an async context manager holding the lock for ``public_key``.

        Raises ``NetworkError`` if the lock cannot be acquired in time.
        """
        pass
