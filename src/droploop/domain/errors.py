"""Domain-specific exceptions.

Every failure the orchestrator surfaces is an ``OperationError`` tagged with a
stable ``kind`` so API handlers and operator tooling can classify it without
string matching. Messages never include credential material.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .treasury.entities import FundingOutcome


class OperationError(Exception):
    """Base class for classified orchestrator failures."""

    kind = "OperationError"

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class CredentialParseError(OperationError):
    """Raised when the admin credential cannot be decoded."""

    kind = "CredentialParseError"

    def __init__(
        self,
        message: str,
        *,
        attempts: Sequence[tuple[str, str]] = (),
        details: Optional[str] = None,
    ) -> None:
        # attempts holds (encoding, reason) pairs, never the input itself
        self.attempts = list(attempts)
        if details is None and self.attempts:
            details = "; ".join(f"{enc}: {reason}" for enc, reason in self.attempts)
        super().__init__(message, details=details)


class EphemeralIdentityForbidden(CredentialParseError):
    """Raised when no credential is configured and the demo fallback is not allowed."""


class NetworkError(OperationError):
    """Transport, timeout or RPC failure. Potentially transient."""

    kind = "NetworkError"


class TransactionRejected(NetworkError):
    """The RPC node or the runtime rejected a submitted transaction."""

    def __init__(
        self,
        message: str,
        *,
        logs: Sequence[str] = (),
        details: Optional[str] = None,
    ) -> None:
        self.logs = list(logs)
        if details is None and self.logs:
            details = "\n".join(self.logs)
        super().__init__(message, details=details)


class FundingAborted(NetworkError):
    """A funding plan stopped at a failed request.

    ``outcomes`` holds every outcome recorded before the abort, including the
    failed request itself.
    """

    def __init__(
        self,
        message: str,
        *,
        outcomes: Sequence["FundingOutcome"] = (),
        details: Optional[str] = None,
    ) -> None:
        self.outcomes = list(outcomes)
        super().__init__(message, details=details)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["outcomes"] = [o.model_dump(mode="json") for o in self.outcomes]
        return payload


class FundingUnavailable(NetworkError):
    """The configured cluster offers no funding source."""


class InsufficientFunds(OperationError):
    """The admin identity cannot cover a fee-paying operation."""

    kind = "InsufficientFunds"
    code = "INSUFFICIENT_FUNDS"

    def __init__(self, current: int, required: int) -> None:
        self.current = current
        self.required = required
        super().__init__(
            "Insufficient funds in admin wallet",
            details=(
                f"The admin wallet needs at least {required} lamports; "
                f"current balance is {current} lamports."
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["code"] = self.code
        payload["current"] = self.current
        payload["required"] = self.required
        return payload


class BootstrapError(OperationError):
    """Protocol-level rejection while creating the state tree."""

    kind = "BootstrapError"

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        details: Optional[str] = None,
    ) -> None:
        self.stage = stage
        super().__init__(message, details=details)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["stage"] = self.stage
        return payload
