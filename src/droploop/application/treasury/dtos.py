"""Data Transfer Objects for the treasury application layer.

Field names are snake_case in Python and camelCase on the wire, matching the
bodies the web front end already consumes.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...domain.errors import InsufficientFunds, OperationError
from ...domain.treasury.entities import BootstrapResult, lamports_to_sol


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StateTreeInitResponseDTO(CamelModel):
    """Successful state tree bootstrap."""

    success: Literal[True] = True
    tree_public_key: str
    signature: str
    message: str
    admin_public_key: str
    already_initialized: bool = False

    @classmethod
    def from_result(cls, result: BootstrapResult) -> "StateTreeInitResponseDTO":
        message = (
            "State tree already initialized"
            if result.already_initialized
            else "State tree initialized successfully"
        )
        return cls(
            tree_public_key=result.tree_public_key,
            signature=result.signature,
            message=message,
            admin_public_key=result.admin_public_key,
            already_initialized=result.already_initialized,
        )


class OperationErrorResponseDTO(CamelModel):
    """Failure body shared by admin endpoints."""

    success: Literal[False] = False
    error: str
    details: str
    kind: str
    stage: Optional[str] = None

    @classmethod
    def from_error(cls, error: OperationError) -> "OperationErrorResponseDTO":
        return cls(
            error=error.message,
            details=error.details or error.message,
            kind=error.kind,
            stage=getattr(error, "stage", None),
        )


class InsufficientFundsResponseDTO(CamelModel):
    """Structured insufficiency body with a stable machine-readable code."""

    success: Literal[False] = False
    error: str
    details: str
    kind: str = InsufficientFunds.kind
    code: str = InsufficientFunds.code
    current_lamports: int
    required_lamports: int

    @classmethod
    def from_error(cls, error: InsufficientFunds) -> "InsufficientFundsResponseDTO":
        return cls(
            error=error.message,
            details=error.details or error.message,
            current_lamports=error.current,
            required_lamports=error.required,
        )


class AdminBalanceResponseDTO(CamelModel):
    """Admin identity balance with its sufficiency against the mint threshold."""

    public_key: str
    cluster: str
    lamports: int
    sol: float
    required_lamports: int
    sufficient: bool

    @classmethod
    def build(
        cls, public_key: str, cluster: str, lamports: int, required_lamports: int
    ) -> "AdminBalanceResponseDTO":
        return cls(
            public_key=public_key,
            cluster=cluster,
            lamports=lamports,
            sol=lamports_to_sol(lamports),
            required_lamports=required_lamports,
            sufficient=lamports >= required_lamports,
        )


class ReadinessResponseDTO(CamelModel):
    """Balance gate passed."""

    sufficient: Literal[True] = True
    public_key: str
    current_lamports: int
    required_lamports: int
