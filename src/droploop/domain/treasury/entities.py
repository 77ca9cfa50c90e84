"""Treasury domain entities: admin credential, funding plan and bootstrap records."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from solders.keypair import Keypair

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


def sol_to_lamports(sol: float) -> int:
    return int(round(sol * LAMPORTS_PER_SOL))


class Cluster(str, Enum):
    """Network environments the admin identity may operate on."""

    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET_BETA = "mainnet-beta"
    LOCALNET = "localnet"

    @property
    def default_rpc_endpoint(self) -> str:
        if self is Cluster.LOCALNET:
            return "http://127.0.0.1:8899"
        return f"https://api.{self.value}.solana.com"

    @property
    def has_faucet(self) -> bool:
        return self is not Cluster.MAINNET_BETA


class CredentialEncoding(str, Enum):
    BYTE_LIST = "byte_list"
    BASE64 = "base64"
    GENERATED = "generated"


class AdminCredential(BaseModel):
    """Signing keypair plus its derived public identity.

    The keypair is excluded from serialization and repr.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    keypair: Keypair = Field(exclude=True, repr=False)
    public_key: str
    encoding: CredentialEncoding
    ephemeral: bool = False

    @classmethod
    def from_keypair(
        cls,
        keypair: Keypair,
        encoding: CredentialEncoding,
        *,
        ephemeral: bool = False,
    ) -> "AdminCredential":
        return cls(
            keypair=keypair,
            public_key=str(keypair.pubkey()),
            encoding=encoding,
            ephemeral=ephemeral,
        )

    @property
    def secret_bytes(self) -> bytes:
        return bytes(self.keypair)


class FundingRequest(BaseModel):
    """One airdrop-sized funding instruction."""

    model_config = ConfigDict(frozen=True)

    index: int
    amount: int

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Funding request amount must be positive")
        return v


class FundingPlan(BaseModel):
    """Ordered requests covering ``target - current``."""

    model_config = ConfigDict(frozen=True)

    current: int
    target: int
    ceiling: int
    requests: tuple[FundingRequest, ...] = ()

    @property
    def shortfall(self) -> int:
        return max(self.target - self.current, 0)

    @property
    def total(self) -> int:
        return sum(r.amount for r in self.requests)

    @property
    def is_empty(self) -> bool:
        return not self.requests


class FundingStatus(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"


class FundingOutcome(BaseModel):
    """Result of one executed funding request."""

    index: int
    amount: int
    status: FundingStatus
    signature: Optional[str] = None
    balance_after: Optional[int] = None
    error: Optional[str] = None


class FundingReport(BaseModel):
    """Summary of a whole funding run."""

    public_key: str
    initial_balance: int
    final_balance: int
    plan: FundingPlan
    outcomes: list[FundingOutcome] = Field(default_factory=list)

    @property
    def funded(self) -> int:
        return self.final_balance - self.initial_balance


class BootstrapResult(BaseModel):
    """Public identity of the created state tree and the signature creating it."""

    tree_public_key: str
    signature: str
    admin_public_key: str
    cluster: Cluster
    already_initialized: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return value.isoformat()
