from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, SecretStr, field_validator, model_validator

from ..domain.treasury.entities import Cluster

DEFAULT_DATABASE_URL = "redis://localhost:6379/0"


class Settings(BaseModel):
    """Typed admin settings built from environment variables."""

    admin_private_key: Optional[SecretStr] = None
    allow_ephemeral_admin: bool = False

    cluster: Cluster = Cluster.DEVNET
    rpc_endpoint: str = ""
    rpc_timeout_seconds: float = 10.0
    confirm_timeout_seconds: float = 60.0

    # Balance thresholds, in lamports
    min_required_lamports: int = 900_000_000
    bootstrap_required_lamports: int = 50_000_000
    funding_target_lamports: int = 2_000_000_000
    funding_ceiling_lamports: int = 2_000_000_000
    funding_delay_seconds: float = 2.0

    # Redis holds bootstrap records and identity locks; None keeps locks
    # in-process and leaves bootstrap without a record store
    database_url: Optional[str] = DEFAULT_DATABASE_URL
    lock_timeout_seconds: float = 120.0

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]

    app_name: str = "Droploop"
    app_version: str = "1.0.0"

    @field_validator("admin_private_key", mode="before")
    @classmethod
    def blank_key_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("rpc_endpoint")
    @classmethod
    def validate_rpc_endpoint(cls, v: str) -> str:
        if not v:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("RPC endpoint must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("RPC endpoint must include a host")
        return v

    @field_validator(
        "min_required_lamports",
        "bootstrap_required_lamports",
        "funding_target_lamports",
    )
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Lamport quantities cannot be negative")
        return v

    @field_validator("funding_ceiling_lamports")
    @classmethod
    def validate_ceiling(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Funding ceiling must be positive")
        return v

    def admin_private_key_value(self) -> Optional[str]:
        if self.admin_private_key is None:
            return None
        return self.admin_private_key.get_secret_value()

    @model_validator(mode="after")
    def apply_cluster_defaults(self) -> "Settings":
        if not self.rpc_endpoint:
            self.rpc_endpoint = self.cluster.default_rpc_endpoint
        if self.allow_ephemeral_admin and self.cluster is Cluster.MAINNET_BETA:
            raise ValueError("ALLOW_EPHEMERAL_ADMIN cannot be enabled on mainnet-beta")
        return self


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    values: dict[str, object] = {
        "admin_private_key": os.environ.get("ADMIN_PRIVATE_KEY"),
        "allow_ephemeral_admin": _env_bool("ALLOW_EPHEMERAL_ADMIN"),
        "cluster": os.environ.get("NEXT_PUBLIC_CLUSTER", Cluster.DEVNET.value),
        "rpc_endpoint": os.environ.get("NEXT_PUBLIC_RPC_ENDPOINT", ""),
        # an empty ADMIN_DATABASE_URL opts out of Redis
        "database_url": os.environ.get(
            "ADMIN_DATABASE_URL", DEFAULT_DATABASE_URL
        ).strip()
        or None,
        "api_host": os.environ.get("ADMIN_API_HOST", "0.0.0.0"),
        "api_port": int(os.environ.get("ADMIN_API_PORT", "8000")),
        "api_debug": _env_bool("ADMIN_API_DEBUG"),
        "api_cors_origins": os.environ.get("ADMIN_API_CORS_ORIGINS", "*").split(","),
        "app_name": os.environ.get("ADMIN_APP_NAME", "Droploop"),
        "app_version": os.environ.get("ADMIN_APP_VERSION", "1.0.0"),
    }

    int_keys = {
        "min_required_lamports": "MIN_REQUIRED_LAMPORTS",
        "bootstrap_required_lamports": "BOOTSTRAP_REQUIRED_LAMPORTS",
        "funding_target_lamports": "FUNDING_TARGET_LAMPORTS",
        "funding_ceiling_lamports": "FUNDING_CEILING_LAMPORTS",
    }
    float_keys = {
        "rpc_timeout_seconds": "RPC_TIMEOUT_SECONDS",
        "confirm_timeout_seconds": "CONFIRM_TIMEOUT_SECONDS",
        "funding_delay_seconds": "FUNDING_DELAY_SECONDS",
        "lock_timeout_seconds": "LOCK_TIMEOUT_SECONDS",
    }
    for field, env_name in int_keys.items():
        raw = os.environ.get(env_name)
        if raw is not None:
            values[field] = int(raw)
    for field, env_name in float_keys.items():
        raw = os.environ.get(env_name)
        if raw is not None:
            values[field] = float(raw)

    return Settings(**values)
