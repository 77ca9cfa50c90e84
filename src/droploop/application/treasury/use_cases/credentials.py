"""Admin credential decoding, generation and resolution.

Two textual encodings are accepted for ``ADMIN_PRIVATE_KEY``:

- a comma-separated list of byte values (``12,250,3,...``), as written by
  the original setup tooling;
- a single base64 blob of the 64 secret key bytes.

Decoding is an explicit sequence of tagged attempts. The byte-list form is
tried first; the base64 form only runs when the byte-list attempt fails.
When both fail the raised ``CredentialParseError`` names each encoding and
why it was rejected, without echoing the input.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from solders.keypair import Keypair

from ....domain.errors import CredentialParseError, EphemeralIdentityForbidden
from ....domain.treasury.entities import AdminCredential, Cluster, CredentialEncoding

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 64


@dataclass(frozen=True)
class DecodeAttempt:
    """Result of decoding the credential with one encoding."""

    encoding: CredentialEncoding
    keypair: Optional[Keypair] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.keypair is not None


def _keypair_from_secret(secret: bytes) -> Keypair:
    if len(secret) != SECRET_KEY_LENGTH:
        raise ValueError(
            f"decoded {len(secret)} bytes, expected {SECRET_KEY_LENGTH}"
        )
    try:
        return Keypair.from_bytes(secret)
    except ValueError as e:
        raise ValueError(f"not a valid ed25519 keypair: {e}") from e


def decode_byte_list(raw: str) -> DecodeAttempt:
    """Decode ``raw`` as comma-separated integers in ``0..255``."""
    tokens = [token.strip() for token in raw.split(",")]
    values: list[int] = []
    for position, token in enumerate(tokens):
        try:
            value = int(token)
        except ValueError:
            return DecodeAttempt(
                CredentialEncoding.BYTE_LIST,
                reason=f"token {position} is not an integer",
            )
        if not 0 <= value <= 255:
            return DecodeAttempt(
                CredentialEncoding.BYTE_LIST,
                reason=f"token {position} is outside the byte range",
            )
        values.append(value)

    try:
        keypair = _keypair_from_secret(bytes(values))
    except ValueError as e:
        return DecodeAttempt(CredentialEncoding.BYTE_LIST, reason=str(e))
    return DecodeAttempt(CredentialEncoding.BYTE_LIST, keypair=keypair)


def decode_base64(raw: str) -> DecodeAttempt:
    """Decode ``raw`` as a strict base64 blob."""
    try:
        secret = base64.b64decode(raw.strip(), validate=True)
    except (binascii.Error, ValueError):
        return DecodeAttempt(CredentialEncoding.BASE64, reason="not valid base64")

    try:
        keypair = _keypair_from_secret(secret)
    except ValueError as e:
        return DecodeAttempt(CredentialEncoding.BASE64, reason=str(e))
    return DecodeAttempt(CredentialEncoding.BASE64, keypair=keypair)


DECODERS: tuple[Callable[[str], DecodeAttempt], ...] = (decode_byte_list, decode_base64)


def parse_admin_credential(raw: str) -> AdminCredential:
    """Decode a configured credential string into an ``AdminCredential``.

    Raises:
        CredentialParseError: neither encoding produced a valid 64 byte keypair.
    """
    if raw is None or not raw.strip():
        raise CredentialParseError("Admin private key is empty")

    attempts: list[DecodeAttempt] = []
    for decoder in DECODERS:
        attempt = decoder(raw)
        if attempt.ok:
            assert attempt.keypair is not None
            credential = AdminCredential.from_keypair(attempt.keypair, attempt.encoding)
            logger.info(
                "Admin credential decoded as %s for %s",
                attempt.encoding.value,
                credential.public_key,
            )
            return credential
        attempts.append(attempt)

    raise CredentialParseError(
        "Failed to parse admin private key as a byte list or base64",
        attempts=[(a.encoding.value, a.reason or "rejected") for a in attempts],
    )


def generate_credential() -> AdminCredential:
    """Create a brand new admin credential."""
    return AdminCredential.from_keypair(Keypair(), CredentialEncoding.GENERATED)


def encode_base64(credential: AdminCredential) -> str:
    return base64.b64encode(credential.secret_bytes).decode("utf-8")


def encode_byte_list(credential: AdminCredential) -> str:
    return ",".join(str(b) for b in credential.secret_bytes)


def resolve_admin_credential(
    raw: Optional[str],
    *,
    cluster: Cluster,
    allow_ephemeral: bool = False,
) -> AdminCredential:
    """Return the configured credential or, when explicitly allowed, a throwaway one.

    A missing credential alone never produces an ephemeral identity: the
    caller must opt in and the cluster must not be mainnet-beta.
    """
    if raw is not None and raw.strip():
        return parse_admin_credential(raw)

    if not allow_ephemeral:
        raise EphemeralIdentityForbidden(
            "ADMIN_PRIVATE_KEY is not configured",
            details="Set ADMIN_PRIVATE_KEY, or ALLOW_EPHEMERAL_ADMIN=true for demos.",
        )
    if cluster is Cluster.MAINNET_BETA:
        raise EphemeralIdentityForbidden(
            "Ephemeral admin identities are not allowed on mainnet-beta"
        )

    credential = AdminCredential.from_keypair(
        Keypair(), CredentialEncoding.GENERATED, ephemeral=True
    )
    logger.warning(
        "!!! ADMIN_PRIVATE_KEY is not set: using EPHEMERAL admin identity %s on %s. "
        "Anything it creates is unrecoverable once this process exits. !!!",
        credential.public_key,
        cluster.value,
    )
    return credential
