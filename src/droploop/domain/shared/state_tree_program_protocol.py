"""Narrow interface to the compression protocol used for the one-time bootstrap."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from solders.instruction import Instruction

    from .network_client_protocol import NetworkClientProtocol


class StateTreeProgramProtocol(Protocol):
    """Builds the instructions that establish compressed-token storage.

    The bootstrapper only signs, submits and confirms what this returns; the
    protocol internals stay behind this seam.
    """

    async def build_bootstrap_instructions(
        self,
        network: "NetworkClientProtocol",
        payer: str,
        tree: str,
    ) -> list["Instruction"]:
        ...
