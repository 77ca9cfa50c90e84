"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .identity_lock import IdentityLock
from .network_client_protocol import NetworkClientFactory, NetworkClientProtocol
from .state_tree_program_protocol import StateTreeProgramProtocol

__all__ = [
    "IdentityLock",
    "NetworkClientFactory",
    "NetworkClientProtocol",
    "StateTreeProgramProtocol",
]
