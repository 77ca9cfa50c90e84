"""Test fixtures for in-memory implementations."""

from .fake_network import FakeNetworkClient, rejected
from .fake_programs import FakeStateTreeProgram
from .in_memory_storage import InMemoryKeyValueStore

__all__ = [
    "FakeNetworkClient",
    "FakeStateTreeProgram",
    "InMemoryKeyValueStore",
    "rejected",
]
