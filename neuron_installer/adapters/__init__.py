"""Adapters — tool bindings for git, the shell and the filesystem.

Public re-exports for convenient access.
"""

from neuron_installer.adapters.base import Adapter, ExecutionContext
from neuron_installer.adapters.mock import MockAdapter
from neuron_installer.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]
