"""
hostpool: build the global node pool a distributed launcher may use.
"""

from __future__ import annotations

from .errors import (
  AllocationError,
  ConsumedResultError,
  DiscoveryError,
  RegistryInsertError,
  ResourceExhaustedError,
)
from .node import AppContext, Job, Node, NodeState
from .ras import Allocator, AllocationState, select_module
from .registry import NodePool
from .result import DiscoveryResult
from .settings import AllocationSettings, build_allocator

__version__ = '0.1.0'

__all__ = [
  "AllocationError",
  "ConsumedResultError",
  "DiscoveryError",
  "RegistryInsertError",
  "ResourceExhaustedError",
  "AppContext",
  "Job",
  "Node",
  "NodeState",
  "Allocator",
  "AllocationState",
  "select_module",
  "NodePool",
  "DiscoveryResult",
  "AllocationSettings",
  "build_allocator",
]
