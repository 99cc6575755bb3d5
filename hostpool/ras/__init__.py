"""
Resource allocation for hostpool.

The objects exported here discover the nodes a launcher may use and commit
them, once, to the node pool.
"""

from __future__ import annotations

from .allocate import AllocationState, Allocator
from .modules import (
  ManagedModule,
  NoManagedModule,
  PbsModule,
  RayModule,
  SlurmModule,
  select_module,
)
from .sources import (
  DashHostSource,
  DefaultHostfileSource,
  Discovery,
  DiscoverySource,
  LocalFallbackSource,
  ManagedModuleSource,
  PerAppHostfileSource,
  build_chain,
)

__all__ = [
  "AllocationState",
  "Allocator",
  "ManagedModule",
  "NoManagedModule",
  "PbsModule",
  "RayModule",
  "SlurmModule",
  "select_module",
  "DashHostSource",
  "DefaultHostfileSource",
  "Discovery",
  "DiscoverySource",
  "LocalFallbackSource",
  "ManagedModuleSource",
  "PerAppHostfileSource",
  "build_chain",
]
