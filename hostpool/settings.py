"""Allocation settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from hostpool import constants as c
from hostpool.ras.allocate import Allocator
from hostpool.ras.modules import select_module
from hostpool.registry import NodePool


@dataclass(frozen=True)
class AllocationSettings:
  default_hostfile: Optional[Path] = None
  module: Optional[str] = None
  sticky_failure: bool = False
  max_nodes: Optional[int] = None

  @classmethod
  def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> AllocationSettings:
    env = os.environ if environ is None else environ

    hostfile = env.get(c.ENV_DEFAULT_HOSTFILE, '').strip()
    module = env.get(c.ENV_RAS_MODULE, '').strip() or None
    sticky = env.get(c.ENV_STICKY_FAILURE, '').strip().lower() in c.TRUTHY

    max_nodes: Optional[int] = None
    raw_max = env.get(c.ENV_MAX_NODES, '').strip()
    if raw_max:
      try:
        max_nodes = int(raw_max)
      except ValueError as exc:
        raise ValueError(f"{c.ENV_MAX_NODES} must be an integer, got {raw_max!r}") from exc

    return cls(
      default_hostfile=Path(hostfile) if hostfile else None,
      module=module,
      sticky_failure=sticky,
      max_nodes=max_nodes,
    )


def build_allocator(
  settings: AllocationSettings,
  pool: Optional[NodePool] = None,
  environ: Optional[Mapping[str, str]] = None,
) -> Allocator:
  """Wire module selection, the node pool and the allocator from ``settings``."""
  if pool is None:
    pool = NodePool(max_nodes=settings.max_nodes)
  module = select_module(settings.module, environ)
  return Allocator(
    pool,
    module,
    default_hostfile=settings.default_hostfile,
    sticky_failure=settings.sticky_failure,
  )
