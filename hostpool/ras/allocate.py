"""
Initial node-pool allocation.

:class:`Allocator` builds the global pool of nodes exactly once.  It walks the
discovery chain (managed module, default hostfile, per-application hostfiles,
dash-host lists, local host) and commits the first non-empty result to the
:class:`~hostpool.registry.NodePool`.  If a node is not found here, no job
started by this launcher can use it.

The allocator is not safe for concurrent ``allocate`` calls; it is meant to
run once during launcher start-up, before mapping.
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from hostpool.errors import DiscoveryError
from hostpool.node import Job
from hostpool.ras.modules import ManagedModule, NoManagedModule
from hostpool.ras.sources import DiscoverySource, LocalFallbackSource, build_chain
from hostpool.registry import NodePool
from hostpool.sysinfo import nodename as resolve_nodename

logger = logging.getLogger(__name__)


@dataclass
class AllocationState:
  """
  Latch recording that the discovery chain has run.

  ``reset`` exists for tests and for the retry policy of :class:`Allocator`;
  nothing else should clear the latch.
  """

  allocated: bool = False

  def reset(self) -> None:
    self.allocated = False


class Allocator:
  """
  Run the discovery chain once and commit the winner to ``pool``.

  Parameters
  ----------
  pool:
      Registry receiving the committed nodes.
  module:
      Managed module to query first.  Defaults to :class:`NoManagedModule`.
  default_hostfile:
      Optional global hostfile tried after the managed module.
  sticky_failure:
      When False (default) a failed first allocation clears the latch so a
      later call retries the chain.  When True the latch stays set and every
      later call returns immediately, leaving the pool as the failure left it.
  sources:
      Explicit discovery chain, mostly for tests.  Overrides ``module`` and
      ``default_hostfile``.
  """

  def __init__(
    self,
    pool: NodePool,
    module: Optional[ManagedModule] = None,
    *,
    default_hostfile: Optional[str | os.PathLike] = None,
    sticky_failure: bool = False,
    nodename: Callable[[], str] = resolve_nodename,
    sources: Optional[Sequence[DiscoverySource]] = None,
    state: Optional[AllocationState] = None,
  ) -> None:
    self.pool = pool
    self.module = module if module is not None else NoManagedModule()
    self.sticky_failure = sticky_failure
    self.state = state if state is not None else AllocationState()
    if sources is None:
      sources = build_chain(self.module, default_hostfile, nodename)
    self.sources: List[DiscoverySource] = list(sources)

  @property
  def allocated(self) -> bool:
    return self.state.allocated

  def allocate(self, job: Job) -> None:
    """
    Populate the node pool for ``job`` unless that has already happened.

    Raises
    ------
    DiscoveryError
        A managed module, hostfile or dash-host list could not be read.  No
        later source is tried and the pool is untouched.
    ResourceExhaustedError
        The local fallback node could not be built.
    RegistryInsertError
        The pool rejected the winning result.
    """
    if self.state.allocated:
      logger.debug("allocation already read")
      return

    # Set before any work so a re-entrant call cannot run the chain twice.
    self.state.allocated = True
    try:
      self._run_chain(job)
    except Exception as exc:
      logger.error("allocation for job %s failed: %s", job.job_id, exc)
      if not self.sticky_failure:
        self.state.reset()
      raise

  def _run_chain(self, job: Job) -> None:
    for source in self.sources:
      discovery = source.discover(job)
      if not discovery.result:
        logger.debug("nothing found by %s - proceeding", source.name)
        continue

      if isinstance(source, LocalFallbackSource):
        warnings.warn(
          "No allocation, hostfile or dash-host found; using the local host with a single slot",
          RuntimeWarning,
          stacklevel=3,
        )
      logger.debug("committing %d node(s) from %s", len(discovery.result), source.name)
      if discovery.hint is not None:
        job.oversubscribe_override = discovery.hint
      self.pool.insert(discovery.result, job)
      return

    raise DiscoveryError("No discovery source produced any node", source='allocator')
