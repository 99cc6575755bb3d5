"""
Discovery sources tried, in order, by the allocator.

Every source answers :meth:`DiscoverySource.discover` with a fresh
:class:`DiscoveryResult` and an oversubscription hint.  A hint of ``None``
means the source has nothing to say about slot limits and the job's flag must
be left alone; only the managed module behaves that way.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

from hostpool.dash_host import add_dash_host_nodes
from hostpool.errors import DiscoveryError, ResourceExhaustedError
from hostpool.hostfile import add_hostfile_nodes
from hostpool.node import Job, Node, NodeState
from hostpool.ras.modules import ManagedModule
from hostpool.result import DiscoveryResult
from hostpool.sysinfo import nodename as resolve_nodename

logger = logging.getLogger(__name__)


class Discovery(NamedTuple):
  result: DiscoveryResult
  hint: Optional[bool]


class DiscoverySource:
  name = 'source'

  def discover(self, job: Job) -> Discovery:
    raise NotImplementedError

  def __repr__(self) -> str:
    return f"{type(self).__name__}()"


class ManagedModuleSource(DiscoverySource):
  name = 'module'

  def __init__(self, module: ManagedModule) -> None:
    self.module = module

  def discover(self, job: Job) -> Discovery:
    result = DiscoveryResult()
    if not self.module.configured:
      return Discovery(result, None)
    try:
      nodes = self.module.discover()
    except DiscoveryError as exc:
      if exc.source is None:
        exc.source = self.module.name
      raise
    result.extend(nodes)
    return Discovery(result, None)


class DefaultHostfileSource(DiscoverySource):
  name = 'default-hostfile'

  def __init__(self, path: Optional[str | os.PathLike]) -> None:
    self.path = Path(path) if path is not None else None

  def discover(self, job: Job) -> Discovery:
    result = DiscoveryResult()
    if self.path is None:
      return Discovery(result, None)
    logger.debug("parsing default hostfile %s", self.path)
    hint = add_hostfile_nodes(result, self.path)
    return Discovery(result, hint)


class PerAppHostfileSource(DiscoverySource):
  """Union of every application's hostfile; the last parsed hint wins."""

  name = 'app-hostfile'

  def discover(self, job: Job) -> Discovery:
    result = DiscoveryResult()
    hint: Optional[bool] = None
    for app in job.apps:
      if app.hostfile is None:
        continue
      logger.debug("checking hostfile %s for app %s", app.hostfile, app.name)
      hint = add_hostfile_nodes(result, app.hostfile)
    return Discovery(result, hint)


class DashHostSource(DiscoverySource):
  """Union of every application's dash-host list; the last parsed hint wins."""

  name = 'dash-host'

  def discover(self, job: Job) -> Discovery:
    result = DiscoveryResult()
    hint: Optional[bool] = None
    for app in job.apps:
      if app.dash_host is None:
        continue
      logger.debug("checking dash-host %r for app %s", app.dash_host, app.name)
      hint = add_dash_host_nodes(result, app.dash_host)
    return Discovery(result, hint)


class LocalFallbackSource(DiscoverySource):
  """
  The launcher's own node with a single slot.

  Slot limits are unknown here, so the hint is always ``True``.
  """

  name = 'local'

  def __init__(self, nodename: Callable[[], str] = resolve_nodename) -> None:
    self._nodename = nodename

  def discover(self, job: Job) -> Discovery:
    try:
      name = self._nodename()
    except OSError as exc:
      raise ResourceExhaustedError(f"Unable to construct the local node: {exc}") from exc
    if not name:
      raise ResourceExhaustedError("Unable to construct the local node: empty host name")
    node = Node(name=name, state=NodeState.UP, slots=1, slots_max=0, slots_inuse=0)
    return Discovery(DiscoveryResult([node]), True)


def build_chain(
  module: ManagedModule,
  default_hostfile: Optional[str | os.PathLike] = None,
  nodename: Callable[[], str] = resolve_nodename,
) -> List[DiscoverySource]:
  """Return the discovery sources in the order the allocator must try them."""
  return [
    ManagedModuleSource(module),
    DefaultHostfileSource(default_hostfile),
    PerAppHostfileSource(),
    DashHostSource(),
    LocalFallbackSource(nodename),
  ]
