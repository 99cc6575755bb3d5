"""
Managed-environment discovery modules.

A managed module speaks for a batch scheduler or cluster runtime.  When one is
selected the launcher is known to run inside a managed allocation, so a
failing query is fatal rather than a reason to fall back to hostfiles.

:class:`NoManagedModule` is the explicit "nothing configured" variant; the
orchestrator checks ``module.configured`` instead of testing for ``None``.
"""

from __future__ import annotations

import itertools
import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Type

from hostpool import constants as c
from hostpool.errors import DiscoveryError
from hostpool.node import Node, NodeState
from hostpool.nodelist import expand_nodelist

try:  # pragma: no cover - optional dependency
  import ray
except Exception:  # pragma: no cover
  ray = None  # type: ignore

logger = logging.getLogger(__name__)


class ManagedModule(ABC):
  """Interface of an environment-specific allocation query."""

  name: str = 'abstract'
  configured: bool = True

  def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
    self._environ = os.environ if environ is None else environ

  @abstractmethod
  def available(self) -> bool:
    """Return True when the current environment looks managed by this module."""

  @abstractmethod
  def discover(self) -> List[Node]:
    """
    Return the nodes allocated to this run.

    An empty list is a valid answer meaning "no managed allocation".  Failures
    raise :class:`DiscoveryError`.
    """

  def __repr__(self) -> str:
    return f"{type(self).__name__}()"


class NoManagedModule(ManagedModule):
  name = c.MODULE_NONE
  configured = False

  def available(self) -> bool:
    return False

  def discover(self) -> List[Node]:
    return []


_CPU_SPEC_PATTERN = re.compile(r'(?P<cpus>\d+)(?:\(x(?P<nodes>[1-9]\d*)\))?')


def parse_slurm_cpu_list(spec: str, expected: int) -> List[int]:
  """
  Expand ``SLURM_JOB_CPUS_PER_NODE`` to one slot count per allocated host.

  SLURM compresses runs of equal counts, so ``'4(x2),8'`` describes three
  hosts with 4, 4 and 8 CPUs.  The counts are matched to ``expected`` hosts in
  order: the last count covers any hosts the list does not reach, and counts
  beyond the last host are ignored.

  Raises
  ------
  ValueError
      If a group is not of the form ``N`` or ``N(xM)`` with ``M >= 1``.
  """
  groups = [part.strip() for part in spec.split(',') if part.strip()]
  counts: List[int] = []
  for group in groups:
    match = _CPU_SPEC_PATTERN.fullmatch(group)
    if match is None:
      raise ValueError(f"Invalid CPU specification {group!r} in {spec!r}")
    counts.extend(itertools.repeat(int(match.group('cpus')), int(match.group('nodes') or 1)))
    if len(counts) >= expected:
      return counts[:expected]

  if counts:
    counts.extend(itertools.repeat(counts[-1], expected - len(counts)))
  return counts


class SlurmModule(ManagedModule):
  """Reads the allocation SLURM exports to the job environment."""

  name = 'slurm'

  def _nodelist(self) -> Optional[str]:
    for var in c.SLURM_NODELIST_VARS:
      value = self._environ.get(var)
      if value:
        return value
    return None

  def available(self) -> bool:
    return self._nodelist() is not None

  def _expand(self, nodelist: str) -> List[str]:
    try:
      output = subprocess.run(
        ['scontrol', 'show', 'hostnames', nodelist],
        capture_output=True,
        text=True,
        timeout=c.SCONTROL_TIMEOUT,
        check=True,
      ).stdout
    except (OSError, subprocess.SubprocessError):
      output = ''
    hosts = [line.strip() for line in output.splitlines() if line.strip()]
    if hosts:
      return hosts
    try:
      return expand_nodelist(nodelist)
    except ValueError as exc:
      raise DiscoveryError(f"Cannot expand SLURM node list {nodelist!r}: {exc}", source=self.name) from exc

  def discover(self) -> List[Node]:
    nodelist = self._nodelist()
    if not nodelist:
      return []
    hosts = self._expand(nodelist)
    if not hosts:
      return []

    cpu_spec = self._environ.get(c.SLURM_CPUS_PER_NODE, '')
    try:
      counts = parse_slurm_cpu_list(cpu_spec, len(hosts)) if cpu_spec else []
    except ValueError as exc:
      raise DiscoveryError(str(exc), source=self.name) from exc
    if cpu_spec and not counts:
      raise DiscoveryError(f"{c.SLURM_CPUS_PER_NODE}={cpu_spec!r} names no CPUs", source=self.name)
    if not counts:
      default = self._environ.get(c.SLURM_CPUS_ON_NODE, '1') or '1'
      try:
        counts = [int(default)] * len(hosts)
      except ValueError as exc:
        raise DiscoveryError(f"{c.SLURM_CPUS_ON_NODE}={default!r} is not an integer", source=self.name) from exc

    logger.debug("slurm allocation: %s", ', '.join(hosts))
    return [
      Node(name=host, state=NodeState.UP, slots=cores, slots_given=True)
      for host, cores in zip(hosts, counts)
    ]


class PbsModule(ManagedModule):
  """Reads the PBS/Torque node file, which lists a host once per slot."""

  name = 'pbs'

  def available(self) -> bool:
    return bool(self._environ.get(c.PBS_NODEFILE))

  def discover(self) -> List[Node]:
    path = self._environ.get(c.PBS_NODEFILE)
    if not path:
      return []
    try:
      lines = Path(path).read_text(encoding='utf-8').splitlines()
    except (OSError, UnicodeDecodeError) as exc:
      raise DiscoveryError(f"Unable to read {c.PBS_NODEFILE} {path}: {exc}", source=self.name) from exc

    slots: Dict[str, int] = {}
    for line in lines:
      host = line.strip()
      if host:
        slots[host] = slots.get(host, 0) + 1
    return [
      Node(name=host, state=NodeState.UP, slots=count, slots_given=True)
      for host, count in slots.items()
    ]


class RayModule(ManagedModule):
  """Uses the live node table of an initialised Ray cluster."""

  name = 'ray'

  def available(self) -> bool:
    if ray is None:
      return False
    return bool(ray.is_initialized() or self._environ.get(c.RAY_ADDRESS))

  def discover(self) -> List[Node]:
    if ray is None:
      raise DiscoveryError("Ray is not installed; install ray to use this module", source=self.name)
    if not ray.is_initialized():
      address = self._environ.get(c.RAY_ADDRESS)
      if not address:
        raise DiscoveryError("Ray is not initialised and RAY_ADDRESS is unset", source=self.name)
      try:
        ray.init(address=address)  # type: ignore[call-arg]
      except Exception as exc:
        raise DiscoveryError(f"Unable to connect to Ray at {address}: {exc}", source=self.name) from exc

    try:
      table = ray.nodes()
    except Exception as exc:
      raise DiscoveryError(f"Unable to list Ray nodes: {exc}", source=self.name) from exc

    nodes: Dict[str, Node] = {}
    for entry in table:
      if not entry.get("Alive", False):
        continue
      host = str(entry.get("NodeManagerAddress", ""))
      if not host:
        continue
      cpus = int(float(entry.get("Resources", {}).get("CPU", 0.0)))
      if host in nodes:
        nodes[host].slots += cpus
      else:
        nodes[host] = Node(name=host, state=NodeState.UP, slots=cpus, slots_given=True)
    return list(nodes.values())


MODULES: Dict[str, Type[ManagedModule]] = {
  'slurm': SlurmModule,
  'pbs': PbsModule,
  'ray': RayModule,
}


def select_module(name: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ManagedModule:
  """
  Pick the managed module for this run.

  ``"none"`` disables managed discovery, an explicit module name forces that
  module, and ``None`` returns the first module in priority order whose
  environment is detected.
  """
  if name is not None:
    key = name.strip().lower()
    if key == c.MODULE_NONE:
      return NoManagedModule(environ)
    if key not in MODULES:
      raise ValueError(f"Unknown allocation module {name!r}; choose from {sorted(MODULES)} or 'none'")
    return MODULES[key](environ)

  for key in c.MODULE_PRIORITY:
    module = MODULES[key](environ)
    if module.available():
      logger.debug("selected allocation module %s", key)
      return module
  return NoManagedModule(environ)
