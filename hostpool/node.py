"""
Descriptors consumed by the allocation layer.

:class:`Node` objects are created by a discovery source and then owned by
whichever container holds them: first a :class:`~hostpool.result.DiscoveryResult`,
then the :class:`~hostpool.registry.NodePool`.  :class:`AppContext` and
:class:`Job` are supplied by the caller; allocation only ever writes
``Job.oversubscribe_override``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence


class NodeState(Enum):
  UNKNOWN = 'unknown'
  UP = 'up'
  DOWN = 'down'
  REBOOT = 'reboot'
  DO_NOT_USE = 'do-not-use'
  NOT_INCLUDED = 'not-included'


@dataclass
class Node:
  """
  A compute node known to the launcher.

  Parameters
  ----------
  name:
      Host name; the node's identity within a pool.
  state:
      Current :class:`NodeState`.
  slots:
      Number of usable slots on the node.
  slots_max:
      Capacity ceiling.  ``0`` means unbounded.
  slots_inuse:
      Slots already claimed by launched processes.
  username:
      Optional login name, taken from ``user@host`` hostfile entries.
  slots_given:
      True when the slot count was stated explicitly by the source.
  """

  name: str
  state: NodeState = NodeState.UP
  slots: int = 1
  slots_max: int = 0
  slots_inuse: int = 0
  username: Optional[str] = None
  slots_given: bool = False

  @property
  def slots_free(self) -> int:
    return max(0, self.slots - self.slots_inuse)

  def merge(self, other: Node) -> None:
    """Fold a duplicate entry for the same host into this one."""
    if other.name != self.name:
      raise ValueError(f"Cannot merge node {other.name!r} into {self.name!r}")
    self.slots += other.slots
    # an unbounded entry makes the merged node unbounded
    if self.slots_max and other.slots_max:
      self.slots_max += other.slots_max
    else:
      self.slots_max = 0
    self.slots_given = self.slots_given or other.slots_given
    if self.username is None:
      self.username = other.username


@dataclass(frozen=True)
class AppContext:
  """Per-application launch description."""

  name: str
  hostfile: Optional[Path] = None
  dash_host: Optional[str] = None

  def __post_init__(self) -> None:
    if self.hostfile is not None and not isinstance(self.hostfile, Path):
      object.__setattr__(self, 'hostfile', Path(self.hostfile))
    if self.dash_host is not None and not self.dash_host.strip():
      object.__setattr__(self, 'dash_host', None)


@dataclass
class Job:
  """An ordered set of application contexts launched together."""

  job_id: str
  apps: List[AppContext] = field(default_factory=list)
  oversubscribe_override: bool = False

  @classmethod
  def from_apps(cls, job_id: str, apps: Sequence[AppContext], *, oversubscribe_override: bool = False) -> Job:
    return cls(job_id=job_id, apps=list(apps), oversubscribe_override=oversubscribe_override)
