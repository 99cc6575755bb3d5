"""
Canonical node pool.

The pool receives the winning :class:`~hostpool.result.DiscoveryResult` of an
allocation and becomes the single source of truth about which nodes later
mapping and launch stages may use.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

import pandas as pd

from hostpool.errors import RegistryInsertError
from hostpool.node import Job, Node
from hostpool.result import DiscoveryResult

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = ['name', 'state', 'slots', 'slots_max', 'slots_inuse']


class NodePool:
  """
  Deduplicating store of :class:`Node` keyed by host name.

  Parameters
  ----------
  max_nodes:
      Optional upper bound on the number of distinct nodes the pool accepts.
      An insert that would exceed it is rejected as a whole.
  """

  def __init__(self, *, max_nodes: Optional[int] = None) -> None:
    if max_nodes is not None and max_nodes < 1:
      raise ValueError("max_nodes must be at least 1")
    self._max_nodes = max_nodes
    self._nodes: Dict[str, Node] = {}
    self.jobs: List[str] = []

  @staticmethod
  def _validate(node: Node) -> None:
    if not node.name:
      raise RegistryInsertError("Refusing to insert a node without a name")
    if node.slots < 0:
      raise RegistryInsertError(f"Node {node.name!r} has a negative slot count")
    if node.slots_max and node.slots_max < node.slots:
      raise RegistryInsertError(
        f"Node {node.name!r} has slots_max={node.slots_max} below slots={node.slots}"
      )

  def insert(self, result: DiscoveryResult, job: Job) -> None:
    """
    Take every node out of ``result`` and merge it into the pool.

    ``result`` is drained before validation, so it is consumed even when the
    insert is rejected.  A rejected insert adds none of its nodes.
    """
    nodes = result.drain()
    for node in nodes:
      self._validate(node)

    fresh = [node for node in nodes if node.name not in self._nodes]
    if self._max_nodes is not None and len(self._nodes) + len(fresh) > self._max_nodes:
      raise RegistryInsertError(
        f"Pool limit of {self._max_nodes} node(s) exceeded: "
        f"{len(self._nodes)} present, {len(fresh)} new"
      )

    for node in nodes:
      if node.name in self._nodes:
        logger.debug("node %s already in pool; keeping existing entry", node.name)
        continue
      self._nodes[node.name] = node
    self.jobs.append(job.job_id)
    logger.debug("pool now holds %d node(s) after job %s", len(self._nodes), job.job_id)

  def get(self, name: str) -> Optional[Node]:
    return self._nodes.get(name)

  def names(self) -> List[str]:
    return list(self._nodes)

  def total_slots(self) -> int:
    return sum(node.slots for node in self._nodes.values())

  def clear(self) -> None:
    """Empty the pool.  Intended for tests."""
    self._nodes.clear()
    self.jobs.clear()

  def to_frame(self) -> pd.DataFrame:
    """Return one row per node, in insertion order."""
    rows = [
      {
        'name': node.name,
        'state': node.state.value,
        'slots': node.slots,
        'slots_max': node.slots_max,
        'slots_inuse': node.slots_inuse,
      }
      for node in self._nodes.values()
    ]
    return pd.DataFrame(rows, columns=_FRAME_COLUMNS)

  def __len__(self) -> int:
    return len(self._nodes)

  def __iter__(self) -> Iterator[Node]:
    return iter(list(self._nodes.values()))

  def __contains__(self, name: object) -> bool:
    return name in self._nodes
