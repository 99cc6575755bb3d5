"""
Transient container for the nodes produced by one discovery attempt.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from hostpool.errors import ConsumedResultError
from hostpool.node import Node


class DiscoveryResult:
  """
  Insertion-ordered set of :class:`Node` keyed by name.

  Adding a node whose name is already present merges it into the existing
  entry.  :meth:`drain` hands every node over exactly once; the container is
  unusable afterwards and any further access raises
  :class:`ConsumedResultError`.
  """

  def __init__(self, nodes: Iterable[Node] = ()) -> None:
    self._nodes: Dict[str, Node] = {}
    self._consumed = False
    self.extend(nodes)

  def _check(self) -> None:
    if self._consumed:
      raise ConsumedResultError("DiscoveryResult has already been drained into a node pool")

  @property
  def consumed(self) -> bool:
    return self._consumed

  def add(self, node: Node) -> None:
    self._check()
    existing = self._nodes.get(node.name)
    if existing is None:
      self._nodes[node.name] = node
    else:
      existing.merge(node)

  def extend(self, nodes: Iterable[Node]) -> None:
    for node in nodes:
      self.add(node)

  def discard(self, name: str) -> None:
    self._check()
    self._nodes.pop(name, None)

  def names(self) -> List[str]:
    self._check()
    return list(self._nodes)

  def drain(self) -> List[Node]:
    """Transfer ownership of every node to the caller."""
    self._check()
    nodes = list(self._nodes.values())
    self._nodes.clear()
    self._consumed = True
    return nodes

  def __len__(self) -> int:
    self._check()
    return len(self._nodes)

  def __bool__(self) -> bool:
    return len(self) > 0

  def __iter__(self) -> Iterator[Node]:
    self._check()
    return iter(list(self._nodes.values()))

  def __contains__(self, name: object) -> bool:
    self._check()
    return name in self._nodes

  def __repr__(self) -> str:
    if self._consumed:
      return 'DiscoveryResult(<drained>)'
    return f'DiscoveryResult({list(self._nodes)!r})'
