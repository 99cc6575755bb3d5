"""
Parser for inline ``--host`` specifications attached to an application.

The syntax is a comma-separated list of ``host`` or ``host:N`` entries where
``host`` may be a compressed range such as ``node[01-04]``.  Each bare
occurrence of a host adds one slot; ``host:N`` adds ``N`` slots.

The oversubscription hint is ``True`` as soon as one entry is bare, since its
real slot limit is unknown.  When every entry states ``:N`` the hint is
``False``, so a fully counted list enforces its limits like a hostfile does.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from hostpool.errors import DiscoveryError
from hostpool.node import Node, NodeState
from hostpool.nodelist import expand_entry, split_entries
from hostpool.result import DiscoveryResult

logger = logging.getLogger(__name__)


def parse_dash_host(spec: str) -> Tuple[List[Node], bool]:
  if not spec or not spec.strip():
    raise DiscoveryError("Empty dash-host specification", source='dash-host')

  try:
    entries = split_entries(spec, keep_empty=True)
  except ValueError as exc:
    raise DiscoveryError(str(exc), source='dash-host') from exc
  if not all(entries):
    raise DiscoveryError(f"Empty host entry in {spec!r}", source='dash-host')

  collected = DiscoveryResult()
  limits_unknown = False
  for entry in entries:
    host_expr, sep, count = entry.rpartition(':')
    if not sep:
      host_expr, count = entry, ''
    slots_given = bool(sep)
    slots = 1
    if slots_given:
      if not host_expr:
        raise DiscoveryError(f"Missing host name in entry {entry!r}", source='dash-host')
      try:
        slots = int(count)
      except ValueError as exc:
        raise DiscoveryError(f"Invalid slot count in entry {entry!r}", source='dash-host') from exc
      if slots < 1:
        raise DiscoveryError(f"Slot count must be positive in entry {entry!r}", source='dash-host')
    else:
      limits_unknown = True

    try:
      hosts = expand_entry(host_expr)
    except ValueError as exc:
      raise DiscoveryError(str(exc), source='dash-host') from exc
    for host in hosts:
      collected.add(Node(name=host, state=NodeState.UP, slots=slots, slots_given=slots_given))

  nodes = collected.drain()
  logger.debug("dash-host %r: %d node(s), oversubscribe hint=%s", spec, len(nodes), limits_unknown)
  return nodes, limits_unknown


def add_dash_host_nodes(result: DiscoveryResult, spec: str) -> bool:
  """Union the hosts named by ``spec`` into ``result`` and return the hint."""
  nodes, hint = parse_dash_host(spec)
  result.extend(nodes)
  return hint
