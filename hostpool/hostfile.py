"""
Hostfile parser.

A hostfile lists one host per line, optionally with slot information::

    # rack 1
    node01 slots=4 max_slots=8
    alice@node02 slots=2
    node03
    ^node04

``count=`` and ``cpu=`` are accepted as aliases for ``slots=`` and
``max-slots=`` for ``max_slots=``.  A host listed twice accumulates its
slots, and a ``^host`` line removes that host from the file's result.  Hosts
without an explicit slot count get a single slot.

The oversubscription hint returned next to the nodes is ``True`` when at least
one entry left its slot count unstated, i.e. the real slot limits are unknown.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Set, Tuple

from hostpool.errors import DiscoveryError
from hostpool.node import Node, NodeState
from hostpool.result import DiscoveryResult

logger = logging.getLogger(__name__)

_SLOT_KEYS = {'slots', 'count', 'cpu'}
_MAX_SLOT_KEYS = {'max_slots', 'max-slots'}


def _parse_count(value: str, key: str, where: str) -> int:
  try:
    count = int(value)
  except ValueError as exc:
    raise DiscoveryError(f"{where}: {key} must be an integer, got {value!r}", source='hostfile') from exc
  if count < 0:
    raise DiscoveryError(f"{where}: {key} must not be negative", source='hostfile')
  return count


def _parse_line(line: str, where: str) -> Tuple[Optional[Node], Optional[str]]:
  """Return ``(node, None)`` for a host entry or ``(None, host)`` for an exclusion."""
  tokens = line.split()
  host = tokens[0]
  if host.startswith('^'):
    excluded = host[1:]
    if not excluded or len(tokens) > 1:
      raise DiscoveryError(f"{where}: malformed exclusion {line!r}", source='hostfile')
    return None, excluded

  username: Optional[str] = None
  if '@' in host:
    username, _, host = host.rpartition('@')
    if not username or not host:
      raise DiscoveryError(f"{where}: malformed host {tokens[0]!r}", source='hostfile')

  slots: Optional[int] = None
  slots_max = 0
  for token in tokens[1:]:
    key, sep, value = token.partition('=')
    key = key.lower()
    if not sep or not value:
      raise DiscoveryError(f"{where}: expected key=value, got {token!r}", source='hostfile')
    if key in _SLOT_KEYS:
      slots = _parse_count(value, key, where)
    elif key in _MAX_SLOT_KEYS:
      slots_max = _parse_count(value, key, where)
    else:
      raise DiscoveryError(f"{where}: unknown attribute {key!r}", source='hostfile')

  slots_given = slots is not None
  if slots is None:
    slots = 1
  if slots_max and slots_max < slots:
    raise DiscoveryError(f"{where}: max_slots ({slots_max}) is smaller than slots ({slots})", source='hostfile')

  node = Node(
    name=host,
    state=NodeState.UP,
    slots=slots,
    slots_max=slots_max,
    username=username,
    slots_given=slots_given,
  )
  return node, None


def parse_hostfile(path: str | os.PathLike) -> Tuple[List[Node], bool]:
  """
  Read ``path`` and return its nodes together with the oversubscription hint.

  Raises
  ------
  DiscoveryError
      If the file cannot be read or any line is malformed.
  """
  hostfile = Path(path)
  try:
    text = hostfile.read_text(encoding='utf-8')
  except (OSError, UnicodeDecodeError) as exc:
    raise DiscoveryError(f"Unable to read hostfile {hostfile}: {exc}", source='hostfile') from exc

  collected = DiscoveryResult()
  excluded: Set[str] = set()
  limits_unknown = False
  for lineno, raw in enumerate(text.splitlines(), start=1):
    line = raw.split('#', 1)[0].strip()
    if not line:
      continue
    node, exclusion = _parse_line(line, f"{hostfile}:{lineno}")
    if exclusion is not None:
      excluded.add(exclusion)
      continue
    if not node.slots_given:
      limits_unknown = True
    collected.add(node)

  for name in excluded:
    collected.discard(name)

  nodes = collected.drain()
  logger.debug("hostfile %s: %d node(s), oversubscribe hint=%s", hostfile, len(nodes), limits_unknown)
  return nodes, limits_unknown


def add_hostfile_nodes(result: DiscoveryResult, path: str | os.PathLike) -> bool:
  """Union the nodes of ``path`` into ``result`` and return the file's hint."""
  nodes, hint = parse_hostfile(path)
  result.extend(nodes)
  return hint
