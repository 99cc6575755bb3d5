"""
Compressed host list expansion.

Schedulers and users write host lists such as ``node[001-003,7],login1``.
:func:`expand_nodelist` turns them into the individual host names, keeping
zero padding and the order in which hosts are written.
"""

from __future__ import annotations

import itertools
import re
from typing import List

_GROUP_PATTERN = re.compile(r'\[([^\[\]]*)\]')


def split_entries(nodelist: str, *, keep_empty: bool = False) -> List[str]:
  """Split on commas that are not inside a bracket group."""
  parts: List[str] = []
  depth = 0
  current: List[str] = []
  for char in nodelist:
    if char == ',' and depth == 0:
      parts.append(''.join(current))
      current = []
      continue
    if char == '[':
      depth += 1
    elif char == ']':
      if depth == 0:
        raise ValueError(f"Unbalanced ']' in host list {nodelist!r}")
      depth -= 1
    current.append(char)
  if depth != 0:
    raise ValueError(f"Unbalanced '[' in host list {nodelist!r}")
  parts.append(''.join(current))
  stripped = [part.strip() for part in parts]
  if keep_empty:
    return stripped
  return [part for part in stripped if part]


def _expand_group(body: str, entry: str) -> List[str]:
  values: List[str] = []
  for token in body.split(','):
    token = token.strip()
    if not token:
      raise ValueError(f"Empty range in host list entry {entry!r}")
    if '-' not in token:
      values.append(token)
      continue
    low, high = token.split('-', 1)
    if not (low.isdigit() and high.isdigit()):
      raise ValueError(f"Invalid range {token!r} in host list entry {entry!r}")
    width = len(low)
    start, stop = int(low), int(high)
    step = 1 if stop >= start else -1
    values.extend(f"{value:0{width}d}" for value in range(start, stop + step, step))
  return values


def expand_entry(entry: str) -> List[str]:
  """Expand every bracket group of a single entry (cartesian product)."""
  pieces = _GROUP_PATTERN.split(entry)
  # split() alternates literal text and group bodies
  literals = pieces[0::2]
  groups = [_expand_group(body, entry) for body in pieces[1::2]]
  if any('[' in text or ']' in text for text in literals):
    raise ValueError(f"Malformed host list entry {entry!r}")
  if not groups:
    return [entry]

  hosts: List[str] = []
  for combo in itertools.product(*groups):
    name = literals[0]
    for value, literal in zip(combo, literals[1:]):
      name += value + literal
    hosts.append(name)
  return hosts


def expand_nodelist(nodelist: str) -> List[str]:
  """Expand a compressed host list into host names, preserving order."""
  hosts: List[str] = []
  for entry in split_entries(nodelist):
    hosts.extend(expand_entry(entry))
  return hosts
