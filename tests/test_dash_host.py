from __future__ import annotations

import pytest

from hostpool import DiscoveryError, DiscoveryResult
from hostpool.dash_host import add_dash_host_nodes, parse_dash_host


def test_bare_hosts_add_one_slot_per_occurrence() -> None:
  nodes, hint = parse_dash_host("node01,node02,node01")

  assert [(node.name, node.slots) for node in nodes] == [('node01', 2), ('node02', 1)]
  assert hint is True


def test_explicit_slot_counts() -> None:
  nodes, hint = parse_dash_host("node01:4, node02:2")

  assert [(node.name, node.slots) for node in nodes] == [('node01', 4), ('node02', 2)]
  assert all(node.slots_given for node in nodes)
  assert hint is False


def test_ranges_expand_with_padding() -> None:
  nodes, hint = parse_dash_host("gpu[01-03]:8")

  assert [node.name for node in nodes] == ['gpu01', 'gpu02', 'gpu03']
  assert {node.slots for node in nodes} == {8}
  assert hint is False


@pytest.mark.parametrize("spec", ["", "   ", "node01,,node02", "node01:x", "node01:0", ":4", "node[01-"])
def test_invalid_specs_raise(spec: str) -> None:
  with pytest.raises(DiscoveryError):
    parse_dash_host(spec)


def test_add_dash_host_nodes_unions_into_result() -> None:
  result = DiscoveryResult()

  add_dash_host_nodes(result, "a:1,b:1")
  hint = add_dash_host_nodes(result, "b,c")

  assert result.names() == ['a', 'b', 'c']
  assert [node.slots for node in result] == [1, 2, 1]
  assert hint is True
