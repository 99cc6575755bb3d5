from __future__ import annotations

import pytest

from hostpool.nodelist import expand_nodelist, split_entries


def test_split_ignores_commas_inside_brackets() -> None:
  assert split_entries("node[1,3],login1") == ['node[1,3]', 'login1']


def test_expand_ranges_and_lists() -> None:
  assert expand_nodelist("node[001-003,7],login1") == [
    'node001', 'node002', 'node003', 'node7', 'login1',
  ]


def test_expand_multiple_groups() -> None:
  assert expand_nodelist("r[1-2]n[1-2]") == ['r1n1', 'r1n2', 'r2n1', 'r2n2']


def test_plain_names_pass_through() -> None:
  assert expand_nodelist("alpha, beta") == ['alpha', 'beta']


@pytest.mark.parametrize("nodelist", ["node[1-3", "node]1", "node[a-c]", "node[]"])
def test_malformed_lists_raise(nodelist: str) -> None:
  with pytest.raises(ValueError):
    expand_nodelist(nodelist)
