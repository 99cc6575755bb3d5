from __future__ import annotations

import pytest

from hostpool import (
  ConsumedResultError,
  DiscoveryResult,
  Job,
  Node,
  NodePool,
  RegistryInsertError,
)


def _result(*specs) -> DiscoveryResult:
  return DiscoveryResult(Node(name=name, slots=slots) for name, slots in specs)


def test_insert_drains_result() -> None:
  pool = NodePool()
  result = _result(('n1', 2), ('n2', 4))

  pool.insert(result, Job('job0'))

  assert result.consumed is True
  with pytest.raises(ConsumedResultError):
    len(result)
  with pytest.raises(ConsumedResultError):
    result.add(Node(name='n3'))
  assert pool.names() == ['n1', 'n2']
  assert pool.total_slots() == 6
  assert pool.jobs == ['job0']


def test_drained_result_cannot_be_inserted_twice() -> None:
  pool = NodePool()
  result = _result(('n1', 1))
  pool.insert(result, Job('job0'))

  with pytest.raises(ConsumedResultError):
    pool.insert(result, Job('job0'))


def test_existing_node_is_kept_on_duplicate_insert() -> None:
  pool = NodePool()
  pool.insert(_result(('n1', 2)), Job('job0'))
  pool.insert(_result(('n1', 8), ('n2', 1)), Job('job1'))

  assert pool.names() == ['n1', 'n2']
  assert pool.get('n1').slots == 2


def test_discovery_result_merges_duplicates() -> None:
  result = DiscoveryResult()
  result.add(Node(name='n1', slots=2, slots_max=4))
  result.add(Node(name='n1', slots=1, slots_max=8, slots_given=True))

  node = next(iter(result))
  assert len(result) == 1
  assert (node.slots, node.slots_max, node.slots_given) == (3, 12, True)


def test_merge_with_unbounded_entry_is_unbounded() -> None:
  result = DiscoveryResult()
  result.add(Node(name='n1', slots=2, slots_max=2))
  result.add(Node(name='n1', slots=2))

  node = next(iter(result))
  assert (node.slots, node.slots_max) == (4, 0)


@pytest.mark.parametrize(
  "node",
  [
    Node(name=''),
    Node(name='n1', slots=-1),
    Node(name='n1', slots=4, slots_max=2),
  ],
)
def test_invalid_nodes_are_rejected_whole(node: Node) -> None:
  pool = NodePool()
  result = DiscoveryResult([Node(name='ok'), node])

  with pytest.raises(RegistryInsertError):
    pool.insert(result, Job('job0'))
  assert len(pool) == 0
  assert result.consumed is True


def test_capacity_limit() -> None:
  pool = NodePool(max_nodes=2)
  pool.insert(_result(('n1', 1)), Job('job0'))

  with pytest.raises(RegistryInsertError, match='limit'):
    pool.insert(_result(('n1', 1), ('n2', 1), ('n3', 1)), Job('job1'))
  assert pool.names() == ['n1']

  pool.insert(_result(('n1', 1), ('n2', 1)), Job('job2'))
  assert pool.names() == ['n1', 'n2']


def test_to_frame_lists_nodes() -> None:
  pool = NodePool()
  pool.insert(_result(('n1', 2), ('n2', 4)), Job('job0'))

  frame = pool.to_frame()

  assert list(frame.columns) == ['name', 'state', 'slots', 'slots_max', 'slots_inuse']
  assert frame['name'].tolist() == ['n1', 'n2']
  assert frame['slots'].sum() == 6
  assert set(frame['state']) == {'up'}


def test_empty_pool_frame_has_columns() -> None:
  frame = NodePool().to_frame()
  assert frame.empty
  assert 'slots' in frame.columns
