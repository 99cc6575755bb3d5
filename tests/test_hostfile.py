from __future__ import annotations

from pathlib import Path

import pytest

from hostpool import DiscoveryError, DiscoveryResult, Node
from hostpool.hostfile import add_hostfile_nodes, parse_hostfile


def _hostfile(tmp_path: Path, text: str) -> Path:
  path = tmp_path / "hosts"
  path.write_text(text)
  return path


def test_parse_hostfile_reads_slots_and_comments(tmp_path: Path) -> None:
  path = _hostfile(
    tmp_path,
    "\n".join(
      [
        "# rack 1",
        "node01 slots=4 max_slots=8",
        "",
        "alice@node02 count=2   # trailing comment",
        "node03 cpu=6 max-slots=6",
      ]
    ),
  )

  nodes, hint = parse_hostfile(path)

  assert [node.name for node in nodes] == ['node01', 'node02', 'node03']
  assert [node.slots for node in nodes] == [4, 2, 6]
  assert nodes[0].slots_max == 8
  assert nodes[1].username == 'alice'
  assert hint is False


def test_missing_slot_count_means_unknown_limits(tmp_path: Path) -> None:
  nodes, hint = parse_hostfile(_hostfile(tmp_path, "node01 slots=2\nnode02\n"))

  assert nodes[1].slots == 1
  assert nodes[1].slots_given is False
  assert hint is True


def test_repeated_host_accumulates_slots(tmp_path: Path) -> None:
  nodes, _ = parse_hostfile(_hostfile(tmp_path, "node01\nnode01\nnode01 slots=2\n"))

  assert len(nodes) == 1
  assert nodes[0].slots == 4


def test_repeated_bounded_host_keeps_valid_ceiling(tmp_path: Path) -> None:
  nodes, _ = parse_hostfile(_hostfile(tmp_path, "n1 slots=2 max_slots=2\nn1 slots=2 max_slots=2\n"))

  assert (nodes[0].slots, nodes[0].slots_max) == (4, 4)


def test_non_utf8_hostfile_raises(tmp_path: Path) -> None:
  path = tmp_path / "hosts"
  path.write_bytes(b"n1\xff\xfe slots=2\n")

  with pytest.raises(DiscoveryError, match="Unable to read hostfile"):
    parse_hostfile(path)


def test_exclusion_removes_host(tmp_path: Path) -> None:
  nodes, _ = parse_hostfile(_hostfile(tmp_path, "node01\n^node02\nnode02 slots=4\n"))

  assert [node.name for node in nodes] == ['node01']


def test_empty_hostfile_yields_no_nodes(tmp_path: Path) -> None:
  nodes, hint = parse_hostfile(_hostfile(tmp_path, "# nothing here\n\n"))

  assert nodes == []
  assert hint is False


@pytest.mark.parametrize(
  "text",
  [
    "node01 slots=four\n",
    "node01 slots=-1\n",
    "node01 slots\n",
    "node01 colour=blue\n",
    "node01 slots=4 max_slots=2\n",
    "@node01\n",
    "^\n",
  ],
)
def test_malformed_lines_raise(tmp_path: Path, text: str) -> None:
  with pytest.raises(DiscoveryError, match=r"hosts:1"):
    parse_hostfile(_hostfile(tmp_path, text))


def test_missing_hostfile_raises(tmp_path: Path) -> None:
  with pytest.raises(DiscoveryError) as excinfo:
    parse_hostfile(tmp_path / "absent")
  assert excinfo.value.source == 'hostfile'
  assert isinstance(excinfo.value.__cause__, OSError)


def test_add_hostfile_nodes_unions_into_result(tmp_path: Path) -> None:
  result = DiscoveryResult([Node(name='node01', slots=2, slots_given=True)])

  hint = add_hostfile_nodes(result, _hostfile(tmp_path, "node01 slots=2\nnode02 slots=1\n"))

  assert hint is False
  assert result.names() == ['node01', 'node02']
  assert [node.slots for node in result] == [4, 1]
