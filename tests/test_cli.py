from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from hostpool.cli import main


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
  for var in ('HOSTPOOL_DEFAULT_HOSTFILE', 'HOSTPOOL_RAS_MODULE', 'HOSTPOOL_STICKY_FAILURE', 'HOSTPOOL_MAX_NODES'):
    monkeypatch.delenv(var, raising=False)
  monkeypatch.setenv('HOSTPOOL_NODENAME', 'cli-host')
  return CliRunner()


def test_cli_prints_pool_from_hostfile(runner: CliRunner, tmp_path: Path) -> None:
  hostfile = tmp_path / "hosts"
  hostfile.write_text("alpha slots=2\nbeta slots=3\n")

  result = runner.invoke(main, ['--module', 'none', '--hostfile', str(hostfile)])

  assert result.exit_code == 0, result.output
  assert 'alpha' in result.output
  assert 'beta' in result.output
  assert '2 node(s), 5 slot(s)' in result.output
  assert 'oversubscribe override: off' in result.output


def test_cli_dash_host(runner: CliRunner) -> None:
  result = runner.invoke(main, ['-m', 'none', '-H', 'n[1-2]:4'])

  assert result.exit_code == 0, result.output
  assert '2 node(s), 8 slot(s)' in result.output


def test_cli_reports_allocation_failure(runner: CliRunner, tmp_path: Path) -> None:
  result = runner.invoke(main, ['-m', 'none', '--hostfile', str(tmp_path / "missing")])

  assert result.exit_code == 1
  assert 'Allocation failed' in result.output


def test_cli_rejects_unknown_module(runner: CliRunner) -> None:
  result = runner.invoke(main, ['-m', 'lsf'])

  assert result.exit_code == 1
  assert 'Unknown allocation module' in result.output
