"""CLI entry point for hostpool."""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hostpool import __version__
from hostpool.errors import AllocationError
from hostpool.node import AppContext, Job
from hostpool.registry import NodePool
from hostpool.settings import AllocationSettings, build_allocator


console = Console()


def _build_apps(app_hostfiles: Tuple[str, ...], hosts: Tuple[str, ...]) -> List[AppContext]:
  apps: List[AppContext] = []
  for hostfile in app_hostfiles:
    apps.append(AppContext(name=f"app{len(apps)}", hostfile=Path(hostfile)))
  for spec in hosts:
    apps.append(AppContext(name=f"app{len(apps)}", dash_host=spec))
  return apps


def _render_pool(pool: NodePool, job: Job) -> Table:
  table = Table(title=f"Node pool for job {escape(job.job_id)}")
  table.add_column("Node", style="cyan")
  table.add_column("State")
  table.add_column("Slots", justify="right")
  table.add_column("Max slots", justify="right")
  table.add_column("In use", justify="right")
  for row in pool.to_frame().itertuples(index=False):
    table.add_row(
      escape(row.name),
      row.state,
      str(row.slots),
      str(row.slots_max) if row.slots_max else "-",
      str(row.slots_inuse),
    )
  return table


@click.command()
@click.option(
  "--hostfile", "-f",
  type=click.Path(dir_okay=False),
  default=None,
  help="Default hostfile defining the global pool.",
)
@click.option(
  "--app-hostfile",
  multiple=True,
  type=click.Path(dir_okay=False),
  help="Hostfile of one application (repeatable, one app per value).",
)
@click.option(
  "--host", "-H",
  multiple=True,
  help="Dash-host list of one application, e.g. 'node[01-04]:2' (repeatable).",
)
@click.option(
  "--module", "-m",
  type=str,
  default=None,
  help="Managed allocation module: slurm, pbs, ray or none (default: auto-detect).",
)
@click.option(
  "--sticky-failure",
  is_flag=True,
  default=False,
  help="Keep the allocation latch set when the first allocation fails.",
)
@click.option("--job-id", default="job0", show_default=True, help="Identifier of the job.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="hostpool")
def main(
  hostfile: Optional[str],
  app_hostfile: Tuple[str, ...],
  host: Tuple[str, ...],
  module: Optional[str],
  sticky_failure: bool,
  job_id: str,
  verbose: bool,
):
  """
  Discover the nodes available to a job and print the resulting pool.

  \b
  Examples:
      hostpool                         # managed allocation or local host
      hostpool -f hosts.txt            # default hostfile
      hostpool -H node[01-02]:4        # dash-host list
  """
  logging.basicConfig(
    level=logging.DEBUG if verbose else logging.WARNING,
    format="%(levelname)s %(name)s: %(message)s",
  )

  try:
    settings = AllocationSettings.from_env()
  except ValueError as e:
    console.print(f"[red]✗ Invalid configuration: {escape(str(e))}[/]")
    sys.exit(1)

  settings = AllocationSettings(
    default_hostfile=Path(hostfile) if hostfile else settings.default_hostfile,
    module=module if module is not None else settings.module,
    sticky_failure=sticky_failure or settings.sticky_failure,
    max_nodes=settings.max_nodes,
  )

  try:
    allocator = build_allocator(settings)
  except ValueError as e:
    console.print(f"[red]✗ {escape(str(e))}[/]")
    sys.exit(1)

  job = Job.from_apps(job_id, _build_apps(app_hostfile, host))
  try:
    allocator.allocate(job)
  except AllocationError as e:
    console.print(f"[red]✗ Allocation failed: {escape(str(e))}[/]")
    sys.exit(1)

  console.print(_render_pool(allocator.pool, job))
  console.print(
    f"[green]✓ {len(allocator.pool)} node(s), {allocator.pool.total_slots()} slot(s)[/] "
    f"oversubscribe override: {'on' if job.oversubscribe_override else 'off'}"
  )


if __name__ == "__main__":
  main()
