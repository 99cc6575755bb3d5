"""Error taxonomy for node-pool allocation."""

from __future__ import annotations

from typing import Optional


class AllocationError(RuntimeError):
  """Base class for every failure surfaced by :meth:`Allocator.allocate`."""


class DiscoveryError(AllocationError):
  """A discovery source (managed module, hostfile or dash-host) failed."""

  def __init__(self, message: str, *, source: Optional[str] = None) -> None:
    super().__init__(message)
    self.source = source

  def __str__(self) -> str:
    message = super().__str__()
    if self.source:
      return f"[{self.source}] {message}"
    return message


class ResourceExhaustedError(AllocationError):
  """The local fallback node could not be constructed."""


class RegistryInsertError(AllocationError):
  """The node pool rejected a committed discovery result."""


class ConsumedResultError(RuntimeError):
  """A :class:`DiscoveryResult` was used after its nodes were handed over."""
