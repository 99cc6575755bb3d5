"""
Local system identity.

The allocation fallback names the launcher's own node with :func:`nodename`,
and :func:`session_directory` builds its path from the same value, so the
node in the pool and the session tree always agree on the host name.
"""

from __future__ import annotations

import getpass
import os
import socket
import tempfile
from pathlib import Path
from typing import Optional

from hostpool.constants import ENV_NODENAME, SESSION_DIR_PREFIX

_NODENAME: Optional[str] = None


def nodename() -> str:
  """Return the resolved name of the local node, cached for the process."""
  global _NODENAME
  if _NODENAME is None:
    name = os.environ.get(ENV_NODENAME, '').strip()
    if not name:
      name = socket.gethostname().strip()
    if not name:
      raise OSError("Unable to resolve the local host name")
    _NODENAME = name
  return _NODENAME


def reset_nodename() -> None:
  """Forget the cached node name (tests and forked launchers)."""
  global _NODENAME
  _NODENAME = None


def session_directory(base: Optional[str | os.PathLike] = None) -> Path:
  root = Path(base) if base is not None else Path(tempfile.gettempdir())
  try:
    user = getpass.getuser()
  except (KeyError, OSError):
    user = str(os.getuid()) if hasattr(os, 'getuid') else 'unknown'
  return root / f"{SESSION_DIR_PREFIX}-{user}@{nodename()}_0"
