"""
Environment probes used by configuration rules (DNS and filesystem).

Kept in one module so tests can patch a single lookup point, e.g.
patch('deployment.rules.probes.resolve_host').
"""

import logging
import os
import shutil
import socket
from typing import List, Optional

from config.settings import AppConfig

logger = logging.getLogger(__name__)

# Standard permissions for directories created by the writability probe
PROBE_DIR_MODE = 0o755


def resolve_host(hostname: str) -> List[str]:
    """
    Resolve a hostname to its addresses.

    Raises:
        OSError: (socket.gaierror) if the name does not resolve
    """
    infos = socket.getaddrinfo(hostname, None)
    return sorted({info[4][0] for info in infos})


def nearest_existing_ancestor(path: str) -> Optional[str]:
    """Walk up from path until an existing directory is found."""
    current = os.path.normpath(path)
    while not os.path.exists(current):
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent
    return current


def probe_directory(path: str, mode: Optional[str] = None) -> Optional[str]:
    """
    Check that a directory can be created at path.

    In 'create' mode the directory is actually created to test write
    permissions; if it did not exist before and is still empty afterwards it
    is removed again. Two requests probing the same path at the same time can
    race on that cleanup.

    In 'access' mode nothing is created: the existing directory (or, if it is
    missing, its nearest existing ancestor) must be writable and searchable.

    Args:
        path: Absolute path to probe
        mode: 'create' or 'access' (defaults to AppConfig.PATH_PROBE_MODE)

    Returns:
        None if the directory is usable, otherwise an error description
    """
    mode = mode or AppConfig.PATH_PROBE_MODE
    path = os.path.normpath(path)

    if mode == 'access':
        target = nearest_existing_ancestor(path)
        if target is None or not os.path.isdir(target):
            return f"{target or path} is not a directory"
        if not os.access(target, os.W_OK | os.X_OK):
            return f"[Errno 13] Permission denied: '{target}'"
        return None

    existed = os.path.exists(path)
    try:
        os.makedirs(path, mode=PROBE_DIR_MODE, exist_ok=True)
    except OSError as e:
        return str(e)

    if not existed:
        try:
            if not os.listdir(path):
                os.rmdir(path)
        except OSError as e:
            logger.warning(f"Could not remove probe directory {path}: {e}")

    return None


def free_bytes(path: str) -> int:
    """
    Free disk space available at path (measured on its nearest existing ancestor).

    Raises:
        OSError: if no ancestor exists or the filesystem cannot be queried
    """
    target = nearest_existing_ancestor(path)
    if target is None:
        raise FileNotFoundError(f"No existing directory above {path}")
    return shutil.disk_usage(target).free
