"""
Application-specific configuration rules.

These layer narrower checks on top of the common rules. Apart from storage
reachability they only produce advisory warnings: the values are allowed,
but may cause resource or performance problems.
"""

import logging
import math
import os
from typing import Any, List

from deployment.diagnostics import Diagnostic, error, warning, info
from deployment.rules import probes
from deployment.rules.base import Configuration
from deployment.rules.common import INTEGER_PATTERN

logger = logging.getLogger(__name__)

GIB = 1024 ** 3

NEXTCLOUD_MIN_FREE_BYTES = 1 * GIB
NAVIDROME_MIN_SCAN_INTERVAL_MINUTES = 5
JOPLIN_MAX_ITEM_SIZE_MB = 100


def _loose_int(value: Any) -> int:
    """Read an int from a string or number; anything unparsable counts as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        return int(value) if INTEGER_PATTERN.fullmatch(value) else 0
    return 0


def check_storage_capacity(
    configuration: Configuration,
    field: str = 'storage',
    required_bytes: int = NEXTCLOUD_MIN_FREE_BYTES
) -> List[Diagnostic]:
    """
    Check that a storage path is reachable and report its free space.

    Unreachable paths are errors; low free space is only a warning.
    """
    path = configuration.get(field)
    if not isinstance(path, str) or not path:
        return []

    if not os.path.isabs(path):
        return [error(field, "Cannot access path: path is not absolute")]

    path = os.path.normpath(path)
    parent_dir = os.path.dirname(path)
    if not os.path.isdir(parent_dir):
        return [error(field, f"Cannot access path: parent directory does not exist: {parent_dir}")]

    problem = probes.probe_directory(path)
    if problem:
        return [error(field, f"Cannot access path: {problem}")]

    try:
        available = probes.free_bytes(path)
    except OSError as e:
        return [error(field, f"Cannot access path: {e}")]

    available_gib = available / GIB
    required_gib = required_bytes / GIB
    if available < required_bytes:
        return [warning(
            field,
            f"Path is accessible but only {available_gib:.1f} GB free "
            f"(at least {required_gib:.0f} GB recommended)"
        )]

    return [info(field, f"Path is accessible ({available_gib:.1f} GB free)")]


def check_machine_learning(configuration: Configuration) -> List[Diagnostic]:
    """Immich machine learning needs considerably more memory and CPU."""
    if configuration.get('machinelearning') is True:
        return [warning(
            'machinelearning',
            "Machine learning enabled - ensure adequate RAM (8GB+) and CPU resources"
        )]
    return []


def check_smtp_host(configuration: Configuration) -> List[Diagnostic]:
    """Optional SMTP host must resolve; failures are advisory."""
    smtp_host = configuration.get('smtpHost')
    if not isinstance(smtp_host, str) or not smtp_host:
        return []

    try:
        probes.resolve_host(smtp_host)
    except (OSError, UnicodeError) as e:
        return [warning('smtpHost', f"SMTP host does not resolve: {e}", valid=False)]

    return []


def check_media_library(configuration: Configuration) -> List[Diagnostic]:
    """Warn when the media directory exists but holds nothing to serve."""
    media_path = configuration.get('mediaPath')
    if not isinstance(media_path, str) or not os.path.isdir(media_path):
        return []

    try:
        entries = os.listdir(media_path)
    except OSError as e:
        logger.debug(f"Cannot list media directory {media_path}: {e}")
        return []

    if not entries:
        return [warning('mediaPath', "Media directory exists but appears empty")]
    return []


def check_scan_interval(configuration: Configuration) -> List[Diagnostic]:
    """Library scans more often than every 5 minutes are costly."""
    if 'scanInterval' not in configuration:
        return []

    minutes = _loose_int(configuration['scanInterval'])
    if 0 < minutes < NAVIDROME_MIN_SCAN_INTERVAL_MINUTES:
        return [warning('scanInterval', "Very frequent scanning may impact performance")]
    return []


def check_max_item_size(configuration: Configuration) -> List[Diagnostic]:
    """Joplin items above 100 MB slow down synchronisation."""
    if 'maxItemSize' not in configuration:
        return []

    size_mb = _loose_int(configuration['maxItemSize'])
    if size_mb > JOPLIN_MAX_ITEM_SIZE_MB:
        return [warning('maxItemSize', "Large item size may impact sync performance")]
    return []
