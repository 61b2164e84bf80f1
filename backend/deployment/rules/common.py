"""
Common configuration rules, applied to every application.

Checks, in execution order:
- Domain name format and DNS resolution
- Filesystem paths (absolute, parent exists, writable)
- Port numbers
- Password length and complexity
- Email address format

Each check only runs when its field is present (and, for string fields,
non-empty).
"""

import logging
import math
import os
import re
from typing import Any, List, Tuple

from deployment.diagnostics import Diagnostic, error, warning, info
from deployment.rules import probes
from deployment.rules.base import Configuration

logger = logging.getLogger(__name__)

DOMAIN_FIELD = 'domain'
PATH_FIELDS = ('storage', 'uploadPath', 'mediaPath', 'musicPath')
PORT_FIELDS = ('smtpPort', 'port')
PASSWORD_FIELDS = ('adminPassword', 'dbPassword', 'adminToken')
EMAIL_FIELDS = ('email', 'adminEmail')

MIN_PORT = 1
MAX_PORT = 65535
MIN_PASSWORD_LENGTH = 8
# Out of 4 character classes (upper, lower, digit, symbol)
MIN_PASSWORD_STRENGTH = 3

# Hostname labels: 1-63 alphanumeric/hyphen characters, no leading/trailing hyphen
DOMAIN_PATTERN = re.compile(
    r'[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*'
)
EMAIL_PATTERN = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
# ASCII digits only, no whitespace or underscores
INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')

PASSWORD_CLASSES = (
    re.compile(r'[A-Z]'),
    re.compile(r'[a-z]'),
    re.compile(r'[0-9]'),
    re.compile(r'[!@#$%^&*()_+\-=\[\]{};\':"\\|,.<>/?]'),
)


def _string_value(configuration: Configuration, field: str) -> str:
    """Return the field's value if it is a non-empty string, else ''."""
    value = configuration.get(field)
    return value if isinstance(value, str) else ''


def check_domain(configuration: Configuration) -> List[Diagnostic]:
    """Validate domain format, then check that it resolves."""
    domain = _string_value(configuration, DOMAIN_FIELD)
    if not domain:
        return []

    if not DOMAIN_PATTERN.fullmatch(domain):
        return [error(DOMAIN_FIELD, "Invalid domain format")]

    try:
        probes.resolve_host(domain)
    except (OSError, UnicodeError) as e:
        # The domain may simply not be set up yet
        return [warning(DOMAIN_FIELD, f"Domain does not resolve: {e}", valid=False)]

    return [info(DOMAIN_FIELD, "Domain is valid and resolves")]


def check_path(configuration: Configuration, field: str) -> List[Diagnostic]:
    """Validate a filesystem path: absolute, existing parent, writable."""
    path = _string_value(configuration, field)
    if not path:
        return []

    if not os.path.isabs(path):
        return [error(field, "Path must be absolute (start with /)")]

    # Resolve ".." first so the probe cannot create intermediate directories
    path = os.path.normpath(path)
    parent_dir = os.path.dirname(path)
    if not os.path.isdir(parent_dir):
        return [error(field, f"Parent directory does not exist: {parent_dir}")]

    problem = probes.probe_directory(path)
    if problem:
        return [error(field, f"Cannot create directory (permission denied): {problem}")]

    return [info(field, "Path is valid and writable")]


def _parse_port(value: Any) -> Tuple[int, str]:
    """Returns (port, error message); error message is '' on success."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return 0, "Port must be a number"

    if isinstance(value, str):
        if not INTEGER_PATTERN.fullmatch(value):
            return 0, "Invalid port number format - port must be a number"
        return int(value), ''

    if isinstance(value, float) and not math.isfinite(value):
        return 0, "Port must be a number"

    return int(value), ''


def check_port(configuration: Configuration, field: str) -> List[Diagnostic]:
    """Validate a port number given as a string or a number."""
    if field not in configuration:
        return []

    port, problem = _parse_port(configuration[field])
    if problem:
        return [error(field, problem)]

    if port < MIN_PORT or port > MAX_PORT:
        return [error(field, f"Port must be between {MIN_PORT} and {MAX_PORT}")]

    return [info(field, "Port number is valid")]


def password_strength(password: str) -> int:
    """Count character classes present in password (0-4)."""
    return sum(1 for pattern in PASSWORD_CLASSES if pattern.search(password))


def check_password(configuration: Configuration, field: str) -> List[Diagnostic]:
    """
    Validate password length and complexity.

    Only length is enforced; low complexity is reported as a warning.
    """
    password = _string_value(configuration, field)
    if not password:
        return []

    if len(password) < MIN_PASSWORD_LENGTH:
        return [error(field, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")]

    if password_strength(password) < MIN_PASSWORD_STRENGTH:
        return [warning(
            field,
            "Password is weak - consider adding uppercase, lowercase, numbers, and special characters"
        )]

    return [info(field, "Password strength is good")]


def check_email(configuration: Configuration, field: str) -> List[Diagnostic]:
    """Validate email address format."""
    email = _string_value(configuration, field)
    if not email:
        return []

    if not EMAIL_PATTERN.fullmatch(email):
        return [error(field, "Invalid email format")]

    return [info(field, "Email format is valid")]
