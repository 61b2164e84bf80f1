"""
Redaction helpers for logging deployment configurations.

Sensitive values must never reach the logs; configurations are passed through
redact_configuration() before being logged.
"""

from typing import Any, Dict

REDACTED = '[REDACTED]'

# Matched case-insensitively against field names (adminPassword, dbPassword,
# adminToken, smtpPassword, secretKey, apiKey, ...)
SENSITIVE_PATTERNS = ('password', 'token', 'secret', 'key', 'apikey')


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data"""
    lowered = field_name.lower()
    return any(pattern in lowered for pattern in SENSITIVE_PATTERNS)


def redact_configuration(configuration: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of the configuration that is safe to log.

    Sensitive fields are replaced with '[REDACTED]' and the encryption
    envelope is dropped entirely (it carries the session key).
    """
    safe = {}
    for key, value in configuration.items():
        if key == '_encryption':
            continue
        safe[key] = REDACTED if is_sensitive_field(key) else value
    return safe
