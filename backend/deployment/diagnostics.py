"""
Diagnostic types produced by configuration validation.

Every validator reports its findings as Diagnostic records. A diagnostic names
exactly one configuration field and one check outcome; several diagnostics may
refer to the same field (for example an Error from one rule and an Info from
another) and all of them are kept.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any


class Severity(Enum):
    """
    Diagnostic severity levels.

    Levels:
        ERROR: Blocks deployment when the check failed (valid=False)
        WARNING: Advisory, deployment may still proceed
        INFO: Confirmation that a check passed
    """
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Diagnostic:
    """
    Outcome of one check on one configuration field.

    Attributes:
        field: Configuration field the check applies to
        valid: Whether the field passed the check
        message: Human-readable description, safe to show to the submitting user
        severity: Error, Warning or Info
    """
    field: str
    valid: bool
    message: str
    severity: Severity

    @property
    def is_blocking(self) -> bool:
        """True for failed Error diagnostics, the only kind that blocks deployment."""
        return self.severity == Severity.ERROR and not self.valid

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (severity is exposed as 'type')."""
        return {
            "field": self.field,
            "valid": self.valid,
            "message": self.message,
            "type": self.severity.value,
        }


def error(field: str, message: str) -> Diagnostic:
    return Diagnostic(field=field, valid=False, message=message, severity=Severity.ERROR)


def warning(field: str, message: str, valid: bool = True) -> Diagnostic:
    return Diagnostic(field=field, valid=valid, message=message, severity=Severity.WARNING)


def info(field: str, message: str) -> Diagnostic:
    return Diagnostic(field=field, valid=True, message=message, severity=Severity.INFO)
