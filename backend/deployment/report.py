"""
Validation report - reduces a diagnostic sequence to a deployment verdict.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from deployment.diagnostics import Diagnostic, Severity


@dataclass(frozen=True)
class ValidationReport:
    """
    Verdict over one configuration.

    Attributes:
        overall_valid: False only if some Error diagnostic failed
        diagnostics: All diagnostics, in the order the rules produced them
        summary: Human-readable verdict
    """
    overall_valid: bool
    diagnostics: Tuple[Diagnostic, ...]
    summary: str

    @classmethod
    def build(cls, diagnostics: Iterable[Diagnostic]) -> "ValidationReport":
        """
        Build a report from a diagnostic sequence.

        Summary precedence: blocking errors, then warnings, then ready.
        Warnings and infos never affect overall_valid.
        """
        diagnostics = tuple(diagnostics)

        error_count = sum(1 for d in diagnostics if d.is_blocking)
        warning_count = sum(1 for d in diagnostics if d.severity == Severity.WARNING)

        if error_count > 0:
            summary = f"{error_count} error(s) found - deployment will fail"
        elif warning_count > 0:
            summary = f"{warning_count} warning(s) found - deployment may have issues"
        else:
            summary = "Configuration is valid and ready for deployment"

        return cls(
            overall_valid=error_count == 0,
            diagnostics=diagnostics,
            summary=summary,
        )

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.is_blocking)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == Severity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation: {valid, results, summary}"""
        return {
            "valid": self.overall_valid,
            "results": [d.to_dict() for d in self.diagnostics],
            "summary": self.summary,
        }


def aggregate(diagnostics: Iterable[Diagnostic]) -> ValidationReport:
    return ValidationReport.build(diagnostics)
