"""
Configuration validation for application deployments.

Runs the common rules followed by the application's own rules and collects
their diagnostics in run order. Rules never stop each other: a rule that fails
or crashes does not prevent the remaining rules from running.

Usage:
    validator = ConfigurationValidator()
    diagnostics = validator.validate('immich', configuration)
    report = validator.validate_report('immich', configuration)

    if not report.overall_valid:
        print(report.summary)
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from deployment.catalog import AppId
from deployment.diagnostics import Diagnostic, error
from deployment.report import ValidationReport
from deployment.rules.base import Rule
from deployment.rules.registry import rules_for

logger = logging.getLogger(__name__)


class ConfigurationValidator:
    """
    Dispatches configuration rules for an application.

    Holds no per-request state, so a single instance can serve concurrent
    requests.
    """

    def __init__(self, rule_selector=rules_for):
        """
        Args:
            rule_selector: Function mapping an app id to its ordered rules
        """
        self._rule_selector = rule_selector

    def rules(self, app_id: Union[AppId, str, None]) -> Sequence[Rule]:
        return self._rule_selector(app_id)

    def validate(
        self,
        app_id: Union[AppId, str, None],
        configuration: Mapping[str, Any]
    ) -> List[Diagnostic]:
        """
        Run every applicable rule against a (plaintext) configuration.

        Args:
            app_id: Application identifier; unknown ids only get common rules
            configuration: Configuration mapping, not modified

        Returns:
            Diagnostics in rule order, without deduplication
        """
        diagnostics: List[Diagnostic] = []

        for rule in self.rules(app_id):
            diagnostics.extend(self._run_rule(rule, configuration))

        return diagnostics

    def validate_report(
        self,
        app_id: Union[AppId, str, None],
        configuration: Mapping[str, Any]
    ) -> ValidationReport:
        """Validate and aggregate into a ValidationReport."""
        return ValidationReport.build(self.validate(app_id, configuration))

    def _run_rule(self, rule: Rule, configuration: Mapping[str, Any]) -> List[Diagnostic]:
        """Run one rule; unexpected exceptions become an Error diagnostic for its field."""
        try:
            return rule(configuration)
        except Exception as e:
            # Only the exception type is logged: messages may quote field values
            logger.error(f"Validator '{rule.name}' failed on field '{rule.field}': {type(e).__name__}")
            return [error(rule.field, f"Internal error while validating this field ({rule.name} check failed)")]


_default_validator: Optional[ConfigurationValidator] = None


def get_configuration_validator() -> ConfigurationValidator:
    """Shared validator instance"""
    global _default_validator
    if _default_validator is None:
        _default_validator = ConfigurationValidator()
    return _default_validator


def validate_configuration(
    app_id: Union[AppId, str, None],
    configuration: Mapping[str, Any]
) -> List[Diagnostic]:
    return get_configuration_validator().validate(app_id, configuration)
