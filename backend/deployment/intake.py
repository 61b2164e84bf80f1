"""
Secure configuration intake: decrypt -> validate -> aggregate.

Each call is an independent, synchronous computation with no shared mutable
state, so requests can be processed concurrently.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from deployment.config_validator import ConfigurationValidator, get_configuration_validator
from deployment.field_decryptor import ENVELOPE_KEY, decrypt_configuration
from deployment.report import ValidationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntakeResult:
    """Plaintext configuration plus its validation report"""
    configuration: Dict[str, Any]
    report: ValidationReport


def process_configuration(
    app_id: str,
    configuration: Dict[str, Any],
    validator: Optional[ConfigurationValidator] = None
) -> IntakeResult:
    """
    Run a submitted configuration through the intake pipeline.

    If the configuration carries an '_encryption' envelope its fields are
    decrypted first; validators only ever see plaintext.

    Raises:
        DecryptionError: The configuration could not be decrypted. Validation
            is not attempted.
    """
    validator = validator or get_configuration_validator()

    if ENVELOPE_KEY in configuration:
        configuration = decrypt_configuration(configuration)
    else:
        configuration = dict(configuration)

    report = validator.validate_report(app_id, configuration)

    logger.info(
        f"Validated configuration for {app_id}: {report.summary} "
        f"({len(report.diagnostics)} result(s))"
    )

    return IntakeResult(configuration=configuration, report=report)
