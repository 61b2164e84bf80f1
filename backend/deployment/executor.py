"""
Deployment executor for validated application configurations.

The container-runtime side of a deployment is not performed here: the
executor records the request and returns a deployment record in the
'deploying' state. It refuses configurations whose validation report
contains blocking errors.

Usage:
    executor = DeploymentExecutor()
    result = executor.execute('nextcloud', configuration, report)
"""

import logging
import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from deployment.report import ValidationReport
from utils.redaction import redact_configuration

logger = logging.getLogger(__name__)


class InvalidConfigurationError(Exception):
    """Raised when deployment is attempted with a configuration that failed validation"""

    def __init__(self, report: ValidationReport):
        self.report = report
        super().__init__(report.summary)


@dataclass(frozen=True)
class DeploymentResult:
    container_id: str
    status: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DeploymentExecutor:
    """Turns a validated configuration into a deployment record."""

    def execute(
        self,
        app_id: str,
        configuration: Dict[str, Any],
        report: ValidationReport,
        request_id: Optional[str] = None
    ) -> DeploymentResult:
        """
        Start a deployment.

        Args:
            app_id: Application identifier
            configuration: Plaintext configuration (never logged unredacted)
            report: Validation report for this configuration
            request_id: Client request id, for log correlation

        Raises:
            InvalidConfigurationError: report has blocking errors
        """
        if not report.overall_valid:
            logger.warning(f"Refusing deployment of {app_id} (request {request_id}): {report.summary}")
            raise InvalidConfigurationError(report)

        logger.info(
            f"Deploying {app_id} (request {request_id}) with configuration: "
            f"{redact_configuration(configuration)}"
        )

        return DeploymentResult(
            container_id=f"{app_id}-{uuid.uuid4().hex[:12]}",
            status="deploying",
            created_at=datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ'),
        )
