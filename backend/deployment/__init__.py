"""
Deployment module

Handles the secure intake of application deployment requests: decryption of
client-side encrypted fields, configuration validation and the hand-off to
the deployment executor.

Components:
    - field_decryptor: AES-GCM envelope parsing and field decryption
    - catalog: Closed set of deployable applications
    - rules: Common and application-specific validation rules
    - config_validator: Runs the rules for an application
    - report: Aggregates diagnostics into a verdict
    - intake: decrypt -> validate -> aggregate pipeline
    - executor: Starts deployments of validated configurations
    - routes: API endpoints
"""

from .catalog import AppId, APP_CATALOG
from .diagnostics import Diagnostic, Severity
from .field_decryptor import (
    DecryptionError,
    UnsupportedEncryptionError,
    InvalidKeyError,
    DecryptionFailedError,
    EnvelopeFormatError,
    decrypt_configuration,
    encrypt_configuration,
)
from .config_validator import ConfigurationValidator, validate_configuration
from .report import ValidationReport, aggregate
from .intake import IntakeResult, process_configuration
from .executor import DeploymentExecutor, InvalidConfigurationError

__all__ = [
    "AppId",
    "APP_CATALOG",
    "Diagnostic",
    "Severity",
    "DecryptionError",
    "UnsupportedEncryptionError",
    "InvalidKeyError",
    "DecryptionFailedError",
    "EnvelopeFormatError",
    "decrypt_configuration",
    "encrypt_configuration",
    "ConfigurationValidator",
    "validate_configuration",
    "ValidationReport",
    "aggregate",
    "IntakeResult",
    "process_configuration",
    "DeploymentExecutor",
    "InvalidConfigurationError",
]
