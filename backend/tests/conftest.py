"""
Shared pytest fixtures for deployer tests.

Fixtures provided:
- resolving_dns: every hostname resolves (no network access)
- failing_dns: no hostname resolves
- session_key: fresh 256-bit AES-GCM key
- nextcloud_config: sample plaintext Nextcloud configuration
- mock_docker_client: Mock Docker SDK client
"""

import os
import socket
import sys
from unittest.mock import MagicMock, patch

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def resolving_dns():
    """Patch DNS so every hostname resolves."""
    with patch('deployment.rules.probes.resolve_host', return_value=['93.184.216.34']) as mock_resolve:
        yield mock_resolve


@pytest.fixture
def failing_dns():
    """Patch DNS so no hostname resolves."""
    with patch(
        'deployment.rules.probes.resolve_host',
        side_effect=socket.gaierror(-2, 'Name or service not known')
    ) as mock_resolve:
        yield mock_resolve


@pytest.fixture
def session_key():
    return AESGCM.generate_key(bit_length=256)


@pytest.fixture
def nextcloud_config(tmp_path):
    """A complete, valid Nextcloud configuration rooted in a temp directory."""
    return {
        "domain": "cloud.example.com",
        "adminUser": "admin",
        "adminPassword": "Sup3r-Secret!",
        "storage": str(tmp_path / "nextcloud-data"),
        "email": "admin@example.com",
    }


@pytest.fixture
def mock_docker_client():
    """
    Mock Docker SDK client for testing without real Docker daemon.
    """
    client = MagicMock()
    client.ping = MagicMock(return_value=True)
    client.version = MagicMock(return_value={'ApiVersion': '1.43', 'Version': '24.0.7'})
    client.api.api_version = '1.43'
    return client
