"""Test configuration and fixtures."""

import pytest

from registry_sync.auth.credentials import CredentialResolver
from registry_sync.core.types import SyncConfig


@pytest.fixture
def sync_config(tmp_path):
    """Configuration without retry delays and with an empty docker config."""
    return SyncConfig(
        concurrency=2,
        retries=2,
        retry_delay=0,
        docker_config=tmp_path / "config.json",
    )


@pytest.fixture
def no_credentials(tmp_path):
    """Resolver backed by a docker config that does not exist."""
    return CredentialResolver(tmp_path / "missing.json")


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")
