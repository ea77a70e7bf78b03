"""Test configuration and fixtures."""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from registry_secret_scanner import RegistryClient, RegistryConfig
from registry_secret_scanner.config import ScanSettings
from registry_secret_scanner.scan.patterns import compile_patterns
from tests.helpers import FakeRegistry

TEST_PATTERNS = {
    "aws_key": r"AKIA[0-9A-Z]{16}",
    "generic_password": r"DB_PASS=\S+",
    "private_key": r"-----BEGIN (?:RSA )?PRIVATE KEY-----",
}


@pytest.fixture
def fake_registry():
    """Empty in-process registry."""
    return FakeRegistry()


@pytest_asyncio.fixture
async def registry_server(fake_registry):
    """Serve the fake registry on a local port."""
    async with TestServer(fake_registry.app()) as server:
        yield server


@pytest.fixture
def registry_config(registry_server):
    """Registry configuration pointing every endpoint at the test server."""
    base_url = f"http://{registry_server.host}:{registry_server.port}"
    return RegistryConfig(
        registry_url=base_url,
        auth_url=f"{base_url}/token",
        service="test-registry",
        hub_url=base_url,
        timeout=30,
    )


@pytest_asyncio.fixture
async def registry_client(registry_config):
    """Open registry client bound to the test server."""
    async with RegistryClient(registry_config) as client:
        yield client


@pytest.fixture
def patterns():
    """Compiled test patterns."""
    return compile_patterns(TEST_PATTERNS)


@pytest.fixture
def scan_settings(patterns, tmp_path):
    """Scan settings writing into a temporary working directory."""
    return ScanSettings(
        patterns=patterns,
        ignore_extensions=(".png", ".so"),
        output_dir=tmp_path / "docker_image",
        chunk_size=1024,
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as running against the in-process registry"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")
