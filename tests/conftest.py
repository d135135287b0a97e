import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netkit.config.settings import Settings  # noqa: E402
from netkit.models import NetworkErrorParams  # noqa: E402

BASE_URL = "https://api.example.com"
REFRESH_PATH = "/auth/refresh"


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Isolate tests from NETKIT_* variables in the developer's environment."""
    import os

    for name in list(os.environ):
        if name.startswith("NETKIT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NETKIT_BASE_URL", BASE_URL)
    monkeypatch.setenv("NETKIT_LOG_LEVEL", "INFO")
    monkeypatch.setenv("HTTP_ENABLE_HTTP2", "false")
    yield


@pytest.fixture
def error_params():
    """Default error vocabulary."""
    return NetworkErrorParams()


@pytest.fixture
def settings():
    """Settings with a refresh endpoint configured."""
    return Settings(base_url=BASE_URL, refresh_token_path=REFRESH_PATH, _env_file=None)


@pytest.fixture
def settings_without_refresh():
    """Settings with no refresh endpoint."""
    return Settings(base_url=BASE_URL, _env_file=None)


def make_status_error(status: int, path: str = "/orders", method: str = "GET", **kwargs):
    """Build an ``httpx.HTTPStatusError`` the way a transport would raise it."""
    request = httpx.Request(method, f"{BASE_URL}{path}")
    response = httpx.Response(status, request=request, **kwargs)
    return httpx.HTTPStatusError(
        f"HTTP {status} for {path}", request=request, response=response
    )


@pytest.fixture
def status_error():
    """Factory for transport-style status errors."""
    return make_status_error
