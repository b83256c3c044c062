"""
Global test configuration with support for different test types.
"""

import logging
import os

import pytest

from gemini_web.client.resilient import ResilientClient
from gemini_web.config.types import FrozenConfig
from tests.adapters import ScriptedAdapter
from tests.helpers import FakeClock, RecordingSleep

# Every environment variable the configuration layer reads
CONFIG_ENV_VARS = (
    "GOOGLE_API_KEY",
    "GENAI_BASE_URL",
    "MODEL",
    "REQUEST_TIMEOUT",
    "RATE_LIMIT_RPM",
    "RATE_LIMIT_MAX_BURST",
    "MAX_RETRIES",
    "BASE_RETRY_DELAY",
    "MAX_RETRY_DELAY",
    "JITTER_FACTOR",
    "MAX_CONCURRENT_REQUESTS",
    "MAX_QUEUED_REQUESTS",
    "DEBUG",
)


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_config_env(request, monkeypatch):
    """Ensure a clean configuration environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env, and
    tests marked ``api`` bypass isolation so a real key can be used.
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Interface and invariant contracts",
        "integration: Component integration tests with mocked APIs",
        "api: Real API integration tests (requires API key)",
        "allow_env_pollution: Keep the caller's environment unchanged",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Automatically skip API tests when API key is unavailable."""
    if not (
        (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"))
        and os.getenv("ENABLE_API_TESTS")
    ):
        skip_api = pytest.mark.skip(
            reason="API tests require GEMINI_API_KEY and ENABLE_API_TESTS=1",
        )
        for item in items:
            if "api" in item.keywords:
                item.add_marker(skip_api)


# --- Core Fixtures ---


@pytest.fixture
def mock_api_key():
    """Provide a consistent, fake API key for tests."""
    return "test_api_key_12345_67890_abcdef_ghijkl"


@pytest.fixture
def wall_clock():
    return FakeClock(start=1_000_000.0)


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def make_client(mock_api_key, wall_clock, fake_sleep):
    """Factory for clients wired to a scripted adapter and fake time.

    Jitter is neutralized (rng=0.5) and the bucket is large enough that no
    test is throttled unless it asks to be.
    """

    def _make(adapter: ScriptedAdapter, **overrides) -> ResilientClient:
        settings = {
            "api_key": mock_api_key,
            "model": "primary-model",
            "fallback_model": "fallback-model",
            "requests_per_minute": 60_000,
            "max_burst": 1_000,
            "timeout_ms": 5_000,
        }
        settings.update(overrides)
        return ResilientClient(
            FrozenConfig(**settings),
            adapter=adapter,
            clock=wall_clock,
            sleep=fake_sleep,
            rng=lambda: 0.5,
        )

    return _make
