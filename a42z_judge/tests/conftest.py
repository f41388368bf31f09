# Pytest configuration for the a42z judge gateway test suite
#
# Timeout strategy:
# - FAST tests: 10s (pure unit tests, no I/O)
# - MEDIUM tests: 30s (mocked HTTP, TestClient, sqlite)

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from a42z_judge.modules.adapters import JudgeGateway
from a42z_judge.modules.api import create_app
from a42z_judge.modules.dispatcher import ProxyDispatcher
from a42z_judge.modules.judges import BUILTIN_JUDGES, JudgeRegistry, credential_env_var
from a42z_judge.modules.result_store import ResultStore
from a42z_judge.modules.settings import Settings

from mocks import FakeUpstream

# ---------------------------------------------------------------------------
# Timeout configuration by test file
# ---------------------------------------------------------------------------

TIMEOUT_MAP = {
    # MEDIUM tests (30s) - mocked HTTP, TestClient, sqlite
    "test_api": 30,
    "test_webhook": 30,
    "test_archive": 30,
    "test_adapters": 15,
    "test_dispatcher": 15,
    # FAST tests (10s) - pure unit tests
    "test_registry": 10,
    "test_schemas": 10,
    "test_result_store": 10,
    "test_settings": 10,
    "test_server": 10,
}


def pytest_collection_modifyitems(config, items):
    """Apply timeout markers based on test file names."""
    for item in items:
        test_name = item.path.stem

        timeout = 30
        for pattern, t in TIMEOUT_MAP.items():
            if pattern in test_name:
                timeout = t
                break

        if item.get_closest_marker("timeout") is None:
            item.add_marker(pytest.mark.timeout(timeout))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def anyio_backend():
    return "asyncio"


def fake_credentials() -> dict:
    return {credential_env_var(judge.id): f"app-test-{judge.id}" for judge in BUILTIN_JUDGES}


@pytest.fixture
def registry() -> JudgeRegistry:
    """Built-in judges with fake credentials, frozen like at startup."""
    reg = JudgeRegistry(BUILTIN_JUDGES)
    reg.apply_credentials(fake_credentials())
    return reg.freeze()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def dispatcher(registry: JudgeRegistry, upstream: FakeUpstream) -> ProxyDispatcher:
    return ProxyDispatcher(registry, base_url="https://dify.test/v1", transport=upstream.transport)


@pytest.fixture
def store() -> ResultStore:
    return ResultStore()


@pytest.fixture
def gateway(registry: JudgeRegistry, dispatcher: ProxyDispatcher, store: ResultStore) -> JudgeGateway:
    return JudgeGateway(registry, dispatcher, store)


@pytest.fixture
def settings() -> Settings:
    return Settings(dify_api_url="https://dify.test/v1", public_base_url="https://judge.test")


@pytest.fixture
def client(settings: Settings, registry: JudgeRegistry, upstream: FakeUpstream):
    app = create_app(settings, registry=registry, transport=upstream.transport)
    with TestClient(app) as c:
        yield c
