"""Shared test fixtures and configuration."""
from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tests.fixtures import gitlab_webhooks


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Environment for a Settings instance with authentication enabled."""
    env = {
        "GITLAB_TOKEN": "test_token_123",
        "GITLAB_BASEURL": "https://gitlab.example.com/",
        "WEBHOOK_SECRET": "test_webhook_secret",
        "CONFIG_FILE": ".scm-engine.yml",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("GLOBAL_CONFIG_FILE", raising=False)
    return env


@pytest.fixture
def mr_payload() -> dict[str, Any]:
    return gitlab_webhooks.merge_request_update()


@pytest.fixture
def note_payload() -> dict[str, Any]:
    return gitlab_webhooks.note_on_merge_request()


@pytest.fixture
def gitlab_client() -> AsyncMock:
    """GitLab client returning a valid config file."""
    client = AsyncMock()
    client.get_remote_config = AsyncMock(return_value=gitlab_webhooks.VALID_CONFIG)
    return client


@pytest.fixture
def processor() -> AsyncMock:
    processor = AsyncMock()
    processor.process_mr = AsyncMock(return_value=None)
    return processor


@pytest.fixture
def test_client(
    settings_env: dict[str, str], gitlab_client: AsyncMock, processor: AsyncMock
) -> Iterator[TestClient]:
    """Test client with GitLab and the rule engine mocked out."""
    from app.main import app, get_gitlab_client, get_global_config, get_processor

    app.dependency_overrides[get_gitlab_client] = lambda: gitlab_client
    app.dependency_overrides[get_processor] = lambda: processor
    app.dependency_overrides[get_global_config] = lambda: None

    yield TestClient(app)

    app.dependency_overrides.clear()
