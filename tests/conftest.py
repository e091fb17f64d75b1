"""Shared pytest fixtures for assistctl tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from click.testing import CliRunner

from assistctl.config.models import ApiConfig
from assistctl.services.client import ApiClient
from tests.fakes import FakeApi


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real keys, config files, and stored credentials out of every test."""
    for name in ("OPENAI_API_KEY", "ASSISTCTL_CONFIG", "ASSISTCTL_API__KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ASSISTCTL_CREDENTIALS", str(tmp_path / "credentials.json"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def api_config() -> ApiConfig:
    return ApiConfig(key="sk-test")


@pytest.fixture
async def api(fake_api: FakeApi, api_config: ApiConfig) -> AsyncGenerator[ApiClient]:
    """ApiClient wired to the in-memory API."""
    async with fake_api.client() as http:
        yield ApiClient(api_config, http_client=http)


@pytest.fixture
def cli_api(fake_api: FakeApi, monkeypatch: pytest.MonkeyPatch) -> FakeApi:
    """Route CLI invocations to the in-memory API with a configured key."""
    monkeypatch.setenv("ASSISTCTL_API__KEY", "sk-test")
    monkeypatch.setenv("ASSISTCTL_PLUGINS__ENABLED", "false")
    monkeypatch.setattr(
        "assistctl.commands._context.build_http_client", lambda config: fake_api.client()
    )
    return fake_api
