"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides isolated settings, a built front-end and FastAPI test clients.
"""

import os
import tempfile

# Configure the environment before wavesynth sets up logging on import
os.environ.setdefault("WAVESYNTH_ENVIRONMENT", "testing")
os.environ.setdefault("WAVESYNTH_STORAGE_PATH", tempfile.mkdtemp(prefix="wavesynth_test_"))

import json
from pathlib import Path
from typing import Callable, Generator

import pytest
import yaml
from fastapi.testclient import TestClient

from wavesynth.api.main import create_app
from wavesynth.config.settings import Settings
from wavesynth.core.build.builder import build_assets
from wavesynth.core.state.store import StateStore
from wavesynth.models.schemas import AppState, BuildManifest, Component, ComponentKind

from tests.utils.data_generators import StateDataGenerator

TEST_GIT_HASH = "0123456789abcdef0123456789abcdef01234567"


@pytest.fixture(scope="session")
def built_assets(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Release build of the front-end, shared by the whole session."""
    output_dir = tmp_path_factory.mktemp("srv") / "http"
    build_assets(output_dir, release=True, git_hash=TEST_GIT_HASH)
    return output_dir


@pytest.fixture
def manifest(built_assets: Path) -> BuildManifest:
    return BuildManifest.model_validate_json((built_assets / "manifest.json").read_text())


@pytest.fixture
def make_settings(tmp_path: Path, built_assets: Path) -> Callable[..., Settings]:
    """Factory for test settings; keyword arguments override the defaults."""

    def factory(**overrides) -> Settings:
        values = {
            "environment": "testing",
            "debug": True,
            "storage_path": tmp_path / "storage",
            "server_root": built_assets,
            "persist_state": False,
            "log_level": "DEBUG",
        }
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def test_settings(make_settings: Callable[..., Settings]) -> Settings:
    """Test settings fixture."""
    return make_settings()


@pytest.fixture
def make_client(make_settings: Callable[..., Settings]) -> Generator[Callable[..., TestClient], None, None]:
    """Factory for test clients over freshly created applications."""
    clients = []

    def factory(follow_redirects: bool = True, **overrides) -> TestClient:
        client = TestClient(create_app(make_settings(**overrides)), follow_redirects=follow_redirects)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    """FastAPI test client with default test settings."""
    return make_client()


@pytest.fixture
def store() -> StateStore:
    """In-memory state store."""
    return StateStore()


@pytest.fixture
def sample_state() -> AppState:
    """State with one component of every kind."""
    return AppState(
        sample_rate=1000.0,
        n_samples=1000,
        components=[
            Component(kind=ComponentKind.SINE, frequency=100.0, amplitude=1.0, name="Base"),
            Component(kind=ComponentKind.SQUARE, frequency=50.0, amplitude=0.5),
            Component(kind=ComponentKind.SAWTOOTH, frequency=20.0, amplitude=0.25, phase=0.5),
        ],
    )


@pytest.fixture
def sample_state_json() -> str:
    """Sample JSON state document."""
    return json.dumps(StateDataGenerator.generate_two_tones())


@pytest.fixture
def sample_state_yaml() -> str:
    """Sample YAML state document."""
    return yaml.safe_dump(StateDataGenerator.generate_two_tones())


@pytest.fixture
def invalid_state_json() -> str:
    """Invalid JSON state document for error testing."""
    return '{"sample_rate": 1000, "components": [{"kind": "sine"}]'  # Missing closing brace
