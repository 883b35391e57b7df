"""Test configuration and fixtures for SurfaceScan."""

import base64
import json
import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from surfacescan.modules.scanner.models import Target
from surfacescan.modules.scanner.target import normalize_target


def make_jwt(payload: dict) -> str:
    """Build an unsigned JWT-shaped token carrying *payload*."""

    def encode(data: dict) -> str:
        raw = json.dumps(data, separators=(",", ":")).encode()
        return base64.urlsafe_b64encode(raw).decode().rstrip("=")

    header = encode({"alg": "HS256", "typ": "JWT"})
    return f"{header}.{encode(payload)}.c2lnbmF0dXJlLXBsYWNlaG9sZGVy"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def target() -> Target:
    return normalize_target("https://example.com")


@pytest.fixture
def jwt_factory():
    return make_jwt


@pytest.fixture
def anon_jwt() -> str:
    return make_jwt({"iss": "supabase", "ref": "abcdefghijkl", "role": "anon"})


@pytest.fixture
def service_jwt() -> str:
    return make_jwt({"iss": "supabase", "ref": "abcdefghijkl", "role": "service_role"})


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Point ~ at an empty directory and drop SURFACESCAN_* variables."""
    for key in list(os.environ):
        if key.startswith("SURFACESCAN_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(temp_dir))
    return temp_dir
