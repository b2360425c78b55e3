"""
Shared pytest configuration for the crmops test suite.

Centralizes reusable testing utilities so that:
    • client tests share one in-memory Supabase double
    • CLI tests share a Typer CliRunner and JSON input files
    • fixtures load consistently from tests/fixtures/
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from crmops.supabase_client import SupabaseClient
from tests.fixtures.fake_supabase import FakeClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provides a fresh Typer CliRunner instance for CLI tests."""
    return CliRunner()


@pytest.fixture
def load_json_fixture():
    """Load a JSON fixture from tests/fixtures/."""

    def _loader(name: str):
        return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))

    return _loader


@pytest.fixture
def fake_client() -> FakeClient:
    """Empty in-memory Supabase double."""
    return FakeClient()


@pytest.fixture
def client(fake_client: FakeClient) -> SupabaseClient:
    """SupabaseClient wrapper around the in-memory double."""
    return SupabaseClient(fake_client)


@pytest.fixture
def write_rows(tmp_path):
    """Write a list of rows to a JSON file and return its path."""

    def _writer(rows, name: str = "rows.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(rows), encoding="utf-8")
        return path

    return _writer
