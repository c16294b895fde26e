"""Shared fixtures for hurl tests."""

import json
import os

import pytest
from click.testing import CliRunner

from hurl import core
from hurl.executor import RequestResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temporary project directory and cd into it."""
    original = os.getcwd()
    os.chdir(tmp_path)
    yield tmp_path
    os.chdir(original)


@pytest.fixture
def global_hurl_dir(tmp_path, monkeypatch):
    """Override the global ~/.hurl directory to a temp location."""
    fake_global = tmp_path / "fake_home" / ".hurl"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    monkeypatch.setattr(core, "GLOBAL_SESSIONS_DIR", fake_global / "sessions")
    return fake_global


def make_request_result(
    status_code=200,
    body=None,
    headers=None,
    cookies=None,
    reason="OK",
    elapsed_ms=42.0,
    raw_text="",
):
    """Factory for RequestResult objects returned by a mocked transport."""
    r = RequestResult()
    r.status_code = status_code
    r.reason = reason
    r.headers = headers or {}
    r.cookies = list(cookies or [])
    r.body = body
    r.elapsed_ms = elapsed_ms
    r.raw_text = raw_text or (
        json.dumps(body) if isinstance(body, dict | list) else str(body or "")
    )
    return r
