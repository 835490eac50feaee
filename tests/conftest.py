"""Shared fixtures for kuiper tests."""

import json
import os

import pytest
from click.testing import CliRunner

from kuiper import core
from kuiper.executor import RequestResult


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
def global_kuiper_dir(tmp_path, monkeypatch):
    """Override the global ~/.kuiper directory to a temp location."""
    fake_global = tmp_path / "fake_home" / ".kuiper"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    return fake_global


def write_request(path, uri="http://www.example.com", method="GET", **fields):
    """Write a .kuiper request file; extra fields go in verbatim."""
    data = {"uri": uri, "method": method, "headers": {}, "params": {}}
    data.update(fields)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def write_headers(directory, headers):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "headers.json"
    path.write_text(json.dumps(headers))
    return path


@pytest.fixture
def requests_tree(tmp_path):
    """A small requests root with headers at two levels.

    requests/
      headers.json                 root_header_1..3
      request_in_root.kuiper
      subdir/
        headers.json               overrides root_header_2/3, adds subdir_header_1
        request_in_subdir.kuiper   declares request_specific_header_1
    """
    root = tmp_path / "requests"
    write_headers(
        root,
        {
            "root_header_1": "root_value_1",
            "root_header_2": "root_value_2",
            "root_header_3": None,
        },
    )
    write_request(root / "request_in_root.kuiper")
    write_headers(
        root / "subdir",
        {
            "root_header_2": "subdir_value_2",
            "root_header_3": "root_value_3",
            "subdir_header_1": "subdir_value_1",
        },
    )
    write_request(
        root / "subdir" / "request_in_subdir.kuiper",
        uri="http://localhost/api/user/1",
        headers={"request_specific_header_1": "request_specific_header_value_1"},
    )
    return root


def make_request_result(
    status_code=200,
    body=None,
    headers=None,
    elapsed_ms=42.0,
    error=None,
    raw_text="",
):
    """Factory for mock RequestResult objects."""
    r = RequestResult()
    r.status_code = status_code
    r.headers = headers or {}
    r.body = body
    r.elapsed_ms = elapsed_ms
    r.error = error
    r.raw_text = raw_text or (
        json.dumps(body) if isinstance(body, dict | list) else str(body or "")
    )
    return r
