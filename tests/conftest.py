"""Pytest configuration and shared fixtures for all tests."""

import pytest

from .npm_fixtures import install_chai, write_manifest


@pytest.fixture(autouse=True)
def disable_sentry_for_tests(monkeypatch):
    """Disable Sentry telemetry for all tests.

    This fixture runs automatically for every test to prevent Sentry events
    from being sent during test runs.
    """
    monkeypatch.setenv("TELEMETRY", "false")
    monkeypatch.delenv("SENTRY_DSN", raising=False)


@pytest.fixture
def chai_project(tmp_path):
    """The chai project with its manifest and a hoisted node_modules tree."""
    return install_chai(tmp_path / "chai-project")


@pytest.fixture
def manifest_only_project(tmp_path):
    """The chai project with only a package.json, nothing installed or locked."""
    project = tmp_path / "bare-project"
    write_manifest(project)
    return project
