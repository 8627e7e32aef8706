"""
Tests for app.py: the first-run Chromium check never stops the page
from rendering.
"""

import importlib
import subprocess
import sys
from contextlib import contextmanager
from types import SimpleNamespace

import playwright.sync_api
import pytest


def _missing_browser():
    def launch(**kwargs):
        raise RuntimeError("Executable doesn't exist")

    @contextmanager
    def fake_sync_playwright():
        yield SimpleNamespace(chromium=SimpleNamespace(launch=launch))

    return fake_sync_playwright


def _installed_browser():
    browser = SimpleNamespace(close=lambda: None)

    @contextmanager
    def fake_sync_playwright():
        yield SimpleNamespace(chromium=SimpleNamespace(launch=lambda **kwargs: browser))

    return fake_sync_playwright


def _install_result(returncode=0, error=None):
    def run(*args, **kwargs):
        if error is not None:
            raise error
        return subprocess.CompletedProcess(args, returncode)

    return run


@pytest.fixture()
def load_app(monkeypatch):
    """Import app.py with the browser check and installer replaced."""

    def _load(sync_playwright, run):
        monkeypatch.setattr(playwright.sync_api, "sync_playwright", sync_playwright)
        monkeypatch.setattr(subprocess, "run", run)
        sys.modules.pop("app", None)
        app = importlib.import_module("app")
        app.install_playwright_browsers.clear()
        return app

    yield _load
    sys.modules.pop("app", None)


class TestInstallPlaywrightBrowsers:

    def test_installed_browser_skips_install(self, load_app):
        calls = []

        def run(*args, **kwargs):
            calls.append(args)
            return subprocess.CompletedProcess(args, 0)

        app = load_app(_installed_browser(), run)
        calls.clear()
        assert app.install_playwright_browsers() is True
        assert calls == []

    def test_missing_playwright_executable(self, load_app):
        app = load_app(_missing_browser(), _install_result(error=FileNotFoundError("playwright")))
        assert app.install_playwright_browsers() is False

    def test_install_timeout(self, load_app):
        timeout = subprocess.TimeoutExpired(["playwright", "install", "chromium"], 300)
        app = load_app(_missing_browser(), _install_result(error=timeout))
        assert app.install_playwright_browsers() is False

    def test_install_succeeds(self, load_app):
        app = load_app(_missing_browser(), _install_result(returncode=0))
        assert app.install_playwright_browsers() is True

    def test_install_fails(self, load_app):
        app = load_app(_missing_browser(), _install_result(returncode=1))
        assert app.install_playwright_browsers() is False
