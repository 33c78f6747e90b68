"""
Shared pytest fixtures for trellis-core tests.

This module provides:
- A fresh :class:`TrellisContext` per test, installed as the current context
- A temporary application base path with a ``runtime/`` directory
- A running :class:`DummyApplication` bound to that base path

Usage:
    def test_something(context, base_path):
        app = DummyApplication({"base_path": base_path}, context=context)
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from trellis.core.context import TrellisContext, set_context
from trellis.core.logging import configure_logging
from trellis.core.settings import TrellisSettings
from tests._support import DummyApplication


def pytest_configure(config: pytest.Config) -> None:
    """Keep framework diagnostics out of captured stdout."""
    configure_logging(level="WARNING", json_format=False, add_timestamp=False)


@pytest.fixture
def settings() -> TrellisSettings:
    return TrellisSettings(_env_file=None)


@pytest.fixture
def debug_settings() -> TrellisSettings:
    return TrellisSettings(_env_file=None, debug=True)


def _install(ctx: TrellisContext) -> Generator[TrellisContext, None, None]:
    previous = set_context(ctx)
    try:
        yield ctx
    finally:
        ctx.close()
        set_context(previous)


@pytest.fixture
def context(settings: TrellisSettings) -> Generator[TrellisContext, None, None]:
    """A fresh context, installed as the current one for the test."""
    yield from _install(TrellisContext(settings))


@pytest.fixture
def debug_context(debug_settings: TrellisSettings) -> Generator[TrellisContext, None, None]:
    yield from _install(TrellisContext(debug_settings))


@pytest.fixture
def base_path(tmp_path: Path) -> Path:
    """Application base directory containing an empty ``runtime/``."""
    (tmp_path / "runtime").mkdir()
    return tmp_path


@pytest.fixture
def app(context: TrellisContext, base_path: Path) -> DummyApplication:
    return DummyApplication({"base_path": str(base_path), "name": "Test App"}, context=context)
