"""
Test support utilities for trellis-core tests.

Helpers that don't fit as pytest fixtures but are shared across test
files: minimal application subclasses and class-file writers.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

from trellis.core.application import Application


class DummyApplication(Application):
    """Application whose request handling records that it ran."""

    handled = False

    def process_request(self) -> None:
        self.handled = True


class FailingApplication(Application):
    """Application whose request handling raises."""

    def process_request(self) -> None:
        raise RuntimeError("request exploded")


def write_class_file(directory: Path, name: str, source: str) -> Path:
    """Write ``<directory>/<name>.py`` with dedented *source*."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.py"
    path.write_text(textwrap.dedent(source).lstrip())
    return path
