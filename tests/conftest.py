# tests/conftest.py
"""
Shared test setup for project.

Every test starts from the same runtime state (log level, color, stream
routing) so module-level runtime flags never leak between tests.
"""

from collections.abc import Generator

import pytest
from pytest import Config, Item as PytestItem

import shell_flatten.runtime as mod_runtime
from tests.utils import make_trace

TRACE = make_trace("⚡️")


@pytest.fixture(autouse=True)
def reset_runtime(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset runtime flags between tests."""
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_to_stderr", False)
    yield
    TRACE("runtime reset", dict(mod_runtime.current_runtime))


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Automatically skip debug tests unless asked for."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return  # user explicitly requested them, don't skip

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
