"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Source maps
# ---------------------------------------------------------------------------

# generated line 10, column 0 maps to line 3, column 0 of orig.js
LINE_TEN_TO_THREE_MAP = {
    "version": 3,
    "file": "a.js",
    "sources": ["orig.js"],
    "names": [],
    "mappings": ";;;;;;;;;AAEA",
}


@pytest.fixture
def line_ten_map() -> dict[str, object]:
    return dict(LINE_TEN_TO_THREE_MAP)
