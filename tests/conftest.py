from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.trees import TreeBuilder


@pytest.fixture
def trees(tmp_path: Path) -> TreeBuilder:
    """Provide an empty source/translation tree pair under tmp_path."""
    return TreeBuilder(tmp_path)
