from pathlib import Path
from typing import Callable, Dict, Union

import pytest

TreeSpec = Dict[str, Union[str, bytes]]


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


@pytest.fixture
def make_tree(root: Path) -> Callable[[TreeSpec], Path]:
    """Write ``{"rel/path": content}`` under the test root and return the root."""

    def _make(files: TreeSpec) -> Path:
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make
