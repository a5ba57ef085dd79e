from pathlib import Path

import pytest


@pytest.fixture
def make_file(tmp_path):
    """Write a file under tmp_path and return its path as a string."""

    def _make(name: str, content, root: Path = None) -> str:
        path = (root or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return str(path)

    return _make
