import sys

import pytest

from .consts import PROJECT_ROOT

# Ensure the package is importable without installation
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def source_root(tmp_path):
    root = tmp_path / "app"
    root.mkdir()
    return root
