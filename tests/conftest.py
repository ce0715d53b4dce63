import sys, os

import pytest

# Ensure src (and the repo root, for tests.helpers) is on path for test imports
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from tests.helpers import RecordingRenderer, make_engine

__all__ = [
    "RecordingRenderer",
    "make_engine",
]


@pytest.fixture
def engine():
    return make_engine()
