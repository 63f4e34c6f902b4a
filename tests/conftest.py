"""
Pytest configuration file.

This file ensures that the project directory is in the Python path
so that test files can import lazy, utils, and models modules.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from models import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings"""
    for name in ("LAZYVIEWS_EXHAUSTION_POLICY", "LAZYVIEWS_LOG_LEVEL", "LAZYVIEWS_LOG_TRAVERSALS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


class CountingIterable:
    """Multi-pass iterable that records how many elements were pulled"""

    def __init__(self, items):
        self.items = list(items)
        self.pulled = 0
        self.passes = 0

    def __iter__(self):
        self.passes += 1
        for item in self.items:
            self.pulled += 1
            yield item


class StrictIterator:
    """Iterator that fails loudly if advanced after it raised StopIteration"""

    def __init__(self, items):
        self._items = list(items)
        self._pos = 0
        self.spent = False
        self.calls = 0

    def __iter__(self):
        return self

    def __next__(self):
        self.calls += 1
        if self.spent:
            raise AssertionError("advanced after exhaustion")
        if self._pos >= len(self._items):
            self.spent = True
            raise StopIteration
        item = self._items[self._pos]
        self._pos += 1
        return item


@pytest.fixture
def counting():
    return CountingIterable


@pytest.fixture
def strict():
    return StrictIterator
