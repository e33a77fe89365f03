"""
Shared fixtures for pipeline tests.

Provides Pillow-generated images of arbitrary size, plus a fixed non-image
payload that Pillow does not recognize.
"""

from __future__ import annotations

import logging

import pytest

from imaging import NON_IMAGE_BYTES, make_image


@pytest.fixture
def png_factory():
    """Build PNG bytes of a given size."""
    def _make(width: int, height: int, **kwargs) -> bytes:
        return make_image(width, height, "PNG", **kwargs)
    return _make


@pytest.fixture
def small_png() -> bytes:
    return make_image(100, 80, "PNG")


@pytest.fixture
def large_png() -> bytes:
    return make_image(2000, 2000, "PNG")


@pytest.fixture
def non_image() -> bytes:
    return NON_IMAGE_BYTES


@pytest.fixture
def restore_logging():
    """Put root logger handlers back after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
