"""Shared fixtures: a deterministic, instrumented embedding function."""

from collections.abc import Callable

import pytest

from tests.fakes import FakeEmbedder


@pytest.fixture
def embedder() -> FakeEmbedder:
    """Plain fake embedder."""
    return FakeEmbedder()


@pytest.fixture
def make_embedder() -> Callable[..., FakeEmbedder]:
    """Factory for configured fake embedders."""
    return FakeEmbedder
