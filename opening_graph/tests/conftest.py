"""Pytest configuration."""

import os

import pytest

from opening_graph.graph import OpeningGraph
from opening_graph.lookup import OpeningLookup


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: mark test as requiring a live database (skipped in CI by default)"
    )


os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/opening_graphs?user=postgres&password=postgres")


@pytest.fixture
def empty_lookup():
    """A loaded lookup with no openings, so every name comes from the fallbacks."""
    return OpeningLookup.from_table({})


@pytest.fixture
def graph(empty_lookup):
    return OpeningGraph("alice", empty_lookup)
