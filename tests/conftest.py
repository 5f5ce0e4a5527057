"""Shared test fixtures for morphology-engine."""

import pytest

from morphology_engine import MorphologyEngine


@pytest.fixture
def engine():
    """Create an in-memory engine for testing."""
    with MorphologyEngine(":memory:") as eng:
        yield eng


@pytest.fixture
def engine_with_patterns(engine):
    """Engine with the active participle and passive participle patterns."""
    engine.add_pattern("فاعل", "1ا23")
    engine.add_pattern("مفعول", "م12و3")
    return engine


@pytest.fixture
def engine_with_data(engine_with_patterns):
    """Engine with roots كتب and درس and two patterns."""
    engine_with_patterns.add_root("كتب")
    engine_with_patterns.add_root("درس")
    return engine_with_patterns


@pytest.fixture
def homonym_engine(engine):
    """Two distinct (root, pattern) pairs that both generate مكتب."""
    engine.add_pattern("مفعل", "م123")
    engine.add_pattern("فعلب", "123ب")
    engine.add_root("كتب")
    engine.add_root("مكت")
    return engine
