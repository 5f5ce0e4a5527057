"""Tests for the statistics aggregator."""

import pytest


class TestStatistics:

    def test_empty_store(self, engine):
        stats = engine.statistics()
        assert stats.total_roots == 0
        assert stats.total_patterns == 0
        assert stats.total_derivatives == 0
        assert stats.total_frequency == 0
        assert stats.avg_derivatives == 0.0
        assert stats.top_roots == ()

    def test_two_roots_one_pattern(self, engine):
        engine.add_root("كتب")
        engine.add_root("درس")
        engine.add_pattern("فاعل", "1ا23")
        stats = engine.statistics()
        assert stats.total_roots == 2
        assert stats.total_patterns == 1
        assert stats.total_derivatives == 2
        assert stats.avg_derivatives == 1.0

    def test_roots_without_patterns(self, engine):
        engine.add_root("كتب")
        stats = engine.statistics()
        assert stats.total_roots == 1
        assert stats.avg_derivatives == 0.0

    def test_totals(self, engine_with_data):
        engine_with_data.set_frequency("كتب", "فاعل", 5)
        engine_with_data.set_frequency("درس", "مفعول", 2)
        stats = engine_with_data.statistics()
        assert stats.total_derivatives == 4
        assert stats.total_frequency == 7
        assert stats.avg_derivatives == pytest.approx(2.0)

    def test_top_roots_by_frequency(self, engine_with_data):
        engine_with_data.set_frequency("كتب", "فاعل", 5)
        engine_with_data.set_frequency("درس", "مفعول", 2)
        top = engine_with_data.statistics().top_roots
        assert [(r.root, r.total_frequency) for r in top] == [("كتب", 5), ("درس", 2)]
        assert top[0].total_derivatives == 2

    def test_ties_keep_lexicographic_order(self, engine_with_data):
        engine_with_data.add_root("علم")
        top = engine_with_data.statistics().top_roots
        assert [r.root for r in top] == ["درس", "علم", "كتب"]

    def test_top_n(self, engine_with_data):
        assert len(engine_with_data.statistics(top_n=1).top_roots) == 1
        assert engine_with_data.statistics(top_n=0).top_roots == ()

    def test_reflects_mutations(self, engine_with_data):
        assert engine_with_data.statistics().total_derivatives == 4
        engine_with_data.delete_pattern("مفعول")
        assert engine_with_data.statistics().total_derivatives == 2
