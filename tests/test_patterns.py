"""Tests for pattern management."""

import pytest

from morphology_engine import (
    DuplicatePatternError,
    EntityNotFoundError,
    InvalidPatternError,
    PatternModel,
)


class TestAddPattern:

    def test_add_pattern(self, engine):
        pattern = engine.add_pattern("فاعل", "1ا23")
        assert pattern == PatternModel(name="فاعل", rule="1ا23")
        assert engine.list_patterns() == [pattern]

    def test_affixes(self, engine):
        pattern = engine.add_pattern("مفعول", "م12و3")
        assert pattern.affixes == ("م", "و")

    def test_missing_marker_3(self, engine):
        with pytest.raises(InvalidPatternError):
            engine.add_pattern("فعل", "1ا2")

    @pytest.mark.parametrize("rule", ["", "ا", "1123", "1233", "213", "م3و21"])
    def test_bad_rules(self, engine, rule):
        with pytest.raises(InvalidPatternError):
            engine.add_pattern("x", rule)

    def test_empty_name(self, engine):
        with pytest.raises(InvalidPatternError):
            engine.add_pattern("  ", "123")

    def test_name_too_long(self, engine):
        with pytest.raises(InvalidPatternError):
            engine.add_pattern("ف" * 51, "123")

    def test_name_with_separator(self, engine):
        with pytest.raises(InvalidPatternError):
            engine.add_pattern("a|b", "123")

    def test_duplicate_name(self, engine):
        engine.add_pattern("فاعل", "1ا23")
        with pytest.raises(DuplicatePatternError):
            engine.add_pattern("فاعل", "م12و3")

    def test_insertion_order(self, engine):
        engine.add_pattern("مفعول", "م12و3")
        engine.add_pattern("فاعل", "1ا23")
        assert [p.name for p in engine.list_patterns()] == ["مفعول", "فاعل"]


class TestUpdatePattern:

    def test_update_rule(self, engine_with_data):
        engine_with_data.update_pattern("فاعل", "1و23")
        assert engine_with_data.get_pattern("فاعل").rule == "1و23"
        assert engine_with_data.generate("كتب", "فاعل").word == "كوتب"

    def test_update_invalid_rule(self, engine_with_data):
        with pytest.raises(InvalidPatternError):
            engine_with_data.update_pattern("فاعل", "12")
        assert engine_with_data.get_pattern("فاعل").rule == "1ا23"

    def test_update_missing(self, engine):
        with pytest.raises(EntityNotFoundError):
            engine.update_pattern("فاعل", "1ا23")

    def test_update_same_rule_is_noop(self, engine_with_data):
        version = engine_with_data.snapshot.version
        engine_with_data.update_pattern("فاعل", "1ا23")
        assert engine_with_data.snapshot.version == version


class TestDeletePattern:

    def test_delete(self, engine_with_data):
        engine_with_data.delete_pattern("فاعل")
        assert [p.name for p in engine_with_data.list_patterns()] == ["مفعول"]

    def test_delete_missing(self, engine):
        with pytest.raises(EntityNotFoundError):
            engine.delete_pattern("فاعل")

    def test_get_missing(self, engine):
        with pytest.raises(EntityNotFoundError):
            engine.get_pattern("فاعل")


class TestPatternNameWhitespace:

    def test_padded_name_reaches_stored_pattern(self, engine):
        engine.add_pattern(" فاعل ", "1ا23")
        engine.add_root("كتب")
        assert engine.get_pattern(" فاعل ").name == "فاعل"
        assert engine.update_pattern(" فاعل ", "1و23").name == "فاعل"
        assert engine.generate("كتب", "فاعل ").word == "كوتب"
        assert [d.word for d in engine.words_for_pattern(" فاعل")] == ["كوتب"]
        assert engine.set_frequency("كتب", " فاعل ", 4) == 4
        assert engine.derivatives_of("كتب").total_frequency == 4
        engine.delete_pattern("فاعل ")
        assert engine.list_patterns() == []
