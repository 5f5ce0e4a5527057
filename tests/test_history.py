"""Tests for change tracking / edit history."""

import datetime
import time

import pytest

from morphology_engine import DuplicateRootError
from morphology_engine import history
from morphology_engine.models import EditOperation, EntityKind


class TestHistoryCreate:

    def test_add_root_records_history(self, engine):
        engine.add_root("كتب")
        hist = engine.get_history(entity_type="root", entity_id="كتب")
        assert [h.operation for h in hist] == ["CREATE"]
        assert hist[0].new_value == '{"root": "كتب"}'

    def test_add_pattern_records_history(self, engine):
        engine.add_pattern("فاعل", "1ا23")
        hist = engine.get_history(entity_type="pattern", entity_id="فاعل")
        assert hist[0].operation == "CREATE"
        assert "1ا23" in hist[0].new_value

    def test_failed_mutation_records_nothing(self, engine):
        engine.add_root("كتب")
        with pytest.raises(DuplicateRootError):
            engine.add_root("كتب")
        assert len(engine.get_history(entity_type="root")) == 1


class TestHistoryUpdate:

    def test_update_pattern_records_field_change(self, engine_with_data):
        engine_with_data.update_pattern("فاعل", "1و23")
        hist = engine_with_data.get_history(entity_type="pattern", entity_id="فاعل")
        updates = [h for h in hist if h.operation == "UPDATE"]
        assert len(updates) == 1
        assert updates[0].field_name == "rule"
        # History stores JSON-encoded values
        assert updates[0].old_value == '"1ا23"'
        assert updates[0].new_value == '"1و23"'

    def test_frequency_history(self, engine_with_data):
        engine_with_data.set_frequency("كتب", "فاعل", 2)
        engine_with_data.record_occurrence("كتب", "فاعل", 3)
        hist = engine_with_data.get_history(
            entity_type="frequency", entity_id="كتب|فاعل"
        )
        assert [h.operation for h in hist] == ["CREATE", "UPDATE"]
        assert hist[1].old_value == "2"
        assert hist[1].new_value == "5"


class TestEntityKinds:

    def test_filter_by_kind(self, engine_with_data):
        engine_with_data.set_frequency("كتب", "فاعل", 1)
        hist = engine_with_data.get_history(entity_type=EntityKind.FREQUENCY)
        assert [h.entity_id for h in hist] == ["كتب|فاعل"]

    def test_unknown_kind_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.get_history(entity_type="synset")

    def test_root_has_no_update(self, engine):
        with pytest.raises(ValueError):
            history.record_root(engine._conn, EditOperation.UPDATE, "كتب")

    def test_frequency_entity_id(self):
        assert history.frequency_entity_id("كتب", "فاعل") == "كتب|فاعل"


class TestHistoryDelete:

    def test_delete_root_records_history(self, engine_with_data):
        engine_with_data.delete_root("كتب")
        hist = engine_with_data.get_history(operation="DELETE")
        assert [(h.entity_type, h.entity_id) for h in hist] == [("root", "كتب")]

    def test_delete_pattern_keeps_old_rule(self, engine_with_data):
        engine_with_data.delete_pattern("مفعول")
        hist = engine_with_data.get_history(entity_type="pattern", operation="DELETE")
        assert "م12و3" in hist[0].old_value

    def test_filter_accepts_enum(self, engine_with_data):
        engine_with_data.delete_root("درس")
        hist = engine_with_data.get_history(operation=EditOperation.DELETE)
        assert [h.entity_id for h in hist] == ["درس"]

    def test_unknown_operation_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.get_history(operation="RENAME")


class TestHistoryTimestamp:

    def test_filter_by_timestamp(self, engine):
        engine.add_root("كتب")

        # Database uses UTC timestamps with microseconds
        time.sleep(0.1)
        middle = datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")
        time.sleep(0.1)

        engine.add_root("درس")

        changes = engine.get_changes_since(middle)
        assert any(h.entity_id == "درس" for h in changes)
        assert not any(h.entity_id == "كتب" for h in changes)


class TestBatch:

    def test_batch_rolls_back_on_error(self, engine):
        with pytest.raises(RuntimeError):
            with engine.batch():
                engine.add_root("كتب")
                raise RuntimeError("boom")
        assert engine.list_roots() == []
        assert engine.get_history() == []
        assert engine.add_root("كتب").root == "كتب"

    def test_batch_publishes_on_exit(self, engine):
        with engine.batch():
            engine.add_root("كتب")
            engine.add_pattern("فاعل", "1ا23")
            assert engine.list_roots() == []
        assert engine.list_roots() == ["كتب"]
        assert engine.derivatives_of("كتب").derivatives[0].word == "كاتب"

    def test_nested_batch(self, engine):
        with engine.batch():
            engine.add_root("كتب")
            with engine.batch():
                engine.add_root("درس")
        assert engine.list_roots() == ["درس", "كتب"]
