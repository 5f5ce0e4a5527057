"""Tests for line-delimited and YAML export."""

import io

import yaml

from morphology_engine import (
    MorphologyEngine,
    export_derivatives_yaml,
    export_patterns,
    export_roots,
)


class TestLineExport:

    def test_export_roots(self, engine_with_data):
        assert export_roots(engine_with_data) == "درس\nكتب\n"

    def test_export_patterns(self, engine_with_data):
        assert export_patterns(engine_with_data) == "فاعل|1ا23\nمفعول|م12و3\n"

    def test_empty(self, engine):
        assert export_roots(engine) == ""
        assert export_patterns(engine) == ""

    def test_roots_reimport(self, engine_with_data):
        with MorphologyEngine() as other:
            result = other.import_roots(export_roots(engine_with_data))
            assert result.success_count == 2
            assert other.list_roots() == engine_with_data.list_roots()


class TestYamlExport:

    def test_to_file(self, engine_with_data, tmp_path):
        engine_with_data.set_frequency("كتب", "فاعل", 3)
        path = tmp_path / "derivatives.yaml"
        export_derivatives_yaml(engine_with_data, path)

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert [p["name"] for p in data["patterns"]] == ["فاعل", "مفعول"]
        roots = {r["root"]: r for r in data["roots"]}
        assert roots["كتب"]["root_type"] == "salim"
        assert roots["كتب"]["total_frequency"] == 3
        assert roots["كتب"]["derivatives"][0] == {
            "pattern": "فاعل", "word": "كاتب", "frequency": 3,
        }

    def test_unicode_not_escaped(self, engine_with_data):
        buf = io.StringIO()
        export_derivatives_yaml(engine_with_data, buf)
        assert "مكتوب" in buf.getvalue()
