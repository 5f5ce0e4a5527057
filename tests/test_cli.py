"""Tests for the morpho command-line interface."""

import pytest

from morphology_engine.cli import create_parser, main


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


@pytest.fixture
def seeded(db):
    assert main(["--db", db, "add-pattern", "فاعل", "1ا23"]) == 0
    assert main(["--db", db, "add-pattern", "مفعول", "م12و3"]) == 0
    assert main(["--db", db, "add-root", "كتب"]) == 0
    assert main(["--db", db, "add-root", "درس"]) == 0
    return db


class TestParser:

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])
        assert "morpho" in capsys.readouterr().out


class TestRootCommands:

    def test_add_root(self, db, capsys):
        assert main(["--db", db, "add-root", "وعد"]) == 0
        assert "وعد (mithal)" in capsys.readouterr().out

    def test_add_invalid_root(self, db, capsys):
        assert main(["--db", db, "add-root", "كت"]) == 1
        assert "InvalidRootError" in capsys.readouterr().out

    def test_add_duplicate(self, seeded, capsys):
        assert main(["--db", seeded, "add-root", "كتب"]) == 1
        assert "DuplicateRootError" in capsys.readouterr().out

    def test_roots(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "roots", "--search", "ك"]) == 0
        out = capsys.readouterr().out
        assert "كتب" in out
        assert "درس" not in out
        assert "1 of 1 root(s)" in out

    def test_delete_root(self, seeded, capsys):
        assert main(["--db", seeded, "delete-root", "كتب"]) == 0
        capsys.readouterr()
        main(["--db", seeded, "roots"])
        assert "كتب" not in capsys.readouterr().out

    def test_import_roots(self, db, tmp_path, capsys):
        path = tmp_path / "roots.txt"
        path.write_text("كتب\nكت\nدرس\n", encoding="utf-8")
        assert main(["--db", db, "import-roots", str(path)]) == 1
        out = capsys.readouterr().out
        assert "Imported 2 root(s), 1 failed" in out
        assert "Line 2" in out

    def test_import_missing_file(self, db, tmp_path, capsys):
        assert main(["--db", db, "import-roots", str(tmp_path / "nope.txt")]) == 1
        assert "[ERROR]" in capsys.readouterr().out


class TestPatternCommands:

    def test_patterns(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "patterns"]) == 0
        out = capsys.readouterr().out
        assert "فاعل|1ا23" in out
        assert "2 pattern(s)" in out

    def test_add_invalid_pattern(self, db, capsys):
        assert main(["--db", db, "add-pattern", "فعل", "12"]) == 1
        assert "InvalidPatternError" in capsys.readouterr().out

    def test_import_patterns(self, db, tmp_path, capsys):
        path = tmp_path / "patterns.txt"
        path.write_text("# patterns\nفاعل|1ا23\nمفعول|م12و3\n", encoding="utf-8")
        assert main(["--db", db, "import-patterns", str(path)]) == 0
        assert "Imported 2 pattern(s), 0 failed" in capsys.readouterr().out

    def test_update_pattern(self, seeded, capsys):
        assert main(["--db", seeded, "update-pattern", "فاعل", "1و23"]) == 0
        assert "Updated pattern فاعل|1و23" in capsys.readouterr().out
        main(["--db", seeded, "generate", "كتب", "فاعل"])
        assert capsys.readouterr().out.strip() == "كوتب"

    def test_update_missing_pattern(self, seeded, capsys):
        assert main(["--db", seeded, "update-pattern", "فعيل", "12ي3"]) == 1
        assert "EntityNotFoundError" in capsys.readouterr().out

    def test_delete_pattern(self, seeded, capsys):
        assert main(["--db", seeded, "delete-pattern", "مفعول"]) == 0
        capsys.readouterr()
        main(["--db", seeded, "patterns"])
        out = capsys.readouterr().out
        assert "مفعول" not in out
        assert "1 pattern(s)" in out


class TestGenerationCommands:

    def test_generate(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "generate", "كتب", "مفعول"]) == 0
        assert capsys.readouterr().out.strip() == "مكتوب"

    def test_derivatives(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "derivatives", "درس"]) == 0
        out = capsys.readouterr().out
        assert "دارس" in out
        assert "مدروس" in out
        assert "2 derivative(s)" in out

    def test_by_pattern(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "by-pattern", "مفعول"]) == 0
        out = capsys.readouterr().out
        assert "مكتوب" in out
        assert "مدروس" in out
        assert "2 word(s)" in out

    def test_by_missing_pattern(self, seeded, capsys):
        assert main(["--db", seeded, "by-pattern", "فعيل"]) == 1
        assert "EntityNotFoundError" in capsys.readouterr().out

    def test_analyze(self, db, capsys):
        assert main(["--db", db, "analyze", "قول"]) == 0
        out = capsys.readouterr().out
        assert "قول (ajwaf)" in out
        assert "hamza:   no" in out

    def test_analyze_invalid_root(self, db, capsys):
        assert main(["--db", db, "analyze", "قو"]) == 1
        assert "InvalidRootError" in capsys.readouterr().out

    def test_derivatives_missing_root(self, seeded, capsys):
        assert main(["--db", seeded, "derivatives", "علم"]) == 1
        assert "EntityNotFoundError" in capsys.readouterr().out

    def test_decompose(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "decompose", "والكاتب"]) == 0
        out = capsys.readouterr().out
        assert "كتب" in out
        assert "with_residue" in out

    def test_decompose_miss(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "decompose", "سمع"]) == 1
        assert "No decomposition" in capsys.readouterr().out

    def test_decompose_all(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "decompose", "--all", "مكتوب"]) == 0
        assert "[exact]" in capsys.readouterr().out

    def test_validate(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "validate", "كاتب", "كتب"]) == 0
        assert "[VALID]" in capsys.readouterr().out
        assert main(["--db", seeded, "validate", "كاتب", "درس"]) == 1
        assert "[INVALID]" in capsys.readouterr().out


class TestReportCommands:

    def test_stats(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "stats", "--top", "1"]) == 0
        out = capsys.readouterr().out
        assert "Roots:        2" in out
        assert "Derivatives:  4" in out
        assert "Avg/root:     2.00" in out

    def test_check_clean(self, seeded, capsys):
        capsys.readouterr()
        assert main(["--db", seeded, "check"]) == 0
        assert "No integrity problems" in capsys.readouterr().out

    def test_config_option(self, tmp_path, capsys):
        config = tmp_path / "morphology.yaml"
        config.write_text("db_path: from-config.db\n", encoding="utf-8")
        assert main(["--config", str(config), "add-root", "كتب"]) == 0
        assert (tmp_path / "from-config.db").exists()

    def test_config_without_db_path_persists(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "morphology.yaml"
        config.write_text("max_residue: 2\n", encoding="utf-8")
        assert main(["--config", str(config), "add-root", "كتب"]) == 0
        capsys.readouterr()
        assert main(["--config", str(config), "roots"]) == 0
        out = capsys.readouterr().out
        assert "كتب" in out
        assert "1 of 1 root(s)" in out
        assert (tmp_path / "morphology.db").exists()
