"""Tests for the csvdb shell."""

from pathlib import Path

from csvdb import Db
from csvdb.display import format_table, format_value
from csvdb.repl import _split_statements, has_balanced_brackets, main, open_database, run_file
from csvdb.values import Int, String


class TestHelperFunctions:
    """Tests for shell helper functions."""

    def test_split_statements(self):
        assert _split_statements("save; show tables;") == ["save", "show tables"]

    def test_split_ignores_semicolons_in_strings(self):
        assert _split_statements('insert into t values ("a;b"); save') == [
            'insert into t values ("a;b")',
            "save",
        ]

    def test_balanced_brackets(self):
        assert has_balanced_brackets("insert into t values (1, {a})")
        assert not has_balanced_brackets("insert into t values (1,")
        assert has_balanced_brackets('insert into t values (")")')

    def test_open_database(self, tmp_path: Path):
        db, is_new = open_database("fresh", tmp_path)
        assert is_new
        db.save()
        db, is_new = open_database("fresh", tmp_path)
        assert not is_new


class TestDisplay:
    """Tests for rendering results."""

    def test_format_value_escapes_and_truncates(self):
        assert format_value(String("a\nb")) == "a\\nb"
        assert format_value(String("x" * 50), max_width=10) == "xxxxxxx..."

    def test_format_table(self):
        text = format_table(["a", "bb"], [[[Int(1)], [String("x"), String("y")]]])
        assert text == "a | bb\n--+---\n1 | x\n  | y\n"


class TestMain:
    """Tests for the command line entry point."""

    def test_command_creates_and_saves(self, tmp_path: Path):
        result = main([
            "mydb", "--dir", str(tmp_path),
            "-c", "create table t (a, b); insert into t values (1, x)",
        ])
        assert result == 0
        assert (tmp_path / "mydb" / "t.csv").read_text() == "a,b\n1,x\n"

    def test_command_prints_rows(self, tmp_path: Path, capsys):
        main(["mydb", "-d", str(tmp_path), "-c", "create table t (a); insert into t values (hello)"])
        capsys.readouterr()
        assert main(["mydb", "-d", str(tmp_path), "-c", "select * from t"]) == 0
        out = capsys.readouterr().out
        assert "hello" in out
        assert "(1 row)" in out

    def test_command_error(self, tmp_path: Path, capsys):
        assert main(["mydb", "-d", str(tmp_path), "-c", "select * from missing"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_syntax_error(self, tmp_path: Path, capsys):
        assert main(["mydb", "-d", str(tmp_path), "-c", "select from"]) == 1
        assert "Syntax error" in capsys.readouterr().err

    def test_error_stops_before_save(self, tmp_path: Path):
        result = main([
            "mydb", "-d", str(tmp_path),
            "-c", "create table t (a); insert into t values (1, 2)",
        ])
        assert result == 1
        assert not (tmp_path / "mydb" / "t.csv").exists()

    def test_file(self, tmp_path: Path):
        script = tmp_path / "setup.sql"
        script.write_text("""
-- Create a table of notes
create table notes (date, text);

insert into notes values (1.1.23, "happy new year");
insert into notes values (2.1.23, {"line one", "line two"});
""")
        assert main(["notes", "-d", str(tmp_path), "-f", str(script)]) == 0

        db = Db.load("notes", tmp_path)
        assert db.row_count("notes") == 2
        assert db.select_array("notes")[1][1] == [String("line one"), String("line two")]

    def test_missing_file(self, tmp_path: Path):
        assert main(["notes", "-d", str(tmp_path), "-f", str(tmp_path / "missing.sql")]) == 1

    def test_run_file_verbose(self, tmp_path: Path, capsys):
        script = tmp_path / "show.sql"
        script.write_text("show tables")
        db = Db.create("v", tmp_path)
        assert run_file(script, db, verbose=True) == 0
        assert ">>> show tables" in capsys.readouterr().out

    def test_empty_script(self, tmp_path: Path):
        script = tmp_path / "empty.sql"
        script.write_text("-- nothing here\n")
        assert run_file(script, Db.create("v", tmp_path)) == 1
