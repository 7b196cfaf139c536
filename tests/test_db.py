"""Tests for the database layer: tables, persistence, backups and joins."""

from pathlib import Path

import pytest

from csvdb import (
    AlreadyExistsError,
    Condition,
    Date,
    Db,
    Empty,
    Int,
    InvalidDataError,
    Join,
    NotFoundError,
    String,
    Time,
)
from csvdb.db import IDS_COLUMNS, IDS_TABLE


@pytest.fixture
def db(tmp_path: Path) -> Db:
    return Db.create("test", tmp_path)


class TestTables:
    """Tests for table management."""

    def test_new_db_has_ids_table(self, db: Db):
        assert db.has_table(IDS_TABLE)
        assert db.column_names(IDS_TABLE) == list(IDS_COLUMNS)
        assert db.table_names() == []

    def test_create_table(self, db: Db):
        db.create_table("b")
        db.create_table("a")
        assert db.table_names() == ["b", "a"]
        with pytest.raises(AlreadyExistsError):
            db.create_table("a")

    def test_get_missing_table(self, db: Db):
        with pytest.raises(NotFoundError):
            db.get_table("missing")
        with pytest.raises(NotFoundError):
            db.insert("missing", ["1"])

    def test_create_or_replace_empties_in_place(self, db: Db):
        db.create_table("t")
        db.create_column("t", "a")
        db.insert("t", ["1"])
        table = db.create_or_replace_table("t")
        assert table is db.get_table("t")
        assert db.row_count("t") == 0
        assert db.column_names("t") == []

    def test_create_or_replace_new_table(self, db: Db):
        db.create_or_replace_table("t")
        assert db.table_names() == ["t"]

    def test_ids_table_is_reserved(self, db: Db):
        with pytest.raises(InvalidDataError):
            db.drop_table(IDS_TABLE)
        with pytest.raises(InvalidDataError):
            db.create_or_replace_table(IDS_TABLE)

    def test_insert_columns_at_copies_other_table(self, db: Db):
        db.create_table("a")
        db.create_column("a", "x")
        db.insert("a", ["1"])
        db.create_table("b")
        db.create_column("b", "y")
        db.insert("b", ["2"])
        db.insert_columns_at("a", 0, "b")
        assert db.column_names("a") == ["y", "x"]
        assert db.select("a") == [[Int(2), Int(1)]]
        db.set_at("b", 0, 0, Int(3))
        assert db.select_at("a", 0, 0) == Int(2)


class TestRows:
    """Tests for row delegation through the database."""

    def test_update_parses_value(self, db: Db):
        db.create_table("t")
        db.create_column("t", "a")
        db.create_column("t", "b")
        db.insert("t", ["1", "x"])
        db.update("t", 0, "b", "12:00:00")
        assert db.select_at("t", 1, 0) == Time.of(12, 0, 0)

    def test_update_unknown_column(self, db: Db):
        db.create_table("t")
        db.create_column("t", "a")
        db.insert("t", ["1"])
        with pytest.raises(InvalidDataError):
            db.update("t", 0, "b", "1")

    def test_upsert(self, db: Db):
        db.create_table("t")
        db.create_column("t", "k")
        db.create_column("t", "v")
        assert db.insert_update_where("t", ["a", "1"], [Condition.equal_string("k", "a")]) is False
        assert db.insert_update_where("t", ["a", "2"], [Condition.equal_string("k", "a")]) is True
        assert db.select("t") == [[String("a"), Int(2)]]

    def test_select_and_delete_where(self, db: Db):
        db.create_table("t")
        db.create_column("t", "k")
        for k in ["a", "b", "a"]:
            db.insert("t", [k])
        assert len(db.select_where("t", [Condition.equal_string("k", "a")])) == 2
        assert db.delete_where("t", [Condition.equal_string("k", "a")]) == 2
        assert db.select_columns("t", ["k"]) == [[String("b")]]
        db.delete_row("t", 0)
        assert db.row_count("t") == 0


class TestJoins:
    """Tests for storing and expanding joins."""

    def test_store_ids(self, db: Db):
        join = db.store_ids(["a", "b"])
        assert join == Join([0, 1])
        assert db.from_ids(join) == [String("a"), String("b")]

    def test_ids_are_positional(self, db: Db):
        db.store_ids(["a", "b"])
        assert db.store_ids(["c"]) == Join([2])
        assert db.select(IDS_TABLE)[2] == [Int(2), Int(1), String("c")]

    def test_stored_values_are_typed(self, db: Db):
        join = db.store_ids(["1", "2022-01-01"])
        assert db.from_ids(join) == [Int(1), Date(2022, 1, 1)]

    def test_store_no_values(self, db: Db):
        with pytest.raises(InvalidDataError):
            db.store_ids([])
        assert db.row_count(IDS_TABLE) == 0

    def test_from_ids_out_of_range(self, db: Db):
        db.store_ids(["a"])
        with pytest.raises(InvalidDataError):
            db.from_ids(Join([1]))
        with pytest.raises(InvalidDataError):
            db.from_ids(Join([-1]))

    def test_expand(self, db: Db):
        join = db.store_ids(["a", "b"])
        assert db.expand(join) == [String("a"), String("b")]
        assert db.expand(Int(3)) == [Int(3)]

    def test_select_array_and_display(self, db: Db):
        db.create_table("t")
        db.create_column("t", "n")
        db.create_column("t", "items")
        db.insert_data("t", [Int(1), db.store_ids(["x", "y"])])
        assert db.select_array("t") == [[[Int(1)], [String("x"), String("y")]]]
        assert db.display("t") == "n | items\n--+------\n1 | x\n  | y\n"


class TestPersistence:
    """Tests for save, load and backups."""

    def test_save_and_load(self, db: Db, tmp_path: Path):
        db.create_table("notes")
        db.create_column("notes", "date")
        db.create_column("notes", "text")
        db.insert("notes", ["12.02.2022", "hi, there"])
        db.insert_data("notes", [Empty(), db.store_ids(["one", "two"])])
        db.save()

        assert (tmp_path / "test" / "notes.csv").exists()
        assert (tmp_path / "test" / ".ids.csv").exists()

        loaded = Db.load("test", tmp_path)
        assert loaded.table_names() == ["notes"]
        assert loaded.select("notes") == db.select("notes")
        assert loaded.select("notes")[0] == [Date(2022, 2, 12), String("hi, there")]
        assert loaded.select_array("notes")[1][1] == [String("one"), String("two")]

    def test_saved_tables_are_clean(self, db: Db):
        db.create_table("t")
        db.save()
        assert not db.get_table("t").is_changed()

    def test_new_empty_table_is_saved(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.save()
        assert (tmp_path / "test" / "t.csv").read_text() == "\n"

    def test_load_without_ids_file(self, tmp_path: Path):
        db_dir = tmp_path / "plain"
        db_dir.mkdir()
        (db_dir / "t.csv").write_text("a\n1\n", encoding="utf-8")
        (db_dir / "notes.txt").write_text("ignored", encoding="utf-8")
        db = Db.load("plain", tmp_path)
        assert db.table_names() == ["t"]
        assert db.row_count(IDS_TABLE) == 0

    def test_load_tables_in_name_order(self, tmp_path: Path):
        db_dir = tmp_path / "ordered"
        db_dir.mkdir()
        for name in ["b", "a", "c"]:
            (db_dir / f"{name}.csv").write_text("x\n", encoding="utf-8")
        assert Db.load("ordered", tmp_path).table_names() == ["a", "b", "c"]

    def test_load_missing_directory(self, tmp_path: Path):
        with pytest.raises(OSError):
            Db.load("missing", tmp_path)

    def test_load_fails_on_malformed_row(self, tmp_path: Path):
        db_dir = tmp_path / "bad"
        db_dir.mkdir()
        (db_dir / "t.csv").write_text("a\n1,2\n", encoding="utf-8")
        with pytest.raises(InvalidDataError):
            Db.load("bad", tmp_path)

    def test_backup_on_overwrite(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.create_column("t", "a")
        db.insert("t", ["1"])
        db.save()
        db.insert("t", ["2"])
        db.save()

        backups = list((tmp_path / "test" / "backup").glob("t-*.csv"))
        assert len(backups) == 1
        assert backups[0].read_text() == "a\n1\n"
        assert (tmp_path / "test" / "t.csv").read_text() == "a\n1\n2\n"

    def test_saves_within_one_second_keep_every_backup(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.create_column("t", "a")
        for value in ["1", "2", "3"]:
            db.insert("t", [value])
            db.save()

        backups = sorted(p.read_text() for p in (tmp_path / "test" / "backup").glob("t-*.csv"))
        assert backups == ["a\n1\n", "a\n1\n2\n"]

    def test_load_invalid_utf8(self, tmp_path: Path):
        db_dir = tmp_path / "binary"
        db_dir.mkdir()
        (db_dir / "t.csv").write_bytes(b"a\n\xff\n")
        with pytest.raises(InvalidDataError):
            Db.load("binary", tmp_path)

    def test_first_save_makes_no_backup(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.save()
        assert not (tmp_path / "test" / "backup").exists()

    def test_unchanged_tables_are_not_rewritten(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.save()
        (tmp_path / "test" / "t.csv").write_text("a\n", encoding="utf-8")
        db.save()
        assert (tmp_path / "test" / "t.csv").read_text() == "a\n"

    def test_save_aborts_on_first_failure(self, db: Db, tmp_path: Path):
        """Test that tables before the failure are written and later ones stay changed."""
        db.create_table("a")
        db.create_table("b")
        db.create_table("c")
        (tmp_path / "test" / "b.csv").mkdir(parents=True)

        with pytest.raises(OSError):
            db.save()

        assert not db.get_table("a").is_changed()
        assert db.get_table("b").is_changed()
        assert db.get_table("c").is_changed()
        assert (tmp_path / "test" / "a.csv").exists()
        assert not (tmp_path / "test" / "c.csv").exists()


class TestDropTable:
    """Tests for dropping tables."""

    def test_drop_table_deletes_file(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.save()
        db.drop_table("t")
        assert not db.has_table("t")
        assert not (tmp_path / "test" / "t.csv").exists()

    def test_drop_unsaved_table(self, db: Db, tmp_path: Path):
        db.create_table("t")
        db.create_table("u")
        db.drop_table("t")
        assert db.table_names() == ["u"]
        assert (tmp_path / "test" / "u.csv").exists()
        assert not (tmp_path / "test" / "t.csv").exists()

    def test_drop_missing_table(self, db: Db):
        with pytest.raises(NotFoundError):
            db.drop_table("missing")

    def test_drop_ignores_failed_save_of_other_table(self, db: Db, tmp_path: Path):
        """Test that the drop goes ahead when saving another table fails."""
        db.create_table("a")
        db.create_table("t")
        (tmp_path / "test" / "a.csv").mkdir(parents=True)

        db.drop_table("t")

        assert not db.has_table("t")
        assert db.get_table("a").is_changed()

    def test_drop_keeps_table_when_file_cannot_be_deleted(self, db: Db, tmp_path: Path):
        db.create_table("t")
        (tmp_path / "test" / "t.csv").mkdir(parents=True)
        with pytest.raises(OSError):
            db.drop_table("t")
        assert db.has_table("t")

    def test_ids_survive_drop(self, db: Db):
        db.create_table("t")
        db.create_column("t", "items")
        db.insert_data("t", [db.store_ids(["a", "b"])])
        db.drop_table("t")
        assert db.store_ids(["c"]) == Join([2])


class TestScenario:
    """End to end use of a database."""

    def test_notes_database(self, tmp_path: Path):
        db = Db.create("notes", tmp_path)
        db.create_table("log")
        for column in ["date", "time", "amount", "text"]:
            db.create_column("log", column)
        db.insert("log", ["1.1.23", "08:30:00", "12", "breakfast"])
        db.insert("log", ["2.1.23", "12:00:00", "7.5", "lunch, late"])
        db.insert_data("log", [
            Date(2023, 1, 3), Time.of(19, 0, 0), Int(20), db.store_ids(["dinner", "dessert"]),
        ])
        db.insert_update_where(
            "log", ["2.1.23", "12:30:00", "8", "lunch"], [Condition.equal("date", Date(2023, 1, 2))]
        )
        db.save()

        loaded = Db.load("notes", tmp_path)
        rows = loaded.select_where("log", [Condition.equal("date", Date(2023, 1, 2))])
        assert rows == [[Date(2023, 1, 2), Time.of(12, 30, 0), Int(8), String("lunch")]]
        assert loaded.select_array("log")[2][3] == [String("dinner"), String("dessert")]
        assert loaded.delete_where("log", [Condition.equal_int("amount", 12)]) == 1
        assert loaded.row_count("log") == 2
