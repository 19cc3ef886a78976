"""Tests for the command-line tool against local files."""
import json

import pytest

import shelf
from bookshelf.config import Config


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "BOOKS_JSON_PATH", str(tmp_path / "book.json"))
    monkeypatch.setattr(Config, "CONTENT_DIR", str(tmp_path / "books"))
    return tmp_path


def add(title="Dune", date="1965-08-01"):
    shelf.main(["add", "--title", title, "--author", "Frank Herbert", "--summary", "Desert planet", "--date", date])


def test_add_and_list_json(capsys):
    """Test that an added book shows up in JSON output."""
    add()
    capsys.readouterr()

    shelf.main(["list", "--format", "json"])
    books = json.loads(capsys.readouterr().out)

    assert books == [{"title": "Dune", "author": "Frank Herbert", "summary": "Desert planet", "publishDate": "1965-08-01"}]


def test_list_table(capsys):
    """Test the default table output."""
    add()
    capsys.readouterr()

    shelf.main(["list"])
    out = capsys.readouterr().out

    assert "Dune" in out
    assert "Published" in out


def test_add_invalid_exits_with_errors(capsys):
    """Test that validation errors are printed and the exit code is 1."""
    with pytest.raises(SystemExit) as exc:
        add(date="August 1965")

    assert exc.value.code == 1
    assert "Publish date must be in YYYY-MM-DD format" in capsys.readouterr().out


def test_write_read_and_delete(capsys):
    """Test the content commands and delete through the local service."""
    add("First")
    add("Second")

    shelf.main(["write", "1", "Spice must flow"])
    capsys.readouterr()

    shelf.main(["read", "1", "--mode", "blocking"])
    out = capsys.readouterr().out
    assert "Spice must flow" in out
    assert "read mode: blocking" in out

    shelf.main(["delete", "0"])
    capsys.readouterr()

    shelf.main(["read", "0"])
    assert "Spice must flow" in capsys.readouterr().out


def test_update_missing_position_fails():
    """Test that updating a missing position exits with 1."""
    with pytest.raises(SystemExit) as exc:
        shelf.main(["update", "3", "--title", "T", "--author", "A", "--summary", "S", "--date", "2020-01-01"])

    assert exc.value.code == 1


def test_write_from_file(tmp_path, capsys):
    """Test writing content from a file."""
    add()
    source = tmp_path / "notes.txt"
    source.write_text("from a file", encoding="utf-8")

    shelf.main(["write", "0", "--file", str(source)])
    shelf.main(["read", "0"])

    assert "from a file" in capsys.readouterr().out


def test_no_command_prints_help():
    """Test that running without a command exits."""
    with pytest.raises(SystemExit):
        shelf.main([])
