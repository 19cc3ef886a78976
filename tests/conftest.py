"""Shared pytest fixtures."""
import pytest

from bookshelf.content_store import ContentStore
from bookshelf.record_store import RecordStore
from bookshelf.service import RecordService


@pytest.fixture
def record_store(tmp_path):
    return RecordStore(tmp_path / "book.json")


@pytest.fixture
def content_store(tmp_path):
    return ContentStore(tmp_path / "books")


@pytest.fixture
def service(record_store, content_store):
    return RecordService(record_store, content_store)


@pytest.fixture
def make_book():
    """Factory for valid candidate records.

    Usage:
        def test_example(make_book):
            book = make_book(title="Dune")
    """
    def _make_book(
        title: str = "The Pragmatic Programmer",
        author: str = "Andrew Hunt",
        summary: str = "Advice for working programmers",
        publish_date: str = "1999-10-20",
    ):
        return {
            "title": title,
            "author": author,
            "summary": summary,
            "publishDate": publish_date,
        }
    return _make_book
