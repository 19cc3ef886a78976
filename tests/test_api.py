"""Tests for the HTTP transport."""
import pytest
from fastapi.testclient import TestClient

from bookshelf.api import create_app
from bookshelf.config import Config


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service, config=Config()))


def test_health_check(client):
    """Test that the health endpoint answers."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_empty(client):
    """Test the envelope shape on an empty collection."""
    response = client.get("/api/books")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [], "message": None, "errors": []}


def test_create_and_list(client, make_book):
    """Test that POST stores the book and answers 201."""
    book = make_book()

    response = client.post("/api/books", json=book)

    assert response.status_code == 201
    assert response.json()["success"] is True
    assert response.json()["data"] == book
    assert client.get("/api/books").json()["data"] == [book]


def test_create_validation_errors(client):
    """Test that validation failures carry the full error list with 400."""
    response = client.post("/api/books", json={"title": "Only title", "publishDate": "2024-01-01"})
    data = response.json()

    assert response.status_code == 400
    assert data["success"] is False
    assert data["errors"] == ["Author must not be empty", "Summary must not be empty"]


@pytest.mark.parametrize("body", [b"{broken", b"[]", b""])
def test_create_malformed_json(client, body):
    """Test that an unparseable body is a malformed-input envelope."""
    response = client.post("/api/books", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid JSON payload"
    assert response.json()["errors"] == []


def test_update(client, make_book):
    """Test that PUT replaces the stored book."""
    client.post("/api/books", json=make_book())

    response = client.put("/api/books/0", json=make_book(title="Second edition"))

    assert response.status_code == 200
    assert client.get("/api/books").json()["data"][0]["title"] == "Second edition"


def test_update_not_found(client, make_book):
    """Test that PUT past the end answers 404."""
    response = client.put("/api/books/4", json=make_book())

    assert response.status_code == 404
    assert response.json()["message"] == "Book not found"


def test_update_invalid_payload_at_missing_position(client):
    """Test that validation wins over bounds for updates."""
    response = client.put("/api/books/4", json={})

    assert response.status_code == 400
    assert len(response.json()["errors"]) == 4


def test_delete(client, make_book):
    """Test that DELETE returns the removed book and shifts the rest."""
    client.post("/api/books", json=make_book(title="Keep"))
    client.post("/api/books", json=make_book(title="Drop"))

    response = client.delete("/api/books/1")

    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Drop"
    assert [b["title"] for b in client.get("/api/books").json()["data"]] == ["Keep"]


def test_delete_not_found(client):
    """Test that DELETE on an empty collection answers 404."""
    assert client.delete("/api/books/0").status_code == 404


def test_non_integer_position(client):
    """Test that a bad path parameter still answers with the envelope."""
    response = client.delete("/api/books/abc")

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_content_round_trip(client, make_book):
    """Test writing content then reading it in both modes."""
    client.post("/api/books", json=make_book())

    write = client.post("/api/books/0/content", json={"content": "Chapter 1"})
    blocking = client.get("/api/books/0/content", params={"mode": "blocking"})
    default = client.get("/api/books/0/content")

    assert write.status_code == 200
    assert write.json()["message"] == "Content written"
    assert blocking.json()["data"] == {"content": "Chapter 1", "mode": "blocking"}
    assert default.json()["data"] == {"content": "Chapter 1", "mode": "non-blocking"}


def test_content_sync_alias(client, make_book):
    """Test that mode=sync is read as blocking."""
    client.post("/api/books", json=make_book())

    response = client.get("/api/books/0/content", params={"mode": "sync"})

    assert response.json()["data"]["mode"] == "blocking"


def test_read_placeholder(client, make_book):
    """Test that a new book starts with its placeholder text."""
    client.post("/api/books", json=make_book())

    response = client.get("/api/books/0/content")

    assert response.json()["data"]["content"] == "This is book NO.1"


def test_read_content_not_found(client):
    """Test that reading content of a missing book answers 404."""
    assert client.get("/api/books/0/content").status_code == 404


def test_write_empty_content(client, make_book):
    """Test that empty content is rejected with 400."""
    client.post("/api/books", json=make_book())

    response = client.post("/api/books/0/content", json={"content": ""})

    assert response.status_code == 400
    assert response.json()["errors"] == ["Content must not be empty"]


def test_write_content_malformed(client, make_book):
    """Test that a non-JSON content body is rejected."""
    client.post("/api/books", json=make_book())

    response = client.post("/api/books/0/content", content=b"plain text")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid JSON payload"


def test_unknown_route(client):
    """Test that unknown routes answer with the envelope."""
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"success": False, "data": None, "message": "Endpoint not found", "errors": []}


def test_cors_preflight(client):
    """Test that browsers on other origins may call the API."""
    response = client.options(
        "/api/books",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"}
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
