"""
Tests for board endpoints.
"""
import pytest
from fastapi.testclient import TestClient
from blog.core.config import settings
from blog.main import app


def _join_and_login(client, username):
    client.post(
        "/api/join",
        json={"username": username, "email": f"{username}@example.com", "password": "testpassword123"}
    )
    response = client.post("/api/login", json={"username": username, "password": "testpassword123"})
    assert response.status_code == 200
    return response.cookies.get(settings.SESSION_COOKIE_NAME)


@pytest.fixture()
def other_client(client):
    """A second browser sharing the same app and overrides."""
    with TestClient(app) as second:
        yield second


def test_create_board_requires_login(client):
    response = client.post("/api/boards", json={"title": "A", "content": "x"})
    assert response.status_code == 401
    assert client.get("/api/boards").json() == []


def test_create_board_rejects_blank_title(client):
    _join_and_login(client, "u1")
    response = client.post("/api/boards", json={"title": "   ", "content": "x"})
    assert response.status_code == 422


def test_board_lifecycle(client, other_client):
    """Owner creates and edits; another user is refused; state is unchanged."""
    _join_and_login(client, "u1")
    _join_and_login(other_client, "u2")

    created = client.post("/api/boards", json={"title": "A", "content": "x"})
    assert created.status_code == 201
    board = created.json()
    assert board["id"] == 1
    assert board["owner_id"] == 1

    updated = client.post("/api/boards/1/update", json={"title": "B"})
    assert updated.status_code == 200

    detail = client.get("/api/boards/1").json()
    assert (detail["title"], detail["content"]) == ("B", "x")

    denied = other_client.post("/api/boards/1/update", json={"title": "hacked"})
    assert denied.status_code == 403
    assert other_client.get("/api/boards/1/update-form").status_code == 403
    assert client.get("/api/boards/1/update-form").status_code == 200

    detail = client.get("/api/boards/1").json()
    assert (detail["title"], detail["content"]) == ("B", "x")


def test_delete_board(client, other_client):
    _join_and_login(client, "u1")
    _join_and_login(other_client, "u2")
    client.post("/api/boards", json={"title": "A", "content": "x"})

    assert other_client.post("/api/boards/1/delete").status_code == 403

    response = client.post("/api/boards/1/delete")
    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert client.get("/api/boards/1").status_code == 404
    assert client.post("/api/boards/1/delete").status_code == 404


def test_update_missing_board(client):
    _join_and_login(client, "u1")
    response = client.post("/api/boards/42/update", json={"title": "B"})
    assert response.status_code == 404


def test_list_boards_newest_first(client):
    _join_and_login(client, "u1")
    for title in ("first", "second", "third"):
        client.post("/api/boards", json={"title": title, "content": "x"})

    titles = [b["title"] for b in client.get("/api/boards").json()]
    assert titles == ["third", "second", "first"]
