import pytest
from conftest import register
from portfolio.core import messages
from portfolio.core.security import get_password_hash
from portfolio.models.message import Message
from portfolio.models.user import User
from portfolio.services.admin_service import parse_page


def seed_users(db, count):
    for i in range(count):
        db.add(User(username=f"user{i}", email=f"user{i}@example.com", password="hash", role="user"))
    db.commit()


def seed_messages(db, count, user_id=None):
    for i in range(count):
        db.add(Message(
            user_id=user_id,
            name=f"Sender {i}",
            email=f"sender{i}@example.com",
            subject=f"Subject {i}",
            message="Hi",
        ))
    db.commit()


def test_admin_data_requires_login(client):
    res = client.get("/api/admin/data")

    assert res.status_code == 401
    assert res.json() == {"success": False, "message": messages.LOGIN_REQUIRED}


def test_admin_data_forbidden_for_regular_user(client, db_session):
    seed_users(db_session, 3)
    register(client, "alice")

    res = client.get("/api/admin/data")

    assert res.status_code == 403
    assert res.json() == {"success": False, "message": messages.FORBIDDEN}
    assert "users" not in res.json()


def test_admin_role_is_read_from_database(client, db_session):
    # A user called "admin" created without the role is not an admin
    db_session.add(User(
        username="admin",
        email="admin@example.com",
        password=get_password_hash("pw"),
        role="user",
    ))
    db_session.commit()
    login = client.post("/api/login", json={"username": "admin", "password": "pw"})
    assert login.json()["success"] is True

    assert client.get("/api/admin/data").status_code == 403


def test_users_pagination(client, db_session):
    register(client, "admin")
    seed_users(db_session, 24)

    first = client.get("/api/admin/data").json()
    third = client.get("/api/admin/data", params={"page_users": 3}).json()

    assert first["success"] is True
    assert len(first["users"]["data"]) == 10
    assert first["users"]["total"] == 25
    assert first["users"]["total_pages"] == 3
    assert first["users"]["per_page"] == 10
    assert first["users"]["current_page"] == 1
    assert len(third["users"]["data"]) == 5
    assert third["users"]["current_page"] == 3


def test_users_block_hides_passwords_and_is_newest_first(client, db_session):
    seed_users(db_session, 2)
    register(client, "admin")

    users = client.get("/api/admin/data").json()["users"]["data"]

    assert set(users[0]) == {"id", "username", "email", "created_at"}
    assert [u["username"] for u in users] == ["admin", "user1", "user0"]


def test_messages_block_includes_submitter(client, db_session):
    register(client, "admin")
    admin_id = db_session.query(User.id).filter(User.username == "admin").scalar()
    seed_messages(db_session, 1, user_id=admin_id)
    # Submitter no longer exists
    seed_messages(db_session, 1, user_id=None)

    block = client.get("/api/admin/data").json()["messages"]

    assert block["total"] == 2
    assert block["total_pages"] == 1
    newest, oldest = block["data"]
    assert newest["user_name"] is None
    assert oldest["user_name"] == "admin"
    assert oldest["user_id"] == admin_id
    assert set(oldest) == {"id", "user_id", "name", "email", "subject", "message", "created_at", "user_name"}


def test_empty_messages_block(client):
    register(client, "admin")

    block = client.get("/api/admin/data").json()["messages"]

    assert block == {"data": [], "total": 0, "current_page": 1, "per_page": 10, "total_pages": 0}


def test_blocks_paginate_independently(client, db_session):
    register(client, "admin")
    seed_users(db_session, 14)
    seed_messages(db_session, 12)

    body = client.get("/api/admin/data", params={"page_users": 2, "page_msgs": 1}).json()

    assert len(body["users"]["data"]) == 5
    assert len(body["messages"]["data"]) == 10
    assert body["messages"]["total_pages"] == 2


def test_junk_page_falls_back_to_first_page(client, db_session):
    register(client, "admin")

    body = client.get("/api/admin/data", params={"page_users": "abc", "page_msgs": "-4"}).json()

    assert body["users"]["current_page"] == 1
    assert body["messages"]["current_page"] == 1


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("", 1),
    ("2", 2),
    (" 3 ", 3),
    ("4abc", 4),
    ("2.9", 2),
    ("abc", 1),
    ("0", 1),
    ("-3", 1),
])
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_deleting_submitter_keeps_message(client, db_session):
    register(client, "bob")
    client.post("/api/contact", json={
        "name": "Bob", "email": "bob@example.com", "subject": "Hi", "message": "Hello",
    })
    client.get("/api/logout")
    register(client, "admin")

    db_session.query(User).filter(User.username == "bob").delete()
    db_session.commit()

    assert db_session.query(Message.user_id).all() == [(None,)]
    block = client.get("/api/admin/data").json()["messages"]
    assert block["total"] == 1
    assert block["data"][0]["user_id"] is None
    assert block["data"][0]["user_name"] is None
    assert block["data"][0]["subject"] == "Hi"
