import os

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so tests never touch the filesystem unless asked
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from kanban_lists.database import Database, get_database  # noqa: E402
from kanban_lists.main import app  # noqa: E402

ALICE = "alice"  # active member
CAROL = "carol"  # comment-only member
DAVE = "dave"  # inactive member
MALLORY = "mallory"  # not a member


def make_board(db: Database, permission: str = "private", title: str = "Board") -> str:
    return db.boards.insert(
        {
            "title": title,
            "permission": permission,
            "members": [
                {"user_id": ALICE},
                {"user_id": CAROL, "is_comment_only": True},
                {"user_id": DAVE, "is_active": False},
            ],
        }
    )


def make_card(db: Database, board_id: str, list_id: str, title: str, **extra) -> str:
    return db.cards.insert({"title": title, "board_id": board_id, "list_id": list_id, **extra})


def headers(user_id: str) -> dict:
    return {"X-User-Id": user_id}


@pytest.fixture
def db() -> Database:
    return Database(backend="memory")


@pytest.fixture
def board_id(db: Database) -> str:
    return make_board(db)


@pytest.fixture
def client(db: Database):
    app.dependency_overrides[get_database] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
