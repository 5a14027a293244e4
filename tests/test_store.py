import threading

import pytest

from kanban_lists.database import Database
from kanban_lists.errors import ValidationError
from kanban_lists.repositories import FindQuery, InMemoryCollection
from kanban_lists.schemas import ListDocument
from kanban_lists.store import EntityStore, Hooks


@pytest.fixture
def lists():
    return EntityStore("lists", InMemoryCollection("lists"), ListDocument)


class TestAutoValues:
    def test_insert_sets_created_at_and_archived(self, lists):
        list_id = lists.insert({"title": "T", "board_id": "b1"})
        doc = lists.find_one(list_id)
        assert doc["archived"] is False
        assert doc["created_at"].tzinfo is not None
        assert "updated_at" not in doc
        assert len(list_id) == 17

    def test_insert_ignores_caller_id_and_timestamps(self, lists):
        list_id = lists.insert({"id": "mine", "title": "T", "board_id": "b1", "updated_at": "2020-01-01T00:00:00"})
        assert list_id != "mine"
        assert "updated_at" not in lists.find_one(list_id)

    def test_update_keeps_created_at(self, lists):
        list_id = lists.insert({"title": "T", "board_id": "b1"})
        created = lists.find_one(list_id)["created_at"]
        updated = lists.update(list_id, {"title": "U", "created_at": "1999-01-01T00:00:00"})
        assert updated["created_at"] == created
        assert updated["updated_at"] > created

    def test_update_missing_returns_none(self, lists):
        assert lists.update("missing", {"title": "U"}) is None

    def test_unknown_fields_are_dropped(self, lists):
        list_id = lists.insert({"title": "T", "board_id": "b1", "color": "red"})
        assert "color" not in lists.find_one(list_id)


class TestValidation:
    def test_missing_title(self, lists):
        with pytest.raises(ValidationError) as info:
            lists.insert({"board_id": "b1"})
        assert info.value.status_code == 422
        assert any(err["loc"] == ("title",) for err in info.value.details)

    def test_wrong_type(self, lists):
        with pytest.raises(ValidationError):
            lists.insert({"title": "T", "board_id": "b1", "archived": "maybe"})

    def test_nothing_stored_on_failure(self, lists):
        with pytest.raises(ValidationError):
            lists.insert({"title": 5, "board_id": "b1"})
        assert lists.find().count() == 0


class TestHooks:
    def test_hook_order_and_arguments(self):
        calls = []
        hooks = Hooks(
            after_insert=[lambda user, doc: calls.append(("insert", user, doc["title"]))],
            after_update=[lambda user, doc: calls.append(("update", user, doc["title"]))],
            before_remove=[lambda user, doc: calls.append(("remove", user, doc["title"]))],
        )
        store = EntityStore("lists", InMemoryCollection("lists"), ListDocument, hooks)
        list_id = store.insert({"title": "A", "board_id": "b1"}, "u1")
        store.update(list_id, {"title": "B"}, "u2")
        store.remove(list_id, "u3")
        assert calls == [("insert", "u1", "A"), ("update", "u2", "B"), ("remove", "u3", "B")]

    def test_update_of_document_removed_before_write(self, monkeypatch):
        calls = []
        backend = InMemoryCollection("lists")
        store = EntityStore(
            "lists",
            backend,
            ListDocument,
            Hooks(after_update=[lambda user, doc: calls.append(doc["id"])]),
        )
        list_id = store.insert({"title": "A", "board_id": "b1"})
        replace = backend.replace

        def remove_then_replace(doc_id, fields):
            store.remove(doc_id)
            return replace(doc_id, fields)

        monkeypatch.setattr(backend, "replace", remove_then_replace)
        assert store.update(list_id, {"archived": True}) is None
        assert store.find_one(list_id) is None
        assert calls == []

    def test_remove_waits_for_store_lock(self, lists):
        list_id = lists.insert({"title": "A", "board_id": "b1"})
        done = threading.Event()

        def remove():
            lists.remove(list_id)
            done.set()

        with lists._lock:
            worker = threading.Thread(target=remove)
            worker.start()
            assert not done.wait(0.1)
            assert lists.find_one(list_id) is not None
        worker.join(timeout=5)
        assert done.is_set()
        assert lists.find_one(list_id) is None

    def test_remove_where(self, lists):
        lists.insert({"title": "A", "board_id": "b1"})
        lists.insert({"title": "B", "board_id": "b1"})
        keep = lists.insert({"title": "C", "board_id": "b2"})
        assert lists.remove_where({"board_id": "b1"}) == 2
        assert [d["id"] for d in lists.find()] == [keep]


class TestFind:
    def test_sort_puts_missing_first_and_keeps_ties_in_insert_order(self, lists):
        a = lists.insert({"title": "a", "board_id": "b1", "sort": 2})
        b = lists.insert({"title": "b", "board_id": "b1"})
        c = lists.insert({"title": "c", "board_id": "b1", "sort": 1})
        d = lists.insert({"title": "d", "board_id": "b1", "sort": 1})
        assert [x["id"] for x in lists.find(sort=("sort",))] == [b, c, d, a]
        assert [x["id"] for x in lists.find(sort=("-sort",))] == [a, c, d, b]

    def test_projection(self, lists):
        list_id = lists.insert({"title": "a", "board_id": "b1", "sort": 2})
        assert lists.find({"board_id": "b1"}, fields=("title",)).fetch() == [{"id": list_id, "title": "a"}]

    def test_find_one_by_selector(self, lists):
        list_id = lists.insert({"title": "a", "board_id": "b1"})
        assert lists.find_one({"id": list_id, "board_id": "b1"})["title"] == "a"
        assert lists.find_one({"id": list_id, "board_id": "b2"}) is None

    def test_memory_collection_returns_copies(self):
        coll = InMemoryCollection("x")
        coll.insert("1", {"tags": ["a"]})
        coll.find(FindQuery())[0]["tags"].append("b")
        assert coll.get("1") == {"id": "1", "tags": ["a"]}


class TestSQLiteBackend:
    @pytest.fixture
    def sqlite_db(self, tmp_path):
        return Database(backend="sqlite", sqlite_db_path=str(tmp_path / "lists.db"))

    def test_round_trip(self, sqlite_db):
        list_id = sqlite_db.lists.insert({"title": "T", "board_id": "b1", "sort": 1.5})
        doc = sqlite_db.lists.find_one(list_id)
        assert doc["title"] == "T"
        assert doc["archived"] is False
        assert doc["sort"] == 1.5
        assert doc["created_at"].tzinfo is not None

        updated = sqlite_db.lists.update(list_id, {"archived": True})
        assert updated["updated_at"] > doc["created_at"]
        assert sqlite_db.lists.find_one(list_id)["archived"] is True

        activities = sqlite_db.activities.find({"list_id": list_id}).fetch()
        assert [a["activity_type"] for a in activities] == ["createList", "archivedList"]

        assert sqlite_db.lists.remove(list_id) is True
        assert sqlite_db.lists.find_one(list_id) is None
        assert sqlite_db.lists.remove(list_id) is False

    def test_filter_and_sort(self, sqlite_db):
        cards = sqlite_db.cards
        c2 = cards.insert({"title": "2", "board_id": "b", "list_id": "l", "sort": 2})
        c1 = cards.insert({"title": "1", "board_id": "b", "list_id": "l", "sort": 1})
        cards.insert({"title": "x", "board_id": "b", "list_id": "l", "sort": 0, "archived": True})
        cards.insert({"title": "y", "board_id": "b", "list_id": "other", "sort": 0})
        active = cards.find({"list_id": "l", "archived": False}, sort=("sort",)).fetch()
        assert [c["id"] for c in active] == [c1, c2]
        assert cards.find({"list_id": "l"}).count() == 3

    def test_data_survives_reopen(self, tmp_path):
        path = str(tmp_path / "lists.db")
        list_id = Database(backend="sqlite", sqlite_db_path=path).lists.insert({"title": "T", "board_id": "b1"})
        assert Database(backend="sqlite", sqlite_db_path=path).lists.find_one(list_id)["title"] == "T"
