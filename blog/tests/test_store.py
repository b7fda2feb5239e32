"""
Tests for the EntityStore unit of work.
"""
import pytest
from blog.db.store import EntityNotFoundError, ImmutableFieldError
from blog.models import BOARD, USER, Board, User, boards


def _updates(statements):
    return [s for s in statements if s.lstrip().upper().startswith("UPDATE")]


@pytest.fixture()
def owner(store):
    user = store.insert(USER, User(username="owner", password="secret", email="owner@example.com"))
    store.commit()
    return user


@pytest.fixture()
def board(store, owner):
    board = store.insert(BOARD, Board(title="A", content="x", owner_id=owner.id))
    store.commit()
    return board


def test_load_missing_key_returns_none(store):
    assert store.load(BOARD, 999) is None


def test_insert_assigns_key_on_same_instance(store, owner):
    board = Board(title="A", content="x", owner_id=owner.id)
    returned = store.insert(BOARD, board)
    assert returned is board
    assert board.id == 1
    assert store.is_tracked(board)


def test_insert_rejects_already_tracked_entity(store, board):
    with pytest.raises(ValueError):
        store.insert(BOARD, board)


def test_load_reuses_tracked_instance(store, board, statements):
    first = store.load(BOARD, board.id)
    second = store.load(BOARD, board.id)
    assert first is board
    assert second is board
    assert not [s for s in statements if s.lstrip().upper().startswith("SELECT")]


def test_load_after_close_reads_fresh_instance(store, board):
    store.close()
    loaded = store.load(BOARD, board.id)
    assert loaded is not board
    assert (loaded.title, loaded.content, loaded.owner_id) == ("A", "x", board.owner_id)


def test_flush_writes_only_changed_columns(store, board, statements):
    board.title = "B"
    issued = store.flush()

    assert [(u.table, u.key, u.columns) for u in issued] == [("boards", board.id, ("title",))]
    updates = _updates(statements)
    assert len(updates) == 1
    assert "title" in updates[0]
    assert "content" not in updates[0]


def test_flush_without_changes_issues_nothing(store, board, statements):
    store.load(BOARD, board.id)
    assert store.flush() == []
    assert _updates(statements) == []


def test_value_restored_before_flush_is_not_written(store, board, statements):
    board.title = "changed"
    board.title = "A"
    assert store.dirty_fields(board) == {}
    assert store.flush() == []
    assert _updates(statements) == []


def test_entity_flushed_at_most_once(store, board, statements):
    board.content = "y"
    store.flush()
    store.flush()
    assert len(_updates(statements)) == 1


def test_tracked_update_applies_mutator_and_commit_persists(store, board):
    updated = store.tracked_update(BOARD, board.id, lambda b: setattr(b, "title", "B"))
    assert updated is board
    assert store.dirty_fields(board) == {"title": "B"}

    issued = store.commit()
    assert issued[0].columns == ("title",)

    store.close()
    reloaded = store.load(BOARD, board.id)
    assert reloaded.title == "B"
    assert reloaded.content == "x"


def test_tracked_update_missing_key_raises(store):
    with pytest.raises(EntityNotFoundError):
        store.tracked_update(BOARD, 42, lambda b: None)


def test_flush_rejects_non_updatable_column(store, board):
    board.owner_id = board.owner_id + 1
    with pytest.raises(ImmutableFieldError) as excinfo:
        store.flush()
    assert excinfo.value.columns == ("owner_id",)


def test_user_username_is_not_updatable(store, owner):
    owner.username = "renamed"
    with pytest.raises(ImmutableFieldError):
        store.flush()


def test_delete_by_key_removes_row(store, board):
    assert store.delete_by_key(BOARD, board.id) == 1
    assert not store.is_tracked(board)
    store.commit()
    assert store.load(BOARD, board.id) is None


def test_delete_by_key_missing_raises(store):
    with pytest.raises(EntityNotFoundError):
        store.delete_by_key(BOARD, 7)


def test_find_all_orders_and_returns_tracked_instances(store, owner):
    first = store.insert(BOARD, Board(title="first", content="1", owner_id=owner.id))
    second = store.insert(BOARD, Board(title="second", content="2", owner_id=owner.id))
    store.commit()

    listed = store.find_all(BOARD, order_by=boards.c.id.desc())
    assert listed == [second, first]
    assert listed[0] is second


def test_find_one_by_column(store, owner):
    assert store.find_one(USER, username="owner") is owner
    assert store.find_one(USER, username="nobody") is None


def test_rollback_discards_uncommitted_insert(store, owner):
    board = store.insert(BOARD, Board(title="draft", content="x", owner_id=owner.id))
    store.rollback()
    assert len(store) == 0
    assert store.load(BOARD, board.id) is None
