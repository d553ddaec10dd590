import time

import pytest

from analytics.editor import remove_columns
from analytics.errors import DatasetNotFound, InvalidFillRule, NoPendingEdit
from analytics.ingest import parse_csv_text
from storage.sessions import SessionStore, get_store


def test_create_and_get(store, dataset):
    session = store.create(dataset, "people.csv")
    assert store.get(session.session_id) is session
    assert len(store) == 1


def test_unknown_session(store):
    with pytest.raises(DatasetNotFound):
        store.get("does-not-exist")


def test_sessions_are_isolated(store, dataset):
    first = store.create(dataset, "a.csv")
    second = store.create(parse_csv_text("x\n1\n"), "b.csv")
    first.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    first.confirm()
    assert second.dataset.columns == ["x"]
    assert second.pending is None


def test_propose_does_not_change_dataset(store, dataset):
    session = store.create(dataset, "people.csv")
    pending = session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    assert pending.shape == (5, 3)
    assert session.dataset.columns == ["id", "name", "age", "city"]


def test_confirm_rebuilds_stats(store, dataset):
    session = store.create(dataset, "people.csv")
    session.propose(lambda ds: remove_columns(ds, ["age", "city"]), "drop")
    result = session.confirm()
    assert result.columns == ["id", "name"]
    assert set(result.column_stats) == {"id", "name"}
    assert result.missing_cells == 0
    assert session.pending is None


def test_confirm_without_pending(store, dataset):
    session = store.create(dataset, "people.csv")
    with pytest.raises(NoPendingEdit):
        session.confirm()


def test_second_proposal_replaces_first(store, dataset):
    session = store.create(dataset, "people.csv")
    session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    session.propose(lambda ds: remove_columns(ds, ["city"]), "drop city")
    assert session.confirm().columns == ["id", "name", "age"]


def test_proposal_is_built_from_confirmed_dataset(store, dataset):
    session = store.create(dataset, "people.csv")
    session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    session.confirm()
    session.propose(lambda ds: remove_columns(ds, ["city"]), "drop city")
    assert session.confirm().columns == ["id", "name"]


def test_proposal_is_built_under_session_lock(store, dataset):
    session = store.create(dataset, "people.csv")
    seen = {}

    def build(ds):
        seen["locked"] = session._lock.locked()
        seen["dataset"] = ds
        return remove_columns(ds, ["age"])

    session.propose(build, "drop age")
    assert seen["locked"] is True
    assert seen["dataset"] is dataset


def test_failed_proposal_keeps_previous_pending(store, dataset):
    session = store.create(dataset, "people.csv")
    first = session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")

    def build(ds):
        raise InvalidFillRule("age", "boom")

    with pytest.raises(InvalidFillRule):
        session.propose(build, "broken")
    assert session.pending is first
    assert not session._lock.locked()


def test_cancel(store, dataset):
    session = store.create(dataset, "people.csv")
    assert session.cancel() is False
    session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    assert session.cancel() is True
    assert session.pending is None
    assert session.dataset is dataset


def test_load_replaces_dataset_and_drops_pending(store, dataset):
    session = store.create(dataset, "people.csv")
    session.propose(lambda ds: remove_columns(ds, ["age"]), "drop age")
    replacement = parse_csv_text("x\n1\n")
    session.load(replacement, "other.csv")
    assert session.dataset is replacement
    assert session.filename == "other.csv"
    assert session.pending is None


def test_delete(store, dataset):
    session = store.create(dataset, "people.csv")
    assert store.delete(session.session_id) is True
    assert store.delete(session.session_id) is False
    with pytest.raises(DatasetNotFound):
        store.get(session.session_id)


def test_idle_sessions_expire(dataset):
    store = SessionStore(ttl_seconds=10)
    session = store.create(dataset, "people.csv")
    assert store.prune(now=time.time() + 5) == 0
    assert store.prune(now=time.time() + 60) == 1
    with pytest.raises(DatasetNotFound):
        store.get(session.session_id)


def test_get_store_is_a_singleton():
    assert get_store() is get_store()
