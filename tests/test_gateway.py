import pytest
from datetime import timedelta
from sqlalchemy.exc import OperationalError
from app.errors import PersistenceError
from app.models import HANDOFFS, SIGNOFFS
from app.services.signoffs import DenormalizedSignoffStore, LogSignoffStore
from helpers import T0

def test_list_all_is_newest_first(gateway, seeded):
    assert [r["id"] for r in gateway.list_all(HANDOFFS)] == ["h-new", "h-mid", "h-old"]

def test_list_where_filters(gateway, seeded):
    rows = gateway.list_where(HANDOFFS, phase="Sales")
    assert [r["id"] for r in rows] == ["h-new", "h-old"]
    assert gateway.list_where(HANDOFFS, id="missing") == []

def test_unknown_table_or_column(gateway):
    with pytest.raises(ValueError):
        gateway.list_all("users")
    with pytest.raises(ValueError):
        gateway.list_where(HANDOFFS, password="x")

def test_insert_assigns_id_and_timestamp(gateway, seeded):
    row = gateway.insert(SIGNOFFS, {"handoff_id": "h-old", "signed_by_name": "A",
                                    "signed_by_role": "B", "signed_for_phase": "C"})
    assert row["id"] and row["created_at"]
    assert gateway.list_where(SIGNOFFS, handoff_id="h-old")[0]["id"] == row["id"]

def test_conditional_update_touches_only_null_rows(gateway, seeded):
    values = {"signed_off_by": "A", "signed_off_role": "B", "signed_off_at": T0}
    assert gateway.update(HANDOFFS, "h-old", values, only_if_null=["signed_off_at"]) == 1
    assert gateway.update(HANDOFFS, "h-old", {"signed_off_by": "Z"}, only_if_null=["signed_off_at"]) == 0
    assert gateway.list_where(HANDOFFS, id="h-old")[0]["signed_off_by"] == "A"
    assert gateway.update(HANDOFFS, "missing", values) == 0

def test_store_failure_becomes_persistence_error(gateway, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))
    monkeypatch.setattr(gateway.session, "exec", broken)
    with pytest.raises(PersistenceError):
        gateway.list_all(HANDOFFS)

def test_log_store_against_sqlite(gateway, seeded):
    store = LogSignoffStore(gateway)
    store.submit_signoff("h-old", "Dana", "AE", "Sales")
    gateway.insert(SIGNOFFS, {"handoff_id": "h-old", "signed_by_name": "Early", "signed_by_role": "SA",
                              "signed_for_phase": "Solutions", "created_at": T0 - timedelta(days=1)})
    entries = store.list_signoffs("h-old")
    assert [e.signed_by_name for e in entries] == ["Dana", "Early"]
    assert entries[0].notes is None

def test_denormalized_store_against_sqlite(gateway, seeded):
    store = DenormalizedSignoffStore(gateway)
    store.submit_signoff("h-mid", "Lee", "Engineer", "Engineering")
    [entry] = store.list_signoffs("h-mid")
    assert entry.signed_by_name == "Lee"
    assert entry.signed_for_phase == "Engineering"

def _locked(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("database is locked"))

def test_failed_insert_rolls_back_and_retry_succeeds(gateway, seeded, monkeypatch):
    row = {"handoff_id": "h-old", "signed_by_name": "A", "signed_by_role": "B", "signed_for_phase": "C"}
    monkeypatch.setattr(gateway.session, "commit", _locked)
    with pytest.raises(PersistenceError):
        gateway.insert(SIGNOFFS, row)
    monkeypatch.undo()
    assert gateway.list_where(SIGNOFFS, handoff_id="h-old") == []
    stored = gateway.insert(SIGNOFFS, row)
    assert [r["id"] for r in gateway.list_where(SIGNOFFS, handoff_id="h-old")] == [stored["id"]]

def test_failed_update_rolls_back_and_retry_succeeds(gateway, seeded, monkeypatch):
    values = {"signed_off_by": "A", "signed_off_role": "B", "signed_off_at": T0}
    monkeypatch.setattr(gateway.session, "commit", _locked)
    with pytest.raises(PersistenceError):
        gateway.update(HANDOFFS, "h-old", values, only_if_null=["signed_off_at"])
    monkeypatch.undo()
    assert gateway.list_where(HANDOFFS, id="h-old")[0]["signed_off_at"] is None
    assert gateway.update(HANDOFFS, "h-old", values, only_if_null=["signed_off_at"]) == 1
