import orjson
import pytest

from common.errors import VersionNotFoundError
from history.models import DocumentState
from history.snapshot_store import CREATED_SUMMARY, SnapshotStore
from ingestion.hash_utils import fingerprint_attachments


def _state(name="ETP 1", attachments="", **sections):
    return DocumentState(
        name=name,
        section_values=sections or {"obj": "Objeto", "just": "Justificativa"},
        attachments_fingerprint=attachments,
    )


def test_first_save_records_creation(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    snap = store.record_if_changed("42", _state())

    assert snap is not None
    assert snap.summary == CREATED_SUMMARY
    assert store.history("42") == (snap,)
    assert store.latest(42) is snap


def test_identical_save_is_a_noop(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    assert store.record_if_changed("42", _state()) is not None
    assert store.record_if_changed("42", _state()) is None
    assert len(store.history("42")) == 1


def test_changes_are_summarized_and_prepended(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    first = store.record_if_changed("1", _state())
    second = store.record_if_changed(
        "1", _state(obj="Objeto novo", just="Justificativa")
    )
    third = store.record_if_changed(
        "1",
        _state(
            name="ETP final",
            attachments=fingerprint_attachments([{"name": "anexo.pdf"}]),
            obj="Objeto novo",
            just="Justificativa",
        ),
    )

    assert second.summary == "Alteração: conteúdo das seções modificado."
    assert third.summary == (
        'Alteração: nome alterado de "ETP 1" para "ETP final", anexos atualizados.'
    )
    assert store.history("1") == (third, second, first)
    assert first.timestamp < second.timestamp < third.timestamp


def test_snapshots_do_not_follow_caller_mutation(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    sections = {"obj": "Objeto"}
    snap = store.record_if_changed("1", DocumentState("ETP", sections))
    sections["obj"] = "alterado"

    assert snap.section_values["obj"] == "Objeto"
    with pytest.raises(TypeError):
        snap.section_values["obj"] = "x"


def test_snapshot_index_out_of_range(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    store.record_if_changed("1", _state())
    with pytest.raises(VersionNotFoundError):
        store.snapshot("1", 1)
    with pytest.raises(IndexError):
        store.snapshot("unknown", 0)


def test_history_round_trips_through_store(memory_store, clock):
    store = SnapshotStore(memory_store, clock=clock)
    store.record_if_changed("1", _state())
    store.record_if_changed("1", _state(obj="outro", just="texto"))
    store.record_if_changed("2", _state(name="TR 2"))

    payload = orjson.loads(memory_store.get(store.key))
    assert payload["version"] == 1
    first = payload["documents"]["1"][0]
    assert set(first) >= {"sectionValues", "summary", "timestamp"}
    assert first["sectionValues"] == {"obj": "outro", "just": "texto"}

    reloaded = SnapshotStore(memory_store, clock=clock)
    assert reloaded.document_ids() == ["1", "2"]
    assert reloaded.history("1") == store.history("1")
    assert reloaded.history("2") == store.history("2")
    # reloaded state still detects no-op saves
    assert reloaded.record_if_changed("2", _state(name="TR 2")) is None


def test_attachment_fingerprint_ignores_key_order():
    a = fingerprint_attachments([{"name": "x.pdf", "size": 1}])
    b = fingerprint_attachments([{"size": 1, "name": "x.pdf"}])
    assert a == b
    assert fingerprint_attachments(None) == fingerprint_attachments([])
    assert a != fingerprint_attachments([])


def test_failed_write_leaves_history_untouched(failing_store, clock):
    store = SnapshotStore(failing_store, clock=clock)
    failing_store.fail = True
    with pytest.raises(OSError):
        store.record_if_changed("1", _state())
    assert store.history("1") == ()
    assert failing_store.get(store.key) is None

    failing_store.fail = False
    snap = store.record_if_changed("1", _state())
    assert snap is not None and snap.summary == CREATED_SUMMARY

    failing_store.fail = True
    changed = _state(obj="Objeto revisado", just="Justificativa")
    with pytest.raises(OSError):
        store.record_if_changed("1", changed)
    assert store.history("1") == (snap,)

    # the same save succeeds once the store recovers instead of being a no-op
    failing_store.fail = False
    retried = store.record_if_changed("1", changed)
    assert retried is not None
    assert retried.summary == "Alteração: conteúdo das seções modificado."
    persisted = orjson.loads(failing_store.get(store.key))["documents"]["1"]
    assert len(persisted) == 2
