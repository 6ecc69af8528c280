import orjson

from history.snapshot_store import SnapshotStore
from retrieval.corpus_registry import CorpusRegistry
from storage.kv_store import InMemoryStore, JsonFileStore
from storage.schemas import load_history, load_registry


def test_json_file_store_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "store")
    assert store.get("corpus_registry") is None

    store.set("corpus_registry", '{"version": 1}')
    assert store.get("corpus_registry") == '{"version": 1}'
    assert (tmp_path / "store" / "corpus_registry.json").exists()
    assert not list((tmp_path / "store").glob("*.tmp"))

    # survives a new instance on the same directory
    assert JsonFileStore(tmp_path / "store").get("corpus_registry") == '{"version": 1}'


def test_json_file_store_sanitizes_keys(tmp_path):
    store = JsonFileStore(tmp_path)
    store.set("etp/history key", "x")
    assert store.get("etp/history key") == "x"
    assert (tmp_path / "etp_history_key.json").exists()
    assert len(list(tmp_path.glob("*.json"))) == 1


def test_registry_persisted_on_disk(tmp_path):
    reg = CorpusRegistry(JsonFileStore(tmp_path))
    reg.add_entry("edital.txt", ["Primeiro trecho do edital."])
    reloaded = CorpusRegistry(JsonFileStore(tmp_path))
    assert reloaded.get("edital.txt").units == ("Primeiro trecho do edital.",)


def test_legacy_browser_file_list_is_migrated():
    legacy = [
        {"name": "Lei", "chunks": ["Art. 1º. Texto."], "selected": True, "isCore": True},
        {"name": "edital.pdf", "chunks": ["p1", "p2"], "selected": False},
    ]
    store = InMemoryStore({"corpus_registry": orjson.dumps(legacy).decode()})
    record = load_registry(store, "corpus_registry")

    assert list(record.entries) == ["Lei", "edital.pdf"]
    assert record.entries["Lei"].is_core is True
    assert record.entries["edital.pdf"].units == ["p1", "p2"]
    assert record.entries["edital.pdf"].selected is False


def test_unversioned_mapping_is_migrated():
    raw = {"a.txt": {"units": ["u1"], "selected": True, "isCore": False}}
    store = InMemoryStore({"corpus_registry": orjson.dumps(raw).decode()})
    reg = CorpusRegistry(store, key="corpus_registry")
    assert reg.names() == ["a.txt"]


def test_unreadable_payload_is_set_aside():
    store = InMemoryStore({"corpus_registry": "not json at all"})
    reg = CorpusRegistry(store, key="corpus_registry")

    assert len(reg) == 0
    assert store.get("corpus_registry.unreadable") == "not json at all"


def test_future_schema_version_is_not_loaded():
    payload = orjson.dumps({"version": 9, "documents": {}}).decode()
    store = InMemoryStore({"document_history": payload})
    record = load_history(store, "document_history")
    assert record.documents == {}
    assert store.get("document_history.unreadable") == payload


def test_unversioned_history_is_migrated(clock):
    raw = {
        "12": [
            {
                "sectionValues": {"obj": "Objeto"},
                "summary": "Documento criado.",
                "timestamp": "2024-05-23T09:00:00+00:00",
            }
        ]
    }
    store = InMemoryStore({"document_history": orjson.dumps(raw).decode()})
    snapshots = SnapshotStore(store, key="document_history", clock=clock)

    (snap,) = snapshots.history("12")
    assert snap.section_values == {"obj": "Objeto"}
    assert snap.timestamp.year == 2024


def test_legacy_item_with_non_string_name_is_skipped():
    legacy = [
        {"name": ["x"], "chunks": ["p1"]},
        {"name": "edital.pdf", "chunks": ["p2"]},
    ]
    store = InMemoryStore({"corpus_registry": orjson.dumps(legacy).decode()})
    record = load_registry(store, "corpus_registry")
    assert list(record.entries) == ["edital.pdf"]
