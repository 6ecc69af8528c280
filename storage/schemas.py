"""
Versioned payloads for everything the content layer keeps in the key-value store.

Each key holds ``{"version": N, ...}``. Older shapes are migrated on load; a payload
that cannot be understood is set aside under ``<key>.unreadable`` and replaced by
an empty one instead of crashing the caller.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Literal, TypeVar

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.logger import get_logger
from storage.kv_store import KeyValueStore

log = get_logger(__name__)

REGISTRY_SCHEMA_VERSION = 1
HISTORY_SCHEMA_VERSION = 1


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegistryEntryRecord(_Record):
    units: List[str] = Field(default_factory=list)
    selected: bool = True
    is_core: bool = Field(default=False, alias="isCore")


class RegistryRecord(_Record):
    version: Literal[1] = REGISTRY_SCHEMA_VERSION
    entries: Dict[str, RegistryEntryRecord] = Field(default_factory=dict)


class SnapshotRecord(_Record):
    section_values: Dict[str, str] = Field(default_factory=dict, alias="sectionValues")
    summary: str
    timestamp: datetime  # ISO-8601 on the wire
    name: str = ""
    attachments_fingerprint: str = Field(default="", alias="attachmentsFingerprint")


class HistoryRecord(_Record):
    version: Literal[1] = HISTORY_SCHEMA_VERSION
    documents: Dict[str, List[SnapshotRecord]] = Field(default_factory=dict)


# --------------------
# Migrations
# --------------------
def _migrate_registry(raw: Any) -> Dict[str, Any]:
    # list of {"name", "chunks", "selected", "isCore"} as saved by the browser app
    if isinstance(raw, list):
        entries = {}
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                continue
            entries[item["name"]] = {
                "units": item.get("chunks", item.get("units", [])),
                "selected": item.get("selected", True),
                "isCore": item.get("isCore", False),
            }
        return {"version": REGISTRY_SCHEMA_VERSION, "entries": entries}
    # bare name -> entry mapping, before the payload was versioned
    if isinstance(raw, dict) and "version" not in raw:
        return {"version": REGISTRY_SCHEMA_VERSION, "entries": raw}
    return raw


def _migrate_history(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict) and "version" not in raw:
        return {"version": HISTORY_SCHEMA_VERSION, "documents": raw}
    return raw


# --------------------
# Load / save
# --------------------
R = TypeVar("R", bound=_Record)


def _load(
    store: KeyValueStore,
    key: str,
    model: type[R],
    migrate: Callable[[Any], Any],
) -> R:
    payload = store.get(key)
    if payload is None:
        return model()
    try:
        return model.model_validate(migrate(orjson.loads(payload)))
    except (orjson.JSONDecodeError, ValidationError, TypeError) as e:
        log.error(
            "Unreadable payload under '%s', keeping a copy in '%s.unreadable': %s",
            key,
            key,
            e,
        )
        store.set(f"{key}.unreadable", payload)
        return model()


def _save(store: KeyValueStore, key: str, record: _Record) -> None:
    data = record.model_dump(by_alias=True, mode="json")
    store.set(key, orjson.dumps(data).decode("utf-8"))


def load_registry(store: KeyValueStore, key: str) -> RegistryRecord:
    return _load(store, key, RegistryRecord, _migrate_registry)


def save_registry(store: KeyValueStore, key: str, record: RegistryRecord) -> None:
    _save(store, key, record)


def load_history(store: KeyValueStore, key: str) -> HistoryRecord:
    return _load(store, key, HistoryRecord, _migrate_history)


def save_history(store: KeyValueStore, key: str, record: HistoryRecord) -> None:
    _save(store, key, record)
