from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from common.config import yaml_config
from common.errors import DuplicateNameError, EntryNotFoundError, ProtectedEntryError
from common.logger import get_logger
from ingestion.document_models import CoreEntry, CorpusEntry, UserEntry
from storage.kv_store import KeyValueStore
from storage.schemas import (
    RegistryEntryRecord,
    RegistryRecord,
    load_registry,
    save_registry,
)

log = get_logger(__name__)


class CorpusRegistry:
    """
    Named, selectable collections of retrieval units.

    The whole registry is written back to the key-value store after every
    successful mutation. Mutations are read-modify-write over the full
    collection, so callers sharing one registry across threads must serialize them.
    """

    def __init__(self, store: KeyValueStore, key: str | None = None):
        self.store = store
        self.key = key or yaml_config.storage.registry_key
        self._entries: Dict[str, CorpusEntry] = {}
        for name, rec in load_registry(store, self.key).entries.items():
            units = tuple(rec.units)
            self._entries[name] = (
                CoreEntry(name, units)
                if rec.is_core
                else UserEntry(name, units, selected=rec.selected)
            )
        log.info("Loaded %d corpus entries from '%s'", len(self._entries), self.key)

    # --------------------
    # Queries
    # --------------------
    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[CorpusEntry]:
        return iter(list(self._entries.values()))

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[CorpusEntry]:
        return list(self._entries.values())

    def get(self, name: str) -> Optional[CorpusEntry]:
        return self._entries.get(name)

    def selected_entries(self) -> List[CorpusEntry]:
        return [e for e in self._entries.values() if e.selected]

    # --------------------
    # Mutations
    # --------------------
    def add_entry(
        self, name: str, units: Iterable[str], is_core: bool = False
    ) -> CorpusEntry:
        if name in self._entries:
            raise DuplicateNameError(name)
        units = tuple(units)
        entry: CorpusEntry = CoreEntry(name, units) if is_core else UserEntry(name, units)
        self._commit({**self._entries, name: entry})
        log.info("Added %s entry '%s' (%d units)", _kind(entry), name, len(units))
        return entry

    def install_core_entry(self, name: str, units: Iterable[str]) -> CoreEntry:
        """
        Seed or refresh the reference corpus at process start.
        The core entry is placed first; a stored core entry of the same name is replaced.
        """
        existing = self._entries.get(name)
        if existing is not None and not existing.is_core:
            raise DuplicateNameError(name)
        entry = CoreEntry(name, tuple(units))
        rest = {n: e for n, e in self._entries.items() if n != name}
        self._commit({name: entry, **rest})
        log.info("Installed core entry '%s' (%d units)", name, len(entry.units))
        return entry

    def remove_entry(self, name: str) -> None:
        entry = self._require(name)
        if isinstance(entry, CoreEntry):
            raise ProtectedEntryError(name, "remove")
        self._commit({n: e for n, e in self._entries.items() if n != name})
        log.info("Removed entry '%s'", name)

    def toggle_selected(self, name: str) -> UserEntry:
        entry = self._require(name)
        if isinstance(entry, CoreEntry):
            raise ProtectedEntryError(name, "deselect")
        toggled = entry.toggled()
        self._commit({**self._entries, name: toggled})
        log.info("Entry '%s' selected=%s", name, toggled.selected)
        return toggled

    # --------------------
    # Internals
    # --------------------
    def _require(self, name: str) -> CorpusEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise EntryNotFoundError(name)
        return entry

    def _commit(self, entries: Dict[str, CorpusEntry]) -> None:
        # in-memory state only changes once the store accepted the new registry
        record = RegistryRecord(
            entries={
                e.name: RegistryEntryRecord(
                    units=list(e.units), selected=e.selected, is_core=e.is_core
                )
                for e in entries.values()
            }
        )
        save_registry(self.store, self.key, record)
        self._entries = entries


def _kind(entry: CorpusEntry) -> str:
    return "core" if entry.is_core else "user"
