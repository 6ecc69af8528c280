from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from common.config import yaml_config
from common.errors import VersionNotFoundError
from common.logger import get_logger
from history.models import DocumentSnapshot, DocumentState
from storage.kv_store import KeyValueStore
from storage.schemas import HistoryRecord, SnapshotRecord, load_history, save_history

log = get_logger(__name__)

CREATED_SUMMARY = "Documento criado."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def summarize_changes(previous: DocumentSnapshot, new_state: DocumentState) -> str:
    """One-line description of what differs, or "" when nothing does."""
    changes: List[str] = []
    if new_state.name != previous.name:
        changes.append(f'nome alterado de "{previous.name}" para "{new_state.name}"')
    if dict(new_state.section_values) != dict(previous.section_values):
        changes.append("conteúdo das seções modificado")
    if new_state.attachments_fingerprint != previous.attachments_fingerprint:
        changes.append("anexos atualizados")
    if not changes:
        return ""
    return f"Alteração: {', '.join(changes)}."


class SnapshotStore:
    """
    Append-only version history per document, newest first (index 0 is the latest).
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.key = key or yaml_config.storage.history_key
        self.clock = clock
        self._docs: Dict[str, List[DocumentSnapshot]] = {
            doc_id: [_from_record(r) for r in records]
            for doc_id, records in load_history(store, self.key).documents.items()
        }

    def record_if_changed(
        self, document_id: str | int, new_state: DocumentState
    ) -> Optional[DocumentSnapshot]:
        """
        Prepend a snapshot when the name, the section contents or the attachments
        differ from the latest one. Returns the new snapshot, or None for a no-op save.
        """
        doc_id = str(document_id)
        versions = self._docs.get(doc_id, [])
        if versions:
            summary = summarize_changes(versions[0], new_state)
            if not summary:
                log.debug("No changes for document %s, history untouched", doc_id)
                return None
        else:
            summary = CREATED_SUMMARY

        snap = DocumentSnapshot(
            section_values=new_state.section_values,
            summary=summary,
            timestamp=self.clock(),
            name=new_state.name,
            attachments_fingerprint=new_state.attachments_fingerprint,
        )
        self._commit({**self._docs, doc_id: [snap, *versions]})
        log.info("Document %s: %s (%d versions)", doc_id, summary, len(versions) + 1)
        return snap

    def history(self, document_id: str | int) -> Tuple[DocumentSnapshot, ...]:
        return tuple(self._docs.get(str(document_id), ()))

    def latest(self, document_id: str | int) -> Optional[DocumentSnapshot]:
        versions = self._docs.get(str(document_id))
        return versions[0] if versions else None

    def snapshot(self, document_id: str | int, index: int) -> DocumentSnapshot:
        versions = self._docs.get(str(document_id), [])
        if not 0 <= index < len(versions):
            raise VersionNotFoundError(str(document_id), index)
        return versions[index]

    def document_ids(self) -> List[str]:
        return list(self._docs)

    def _commit(self, docs: Dict[str, List[DocumentSnapshot]]) -> None:
        # history in memory only grows once the store accepted it
        record = HistoryRecord(
            documents={
                doc_id: [_to_record(s) for s in versions]
                for doc_id, versions in docs.items()
            }
        )
        save_history(self.store, self.key, record)
        self._docs = docs


def _to_record(snap: DocumentSnapshot) -> SnapshotRecord:
    return SnapshotRecord(
        section_values=dict(snap.section_values),
        summary=snap.summary,
        timestamp=snap.timestamp,
        name=snap.name,
        attachments_fingerprint=snap.attachments_fingerprint,
    )


def _from_record(rec: SnapshotRecord) -> DocumentSnapshot:
    return DocumentSnapshot(
        section_values=rec.section_values,
        summary=rec.summary,
        timestamp=rec.timestamp,
        name=rec.name,
        attachments_fingerprint=rec.attachments_fingerprint,
    )
