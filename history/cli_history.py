from __future__ import annotations

import argparse
from pathlib import Path

from common.config import yaml_config
from common.errors import ContentLayerError
from history.diff_engine import compare_versions
from history.snapshot_store import SnapshotStore
from storage.kv_store import JsonFileStore


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="List a document's versions and compare two of them."
    )
    parser.add_argument("document_id", type=str, nargs="?", help="Document id")
    parser.add_argument(
        "--store_dir", type=Path, default=yaml_config.app.store_dir
    )
    parser.add_argument(
        "--sections", nargs="*", default=None, help="Section ids to compare"
    )
    parser.add_argument("--a", type=int, default=0, help="Version shown (0 = latest)")
    parser.add_argument("--b", type=int, default=1, help="Version compared against")
    args = parser.parse_args(argv)

    snapshots = SnapshotStore(JsonFileStore(args.store_dir))
    if not args.document_id:
        for doc_id in snapshots.document_ids():
            print(f"- {doc_id} ({len(snapshots.history(doc_id))} versions)")
        return

    versions = snapshots.history(args.document_id)
    print("\n=== VERSIONS ===\n")
    for i, snap in enumerate(versions):
        print(f"[{i}] {snap.timestamp.isoformat()}  {snap.summary}")

    if len(versions) < 2:
        print("\nNot enough versions to compare.")
        return

    section_ids = args.sections
    if section_ids is None:
        # every section seen in either version, in first-seen order
        seen = dict.fromkeys(versions[min(args.b, len(versions) - 1)].section_values)
        seen.update(dict.fromkeys(versions[min(args.a, len(versions) - 1)].section_values))
        section_ids = list(seen)

    try:
        report = compare_versions(
            snapshots,
            args.document_id,
            section_ids,
            candidate_index=args.a,
            reference_index=args.b,
        )
    except ContentLayerError as e:
        print(f"[error] {e}")
        raise SystemExit(1)

    print(f"\n=== DIFF v{args.b} -> v{args.a} ===\n")
    for sid, diff in report.items():
        print(f"## {sid}")
        if diff.same:
            print("  (sem alterações)")
        else:
            print(f"  - {diff.reference_annotated}")
            print(f"  + {diff.candidate_annotated}")


if __name__ == "__main__":
    main()
