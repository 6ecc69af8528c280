from __future__ import annotations

import argparse
from pathlib import Path

from common.config import yaml_config
from common.errors import ContentLayerError
from common.logger import get_logger
from ingestion.ingest_pipeline import bootstrap_core_corpus, ingest_files
from retrieval.context_builder import build_context
from retrieval.corpus_registry import CorpusRegistry
from storage.kv_store import JsonFileStore

log = get_logger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Add support documents (PDF/DOCX/TXT) to the corpus registry."
    )
    parser.add_argument("files", nargs="*", type=Path, help="Files to ingest")
    parser.add_argument(
        "--store_dir",
        type=Path,
        default=yaml_config.app.store_dir,
        help="Directory of the key-value store",
    )
    parser.add_argument(
        "--core_json",
        type=Path,
        default=None,
        help="Reference law JSON to install as the core entry",
    )
    parser.add_argument("--remove", nargs="*", default=[], help="Entry names to remove")
    parser.add_argument(
        "--toggle", nargs="*", default=[], help="Entry names to (de)select"
    )
    parser.add_argument(
        "--show_context", action="store_true", help="Print the assembled context"
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    args = parser.parse_args(argv)

    registry = CorpusRegistry(JsonFileStore(args.store_dir))
    if args.core_json or yaml_config.core_corpus.enabled:
        core_path = args.core_json or yaml_config.core_corpus.path
        if Path(core_path).exists():
            bootstrap_core_corpus(registry, path=core_path)

    failed = False
    for outcome in ingest_files(args.files, registry, show_progress=args.progress):
        if outcome.status == "success":
            print(f"[ok]    {outcome.name}: {outcome.units} units")
        else:
            failed = True
            print(f"[error] {outcome.name}: {outcome.message}")

    for name in args.remove:
        try:
            registry.remove_entry(name)
        except ContentLayerError as e:
            failed = True
            print(f"[error] {e}")
    for name in args.toggle:
        try:
            registry.toggle_selected(name)
        except ContentLayerError as e:
            failed = True
            print(f"[error] {e}")

    print("\n=== CORPUS ===\n")
    for e in registry.entries():
        flags = ("core" if e.is_core else "user") + (", selected" if e.selected else "")
        print(f"- {e.name} ({len(e.units)} units; {flags})")

    if args.show_context:
        print("\n=== CONTEXT ===\n")
        print(build_context(registry.entries()))

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
