from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Literal, Optional

from tqdm import tqdm

from common.config import yaml_config
from common.errors import DuplicateNameError, ExtractionError
from common.logger import get_logger
from ingestion.document_models import CoreEntry
from ingestion.loaders import extract_text, load_core_corpus_text
from ingestion.segmenter import segment
from retrieval.corpus_registry import CorpusRegistry

log = get_logger(__name__)

NO_USABLE_CONTENT = "no usable content could be extracted"


@dataclass(frozen=True)
class IngestOutcome:
    name: str
    status: Literal["success", "error"]
    message: str = ""
    units: int = 0


def ingest_files(
    paths: Iterable[Path],
    registry: CorpusRegistry,
    show_progress: bool = False,
) -> List[IngestOutcome]:
    """
    Extract, segment and register each file as a user entry.
    One bad file never stops the batch; each file gets its own outcome.
    """
    paths = [Path(p) for p in paths]
    iterator = tqdm(paths, desc="Ingesting files", unit="file") if show_progress else paths

    outcomes: List[IngestOutcome] = []
    for path in iterator:
        outcomes.append(_ingest_one(path, registry))

    ok = sum(1 for o in outcomes if o.status == "success")
    log.info("Ingested %d of %d files", ok, len(outcomes))
    return outcomes


def _ingest_one(path: Path, registry: CorpusRegistry) -> IngestOutcome:
    name = path.name
    if name in registry:
        log.warning("Skipping %s: name already registered", name)
        return IngestOutcome(name, "error", str(DuplicateNameError(name)))

    try:
        source = extract_text(path)
    except ExtractionError as e:
        return IngestOutcome(name, "error", str(e))

    units = segment(source.text)
    if not units:
        log.warning("No usable content in %s", name)
        return IngestOutcome(name, "error", NO_USABLE_CONTENT)

    try:
        registry.add_entry(name, units)
    except DuplicateNameError as e:
        return IngestOutcome(name, "error", str(e))
    return IngestOutcome(name, "success", units=len(units))


def bootstrap_core_corpus(
    registry: CorpusRegistry,
    path: Optional[Path] = None,
    name: Optional[str] = None,
) -> Optional[CoreEntry]:
    """
    Load the reference law into the registry as its core entry.
    On failure the registry keeps working with user entries only.
    """
    cfg = yaml_config.core_corpus
    path = Path(path or cfg.path)
    name = name or cfg.name
    try:
        units = segment(load_core_corpus_text(path))
    except ExtractionError as e:
        log.error("Could not load the reference corpus: %s", e)
        return None
    if not units:
        log.error("Reference corpus %s produced no units", path)
        return None
    try:
        return registry.install_core_entry(name, units)
    except DuplicateNameError as e:
        log.error("Could not install the reference corpus: %s", e)
        return None
