from __future__ import annotations

from typing import Iterable

from common.config import yaml_config
from common.logger import get_logger
from ingestion.document_models import CorpusEntry
from retrieval.prompts import (
    BLOCK_SEPARATOR,
    ENTRY_BLOCK_TEMPLATE,
    RAG_INSTRUCTION_TEMPLATE,
    SUPPORT_DOCS_TEMPLATE,
    UNIT_SEPARATOR,
)

log = get_logger(__name__)


def build_context(entries: Iterable[CorpusEntry]) -> str:
    """
    Assemble the support-documents block for a generation request.

    Only selected entries are used, in the given order. Returns "" when nothing
    is selected, meaning the block should be left out of the prompt entirely.
    The result is not truncated; bounding prompt size is up to the caller.
    """
    blocks = [
        ENTRY_BLOCK_TEMPLATE.format(name=e.name, units=UNIT_SEPARATOR.join(e.units))
        for e in entries
        if e.selected
    ]
    if not blocks:
        return ""

    context = SUPPORT_DOCS_TEMPLATE.format(blocks=BLOCK_SEPARATOR.join(blocks))
    if len(context) > yaml_config.context.warn_chars:
        log.warning(
            "Support context is %d chars (warn threshold %d) across %d entries",
            len(context),
            yaml_config.context.warn_chars,
            len(blocks),
        )
    return context


def build_rag_instruction(entries: Iterable[CorpusEntry]) -> str:
    """Context wrapped in the instruction that tells the model to use it; "" when empty."""
    context = build_context(entries)
    if not context:
        return ""
    return RAG_INSTRUCTION_TEMPLATE.format(context=context)
