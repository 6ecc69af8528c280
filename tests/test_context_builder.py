import logging

from common.config import yaml_config
from ingestion.document_models import CoreEntry, UserEntry
from retrieval.context_builder import build_context, build_rag_instruction
from retrieval.prompts import SUPPORT_DOCS_END, SUPPORT_DOCS_START


def test_no_selected_entries_gives_empty_string():
    assert build_context([]) == ""
    assert build_context([UserEntry("a.txt", ("aaa",), selected=False)]) == ""
    assert build_rag_instruction([]) == ""


def test_single_entry_block():
    ctx = build_context([CoreEntry("Lei", ("Art. 1º. A.", "Art. 2º. B."))])
    assert ctx == (
        "--- INÍCIO DOS DOCUMENTOS DE APOIO ---\n"
        'Contexto do ficheiro "Lei":\n'
        "Art. 1º. A.\n\nArt. 2º. B.\n"
        "--- FIM DOS DOCUMENTOS DE APOIO ---"
    )


def test_only_selected_entries_in_order_with_separator():
    entries = [
        CoreEntry("Lei", ("lei",)),
        UserEntry("skip.pdf", ("nope",), selected=False),
        UserEntry("edital.pdf", ("p1", "p2")),
    ]
    ctx = build_context(entries)

    assert ctx.startswith(SUPPORT_DOCS_START)
    assert ctx.endswith(SUPPORT_DOCS_END)
    assert "skip.pdf" not in ctx
    assert (
        'Contexto do ficheiro "Lei":\nlei\n\n---\n\n'
        'Contexto do ficheiro "edital.pdf":\np1\n\np2'
    ) in ctx
    assert build_context(entries) == ctx


def test_braces_in_units_are_kept_verbatim():
    ctx = build_context([UserEntry("x.txt", ("valor {total} em R$",))])
    assert "valor {total} em R$" in ctx


def test_rag_instruction_wraps_context():
    entries = [UserEntry("edital.pdf", ("p1",))]
    text = build_rag_instruction(entries)
    assert text.startswith("\n\nAdicionalmente, utilize o conteúdo")
    assert text.endswith(build_context(entries))


def test_large_context_is_not_truncated(monkeypatch, caplog):
    monkeypatch.setattr(yaml_config.context, "warn_chars", 50)
    unit = "x" * 200
    logger = logging.getLogger("retrieval.context_builder")
    monkeypatch.setattr(logger, "propagate", True)
    with caplog.at_level(logging.WARNING, logger="retrieval.context_builder"):
        ctx = build_context([UserEntry("big.txt", (unit,))])
    assert unit in ctx
    assert "warn threshold" in caplog.text
