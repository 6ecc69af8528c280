"""
Word-level diff between two versions of a document section.

Both texts are tokenized into words and the whitespace runs between them, the
longest common subsequence of the two token lists is computed, and every token
outside it is wrapped in an insertion marker (candidate side) or a deletion
marker (reference side). Joining the tokens of either output without markers
gives back the original text, spacing included.
"""
from __future__ import annotations

import re
from array import array
from typing import Dict, Iterable, List, Literal, Mapping, Sequence

from common.config import yaml_config
from common.errors import DiffTooLargeError
from common.logger import get_logger
from history.models import DocumentSnapshot, SectionDiff, WordDiff
from history.snapshot_store import SnapshotStore

log = get_logger(__name__)

INS_OPEN, INS_CLOSE = "<ins>", "</ins>"
DEL_OPEN, DEL_CLOSE = "<del>", "</del>"

_TOKEN_SPLIT = re.compile(r"(\s+)")
_MARKERS = re.compile(r"</?(?:ins|del)>")
_MARKED = {
    "ins": re.compile(r"<ins>(.*?)</ins>", re.DOTALL),
    "del": re.compile(r"<del>(.*?)</del>", re.DOTALL),
}


def tokenize(text: str) -> List[str]:
    """Words and the whitespace runs between them, in order."""
    return [t for t in _TOKEN_SPLIT.split(text) if t]


def diff_words(
    reference: str, candidate: str, max_table_cells: int | None = None
) -> WordDiff:
    """
    Annotate ``reference`` with deletions and ``candidate`` with insertions.

    When a token could be reported either way, the candidate side is consumed
    first, so insertions are placed before deletions at the same position.
    Raises DiffTooLargeError when the LCS table would exceed ``max_table_cells``.
    """
    limit = max_table_cells or yaml_config.diff.max_table_cells
    ref, cand = tokenize(reference), tokenize(candidate)

    # a shared tail is always matched first by the backtrack, keep it out of the table
    k = 0
    while k < len(ref) and k < len(cand) and ref[-1 - k] == cand[-1 - k]:
        k += 1
    tail = ref[len(ref) - k :]
    a, b = ref[: len(ref) - k], cand[: len(cand) - k]

    table = _lcs_table(a, b, limit)
    ref_out, cand_out = _backtrack(a, b, table)
    ref_out.extend(tail)
    cand_out.extend(tail)
    return WordDiff(
        reference_annotated="".join(ref_out),
        candidate_annotated="".join(cand_out),
    )


def _lcs_table(a: Sequence[str], b: Sequence[str], limit: int) -> array:
    """
    Flat (len(a)+1) x (len(b)+1) table; cell i*(len(b)+1)+j holds the LCS length
    of a[:i] and b[:j].
    """
    n, m = len(a), len(b)
    cells = (n + 1) * (m + 1)
    if cells > limit:
        raise DiffTooLargeError(cells, limit)

    width = m + 1
    table = array("i", [0]) * cells
    for i in range(1, n + 1):
        ai = a[i - 1]
        row = i * width
        prev = row - width
        for j in range(1, width):
            if ai == b[j - 1]:
                table[row + j] = table[prev + j - 1] + 1
            else:
                up = table[prev + j]
                left = table[row + j - 1]
                table[row + j] = up if up > left else left
    return table


def _backtrack(a: Sequence[str], b: Sequence[str], table: array):
    width = len(b) + 1
    i, j = len(a), len(b)
    ref_out: List[str] = []
    cand_out: List[str] = []
    while i > 0 or j > 0:
        if i > 0 and j > 0 and a[i - 1] == b[j - 1]:
            ref_out.append(a[i - 1])
            cand_out.append(b[j - 1])
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i * width + j - 1] >= table[(i - 1) * width + j]):
            cand_out.append(f"{INS_OPEN}{b[j - 1]}{INS_CLOSE}")
            j -= 1
        else:
            ref_out.append(f"{DEL_OPEN}{a[i - 1]}{DEL_CLOSE}")
            i -= 1
    ref_out.reverse()
    cand_out.reverse()
    return ref_out, cand_out


def strip_markers(annotated: str) -> str:
    return _MARKERS.sub("", annotated)


def marked_tokens(annotated: str, kind: Literal["ins", "del"]) -> List[str]:
    """Tokens wrapped in insertion ("ins") or deletion ("del") markers, in order."""
    return _MARKED[kind].findall(annotated)


# --------------------
# Section-level comparison
# --------------------
def compare_sections(
    reference: Mapping[str, str],
    candidate: Mapping[str, str],
    section_ids: Iterable[str],
) -> Dict[str, SectionDiff]:
    """
    Per-section report for a fixed list of section ids.
    A section missing from either side counts as empty text.
    """
    report: Dict[str, SectionDiff] = {}
    for sid in section_ids:
        ref_text = reference.get(sid) or ""
        cand_text = candidate.get(sid) or ""
        if ref_text == cand_text:
            report[sid] = SectionDiff(same=True, content=cand_text)
            continue
        wd = diff_words(ref_text, cand_text)
        report[sid] = SectionDiff(
            same=False,
            reference_annotated=wd.reference_annotated,
            candidate_annotated=wd.candidate_annotated,
        )
    return report


def compare_snapshots(
    reference: DocumentSnapshot,
    candidate: DocumentSnapshot,
    section_ids: Iterable[str],
) -> Dict[str, SectionDiff]:
    return compare_sections(
        reference.section_values, candidate.section_values, section_ids
    )


def compare_versions(
    store: SnapshotStore,
    document_id: str | int,
    section_ids: Iterable[str],
    candidate_index: int = 0,
    reference_index: int = 1,
) -> Dict[str, SectionDiff]:
    """
    Compare two versions from a document's history (0 is the latest).
    By default the latest version is shown against the one before it.
    """
    candidate = store.snapshot(document_id, candidate_index)
    reference = store.snapshot(document_id, reference_index)
    report = compare_snapshots(reference, candidate, section_ids)
    changed = sum(1 for d in report.values() if not d.same)
    log.info(
        "Document %s: v%d vs v%d, %d of %d sections changed",
        document_id,
        reference_index,
        candidate_index,
        changed,
        len(report),
    )
    return report
