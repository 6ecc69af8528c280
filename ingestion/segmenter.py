from __future__ import annotations

import re
from typing import List

from common.config import yaml_config
from ingestion.cleaners import normalize_whitespace

# "Art. 5º." / "Art. 12" / "Art. 3."; the capture group keeps headers in the split
ARTICLE_MARKER = re.compile(r"(Art\.\s\d+º?\.?)")
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def segment(
    text: str,
    min_unit_chars: int | None = None,
    article_fragment_threshold: int | None = None,
) -> List[str]:
    """
    Split raw text into retrieval units.

    Legal texts with at least two article headers yield one unit per article.
    Anything else falls back to blank-line separated paragraphs of the original
    (non-normalized) text; text without any blank line yields nothing. Units
    of ``min_unit_chars`` characters or fewer are dropped, so a result may be
    empty.
    """
    if min_unit_chars is None:
        min_unit_chars = yaml_config.segmentation.min_unit_chars
    if article_fragment_threshold is None:
        article_fragment_threshold = yaml_config.segmentation.article_fragment_threshold

    articles = _article_units(normalize_whitespace(text), article_fragment_threshold)
    if articles is not None:
        return [a for a in articles if len(a) > min_unit_chars]

    # without a blank line there is no paragraph structure to fall back on
    if not PARAGRAPH_BREAK.search(text):
        return []
    return [p for p in PARAGRAPH_BREAK.split(text) if len(p.strip()) > min_unit_chars]


def _article_units(normalized: str, threshold: int) -> List[str] | None:
    # drop whatever precedes the first header
    fragments = ARTICLE_MARKER.split(normalized)[1:]
    if len(fragments) <= threshold:
        return None

    units: List[str] = []
    for i in range(0, len(fragments), 2):
        header = fragments[i]
        body = fragments[i + 1] if i + 1 < len(fragments) else ""
        units.append((header + body).strip())
    return units
