from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class DocumentState:
    """What a save operation hands to the history: the current editable state."""

    name: str
    section_values: Mapping[str, str]
    attachments_fingerprint: str = ""


@dataclass(frozen=True)
class DocumentSnapshot:
    section_values: Mapping[str, str]
    summary: str  # what changed since the previous snapshot
    timestamp: datetime
    name: str = ""
    attachments_fingerprint: str = ""

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(
            self, "section_values", MappingProxyType(dict(self.section_values))
        )


@dataclass(frozen=True)
class WordDiff:
    reference_annotated: str
    candidate_annotated: str


@dataclass(frozen=True)
class SectionDiff:
    same: bool
    content: str = ""  # set when same
    reference_annotated: str = ""  # set when not same
    candidate_annotated: str = ""
