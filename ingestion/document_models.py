from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple, Union


@dataclass(frozen=True)
class SourceText:
    name: str  # file name, also the registry key
    text: str  # extracted plain text
    metadata: Dict[str, Any] = field(default_factory=dict)  # {"type": "pdf|docx|text", ...}
    content_sha1: str = ""


@dataclass(frozen=True)
class CoreEntry:
    """Reference corpus that always grounds generation. Cannot be deselected or removed."""

    name: str
    units: Tuple[str, ...]

    @property
    def selected(self) -> bool:
        return True

    @property
    def is_core(self) -> bool:
        return True


@dataclass(frozen=True)
class UserEntry:
    name: str
    units: Tuple[str, ...]
    selected: bool = True

    @property
    def is_core(self) -> bool:
        return False

    def toggled(self) -> "UserEntry":
        return replace(self, selected=not self.selected)


CorpusEntry = Union[CoreEntry, UserEntry]
