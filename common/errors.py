from __future__ import annotations


class ContentLayerError(Exception):
    """Base class for errors raised by the corpus, history and diff components."""


class DuplicateNameError(ContentLayerError):
    def __init__(self, name: str):
        super().__init__(f"An entry named '{name}' already exists")
        self.name = name


class ProtectedEntryError(ContentLayerError):
    def __init__(self, name: str, operation: str):
        super().__init__(f"Cannot {operation} core entry '{name}'")
        self.name = name
        self.operation = operation


class EntryNotFoundError(ContentLayerError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"No entry named '{name}'")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class ExtractionError(ContentLayerError):
    """Raised when a source file cannot be turned into plain text."""

    def __init__(self, file_name: str, reason: str = ""):
        msg = f"Could not read file {file_name}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.file_name = file_name
        self.reason = reason


class UnsupportedFormatError(ExtractionError):
    def __init__(self, file_name: str):
        super().__init__(file_name, "unsupported file format")


class DiffTooLargeError(ContentLayerError):
    def __init__(self, cells: int, limit: int):
        super().__init__(
            f"Diff table would need {cells} cells, above the limit of {limit}"
        )
        self.cells = cells
        self.limit = limit


class VersionNotFoundError(ContentLayerError, IndexError):
    def __init__(self, document_id: str, index: int):
        super().__init__(f"Document '{document_id}' has no version at index {index}")
        self.document_id = document_id
        self.index = index
