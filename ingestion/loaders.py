from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union

import orjson
from docx import Document as DocxDocument
from pypdf import PdfReader

from common.errors import ExtractionError, UnsupportedFormatError
from common.logger import get_logger
from ingestion.document_models import SourceText
from ingestion.hash_utils import sha1_text

log = get_logger(__name__)

SUPPORTED_EXTS = (".pdf", ".docx", ".txt")


def extract_text(path: Path) -> SourceText:
    """Extract plain text from a local .pdf, .docx or .txt file."""
    path = Path(path)
    _check_supported(path.name)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ExtractionError(path.name, str(e)) from e
    return extract_bytes(path.name, data)


def extract_bytes(file_name: str, data: bytes) -> SourceText:
    """Extract plain text from an uploaded file's raw bytes, dispatching on its name."""
    ext = _check_supported(file_name)
    try:
        if ext == ".pdf":
            text, kind = _pdf_text(BytesIO(data)), "pdf"
        elif ext == ".docx":
            text, kind = _docx_text(BytesIO(data)), "docx"
        else:
            text, kind = data.decode("utf-8", errors="replace"), "text"
    except Exception as e:
        log.error("Failed to extract %s: %s", file_name, e, exc_info=True)
        raise ExtractionError(file_name, str(e)) from e

    return SourceText(
        name=file_name,
        text=text,
        metadata={"source": file_name, "type": kind},
        content_sha1=sha1_text(text),
    )


def _check_supported(file_name: str) -> str:
    ext = Path(file_name).suffix.lower()
    if ext not in SUPPORTED_EXTS:
        log.warning("Unsupported file: %s", file_name)
        raise UnsupportedFormatError(file_name)
    return ext


def _pdf_text(stream: Union[BinaryIO, BytesIO]) -> str:
    reader = PdfReader(stream)
    return "".join((page.extract_text() or "") + "\n" for page in reader.pages)


def _docx_text(stream: Union[BinaryIO, BytesIO]) -> str:
    doc = DocxDocument(stream)
    return "\n".join(p.text for p in doc.paragraphs)


def load_core_corpus_text(path: Path) -> str:
    """
    Read the reference law JSON (a list of {"page": int, "content": str})
    and join the page contents with blank lines.
    """
    path = Path(path)
    try:
        pages = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        raise ExtractionError(path.name, str(e)) from e
    if not isinstance(pages, list):
        raise ExtractionError(path.name, "expected a list of pages")
    return "\n\n".join(str(p.get("content", "")) for p in pages if isinstance(p, dict))
