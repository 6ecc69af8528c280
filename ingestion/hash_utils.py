import hashlib
from typing import Any, Mapping, Sequence

import orjson


def sha1_text(s: str) -> str:
    return hashlib.sha1(s.encode("utf-8")).hexdigest()


def sha1_bytes(b: bytes) -> str:
    return hashlib.sha1(b).hexdigest()


def fingerprint_attachments(attachments: Sequence[Mapping[str, Any]] | None) -> str:
    """
    Stable fingerprint of a document's attachment list.
    Order of the list matters, key order inside each attachment does not.
    """
    payload = orjson.dumps(list(attachments or []), option=orjson.OPT_SORT_KEYS)
    return sha1_bytes(payload)
