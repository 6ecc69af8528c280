import re

_WS_RUN = re.compile(r"\s\s+")


def normalize_whitespace(s: str) -> str:
    """Collapse runs of two or more whitespace characters into one space and trim."""
    return _WS_RUN.sub(" ", s).strip()
