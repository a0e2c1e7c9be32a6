from __future__ import annotations

import re
import unicodedata

_TRAILING_ZERO = re.compile(r"\.0$")


def normalize(text: str | None) -> str:
    """Upper-case, trim and collapse whitespace for rule matching."""

    normalized = unicodedata.normalize("NFKC", text or "").strip().upper()
    return " ".join(normalized.split())


def clean_number(value: object) -> str:
    """Render an account number the way the spreadsheet showed it (``1000.0`` -> ``1000``)."""

    if value is None:
        return ""
    return _TRAILING_ZERO.sub("", str(value).strip())


def clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
