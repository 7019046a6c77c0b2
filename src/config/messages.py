"""
Validation message catalog, keyed by locale.

Reasons are appended to the quoted field name; the optional hint is appended
to the whole message when the failing field may be omitted by the caller.
"""
from __future__ import annotations

from typing import Dict

from .settings import MESSAGE_LOCALE

DEFAULT_LOCALE = "en"

CATALOG: Dict[str, Dict[str, str]] = {
    "en": {
        "required": "is required",
        "choice": "must be one of [{choices}]",
        "number": "must be a number",
        "boolean": "must be a boolean",
        "object": "must be of type object",
        "unknown": "is not allowed",
        "invalid": "is invalid",
        "optional_hint": (
            ". You may continue without this value; the system will estimate it "
            "from the other data you provide."
        ),
    },
    "id": {
        "required": "wajib diisi",
        "choice": "harus salah satu dari [{choices}]",
        "number": "harus berupa angka",
        "boolean": "harus berupa boolean",
        "object": "harus berupa objek",
        "unknown": "tidak diizinkan",
        "invalid": "tidak valid",
        "optional_hint": (
            ". Anda dapat melanjutkan tanpa mengisi nilai ini, sistem akan memberikan "
            "estimasi berdasarkan data lain yang Anda berikan."
        ),
    },
}


def message(key: str, locale: str | None = None, **kwargs) -> str:
    table = CATALOG.get(locale or MESSAGE_LOCALE) or CATALOG[DEFAULT_LOCALE]
    text = table.get(key, CATALOG[DEFAULT_LOCALE][key])
    return text.format(**kwargs) if kwargs else text
