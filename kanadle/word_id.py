# kanadle/word_id.py
from __future__ import annotations

import re
import secrets
import string
from typing import Any

WORD_ID_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
WORD_ID_LENGTH = 8

_WORD_ID = re.compile(r"[0-9a-zA-Z]{%d}" % WORD_ID_LENGTH)


def generate_word_id() -> str:
    return "".join(secrets.choice(WORD_ID_ALPHABET) for _ in range(WORD_ID_LENGTH))


def is_valid_word_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_WORD_ID.fullmatch(value))


def validate_word_id(value: Any) -> str:
    if not is_valid_word_id(value):
        raise ValueError("Invalid word ID format: must be 8 alphanumeric characters")
    return value
