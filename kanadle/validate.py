# kanadle/validate.py
from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import WordEntry

WORD_LENGTH = 5

# あ..わ plus ん; ゐ (U+3090), ゑ (U+3091) and を (U+3092) are not playable
_PLAYABLE_KANA = re.compile(r"[あ-わん]+")


def is_playable_kana(word: str) -> bool:
    return bool(_PLAYABLE_KANA.fullmatch(word)) and "を" not in word


def validate_word(word: Optional[str], dictionary: Optional[Iterable[WordEntry]]) -> bool:
    """True if `word` is a 5-kana playable word listed in `dictionary`."""
    if not word or not isinstance(word, str) or dictionary is None:
        return False
    if len(word) != WORD_LENGTH:
        return False
    if not is_playable_kana(word):
        return False
    return any(entry.kana == word for entry in dictionary)
