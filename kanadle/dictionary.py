# kanadle/dictionary.py
from __future__ import annotations

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from .models import WordEntry

WORDS_FILE = Path(os.getenv("WORDS_FILE") or Path(__file__).parent / "data" / "words.json")

_HIRAGANA = re.compile(r"[ぁ-ゖ]{5}")

log = logging.getLogger(__name__)


def is_valid_word_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    kana, word = entry.get("kana"), entry.get("word")
    if not isinstance(kana, str) or not isinstance(word, str):
        return False
    return bool(_HIRAGANA.fullmatch(kana)) and "を" not in kana


def load_words(path: Optional[Union[str, Path]] = None) -> List[WordEntry]:
    """Read the bundled word list; unreadable files give an empty list."""
    path = Path(path or WORDS_FILE)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.error("failed to load words from %s: %s", path, e)
        return []

    if not isinstance(raw, list):
        log.warning("%s does not contain a list", path)
        return []

    entries = [WordEntry(kana=e["kana"], word=e["word"]) for e in raw if is_valid_word_entry(e)]
    if len(entries) < len(raw):
        log.warning("filtered out %d invalid entries from %s", len(raw) - len(entries), path)
    log.info("loaded %d valid words from %d entries", len(entries), len(raw))
    return entries


@lru_cache(maxsize=1)
def get_dictionary() -> Tuple[WordEntry, ...]:
    return tuple(load_words())
