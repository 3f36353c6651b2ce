# kanadle/daily_word.py
from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Any, Optional

import pytz

from .kv import try_with_fallback
from .word_id import is_valid_word_id
from .word_master import WordMaster

# ───────── Config ─────────
GAME_TZ = pytz.timezone(os.getenv("GAME_TIMEZONE", "UTC"))
DEFAULT_WORD = "つきあかり"            # served whenever selection is impossible
DAILY_WORD_KEY_PREFIX = "daily_word:"

log = logging.getLogger(__name__)


def today_key() -> str:
    return datetime.now(GAME_TZ).strftime("%Y-%m-%d")


def format_date_key(day: Any) -> str:
    """YYYY-MM-DD in the game calendar; anything unusable means today."""
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(GAME_TZ)
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    if isinstance(day, str) and day.strip():
        try:
            parsed = datetime.fromisoformat(day.strip().replace("Z", "+00:00"))
        except ValueError:
            return today_key()
        return format_date_key(parsed)
    return today_key()


def create_date_seed(date_key: str) -> int:
    # h = h*31 + c, wrapped to a signed 32-bit int, then made positive
    h = 0
    for ch in date_key:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


async def get_daily_word(day: Any, word_master: Optional[WordMaster] = None) -> str:
    """
    Target word for `day`.

    1. `daily_word:<YYYY-MM-DD>` holds a word id -> resolve it.
    2. Missing (or dangling) -> pick active_words[seed % n] and cache its id.
    3. No words or any failure -> DEFAULT_WORD.
    """
    word_master = word_master or WordMaster()
    try:
        date_key = format_date_key(day)
        cache_key = f"{DAILY_WORD_KEY_PREFIX}{date_key}"

        cached_id = await try_with_fallback(lambda: word_master.redis.get(cache_key), None)
        if cached_id and is_valid_word_id(cached_id):
            entity = await word_master.get_word(cached_id)
            if entity:
                return entity.word
            log.warning("daily word %s points at missing word %s", date_key, cached_id)

        words = await word_master.get_active_words()
        if not words:
            return DEFAULT_WORD

        chosen = words[create_date_seed(date_key) % len(words)]

        # first writer wins on a fresh date; a dangling id is overwritten
        written = await try_with_fallback(
            lambda: word_master.redis.set(cache_key, chosen.id, nx=not cached_id),
            None,
        )
        if written:
            await word_master.update_assignment_count(chosen.id)
        return chosen.word

    except Exception:
        log.exception("daily word selection failed for %r", day)
        return DEFAULT_WORD
