# kanadle/word_master.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import ValidationError
from redis.asyncio import Redis

from .kv import get_client, try_with_fallback
from .models import WordEntity, WordMasterEntry, utcnow, validate_word_entity
from .word_id import validate_word_id

log = logging.getLogger(__name__)


class WordMaster:
    """
    CRUD over the word master data in the key-value store.

    `word:<id>` holds the serialized WordEntity; the `word_master_entries`
    hash holds one WordMasterEntry per id. The `word_kana` hash maps each
    kana to the id that claimed it. Backend failures never escape:
    each call falls back to False / None / [] / 0. Malformed ids or
    entities raise ValueError before anything is sent to the backend.
    """

    WORD_KEY_PREFIX = "word:"
    MASTER_ENTRIES_KEY = "word_master_entries"
    KANA_INDEX_KEY = "word_kana"

    def __init__(self, client: Optional[Redis] = None):
        self._client = client

    @property
    def redis(self) -> Redis:
        return self._client if self._client is not None else get_client()

    def _word_key(self, word_id: str) -> str:
        return f"{self.WORD_KEY_PREFIX}{word_id}"

    async def _scan_word_keys(self) -> List[str]:
        return [k async for k in self.redis.scan_iter(match=f"{self.WORD_KEY_PREFIX}*")]

    async def add_word(self, word_entity: Any) -> bool:
        entity = validate_word_entity(word_entity)

        async def _add() -> bool:
            key = self._word_key(entity.id)
            if await self.redis.exists(key):
                return False
            master = WordMasterEntry(
                **entity.model_dump(),
                added_to_master=utcnow(),
                last_assigned=None,
                assignment_count=0,
            )
            await self.redis.set(key, entity.to_json())
            await self.redis.hset(self.MASTER_ENTRIES_KEY, entity.id, master.to_json())
            return True

        return await try_with_fallback(_add, False)

    async def get_word(self, word_id: str) -> Optional[WordEntity]:
        validate_word_id(word_id)

        async def _get() -> Optional[WordEntity]:
            raw = await self.redis.get(self._word_key(word_id))
            if not raw:
                return None
            try:
                return WordEntity.model_validate_json(raw)
            except ValidationError:
                log.warning("discarding malformed word entity %s", word_id)
                return None

        return await try_with_fallback(_get, None)

    async def remove_word(self, word_id: str) -> bool:
        validate_word_id(word_id)

        async def _remove() -> bool:
            key = self._word_key(word_id)
            raw = await self.redis.get(key)
            deleted = await self.redis.delete(key)
            if not deleted:
                return False
            await self.redis.hdel(self.MASTER_ENTRIES_KEY, word_id)
            if raw:
                try:
                    kana = WordEntity.model_validate_json(raw).word
                except ValidationError:
                    kana = None
                if kana and await self.redis.hget(self.KANA_INDEX_KEY, kana) == word_id:
                    await self.redis.hdel(self.KANA_INDEX_KEY, kana)
            return True

        return await try_with_fallback(_remove, False)

    async def claim_kana(self, kana: str, word_id: str) -> bool:
        """Atomically reserve `kana` for `word_id`; False if another id holds it."""
        validate_word_id(word_id)

        async def _claim() -> bool:
            return bool(await self.redis.hsetnx(self.KANA_INDEX_KEY, kana, word_id))

        return await try_with_fallback(_claim, False)

    async def release_kana(self, kana: str, word_id: str) -> bool:
        validate_word_id(word_id)

        async def _release() -> bool:
            if await self.redis.hget(self.KANA_INDEX_KEY, kana) != word_id:
                return False
            return bool(await self.redis.hdel(self.KANA_INDEX_KEY, kana))

        return await try_with_fallback(_release, False)

    async def get_all_words(self) -> List[WordEntity]:
        async def _all() -> List[WordEntity]:
            keys = await self._scan_word_keys()
            if not keys:
                return []
            words: List[WordEntity] = []
            for raw in await self.redis.mget(keys):
                if not raw:
                    continue
                try:
                    words.append(WordEntity.model_validate_json(raw))
                except ValidationError:
                    continue
            words.sort(key=lambda w: w.created_at)
            return words

        return await try_with_fallback(_all, [])

    async def get_active_words(self) -> List[WordEntity]:
        return [w for w in await self.get_all_words() if w.is_active]

    async def get_word_count(self) -> int:
        async def _count() -> int:
            return len(await self._scan_word_keys())

        return await try_with_fallback(_count, 0)

    async def _load_master_entry(self, word_id: str) -> Optional[WordMasterEntry]:
        raw = await self.redis.hget(self.MASTER_ENTRIES_KEY, word_id)
        if not raw:
            return None
        try:
            return WordMasterEntry.model_validate_json(raw)
        except ValidationError:
            return None

    async def get_master_entry(self, word_id: str) -> Optional[WordMasterEntry]:
        validate_word_id(word_id)
        return await try_with_fallback(lambda: self._load_master_entry(word_id), None)

    async def update_assignment_count(self, word_id: str) -> bool:
        validate_word_id(word_id)

        async def _bump() -> bool:
            entry = await self._load_master_entry(word_id)
            if entry is None:
                return False
            updated = entry.model_copy(update={
                "last_assigned": utcnow(),
                "assignment_count": entry.assignment_count + 1,
            })
            await self.redis.hset(self.MASTER_ENTRIES_KEY, word_id, updated.to_json())
            return True

        return await try_with_fallback(_bump, False)
