# kanadle/word_sync.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .dictionary import WORDS_FILE, load_words
from .kv import connect
from .models import FullSyncResult, WordEntry, WordSyncResult, create_word_entity
from .word_master import WordMaster

SYNC_METADATA = {"source": "words.json", "category": "dictionary"}

log = logging.getLogger(__name__)


class WordSync:
    """Copies the bundled dictionary into the word master store."""

    def __init__(self, word_master: WordMaster, words_file: Optional[Union[str, Path]] = None):
        self.word_master = word_master
        self.words_file = Path(words_file or WORDS_FILE)

    def load_words_from_json(self):
        return load_words(self.words_file)

    async def sync_words_to_master(self, words: Iterable[WordEntry]) -> WordSyncResult:
        result = WordSyncResult()

        # ids are random, so re-running a sync must skip by kana instead
        known = {w.word for w in await self.word_master.get_all_words()}

        for entry in words:
            result.processed += 1
            if entry.kana in known:
                result.skipped += 1
                continue
            try:
                entity = create_word_entity(entry.kana, SYNC_METADATA)
            except ValueError as e:
                msg = f"Failed to sync word '{entry.kana}': {e}"
                log.error(msg)
                result.errors.append(msg)
                continue

            # a concurrent sync may have claimed this kana since `known` was read
            if not await self.word_master.claim_kana(entity.word, entity.id):
                result.skipped += 1
                known.add(entry.kana)
                continue

            added = await self.word_master.add_word(entity)
            if not added:
                await self.word_master.release_kana(entity.word, entity.id)

            if added:
                result.added += 1
                known.add(entry.kana)
            else:
                result.skipped += 1

        result.success = not result.errors
        return result

    async def perform_full_sync(self) -> FullSyncResult:
        words = self.load_words_from_json()
        if not words:
            msg = "No valid words found in the file"
            return FullSyncResult(
                success=False,
                loaded=0,
                sync=WordSyncResult(success=False, errors=[msg]),
                error=msg,
            )

        sync = await self.sync_words_to_master(words)
        log.info("synced %s: %d added, %d skipped, %d errors",
                 self.words_file.name, sync.added, sync.skipped, len(sync.errors))
        return FullSyncResult(success=sync.success, loaded=len(words), sync=sync)


async def main():
    client = connect()
    try:
        result = await WordSync(WordMaster(client)).perform_full_sync()
    finally:
        await client.aclose()

    if not result.success:
        log.warning("[word_sync] incomplete: %s", result.error or result.sync.errors)
    else:
        log.info("[word_sync] DONE: %d words in file, %d added.", result.loaded, result.sync.added)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
