# kanadle/models.py
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from .evaluate import GuessResult
from .word_id import generate_word_id, is_valid_word_id

# stored words may use any hiragana, not only the playable subset
_HIRAGANA_5 = re.compile(r"[ぁ-ゖ]{5}")


class WordEntry(BaseModel):
    kana: str          # 5 hiragana, what players type
    word: str          # kanji/katakana display form


class WordMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    difficulty: Optional[Literal["easy", "medium", "hard"]] = None
    category: Optional[str] = None
    source: Optional[str] = None


class WordEntity(BaseModel):
    """A dictionary word as stored under `word:<id>`."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    word: str
    created_at: datetime = Field(alias="createdAt")
    is_active: StrictBool = Field(alias="isActive")
    metadata: Optional[WordMetadata] = None

    @field_validator("id")
    @classmethod
    def _check_id(cls, v: str) -> str:
        if not is_valid_word_id(v):
            raise ValueError("id must be 8 alphanumeric characters")
        return v

    @field_validator("word")
    @classmethod
    def _check_word(cls, v: str) -> str:
        if not _HIRAGANA_5.fullmatch(v):
            raise ValueError("word must be 5 hiragana characters")
        return v

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class WordMasterEntry(WordEntity):
    """WordEntity plus daily-assignment bookkeeping (hash `word_master_entries`)."""

    added_to_master: datetime = Field(alias="addedToMaster")
    last_assigned: Optional[datetime] = Field(default=None, alias="lastAssigned")
    assignment_count: int = Field(default=0, alias="assignmentCount", ge=0)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_word_entity(word: str, metadata: Optional[Dict[str, Any]] = None) -> WordEntity:
    return WordEntity(
        id=generate_word_id(),
        word=word,
        created_at=utcnow(),
        is_active=True,
        metadata=WordMetadata(**metadata) if metadata else None,
    )


def is_valid_word_entity(obj: Any) -> bool:
    if isinstance(obj, WordEntity):
        return True
    if not isinstance(obj, dict):
        return False
    try:
        WordEntity.model_validate(obj)
    except ValidationError:
        return False
    return True


def validate_word_entity(obj: Any) -> WordEntity:
    if not is_valid_word_entity(obj):
        raise ValueError(
            "Invalid word entity: must have valid id, word, createdAt, and isActive fields"
        )
    return obj if isinstance(obj, WordEntity) else WordEntity.model_validate(obj)


# ───────── service results ─────────
class GuessSuccess(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    result: GuessResult
    is_win: bool = Field(alias="isWin")


class GuessFailure(BaseModel):
    success: Literal[False] = False
    error: str


class WordSyncResult(BaseModel):
    success: bool = True
    processed: int = 0
    added: int = 0
    skipped: int = 0
    errors: List[str] = []


class FullSyncResult(BaseModel):
    success: bool
    loaded: int
    sync: WordSyncResult
    error: Optional[str] = None
