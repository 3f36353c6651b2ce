import json

import pytest

from conftest import make_entity
from kanadle.word_master import WordMaster


async def test_add_and_get_word(word_master):
    entity = make_entity("つきあかり")
    assert await word_master.add_word(entity) is True

    got = await word_master.get_word(entity.id)
    assert got == entity


async def test_add_word_creates_zeroed_master_entry(word_master):
    entity = make_entity("はなみずき")
    await word_master.add_word(entity)

    master = await word_master.get_master_entry(entity.id)
    assert master.word == "はなみずき"
    assert master.assignment_count == 0
    assert master.last_assigned is None
    assert master.added_to_master is not None


async def test_add_word_rejects_existing_id(word_master):
    first = make_entity("つきあかり", word_id="same1234")
    second = make_entity("はなみずき", word_id="same1234")
    assert await word_master.add_word(first)
    assert await word_master.add_word(second) is False
    assert (await word_master.get_word("same1234")).word == "つきあかり"


async def test_add_word_accepts_plain_dict(word_master):
    added = await word_master.add_word({
        "id": "dict1234",
        "word": "さくらもち",
        "createdAt": "2025-06-10T08:30:00Z",
        "isActive": True,
    })
    assert added
    assert (await word_master.get_word("dict1234")).word == "さくらもち"


async def test_add_word_bad_shape_raises_before_backend(down_master):
    with pytest.raises(ValueError, match="Invalid word entity"):
        await down_master.add_word({"id": "abc", "word": "つきあかり"})


async def test_get_word_missing(word_master):
    assert await word_master.get_word("nothere1") is None


async def test_get_word_malformed_data_is_absent(word_master, redis_client):
    await redis_client.set("word:broken12", "{not json")
    await redis_client.set("word:broken34", json.dumps({"id": "broken34", "word": "hello"}))
    assert await word_master.get_word("broken12") is None
    assert await word_master.get_word("broken34") is None


@pytest.mark.parametrize("bad_id", ["short", "invalid!", "", None])
async def test_malformed_id_raises_before_backend(down_master, bad_id):
    with pytest.raises(ValueError, match="Invalid word ID format"):
        await down_master.get_word(bad_id)
    with pytest.raises(ValueError):
        await down_master.remove_word(bad_id)
    with pytest.raises(ValueError):
        await down_master.get_master_entry(bad_id)
    with pytest.raises(ValueError):
        await down_master.update_assignment_count(bad_id)


async def test_remove_word(word_master, redis_client):
    entity = make_entity("つきあかり")
    await word_master.add_word(entity)

    assert await word_master.remove_word(entity.id) is True
    assert await word_master.get_word(entity.id) is None
    assert await word_master.get_master_entry(entity.id) is None
    assert await redis_client.hget(WordMaster.MASTER_ENTRIES_KEY, entity.id) is None


async def test_claim_kana_once(word_master):
    assert await word_master.claim_kana("つきあかり", "first123") is True
    assert await word_master.claim_kana("つきあかり", "other123") is False
    assert await word_master.release_kana("つきあかり", "other123") is False
    assert await word_master.release_kana("つきあかり", "first123") is True
    assert await word_master.claim_kana("つきあかり", "other123") is True


async def test_remove_word_releases_its_kana(word_master, redis_client):
    entity = make_entity("つきあかり")
    await word_master.claim_kana(entity.word, entity.id)
    await word_master.add_word(entity)

    assert await word_master.remove_word(entity.id) is True
    assert await redis_client.hget(WordMaster.KANA_INDEX_KEY, "つきあかり") is None


async def test_claim_kana_backend_down(down_master):
    assert await down_master.claim_kana("つきあかり", "first123") is False


async def test_remove_missing_word(word_master):
    assert await word_master.remove_word("nothere1") is False


async def test_get_all_words_sorted_and_skips_garbage(word_master, redis_client):
    late = make_entity("はなみずき", minutes=10)
    early = make_entity("つきあかり", minutes=0)
    middle = make_entity("さくらもち", minutes=5)
    for e in (late, early, middle):
        await word_master.add_word(e)
    await redis_client.set("word:garbage1", "not json at all")

    words = await word_master.get_all_words()
    assert [w.word for w in words] == ["つきあかり", "さくらもち", "はなみずき"]
    assert await word_master.get_word_count() == 4


async def test_get_all_words_empty(word_master):
    assert await word_master.get_all_words() == []
    assert await word_master.get_word_count() == 0


async def test_get_active_words(word_master):
    await word_master.add_word(make_entity("つきあかり", minutes=0))
    await word_master.add_word(make_entity("はなみずき", minutes=1, active=False))
    assert [w.word for w in await word_master.get_active_words()] == ["つきあかり"]


async def test_update_assignment_count(word_master):
    entity = make_entity("つきあかり")
    await word_master.add_word(entity)

    assert await word_master.update_assignment_count(entity.id)
    assert await word_master.update_assignment_count(entity.id)

    master = await word_master.get_master_entry(entity.id)
    assert master.assignment_count == 2
    assert master.last_assigned is not None


async def test_update_assignment_count_without_master_entry(word_master):
    assert await word_master.update_assignment_count("nothere1") is False


async def test_backend_failures_fall_back(down_master):
    entity = make_entity("つきあかり")
    assert await down_master.add_word(entity) is False
    assert await down_master.get_word(entity.id) is None
    assert await down_master.remove_word(entity.id) is False
    assert await down_master.get_all_words() == []
    assert await down_master.get_active_words() == []
    assert await down_master.get_word_count() == 0
    assert await down_master.get_master_entry(entity.id) is None
    assert await down_master.update_assignment_count(entity.id) is False


async def test_unconfigured_client_falls_back(monkeypatch):
    from kanadle import kv

    kv.reset_client()
    monkeypatch.setattr(kv, "REDIS_URL", None)
    word_master = WordMaster()
    assert await word_master.get_all_words() == []
    assert await word_master.get_word("abcd1234") is None
