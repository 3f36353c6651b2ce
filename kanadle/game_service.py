# kanadle/game_service.py
from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from .daily_word import get_daily_word
from .evaluate import evaluate_guess, is_winning_result
from .game_state import MAX_ATTEMPTS
from .models import GuessFailure, GuessSuccess, WordEntry
from .schema import DailyGameState
from .validate import validate_word
from .word_master import WordMaster

NOT_IN_DICTIONARY = "辞書に存在しない単語です"
GENERIC_ERROR = "エラーが発生しました"

log = logging.getLogger(__name__)

GuessOutcome = Union[GuessSuccess, GuessFailure]


async def submit_guess(
    guess: str,
    game_date: str,
    dictionary: Iterable[WordEntry],
    word_master: Optional[WordMaster] = None,
) -> GuessOutcome:
    """Validate, look up the day's target, score. Never raises."""
    try:
        if not validate_word(guess, dictionary):
            return GuessFailure(error=NOT_IN_DICTIONARY)

        target = await get_daily_word(game_date, word_master)
        result = evaluate_guess(guess, target)
        return GuessSuccess(result=result, is_win=is_winning_result(result))

    except Exception:
        log.exception("submit_guess failed (date=%s)", game_date)
        return GuessFailure(error=GENERIC_ERROR)


async def get_daily_game_state(game_date: str, word_master: Optional[WordMaster] = None) -> DailyGameState:
    # resolving the word up front warms the daily cache for the guesses to come
    await get_daily_word(game_date, word_master)
    return DailyGameState(
        game_date=game_date,
        is_active=True,
        current_attempt=0,
        max_attempts=MAX_ATTEMPTS,
    )
