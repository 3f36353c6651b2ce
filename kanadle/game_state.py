# kanadle/game_state.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .evaluate import CharacterResult, GuessResult, is_winning_result

MAX_ATTEMPTS = 8

GameStatus = Literal["playing", "won", "lost"]


class ClientGameState(BaseModel):
    """What the player's screen knows; never holds the target word."""

    model_config = ConfigDict(frozen=True)

    current_input: str = ""
    current_attempt: int = 0
    game_status: GameStatus = "playing"
    guesses: Tuple[str, ...] = ()
    guess_results: Tuple[GuessResult, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def is_over(self) -> bool:
        return self.game_status != "playing"


# ───────── actions ─────────
class UpdateInput(BaseModel):
    value: str


class ClearInput(BaseModel):
    pass


class AddGuess(BaseModel):
    guess: str
    result: GuessResult


class SetLoading(BaseModel):
    loading: bool


class SetError(BaseModel):
    message: str


class ClearError(BaseModel):
    pass


class ResetGame(BaseModel):
    pass


Action = Union[UpdateInput, ClearInput, AddGuess, SetLoading, SetError, ClearError, ResetGame]


def update_client_game_state(state: ClientGameState, guess: str, result: GuessResult) -> ClientGameState:
    if state.is_over:
        return state

    attempt = state.current_attempt + 1
    if is_winning_result(result):
        status: GameStatus = "won"
    elif attempt >= MAX_ATTEMPTS:
        status = "lost"
    else:
        status = "playing"

    return state.model_copy(update={
        "current_input": "",
        "current_attempt": attempt,
        "game_status": status,
        "guesses": state.guesses + (guess,),
        "guess_results": state.guess_results + (list(result),),
        "error": None,
    })


def reduce_game_state(state: ClientGameState, action: Action) -> ClientGameState:
    """Pure reducer; only AddGuess can move game_status."""
    if isinstance(action, AddGuess):
        return update_client_game_state(state, action.guess, action.result)
    if isinstance(action, ResetGame):
        return ClientGameState()
    if isinstance(action, UpdateInput):
        if state.is_over:
            return state
        return state.model_copy(update={"current_input": action.value, "error": None})
    if isinstance(action, ClearInput):
        if state.is_over:
            return state
        return state.model_copy(update={"current_input": ""})
    if isinstance(action, SetLoading):
        return state.model_copy(update={"is_loading": action.loading})
    if isinstance(action, SetError):
        return state.model_copy(update={"error": action.message})
    if isinstance(action, ClearError):
        return state.model_copy(update={"error": None})
    raise TypeError(f"unknown action: {action!r}")


# ───────── keyboard feedback ─────────
_RANK = {"absent": 0, "present": 1, "correct": 2}


def character_states(guesses: Sequence[str], guess_results: Sequence[GuessResult]) -> Dict[str, CharacterResult]:
    """Best state seen per kana: correct > present > absent."""
    states: Dict[str, CharacterResult] = {}
    for guess, result in zip(guesses, guess_results):
        for ch, r in zip(guess, result):
            seen = states.get(ch)
            if seen is None or _RANK[r] > _RANK[seen]:
                states[ch] = r
    return states


# ───────── server side ─────────
class ServerGameState(BaseModel):
    target_word: str              # secret
    game_date: str                # YYYY-MM-DD
    user_id: Optional[str] = None
    attempts: List[str] = []
    attempt_count: int = 0
    is_completed: bool = False
    completed_at: Optional[datetime] = None


def update_server_game_state(state: ServerGameState, guess: str, target_word: str) -> ServerGameState:
    if state.is_completed:
        return state

    count = state.attempt_count + 1
    completed = guess == target_word or count >= MAX_ATTEMPTS
    update = {
        "attempts": state.attempts + [guess],
        "attempt_count": count,
        "is_completed": completed,
    }
    if completed:
        update["completed_at"] = datetime.now(timezone.utc)
    return state.model_copy(update=update)
