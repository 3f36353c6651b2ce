from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from .evaluate import GuessResult


class DailyGameState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_date: str = Field(alias="gameDate")
    is_active: bool = Field(True, alias="isActive")
    current_attempt: int = Field(0, alias="currentAttempt")
    max_attempts: int = Field(8, alias="maxAttempts")


class GuessIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guess: Optional[StrictStr] = None
    game_date: Optional[StrictStr] = Field(None, alias="gameDate")


class GuessOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: GuessResult
    game_status: Literal["won", "playing"] = Field(alias="gameStatus")
    attempt_count: int = Field(0, alias="attemptCount")


class ErrorOut(BaseModel):
    error: str
