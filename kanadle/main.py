# kanadle/main.py
from __future__ import annotations

import logging
import os
import re
import secrets
from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .daily_word import today_key
from .dictionary import get_dictionary
from .game_service import get_daily_game_state, submit_guess
from .kv import get_client, ping, try_with_fallback
from .models import WordEntry
from .schema import DailyGameState, ErrorOut, GuessIn, GuessOut
from .word_master import WordMaster
from .word_sync import WordSync

# ───────── Config ─────────
SYNC_WORDS_ON_STARTUP = os.getenv("SYNC_WORDS_ON_STARTUP", "1") not in ("0", "false", "no")

_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

# user-facing messages
MSG_BAD_DATE = "無効な日付形式です"
MSG_GUESS_REQUIRED = "推測する単語が必要です"
MSG_DATE_REQUIRED = "ゲーム日付が必要です"
MSG_BAD_REQUEST = "リクエストが不正です"
MSG_SERVER_ERROR = "サーバーエラーが発生しました"

ERROR_RESPONSES = {400: {"model": ErrorOut}, 500: {"model": ErrorOut}}

log = logging.getLogger(__name__)

# ───────── App ─────────
app = FastAPI(title="Kanadle API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],      # tighten before launch
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ───────── Error shape: {"error": "..."} ─────────
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = {str(part) for err in exc.errors() for part in err.get("loc", ())}
    if "guess" in fields:
        message = MSG_GUESS_REQUIRED
    elif "gameDate" in fields:
        message = MSG_DATE_REQUIRED
    else:
        message = MSG_BAD_REQUEST
    return JSONResponse(status_code=400, content={"error": message})


# ───────── Dependencies ─────────
def get_word_master() -> WordMaster:
    return WordMaster()


def get_word_list() -> Tuple[WordEntry, ...]:
    return get_dictionary()


def _check_date(value: str) -> str:
    if not _DATE.fullmatch(value):
        raise HTTPException(status_code=400, detail=MSG_BAD_DATE)
    return value


# ───────── Lifecycle ─────────
@app.on_event("startup")
async def on_startup():
    if not await try_with_fallback(ping, False):
        log.warning("key-value store unreachable at startup; daily word will use the fallback")
        return
    if SYNC_WORDS_ON_STARTUP:
        word_master = WordMaster()
        if await word_master.get_word_count() == 0:
            await WordSync(word_master).perform_full_sync()


@app.get("/healthz")
async def healthz():
    return {"ok": True}


# ───────── /api/game/daily ─────────
@app.get("/api/game/daily", response_model=DailyGameState, responses=ERROR_RESPONSES)
async def daily_game(
    date: Optional[str] = Query(None, description="YYYY-MM-DD; defaults to today"),
    word_master: WordMaster = Depends(get_word_master),
):
    game_date = _check_date(date or today_key())
    try:
        return await get_daily_game_state(game_date, word_master)
    except Exception:
        log.exception("error in /api/game/daily")
        raise HTTPException(status_code=500, detail=MSG_SERVER_ERROR)


# ───────── /api/game/guess ─────────
@app.post("/api/game/guess", response_model=GuessOut, responses=ERROR_RESPONSES)
async def guess(
    body: GuessIn,
    word_master: WordMaster = Depends(get_word_master),
    word_list: Tuple[WordEntry, ...] = Depends(get_word_list),
):
    if not body.guess:
        raise HTTPException(status_code=400, detail=MSG_GUESS_REQUIRED)
    if not body.game_date:
        raise HTTPException(status_code=400, detail=MSG_DATE_REQUIRED)
    game_date = _check_date(body.game_date)

    try:
        outcome = await submit_guess(body.guess, game_date, word_list, word_master)
    except Exception:
        log.exception("error in /api/game/guess")
        raise HTTPException(status_code=500, detail=MSG_SERVER_ERROR)

    if not outcome.success:
        raise HTTPException(status_code=400, detail=outcome.error)

    # no per-player state on the server yet
    return GuessOut(
        result=outcome.result,
        game_status="won" if outcome.is_win else "playing",
        attempt_count=0,
    )


# ───────── /api/kv-health ─────────
@app.get("/api/kv-health")
async def kv_health():
    test_key = f"health_check_{secrets.token_hex(4)}"
    test_value = "kv connection test"
    try:
        client = get_client()
        await try_with_fallback(lambda: client.set(test_key, test_value, ex=60), None)
        got = await try_with_fallback(lambda: client.get(test_key), None)
        await try_with_fallback(lambda: client.delete(test_key), None)
        pong = await try_with_fallback(ping, False)
    except Exception as e:
        log.exception("kv health check failed")
        return JSONResponse(status_code=500, content={
            "status": "error",
            "message": "kv connection test failed",
            "error": type(e).__name__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    return {
        "status": "success" if pong and got == test_value else "degraded",
        "tests": {"ping": pong, "setGet": got == test_value},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
