# kanadle/evaluate.py
from __future__ import annotations

from collections import Counter
from typing import List, Literal

CharacterResult = Literal["correct", "present", "absent"]
GuessResult = List[CharacterResult]


def evaluate_guess(guess: str, target_word: str) -> GuessResult:
    """
    Score a guess against the target, Wordle style.

    Exact positions are marked first; remaining characters are marked
    'present' left to right while the target still has unmatched copies,
    so a character is never reported more often than it occurs.
    """
    remaining = Counter(target_word)
    result: GuessResult = ["absent"] * len(guess)

    # pass 1: exact positions
    for i, ch in enumerate(guess):
        if i < len(target_word) and ch == target_word[i]:
            result[i] = "correct"
            remaining[ch] -= 1

    # pass 2: leftmost duplicates claim 'present' first
    for i, ch in enumerate(guess):
        if result[i] == "correct":
            continue
        if remaining[ch] > 0:
            result[i] = "present"
            remaining[ch] -= 1

    return result


def is_winning_result(result: GuessResult) -> bool:
    return bool(result) and all(r == "correct" for r in result)
