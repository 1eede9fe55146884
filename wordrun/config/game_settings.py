"""
Game Configuration Constants Module

Defaults for the daily puzzle and the infinite word-guessing modes and the loader for word files.
Attempt budgets are only defaults: the effective values come from Config.
"""

import json
import os
from typing import List, Final

WORD_LENGTH: Final[int] = 5
"""Length of every target and guess word."""

SOLO_MAX_ATTEMPTS: Final[int] = 4
"""Guess attempts per word in a solo infinite run."""

COOP_MAX_ATTEMPTS: Final[int] = 5
"""Guess attempts per word in a cooperative infinite run (shared by both players)."""

ROOM_MAX_PLAYERS: Final[int] = 2

ROOM_ID_LENGTH: Final[int] = 6

DAILY_MAX_ATTEMPTS: Final[int] = 6
"""Guess attempts on the daily puzzle."""

DAILY_ATTEMPT_SCORES: Final[tuple] = (10, 8, 6, 4, 3, 2)
"""Points for solving the daily puzzle on attempt 1, 2, ... (0 beyond)."""


def load_word_file(path: str, word_length: int = WORD_LENGTH) -> List[str]:
    """
    Load a word file.

    Accepts either a JSON array of words (``.json``) or plain text with one
    word per line. Words are uppercased and duplicates dropped, keeping the
    first occurrence.

    Returns:
        List[str]: Uppercase words of ``word_length`` letters

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is malformed, empty or contains invalid words
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Word list file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        if path.endswith('.json'):
            try:
                raw_words = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
            if not isinstance(raw_words, list):
                raise ValueError("JSON file must contain an array of words")
        else:
            raw_words = f.read().splitlines()

    words = []
    seen = set()
    for raw in raw_words:
        word = str(raw).strip().upper()
        if not word:
            continue
        if len(word) != word_length:
            raise ValueError(f"Word '{word}' is not {word_length} characters long")
        if not word.isalpha():
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")
        if word not in seen:
            seen.add(word)
            words.append(word)

    if not words:
        raise ValueError(f"Word list cannot be empty: {path}")

    return words
