"""
Dictionary Service

Word sources for the infinite modes: the allow-list consulted before every
guess and the pool target words are drawn from. Files are read lazily,
once, and shared read-only afterwards.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Set

from ..config.game_settings import WORD_LENGTH, load_word_file

logger = logging.getLogger(__name__)


class DictionaryService:

    def __init__(self, path: Optional[str] = None, word_length: int = WORD_LENGTH,
                 words: Optional[Iterable[str]] = None):
        self.path = path
        self.word_length = word_length
        self._words: Optional[List[str]] = None
        self._word_set: Optional[Set[str]] = None
        self._lock = threading.Lock()
        if words is not None:
            self._set_words([w.strip().upper() for w in words if w and w.strip()])

    @classmethod
    def from_words(cls, words: Iterable[str], word_length: int = WORD_LENGTH) -> "DictionaryService":
        return cls(word_length=word_length, words=words)

    def _set_words(self, words: List[str]) -> None:
        if not words:
            raise ValueError("Word list cannot be empty")
        unique = list(dict.fromkeys(words))
        self._words = unique
        self._word_set = set(unique)

    def _ensure_loaded(self) -> None:
        if self._words is not None:
            return
        with self._lock:
            if self._words is not None:
                return
            if not self.path:
                raise ValueError("No word file configured")
            words = load_word_file(self.path, self.word_length)
            self._set_words(words)
            logger.info(f"Loaded {len(words)} words from {self.path}")

    def is_allowed(self, word: str) -> bool:
        self._ensure_loaded()
        return word.upper() in self._word_set

    def get_all_words(self) -> List[str]:
        self._ensure_loaded()
        return list(self._words)

    def list_words(self, page: int = 1, page_size: int = 100) -> Dict:
        """Paginated, alphabetically sorted listing of the word list."""
        self._ensure_loaded()
        safe_page = max(1, page)
        safe_page_size = min(max(page_size, 1), 500)
        ordered = sorted(self._words)
        total_items = len(ordered)
        start = (safe_page - 1) * safe_page_size
        total_pages = 0 if total_items == 0 else -(-total_items // safe_page_size)
        return {
            "page": safe_page,
            "page_size": safe_page_size,
            "total_items": total_items,
            "total_pages": total_pages,
            "items": ordered[start:start + safe_page_size],
        }
