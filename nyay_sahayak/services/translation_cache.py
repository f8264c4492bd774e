"""
Translation Cache Service
=========================
Session-scoped memo of translations to avoid repeated API calls.
"""
import threading
from collections import OrderedDict
from typing import Dict, Optional, Tuple

from nyay_sahayak.config import config
from nyay_sahayak.utils.logging import get_logger, debug_print
from nyay_sahayak.utils.text_processing import preview


CacheKey = Tuple[str, str]


class TranslationCache:
    """
    Translations keyed by (source_language, source_text).

    Each entry maps target_language -> translated_text. Entries live for the
    lifetime of the owning session unless max_entries bounds the cache, in
    which case the least recently used entry is evicted first.
    """

    def __init__(self, max_entries: int = None, enabled: bool = None):
        self.max_entries = config.cache.max_entries if max_entries is None else max_entries
        self.enabled = config.cache.enabled if enabled is None else enabled
        self.logger = get_logger().translation_logger
        self._entries: 'OrderedDict[CacheKey, Dict[str, str]]' = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def make_key(text: str, source_lang: str) -> CacheKey:
        return (source_lang, text)

    def get(self, text: str, source_lang: str, target_lang: str) -> Optional[str]:
        """
        Get a cached translation if available.

        Args:
            text: Original text
            source_lang: Source language code
            target_lang: Target language code

        Returns:
            The translated text, or None
        """
        if not self.enabled:
            return None

        key = self.make_key(text, source_lang)
        with self._lock:
            entry = self._entries.get(key)
            translated = entry.get(target_lang) if entry else None
            if translated is None:
                self.misses += 1
            else:
                self.hits += 1
                self._entries.move_to_end(key)

        if translated is None:
            debug_print(f"[CACHE MISS] {source_lang}->{target_lang}: {preview(text)}", 'DEBUG', 'CACHE')
        else:
            debug_print(f"[CACHE HIT] {source_lang}->{target_lang}: {preview(text)}", 'DEBUG', 'CACHE')
        return translated

    def set(self, text: str, source_lang: str, target_lang: str, translated_text: str):
        """Store a translation under (source_lang, text) for target_lang."""
        if not self.enabled:
            debug_print("[CACHE DISABLED] Skipping cache store", 'DEBUG', 'CACHE')
            return

        key = self.make_key(text, source_lang)
        with self._lock:
            entry = self._entries.setdefault(key, {})
            entry[target_lang] = translated_text
            self._entries.move_to_end(key)
            evicted = self._evict()

        if evicted:
            self.logger.debug(f"Evicted {evicted} translation cache entries")

    def _evict(self) -> int:
        # Caller holds the lock
        if self.max_entries <= 0:
            return 0
        evicted = 0
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        self.evictions += evicted
        return evicted

    def __contains__(self, item) -> bool:
        text, source_lang, target_lang = item
        with self._lock:
            entry = self._entries.get(self.make_key(text, source_lang))
            return bool(entry) and target_lang in entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self):
        """Clear all cached translations."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0
        self.logger.info("Translation cache cleared")

    def get_stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        with self._lock:
            return {
                'total_entries': len(self._entries),
                'total_translations': sum(len(entry) for entry in self._entries.values()),
                'hits': self.hits,
                'misses': self.misses,
                'evictions': self.evictions,
                'max_entries': self.max_entries,
            }
