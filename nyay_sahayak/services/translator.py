"""
Translation Dispatcher
======================
Display-language translation with memoization and graceful fallback.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from nyay_sahayak.config import config
from nyay_sahayak.services.translation_cache import TranslationCache
from nyay_sahayak.utils.logging import get_logger, debug_print
from nyay_sahayak.utils.text_processing import preview


class TranslationDispatcher:
    """
    Translate UI text into the display language.

    Each (source, text, target) triple reaches the remote translator at most
    once per session: hits are served from the cache and concurrent misses
    for the same triple wait on the first request instead of fetching again.
    Failures are absorbed and the original text is returned.
    """

    def __init__(
        self,
        translator=None,
        cache: TranslationCache = None,
        current_language: Callable[[], str] = None,
        default_source_language: str = None
    ):
        if translator is None:
            from nyay_sahayak.services.gemini_client import get_gemini_client
            translator = get_gemini_client()
        self.translator = translator
        self.cache = cache if cache is not None else TranslationCache()
        self._current_language = current_language or (lambda: config.chat.default_display_language)
        self.default_source_language = default_source_language or config.chat.default_source_language
        self.logger = get_logger().translation_logger

        self._inflight: Dict[Tuple[str, str, str], Future] = {}
        self._lock = threading.Lock()
        self.remote_calls = 0

    def translate(
        self,
        text: str,
        target_language: str = None,
        source_language: str = None
    ) -> str:
        """
        Translate text, never raising.

        Args:
            text: Text to translate
            target_language: Defaults to the current display language
            source_language: Defaults to English

        Returns:
            The translation, or the original text when no translation is
            needed or available
        """
        target = target_language or self._current_language()
        source = source_language or self.default_source_language

        if not text or target == source:
            return text

        cached = self.cache.get(text, source, target)
        if cached is not None:
            return cached

        key = (source, text, target)
        with self._lock:
            if (text, source, target) in self.cache:
                return self.cache.get(text, source, target)
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            debug_print(f"[TRANSLATE] Waiting on in-flight {source}->{target}: {preview(text)}", 'DEBUG', 'TRANS')
            try:
                return future.result(timeout=config.cache.inflight_wait_timeout)
            except FutureTimeoutError:
                self.logger.warning(f"Timed out waiting for in-flight translation {source}->{target}")
                return text

        result = text
        try:
            result = self._fetch(text, source, target)
        finally:
            future.set_result(result)
            with self._lock:
                self._inflight.pop(key, None)
        return result

    def _fetch(self, text: str, source: str, target: str) -> str:
        with self._lock:
            self.remote_calls += 1

        try:
            translated = self.translator.translate(text, target, source)
        except Exception as e:
            self.logger.warning(f"Translation {source}->{target} failed, using original text: {e}")
            return text

        if translated and translated != text:
            self.cache.set(text, source, target, translated)
            debug_print(f"[TRANSLATE] {source}->{target}: {preview(text)} => {preview(translated)}", 'DEBUG', 'TRANS')
            return translated

        self.logger.debug(f"Translation {source}->{target} returned no change for: {preview(text)}")
        return text

    def translate_many(
        self,
        texts: Sequence[str],
        target_language: str = None,
        source_language: str = None,
        max_workers: int = 4
    ) -> List[str]:
        """Translate several strings concurrently, preserving order."""
        if not texts:
            return []
        target = target_language or self._current_language()
        source = source_language or self.default_source_language
        if target == source:
            return list(texts)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda text: self.translate(text, target, source), texts))

    def get_stats(self) -> Dict[str, int]:
        stats = self.cache.get_stats()
        stats['remote_calls'] = self.remote_calls
        with self._lock:
            stats['in_flight'] = len(self._inflight)
        return stats
