"""
Unit Tests for Translation Cache and Dispatcher
===============================================
"""
import threading
import sys
import os

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.services.translation_cache import TranslationCache
from nyay_sahayak.services.translator import TranslationDispatcher
from tests.fakes import FakeGemini


class TestTranslationCache:
    """Test the per-session translation memo."""

    def test_miss_then_hit(self):
        cache = TranslationCache(max_entries=0, enabled=True)
        assert cache.get("Hello", "en", "hi") is None

        cache.set("Hello", "en", "hi", "नमस्ते")
        assert cache.get("Hello", "en", "hi") == "नमस्ते"

        stats = cache.get_stats()
        assert stats['hits'] == 1
        assert stats['misses'] == 1

    def test_targets_share_one_entry(self):
        cache = TranslationCache(max_entries=0, enabled=True)
        cache.set("Hello", "en", "hi", "नमस्ते")
        cache.set("Hello", "en", "ta", "வணக்கம்")

        assert len(cache) == 1
        assert cache.get_stats()['total_translations'] == 2
        assert ("Hello", "en", "ta") in cache
        assert ("Hello", "en", "bn") not in cache

    def test_source_language_is_part_of_key(self):
        cache = TranslationCache(max_entries=0, enabled=True)
        cache.set("Hello", "en", "hi", "नमस्ते")
        assert cache.get("Hello", "fr", "hi") is None

    def test_unbounded_by_default(self):
        cache = TranslationCache(max_entries=0, enabled=True)
        for i in range(50):
            cache.set(f"text {i}", "en", "hi", f"पाठ {i}")
        assert len(cache) == 50
        assert cache.get_stats()['evictions'] == 0

    def test_lru_eviction_when_bounded(self):
        cache = TranslationCache(max_entries=2, enabled=True)
        cache.set("a", "en", "hi", "A")
        cache.set("b", "en", "hi", "B")
        cache.get("a", "en", "hi")
        cache.set("c", "en", "hi", "C")

        assert ("a", "en", "hi") in cache
        assert ("b", "en", "hi") not in cache
        assert cache.get_stats()['evictions'] == 1

    def test_disabled_cache_stores_nothing(self):
        cache = TranslationCache(max_entries=0, enabled=False)
        cache.set("Hello", "en", "hi", "नमस्ते")
        assert cache.get("Hello", "en", "hi") is None
        assert len(cache) == 0

    def test_clear(self):
        cache = TranslationCache(max_entries=0, enabled=True)
        cache.set("Hello", "en", "hi", "नमस्ते")
        cache.clear()
        assert len(cache) == 0
        assert cache.get_stats()['hits'] == 0


def make_dispatcher(gemini=None, language='hi'):
    gemini = gemini or FakeGemini()
    dispatcher = TranslationDispatcher(
        translator=gemini,
        cache=TranslationCache(max_entries=0, enabled=True),
        current_language=lambda: language,
        default_source_language='en'
    )
    return dispatcher, gemini


class TestTranslationDispatcher:
    """Test memoized translation with fallback."""

    def test_same_language_is_identity(self):
        dispatcher, gemini = make_dispatcher()
        assert dispatcher.translate("Hello", "en", "en") == "Hello"
        assert gemini.translate_calls == []

    def test_empty_text_is_identity(self):
        dispatcher, gemini = make_dispatcher()
        assert dispatcher.translate("", "hi") == ""
        assert gemini.translate_calls == []

    def test_second_request_served_from_cache(self):
        dispatcher, gemini = make_dispatcher(FakeGemini(translations={("Hello", "hi"): "नमस्ते"}))

        assert dispatcher.translate("Hello", "hi") == "नमस्ते"
        assert dispatcher.translate("Hello", "hi") == "नमस्ते"

        assert len(gemini.translate_calls) == 1
        assert dispatcher.remote_calls == 1

    def test_failure_returns_original_and_is_not_cached(self):
        gemini = FakeGemini(translate_error=RuntimeError("quota exceeded"))
        dispatcher, _ = make_dispatcher(gemini)

        assert dispatcher.translate("Hello", "hi") == "Hello"
        assert ("Hello", "en", "hi") not in dispatcher.cache

        gemini.translate_error = None
        assert dispatcher.translate("Hello", "hi") == "[hi] Hello"
        assert len(gemini.translate_calls) == 2

    def test_unchanged_result_not_cached(self):
        dispatcher, gemini = make_dispatcher(FakeGemini(translations={("FIR", "hi"): "FIR"}))

        assert dispatcher.translate("FIR", "hi") == "FIR"
        assert ("FIR", "en", "hi") not in dispatcher.cache

    def test_default_target_is_current_language(self):
        dispatcher, gemini = make_dispatcher(language='ta')
        assert dispatcher.translate("Bail") == "[ta] Bail"
        assert gemini.translate_calls == [("Bail", "ta", "en")]

    def test_default_target_english_is_identity(self):
        dispatcher, gemini = make_dispatcher(language='en')
        assert dispatcher.translate("Bail") == "Bail"
        assert gemini.translate_calls == []

    def test_concurrent_misses_share_one_fetch(self):
        started = threading.Event()
        release = threading.Event()

        class SlowTranslator(FakeGemini):
            def translate(self, text, target_language, source_language):
                started.set()
                release.wait(5)
                return super().translate(text, target_language, source_language)

        gemini = SlowTranslator()
        dispatcher, _ = make_dispatcher(gemini)
        results = []

        first = threading.Thread(target=lambda: results.append(dispatcher.translate("Hello", "hi")))
        first.start()
        assert started.wait(5)

        second = threading.Thread(target=lambda: results.append(dispatcher.translate("Hello", "hi")))
        second.start()
        release.set()
        first.join(5)
        second.join(5)

        assert results == ["[hi] Hello", "[hi] Hello"]
        assert len(gemini.translate_calls) == 1

    def test_translate_many_preserves_order(self):
        dispatcher, gemini = make_dispatcher()
        texts = ["one", "two", "three", "four", "five"]

        assert dispatcher.translate_many(texts, "hi") == [f"[hi] {t}" for t in texts]

    def test_translate_many_same_language(self):
        dispatcher, gemini = make_dispatcher(language='en')
        assert dispatcher.translate_many(["a", "b"]) == ["a", "b"]
        assert gemini.translate_calls == []

    def test_stats(self):
        dispatcher, _ = make_dispatcher()
        dispatcher.translate("Hello", "hi")
        dispatcher.translate("Hello", "hi")

        stats = dispatcher.get_stats()
        assert stats['remote_calls'] == 1
        assert stats['hits'] >= 1
        assert stats['in_flight'] == 0
