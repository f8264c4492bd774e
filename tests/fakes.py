"""
Test doubles for the Gemini and Bhashini clients.
"""
import threading
from typing import Dict, List, Optional, Tuple

from nyay_sahayak.models.schemas import Language


class FakeGemini:
    """Scripted stand-in for GeminiClient."""

    def __init__(
        self,
        fragments: List[str] = None,
        error: Exception = None,
        translations: Dict[Tuple[str, str], str] = None,
        translate_error: Exception = None,
        transcript: Optional[str] = "What is bail?"
    ):
        self.fragments = list(fragments) if fragments is not None else ["Hel", "lo, ", "world"]
        self.error = error
        self.translations = translations or {}
        self.translate_error = translate_error
        self.transcript = transcript
        self.is_configured = True

        self.chat_calls = []
        self.summary_calls = []
        self.answer_calls = []
        self.transcribe_calls = []
        self.translate_calls = []
        self._lock = threading.Lock()

    def _stream(self):
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error

    def stream_chat(self, history, new_message):
        self.chat_calls.append((list(history), new_message))
        return self._stream()

    def stream_document_summary(self, document):
        self.summary_calls.append(document)
        return self._stream()

    def stream_document_answer(self, question, document, history):
        self.answer_calls.append((question, document, list(history)))
        return self._stream()

    def transcribe(self, audio, mime_type, language):
        self.transcribe_calls.append((audio, mime_type, language))
        return self.transcript

    def translate(self, text, target_language, source_language):
        with self._lock:
            self.translate_calls.append((text, target_language, source_language))
        if self.translate_error is not None:
            raise self.translate_error
        return self.translations.get((text, target_language), f"[{target_language}] {text}")


class FakeBhashini:
    """Scripted stand-in for BhashiniClient."""

    def __init__(
        self,
        languages: List[Language] = None,
        detected: Optional[str] = 'en',
        healthy: bool = True,
        audio: Optional[str] = 'UklGRg=='
    ):
        self.languages = languages if languages is not None else [
            Language(code='hi', name='Hindi'),
            Language(code='en', name='English'),
            Language(code='ta', name='Tamil'),
        ]
        self.detected = detected
        self.healthy = healthy
        self.audio = audio
        self.detect_calls = []
        self.tts_calls = []

    def supported_languages(self):
        return list(self.languages)

    def detect_language(self, text):
        self.detect_calls.append(text)
        return self.detected

    def text_to_speech(self, text, source_language=None):
        self.tts_calls.append((text, source_language))
        return self.audio

    def is_healthy(self):
        return self.healthy
