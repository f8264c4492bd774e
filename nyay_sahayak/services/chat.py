"""
Chat Conversation Service
=========================
Legal-assistant chat with streamed, localized replies and voice input.
"""
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from werkzeug.datastructures import FileStorage

from nyay_sahayak.config import config
from nyay_sahayak.config.constants import (
    INITIAL_BOT_MESSAGE,
    INITIAL_BOT_MESSAGE_ID,
    CHAT_ERROR_MESSAGE,
    Sender
)
from nyay_sahayak.models.messages import ConversationMessage, ReplySnapshot
from nyay_sahayak.services.aggregator import GenerationHandle, ReplyAggregator
from nyay_sahayak.utils.logging import get_logger, debug_print
from nyay_sahayak.utils.text_processing import preview
from nyay_sahayak.utils.validators import validate_audio


class ConversationBusyError(Exception):
    """A reply is still loading; the new request was refused."""


class VoiceInputError(Exception):
    """Recorded audio could not be turned into a message."""


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


class BusyFlag:
    """Loading indicator that only one request may hold at a time."""

    def __init__(self, message: str):
        self.message = message
        self._lock = threading.Lock()
        self._busy = False

    @property
    def is_set(self) -> bool:
        return self._busy

    def acquire(self):
        with self._lock:
            if self._busy:
                raise ConversationBusyError(self.message)
            self._busy = True

    def release(self):
        with self._lock:
            self._busy = False

    @contextmanager
    def held(self):
        self.acquire()
        try:
            yield
        finally:
            self.release()


class VoiceInput:
    """Speech-to-text for recorded chat messages."""

    def __init__(self, gemini):
        self.gemini = gemini
        self.logger = get_logger().chat_logger

    @contextmanager
    def recording(self, upload: FileStorage) -> Iterator[bytes]:
        """
        Spool an uploaded recording to a temporary file and yield its bytes.

        The temporary file is removed on every exit path.
        """
        fd, path = tempfile.mkstemp(prefix='nyay_voice_', suffix='.audio')
        os.close(fd)
        try:
            upload.save(path)
            with open(path, 'rb') as f:
                yield f.read()
        finally:
            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(f"Could not remove recording {path}: {e}")

    def transcribe(self, audio: bytes, mime_type: str, language: str) -> Optional[str]:
        """
        Transcribe a recording.

        Raises:
            VoiceInputError: the audio is missing, too large or of a wrong type
            GeminiError: the transcription call failed
        """
        valid, error = validate_audio(mime_type, len(audio or b""))
        if not valid:
            raise VoiceInputError(error)

        transcript = self.gemini.transcribe(audio, mime_type, language)
        if transcript:
            debug_print(f"[VOICE] Transcribed ({language}): {preview(transcript)}", 'DEBUG', 'CHAT')
        return transcript


class ChatConversation:
    """
    One conversation with the legal assistant.

    Replies are streamed into a placeholder bot message and localized into
    the display language. Only one reply may be loading at a time.
    """

    def __init__(
        self,
        gemini,
        dispatcher,
        bhashini=None,
        current_language: Callable[[], str] = None
    ):
        self.gemini = gemini
        self.dispatcher = dispatcher
        self.bhashini = bhashini
        self._current_language = current_language or (lambda: config.chat.default_display_language)
        self.voice = VoiceInput(gemini)
        self.logger = get_logger().chat_logger
        self._loading = BusyFlag("A reply is still loading. Please wait.")
        self.messages: List[ConversationMessage] = [self._greeting()]

    @property
    def is_loading(self) -> bool:
        return self._loading.is_set

    def _greeting(self) -> ConversationMessage:
        language = self._current_language()
        return ConversationMessage(
            id=INITIAL_BOT_MESSAGE_ID,
            text=self.dispatcher.translate(INITIAL_BOT_MESSAGE, language),
            sender=Sender.BOT,
            language=language
        )

    def refresh_greeting(self):
        """Re-translate the greeting after a display language switch."""
        if self.messages and self.messages[0].id == INITIAL_BOT_MESSAGE_ID:
            self.messages[0] = self._greeting()

    def _detect_language(self, text: str) -> str:
        if self.bhashini is None:
            return config.chat.default_source_language
        return self.bhashini.detect_language(text) or config.chat.default_source_language

    def send_message(self, text: str, input_language: str = None) -> GenerationHandle:
        """
        Send a user message and start streaming the reply.

        Args:
            text: The user's message
            input_language: Language of the message; detected when omitted

        Returns:
            Handle on the streamed reply

        Raises:
            ValueError: blank message
            ConversationBusyError: a reply is already loading
        """
        if not text or not text.strip():
            raise ValueError("Message is empty")

        self._loading.acquire()
        try:
            language = input_language or self._detect_language(text)
            display_language = self._current_language()
            history = list(self.messages)

            message_id = _timestamp_id()
            user_message = ConversationMessage(
                id=message_id,
                text=text,
                sender=Sender.USER,
                language=language
            )
            placeholder = ConversationMessage(
                id=f"bot-{message_id}",
                text="",
                sender=Sender.BOT,
                is_loading=True,
                language=display_language
            )
            self.messages.extend([user_message, placeholder])
            self.logger.info(f"Chat message ({language}): {preview(text)}")

            aggregator = ReplyAggregator(placeholder.id, CHAT_ERROR_MESSAGE)
            snapshots = self._localized(
                aggregator.stream(self.gemini.stream_chat(history, text)),
                placeholder,
                display_language
            )
        except Exception:
            self._loading.release()
            raise

        return GenerationHandle(
            placeholder.id,
            snapshots,
            on_close=lambda last: self._finish(placeholder)
        )

    def _localized(
        self,
        snapshots: Iterator[ReplySnapshot],
        placeholder: ConversationMessage,
        display_language: str
    ) -> Iterator[ReplySnapshot]:
        """Translate snapshots into the display language and mirror them onto the placeholder."""
        try:
            for snapshot in snapshots:
                text = snapshot.text
                if not snapshot.is_loading or config.chat.translate_partial_replies:
                    text = self.dispatcher.translate(text, display_language)
                placeholder.text = text
                placeholder.is_loading = snapshot.is_loading
                yield ReplySnapshot(
                    id=snapshot.id,
                    text=text,
                    is_loading=snapshot.is_loading,
                    is_error=snapshot.is_error
                )
        finally:
            snapshots.close()

    def _finish(self, placeholder: ConversationMessage):
        placeholder.is_loading = False
        self._loading.release()

    def send_voice_message(
        self,
        audio: bytes,
        mime_type: str,
        language: str = None
    ) -> Tuple[str, GenerationHandle]:
        """
        Transcribe a recording and send it as a message.

        Returns:
            (transcript, reply handle)

        Raises:
            ConversationBusyError: a reply is already loading
            VoiceInputError: nothing was transcribed
            GeminiError: the transcription call failed
        """
        if self.is_loading:
            raise ConversationBusyError("A reply is still loading. Please wait.")

        spoken_language = language or self._current_language()
        transcript = self.voice.transcribe(audio, mime_type, spoken_language)
        if not transcript or not transcript.strip():
            raise VoiceInputError("No text transcribed or transcription failed.")

        detected = self.bhashini.detect_language(transcript) if self.bhashini is not None else None
        return transcript, self.send_message(transcript, detected or spoken_language)

    def clear(self):
        """Reset the conversation to the greeting."""
        if self.is_loading:
            raise ConversationBusyError("A reply is still loading. Please wait.")
        self.messages = [self._greeting()]

    def to_dict(self) -> dict:
        return {
            'messages': [message.to_dict() for message in self.messages],
            'is_loading': self.is_loading,
        }
