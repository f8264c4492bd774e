"""
Unit Tests for Chat Conversations
=================================
"""
import pytest
import sys
import os
from io import BytesIO

from werkzeug.datastructures import FileStorage

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.config.constants import (
    CHAT_ERROR_MESSAGE,
    INITIAL_BOT_MESSAGE,
    INITIAL_BOT_MESSAGE_ID,
    Sender
)
from nyay_sahayak.services.chat import (
    BusyFlag,
    ChatConversation,
    ConversationBusyError,
    VoiceInput,
    VoiceInputError
)
from nyay_sahayak.services.translation_cache import TranslationCache
from nyay_sahayak.services.translator import TranslationDispatcher
from tests.fakes import FakeGemini, FakeBhashini


def make_conversation(gemini=None, bhashini=None, language='en'):
    gemini = gemini or FakeGemini()
    state = {'language': language}
    dispatcher = TranslationDispatcher(
        translator=gemini,
        cache=TranslationCache(max_entries=0, enabled=True),
        current_language=lambda: state['language'],
        default_source_language='en'
    )
    conversation = ChatConversation(
        gemini,
        dispatcher,
        bhashini=bhashini,
        current_language=lambda: state['language']
    )
    return conversation, gemini, state


class TestBusyFlag:
    """Test the single-holder loading flag."""

    def test_second_acquire_refused(self):
        flag = BusyFlag("busy")
        flag.acquire()
        with pytest.raises(ConversationBusyError):
            flag.acquire()
        flag.release()
        flag.acquire()

    def test_held_releases_on_error(self):
        flag = BusyFlag("busy")
        with pytest.raises(RuntimeError):
            with flag.held():
                raise RuntimeError("fail")
        assert not flag.is_set


class TestChatConversation:
    """Test sending messages and streaming replies."""

    def test_starts_with_greeting(self):
        conversation, _, _ = make_conversation()
        assert len(conversation.messages) == 1
        assert conversation.messages[0].id == INITIAL_BOT_MESSAGE_ID
        assert conversation.messages[0].text == INITIAL_BOT_MESSAGE

    def test_greeting_translated(self):
        conversation, _, state = make_conversation(language='hi')
        assert conversation.messages[0].text == f"[hi] {INITIAL_BOT_MESSAGE}"

        state['language'] = 'ta'
        conversation.refresh_greeting()
        assert conversation.messages[0].text == f"[ta] {INITIAL_BOT_MESSAGE}"

    def test_send_message_streams_reply(self):
        conversation, gemini, _ = make_conversation()

        handle = conversation.send_message("What is bail?")
        assert conversation.is_loading
        assert conversation.messages[-1].is_loading

        snapshots = list(handle)

        assert [s.text for s in snapshots] == ["Hel", "Hello, ", "Hello, world", "Hello, world"]
        assert not conversation.is_loading
        user, bot = conversation.messages[-2:]
        assert user.sender == Sender.USER
        assert user.text == "What is bail?"
        assert bot.id == f"bot-{user.id}"
        assert bot.text == "Hello, world"
        assert bot.is_loading is False

    def test_history_excludes_new_message(self):
        conversation, gemini, _ = make_conversation()
        conversation.send_message("First").wait()
        conversation.send_message("Second").wait()

        history, new_message = gemini.chat_calls[-1]
        assert new_message == "Second"
        assert [m.text for m in history][1:] == ["First", "Hello, world"]

    def test_terminal_reply_translated_partials_not(self):
        conversation, _, _ = make_conversation(language='hi')
        snapshots = list(conversation.send_message("What is bail?"))

        assert snapshots[0].text == "Hel"
        assert snapshots[-1].text == "[hi] Hello, world"
        assert conversation.messages[-1].text == "[hi] Hello, world"

    def test_reply_error_is_user_safe(self):
        gemini = FakeGemini(fragments=["partial"], error=RuntimeError("stack trace"))
        conversation, _, _ = make_conversation(gemini)

        last = conversation.send_message("What is bail?").wait()

        assert last.is_error
        assert last.text == CHAT_ERROR_MESSAGE
        assert conversation.messages[-1].text == CHAT_ERROR_MESSAGE
        assert not conversation.is_loading

    def test_busy_refuses_second_message(self):
        conversation, _, _ = make_conversation()
        handle = conversation.send_message("First")

        with pytest.raises(ConversationBusyError):
            conversation.send_message("Second")
        with pytest.raises(ConversationBusyError):
            conversation.clear()

        handle.wait()
        conversation.send_message("Third").wait()

    def test_abandoned_reply_clears_loading(self):
        conversation, _, _ = make_conversation()
        with conversation.send_message("First") as handle:
            next(iter(handle))

        assert not conversation.is_loading
        assert conversation.messages[-1].is_loading is False

    def test_blank_message_rejected(self):
        conversation, gemini, _ = make_conversation()
        with pytest.raises(ValueError):
            conversation.send_message("   ")
        assert not conversation.is_loading
        assert gemini.chat_calls == []

    def test_input_language_detected(self):
        bhashini = FakeBhashini(detected='hi')
        conversation, _, _ = make_conversation(bhashini=bhashini)
        conversation.send_message("जमानत क्या है?").wait()

        assert conversation.messages[-2].language == 'hi'
        assert bhashini.detect_calls == ["जमानत क्या है?"]

    def test_clear(self):
        conversation, _, _ = make_conversation()
        conversation.send_message("First").wait()
        conversation.clear()
        assert [m.id for m in conversation.messages] == [INITIAL_BOT_MESSAGE_ID]

    def test_to_dict(self):
        conversation, _, _ = make_conversation()
        data = conversation.to_dict()
        assert data['is_loading'] is False
        assert data['messages'][0]['sender'] == 'bot'


class TestVoiceInput:
    """Test recorded voice messages."""

    def test_voice_message(self):
        bhashini = FakeBhashini(detected='en')
        conversation, gemini, _ = make_conversation(bhashini=bhashini)

        transcript, handle = conversation.send_voice_message(b'audio-bytes', 'audio/webm', 'en-US')
        handle.wait()

        assert transcript == "What is bail?"
        assert gemini.transcribe_calls == [(b'audio-bytes', 'audio/webm', 'en-US')]
        assert conversation.messages[-2].text == "What is bail?"

    def test_empty_transcript(self):
        conversation, _, _ = make_conversation(FakeGemini(transcript=None))
        with pytest.raises(VoiceInputError):
            conversation.send_voice_message(b'audio-bytes', 'audio/webm')
        assert not conversation.is_loading

    def test_invalid_audio_type(self):
        conversation, gemini, _ = make_conversation()
        with pytest.raises(VoiceInputError):
            conversation.send_voice_message(b'audio-bytes', 'video/mp4')
        assert gemini.transcribe_calls == []

    def test_busy_refuses_voice(self):
        conversation, gemini, _ = make_conversation()
        handle = conversation.send_message("First")
        with pytest.raises(ConversationBusyError):
            conversation.send_voice_message(b'audio-bytes', 'audio/webm')
        assert gemini.transcribe_calls == []
        handle.close()

    def test_recording_temp_file_removed(self):
        voice = VoiceInput(FakeGemini())
        upload = FileStorage(stream=BytesIO(b'RIFF-data'), filename='voice.wav', content_type='audio/wav')
        seen_paths = []

        original_remove = os.remove

        def tracking_remove(path):
            seen_paths.append(path)
            original_remove(path)

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(os, 'remove', tracking_remove)
            with voice.recording(upload) as audio:
                assert audio == b'RIFF-data'

        assert len(seen_paths) == 1
        assert not os.path.exists(seen_paths[0])
