"""
Gemini API Client
=================
Client for text, vision, transcription and translation calls to Google GenAI.
"""
from typing import Iterator, List, Optional, Sequence

from google import genai
from google.genai import types

from nyay_sahayak.config import config
from nyay_sahayak.config.constants import (
    INITIAL_BOT_MESSAGE_ID,
    DOCUMENT_SUMMARY_INSTRUCTION,
    DOCUMENT_CONTEXT_NOTE,
    NOT_CONFIGURED_MESSAGE,
    INVALID_IMAGE_MESSAGE,
    Sender
)
from nyay_sahayak.models.messages import ConversationMessage, UploadedFile
from nyay_sahayak.utils.logging import get_logger, debug_print
from nyay_sahayak.utils.text_processing import clean_translation_response, preview


CHAT_SYSTEM_INSTRUCTION = """You are an AI legal assistant named Nyay Sahayak, specialized in the Indian Legal and Judiciary System.
Provide clear, concise, and informative answers.
Your knowledge base focuses on Indian law, legal procedures, rights, and the structure of the Indian judiciary.
If a question is outside this scope (e.g., medical advice, detailed financial advice, general knowledge unrelated to Indian law), politely state your area of expertise and decline to answer the specific off-topic question.
Always strive for accuracy and helpfulness within the legal domain of India.
Do not provide legal advice that could be construed as creating an attorney-client relationship. Instead, provide general legal information and suggest consulting a qualified legal professional in India for specific personal legal cases.
Format important legal terms or sections in bold. For lists, use bullet points.
Keep responses well-structured and easy to understand for a layperson. Be empathetic and supportive."""

DOCUMENT_SYSTEM_INSTRUCTION = """You are an AI legal assistant specialized in analyzing uploaded document images.
Your primary task is to answer questions based *solely* on the content visible in the provided image of the document.
If the question cannot be answered from the image, clearly state that.
Do not hallucinate or infer information beyond what is present in the document image.
When asked to summarize, provide a concise summary of the key points, facts, parties involved, and any discernible legal context or obligations mentioned in the document image.
Be precise and refer to specific parts of the document if possible by quoting short relevant phrases from the image text.
Format your response clearly. Use bullet points for summaries if appropriate."""


class GeminiError(Exception):
    """A failed Gemini call. user_message, when set, is safe to show."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message


class GeminiNotConfiguredError(GeminiError):
    """No API key is configured."""

    def __init__(self):
        super().__init__("Gemini API key not configured", NOT_CONFIGURED_MESSAGE)


def build_history(messages: Sequence[ConversationMessage]) -> List[types.Content]:
    """Convert conversation messages into Gemini contents.

    The greeting, loading placeholders and blank messages are dropped.
    """
    contents = []
    for message in messages:
        if message.id == INITIAL_BOT_MESSAGE_ID or message.is_loading:
            continue
        if not message.text.strip():
            continue
        role = 'user' if message.sender == Sender.USER else 'model'
        contents.append(types.Content(role=role, parts=[types.Part(text=message.text)]))
    return contents


class GeminiClient:
    """Client for Gemini API interactions."""

    def __init__(
        self,
        api_key: str = None,
        text_model: str = None,
        vision_model: str = None,
        client: genai.Client = None
    ):
        self.api_key = api_key if api_key is not None else config.gemini.api_key
        self.text_model = text_model or config.gemini.text_model
        self.vision_model = vision_model or config.gemini.vision_model
        self._client = client
        self.logger = get_logger().chat_logger

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GeminiNotConfiguredError()
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _stream(
        self,
        model: str,
        contents: List[types.Content],
        system_instruction: str,
        user_message: str
    ) -> Iterator[str]:
        """Yield text fragments of a streamed generation."""
        try:
            stream = self.client.models.generate_content_stream(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(system_instruction=system_instruction)
            )
        except GeminiError:
            raise
        except Exception as e:
            self.logger.error(f"Streaming generation failed to start: {e}")
            raise GeminiError(str(e), user_message) from e

        for chunk in stream:
            text = chunk.text
            if text:
                yield text

    def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        new_message: str
    ) -> Iterator[str]:
        """
        Stream a chat reply.

        Args:
            history: Earlier messages of the conversation
            new_message: The user's new message

        Yields:
            Text fragments as they are generated
        """
        contents = build_history(history)
        contents.append(types.Content(role='user', parts=[types.Part(text=new_message)]))
        debug_print(f"[CHAT] {len(contents)} turns, message: {preview(new_message)}", 'DEBUG', 'GEMINI')
        yield from self._stream(
            self.text_model,
            contents,
            CHAT_SYSTEM_INSTRUCTION,
            "Sorry, I encountered an error communicating with the AI."
        )

    def stream_document_summary(
        self,
        document: UploadedFile,
        instruction: str = DOCUMENT_SUMMARY_INSTRUCTION
    ) -> Iterator[str]:
        """Stream a summary of a document image."""
        self._check_image(document)
        contents = [types.Content(role='user', parts=[
            types.Part(text=instruction),
            types.Part.from_bytes(data=document.data, mime_type=document.type),
        ])]
        debug_print(f"[DOCUMENT] Summarizing {document.name} ({document.size} bytes)", 'DEBUG', 'GEMINI')
        yield from self._stream(
            self.vision_model,
            contents,
            DOCUMENT_SYSTEM_INSTRUCTION,
            "Sorry, I encountered an error processing the image."
        )

    def stream_document_answer(
        self,
        question: str,
        document: UploadedFile,
        history: Sequence[ConversationMessage]
    ) -> Iterator[str]:
        """Stream an answer to a question about a document image."""
        self._check_image(document)
        contents = [types.Content(role='user', parts=[
            types.Part.from_bytes(data=document.data, mime_type=document.type),
            types.Part(text=DOCUMENT_CONTEXT_NOTE),
        ])]
        contents.extend(build_history(history))
        contents.append(types.Content(role='user', parts=[types.Part(text=question)]))
        yield from self._stream(
            self.vision_model,
            contents,
            DOCUMENT_SYSTEM_INSTRUCTION,
            "Sorry, I encountered an error answering your question about the document."
        )

    @staticmethod
    def _check_image(document: Optional[UploadedFile]):
        if document is None or not document.data or not document.type:
            raise GeminiError("Invalid image data", INVALID_IMAGE_MESSAGE)

    def transcribe(
        self,
        audio: bytes,
        mime_type: str,
        language: str
    ) -> Optional[str]:
        """
        Transcribe recorded speech.

        Args:
            audio: Raw audio bytes
            mime_type: e.g. 'audio/webm', 'audio/wav'
            language: BCP-47 code of the spoken language, e.g. 'hi-IN'

        Returns:
            The transcript, or None when nothing was transcribed

        Raises:
            GeminiError: the call failed or the input is invalid
        """
        if not audio or not mime_type:
            raise GeminiError("Invalid audio data for transcription.", "Invalid audio data for transcription.")

        prompt = (
            f"Transcribe this audio accurately. The language spoken is {language}. "
            "Provide only the transcription text."
        )
        try:
            response = self.client.models.generate_content(
                model=self.vision_model,
                contents=[types.Content(role='user', parts=[
                    types.Part.from_bytes(data=audio, mime_type=mime_type),
                    types.Part(text=prompt),
                ])],
                config=types.GenerateContentConfig(temperature=config.gemini.transcription_temperature)
            )
        except GeminiError:
            raise
        except Exception as e:
            self.logger.error(f"Transcription failed: {e}")
            raise GeminiError(f"Failed to transcribe audio: {e}", "Failed to transcribe audio.") from e

        if response.text:
            return response.text.strip()

        self.logger.warning("Transcription result is empty")
        return None

    def translate(self, text: str, target_language: str, source_language: str) -> str:
        """
        Translate text with the text model.

        Returns the original text when the parameters are incomplete, the
        languages match, or the model returns nothing.

        Raises:
            GeminiError: the call failed
        """
        if not text or not target_language or not source_language:
            return text
        if source_language == target_language:
            return text

        prompt = (
            f"Translate the following text from {source_language} to {target_language}. "
            "Output only the translated text, without any additional explanations or context. "
            f"Text to translate: \"{text}\""
        )
        try:
            response = self.client.models.generate_content(
                model=self.text_model,
                contents=prompt
            )
        except GeminiError:
            raise
        except Exception as e:
            raise GeminiError(f"Translation {source_language}->{target_language} failed: {e}") from e

        translated = clean_translation_response(response.text or "")
        return translated or text


# Global client instance
_client_instance: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """Get or create the global Gemini client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = GeminiClient()
    return _client_instance
