"""
Constants and Enums for Nyay Sahayak
"""
from enum import Enum

APP_NAME = "Nyay Sahayak"

# Display languages accepted even when the Bhashini backend cannot be reached
SUPPORTED_LANGUAGES = {
    'en': 'English',
    'hi': 'Hindi',
    'bn': 'Bengali',
    'ta': 'Tamil',
    'te': 'Telugu',
    'mr': 'Marathi',
    'gu': 'Gujarati',
    'kn': 'Kannada',
    'ml': 'Malayalam',
    'pa': 'Punjabi',
    'or': 'Odia',
    'ur': 'Urdu',
}

# Durable client storage keys
CURRENT_USER_STORAGE_KEY = 'currentUser'
LANGUAGE_STORAGE_KEY = 'nyaySahayakLanguage'
PROGRESS_STORAGE_KEY = 'nyaySahayakUserProgress'

INITIAL_BOT_MESSAGE_ID = 'initial-bot-message'
INITIAL_BOT_MESSAGE = (
    "Hello! I am Nyay Sahayak, your AI legal assistant for Indian law. "
    "How can I help you today?"
)

DOCUMENT_SUMMARY_INSTRUCTION = (
    "Summarize this document based on the image provided. Focus on key details, "
    "purpose, parties involved if any, and any notable legal aspects or obligations mentioned."
)
DOCUMENT_CONTEXT_NOTE = "This is the document we are discussing."

# User-safe texts for failed generations
CHAT_ERROR_MESSAGE = "Sorry, I encountered an error communicating with the AI. Please try again."
SUMMARY_ERROR_MESSAGE = "Sorry, I encountered an error processing the document. Please try again."
QNA_ERROR_MESSAGE = "Sorry, I encountered an error answering your question about the document. Please try again."
NOT_CONFIGURED_MESSAGE = "Error: Google GenAI API key is not configured. AI functionality is unavailable."
INVALID_IMAGE_MESSAGE = "Error: Image data is missing or invalid for vision processing."

MIN_PASSWORD_LENGTH = 6


class Sender(str, Enum):
    """Author of a conversation message."""
    USER = "user"
    BOT = "bot"


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ContentType(str, Enum):
    """Structured lesson content item types."""
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
