"""
Nyay Sahayak - Services
"""
from nyay_sahayak.services.aggregator import ReplyAggregator, GenerationHandle
from nyay_sahayak.services.gemini_client import GeminiClient, GeminiError
from nyay_sahayak.services.bhashini_client import BhashiniClient, BhashiniError
from nyay_sahayak.services.translation_cache import TranslationCache
from nyay_sahayak.services.translator import TranslationDispatcher
from nyay_sahayak.services.session import SessionContext, SessionRegistry

__all__ = [
    "ReplyAggregator",
    "GenerationHandle",
    "GeminiClient",
    "GeminiError",
    "BhashiniClient",
    "BhashiniError",
    "TranslationCache",
    "TranslationDispatcher",
    "SessionContext",
    "SessionRegistry"
]
