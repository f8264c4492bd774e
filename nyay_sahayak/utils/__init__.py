"""
Nyay Sahayak - Utility Functions
"""
from nyay_sahayak.utils.text_processing import (
    clean_translation_response,
    preview
)
from nyay_sahayak.utils.validators import (
    validate_document,
    validate_audio,
    validate_language,
    read_upload
)
from nyay_sahayak.utils.logging import (
    LogBuffer,
    AppLogger,
    get_logger,
    debug_print
)

__all__ = [
    "clean_translation_response",
    "preview",
    "validate_document",
    "validate_audio",
    "validate_language",
    "read_upload",
    "LogBuffer",
    "AppLogger",
    "get_logger",
    "debug_print"
]
