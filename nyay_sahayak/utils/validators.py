"""
Validation Utilities
====================
Functions for validating input data.
"""
import re
from typing import Tuple, Optional
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
from nyay_sahayak.config import config

LANGUAGE_CODE_PATTERN = re.compile(r'^[a-z]{2,3}(-[A-Za-z]{2,4})?$')


def validate_document(
    filename: str,
    mime_type: str,
    size: int
) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded document image.

    Args:
        filename: Original filename
        mime_type: Declared MIME type
        size: Size in bytes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filename:
        return False, "No file provided"

    if size > config.file.max_document_size_bytes:
        return False, f"File is too large. Max size: {config.file.max_document_size_mb}MB."

    if mime_type not in config.file.allowed_document_types:
        return False, "Invalid file type. Allowed types: JPG, PNG, WebP."

    return True, None


def validate_audio(mime_type: str, size: int) -> Tuple[bool, Optional[str]]:
    """
    Validate recorded audio.

    Args:
        mime_type: Declared MIME type, parameters such as codecs are ignored
        size: Size in bytes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if size == 0:
        return False, "No audio recorded"

    if size > config.file.max_audio_size_bytes:
        return False, f"Recording too large. Max size: {config.file.max_audio_size_mb}MB."

    base_type = (mime_type or '').split(';')[0].strip().lower()
    if base_type not in config.file.allowed_audio_types:
        return False, f"Unsupported audio type: {mime_type or 'unknown'}"

    return True, None


def validate_language(lang_code: str) -> Tuple[bool, Optional[str]]:
    """
    Validate the shape of a BCP-47 style language code ('hi', 'en-US').

    Args:
        lang_code: The language code to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not lang_code:
        return False, "Language code is required"

    if not LANGUAGE_CODE_PATTERN.match(lang_code):
        return False, f"Invalid language code: {lang_code}"

    return True, None


def read_upload(file: FileStorage) -> Tuple[str, str, bytes]:
    """
    Read an uploaded file into memory.

    Args:
        file: The uploaded file

    Returns:
        Tuple of (secure_filename, mime_type, data)
    """
    filename = secure_filename(file.filename or '')
    mime_type = file.mimetype or ''
    data = file.read()
    return filename, mime_type, data
