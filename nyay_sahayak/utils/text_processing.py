"""
Text Processing Utilities
=========================
Functions for cleaning model output and previewing text in logs.
"""
import re

FENCE_PATTERN = re.compile(r'^```(\w*)?\s*\n?(.*?)\n?\s*```$', re.DOTALL)


def clean_translation_response(response: str) -> str:
    """
    Clean a translation returned by the model.

    Removes a surrounding markdown code fence and wrapping double quotes.

    Args:
        response: Raw model output

    Returns:
        Cleaned translation (empty string for empty input)
    """
    if not response:
        return ""

    translated = response.strip()

    match = FENCE_PATTERN.match(translated)
    if match and match.group(2):
        translated = match.group(2).strip()

    if len(translated) >= 2 and translated.startswith('"') and translated.endswith('"'):
        translated = translated[1:-1]

    return translated


def preview(text: str, length: int = 60) -> str:
    """Single-line preview of text for log messages."""
    flat = text.replace('\n', ' ')
    if len(flat) <= length:
        return flat
    return flat[:length] + '...'
