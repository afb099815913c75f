"""Input sanitization utilities."""
import re
from typing import Optional


# Maximum length constraints
MAX_TITLE_LENGTH = 200
MAX_LOCATION_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
MAX_NAME_LENGTH = 100
MAX_NOTE_LENGTH = 500
MAX_TOKEN_LENGTH = 100        # Tokens should be ~43 chars for URL-safe base64

_TAG_PATTERN = re.compile(r'<[^>]*>')


def _strip_tags(text: str) -> str:
    sanitized = _TAG_PATTERN.sub('', text)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")
    return sanitized


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize single-line text input.

    Strips HTML tags and normalizes whitespace. HTML entities are not escaped
    here; mail templates escape on output.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = _strip_tags(sanitized)

    return re.sub(r'\s+', ' ', sanitized)


def sanitize_multiline(text: str, max_length: Optional[int] = None) -> str:
    """Sanitize free text such as descriptions and notes, keeping line breaks."""
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    sanitized = _strip_tags(sanitized)
    lines = [re.sub(r'[ \t]+', ' ', line).rstrip() for line in sanitized.splitlines()]
    return "\n".join(lines)


def sanitize_title(title: str) -> str:
    """
    Sanitize a poll title.

    Raises:
        ValueError: If title is empty or too long
    """
    sanitized = sanitize_text(title, max_length=MAX_TITLE_LENGTH)

    if not sanitized:
        raise ValueError("Title cannot be empty")

    return sanitized


def sanitize_participant_name(name: str) -> str:
    sanitized = sanitize_text(name, max_length=MAX_NAME_LENGTH)

    if not sanitized:
        raise ValueError("Name cannot be empty")

    return sanitized


def validate_token_format(token: str) -> str:
    """
    Validate token format before processing.

    Tokens should be URL-safe base64 strings.
    This prevents malformed tokens from causing unnecessary database queries.

    Args:
        token: The token to validate

    Returns:
        The validated token

    Raises:
        ValueError: If token format is invalid
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    token = token.strip()

    if not token:
        raise ValueError("Token cannot be empty")

    if len(token) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    # URL-safe base64 uses: A-Z, a-z, 0-9, -, _
    if not re.match(r'^[A-Za-z0-9_-]+$', token):
        raise ValueError("Token format is invalid (must be URL-safe base64)")

    return token
