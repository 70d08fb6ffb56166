"""Short code generation and input validation.

Pure helpers used by the link service: a random code generator and the
predicates deciding whether a code or a URL may be stored.
"""

import random
import re
import string
from typing import Any, Optional
from urllib.parse import urlsplit

from tinylink.core.config import settings

ALLOWED_SCHEMES = ("http", "https")

# The 62 ASCII letters and digits
CODE_ALPHABET = string.ascii_letters + string.digits

_WHITESPACE = re.compile(r"\s")


def generate_code(length: Optional[int] = None) -> str:
    """
    Generate a random short code.

    Every character is drawn independently and uniformly from the
    alphanumeric alphabet. Uniqueness is not guaranteed.

    Args:
        length: Length of the code, defaults to settings.CODE_LENGTH

    Returns:
        str: A random short code
    """
    if length is None:
        length = settings.CODE_LENGTH
    if length < 1:
        raise ValueError("Code length must be positive")

    return "".join(random.choice(CODE_ALPHABET) for _ in range(length))


def code_pattern(min_length: Optional[int] = None, max_length: Optional[int] = None) -> re.Pattern:
    """Compile the code shape rule for the given length bounds."""
    if min_length is None:
        min_length = settings.CODE_MIN_LENGTH
    if max_length is None:
        max_length = settings.CODE_MAX_LENGTH
    return re.compile(rf"[A-Za-z0-9]{{{min_length},{max_length}}}")


def is_valid_code(code: Any) -> bool:
    """
    Check if a code has the required shape.

    Args:
        code: Candidate or user-supplied code

    Returns:
        bool: True if the code is ASCII alphanumeric and within the length bounds
    """
    if not isinstance(code, str):
        return False
    return code_pattern().fullmatch(code) is not None


def is_valid_url(url: Any) -> bool:
    """
    Check if a URL is an absolute http or https URL.

    Malformed input yields False, never an exception.

    Args:
        url: URL to validate

    Returns:
        bool: True if the URL is valid, False otherwise
    """
    if not isinstance(url, str) or not url or _WHITESPACE.search(url):
        return False

    try:
        parts = urlsplit(url)
        # Accessing port validates it and raises ValueError when malformed
        parts.port
    except ValueError:
        return False

    return parts.scheme in ALLOWED_SCHEMES and bool(parts.hostname)


def code_requirements() -> str:
    """Human readable description of the code shape rule."""
    return (
        f"Code must be {settings.CODE_MIN_LENGTH}-{settings.CODE_MAX_LENGTH} characters "
        f"and contain only letters and numbers"
    )
