"""Input validation utilities."""

import ipaddress
from typing import List
from urllib.parse import urlparse

from recipe_import.config import settings
from recipe_import.utils.exceptions import ValidationError

MAX_TAGS = 100
MAX_TAG_LENGTH = 200
BLOCKED_HOSTNAMES = frozenset({"localhost", "metadata.google.internal"})


def normalize_url(url: str) -> str:
    """
    Upgrade ``http://`` to ``https://`` and add a scheme when it is missing.

    Args:
        url: URL as typed by the user

    Returns:
        URL with an https scheme
    """
    trimmed = (url or "").strip()
    lower = trimmed.lower()
    if lower.startswith("http://"):
        return "https://" + trimmed[7:]
    if not lower.startswith("https://") and "://" not in lower:
        return "https://" + trimmed
    return trimmed


def validate_url(url: str) -> str:
    """
    Validate and sanitize URL to prevent SSRF attacks.

    Args:
        url: URL to validate

    Returns:
        Validated URL string

    Raises:
        ValidationError: If URL is invalid or potentially dangerous
    """
    if not url or not isinstance(url, str):
        raise ValidationError("URL must be a non-empty string")

    url = url.strip()

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {str(e)}") from e

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("URL must use http or https protocol")

    hostname = parsed.hostname
    if not hostname:
        raise ValidationError("URL must have a valid hostname")

    if hostname.lower() in BLOCKED_HOSTNAMES or hostname.lower().endswith(".localhost"):
        raise ValidationError("URL cannot point to localhost or private IPs")

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        address = None  # a DNS name
    if address is not None and not address.is_global:
        raise ValidationError("URL cannot point to private IP ranges")

    return url


def validate_text_input(text: str) -> str:
    """
    Validate extracted PDF/OCR text before parsing.

    Raises:
        ValidationError: If the text is not a string or exceeds the size limit
    """
    if not isinstance(text, str):
        raise ValidationError("Text must be a string")

    if len(text.encode("utf-8")) > settings.max_request_size:
        raise ValidationError(f"Text cannot exceed {settings.max_request_size} bytes")

    return text


def validate_tags_list(tags: list) -> List[str]:
    """
    Validate a tag list submitted for standardization or review.

    Args:
        tags: List of tag strings

    Returns:
        The tags with surrounding whitespace removed

    Raises:
        ValidationError: If the list or any tag is invalid
    """
    if not isinstance(tags, list):
        raise ValidationError("Tags must be a list")

    if len(tags) > MAX_TAGS:
        raise ValidationError(f"Tags list cannot exceed {MAX_TAGS} items")

    validated = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("All tags must be strings")
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tag text cannot exceed {MAX_TAG_LENGTH} characters")
        validated.append(tag.strip())

    return validated
