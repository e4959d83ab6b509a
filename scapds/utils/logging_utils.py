"""
Logging helpers.

Identifiers, hrefs and catalog names come straight out of the documents
being processed. They are passed through sanitize_for_log before they reach
a log record so a crafted document cannot inject fake log lines (CWE-117).
"""

import re
from typing import Any, Optional

# Patterns for content that must not reach a log line
LOG_INJECTION_PATTERNS = [
    r"[\r\n]",  # CRLF injection
    r"%0[ad]",  # URL-encoded CRLF
    r"\x00",  # Null bytes
    r"[\x01-\x08\x0b\x0c\x0e-\x1f\x7f]",  # Control characters
]


def sanitize_for_log(value: Optional[Any], max_length: int = 200) -> str:
    """
    Sanitize a value taken from a document for safe logging.

    Args:
        value: Value to sanitize
        max_length: Maximum length of output

    Returns:
        str: Sanitized string safe for logging
    """
    if value is None:
        return "null"

    str_value = str(value)

    if len(str_value) > max_length:
        str_value = str_value[:max_length] + "..."

    for pattern in LOG_INJECTION_PATTERNS:
        str_value = re.sub(pattern, "", str_value)

    return str_value
