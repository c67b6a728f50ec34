"""Text sanitization for model output passed back to callers."""

import re

# Control characters except tab and newline
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize_model_text(text: str | None, max_length: int = 4000) -> str:
    """
    Clean untrusted generated text.

    Drops control characters (keeping tabs and newlines), normalises CRLF
    and truncates to ``max_length`` with an ellipsis.
    """
    if not text:
        return ""

    text = _CONTROL_CHARS.sub("", text.replace("\r\n", "\n"))

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text.strip()
