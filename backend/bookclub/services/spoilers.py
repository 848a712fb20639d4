"""
Inline spoiler markup for discussion questions.

Any ``[...]`` span in a question is a spoiler the reader has to click to
reveal. The stored text keeps its brackets; this module only splits it for
display.
"""

import re

SPOILER_PATTERN = re.compile(r"(\[[^\]]*\])")


def parse_spoilers(text: str) -> list[tuple[str, bool]]:
    """
    Split question text into display segments.

    Args:
        text: Raw question text as stored

    Returns:
        List of (text, is_spoiler) pairs in reading order. Spoiler segments
        have their brackets removed. Empty plain segments are dropped.

    Example:
        >>> parse_spoilers("Why did [Snape] do it?")
        [('Why did ', False), ('Snape', True), (' do it?', False)]
    """
    segments = []
    for part in SPOILER_PATTERN.split(text):
        if part.startswith("[") and part.endswith("]"):
            segments.append((part[1:-1], True))
        elif part:
            segments.append((part, False))
    return segments


def has_spoilers(text: str) -> bool:
    return SPOILER_PATTERN.search(text) is not None
