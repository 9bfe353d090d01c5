"""Removal of ANSI colour codes from process output."""

import re

# No overlapping quantifiers: matching stays linear in the input length.
ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9]{1,3}(?:;[0-9]{1,3})*m")


def strip_ansi(text: str) -> str:
    """Remove SGR escape sequences (``ESC[...m``) from text.

    Removal is repeated until nothing matches, so sequences that only appear
    once an inner sequence is removed are stripped as well and the result is
    stable under a second call.
    """
    while True:
        text, count = ANSI_ESCAPE_PATTERN.subn("", text)
        if count == 0:
            return text
