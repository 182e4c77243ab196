"""Default visual-to-logical conversion for right-to-left report columns.

Legacy dumps store Hebrew text in visual order: the characters of a line appear
left to right as printed, so RTL words come out reversed. The conversion here
reverses the field and restores the order of embedded left-to-right runs
(digits, Latin words, dates). It is deliberately simple; callers needing the full
Unicode bidi algorithm pass their own converter to the handlers.
"""

from __future__ import annotations

import re

# Runs that keep their own left-to-right order inside RTL text.
_LTR_RUN_RE = re.compile(r"[0-9A-Za-z](?:[0-9A-Za-z.,:/\-+%]*[0-9A-Za-z])?")

_MIRRORED = str.maketrans({"(": ")", ")": "(", "[": "]", "]": "[", "{": "}", "}": "{", "<": ">", ">": "<"})


def visual_to_logical(value: str) -> str:
    """Convert a visually ordered RTL field to logical order."""

    if not value:
        return value
    reversed_value = value[::-1].translate(_MIRRORED)
    return _LTR_RUN_RE.sub(lambda match: match.group(0)[::-1], reversed_value)
