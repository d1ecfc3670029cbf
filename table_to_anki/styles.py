"""
Inline markdown emphasis helpers.

Two small transforms applied to table cells: one renders emphasis as HTML
for display fields, the other strips emphasis for key fields (the Word
column, which is compared and listed in "Related").
"""

import re

BOLD_RE = re.compile(r'\*\*(.*?)\*\*')
ITALIC_STAR_RE = re.compile(r'\*(.*?)\*')
ITALIC_UNDERSCORE_RE = re.compile(r'_(.*?)_')


def to_rich_text(text: str) -> str:
    """
    Convert emphasis markup to Anki HTML.

    ``**x**`` → ``<b>x</b>``, then ``*x*`` → ``<i>x</i>``, then
    ``_x_`` → ``<i>x</i>``. Each step runs on the output of the previous
    one, so overlapping markers (e.g. ``***x***``) are not handled the way a
    full markdown renderer would.
    """
    converted = BOLD_RE.sub(r'<b>\1</b>', text)
    converted = ITALIC_STAR_RE.sub(r'<i>\1</i>', converted)
    converted = ITALIC_UNDERSCORE_RE.sub(r'<i>\1</i>', converted)
    return converted


def to_plain_key(text: str) -> str:
    """
    Strip ``**x**`` and ``_x_`` emphasis, leaving the inner text.

    Single-asterisk emphasis (``*x*``) is left untouched.
    """
    converted = BOLD_RE.sub(r'\1', text)
    converted = ITALIC_UNDERSCORE_RE.sub(r'\1', converted)
    return converted
