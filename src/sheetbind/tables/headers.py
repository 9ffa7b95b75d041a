"""Header normalization.

Headers are the keys used to match spreadsheet blocks against outline labels
and binding qualifiers. They are case-folded, split into words and
singularized, so that `hotPotatoes`, `Hot potatoes` and `hot_potato` style
spellings line up. A qualifier may be attached either as a parenthesized
suffix (`name (qualifier)`) or after the first underscore (`name_qualifier`).
"""

import re
from typing import NewType

import inflection

from ..errors import EmptyHeaderError

# Always singularized and no-cased.
Header = NewType("Header", str)

_SUFFIX_PARENS_PATTERN = re.compile(r"^([^(]+)\(([^)]+)\)$")
_SEPARATOR_PATTERN = re.compile(r"[\W_]+")


def new_header(raw: str) -> Header:
    """
    Normalize a raw header cell.

    Args:
        raw: Header text as typed in the sheet or declared in the outline

    Returns:
        The canonical header, e.g. "match hint (deficit)"

    Raises:
        EmptyHeaderError: If the text is blank
    """
    text = raw.strip() if raw else ""
    if not text:
        raise EmptyHeaderError()

    match = _SUFFIX_PARENS_PATTERN.match(text)
    if match:
        text = match.group(1)
        suffixes = words(match.group(2))
    elif "_" in text:
        text, _, suffix = text.partition("_")
        suffixes = words(suffix)
    else:
        suffixes = []

    header = " ".join(_singular(w) for w in words(text))
    if not header:
        raise EmptyHeaderError()
    if suffixes:
        header += f" ({' '.join(suffixes)})"
    return Header(header)


def words(text: str) -> list[str]:
    """Split text into lowercase words at camelCase and punctuation boundaries."""
    return [w for w in _SEPARATOR_PATTERN.split(inflection.underscore(text.strip())) if w]


def _singular(word: str) -> str:
    # Very short words (e.g. "s") would otherwise be singularized away.
    return inflection.singularize(word) or word
