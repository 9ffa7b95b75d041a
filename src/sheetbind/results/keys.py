"""Canonical encoding of tensor keys, used to match result entries to rows."""

from typing import Iterable, Optional, Union

from ..outline.models import EPSILON, KeyItem
from ..sheets.models import to_value

EncodedItem = tuple[str, Union[int, str]]
EncodedKey = tuple[EncodedItem, ...]


def encode_item(item: Optional[KeyItem]) -> EncodedItem:
    """
    Encode a single key component.

    Numbers and numeric strings are tagged "n" and rounded to a multiple of
    epsilon, so that 1, 1.0 and "1" encode identically. Other strings are
    tagged "s". A missing component encodes as the empty string.
    """
    value = to_value(item)
    if isinstance(value, str):
        return ("s", value)
    return ("n", round(value / EPSILON))


def encode_key(items: Iterable[Optional[KeyItem]]) -> EncodedKey:
    return tuple(encode_item(item) for item in items)


def describe_key(key: EncodedKey) -> str:
    """Render an encoded key for error messages."""
    parts = []
    for tag, value in key:
        if tag == "n":
            parts.append(f"{value * EPSILON:g}")
        else:
            parts.append(repr(value))
    return "[" + ", ".join(parts) + "]"
