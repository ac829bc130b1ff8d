"""Parse the comma-separated actor id lists submitted by cast forms."""

from __future__ import annotations

import re
from typing import Iterable

from moviecollection.services.errors import MalformedIdentifier

_KEY_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_identifiers(text: str | None, delimiter: str = ",") -> list[int]:
    """Split ``text`` on ``delimiter`` and parse every segment as an integer key.

    Blank input yields an empty list. A segment that is not an integer
    (including an empty one, as in ``"1,,2"``) raises ``MalformedIdentifier``
    and no keys are returned.
    """

    if text is None or not text.strip():
        return []
    keys: list[int] = []
    for segment in text.split(delimiter):
        candidate = segment.strip()
        if not _KEY_PATTERN.fullmatch(candidate):
            raise MalformedIdentifier(segment)
        keys.append(int(candidate))
    return keys


def join_identifiers(keys: Iterable[int], delimiter: str = ",") -> str:
    return delimiter.join(str(key) for key in keys)
