"""Raw column type parsing."""

from __future__ import annotations

import re

from reverse_db.core.schemas import NormalizedType

TYPE_PATTERN = re.compile(r"(.+?)\((.*?)\)")


def normalize_type(raw_type: str) -> NormalizedType:
    """Split a raw column type into base type and length.

    ``"varchar(255)"`` becomes ``varchar`` with length 255. Arguments that are
    not a plain integer, such as ``decimal(10,2)``, leave the length unset.

    Args:
        raw_type: Column type as reported by introspection

    Returns:
        NormalizedType with the base type and optional length
    """
    match = TYPE_PATTERN.match(raw_type)
    if match is None:
        return NormalizedType(type=raw_type)

    base, args = match.group(1), match.group(2)
    try:
        length: int | None = int(args)
    except ValueError:
        length = None
    return NormalizedType(type=base, length=length)
