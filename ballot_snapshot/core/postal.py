from __future__ import annotations

import re

from ballot_snapshot.domain.errors import InvalidInput

_ZIP_PATTERN = re.compile(r"[0-9]{5}")


def normalize_postal_code(value: object) -> str:
    """Return a 5-digit US ZIP code or raise :class:`InvalidInput`."""

    if value is None:
        raise InvalidInput("ZIP must be 5 digits")
    candidate = str(value).strip()
    if not _ZIP_PATTERN.fullmatch(candidate):
        raise InvalidInput("ZIP must be 5 digits")
    return candidate
