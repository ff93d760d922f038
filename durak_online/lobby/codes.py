"""
Human-readable lobby join codes.

Codes avoid characters that are easy to confuse when read aloud or typed
(I, O, 0 and 1).

>>> code = generate_lobby_code(rng=random.Random(3))
>>> len(code)
6
>>> normalize_lobby_code("  ab3k9z ")
'AB3K9Z'
"""

import random
from typing import Any, Container, Optional

LOBBY_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
LOBBY_CODE_LENGTH = 6
MIN_LOBBY_CODE_LENGTH = 4


def generate_lobby_code(
    existing: Container[str] = (),
    rng: Optional[random.Random] = None,
    length: int = LOBBY_CODE_LENGTH,
) -> str:
    """Draw random codes until one is not in `existing`."""
    rng = rng or random.Random()
    while True:
        code = "".join(rng.choice(LOBBY_CODE_ALPHABET) for _ in range(length))
        if code not in existing:
            return code


def normalize_lobby_code(code: Any) -> str:
    """Strip whitespace and upper-case a code typed by a user."""
    if code is None:
        return ""
    return str(code).strip().upper()
