"""
Base-36 numeral decoding.

Setup payloads carry their setup code as a fixed-width, big-endian
base-36 numeral over the alphabet ``0-9A-Z``. This module turns such a
numeral into an unsigned integer.

Every character is resolved through an explicit digit table. Characters
outside the alphabet (including lowercase letters) are rejected rather
than mapped arithmetically.

Explicit non-scope:
- Payload shape validation (see setup_payload)
- Length limits; callers constrain the numeral width
- Encoding integers back into numerals
"""

from typing import Dict

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

_DIGIT_VALUES: Dict[str, int] = {
    character: value for value, character in enumerate(BASE36_ALPHABET)
}


class InvalidDigitCharacterError(ValueError):
    """Raised when a numeral contains a character outside 0-9A-Z."""

    def __init__(self, character: str, position: int) -> None:
        super().__init__(
            f"Invalid base-36 digit {character!r} at position {position}."
        )
        self.character = character
        self.position = position


def base36_to_int(numeral: str) -> int:
    """
    Decode a most-significant-first base-36 numeral.

    Returns ``sum(digit(numeral[L-1-i]) * 36**i)`` for ``i`` in
    ``[0, L)``. An empty numeral decodes to 0.

    Raises:
        InvalidDigitCharacterError: a character is not in ``0-9A-Z``.
    """
    result = 0
    for position, character in enumerate(numeral):
        value = _DIGIT_VALUES.get(character)
        if value is None:
            raise InvalidDigitCharacterError(character, position)
        result = result * 36 + value
    return result
