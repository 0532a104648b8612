"""
Setup payload parsing and setup code derivation.

A setup payload is a 20 character URI of the form::

    X-HM://<9 base-36 digits><4 flag characters>

The numeral segment encodes a 64-bit value whose low 27 bits carry the
8 digit setup code. Flags are not interpreted here.

Payloads that fail the length or prefix gate are treated as absent
(``None``), never as errors. A derived code above 99999999 is an
encoding error and is never clamped.
"""

from typing import Optional, Tuple

from badge.app.services.base36 import base36_to_int

SETUP_PAYLOAD_PREFIX = "X-HM://"
SETUP_PAYLOAD_LENGTH = 20

NUMERAL_OFFSET = len(SETUP_PAYLOAD_PREFIX)
NUMERAL_LENGTH = 9

SETUP_CODE_MASK = 0x7FFFFFF
MAX_SETUP_CODE = 99999999
SETUP_CODE_DIGITS = 8


class EncodingRangeError(ValueError):
    """Raised when a masked setup code exceeds 99999999."""

    def __init__(self, code: int) -> None:
        super().__init__(
            f"Code {code} exceeds the limits of a valid setup code."
        )
        self.code = code


def is_setup_payload(candidate: str) -> bool:
    """Return True if ``candidate`` passes the length and prefix gate."""
    return (
        isinstance(candidate, str)
        and len(candidate) == SETUP_PAYLOAD_LENGTH
        and candidate.startswith(SETUP_PAYLOAD_PREFIX)
    )


def extract_numeral_segment(setup_payload: str) -> Optional[str]:
    """Return the 9 character numeral segment, or None if malformed."""
    if not is_setup_payload(setup_payload):
        return None
    return setup_payload[NUMERAL_OFFSET:NUMERAL_OFFSET + NUMERAL_LENGTH]


def code_from_setup_payload(setup_payload: str) -> Optional[int]:
    """
    Extract the masked setup code candidate from a setup payload.

    Returns None when the payload is malformed. The returned value is
    NOT range checked; see derive_setup_code().

    Raises:
        InvalidDigitCharacterError: the numeral segment is not base-36.
    """
    numeral = extract_numeral_segment(setup_payload)
    if numeral is None:
        return None
    return base36_to_int(numeral) & SETUP_CODE_MASK


def derive_setup_code(setup_payload: str) -> Optional[int]:
    """
    Extract and range check the setup code of a setup payload.

    Returns None when the payload is malformed.

    Raises:
        InvalidDigitCharacterError: the numeral segment is not base-36.
        EncodingRangeError: the masked code exceeds 99999999.
    """
    code = code_from_setup_payload(setup_payload)
    if code is None:
        return None
    if code > MAX_SETUP_CODE:
        raise EncodingRangeError(code)
    return code


def format_setup_code(code: int) -> str:
    """Format a setup code as exactly 8 zero-padded decimal digits."""
    if not 0 <= code <= MAX_SETUP_CODE:
        raise EncodingRangeError(code)
    return f"{code:0{SETUP_CODE_DIGITS}d}"


def split_setup_code(code: int) -> Tuple[str, str]:
    """Split a setup code into the two 4 digit groups shown on a badge."""
    digits = format_setup_code(code)
    return digits[:4], digits[4:8]
