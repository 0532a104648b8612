from badge.app.services.base36 import BASE36_ALPHABET


# ------------------------------------------------------------------
# Setup payload construction
#
# Builds payloads from known integer values so that masking and
# range checks can be exercised on exact inputs.
# ------------------------------------------------------------------

def int_to_base36(value: int, width: int = 0) -> str:
    """
    Encode a non-negative integer as a base-36 numeral.

    The result is left-padded with ``0`` to at least ``width`` characters.
    """
    if value < 0:
        raise ValueError("Only non-negative integers can be encoded.")

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])

    numeral = "".join(reversed(digits)) or "0"
    return numeral.rjust(width, "0")


def payload_for_value(value: int, flags: str = "1QWT") -> str:
    return "X-HM://" + int_to_base36(value, width=9) + flags
