"""
Badge fingerprinting.

Badges are rendered deterministically from a small set of inputs (setup
payload, style, QR parameters). Hashing the canonical form of those
inputs therefore identifies the rendered document without buffering it,
and the result is exposed as an HTTP ETag.

IMPORTANT DESIGN RULE:
- Canonicalization MUST occur outside this module.
- This module hashes bytes, and bytes only.
"""

import hashlib
from typing import Union


def compute_badge_etag(canonical_bytes: Union[bytes, bytearray]) -> str:
    """
    Compute a strong ETag from canonical badge inputs.

    Returns:
        A quoted entity tag with an explicit algorithm prefix.
        Example: ``"sha256-3b7c0e4c..."``
    """
    if not isinstance(canonical_bytes, (bytes, bytearray)):
        raise TypeError(
            "compute_badge_etag expects canonical bytes, "
            f"got {type(canonical_bytes).__name__}"
        )

    digest = hashlib.sha256(canonical_bytes).hexdigest()
    return f'"sha256-{digest}"'
