"""
In-memory setup display.

The pairing subsystem announces the setup code and setup payload that
should currently be shown to the user, and withdraws them once the
accessory is paired. This module keeps the latest announcement so that
the HTTP layer can decide whether a badge can be served.

Nothing here is persisted. A process restart starts with an empty
display.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupDisplaySnapshot:
    setup_code: Optional[str] = None
    setup_payload: Optional[str] = None

    @property
    def setup_code_is_set(self) -> bool:
        return self.setup_code is not None

    @property
    def setup_payload_is_set(self) -> bool:
        return self.setup_payload is not None


class SetupDisplay:
    """Thread-safe holder of the current setup code and setup payload."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = SetupDisplaySnapshot()

    def snapshot(self) -> SetupDisplaySnapshot:
        with self._lock:
            return self._snapshot

    def update(
        self,
        *,
        setup_code: Optional[str],
        setup_payload: Optional[str],
    ) -> SetupDisplaySnapshot:
        """
        Replace the displayed values. ``None`` invalidates a value.
        """
        if setup_code is not None:
            logger.info("Setup code for display: %s", setup_code)
        else:
            logger.info("Setup code for display invalidated.")

        if setup_payload is not None:
            logger.info("Setup payload for QR code display: %s", setup_payload)
        else:
            logger.info("Setup payload for QR code display invalidated.")

        snapshot = SetupDisplaySnapshot(
            setup_code=setup_code,
            setup_payload=setup_payload,
        )
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def clear(self) -> SetupDisplaySnapshot:
        return self.update(setup_code=None, setup_payload=None)
