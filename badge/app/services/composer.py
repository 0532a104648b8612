"""
Badge composition service.

This module assembles a complete SVG pairing badge from a setup payload:
the static artwork of a registered badge style, the setup code as two
4 digit groups, and the setup payload as a QR symbol.

Design guarantees:
- Deterministic template rendering (Jinja2 + StrictUndefined)
- All validation happens before the first chunk is produced
- No partial document is ever written to a sink

RENDERING CONTRACT:

- A malformed setup payload is treated as absent. Nothing is rendered
  and the caller is told so through the return value.
- A setup code outside [0, 99999999] raises EncodingRangeError.
- A numeral segment outside 0-9A-Z raises InvalidDigitCharacterError.

Trust boundary:
- The QR encoder is an external collaborator. A caller may supply its
  own QRModuleMatrix, which is then used as is.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional, TextIO

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from badge.app.core.config import Settings
from badge.app.registry.registry import BadgeTemplateEntry, get_badge_template
from badge.app.services.qr_path import (
    QRModuleMatrix,
    build_qr_matrix,
    iter_qr_path_commands,
)
from badge.app.services.setup_payload import derive_setup_code, split_setup_code

logger = logging.getLogger(__name__)


class BadgeRenderError(RuntimeError):
    """Raised when a badge template cannot be loaded or rendered."""


class BadgeComposer:
    """
    Renders pairing badges from setup payloads.

    A composer holds no per-badge state; one instance may serve any
    number of concurrent requests.
    """

    def __init__(
        self,
        template_dir: Path,
        *,
        qr_version: int = 3,
        qr_error_correction: str = "Q",
        merge_qr_runs: bool = False,
    ) -> None:
        self.qr_version = qr_version
        self.qr_error_correction = qr_error_correction
        self.merge_qr_runs = merge_qr_runs

        self._env = Environment(
            loader=FileSystemLoader(Path(template_dir)),
            undefined=StrictUndefined,
            autoescape=select_autoescape(
                enabled_extensions=("svg", "svg.jinja"),
                default_for_string=True,
            ),
            keep_trailing_newline=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "BadgeComposer":
        return cls(
            settings.template_dir,
            qr_version=settings.qr_version,
            qr_error_correction=settings.qr_error_correction,
            merge_qr_runs=settings.merge_qr_runs,
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_chunks(
        self,
        setup_payload: str,
        *,
        style: str = "homekit",
        matrix: Optional[QRModuleMatrix] = None,
    ) -> Optional[Iterator[str]]:
        """
        Validate ``setup_payload`` and return an iterator over the badge.

        Returns None when the payload is malformed. Every check runs
        before this method returns, so consuming the iterator only
        streams already-validated content.

        Raises:
            KeyError: unknown badge style.
            EncodingRangeError: setup code exceeds 99999999.
            InvalidDigitCharacterError: numeral segment is not base-36.
            BadgeRenderError: the style's template cannot be loaded.
        """
        code = derive_setup_code(setup_payload)
        if code is None:
            logger.debug("Setup payload rejected as malformed")
            return None

        entry = get_badge_template(style)
        code_first_half, code_second_half = split_setup_code(code)

        if matrix is None:
            matrix = build_qr_matrix(
                setup_payload,
                version=self.qr_version,
                error_correction=self.qr_error_correction,
            )

        template = self._load_template(entry)

        return template.generate(
            code_first_half=code_first_half,
            code_second_half=code_second_half,
            qr_x=entry.qr_x,
            qr_y=entry.qr_y,
            qr_width=entry.qr_width,
            qr_commands=iter_qr_path_commands(
                matrix,
                entry.qr_x,
                entry.qr_y,
                entry.qr_width,
                merge_runs=self.merge_qr_runs,
            ),
        )

    def compose(
        self,
        setup_payload: str,
        sink: TextIO,
        *,
        style: str = "homekit",
        matrix: Optional[QRModuleMatrix] = None,
    ) -> bool:
        """
        Stream a badge into ``sink``.

        Returns False, writing nothing, when the payload is malformed.
        Raises the same errors as render_chunks(), also before writing.
        """
        chunks = self.render_chunks(setup_payload, style=style, matrix=matrix)
        if chunks is None:
            return False

        for chunk in chunks:
            sink.write(chunk)
        return True

    def render(
        self,
        setup_payload: str,
        *,
        style: str = "homekit",
        matrix: Optional[QRModuleMatrix] = None,
    ) -> Optional[str]:
        """Return the complete badge document, or None if the payload is malformed."""
        chunks = self.render_chunks(setup_payload, style=style, matrix=matrix)
        if chunks is None:
            return None
        return "".join(chunks)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_template(self, entry: BadgeTemplateEntry):
        try:
            return self._env.get_template(entry.template_path)
        except TemplateError as exc:
            raise BadgeRenderError(
                f"Badge template '{entry.template_path}' for style "
                f"'{entry.slug}' could not be loaded: {exc}"
            ) from exc
