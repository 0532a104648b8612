"""
QR module matrix and vector path emission.

The QR encoder itself is an external collaborator (the ``qrcode``
library). This module only:

- wraps the encoder output in an immutable ``QRModuleMatrix``
- walks the matrix and emits one closed SVG sub-path per set module

Geometry:
    A one-module border is reserved on every side of the drawing box.
    For a matrix of size ``n`` drawn into width ``W`` at ``(x, y)``::

        scale = W / (n + 2)
        anchor(col, row) = (x + scale + scale * col,
                            y + scale + scale * row)

    Each set module becomes ``M{ax},{ay}h{s}v{s}h-{s}z``. Emission order
    is row-major.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Tuple

import qrcode
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)

QR_BORDER_MODULES = 1

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


# ---------------------------------------------------------------------------
# Module matrix
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QRModuleMatrix:
    """Square, immutable grid of QR modules (True = module set)."""

    rows: Tuple[Tuple[bool, ...], ...]

    def __post_init__(self) -> None:
        size = len(self.rows)
        for index, row in enumerate(self.rows):
            if len(row) != size:
                raise ValueError(
                    f"QR module matrix is not square: row {index} has "
                    f"{len(row)} modules, expected {size}."
                )

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[object]]) -> "QRModuleMatrix":
        return cls(rows=tuple(tuple(bool(cell) for cell in row) for row in rows))

    @property
    def size(self) -> int:
        return len(self.rows)

    def is_set(self, col: int, row: int) -> bool:
        return self.rows[row][col]


def build_qr_matrix(
    text: str,
    *,
    version: int = 3,
    error_correction: str = "Q",
) -> QRModuleMatrix:
    """
    Encode ``text`` as a QR symbol of a fixed version.

    The symbol is produced without a quiet zone; the path emitter
    reserves its own border.

    Raises:
        ValueError: unknown error correction level.
        qrcode.exceptions.DataOverflowError: text does not fit ``version``.
    """
    try:
        level = ERROR_CORRECTION_LEVELS[error_correction]
    except KeyError:
        raise ValueError(
            f"Unsupported QR error correction level '{error_correction}'. "
            f"Allowed values: {sorted(ERROR_CORRECTION_LEVELS)}"
        ) from None

    qr = qrcode.QRCode(
        version=version,
        error_correction=level,
        box_size=1,
        border=0,
    )
    qr.add_data(text)
    qr.make(fit=False)

    return QRModuleMatrix.from_rows(qr.get_matrix())


# ---------------------------------------------------------------------------
# Path emission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QRPathGeometry:
    """Coordinate transform from module grid to drawing space."""

    origin_x: float
    origin_y: float
    scale: float

    @classmethod
    def for_region(
        cls, size: int, x: float, y: float, width: float
    ) -> "QRPathGeometry":
        scale = width / (size + 2 * QR_BORDER_MODULES)
        return cls(
            origin_x=x + QR_BORDER_MODULES * scale,
            origin_y=y + QR_BORDER_MODULES * scale,
            scale=scale,
        )

    def anchor(self, col: int, row: int) -> Tuple[float, float]:
        return (
            self.origin_x + self.scale * col,
            self.origin_y + self.scale * row,
        )


def _rectangle_command(x: float, y: float, width: float, height: float) -> str:
    return f"M{x:.3f},{y:.3f}h{width:.3f}v{height:.3f}h-{width:.3f}z"


def _row_runs(row: Sequence[bool]) -> Iterator[Tuple[int, int]]:
    """Yield ``(start_col, length)`` for each run of set modules."""
    start = None
    for col, is_set in enumerate(row):
        if is_set and start is None:
            start = col
        elif not is_set and start is not None:
            yield start, col - start
            start = None
    if start is not None:
        yield start, len(row) - start


def iter_qr_path_commands(
    matrix: QRModuleMatrix,
    x: float,
    y: float,
    width: float,
    *,
    merge_runs: bool = False,
) -> Iterator[str]:
    """
    Yield SVG path commands drawing ``matrix`` into a ``width`` square.

    By default every set module yields its own closed unit square. With
    ``merge_runs`` horizontally adjacent set modules in a row are drawn
    as a single rectangle; the covered area is identical.
    """
    geometry = QRPathGeometry.for_region(matrix.size, x, y, width)
    scale = geometry.scale

    for row in range(matrix.size):
        if merge_runs:
            for start, length in _row_runs(matrix.rows[row]):
                anchor_x, anchor_y = geometry.anchor(start, row)
                yield _rectangle_command(anchor_x, anchor_y, scale * length, scale)
            continue

        for col in range(matrix.size):
            if matrix.is_set(col, row):
                anchor_x, anchor_y = geometry.anchor(col, row)
                yield _rectangle_command(anchor_x, anchor_y, scale, scale)
