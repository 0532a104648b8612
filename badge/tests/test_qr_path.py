import re

import pytest

from badge.app.services.qr_path import (
    QRModuleMatrix,
    QRPathGeometry,
    build_qr_matrix,
    iter_qr_path_commands,
)

from badge.tests.fixtures.matrix_factory import (
    blank,
    checkerboard,
    count_set,
    filled,
    matrix_from_strings,
    set_cells,
)

COMMAND = re.compile(
    r"^M(-?\d+\.\d{3}),(-?\d+\.\d{3})"
    r"h(\d+\.\d{3})v(\d+\.\d{3})h-(\d+\.\d{3})z$"
)


def _parse(command: str):
    match = COMMAND.match(command)
    assert match, command
    x, y, h, v, back = (float(group) for group in match.groups())
    return x, y, h, v, back


# ------------------------------------------------------------------
# Matrix
# ------------------------------------------------------------------


def test_matrix_rejects_non_square_rows():
    with pytest.raises(ValueError):
        QRModuleMatrix.from_rows([[True, False], [True]])


def test_matrix_is_immutable():
    matrix = checkerboard(3)
    with pytest.raises(AttributeError):
        matrix.rows = ()


def test_matrix_lookup_is_column_then_row():
    matrix = matrix_from_strings(["#..", "...", ".#."])
    assert matrix.is_set(0, 0)
    assert matrix.is_set(1, 2)
    assert not matrix.is_set(2, 1)
    assert count_set(matrix) == 2


def test_qr_collaborator_builds_version_3_symbol():
    matrix = build_qr_matrix("X-HM://000061I911QWT")

    assert matrix.size == 29
    # Finder pattern corners are always dark.
    assert matrix.is_set(0, 0)
    assert matrix.is_set(28, 0)
    assert matrix.is_set(0, 28)


def test_qr_collaborator_rejects_unknown_error_correction():
    with pytest.raises(ValueError):
        build_qr_matrix("X-HM://000061I911QWT", error_correction="X")


# ------------------------------------------------------------------
# Geometry
# ------------------------------------------------------------------


def test_geometry_reserves_one_module_border():
    geometry = QRPathGeometry.for_region(29, 10.0, 74.0, 165.0)

    assert geometry.scale == pytest.approx(165.0 / 31)
    assert geometry.origin_x == pytest.approx(10.0 + 165.0 / 31)
    assert geometry.origin_y == pytest.approx(74.0 + 165.0 / 31)


def test_exact_commands_for_small_matrix():
    matrix = matrix_from_strings(["#.", ".#"])

    commands = list(iter_qr_path_commands(matrix, 0.0, 0.0, 4.0))

    assert commands == [
        "M1.000,1.000h1.000v1.000h-1.000z",
        "M2.000,2.000h1.000v1.000h-1.000z",
    ]


def test_offsets_shift_every_anchor():
    matrix = matrix_from_strings(["#"])

    commands = list(iter_qr_path_commands(matrix, 10.0, 74.0, 165.0))

    assert commands == ["M65.000,129.000h55.000v55.000h-55.000z"]


@pytest.mark.parametrize("size, width", [(21, 165.0), (29, 165.0), (5, 70.0)])
def test_every_square_has_scale_side_and_fits_inside_box(size, width):
    x, y = 10.0, 74.0
    scale = width / (size + 2)
    matrix = filled(size)

    for command in iter_qr_path_commands(matrix, x, y, width):
        ax, ay, h, v, back = _parse(command)
        assert h == pytest.approx(scale, abs=1e-3)
        assert v == pytest.approx(scale, abs=1e-3)
        assert back == pytest.approx(scale, abs=1e-3)

        assert ax >= x + scale - 1e-3
        assert ay >= y + scale - 1e-3
        assert ax + h <= x + width - scale + 1e-3
        assert ay + v <= y + width - scale + 1e-3


def test_one_primitive_per_set_module_in_row_major_order():
    matrix = checkerboard(7)
    width = 90.0
    geometry = QRPathGeometry.for_region(matrix.size, 0.0, 0.0, width)

    commands = list(iter_qr_path_commands(matrix, 0.0, 0.0, width))

    assert len(commands) == count_set(matrix)
    for command, (col, row) in zip(commands, set_cells(matrix)):
        ax, ay, *_ = _parse(command)
        expected_x, expected_y = geometry.anchor(col, row)
        assert ax == pytest.approx(expected_x, abs=1e-3)
        assert ay == pytest.approx(expected_y, abs=1e-3)


def test_blank_matrix_emits_nothing():
    assert list(iter_qr_path_commands(blank(21), 0.0, 0.0, 100.0)) == []


def test_emission_is_deterministic():
    matrix = build_qr_matrix("X-HM://000061I911QWT")

    first = list(iter_qr_path_commands(matrix, 10.0, 74.0, 165.0))
    second = list(iter_qr_path_commands(matrix, 10.0, 74.0, 165.0))

    assert first == second


# ------------------------------------------------------------------
# Run merging
# ------------------------------------------------------------------


def test_merged_runs_cover_the_same_modules():
    matrix = matrix_from_strings(["###.#", ".....", "#.##.", "#####", "....#"])

    commands = list(
        iter_qr_path_commands(matrix, 0.0, 0.0, 7.0, merge_runs=True)
    )

    assert commands == [
        "M1.000,1.000h3.000v1.000h-3.000z",
        "M5.000,1.000h1.000v1.000h-1.000z",
        "M1.000,3.000h1.000v1.000h-1.000z",
        "M3.000,3.000h2.000v1.000h-2.000z",
        "M1.000,4.000h5.000v1.000h-5.000z",
        "M5.000,5.000h1.000v1.000h-1.000z",
    ]

    covered = set()
    for command in commands:
        ax, ay, h, _, _ = _parse(command)
        row = int(round(ay)) - 1
        first_col = int(round(ax)) - 1
        for col in range(first_col, first_col + int(round(h))):
            covered.add((col, row))
    assert covered == set(set_cells(matrix))
