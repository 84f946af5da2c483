import pytest

from hyperspace.core import (
    BoardSpec,
    ConfigurationError,
    GlobalPosition,
    LineFamily,
    TopologyRegistry,
)


def default_registry() -> TopologyRegistry:
    return TopologyRegistry()


def test_euclidean_board_has_classic_76_lines():
    registry = default_registry()
    lines = registry.lines_for(0)

    assert len(lines) == 76
    families = [line.family for line in lines]
    assert families.count(LineFamily.AXIS) == 48
    assert families.count(LineFamily.PLANAR_DIAGONAL) == 24
    assert families.count(LineFamily.SPACE_DIAGONAL) == 4


def test_wrapped_board_adds_broken_diagonals():
    registry = default_registry()
    lines = registry.lines_for(1)

    # 48 axis, 72 planar and 16 space diagonals once the column axis wraps.
    assert len(lines) == 136
    assert sum(1 for line in lines if line.family is LineFamily.SPACE_DIAGONAL) == 16


def test_no_duplicate_or_out_of_range_lines():
    registry = default_registry()
    for line in registry.all_lines():
        assert len(line) == registry.line_length
        assert len(set(line.positions)) == registry.line_length
        assert all(registry.contains(position) for position in line.positions)

    keys = [line.key for line in registry.all_lines()]
    assert len(keys) == len(set(keys))


def test_enumeration_is_deterministic():
    assert default_registry().all_lines() == default_registry().all_lines()


def test_cross_board_lines_pair_matching_segments():
    registry = default_registry()
    cross = registry.cross_board_lines()

    # Every adjacent pair of cells along the 13 directions of a 4x4x4 cube.
    assert len(cross) == 468
    for line in cross:
        assert line.family is LineFamily.CROSS_BOARD
        assert line.board_ids == (0, 1)
        first, second = line.positions[:2], line.positions[2:]
        assert [p.coords for p in first] == [p.coords for p in second]

    expected = frozenset({
        GlobalPosition(0, 1, 1, 1),
        GlobalPosition(0, 1, 1, 2),
        GlobalPosition(1, 1, 1, 1),
        GlobalPosition(1, 1, 1, 2),
    })
    assert expected in {line.key for line in cross}


def test_no_cross_board_lines_when_boards_do_not_divide_length():
    boards = [BoardSpec(i) for i in range(3)]
    registry = TopologyRegistry(boards, line_length=4)
    assert registry.cross_board_lines() == ()


def test_normalize_wraps_only_flagged_axes():
    registry = default_registry()

    assert registry.normalize(1, 0, 5, 0) == GlobalPosition(1, 0, 1, 0)
    assert registry.normalize(1, 0, -1, 3) == GlobalPosition(1, 0, 3, 3)
    assert registry.normalize(0, 0, 5, 0) is None
    assert registry.normalize(1, 4, 0, 0) is None


def test_wrapped_lines_follow_normalize():
    registry = default_registry()
    lines = {line.key for line in registry.lines_for(1)}

    # Planar diagonal starting at y=2 that crosses the wrapped column seam.
    expected = frozenset(registry.normalize(1, step, 2 + step, 0) for step in range(4))
    assert expected in lines
    assert GlobalPosition(1, 3, 1, 0) in expected
    for line in registry.lines_for(1):
        for position in line:
            assert registry.normalize(position.board_id, *position.coords) == position


def test_flat_index_follows_board_then_coordinate_order():
    registry = default_registry()

    assert registry.cell_count == 128
    assert registry.flat_index(GlobalPosition(0, 0, 0, 0)) == 0
    assert registry.flat_index(GlobalPosition(0, 0, 0, 1)) == 1
    assert registry.flat_index(GlobalPosition(0, 1, 0, 0)) == 16
    assert registry.flat_index(GlobalPosition(1, 0, 0, 0)) == 64
    assert registry.position_at(127) == GlobalPosition(1, 3, 3, 3)


def test_lines_through_cell_match_line_membership():
    registry = default_registry()
    corner = GlobalPosition(0, 0, 0, 0)
    through = registry.lines_through(registry.flat_index(corner))
    lines = registry.all_lines()

    assert all(corner in lines[i].positions for i in through)
    in_board = [i for i in through if not lines[i].is_cross_board]
    assert len(in_board) == 7


@pytest.mark.parametrize("dims", [(0, 4, 4), (4, -1, 4), (4, 4, 0)])
def test_non_positive_dimensions_are_rejected(dims):
    rows, cols, depth = dims
    with pytest.raises(ConfigurationError):
        BoardSpec(0, rows, cols, depth)


def test_unknown_board_id_is_rejected():
    with pytest.raises(ConfigurationError):
        default_registry().lines_for(5)
