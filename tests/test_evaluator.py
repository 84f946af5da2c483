import numpy as np

from hyperspace.core import (
    BoardSpec,
    GameConfig,
    GlobalPosition,
    LineKind,
    Player,
    ScoringConfig,
    TopologyRegistry,
    WinEvaluator,
    copy_boards,
    create_empty_boards,
)


def make_evaluator(scoring=None) -> WinEvaluator:
    return WinEvaluator(TopologyRegistry(), scoring)


def empty_boards():
    return create_empty_boards([(4, 4, 4), (4, 4, 4)])


def place(boards, player, *cells):
    for board_id, x, y, z in cells:
        boards[board_id][x, y, z] = int(player)


def test_empty_boards_have_no_winner():
    evaluator = make_evaluator()
    result = evaluator.evaluate(empty_boards(), Player.X)
    assert result.winner is None
    assert result.lines == ()


def test_straight_row_is_standard_line():
    evaluator = make_evaluator()
    boards = empty_boards()
    place(boards, Player.X, (0, 0, 0, 0), (0, 0, 1, 0), (0, 0, 2, 0), (0, 0, 3, 0))

    result = evaluator.evaluate(boards, Player.X)

    assert result.winner is Player.X
    assert len(result.lines) == 1
    assert result.lines[0].kind is LineKind.STANDARD
    assert evaluator.score(result) == 10
    assert evaluator.evaluate(boards, Player.O).winner is None


def test_space_diagonal_earns_3d_bonus():
    evaluator = make_evaluator()
    boards = empty_boards()
    place(boards, Player.O, *[(0, i, i, i) for i in range(4)])

    result = evaluator.evaluate(boards, Player.O)

    assert result.winner is Player.O
    assert [line.kind for line in result.lines] == [LineKind.DIAGONAL_3D]
    assert evaluator.score(result) == 10 + 50


def test_cross_board_line_gets_double_3d_bonus():
    evaluator = make_evaluator(ScoringConfig(stack_cross_board_bonus=False))
    boards = empty_boards()
    place(boards, Player.X, (0, 1, 1, 1), (1, 1, 1, 1), (0, 1, 1, 2), (1, 1, 1, 2))

    result = evaluator.evaluate(boards, Player.X)

    assert result.winner is Player.X
    assert len(result.lines) == 1
    classified = result.lines[0]
    assert classified.kind is LineKind.CROSS_BOARD
    assert classified.spans_depth
    assert evaluator.score(result) - 10 == 2 * 50


def test_cross_board_bonus_stacks_with_depth_check_by_default():
    evaluator = make_evaluator()
    boards = empty_boards()
    place(boards, Player.X, (0, 1, 1, 1), (1, 1, 1, 1), (0, 1, 1, 2), (1, 1, 1, 2))

    assert evaluator.score(evaluator.evaluate(boards, Player.X)) == 10 + 2 * 50 + 50


def test_flat_cross_board_line_gets_no_depth_bonus():
    evaluator = make_evaluator()
    boards = empty_boards()
    place(boards, Player.X, (0, 2, 0, 3), (0, 2, 1, 3), (1, 2, 0, 3), (1, 2, 1, 3))

    result = evaluator.evaluate(boards, Player.X)

    assert [line.kind for line in result.lines] == [LineKind.CROSS_BOARD]
    assert not result.lines[0].spans_depth
    assert evaluator.score(result) == 10 + 100


def test_wrap_around_diagonal_only_counts_on_toroidal_board():
    evaluator = make_evaluator()
    wrapped = [(1, 0, 2, 0), (1, 1, 3, 0), (1, 2, 0, 0), (1, 3, 1, 0)]

    toroidal = empty_boards()
    place(toroidal, Player.X, *wrapped)
    result = evaluator.evaluate(toroidal, Player.X)
    assert result.winner is Player.X
    assert result.lines[0].kind is LineKind.STANDARD

    euclidean = empty_boards()
    place(euclidean, Player.X, *[(0, x, y, z) for _, x, y, z in wrapped])
    assert evaluator.evaluate(euclidean, Player.X).winner is None


def test_opponent_marks_do_not_change_player_result():
    evaluator = make_evaluator()
    rng = np.random.default_rng(7)
    for _ in range(20):
        boards = [rng.integers(0, 3, size=(4, 4, 4)).astype(np.int8) for _ in range(2)]
        relabelled = copy_boards(boards)
        for board in relabelled:
            board[board == int(Player.O)] = 0

        assert evaluator.evaluate(boards, Player.X) == evaluator.evaluate(relabelled, Player.X)


def test_evaluate_is_idempotent_and_read_only():
    evaluator = make_evaluator()
    boards = empty_boards()
    place(boards, Player.O, *[(1, x, 0, 0) for x in range(4)])
    snapshot = copy_boards(boards)

    first = evaluator.evaluate(boards, Player.O)
    second = evaluator.evaluate(boards, Player.O)

    assert first == second
    for before, after in zip(snapshot, boards):
        np.testing.assert_array_equal(before, after)


def test_winner_checks_both_players():
    evaluator = make_evaluator()
    boards = empty_boards()
    assert evaluator.winner(boards) is None
    place(boards, Player.O, *[(0, 3, 3, z) for z in range(4)])
    assert evaluator.winner(boards) is Player.O


def test_full_boards_without_lines_report_no_winner():
    # Two flat 4x4 boards: the second is the first with colours swapped, so
    # no cross-board line can be single-coloured either.
    specs = (BoardSpec(0, 4, 4, 1), BoardSpec(1, 4, 4, 1))
    config = GameConfig(boards=specs)
    evaluator = WinEvaluator(TopologyRegistry(config.boards, config.line_length))
    pattern = np.array(
        [[1, 2, 1, 2], [1, 2, 1, 2], [2, 1, 2, 1], [2, 1, 2, 1]], dtype=np.int8
    ).reshape(4, 4, 1)
    boards = [pattern, (3 - pattern).astype(np.int8)]

    assert evaluator.is_full(boards)
    assert evaluator.evaluate(boards, Player.X).winner is None
    assert evaluator.evaluate(boards, Player.O).winner is None


def test_completion_counts_flag_the_missing_cell():
    evaluator = make_evaluator()
    registry = evaluator.registry
    boards = empty_boards()
    place(boards, Player.O, (0, 0, 0, 0), (0, 0, 1, 0), (0, 0, 2, 0))
    cells = evaluator.flatten(boards)

    counts = evaluator.completion_counts(cells, Player.O)

    assert np.flatnonzero(counts).tolist() == [registry.flat_index(GlobalPosition(0, 0, 3, 0))]
    assert counts.sum() == 1
    assert evaluator.completion_counts(cells, Player.X).sum() == 0
