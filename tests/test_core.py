from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from blockfall.game.core import (
    ActionType,
    GameAction,
    create_initial_state,
    hard_drop,
    lock_piece,
    move_left,
    move_right,
    reduce,
    render_grid,
    rotate,
    soft_drop,
    tick,
)
from blockfall.game.pieces import Piece, PieceBag, PieceKind, create_piece
from blockfall.storage.records import AISettings, GameSettings

from conftest import all_but, make_board


def test_initial_state():
    state = create_initial_state(GameSettings(start_level=4), bag=PieceBag(seed=1))
    assert state.board.shape == (20, 10)
    assert not state.board.any()
    assert state.current is not None and state.next is not None
    assert (state.score, state.level, state.start_level, state.lines_cleared) == (0, 4, 4, 0)
    assert not state.game_over and not state.paused and not state.ai_active


def test_initial_state_follows_ai_setting():
    state = create_initial_state(GameSettings(ai=AISettings(enabled=True)), seed=3)
    assert state.ai_active


def test_first_two_pieces_come_from_the_bag():
    bag = PieceBag(seed=9)
    expected = bag.copy()
    state = create_initial_state(bag=bag)
    assert state.current.kind == expected.draw()
    assert state.next.kind == expected.draw()


def test_move_left_and_right(make_state):
    state = make_state()
    assert move_left(state).current.x == 2
    assert move_right(state).current.x == 4
    assert state.current.x == 3


def test_move_into_wall_is_noop(make_state):
    state = make_state()
    state = replace(state, current=state.current.at(0, 5))
    assert move_left(state) is state


def test_move_into_blocks_is_noop(make_state):
    state = make_state(board=make_board({1: [6]}))
    assert move_right(state) is state


def test_rotate_in_place(make_state):
    state = make_state()
    rotated = rotate(state)
    assert rotated.current.rotation == 1
    assert (rotated.current.x, rotated.current.y) == (3, 0)


def test_rotate_counter_clockwise(make_state):
    assert rotate(make_state(), -1).current.rotation == 3


def test_rotate_uses_wall_kick(make_state):
    # vertical I hugging the left wall cannot turn flat without moving right two columns
    state = make_state(kind=PieceKind.I)
    state = replace(state, current=Piece(PieceKind.I, 1, -2, 5))
    rotated = rotate(state)
    assert rotated.current.rotation == 2
    assert (rotated.current.x, rotated.current.y) == (0, 5)


def test_wall_kick_prefers_left_before_right(make_state):
    # T at the right wall in rotation 3 (column 2 empty) turning to rotation 0 needs one column left
    state = make_state()
    state = replace(state, current=Piece(PieceKind.T, 3, 8, 5))
    rotated = rotate(state)
    assert rotated.current.rotation == 0
    assert rotated.current.x == 7


def test_rotation_rejected_when_nothing_fits(make_state):
    piece = Piece(PieceKind.T, 0, 3, 5)
    board = np.full((20, 10), int(PieceKind.O), dtype=np.int8)
    for x, y in piece.cells():
        board[y, x] = 0
    board.setflags(write=False)
    state = replace(make_state(board=board), current=piece)
    assert rotate(state) is state


def test_soft_drop_moves_down_and_scores(make_state):
    state = make_state()
    dropped = soft_drop(state)
    assert dropped.current.y == 1
    assert dropped.score == state.score + 1


def test_tick_matches_soft_drop(make_state):
    state = make_state()
    assert tick(state).current == soft_drop(state).current
    assert tick(state).score == soft_drop(state).score


def test_soft_drop_locks_when_landed(make_state):
    state = make_state()
    landed = replace(state, current=state.current.at(3, 18))
    locked = soft_drop(landed)
    assert locked.current is state.next
    assert locked.next is not None
    assert int((locked.board > 0).sum()) == 4
    assert locked.score == state.score


def test_hard_drop_scores_distance_and_locks(make_state):
    state = make_state(kind=PieceKind.O)
    dropped = hard_drop(state)
    assert dropped.score == 18 * 2
    assert dropped.board[19, 3] == dropped.board[18, 4] == int(PieceKind.O)
    assert dropped.current is state.next


def test_hard_drop_tetris(make_state):
    rows = {y: all_but(0) for y in range(16, 20)}
    state = make_state(board=make_board(rows), kind=PieceKind.I)
    state = replace(state, current=Piece(PieceKind.I, 1, -2, 0))
    dropped = hard_drop(state)
    assert dropped.lines_cleared == 4
    assert dropped.score == 800 + 16 * 2
    assert not dropped.board.any()
    assert not dropped.game_over


def test_line_score_uses_level_before_level_up(make_state):
    state = make_state(board=make_board({19: all_but(3, 4)}), kind=PieceKind.O, lines_cleared=9)
    state = replace(state, current=state.current.at(3, 18))
    locked = lock_piece(state)
    assert locked.lines_cleared == 10
    assert locked.score == 100
    assert locked.level == 2


def test_level_derives_from_start_level(make_state):
    state = make_state(board=make_board({19: all_but(3, 4)}), kind=PieceKind.O, level=5, start_level=5, lines_cleared=19)
    state = replace(state, current=state.current.at(3, 18))
    locked = lock_piece(state)
    assert locked.score == 500
    assert locked.level == 7


def test_lock_in_top_row_ends_game(make_state):
    state = make_state(kind=PieceKind.O)
    locked = lock_piece(state)
    assert locked.game_over


def test_clearing_the_top_rows_saves_the_game(make_state):
    state = make_state(board=make_board({0: all_but(0, 1), 1: all_but(0, 1)}), kind=PieceKind.O)
    state = replace(state, current=Piece(PieceKind.O, 0, 0, 0))
    locked = lock_piece(state)
    assert locked.lines_cleared == 2
    assert locked.score == 300
    assert not locked.game_over


def test_transitions_do_not_mutate_input(make_state):
    state = make_state()
    board_before = state.board.copy()
    piece_before = state.current
    for fn in (move_left, move_right, rotate, soft_drop, hard_drop):
        fn(state)
    assert np.array_equal(state.board, board_before)
    assert state.current == piece_before
    assert not state.board.flags.writeable


def test_lock_leaves_bag_of_previous_state_untouched(make_state):
    state = make_state()
    remaining = len(state.bag)
    hard_drop(state)
    hard_drop(state)
    assert len(state.bag) == remaining
    assert hard_drop(state).next.kind == hard_drop(state).next.kind


@pytest.mark.parametrize(
    "action",
    [ActionType.MOVE_LEFT, ActionType.MOVE_RIGHT, ActionType.ROTATE, ActionType.SOFT_DROP, ActionType.HARD_DROP, ActionType.TICK],
)
def test_gameplay_ignored_while_paused_or_over(make_state, action):
    paused = make_state(paused=True)
    over = make_state(game_over=True)
    assert reduce(paused, GameAction(action)) is paused
    assert reduce(over, GameAction(action)) is over


def test_reduce_dispatches_moves(make_state):
    state = make_state()
    assert reduce(state, GameAction(ActionType.MOVE_LEFT)).current.x == 2
    assert reduce(state, GameAction(ActionType.ROTATE)).current.rotation == 1
    assert reduce(state, GameAction(ActionType.TICK)).current.y == 1
    assert reduce(state, GameAction(ActionType.HARD_DROP)).current is state.next


def test_pause_resume_and_game_over(make_state):
    state = make_state()
    paused = reduce(state, GameAction(ActionType.PAUSE))
    assert paused.paused
    assert not reduce(paused, GameAction(ActionType.RESUME)).paused
    assert reduce(state, GameAction(ActionType.GAME_OVER)).game_over


def test_toggle_ai(make_state):
    state = make_state()
    assert reduce(state, GameAction.toggle_ai(True)).ai_active
    assert not reduce(state, GameAction.toggle_ai(False)).ai_active


@pytest.mark.parametrize("factory", [GameAction.restart, GameAction.new_game])
def test_restart_resets_everything(make_state, factory):
    state = make_state(board=make_board({19: [0]}), score=900, lines_cleared=12, level=2, game_over=True)
    fresh = reduce(state, factory(GameSettings(start_level=3)))
    assert not fresh.board.any()
    assert (fresh.score, fresh.lines_cleared, fresh.level, fresh.start_level) == (0, 0, 3, 3)
    assert not fresh.game_over and not fresh.paused
    assert fresh.current is not None and fresh.next is not None


def test_render_grid_with_ghost(make_state):
    state = make_state()
    grid = render_grid(state, show_ghost=True)
    kind = int(PieceKind.T)
    assert int((grid == kind).sum()) == 4
    assert int((grid == -kind).sum()) == 4
    assert (grid[18:] == -kind).sum() == 4
    assert not state.board.any()


def test_render_grid_without_ghost(make_state):
    grid = render_grid(make_state(), show_ghost=False)
    assert int((grid < 0).sum()) == 0
    assert int((grid > 0).sum()) == 4


def test_render_grid_hides_ghost_when_landed(make_state):
    state = make_state(kind=PieceKind.O)
    state = replace(state, current=state.current.at(3, 18))
    assert int((render_grid(state) < 0).sum()) == 0
