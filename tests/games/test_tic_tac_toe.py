"""
Tests for flow_director.games.tic_tac_toe

Tests TicTacToe rules plus its heuristic scoring and evaluation.
"""

import numpy as np
import pytest

from flow_director.games.tic_tac_toe import BLOCK_SCORE, WIN_SCORE, TicTacToe


@pytest.fixture
def game() -> TicTacToe:
    """Fresh TicTacToe game."""
    return TicTacToe()


def play(game: TicTacToe, moves) -> TicTacToe:
    for r, c in moves:
        game.apply_move(np.array([r, c]))
    return game


class TestInitialization:
    """Initial game state tests."""

    def test_initial_state(self, game: TicTacToe):
        """Game starts with empty board, player 1, not over."""
        assert np.all(game.board == 0)
        assert game.current_player() == 1
        assert game.winner() == 0
        assert game.is_over() is False

    def test_metadata(self, game: TicTacToe):
        """Game metadata is correct."""
        assert game.game_id() == "tic_tac_toe"
        assert game.num_players() == 2
        assert game.opponent_of(1) == 2 and game.opponent_of(2) == 1


class TestRules:
    """Moves, wins and ties."""

    def test_moves_decrease_after_play(self, game: TicTacToe):
        """Valid moves decrease as game progresses."""
        assert len(game.valid_moves()) == 9
        game.apply_move(np.array([0, 0]))
        positions = [(m[0], m[1]) for m in game.valid_moves()]
        assert len(positions) == 8
        assert (0, 0) not in positions

    def test_occupied_raises(self, game: TicTacToe):
        """Moving to occupied cell raises ValueError."""
        game.apply_move(np.array([0, 0]))
        with pytest.raises(ValueError):
            game.apply_move(np.array([0, 0]))

    @pytest.mark.parametrize("winning_cells", [
        [(0, 0), (0, 1), (0, 2)],  # Top row
        [(2, 0), (2, 1), (2, 2)],  # Bottom row
        [(0, 1), (1, 1), (2, 1)],  # Middle column
        [(0, 0), (1, 1), (2, 2)],  # Main diagonal
        [(0, 2), (1, 1), (2, 0)],  # Anti-diagonal
    ])
    def test_win_lines(self, game: TicTacToe, winning_cells):
        """Win lines are detected and end the game."""
        p2_cells = [(r, c) for r in range(3) for c in range(3) if (r, c) not in winning_cells]
        for i, cell in enumerate(winning_cells[:2]):
            play(game, [cell, p2_cells[i]])
        play(game, [winning_cells[2]])

        assert game.is_over()
        assert game.winner() == 1
        assert game.valid_moves() == []

    def test_full_board_tie(self, game: TicTacToe):
        """Full board without winner is a tie."""
        play(game, [(0, 0), (0, 1), (0, 2), (1, 2), (1, 0), (2, 0), (1, 1), (2, 2), (2, 1)])
        assert game.is_over()
        assert game.winner() == 0
        assert game.evaluate(1) == 0.0

    def test_deep_clone_independent(self, game: TicTacToe):
        """Deep clone has independent state."""
        game.apply_move(np.array([0, 0]))
        clone = game.deep_clone()
        clone.apply_move(np.array([1, 1]))
        assert game.board[1, 1] == 0
        assert clone.board[1, 1] == 2


class TestScoring:
    """Heuristic move scores."""

    def test_opening_prefers_centre(self, game: TicTacToe):
        """Centre > corner > edge on an empty board."""
        assert game.score_move(np.array([1, 1])) > game.score_move(np.array([0, 0]))
        assert game.score_move(np.array([0, 0])) > game.score_move(np.array([0, 1]))

    def test_winning_move(self, game: TicTacToe):
        """Completing a line scores the win weight."""
        play(game, [(0, 0), (1, 0), (0, 1), (1, 1)])
        assert game.score_move(np.array([0, 2])) == WIN_SCORE

    def test_block_is_best(self, game: TicTacToe):
        """Blocking the opponent's line beats every other move."""
        play(game, [(0, 0), (1, 0), (2, 2), (1, 1)])
        scores = {(int(m[0]), int(m[1])): game.score_move(m) for m in game.valid_moves()}
        assert scores[(1, 2)] >= BLOCK_SCORE
        assert max(scores, key=scores.get) == (1, 2)


class TestEvaluate:
    """Static evaluation."""

    def test_winner(self, game: TicTacToe):
        """Decided games evaluate to +/-1."""
        play(game, [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)])
        assert game.evaluate(1) == 1.0
        assert game.evaluate(2) == -1.0

    def test_threat_on_move(self, game: TicTacToe):
        """An open two for the side to move is nearly a win."""
        play(game, [(0, 0), (1, 0), (0, 1)])
        # O to move with nothing to finish; X holds one open two
        assert game.evaluate(1) == pytest.approx(0.25)
        game.apply_move(np.array([2, 2]))
        # X to move with an open two
        assert game.evaluate(1) == pytest.approx(0.8)
        assert game.evaluate(2) == pytest.approx(-0.8)

    def test_bounded(self, game: TicTacToe):
        """Evaluations stay in [-1, 1]."""
        rng = np.random.default_rng(0)
        while not game.is_over():
            moves = game.valid_moves()
            game.apply_move(moves[int(rng.integers(len(moves)))])
            assert -1.0 <= game.evaluate(1) <= 1.0
            assert -1.0 <= game.evaluate(2) <= 1.0
