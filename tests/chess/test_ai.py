"""Unit tests for /gambit/chess/ai.py"""

import random
from unittest.mock import Mock

import pytest

from gambit.chess.ai import (
    SELECTION_RULES,
    ScoredMove,
    rank_moves,
    score_move,
    select_move,
)
from gambit.chess.board import Board
from gambit.chess.castling import castling_from_fen
from gambit.chess.moves import LastMove, Move
from gambit.chess.pieces import Piece
from gambit.chess.rules import all_legal_moves
from gambit.chess.square import Square
from gambit.core.shared_types import Color, Difficulty, PieceType


def _sq(name: str) -> Square:
    return Square.from_algebraic(name)


def _mock_rng(random_value: float, index: int = 0) -> Mock:
    rng = Mock(spec=random.Random)
    rng.random.return_value = random_value
    rng.randrange.return_value = index
    return rng


@pytest.fixture
def ranked() -> list[ScoredMove]:
    """10 moves with strictly decreasing scores"""
    return [
        ScoredMove(Move(_sq("a2"), Square(1, 3 + (i % 5))), 10.0 - i) for i in range(10)
    ]


# --- SCORING ---
def test_capture_bonus() -> None:
    """Taking the queen: material swing in the evaluation plus half the queen's value."""
    board = Board.from_fen("4k3/8/8/3q4/8/8/8/3RK3")
    assert score_move(board, Color.WHITE, Move(_sq("d1"), _sq("d5"))) == pytest.approx(9.5)
    assert score_move(board, Color.WHITE, Move(_sq("d1"), _sq("d4"))) == pytest.approx(-4.0)


def test_en_passant_counts_as_capture() -> None:
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    last_move = LastMove(_sq("d7"), _sq("d5"), Piece.from_fen("p"), True)
    en_passant = score_move(board, Color.WHITE, Move(_sq("e5"), _sq("d6")), last_move)
    push = score_move(board, Color.WHITE, Move(_sq("e5"), _sq("e6")), last_move)
    # both pushes land 4 ranks up. Taking removes a black pawn (1 + 0.2 advancement) and adds half its value
    assert en_passant - push == pytest.approx(1.7)


def test_promotion_bonus() -> None:
    board = Board.from_fen("4k3/P7/8/8/8/8/8/4K3")
    queen = score_move(board, Color.WHITE, Move(_sq("a7"), _sq("a8"), PieceType.QUEEN))
    knight = score_move(board, Color.WHITE, Move(_sq("a7"), _sq("a8"), PieceType.KNIGHT))
    assert queen == pytest.approx(9 + 8)
    assert knight == pytest.approx(3 + 2)


def test_rank_moves_best_first() -> None:
    board = Board.starting_position()
    rights = castling_from_fen("KQkq")
    ranking = rank_moves(board, Color.WHITE, None, rights)
    assert len(ranking) == len(all_legal_moves(board, Color.WHITE, None, rights))
    scores = [scored.score for scored in ranking]
    assert scores == sorted(scores, reverse=True)


def test_rank_moves_expands_promotions() -> None:
    board = Board.from_fen("4k3/P7/8/8/8/8/8/4K3")
    promotions = [
        scored.move.promotion
        for scored in rank_moves(board, Color.WHITE)
        if scored.move.from_square == _sq("a7")
    ]
    assert promotions == [PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT]


# --- DIFFICULTY TIERS ---
def test_easy_best_move(ranked: list[ScoredMove]) -> None:
    rng = _mock_rng(0.1)
    assert SELECTION_RULES[Difficulty.EASY](ranked, rng) == ranked[0]
    rng.randrange.assert_not_called()


def test_easy_top_five(ranked: list[ScoredMove]) -> None:
    rng = _mock_rng(0.9, index=4)
    assert SELECTION_RULES[Difficulty.EASY](ranked, rng) == ranked[4]
    rng.randrange.assert_called_once_with(5)


@pytest.mark.parametrize(
    "difficulty, random_value, top_n",
    [
        (Difficulty.MEDIUM, 0.2, 3),
        (Difficulty.MEDIUM, 0.7, 8),
        (Difficulty.HARD, 0.5, 2),
        (Difficulty.HARD, 0.9, 4),
    ],
)
def test_tier_candidate_pool(
    ranked: list[ScoredMove], difficulty: Difficulty, random_value: float, top_n: int
) -> None:
    rng = _mock_rng(random_value, index=top_n - 1)
    assert SELECTION_RULES[difficulty](ranked, rng) == ranked[top_n - 1]
    rng.randrange.assert_called_once_with(top_n)


def test_candidate_pool_limited_by_number_of_moves(ranked: list[ScoredMove]) -> None:
    rng = _mock_rng(0.7, index=1)
    assert SELECTION_RULES[Difficulty.MEDIUM](ranked[:2], rng) == ranked[1]
    rng.randrange.assert_called_once_with(2)


def test_expert_picks_among_equally_good_moves() -> None:
    moves = [
        ScoredMove(Move(_sq("a2"), _sq("a3")), 10.0),
        ScoredMove(Move(_sq("b2"), _sq("b3")), 9.95),
        ScoredMove(Move(_sq("c2"), _sq("c3")), 9.8),
        ScoredMove(Move(_sq("d2"), _sq("d3")), 5.0),
    ]
    rng = Mock(spec=random.Random)
    rng.choice.side_effect = lambda candidates: candidates[-1]
    assert SELECTION_RULES[Difficulty.EXPERT](moves, rng) == moves[1]
    rng.choice.assert_called_once_with(moves[:2])


# --- SELECT MOVE ---
@pytest.mark.parametrize("seed", range(5))
def test_expert_returns_unique_best_move(seed: int) -> None:
    board = Board.from_fen("4k3/8/8/3q4/8/8/8/3RK3")
    move = select_move(board, Color.WHITE, Difficulty.EXPERT, rng=random.Random(seed))
    assert move == Move(_sq("d1"), _sq("d5"))


def test_expert_promotes_to_queen(rng: random.Random) -> None:
    board = Board.from_fen("4k3/P7/8/8/8/8/8/4K3")
    move = select_move(board, Color.WHITE, Difficulty.EXPERT, rng=rng)
    assert move == Move(_sq("a7"), _sq("a8"), PieceType.QUEEN)


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_every_tier_returns_a_legal_move(difficulty: Difficulty, rng: random.Random) -> None:
    board = Board.starting_position()
    rights = castling_from_fen("KQkq")
    legal = all_legal_moves(board, Color.BLACK, None, rights)
    for _ in range(10):
        move = select_move(board, Color.BLACK, difficulty, None, rights, rng)
        assert move in legal


def test_select_move_does_not_change_board(rng: random.Random) -> None:
    board = Board.starting_position()
    before = board.to_fen()
    _ = select_move(board, Color.WHITE, Difficulty.MEDIUM, rng=rng)
    assert board.to_fen() == before


def test_no_move_without_legal_moves(rng: random.Random) -> None:
    stalemate = Board.from_fen("k7/2Q5/1K6/8/8/8/8/8")
    assert select_move(stalemate, Color.BLACK, Difficulty.EXPERT, rng=rng) is None
