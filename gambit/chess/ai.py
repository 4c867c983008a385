"""
AI move selection
----

No search tree: every legal move gets played on a copy of the board and the resulting position is scored once.
The difficulty tier only decides how much randomness goes into picking from the ranked list.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from gambit.chess.board import Board
from gambit.chess.castling import CastlingRights
from gambit.chess.evaluation import evaluate
from gambit.chess.moves import LastMove, Move
from gambit.chess.rules import all_legal_moves, play_on_board
from gambit.core.shared_types import Color, Difficulty, PieceType

logger = logging.getLogger(__name__)

CAPTURE_BONUS_FACTOR = 0.5
PROMOTION_BONUS: dict[PieceType, float] = {
    PieceType.QUEEN: 8,
    PieceType.ROOK: 4,
    PieceType.BISHOP: 2,
    PieceType.KNIGHT: 2,
}
# Moves scoring within this margin of the best move count as equally good for the expert tier.
EXPERT_MARGIN = 0.1


@dataclass(frozen=True)
class ScoredMove:
    move: Move
    score: float


def score_move(
    board: Board, color: Color, move: Move, last_move: Optional[LastMove] = None
) -> float:
    """
    Evaluation of the board after the move, plus:
    * half the value of whatever got taken (on top of the material swing already in the evaluation)
    * a bonus for the piece promoted into
    """
    simulated = play_on_board(board, move, last_move)
    score = evaluate(simulated.board, color)
    if move.promotion is not None:
        score += PROMOTION_BONUS[move.promotion]
    if simulated.captured is not None:
        score += simulated.captured.value * CAPTURE_BONUS_FACTOR
    return score


def rank_moves(
    board: Board,
    color: Color,
    last_move: Optional[LastMove] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[ScoredMove]:
    """All legal moves (promotions expanded), best first. Ties keep generation order."""
    candidates = all_legal_moves(
        board, color, last_move, castling_rights, expand_promotions=True
    )
    scored = [
        ScoredMove(move, score_move(board, color, move, last_move))
        for move in candidates
    ]
    return sorted(scored, key=lambda scored_move: scored_move.score, reverse=True)


# --- DIFFICULTY TIERS ---
def _pick_top(ranked: list[ScoredMove], top_n: int, rng: random.Random) -> ScoredMove:
    """Uniform pick among the `top_n` best moves (or all of them, if there are fewer)"""
    return ranked[rng.randrange(min(len(ranked), top_n))]


def _pick_easy(ranked: list[ScoredMove], rng: random.Random) -> ScoredMove:
    """30%: the best move. Otherwise one of the top 5."""
    if rng.random() < 0.3:
        return ranked[0]
    return _pick_top(ranked, 5, rng)


def _pick_medium(ranked: list[ScoredMove], rng: random.Random) -> ScoredMove:
    """50%: one of the top 3. Otherwise one of the top 8."""
    if rng.random() < 0.5:
        return _pick_top(ranked, 3, rng)
    return _pick_top(ranked, 8, rng)


def _pick_hard(ranked: list[ScoredMove], rng: random.Random) -> ScoredMove:
    """80%: one of the top 2. Otherwise one of the top 4."""
    if rng.random() < 0.8:
        return _pick_top(ranked, 2, rng)
    return _pick_top(ranked, 4, rng)


def _pick_expert(ranked: list[ScoredMove], rng: random.Random) -> ScoredMove:
    """Always (one of) the best move(s): anything scoring within EXPERT_MARGIN of the best."""
    best_score = ranked[0].score
    best_moves = [
        scored for scored in ranked if best_score - scored.score < EXPERT_MARGIN
    ]
    return rng.choice(best_moves)


SelectionFn = Callable[[list[ScoredMove], random.Random], ScoredMove]
SELECTION_RULES: dict[Difficulty, SelectionFn] = {
    Difficulty.EASY: _pick_easy,
    Difficulty.MEDIUM: _pick_medium,
    Difficulty.HARD: _pick_hard,
    Difficulty.EXPERT: _pick_expert,
}


def select_move(
    board: Board,
    color: Color,
    difficulty: Difficulty,
    last_move: Optional[LastMove] = None,
    castling_rights: Optional[CastlingRights] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """
    Pick a move for `color`. Returns None if there is no legal move (game over).

    The board is only read: every candidate is scored on its own copy.
    """
    ranked = rank_moves(board, color, last_move, castling_rights)
    if not ranked:
        return None

    rng = rng or random.Random()
    selected = SELECTION_RULES[Difficulty(difficulty)](ranked, rng)
    logger.debug(
        "%s AI (%s) picked %s (score %.2f, best %.2f, %d candidates)",
        color,
        difficulty,
        selected.move.to_uci(),
        selected.score,
        ranked[0].score,
        len(ranked),
    )
    return selected.move
