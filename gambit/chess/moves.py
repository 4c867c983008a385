"""
Piece geometry: where a piece may go, and which squares it attacks.

Each piece type gets an entry in two lookup tables:
* MOVEMENT_RULES: pseudo-legal destinations (occupancy matters, king safety does not)
* ATTACK_RULES: can a piece of that type, of a given color, take on a given square?

Whether a move leaves the own king in check is decided in rules.py.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from gambit.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from gambit.chess.square import BOARD_DIMENSIONS, Square
from gambit.core.shared_types import Color, PieceType


class Board(Protocol):
    """Read-only view on a board: all the geometry needs."""

    def piece_at(self, square: Square) -> Optional[Piece]: ...


# (delta file, delta rank)
Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, -1), (-1, 1)]
STRAIGHTS: list[Vector] = [(0, 1), (1, 0), (0, -1), (-1, 0)]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


@dataclass(frozen=True)
class Move:
    """A request to move whatever stands on `from_square` to `to_square`."""

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Parse UCI notation: origin and destination square, plus an optional promotion letter.

        "g1f3" (knight move), "e1g1" (castling), "b7b8n" (promotion to a knight)
        """
        if len(uci) not in (4, 5) or (len(uci) == 5 and uci[4] not in FEN_TO_PIECE):
            raise ValueError(f"Cannot interpret {uci!r} as a UCI move.")
        promotion = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
        return cls(
            Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]), promotion
        )

    def to_uci(self) -> str:
        suffix = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square}{self.to_square}{suffix}"

    def __str__(self) -> str:
        return self.to_uci()


@dataclass(frozen=True)
class LastMove:
    """The only information about the previous ply the movement rules need: en passant is decided by it."""

    from_square: Square
    to_square: Square
    piece: Piece
    was_two_square_pawn_move: bool


def pawn_direction(color: Color) -> int:
    """+1: white pawns walk up the ranks, -1: black pawns walk down"""
    return 1 if color == Color.WHITE else -1


def pawn_starting_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


def _is_enemy(board: Board, square: Square, color: Color) -> bool:
    piece = board.piece_at(square)
    return piece is not None and piece.color != color


# --- MOVEMENT ---
def raycasting_move(
    square: Square, color: Color, board: Board, directions: list[Vector]
) -> list[Square]:
    """
    Sliding pieces
    ----
    Walk along every direction until the edge of the board or the first piece.
    That first piece stops the ray: its square is only included when it can be taken.
    """
    destinations: list[Square] = []
    for df, dr in directions:
        target = square.offset(df, dr)
        while target.is_within_bounds():
            if board.piece_at(target) is None:
                destinations.append(target)
                target = target.offset(df, dr)
                continue
            if _is_enemy(board, target, color):
                destinations.append(target)
            break
    return destinations


def single_step_move(
    square: Square, color: Color, board: Board, deltas: list[Vector]
) -> list[Square]:
    """Knights and kings: one jump per delta, onto an empty square or an enemy piece."""
    targets = (square.offset(df, dr) for df, dr in deltas)
    return [
        target
        for target in targets
        if target.is_within_bounds()
        and (board.piece_at(target) is None or _is_enemy(board, target, color))
    ]


def candidate_pawn_moves(square: Square, color: Color, board: Board) -> list[Square]:
    """
    Pushes go straight ahead onto empty squares only (two squares from the starting rank, if both are free).
    Captures go one square diagonally forward, onto an enemy piece only.

    En passant needs the previous move, see `en_passant_destinations()`.
    """
    direction = pawn_direction(color)
    destinations: list[Square] = []

    push = square.offset(0, direction)
    if push.is_within_bounds() and board.piece_at(push) is None:
        destinations.append(push)
        double_push = push.offset(0, direction)
        if square.rank == pawn_starting_rank(color) and board.piece_at(double_push) is None:
            destinations.append(double_push)

    for df in (-1, 1):
        target = square.offset(df, direction)
        if target.is_within_bounds() and _is_enemy(board, target, color):
            destinations.append(target)
    return destinations


def candidate_knight_moves(square: Square, color: Color, board: Board) -> list[Square]:
    return single_step_move(square, color, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, color: Color, board: Board) -> list[Square]:
    return raycasting_move(square, color, board, DIAGONALS)


def candidate_rook_moves(square: Square, color: Color, board: Board) -> list[Square]:
    return raycasting_move(square, color, board, STRAIGHTS)


def candidate_queen_moves(square: Square, color: Color, board: Board) -> list[Square]:
    return raycasting_move(square, color, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(square: Square, color: Color, board: Board) -> list[Square]:
    """Castling is not included: it depends on rights and attacked squares (rules.py)."""
    return single_step_move(square, color, board, KING_DELTAS)


CandidateMovesFn = Callable[[Square, Color, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- EN PASSANT ---
def en_passant_capture_square(
    square: Square, color: Color, last_move: Optional[LastMove]
) -> Optional[Square]:
    """
    Square of the enemy pawn that the pawn on `square` may take en passant, if any.

    That pawn must have advanced two squares in the very last ply, and now stand right beside ours.
    """
    if last_move is None or not last_move.was_two_square_pawn_move:
        return None
    if last_move.piece.type != PieceType.PAWN or last_move.piece.color == color:
        return None

    landed_on = last_move.to_square
    if landed_on.rank != square.rank or abs(landed_on.file - square.file) != 1:
        return None
    return landed_on


def en_passant_destinations(
    square: Square, color: Color, last_move: Optional[LastMove]
) -> list[Square]:
    """Our pawn lands on the (empty) square the enemy pawn skipped."""
    taken_square = en_passant_capture_square(square, color, last_move)
    if taken_square is None:
        return []
    return [taken_square.offset(0, pawn_direction(color))]


def raw_moves(
    piece: Piece, square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    """
    Pseudo-legal destinations of `piece` standing on `square`.

    King safety and castling are left to rules.py. A pawn reaching the last rank is a single destination,
    the piece to promote into is chosen later.
    """
    destinations = MOVEMENT_RULES[piece.type](square, piece.color, board)
    if piece.type == PieceType.PAWN:
        destinations.extend(en_passant_destinations(square, piece.color, last_move))
    return destinations


def is_promotion_move(piece: Piece, to_square: Square) -> bool:
    return piece.type == PieceType.PAWN and to_square.rank == promotion_rank(piece.color)


def is_two_square_pawn_move(piece: Piece, from_square: Square, to_square: Square) -> bool:
    return piece.type == PieceType.PAWN and abs(to_square.rank - from_square.rank) == 2


# --- ATTACKS ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Reverse raycasting
    ----
    Look outward from the target square. The first piece met along a direction attacks the square if it has the
    right color and slides along that direction. Anything further away is blocked.
    """
    for df, dr in directions:
        target = square.offset(df, dr)
        while target.is_within_bounds():
            blocker = board.piece_at(target)
            if blocker is None:
                target = target.offset(df, dr)
                continue
            if blocker.color == by_color and blocker.type in by_piece_types:
                return True
            break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """Is there a `by_piece_type` of `by_color` exactly one delta away?"""
    attacker = Piece(by_piece_type, by_color)
    return any(
        board.piece_at(target) == attacker
        for target in (square.offset(df, dr) for df, dr in deltas)
        if target.is_within_bounds()
    )


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns only attack diagonally forward. Seen from the target square, the attacker stands one rank
    behind it (from the attacker's point of view).
    """
    behind = -pawn_direction(by_color)
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(-1, behind), (1, behind)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.BISHOP,), board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.ROOK,), board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, (PieceType.QUEEN,), board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}
