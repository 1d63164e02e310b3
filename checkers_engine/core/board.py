"""Board snapshots, moves and the authoritative game board with move history."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

BOARD_SIZE = 8

EMPTY = 0
WHITE_MAN = 1
BLACK_MAN = 2
WHITE_KING = 3
BLACK_KING = 4

WHITE = 0
BLACK = 1

FILES = "abcdefgh"


class IllegalMoveError(ValueError):
    """Raised when a move is applied onto an occupied cell or from an empty one."""


def opponent(color: int) -> int:
    return 1 - color


def piece_color(piece: int) -> int:
    """Odd codes are white, even nonzero codes are black."""
    return WHITE if piece % 2 else BLACK


def is_king(piece: int) -> bool:
    return piece >= WHITE_KING


def on_board(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def square_name(x: int, y: int) -> str:
    return f"{FILES[y]}{BOARD_SIZE - x}"


def parse_square(text: str) -> Tuple[int, int]:
    if len(text) != 2 or text[0] not in FILES or not text[1].isdigit():
        raise ValueError(f"Invalid square: {text!r}")
    x = BOARD_SIZE - int(text[1])
    y = FILES.index(text[0])
    if not on_board(x, y):
        raise ValueError(f"Invalid square: {text!r}")
    return x, y


@dataclass(frozen=True, eq=False)
class Move:
    """A single step of a turn: origin, destination and the captured cell, if any.

    Two moves are equal when origin and destination match; the captured cell
    is not part of the identity, so a move parsed from text matches the
    generated move it refers to.
    """

    x: int
    y: int
    x2: int
    y2: int
    captured: Optional[Tuple[int, int]] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def __eq__(self, other):
        if not isinstance(other, Move):
            return NotImplemented
        return (self.x, self.y, self.x2, self.y2) == (other.x, other.y, other.x2, other.y2)

    def __hash__(self):
        return hash((self.x, self.y, self.x2, self.y2))

    def __str__(self):
        sep = ":" if self.is_capture else "-"
        return f"{square_name(self.x, self.y)}{sep}{square_name(self.x2, self.y2)}"

    @classmethod
    def from_str(cls, text: str) -> "Move":
        """Parse 'c3-d4' or 'c3:e5'. The captured cell is left unknown."""
        text = text.strip().lower()
        for sep in ("-", ":", "x"):
            if sep in text:
                start, _, end = text.partition(sep)
                x, y = parse_square(start)
                x2, y2 = parse_square(end)
                return cls(x, y, x2, y2)
        raise ValueError(f"Invalid move notation: {text!r}")


def empty_board() -> np.ndarray:
    return np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)


def initial_board() -> np.ndarray:
    """Black men on rows 0-2, white men on rows 5-7, dark cells only."""
    board = empty_board()
    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            if (r + c) % 2 == 0:
                continue
            if r < 3:
                board[r, c] = BLACK_MAN
            elif r > 4:
                board[r, c] = WHITE_MAN
    return board


def board_from_rows(rows: Sequence[Sequence[int]]) -> np.ndarray:
    board = np.array(rows, dtype=np.int8)
    if board.shape != (BOARD_SIZE, BOARD_SIZE):
        raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}, got {board.shape}")
    if board.min() < EMPTY or board.max() > BLACK_KING:
        raise ValueError("Board cells must hold piece codes 0..4")
    return board


def apply_move(board: np.ndarray, move: Move) -> np.ndarray:
    """Return a new board with ``move`` applied; the input is left untouched."""
    if board[move.x2, move.y2]:
        raise IllegalMoveError(f"final position {square_name(move.x2, move.y2)} is not empty, can't move")
    if not board[move.x, move.y]:
        raise IllegalMoveError(f"begin position {square_name(move.x, move.y)} is empty, can't move")

    new_board = board.copy()
    if move.captured is not None:
        new_board[move.captured] = EMPTY

    piece = new_board[move.x, move.y]
    # Promotion happens as part of the move itself.
    if (piece == WHITE_MAN and move.x2 == 0) or (piece == BLACK_MAN and move.x2 == BOARD_SIZE - 1):
        piece += 2

    new_board[move.x2, move.y2] = piece
    new_board[move.x, move.y] = EMPTY
    return new_board


class CheckersBoard:
    def __init__(self, rows: Optional[Sequence[Sequence[int]]] = None):
        """Initialize from explicit rows or the standard starting position."""
        self.board = board_from_rows(rows) if rows is not None else initial_board()
        self.history: List[np.ndarray] = []
        self.beat_history: List[int] = []
        self.move_history: List[Move] = []
        self._add_history()

    def reset(self):
        """Reset to the initial position."""
        self.set_board(initial_board())

    def set_board(self, rows: Sequence[Sequence[int]]):
        """Replace the position and start a fresh history."""
        self.board = board_from_rows(rows)
        self.history.clear()
        self.beat_history.clear()
        self.move_history.clear()
        self._add_history()

    def get_board(self) -> np.ndarray:
        """Return a copy of the current snapshot."""
        return self.board.copy()

    def make_move(self, move: Move, beat_series: int = 0):
        """Apply one move. ``beat_series`` is k for the k-th capture of a chain, 0 otherwise."""
        self.board = apply_move(self.board, move)
        self.move_history.append(move)
        self._add_history(beat_series)

    def undo_turn(self) -> bool:
        """Roll back the last full turn (a whole capture chain). Returns False if nothing to undo."""
        if len(self.history) <= 1:
            return False
        steps = max(1, self.beat_history[-1])
        while steps and len(self.history) > 1:
            self.history.pop()
            self.beat_history.pop()
            self.move_history.pop()
            steps -= 1
        self.board = self.history[-1].copy()
        return True

    def legal_moves(self, color: int) -> List[Move]:
        """Return the side-level legal moves in board order."""
        from .rules import legal_moves

        moves, _ = legal_moves(self.board, color)
        return moves

    def is_game_over(self, color: int) -> bool:
        """The side to move has lost when it has no legal move."""
        from .rules import has_any_move

        return not has_any_move(self.board, color)

    def print_board(self):
        """Print ASCII representation."""
        from .utils import render_board

        print(render_board(self.board))

    def _add_history(self, beat_series: int = 0):
        self.history.append(self.board.copy())
        self.beat_history.append(beat_series)
