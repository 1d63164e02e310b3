"""Legal move generation: slides, captures, flying kings and the mandatory capture rule."""

import random
from typing import List, Optional, Tuple

import numpy as np

from .board import EMPTY, WHITE, Move, is_king, on_board, piece_color

DIAGONALS = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def _man_captures(board: np.ndarray, x: int, y: int, piece: int) -> List[Move]:
    moves = []
    for dx, dy in DIAGONALS:
        x2, y2 = x + 2 * dx, y + 2 * dy
        if not on_board(x2, y2):
            continue
        xb, yb = x + dx, y + dy
        jumped = int(board[xb, yb])
        if board[x2, y2] or not jumped or jumped % 2 == piece % 2:
            continue
        moves.append(Move(x, y, x2, y2, (xb, yb)))
    return moves


def _king_captures(board: np.ndarray, x: int, y: int, piece: int) -> List[Move]:
    moves = []
    for dx, dy in DIAGONALS:
        captured = None
        x2, y2 = x + dx, y + dy
        while on_board(x2, y2):
            cell = int(board[x2, y2])
            if cell:
                # own piece, or a second piece on the ray
                if cell % 2 == piece % 2 or captured is not None:
                    break
                captured = (x2, y2)
            elif captured is not None:
                moves.append(Move(x, y, x2, y2, captured))
            x2, y2 = x2 + dx, y2 + dy
    return moves


def _man_slides(board: np.ndarray, x: int, y: int, piece: int) -> List[Move]:
    x2 = x - 1 if piece_color(piece) == WHITE else x + 1
    moves = []
    for y2 in (y - 1, y + 1):
        if on_board(x2, y2) and not board[x2, y2]:
            moves.append(Move(x, y, x2, y2))
    return moves


def _king_slides(board: np.ndarray, x: int, y: int) -> List[Move]:
    moves = []
    for dx, dy in DIAGONALS:
        x2, y2 = x + dx, y + dy
        while on_board(x2, y2) and not board[x2, y2]:
            moves.append(Move(x, y, x2, y2))
            x2, y2 = x2 + dx, y2 + dy
    return moves


def legal_moves_for_piece(board: np.ndarray, x: int, y: int) -> Tuple[List[Move], bool]:
    """Moves of the piece on (x, y) and whether they are captures.

    A piece that can capture must capture, so its slides are only returned
    when it has no capture at all.
    """
    piece = int(board[x, y])
    if piece == EMPTY:
        return [], False

    if is_king(piece):
        captures = _king_captures(board, x, y, piece)
    else:
        captures = _man_captures(board, x, y, piece)
    if captures:
        return captures, True

    if is_king(piece):
        return _king_slides(board, x, y), False
    return _man_slides(board, x, y, piece), False


def legal_moves(board: np.ndarray, color: int, rng: Optional[random.Random] = None) -> Tuple[List[Move], bool]:
    """Side-level legal moves for ``color`` and whether a capture is mandatory.

    Pieces are scanned row by row. As soon as one piece can capture, only the
    capturing moves of pieces that have captures are kept. The list is
    shuffled with ``rng`` when one is given.
    """
    moves: List[Move] = []
    have_beats = False

    for x, y in np.argwhere(board != EMPTY):
        x, y = int(x), int(y)
        if piece_color(int(board[x, y])) != color:
            continue
        piece_moves, beats = legal_moves_for_piece(board, x, y)
        if beats and not have_beats:
            have_beats = True
            moves.clear()
        if beats or not have_beats:
            moves.extend(piece_moves)

    if rng is not None:
        rng.shuffle(moves)
    return moves, have_beats


def has_any_move(board: np.ndarray, color: int) -> bool:
    moves, _ = legal_moves(board, color)
    return bool(moves)


