"""Core engine components: board, rules, evaluator and search."""

from .board import CheckersBoard, IllegalMoveError, Move
from .evaluator import Evaluator
from .rules import legal_moves, legal_moves_for_piece
from .search import SearchEngine
