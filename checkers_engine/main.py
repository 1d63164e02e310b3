from typing import List

from checkers_engine.core.board import CheckersBoard, Move
from checkers_engine.core.search import SearchEngine
from checkers_engine.core.evaluator import Evaluator


class Engine:
    def __init__(self, depth=3):
        self.board = CheckersBoard()
        self.search = SearchEngine(Evaluator(), depth=depth)

    def get_best_turns(self, color: int) -> List[Move]:
        return self.search.find_best_turns(self.board.board, color)

    def make_turns(self, moves: List[Move]):
        beat_series = 0
        for move in moves:
            beat_series += move.is_capture
            self.board.make_move(move, beat_series)

    def print_board(self):
        self.board.print_board()
