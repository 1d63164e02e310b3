"""Depth-limited minimax with alpha-beta pruning over whole turns, capture chains included.

The search always scores positions from the perspective of the side it is
choosing a turn for. Depth counts opponent replies: the chosen turn itself is
played at the root, the opponent moves at depth 0, the searching side at
depth 1 and so on, so odd depths maximise and even depths minimise. A capture
chain stays at the same depth until the capturing piece has nothing left to
take.

The chosen turn is recorded in a node arena: every explored chain-root node
stores its best move and the index of the node that continues the chain.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from checkers_engine.config import CONFIG, SearchConfig
from .board import BLACK, WHITE, Move, apply_move, opponent
from .evaluator import LOSS_SCORE, WIN_SCORE, Evaluator
from .rules import legal_moves, legal_moves_for_piece
from .utils import format_info

logger = logging.getLogger(__name__)


@dataclass
class SearchNode:
    move: Optional[Move] = None
    next_index: Optional[int] = None


class SearchEngine:
    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        depth: Optional[int] = None,
        optimization: Optional[str] = None,
        no_random: Optional[bool] = None,
        cfg: Optional[SearchConfig] = None,
    ):
        self.cfg = cfg or CONFIG.search
        self.evaluator = evaluator or Evaluator()
        self.max_depth = depth if depth is not None else self.cfg.depth
        self.optimization = optimization or self.cfg.optimization
        no_random = self.cfg.no_random if no_random is None else no_random
        self.rng = random.Random(0 if no_random else time.time_ns())

        self.nodes = 0
        self.last_score: Optional[float] = None
        self._tree: List[SearchNode] = []

    @property
    def pruning(self) -> bool:
        return self.optimization != "O0"

    def find_best_turns(self, board: np.ndarray, color: int) -> List[Move]:
        """Best full turn for ``color``: one move, or every move of a capture chain.

        Returns an empty list when ``color`` has no legal move.
        """
        if self.max_depth < 1:
            raise ValueError(f"Search depth must be positive, got {self.max_depth}")

        board = np.array(board, dtype=np.int8)
        self._tree = []
        self.nodes = 0
        start_time = time.perf_counter()

        score = self._find_first_best_turn(board, color, None, 0)
        turns = self._extract_turns()
        self._tree = []
        if not turns:
            score = LOSS_SCORE
        self.last_score = score

        elapsed = time.perf_counter() - start_time
        logger.info(format_info(self.max_depth, score, self.nodes, elapsed, turns))
        return turns

    def _extract_turns(self) -> List[Move]:
        turns = []
        if not self._tree or self._tree[0].move is None:
            return turns
        state: Optional[int] = 0
        while state is not None and self._tree[state].move is not None:
            node = self._tree[state]
            turns.append(node.move)
            state = node.next_index
        return turns

    def _find_first_best_turn(
        self,
        board: np.ndarray,
        color: int,
        piece: Optional[Tuple[int, int]],
        state: int,
        alpha: float = -1,
    ) -> float:
        self._tree.append(SearchNode())
        self.nodes += 1
        best_score = -1.0

        if state == 0:
            turns, have_beats = legal_moves(board, color, self.rng)
        else:
            turns, have_beats = legal_moves_for_piece(board, *piece)

        # chain finished: the opponent replies
        if not have_beats and state != 0:
            return self._find_best_turns_rec(board, opponent(color), 0, alpha)

        for turn in turns:
            next_state = len(self._tree)
            if have_beats:
                score = self._find_first_best_turn(
                    apply_move(board, turn), color, (turn.x2, turn.y2), next_state, best_score
                )
            else:
                score = self._find_best_turns_rec(apply_move(board, turn), opponent(color), 0, best_score)
            if score > best_score:
                best_score = score
                self._tree[state].next_index = next_state if have_beats else None
                self._tree[state].move = turn
        return best_score

    def _find_best_turns_rec(
        self,
        board: np.ndarray,
        color: int,
        depth: int,
        alpha: float = -1,
        beta: float = WIN_SCORE + 1,
        piece: Optional[Tuple[int, int]] = None,
    ) -> float:
        self.nodes += 1
        if depth == self.max_depth:
            return self.evaluator.score(board, BLACK if depth % 2 == color else WHITE)

        if piece is not None:
            turns, have_beats = legal_moves_for_piece(board, *piece)
            if not have_beats:
                return self._find_best_turns_rec(board, opponent(color), depth + 1, alpha, beta)
        else:
            turns, have_beats = legal_moves(board, color, self.rng)

        if not turns:
            return LOSS_SCORE if depth % 2 else WIN_SCORE

        min_score = WIN_SCORE + 1
        max_score = -1.0
        for turn in turns:
            if not have_beats:
                score = self._find_best_turns_rec(apply_move(board, turn), opponent(color), depth + 1, alpha, beta)
            else:
                score = self._find_best_turns_rec(
                    apply_move(board, turn), color, depth, alpha, beta, (turn.x2, turn.y2)
                )

            min_score = min(min_score, score)
            max_score = max(max_score, score)

            if depth % 2:
                alpha = max(alpha, max_score)
            else:
                beta = min(beta, min_score)

            if self.pruning and alpha >= beta:
                # nudged so a cut-off never ties with an exact score
                return max_score + 1 if depth % 2 else min_score - 1

        return max_score if depth % 2 else min_score
