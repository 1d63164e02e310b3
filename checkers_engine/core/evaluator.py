"""Material ratio evaluator with an optional bonus for advancing men."""

from typing import Optional

import numpy as np

from checkers_engine.config import CONFIG, SCORING_MODES, EvalConfig
from .board import BLACK, BLACK_KING, BLACK_MAN, WHITE_KING, WHITE_MAN

WIN_SCORE = 1e9
LOSS_SCORE = 0.0


class Evaluator:
    def __init__(self, scoring_mode: Optional[str] = None, cfg: Optional[EvalConfig] = None):
        self.cfg = cfg or CONFIG.eval
        self.scoring_mode = scoring_mode or self.cfg.scoring_mode
        if self.scoring_mode not in SCORING_MODES:
            raise ValueError(f"Unknown scoring mode {self.scoring_mode!r}, expected one of {SCORING_MODES}")

    @property
    def positional(self) -> bool:
        return self.scoring_mode == "NumberAndPotential"

    @property
    def king_value(self) -> float:
        return self.cfg.king_value_positional if self.positional else self.cfg.king_value_plain

    def score(self, board: np.ndarray, perspective_color: int) -> float:
        """Strength ratio of ``perspective_color`` over its opponent.

        Returns WIN_SCORE when the opponent has no pieces left and LOSS_SCORE
        when the perspective side has none. Otherwise the result is a
        positive ratio, 1.0 for equal material.
        """
        w = float(np.count_nonzero(board == WHITE_MAN))
        wq = float(np.count_nonzero(board == WHITE_KING))
        b = float(np.count_nonzero(board == BLACK_MAN))
        bq = float(np.count_nonzero(board == BLACK_KING))

        if self.positional:
            # men are worth more the closer they are to the promotion row
            white_rows, _ = np.nonzero(board == WHITE_MAN)
            black_rows, _ = np.nonzero(board == BLACK_MAN)
            w += self.cfg.advance_bonus * float(np.sum(7 - white_rows))
            b += self.cfg.advance_bonus * float(np.sum(black_rows))

        if perspective_color == BLACK:
            own, own_kings, opp, opp_kings = b, bq, w, wq
        else:
            own, own_kings, opp, opp_kings = w, wq, b, bq

        if opp + opp_kings == 0:
            return WIN_SCORE
        if own + own_kings == 0:
            return LOSS_SCORE

        k = self.king_value
        return (own + own_kings * k) / (opp + opp_kings * k)
