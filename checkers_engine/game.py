"""Headless game loop: bot and human turns, undo, replay, move limit and timing log."""

import enum
import logging
import time
from typing import Callable, List, Optional, Union

from checkers_engine.config import CONFIG, Config, load_config
from checkers_engine.core.board import WHITE, CheckersBoard, Move, opponent
from checkers_engine.core.evaluator import Evaluator
from checkers_engine.core.rules import legal_moves, legal_moves_for_piece
from checkers_engine.core.search import SearchEngine
from checkers_engine.core.utils import render_board

logger = logging.getLogger(__name__)

QUIT_WORDS = ("quit", "q", "exit")
BACK_WORDS = ("back", "undo")
REPLAY_WORDS = ("replay", "restart")


class Response(enum.Enum):
    OK = "ok"
    QUIT = "quit"
    BACK = "back"
    REPLAY = "replay"


class GameResult(enum.IntEnum):
    DRAW = 0
    WHITE_WINS = 1
    BLACK_WINS = 2


RESULT_TEXT = {
    GameResult.DRAW: "Draw (turn limit reached)",
    GameResult.WHITE_WINS: "White wins",
    GameResult.BLACK_WINS: "Black wins",
}


def color_name(color: int) -> str:
    return "White" if color == WHITE else "Black"


def parse_command(text: str) -> Optional[Response]:
    if text in QUIT_WORDS:
        return Response.QUIT
    if text in BACK_WORDS:
        return Response.BACK
    if text in REPLAY_WORDS:
        return Response.REPLAY
    return None


class Game:
    def __init__(
        self,
        config: Optional[Config] = None,
        board: Optional[CheckersBoard] = None,
        input_fn: Optional[Callable[[str], str]] = None,
        output_fn: Optional[Callable[[str], None]] = None,
        config_path: Optional[str] = None,
    ):
        self.cfg = config or CONFIG
        self.config_path = config_path
        self.board = board or CheckersBoard()
        self.input_fn = input_fn or input
        self.output_fn = output_fn or print
        self.search = self._make_search()
        # captures made so far in the human turn being played
        self.beat_series = 0

    def _make_search(self) -> SearchEngine:
        return SearchEngine(Evaluator(cfg=self.cfg.eval), cfg=self.cfg.search)

    def is_bot(self, color: int) -> bool:
        return self.cfg.bot.is_white_bot if color == WHITE else self.cfg.bot.is_black_bot

    def bot_level(self, color: int) -> int:
        return self.cfg.bot.white_level if color == WHITE else self.cfg.bot.black_level

    def has_human(self) -> bool:
        return not (self.cfg.bot.is_white_bot and self.cfg.bot.is_black_bot)

    def play(self) -> Optional[GameResult]:
        """Play until a side cannot move or the turn limit is hit. None means a player quit.

        A replay request, during a game or at its end, reloads the configuration
        and starts over from the initial position.
        """
        while True:
            outcome = self._play_game()
            if outcome is Response.QUIT:
                return None
            if outcome is Response.REPLAY or self._ask_replay(outcome):
                self.restart()
                continue
            return outcome

    def restart(self):
        """Reload the config, rebuild the search and reset the board."""
        self.cfg = load_config(self.config_path)
        self.search = self._make_search()
        self.board.reset()
        self.beat_series = 0
        logger.info("Replaying with reloaded config")

    def _play_game(self) -> Union[GameResult, Response]:
        start = time.perf_counter()
        max_turns = self.cfg.game.max_turns
        turn_num = -1
        stopped = None

        while True:
            turn_num += 1
            if turn_num >= max_turns:
                break
            color = turn_num % 2
            if self.board.is_game_over(color):
                break

            if self.is_bot(color):
                self.bot_turn(color)
                continue

            resp = self.player_turn(color)
            if resp in (Response.QUIT, Response.REPLAY):
                stopped = resp
                break
            if resp is Response.BACK:
                if self.beat_series:
                    # drop the unfinished chain, the same side moves again
                    self.board.undo_turn()
                    turn_num -= 1
                else:
                    turn_num -= self.rollback(color) + 1

        logger.info("Game time: %d millisec", int((time.perf_counter() - start) * 1000))
        if stopped is not None:
            return stopped
        if turn_num >= max_turns:
            return GameResult.DRAW
        # the side to move has no legal move and loses
        return GameResult.BLACK_WINS if turn_num % 2 == WHITE else GameResult.WHITE_WINS

    def _ask_replay(self, result: GameResult) -> bool:
        if not self.has_human():
            return False
        self.output_fn(render_board(self.board.board))
        self.output_fn(f"Game over: {RESULT_TEXT[result]}")
        text = self.input_fn("Type 'replay' to play again, anything else to exit: ").strip().lower()
        return text in REPLAY_WORDS

    def bot_turn(self, color: int) -> List[Move]:
        start = time.perf_counter()
        delay = self.cfg.bot.delay_ms / 1000

        self.search.max_depth = self.bot_level(color)
        turns = self.search.find_best_turns(self.board.board, color)
        remaining = delay - (time.perf_counter() - start)
        if remaining > 0:
            time.sleep(remaining)

        beat_series = 0
        for i, turn in enumerate(turns):
            if i and delay:
                time.sleep(delay)
            beat_series += turn.is_capture
            self.board.make_move(turn, beat_series)

        logger.info("Bot turn time: %d millisec", int((time.perf_counter() - start) * 1000))
        return turns

    def player_turn(self, color: int) -> Response:
        self.beat_series = 0
        moves, _ = legal_moves(self.board.board, color)
        self.output_fn(render_board(self.board.board))
        self.output_fn(f"{color_name(color)} to move: " + " ".join(str(m) for m in moves))

        while True:
            text = self.input_fn("Enter your move (e.g. c3-d4), 'back', 'replay' or 'quit': ").strip().lower()
            resp = parse_command(text)
            if resp is not None:
                return resp
            move = self._match_move(text, moves)
            if move is not None:
                break

        self.board.make_move(move, int(move.is_capture))
        if not move.is_capture:
            return Response.OK

        # the same piece keeps capturing while it can
        self.beat_series = 1
        while True:
            moves, have_beats = legal_moves_for_piece(self.board.board, move.x2, move.y2)
            if not have_beats:
                break
            self.output_fn(render_board(self.board.board))
            self.output_fn("Continue capturing: " + " ".join(str(m) for m in moves))
            while True:
                text = self.input_fn("Next capture: ").strip().lower()
                resp = parse_command(text)
                if resp is not None:
                    return resp
                move = self._match_move(text, moves)
                if move is not None:
                    break
            self.beat_series += 1
            self.board.make_move(move, self.beat_series)
        return Response.OK

    def rollback(self, color: int) -> int:
        """Undo the player's previous turn and the bot reply after it. Returns turns undone."""
        wanted = 2 if self.is_bot(opponent(color)) else 1
        undone = 0
        while undone < wanted and self.board.undo_turn():
            undone += 1
        return undone

    def _match_move(self, text: str, moves: List[Move]) -> Optional[Move]:
        try:
            candidate = Move.from_str(text)
        except ValueError as e:
            self.output_fn(str(e))
            return None
        if candidate not in moves:
            self.output_fn(f"Illegal move: {text}")
            return None
        # the generated move carries the captured cell
        return moves[moves.index(candidate)]
