"""
Integration tests for the checkers engine.

Covers:
- Engine facade (search + authoritative board)
- Full bot-vs-bot games
- Human turns driven by scripted input (chains, undo, quit)
- Replay with a reloaded configuration
- Configuration loading, env overrides and logging setup
- Terminal interface
"""

import logging

import numpy as np
import pytest

from checkers_engine.config import Config, apply_env_overrides, configure_logging, load_config
from checkers_engine.core.board import (
    BLACK,
    BLACK_MAN,
    EMPTY,
    WHITE,
    WHITE_MAN,
    CheckersBoard,
    Move,
    empty_board,
    initial_board,
)
from checkers_engine.core.rules import legal_moves
from checkers_engine.game import Game, GameResult
from checkers_engine.main import Engine


def make_config(white_bot=True, black_bot=True, level=1, max_turns=40):
    cfg = Config()
    cfg.search.no_random = True
    cfg.bot.is_white_bot = white_bot
    cfg.bot.is_black_bot = black_bot
    cfg.bot.white_level = level
    cfg.bot.black_level = level
    cfg.game.max_turns = max_turns
    return cfg


def scripted(lines):
    it = iter(lines)
    return lambda prompt="": next(it)


def make_board(pieces):
    board = empty_board()
    for (x, y), piece in pieces.items():
        board[x, y] = piece
    return board


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE FACADE
# ════════════════════════════════════════════════════════════════════════════


class TestEngineFacade:
    def test_best_turn_and_apply(self):
        engine = Engine(depth=1)
        engine.search.rng.seed(0)
        turns = engine.get_best_turns(WHITE)
        assert len(turns) == 1
        assert turns[0] in legal_moves(initial_board(), WHITE)[0]
        engine.make_turns(turns)
        assert engine.board.move_history == turns
        assert not np.array_equal(engine.board.board, initial_board())

    def test_alternating_colors(self):
        engine = Engine(depth=2)
        for i in range(10):
            color = WHITE if i % 2 == 0 else BLACK
            turns = engine.get_best_turns(color)
            assert turns
            engine.make_turns(turns)
        assert engine.board.undo_turn()


# ════════════════════════════════════════════════════════════════════════════
#  FULL GAMES
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    def test_bot_vs_bot_completes(self):
        game = Game(make_config(level=1, max_turns=60))
        result = game.play()
        assert isinstance(result, GameResult)
        assert len(game.board.move_history) >= 10
        assert len(game.board.history) == len(game.board.move_history) + 1

    def test_turn_limit_is_a_draw(self):
        game = Game(make_config(level=1, max_turns=2))
        assert game.play() is GameResult.DRAW
        assert len(game.board.move_history) == 2

    def test_blocked_side_loses(self):
        board = CheckersBoard(make_board({(7, 0): WHITE_MAN, (6, 1): BLACK_MAN, (5, 2): BLACK_MAN}))
        game = Game(make_config(), board=board)
        assert game.play() is GameResult.BLACK_WINS
        assert game.board.move_history == []

    def test_capturing_last_piece_wins(self):
        board = CheckersBoard(make_board({(5, 2): WHITE_MAN, (4, 3): BLACK_MAN}))
        game = Game(make_config(level=2), board=board)
        assert game.play() is GameResult.WHITE_WINS
        assert game.board.move_history == [Move(5, 2, 3, 4)]
        assert game.board.board[4, 3] == EMPTY

    def test_bot_plays_whole_chain(self):
        board = CheckersBoard(make_board({(5, 0): WHITE_MAN, (4, 1): BLACK_MAN, (2, 3): BLACK_MAN}))
        game = Game(make_config(level=2), board=board)
        assert game.play() is GameResult.WHITE_WINS
        assert game.board.move_history == [Move(5, 0, 3, 2), Move(3, 2, 1, 4)]
        assert game.board.beat_history == [0, 1, 2]


# ════════════════════════════════════════════════════════════════════════════
#  HUMAN TURNS
# ════════════════════════════════════════════════════════════════════════════


class TestHumanTurns:
    def test_move_then_quit(self):
        output = []
        game = Game(
            make_config(white_bot=False),
            input_fn=scripted(["c3-d4", "quit"]),
            output_fn=output.append,
        )
        assert game.play() is None
        assert game.board.move_history[0] == Move(5, 2, 4, 3)
        assert len(game.board.move_history) == 2
        assert any(line.startswith("White to move") for line in output)

    def test_bad_input_is_reprompted(self):
        output = []
        game = Game(
            make_config(white_bot=False),
            input_fn=scripted(["zz", "c3-c4", "a3-b4", "quit"]),
            output_fn=output.append,
        )
        assert game.play() is None
        assert game.board.move_history[0] == Move(5, 0, 4, 1)
        assert "Illegal move: c3-c4" in output
        assert any("Invalid" in line for line in output)

    def test_back_undoes_bot_reply_too(self):
        game = Game(
            make_config(white_bot=False),
            input_fn=scripted(["c3-d4", "back", "quit"]),
            output_fn=lambda line: None,
        )
        assert game.play() is None
        assert np.array_equal(game.board.board, initial_board())
        assert game.board.move_history == []

    def test_back_between_humans_undoes_one_turn(self):
        game = Game(
            make_config(white_bot=False, black_bot=False),
            input_fn=scripted(["c3-d4", "back", "a3-b4", "quit"]),
            output_fn=lambda line: None,
        )
        assert game.play() is None
        assert game.board.move_history == [Move(5, 0, 4, 1)]

    def test_back_at_start_replays_turn(self):
        game = Game(
            make_config(white_bot=False),
            input_fn=scripted(["back", "quit"]),
            output_fn=lambda line: None,
        )
        assert game.play() is None
        assert game.board.move_history == []

    def test_human_capture_chain(self):
        board = CheckersBoard(make_board({
            (5, 0): WHITE_MAN, (4, 1): BLACK_MAN, (2, 3): BLACK_MAN, (0, 7): BLACK_MAN,
        }))
        game = Game(
            make_config(white_bot=False),
            board=board,
            input_fn=scripted(["a3:c5", "c5:e7", "quit"]),
            output_fn=lambda line: None,
        )
        assert game.play() is None
        history = game.board.move_history
        assert history[:2] == [Move(5, 0, 3, 2), Move(3, 2, 1, 4)]
        assert [m.captured for m in history[:2]] == [(4, 1), (2, 3)]
        assert history[2] == Move(0, 7, 1, 6)
        assert game.board.beat_history[1:3] == [1, 2]
        assert game.board.board[4, 1] == EMPTY and game.board.board[2, 3] == EMPTY

    def test_back_mid_chain_restarts_turn(self):
        start = make_board({
            (5, 0): WHITE_MAN, (4, 1): BLACK_MAN, (2, 3): BLACK_MAN, (0, 7): BLACK_MAN,
        })
        output = []
        game = Game(
            make_config(white_bot=False),
            board=CheckersBoard(start),
            input_fn=scripted(["a3:c5", "back", "a3:c5", "c5:e7", "quit"]),
            output_fn=output.append,
        )
        assert game.play() is None
        assert game.board.move_history == [Move(5, 0, 3, 2), Move(3, 2, 1, 4), Move(0, 7, 1, 6)]
        assert game.board.beat_history == [0, 1, 2, 0]
        assert sum(line.startswith("White to move") for line in output) == 3


# ════════════════════════════════════════════════════════════════════════════
#  REPLAY
# ════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def bots_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("CHECKERS_SEARCH_DEPTH", raising=False)
    path = tmp_path / "replay.toml"
    path.write_text(
        "[search]\n"
        "no_random = true\n"
        'optimization = "O0"\n'
        "[bot]\n"
        "is_white_bot = true\n"
        "is_black_bot = true\n"
        "white_level = 1\n"
        "black_level = 1\n"
        "[game]\n"
        "max_turns = 4\n"
    )
    return str(path)


class TestReplay:
    def test_replay_during_game(self, bots_config_file):
        game = Game(
            make_config(white_bot=False),
            input_fn=scripted(["c3-d4", "replay"]),
            output_fn=lambda line: None,
            config_path=bots_config_file,
        )
        first_search = game.search
        assert game.play() is GameResult.DRAW
        assert game.cfg.game.max_turns == 4
        assert game.cfg.bot.is_white_bot
        assert game.search is not first_search
        assert not game.search.pruning
        # second game started from scratch
        assert len(game.board.move_history) == 4
        assert len(game.board.history) == 5

    def test_restart_word_mid_chain(self, bots_config_file):
        board = CheckersBoard(make_board({(5, 0): WHITE_MAN, (4, 1): BLACK_MAN, (2, 3): BLACK_MAN}))
        game = Game(
            make_config(white_bot=False),
            board=board,
            input_fn=scripted(["a3:c5", "restart"]),
            output_fn=lambda line: None,
            config_path=bots_config_file,
        )
        assert game.play() is GameResult.DRAW
        assert game.board.history[0].tolist() == initial_board().tolist()
        assert game.beat_series == 0

    def test_replay_after_game_over(self, bots_config_file):
        board = CheckersBoard(make_board({(7, 0): WHITE_MAN, (6, 1): BLACK_MAN, (5, 2): BLACK_MAN}))
        output = []
        game = Game(
            make_config(white_bot=False),
            board=board,
            input_fn=scripted(["replay"]),
            output_fn=output.append,
            config_path=bots_config_file,
        )
        assert game.play() is GameResult.DRAW
        assert "Game over: Black wins" in output
        assert len(game.board.move_history) == 4

    def test_no_replay_after_game_over(self, bots_config_file):
        board = CheckersBoard(make_board({(7, 0): WHITE_MAN, (6, 1): BLACK_MAN, (5, 2): BLACK_MAN}))
        game = Game(
            make_config(white_bot=False),
            board=board,
            input_fn=scripted([""]),
            output_fn=lambda line: None,
            config_path=bots_config_file,
        )
        assert game.play() is GameResult.BLACK_WINS
        assert game.cfg.game.max_turns == 40


# ════════════════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ════════════════════════════════════════════════════════════════════════════


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.search.depth == 4
        assert cfg.search.optimization == "O1"
        assert cfg.eval.scoring_mode == "NumberAndPotential"
        assert cfg.bot.is_black_bot and not cfg.bot.is_white_bot
        assert cfg.game.max_turns == 120

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = Config.load_from_toml(str(tmp_path / "nope.toml"))
        assert cfg == Config()

    def test_load_from_toml(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text(
            'log_level = "DEBUG"\n'
            "[search]\n"
            "depth = 6\n"
            'optimization = "O0"\n'
            "[eval]\n"
            'scoring_mode = "Plain"\n'
            "[bot]\n"
            "is_white_bot = true\n"
            "unknown_key = 1\n"
            "[game]\n"
            "max_turns = 50\n"
        )
        with caplog.at_level(logging.WARNING):
            cfg = Config.load_from_toml(str(path))
        assert cfg.search.depth == 6
        assert cfg.search.optimization == "O0"
        assert cfg.eval.scoring_mode == "Plain"
        assert cfg.bot.is_white_bot is True
        assert not hasattr(cfg.bot, "unknown_key")
        assert cfg.game.max_turns == 50
        assert cfg.log_level == "DEBUG"
        assert "bot.unknown_key" in caplog.text

    def test_env_depth_override(self):
        cfg = apply_env_overrides(Config(), {"CHECKERS_SEARCH_DEPTH": "7"})
        assert cfg.search.depth == 7

    def test_env_depth_override_invalid(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = apply_env_overrides(Config(), {"CHECKERS_SEARCH_DEPTH": "deep"})
        assert cfg.search.depth == 4
        assert "CHECKERS_SEARCH_DEPTH" in caplog.text

    def test_load_config_applies_env(self, tmp_path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text("[search]\ndepth = 6\n")
        monkeypatch.setenv("CHECKERS_SEARCH_DEPTH", "5")
        assert load_config(str(path)).search.depth == 5
        monkeypatch.delenv("CHECKERS_SEARCH_DEPTH")
        assert load_config(str(path)).search.depth == 6

    def test_configure_logging_writes_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "log.txt"
        log_file.write_text("stale\n")
        configure_logging(Config(log_file=str(log_file), log_level="info"))
        logging.getLogger("checkers_engine.test").info("Bot turn time: 5 millisec")
        for h in logging.getLogger().handlers:
            h.flush()
        text = log_file.read_text()
        assert "stale" not in text
        assert "Bot turn time: 5 millisec" in text

    def test_game_logs_bot_turn_time(self, caplog):
        game = Game(make_config(level=1, max_turns=1))
        with caplog.at_level(logging.INFO, logger="checkers_engine"):
            game.play()
        assert "Bot turn time:" in caplog.text
        assert "Game time:" in caplog.text
        assert "info depth 1" in caplog.text


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL INTERFACE
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    def test_quit_immediately(self, monkeypatch, capsys, restore_logging):
        from interface import cli

        cfg = make_config(white_bot=False)
        monkeypatch.setattr(cli, "CONFIG", cfg)
        monkeypatch.setattr("builtins.input", lambda prompt="": "quit")
        cli.main()
        assert "Game aborted" in capsys.readouterr().out

    def test_bot_game_prints_result(self, monkeypatch, capsys, restore_logging):
        from interface import cli

        monkeypatch.setattr(cli, "CONFIG", make_config(level=1, max_turns=4))
        cli.main()
        out = capsys.readouterr().out
        assert "Game Over" in out
        assert "Result: Draw (turn limit reached)" in out
