# checkers_engine/config.py
import logging
import os
import tomllib  # python >=3.11
from dataclasses import dataclass, field
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

SCORING_MODES = ("Plain", "NumberAndPotential")


@dataclass
class SearchConfig:
    depth: int = 4
    optimization: str = "O1"  # "O0" disables alpha-beta pruning
    no_random: bool = False  # fixed shuffle seed for reproducible games


@dataclass
class EvalConfig:
    scoring_mode: str = "NumberAndPotential"
    king_value_plain: float = 4
    king_value_positional: float = 5
    advance_bonus: float = 0.05  # per row a man has advanced


@dataclass
class BotConfig:
    is_white_bot: bool = False
    is_black_bot: bool = True
    white_level: int = 4
    black_level: int = 4
    delay_ms: int = 0


@dataclass
class GameConfig:
    max_turns: int = 120


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    bot: BotConfig = field(default_factory=BotConfig)
    game: GameConfig = field(default_factory=GameConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "bot", "game"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Unknown config key %s.%s ignored", section, k)
        for k in ("log_level", "log_file"):
            if k in raw:
                setattr(cfg, k, raw[k])
        return cfg


def apply_env_overrides(cfg: Config, environ: Mapping[str, str] = os.environ) -> Config:
    """Allow env override of depth for quick debugging."""
    override_depth = environ.get("CHECKERS_SEARCH_DEPTH")
    if override_depth:
        try:
            cfg.search.depth = int(override_depth)
        except ValueError:
            logger.warning("Ignoring invalid CHECKERS_SEARCH_DEPTH=%r", override_depth)
    return cfg


def configure_logging(cfg: Optional[Config] = None):
    """Route log records to stderr and, if configured, to a fresh log file."""
    cfg = cfg or CONFIG
    handlers = [logging.StreamHandler()]
    if cfg.log_file:
        handlers.append(logging.FileHandler(cfg.log_file, mode="w"))
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def load_config(path: Optional[str] = None) -> Config:
    """Read the TOML file (default ``$CHECKERS_CONFIG_TOML``) and apply env overrides."""
    return apply_env_overrides(Config.load_from_toml(path or CONFIG_PATH))


# single globally importable config instance
CONFIG_PATH = os.environ.get("CHECKERS_CONFIG_TOML", "config.toml")
CONFIG = load_config()
