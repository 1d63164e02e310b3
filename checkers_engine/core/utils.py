from typing import Sequence

from .board import BOARD_SIZE, FILES, Move

PIECE_CHARS = {0: ".", 1: "w", 2: "b", 3: "W", 4: "B"}


def format_info(depth, score, nodes, elapsed, turns: Sequence[Move]) -> str:
    pv_str = " ".join(str(m) for m in turns) or "-"
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    return f"info depth {depth} score {score:.3f} nodes {nodes} nps {nps} time {int(elapsed * 1000)} pv {pv_str}"


def render_board(board) -> str:
    lines = []
    for x in range(BOARD_SIZE):
        row = " ".join(PIECE_CHARS[int(v)] for v in board[x])
        lines.append(f"{BOARD_SIZE - x} {row}")
    lines.append("  " + " ".join(FILES))
    return "\n".join(lines)
