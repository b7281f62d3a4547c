from __future__ import annotations

from .game import Game


def perft(game: Game, depth: int) -> int:
    """Count legal move paths of length ``depth`` from ``game``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are played on copies, so ``game`` itself is never modified.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = game.legal_moves()
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        child = game.copy()
        child.make_move(m, validated=True)
        nodes += perft(child, depth - 1)
    return nodes
