"""Minimax search with alpha-beta pruning for どうぶつしょうぎ."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dobutsu_shogi.engine.evaluate import EvaluationCache, evaluate
from dobutsu_shogi.game.display import format_move
from dobutsu_shogi.game.errors import GameOverError
from dobutsu_shogi.game.moves import Move, all_legal_moves
from dobutsu_shogi.game.rules import PromotionOption, apply_move, promotion_option
from dobutsu_shogi.game.state import GameState
from dobutsu_shogi.game.types import Player

logger = logging.getLogger(__name__)

# 難易度 → 探索深さ
DIFFICULTY_DEPTHS: dict[str, int] = {
    "easy": 1,
    "normal": 2,
    "hard": 3,
}


@dataclass(frozen=True)
class SearchConfig:
    """Configuration for minimax search."""

    depth: int = 3  # 探索深さ（手数）。反復深化・時間制限はない
    use_cache: bool = True  # 探索1回分の評価値キャッシュを使うか


@dataclass
class SearchStats:
    """探索1回分の統計。minimax が訪問ノードごとに加算する。"""

    nodes: int = 0


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a root search.

    move:    最善手（合法手がなければ None）
    promote: 成りが任意の手で選んだ成り/不成（それ以外は None）
    score:   探索プレイヤー視点の評価値
    nodes:   訪問したノード数（ルートの子局面以下）
    """

    move: Move | None
    promote: bool | None
    score: float
    nodes: int = 0


def expand(
    state: GameState,
    move: Move,
    cache: EvaluationCache | None = None,
) -> tuple[GameState, bool | None]:
    """Apply move, resolving an optional promotion for the mover.

    手を適用した子局面を返す。成りが任意の場合は、成る/成らないの両方を
    評価関数で比べて指し手にとって高い方を選ぶ（同点なら成る）。
    """
    if promotion_option(state.board, move) is not PromotionOption.OPTIONAL:
        return apply_move(state, move), None

    mover = state.turn
    promoted = apply_move(state, move, promote=True)
    unpromoted = apply_move(state, move, promote=False)
    if evaluate(promoted, mover, cache) >= evaluate(unpromoted, mover, cache):
        return promoted, True
    return unpromoted, False


def minimax(
    state: GameState,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    perspective: Player,
    cache: EvaluationCache | None = None,
    stats: SearchStats | None = None,
) -> float:
    """Minimax search with alpha-beta pruning.

    ミニマックス法 + αβ枝刈りによる探索。評価値は常に perspective 視点。

    alpha: 最大化側が保証できる最低スコア
    beta:  最小化側が保証できる最高スコア
    beta <= alpha になったら残りの兄弟ノードは探索しない。
    """
    if stats is not None:
        stats.nodes += 1

    # 終端条件: 勝敗が決まっているか深さ0
    if depth == 0 or state.winner is not None:
        return evaluate(state, perspective, cache)

    mover = perspective if maximizing else perspective.opponent
    moves = all_legal_moves(state, mover)

    # 合法手がない場合（ライオンがいる限り通常は起こらない）
    if not moves:
        return evaluate(state, perspective, cache)

    if maximizing:
        max_eval = float("-inf")
        for move in moves:
            child, _ = expand(state, move, cache)
            score = minimax(child, depth - 1, alpha, beta, False, perspective, cache, stats)
            max_eval = max(max_eval, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break  # βカット
        return max_eval

    min_eval = float("inf")
    for move in moves:
        child, _ = expand(state, move, cache)
        score = minimax(child, depth - 1, alpha, beta, True, perspective, cache, stats)
        min_eval = min(min_eval, score)
        beta = min(beta, score)
        if beta <= alpha:
            break  # αカット
    return min_eval


def search(state: GameState, config: SearchConfig = SearchConfig()) -> SearchResult:
    """Search for the side to move and return the best move with its score.

    手番プレイヤーの最善手を探す。同点の場合は先に生成された手を選ぶ（決定的）。
    評価値キャッシュはこの呼び出しの間だけ生きる。
    """
    if state.winner is not None:
        msg = f"cannot search a finished game: {state.winner.name} won"
        raise GameOverError(msg)
    if config.depth < 1:
        msg = f"search depth must be at least 1, got {config.depth}"
        raise ValueError(msg)

    perspective = state.turn
    cache = EvaluationCache() if config.use_cache else None
    moves = all_legal_moves(state, perspective)
    if not moves:
        logger.debug("No legal move for %s", perspective.name)
        return SearchResult(move=None, promote=None, score=evaluate(state, perspective))

    best_move = moves[0]
    best_promote: bool | None = None
    best_score = float("-inf")
    stats = SearchStats()

    for move in moves:
        child, promote = expand(state, move, cache)
        score = minimax(
            child,
            config.depth - 1,
            float("-inf"),
            float("inf"),
            False,
            perspective,
            cache,
            stats,
        )
        if score > best_score:
            best_score = score
            best_move = move
            best_promote = promote

    logger.debug(
        "Search depth=%d: %d nodes, cache hits %d, best %s (score %s)",
        config.depth,
        stats.nodes,
        cache.hits if cache is not None else 0,
        format_move(best_move, bool(best_promote)),
        best_score,
    )
    return SearchResult(
        move=best_move,
        promote=best_promote,
        score=best_score,
        nodes=stats.nodes,
    )


def best_move(state: GameState, depth: int = 3) -> Move | None:
    """Return the best move for the side to move, or None if it has no move.

    ミニマックス探索で最善手を返す。depth=3 が既定の難易度。
    """
    return search(state, SearchConfig(depth=depth)).move
