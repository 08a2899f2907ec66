"""Static evaluation for どうぶつしょうぎ positions.

局面の静的評価関数。指定プレイヤーの視点で整数スコアを返す。

Scoring:
- Terminal sentinel (±WIN_SCORE) — 勝敗が決まった局面
- Material (piece values) — 駒の価値
- Position bonus — 前線・中央ほど高い
- Hand pieces at half weight — 持ち駒は半分の価値
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field

from dobutsu_shogi.game.state import GameState
from dobutsu_shogi.game.types import PieceType, Player, Variant

# 勝敗の番兵値。駒得の最大値より十分大きい
WIN_SCORE = 999_999

# 駒の価値テーブル
# ライオンに圧倒的に高い値を設定することで「ライオンを守る」行動を最優先させる
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.LION: 10_000,
    PieceType.CHICKEN: 700,   # 成り駒は価値が高い
    PieceType.HEN: 700,
    PieceType.CAT_P: 700,
    PieceType.GIRAFFE: 600,
    PieceType.DOG: 600,
    PieceType.ELEPHANT: 500,
    PieceType.CAT: 500,
    PieceType.CHICK: 400,
}

# 位置ボーナス（先手視点。row 0 が相手の後ろ段＝前線）
# 後手の駒は盤面を180度回転して参照する
POSITION_BONUS: dict[Variant, tuple[tuple[int, ...], ...]] = {
    Variant.STANDARD: (
        (30, 40, 30),  # 後手陣地（先手にとって前線）
        (20, 30, 20),
        (10, 20, 10),
        (0, 10, 0),    # 先手陣地
    ),
    Variant.GORO: (
        (50, 55, 60, 55, 50),
        (40, 45, 50, 45, 40),
        (30, 35, 40, 35, 30),
        (20, 25, 30, 25, 20),
        (10, 15, 20, 15, 10),
        (0, 5, 10, 5, 0),
    ),
}


@dataclass
class EvaluationCache:
    """Memo of evaluation scores for a single search.

    1回の探索の間だけ使う評価値キャッシュ。
    対局やバリアントをまたいで使い回すと古い値が残るため、探索ごとに作り直す。
    """

    scores: dict[Hashable, int] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def __len__(self) -> int:
        return len(self.scores)

    def clear(self) -> None:
        self.scores.clear()
        self.hits = 0
        self.misses = 0


def cache_key(state: GameState, for_player: Player) -> Hashable:
    """盤面・持ち駒・手番・勝者・評価プレイヤーからなる正規化キー。"""
    return (state.board, state.hands, state.turn, state.winner, for_player)


def position_bonus(variant: Variant, owner: Player, row: int, col: int) -> int:
    """FIRST 視点の表を引く。SECOND は盤を180°回転して引く（行も列も反転）。"""
    table = POSITION_BONUS[variant]
    if owner == Player.SECOND:
        row = len(table) - 1 - row
        col = len(table[0]) - 1 - col
    return table[row][col]


def evaluate(
    state: GameState,
    for_player: Player,
    cache: EvaluationCache | None = None,
) -> int:
    """Evaluate a position from for_player's perspective.

    局面を for_player の視点から数値評価する。
    有利なほど高く、evaluate(s, p) == -evaluate(s, p.opponent) が成り立つ。
    """
    key = None
    if cache is not None:
        key = cache_key(state, for_player)
        cached = cache.scores.get(key)
        if cached is not None:
            cache.hits += 1
            return cached
        cache.misses += 1

    score = _score(state, for_player)
    if cache is not None:
        cache.scores[key] = score
    return score


def _score(state: GameState, for_player: Player) -> int:
    # 勝敗が決まっている場合は番兵値
    if state.winner is not None:
        return WIN_SCORE if state.winner == for_player else -WIN_SCORE

    score = 0
    variant = state.variant

    # 盤上の駒: 駒の価値 + 位置ボーナス
    for pos, piece in state.board.pieces():
        value = PIECE_VALUES[piece.piece_type]
        value += position_bonus(variant, piece.owner, pos.row, pos.col)
        if piece.owner == for_player:
            score += value
        else:
            score -= value

    # 持ち駒: 半分の価値（打てば盤上の駒になる潜在的な戦力）
    for player in Player:
        for pt in state.hand(player):
            value = PIECE_VALUES[pt] // 2
            score += value if player == for_player else -value

    return score
