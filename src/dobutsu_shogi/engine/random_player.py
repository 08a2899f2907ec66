"""Random player — selects a legal move uniformly at random.

ランダムプレイヤー: 合法手の中からランダムに手を選ぶ。

用途:
- 実装の動作確認（ランダム対局でルールの不変条件を検証する）
- ベースラインとの対戦（ランダムに勝てないAIは弱すぎる）
"""

from __future__ import annotations

import random

from dobutsu_shogi.game.moves import Move, all_legal_moves
from dobutsu_shogi.game.rules import PromotionOption, promotion_option
from dobutsu_shogi.game.state import GameState


def random_move(
    state: GameState,
    rng: random.Random | None = None,
) -> tuple[Move, bool | None]:
    """Return a random legal move and a promotion choice for it.

    合法手の中から一様ランダムで1手を返す。成りが任意なら成り/不成もランダム。
    合法手がない場合は ValueError を送出する（終局局面では呼ばれないはず）。
    """
    rng = rng or random.Random()
    moves = all_legal_moves(state, state.turn)
    if not moves:
        raise ValueError("No legal moves available")
    move = rng.choice(moves)  # 一様ランダムサンプリング
    promote = None
    if promotion_option(state.board, move) is PromotionOption.OPTIONAL:
        promote = rng.random() < 0.5
    return move, promote
