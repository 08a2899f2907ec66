"""State transition (rules engine) for どうぶつしょうぎ.

手を適用して新しい対局状態を返す。入力の状態は変更しない。

1手の処理順:
  1. 持ち駒打ち: 持ち駒から1枚減らして盤上に置く
  2. 盤上の手: 相手の駒があれば取る（成り駒は元に戻して持ち駒へ。ライオンは持ち駒にならない）
  3. 成り: 強制 / 任意 / なし の3状態
  4. キャッチ勝ち: ライオンがいなくなったプレイヤーの負け
  5. トライ勝ち: 直前にトライ待ちだったライオンが取られずに残っていれば勝ち
  6. 新しいトライ待ち: 指した側のライオンが相手の後ろ段にいればセット
  7. 手番交代（決着したら手番は固定）
"""

from __future__ import annotations

import logging
from enum import Enum, unique
from typing import NoReturn

from dobutsu_shogi.game.board import Board, Piece
from dobutsu_shogi.game.errors import (
    GameOverError,
    IllegalMoveError,
    PromotionChoiceRequired,
)
from dobutsu_shogi.game.moves import Move, all_legal_moves
from dobutsu_shogi.game.state import GameState
from dobutsu_shogi.game.types import Player, is_lion, promoted_form, variant_config

logger = logging.getLogger(__name__)


@unique
class PromotionOption(Enum):
    """Whether a move promotes, and who decides."""

    NONE = "none"          # 成れない
    FORCED = "forced"      # 必ず成る（エンジンが決める）
    OPTIONAL = "optional"  # 成るかどうかを呼び出し側が決める


def promotion_option(board: Board, move: Move) -> PromotionOption:
    """Classify the promotion decision attached to a move.

    手の成り判定。打ちは成らない。移動先が成りゾーンに入るかで判定する。
    """
    if move.from_ is None:
        return PromotionOption.NONE
    piece_type = move.piece.piece_type
    if promoted_form(piece_type, board.variant) is None:
        return PromotionOption.NONE  # 成れない駒
    if not board.in_promotion_zone(move.piece.owner, move.to.row):
        return PromotionOption.NONE

    config = variant_config(board.variant)
    if piece_type in config.forced_promotions:
        return PromotionOption.FORCED
    if piece_type in config.optional_promotions:
        return PromotionOption.OPTIONAL
    return PromotionOption.NONE


def is_legal(state: GameState, move: Move) -> bool:
    """Return True if move is one the generator produces for the side to move."""
    return move in all_legal_moves(state, state.turn)


def apply_move(
    state: GameState,
    move: Move,
    promote: bool | None = None,
) -> GameState:
    """Apply a move and return the new game state.

    手を適用して新しい GameState を返す。
    幾何的な合法性は再検証しない（生成器が作った手だけを渡すこと）。
    持っていない駒の打ちや決着後の局面への適用は例外を送出する。
    """
    if state.winner is not None:
        msg = f"game is already over: {state.winner.name} won"
        raise GameOverError(msg)

    mover = state.turn
    if move.piece.owner != mover:
        _reject(f"{mover.name} cannot move a {move.piece.owner.name} piece")

    board = state.board
    do_promote = _resolve_promotion(promotion_option(board, move), promote)
    next_state = state

    if move.from_ is None:
        # --- 持ち駒打ち ---
        if board.piece_at(move.to.row, move.to.col) is not None:
            _reject(f"cannot drop on occupied square {move.to.to_tuple()}")
        next_state = next_state.remove_from_hand(mover, move.piece.piece_type)
        board = board.set_piece(move.to.row, move.to.col, move.piece)
    else:
        # --- 盤上の手 ---
        piece = board.piece_at(move.from_.row, move.from_.col)
        if piece != move.piece:
            _reject(f"no {move.piece} at {move.from_.to_tuple()}")

        target = board.piece_at(move.to.row, move.to.col)
        if target is not None:
            if target.owner == mover:
                _reject(f"cannot capture own piece at {move.to.to_tuple()}")
            # ライオンは持ち駒にならない（取った時点で勝敗が決まる）
            if not is_lion(target.piece_type):
                next_state = next_state.add_to_hand(mover, target.piece_type)

        placed = move.piece
        if do_promote:
            promoted = promoted_form(move.piece.piece_type, board.variant)
            assert promoted is not None
            placed = Piece(promoted, mover)

        # 駒を移動: 移動元を空にして、移動先に駒を置く
        board = board.set_piece(move.from_.row, move.from_.col, None)
        board = board.set_piece(move.to.row, move.to.col, placed)

    # キャッチ勝ちの判定
    winner = _capture_winner(board)

    # トライ勝ちの判定: 前の手番でトライ待ちだったライオンがまだ相手陣地にいる
    if winner is None and state.try_pending is not None:
        if board.lion_in_enemy_home(state.try_pending):
            winner = state.try_pending

    # 新しいトライ待ち状態
    try_pending: Player | None = None
    if winner is None and board.lion_in_enemy_home(mover):
        try_pending = mover

    return GameState(
        board=board,
        hands=next_state.hands,
        turn=mover if winner is not None else mover.opponent,
        winner=winner,
        try_pending=try_pending,
    )


def _resolve_promotion(option: PromotionOption, promote: bool | None) -> bool:
    if option is PromotionOption.FORCED:
        if promote is False:
            _reject("promotion is forced for this move")
        return True
    if option is PromotionOption.NONE:
        if promote:
            _reject("this move cannot promote")
        return False
    if promote is None:
        raise PromotionChoiceRequired("promotion is optional: pass promote=True or False")
    return promote


def _capture_winner(board: Board) -> Player | None:
    """ライオンを失ったプレイヤーの相手を勝者として返す。"""
    for player in Player:
        if board.find_lion(player) is None:
            return player.opponent
    return None


def _reject(msg: str) -> NoReturn:
    logger.warning("Move rejected: %s", msg)
    raise IllegalMoveError(msg)
