"""Game state for どうぶつしょうぎ.

どうぶつしょうぎの対局状態（ゲームツリーのノード）。
Board が盤面を、GameState が持ち駒・手番・勝敗・トライ待ちを持つ。
状態遷移（rules.apply_move）は常に新しい GameState を返す。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from dobutsu_shogi.game.board import Board
from dobutsu_shogi.game.errors import IllegalMoveError
from dobutsu_shogi.game.types import PieceType, Player, Variant, demoted_form, is_lion

Hand = tuple[PieceType, ...]


@dataclass(frozen=True)  # イミュータブル: 遷移は新しいオブジェクトを返す
class GameState:
    """Immutable game state.

    board:       盤面（バリアントを含む）
    hands:       hands[0]=先手の持ち駒、hands[1]=後手の持ち駒（ソート済みタプル）
    turn:        手番プレイヤー
    winner:      勝者。決着前は None、決着後は変化しない
    try_pending: 直前の手でライオンが相手の後ろ段に入ったプレイヤー（トライ待ち）
    """

    board: Board = field(default_factory=Board)
    hands: tuple[Hand, Hand] = ((), ())
    turn: Player = Player.FIRST
    winner: Player | None = None
    try_pending: Player | None = None

    @property
    def variant(self) -> Variant:
        return self.board.variant

    @property
    def is_terminal(self) -> bool:
        """ゲームが終局ならば True。"""
        return self.winner is not None

    def hand(self, player: Player) -> Hand:
        return self.hands[player.value]

    def add_to_hand(self, player: Player, piece_type: PieceType) -> GameState:
        """Return a new state with piece_type added to player's hand.

        プレイヤーの持ち駒に駒を追加した新しい状態を返す。
        成り駒を取ったら元の駒種に戻す（にわとり → ひよこ）。
        ライオンは持ち駒にならない。
        """
        piece_type = demoted_form(piece_type)
        if is_lion(piece_type):
            msg = "a lion never enters a hand"
            raise IllegalMoveError(msg)
        hands = list(self.hands)
        # ソートすることで持ち駒の順序を一意に保つ
        hands[player.value] = tuple(sorted((*hands[player.value], piece_type)))
        return replace(self, hands=(hands[0], hands[1]))

    def remove_from_hand(self, player: Player, piece_type: PieceType) -> GameState:
        """Return a new state with one piece_type removed from player's hand.

        プレイヤーの持ち駒から駒を1枚取り除いた新しい状態を返す。
        """
        hand = list(self.hands[player.value])
        if piece_type not in hand:
            msg = f"{player.name} has no {piece_type.name} in hand"
            raise IllegalMoveError(msg)
        hand.remove(piece_type)  # 最初に見つかった1枚を削除
        hands = list(self.hands)
        hands[player.value] = tuple(hand)
        return replace(self, hands=(hands[0], hands[1]))


def create_initial_state(
    variant: Variant = Variant.STANDARD,
    first_player: Player = Player.FIRST,
) -> GameState:
    """Return the starting state of a game.

    初期局面を返す。先手番の決定（コイントス）は呼び出し側が行い、
    結果を first_player として渡す。
    """
    return GameState(board=Board(variant=variant), turn=first_player)
