"""Legal move generation for どうぶつしょうぎ.

合法手の生成。

生成順は決定的:
  1. 盤上の手: 盤面を行優先で走査し、各駒について駒カタログの方向順
  2. 持ち駒打ち: 持ち駒の駒種をカタログ順（重複なし）× 空きマスを行優先

探索の再現性と「同点なら先に生成された手を選ぶ」タイブレークはこの順序に依存する。
"""

from __future__ import annotations

from dataclasses import dataclass

from dobutsu_shogi.game.board import Board, Piece, Position
from dobutsu_shogi.game.state import GameState
from dobutsu_shogi.game.types import Player, piece_directions


@dataclass(frozen=True)
class Move:
    """A board move or a drop.

    to:    移動先
    piece: 動かす駒（打ちの場合は打つ駒）
    from_: 移動元。None なら持ち駒打ち
    """

    to: Position
    piece: Piece
    from_: Position | None = None

    @property
    def is_drop(self) -> bool:
        return self.from_ is None


def legal_moves_from(board: Board, position: Position) -> list[Position]:
    """Return every destination reachable by the piece at position.

    指定マスの駒が1手で移動できるマスを返す。
    盤外・自分の駒のあるマスは除外する。盤外判定は生成器の責任。
    """
    piece = board.piece_at(position.row, position.col)
    if piece is None:
        return []

    destinations: list[Position] = []
    for dr, dc in piece_directions(piece.piece_type, piece.owner, board.variant):
        nr, nc = position.row + dr, position.col + dc
        if not board.in_bounds(nr, nc):
            continue  # 盤外はスキップ
        target = board.piece_at(nr, nc)
        if target is not None and target.owner == piece.owner:
            continue  # 自分の駒のある場所には動けない
        destinations.append(Position(nr, nc))
    return destinations


def legal_drop_positions(board: Board) -> list[Position]:
    """Return every empty square.

    持ち駒を打てるマス（空きマスすべて）。
    二歩のような打ち制限はこのゲームにはない。
    """
    cols = board.cols
    return [
        Position(idx // cols, idx % cols)
        for idx, piece in enumerate(board.squares)
        if piece is None
    ]


def all_legal_moves(state: GameState, player: Player) -> list[Move]:
    """Generate all legal moves for the given player.

    プレイヤーのすべての合法手を生成する。

    Includes:
    - Board moves（盤上の手）
    - Drop moves（持ち駒打ち）

    自玉が取られる手は除外しない（ライオン取りが勝利条件のため）。
    決着済みの局面では空リストを返す。
    """
    if state.winner is not None:
        return []

    board = state.board
    moves: list[Move] = []

    # --- 盤上の手の生成 ---
    for pos, piece in board.pieces():
        if piece.owner != player:
            continue  # 相手の駒はスキップ
        for to in legal_moves_from(board, pos):
            moves.append(Move(to=to, piece=piece, from_=pos))

    # --- 持ち駒打ちの生成 ---
    hand = state.hand(player)
    if hand:
        drops = legal_drop_positions(board)
        # 同じ駒種を重複して生成しないよう、カタログ順に1回ずつ
        for pt in sorted(set(hand)):
            piece = Piece(pt, player)
            for to in drops:
                moves.append(Move(to=to, piece=piece))

    return moves
