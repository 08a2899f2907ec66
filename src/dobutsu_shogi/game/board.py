"""Board representation for どうぶつしょうぎ.

盤面のデータ構造。イミュータブル（frozen=True）設計で、
盤面を変更するメソッドはすべて新しい Board オブジェクトを返す。

イミュータブルにする理由:
- 探索木の各ノードが独立した盤面を持てる
- 「元に戻す」操作が不要になる（新しい状態を作るだけ）
- 兄弟局面どうしが盤面を共有しても干渉しない
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from dobutsu_shogi.game.types import (
    PieceType,
    Player,
    Variant,
    is_lion,
    variant_config,
)


@dataclass(frozen=True)  # イミュータブル（変更不可）なデータクラス
class Piece:
    """A piece on the board.

    盤面上の1つの駒。種類と所有者（先手/後手）を持つ。
    """

    piece_type: PieceType
    owner: Player


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based (row, col) coordinate."""

    row: int
    col: int

    def to_tuple(self) -> tuple[int, int]:
        return (self.row, self.col)


# 初期配置（行ごと）。記号: 大文字=先手、小文字=後手、"."=空マス
_LAYOUTS: dict[Variant, tuple[str, ...]] = {
    Variant.STANDARD: (
        "elg",
        ".c.",
        ".C.",
        "GLE",
    ),
    Variant.GORO: (
        "tdldt",
        ".....",
        ".ccc.",
        ".CCC.",
        ".....",
        "TDLDT",
    ),
}

_LAYOUT_CHARS: dict[str, PieceType] = {
    "l": PieceType.LION,
    "g": PieceType.GIRAFFE,
    "e": PieceType.ELEPHANT,
    "c": PieceType.CHICK,
    "d": PieceType.DOG,
    "t": PieceType.CAT,  # ねこ（"c" はひよこが使うため）
}


def _initial_squares(variant: Variant) -> tuple[Piece | None, ...]:
    """Return the starting position for a variant.

    初期配置を返す。先手・後手は点対称（180度回転）に並ぶ。

    STANDARD:
      Row 0 (top):    SECOND — Elephant Lion Giraffe
      Row 1:          _ Chick(SECOND) _
      Row 2:          _ Chick(FIRST) _
      Row 3 (bottom): FIRST — Giraffe Lion Elephant
    """
    squares: list[Piece | None] = []
    for line in _LAYOUTS[variant]:
        for ch in line:
            if ch == ".":
                squares.append(None)
                continue
            owner = Player.FIRST if ch.isupper() else Player.SECOND
            squares.append(Piece(_LAYOUT_CHARS[ch.lower()], owner))
    return tuple(squares)


@dataclass(frozen=True)
class Board:
    """Immutable grid of squares for one variant.

    squares: rows × cols 要素のタプル（行優先）。各要素は Piece | None。
             squares[row * cols + col] でマス(row, col)にアクセス。
    variant: 盤面バリアント（対局中は固定）。
    """

    variant: Variant = Variant.STANDARD
    squares: tuple[Piece | None, ...] = field(default=())

    def __post_init__(self) -> None:
        config = variant_config(self.variant)
        if not self.squares:
            # frozen なので object.__setattr__ で初期配置を設定する
            object.__setattr__(self, "squares", _initial_squares(self.variant))
        elif len(self.squares) != config.rows * config.cols:
            msg = (
                f"{self.variant.value} board needs {config.rows * config.cols} squares, "
                f"got {len(self.squares)}"
            )
            raise ValueError(msg)

    @classmethod
    def empty(cls, variant: Variant = Variant.STANDARD) -> Board:
        """駒のない盤面を返す（テストや局面設定用）。"""
        config = variant_config(variant)
        return cls(variant=variant, squares=(None,) * (config.rows * config.cols))

    @classmethod
    def from_pieces(
        cls,
        pieces: dict[tuple[int, int], Piece],
        variant: Variant = Variant.STANDARD,
    ) -> Board:
        """Build a board from a {(row, col): piece} mapping."""
        board = cls.empty(variant)
        squares = list(board.squares)
        for (row, col), piece in pieces.items():
            if not board.in_bounds(row, col):
                msg = f"({row}, {col}) is outside the {variant.value} board"
                raise ValueError(msg)
            squares[row * board.cols + col] = piece
        return cls(variant=variant, squares=tuple(squares))

    @property
    def rows(self) -> int:
        return variant_config(self.variant).rows

    @property
    def cols(self) -> int:
        return variant_config(self.variant).cols

    def in_bounds(self, row: int, col: int) -> bool:
        """(row, col) が盤内なら True。"""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def piece_at(self, row: int, col: int) -> Piece | None:
        """Return the piece at (row, col), or None.

        マス(row, col)の駒を返す。駒がなければ None。
        """
        return self.squares[row * self.cols + col]

    def set_piece(self, row: int, col: int, piece: Piece | None) -> Board:
        """Return a new Board with the piece at (row, col) changed.

        マス(row, col)の駒を変更した新しい Board を返す。
        元の Board は変更されない（イミュータブル）。
        """
        idx = row * self.cols + col
        squares = list(self.squares)  # タプルをリストに変換して変更
        squares[idx] = piece
        return Board(variant=self.variant, squares=tuple(squares))

    def pieces(self) -> Iterator[tuple[Position, Piece]]:
        """盤上の駒を行優先順に (位置, 駒) で列挙する。"""
        cols = self.cols
        for idx, piece in enumerate(self.squares):
            if piece is not None:
                yield Position(idx // cols, idx % cols), piece

    def find_lion(self, player: Player) -> Position | None:
        """Return the position of player's lion, or None if captured.

        プレイヤーのライオンの位置を返す。
        ライオンが取られていれば None（勝敗判定に使用）。
        """
        for pos, piece in self.pieces():
            if is_lion(piece.piece_type) and piece.owner == player:
                return pos
        return None

    def home_row(self, player: Player) -> int:
        """プレイヤーの自陣後ろ段（初期配置の段）の行番号。"""
        return self.rows - 1 if player == Player.FIRST else 0

    def lion_in_enemy_home(self, player: Player) -> bool:
        """Return True if player's lion stands on the opponent's home row.

        ライオンが相手の後ろ段にいるか（トライ判定に使用）。
        """
        lion = self.find_lion(player)
        return lion is not None and lion.row == self.home_row(player.opponent)

    def in_promotion_zone(self, player: Player, row: int) -> bool:
        """row がプレイヤーの成りゾーン（相手陣地の奥から数段）にあるか。"""
        depth = variant_config(self.variant).promotion_zone_depth
        if player == Player.FIRST:
            return row < depth
        return row >= self.rows - depth
