"""Terminal display for どうぶつしょうぎ boards.

盤面をターミナルに表示するためのモジュール。
"""

from __future__ import annotations

from dobutsu_shogi.game.board import Board, Position
from dobutsu_shogi.game.moves import Move
from dobutsu_shogi.game.state import GameState, Hand
from dobutsu_shogi.game.types import PieceType, Player

# 駒の表示文字: 大文字=先手、小文字=後手
PIECE_CHARS: dict[PieceType, str] = {
    PieceType.LION: "L",      # ライオン
    PieceType.GIRAFFE: "G",   # きりん
    PieceType.ELEPHANT: "E",  # ぞう
    PieceType.CHICK: "C",     # ひよこ
    PieceType.CHICKEN: "H",   # にわとり（成りひよこ）
    PieceType.DOG: "D",       # いぬ
    PieceType.CAT: "T",       # ねこ
    PieceType.HEN: "H",       # にわとり（ごろごろ版）
    PieceType.CAT_P: "N",     # 成りねこ
}

# 日本語の駒名（CLI や Web API の表示に使用）
PIECE_NAMES_JA: dict[PieceType, str] = {
    PieceType.LION: "ライオン",
    PieceType.GIRAFFE: "きりん",
    PieceType.ELEPHANT: "ぞう",
    PieceType.CHICK: "ひよこ",
    PieceType.CHICKEN: "にわとり",
    PieceType.DOG: "いぬ",
    PieceType.CAT: "ねこ",
    PieceType.HEN: "にわとり",
    PieceType.CAT_P: "成りねこ",
}

PLAYER_LABELS: dict[Player, str] = {
    Player.FIRST: "FIRST",
    Player.SECOND: "SECOND",
}


def piece_to_char(piece_type: PieceType, owner: Player) -> str:
    """Convert a piece to its display character.

    駒を表示文字に変換する。先手は大文字、後手は小文字。
    """
    char = PIECE_CHARS[piece_type]
    if owner == Player.SECOND:
        return char.lower()  # 後手の駒は小文字
    return char               # 先手の駒は大文字


def hand_to_str(hand: Hand) -> str:
    """Convert a hand to display string.

    持ち駒を文字列に変換する。持ち駒なしの場合は "-"。
    """
    if not hand:
        return "-"
    return " ".join(PIECE_CHARS[pt] for pt in hand)


def square_name(pos: Position) -> str:
    """マス名。列: a, b, c...（左から右）、行: 1, 2, 3...（上から下）。"""
    return f"{chr(ord('a') + pos.col)}{pos.row + 1}"


def format_move(move: Move, promote: bool = False) -> str:
    """Format a move for display.

    例: 盤上の手 → "b3 -> b2"
        成り      → "b2 -> b1+"
        持ち駒打ち → "drop ひよこ -> b2"
    """
    suffix = "+" if promote else ""
    if move.from_ is None:
        return f"drop {PIECE_NAMES_JA[move.piece.piece_type]} -> {square_name(move.to)}"
    return f"{square_name(move.from_)} -> {square_name(move.to)}{suffix}"


def board_to_str(board: Board, hands: tuple[Hand, Hand] = ((), ())) -> str:
    """Convert a board to a human-readable string.

    盤面を人間が読みやすい文字列に変換する。

    Example output (standard variant, initial position):
        SECOND hand: -
          a b c
        1 e l g
        2 . c .
        3 . C .
        4 G L E
        FIRST hand: -
    """
    lines: list[str] = []

    # 後手の持ち駒（上段に表示）
    lines.append(f"SECOND hand: {hand_to_str(hands[Player.SECOND.value])}")

    col_labels = " ".join(chr(ord("a") + c) for c in range(board.cols))
    lines.append(f"  {col_labels}")

    for r in range(board.rows):
        row_chars: list[str] = []
        for c in range(board.cols):
            piece = board.piece_at(r, c)
            if piece is None:
                row_chars.append(".")
            else:
                row_chars.append(piece_to_char(piece.piece_type, piece.owner))
        lines.append(f"{r + 1} {' '.join(row_chars)}")

    # 先手の持ち駒（下段に表示）
    lines.append(f"FIRST hand: {hand_to_str(hands[Player.FIRST.value])}")

    return "\n".join(lines)


def state_to_str(state: GameState) -> str:
    """盤面に手番・トライ待ち・勝者の情報を付けて表示する。"""
    lines = [board_to_str(state.board, state.hands)]
    if state.winner is not None:
        lines.append(f"winner: {PLAYER_LABELS[state.winner]}")
    else:
        lines.append(f"turn: {PLAYER_LABELS[state.turn]}")
        if state.try_pending is not None:
            lines.append(f"try pending: {PLAYER_LABELS[state.try_pending]}")
    return "\n".join(lines)
