"""どうぶつしょうぎ rules engine — 3x4 standard and 5x6 goro variants."""

from dobutsu_shogi.game.board import Board, Piece, Position
from dobutsu_shogi.game.display import board_to_str, format_move
from dobutsu_shogi.game.errors import (
    GameOverError,
    IllegalMoveError,
    PromotionChoiceRequired,
    RulesError,
)
from dobutsu_shogi.game.moves import (
    Move,
    all_legal_moves,
    legal_drop_positions,
    legal_moves_from,
)
from dobutsu_shogi.game.rules import PromotionOption, apply_move, is_legal, promotion_option
from dobutsu_shogi.game.state import GameState, create_initial_state
from dobutsu_shogi.game.types import PieceType, Player, Variant

__all__ = [
    "Board",
    "GameOverError",
    "GameState",
    "IllegalMoveError",
    "Move",
    "Piece",
    "PieceType",
    "Player",
    "Position",
    "PromotionChoiceRequired",
    "PromotionOption",
    "RulesError",
    "Variant",
    "all_legal_moves",
    "apply_move",
    "board_to_str",
    "create_initial_state",
    "format_move",
    "is_legal",
    "legal_drop_positions",
    "legal_moves_from",
    "promotion_option",
]
