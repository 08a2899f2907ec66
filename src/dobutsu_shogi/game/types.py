"""Types, constants and the piece catalog for どうぶつしょうぎ.

どうぶつしょうぎの基本型・定数・駒カタログ。
盤面バリアントは2種類:
  STANDARD: 3列 × 4行（ライオン・きりん・ぞう・ひよこ）
  GORO:     5列 × 6行（ごろごろどうぶつしょうぎ: ライオン・いぬ・ねこ・ひよこ）

移動方向・成り先・成りゾーンはすべてバリアントを引数に取る純粋な表引き。
盤面サイズで分岐せず、必ず Variant タグで分岐する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, unique

Direction = tuple[int, int]  # (行の変化, 列の変化)


@unique
class Variant(Enum):
    """Board variants.

    盤面バリアント。ゲーム中に変わることはない。
    """

    STANDARD = "standard"  # 3×4 どうぶつしょうぎ
    GORO = "goro"          # 5×6 ごろごろどうぶつしょうぎ


@unique
class Player(IntEnum):
    """Player identifiers.

    先手（FIRST）は下側から上に向かって進む（行インデックスが減る方向）。
    後手（SECOND）は上側から下に向かって進む（行インデックスが増える方向）。
    """

    FIRST = 0   # 先手
    SECOND = 1  # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。0↔1 の切り替え。"""
        return Player(1 - self.value)


@unique
class PieceType(IntEnum):
    """Piece kinds across both variants.

    駒種。値の順序が「カタログ順」で、持ち駒打ちの生成順に使う。
    """

    LION = 0      # ライオン — 全方向1マス
    GIRAFFE = 1   # きりん   — 縦横1マス（STANDARD のみ）
    ELEPHANT = 2  # ぞう     — 斜め1マス（STANDARD のみ）
    CHICK = 3     # ひよこ   — 1マス前のみ
    CHICKEN = 4   # にわとり — 成りひよこ（STANDARD）
    DOG = 5       # いぬ     — 金将の動き（GORO のみ）
    CAT = 6       # ねこ     — 銀将の動き（GORO のみ）
    HEN = 7       # にわとり — 成りひよこ（GORO）
    CAT_P = 8     # 成りねこ — 金将の動き（GORO）


@dataclass(frozen=True)
class VariantConfig:
    """Per-variant geometry and promotion rules.

    Attributes:
        rows:                 盤面の行数
        cols:                 盤面の列数
        promotion_zone_depth: 成りゾーンの段数（相手陣地の奥から数える）
        forced_promotions:    ゾーンに入ったら必ず成る駒種
        optional_promotions:  ゾーンに入ったとき成るかどうかを選べる駒種
    """

    rows: int
    cols: int
    promotion_zone_depth: int
    forced_promotions: frozenset[PieceType]
    optional_promotions: frozenset[PieceType]


STANDARD_CONFIG = VariantConfig(
    rows=4,
    cols=3,
    promotion_zone_depth=1,  # 相手の後ろ段のみ
    forced_promotions=frozenset({PieceType.CHICK}),
    optional_promotions=frozenset(),
)

# ごろごろ版の成りゾーンは奥2段とする（設定値として扱う）
GORO_CONFIG = VariantConfig(
    rows=6,
    cols=5,
    promotion_zone_depth=2,
    forced_promotions=frozenset({PieceType.CHICK}),
    optional_promotions=frozenset({PieceType.CAT}),
)

VARIANT_CONFIGS: dict[Variant, VariantConfig] = {
    Variant.STANDARD: STANDARD_CONFIG,
    Variant.GORO: GORO_CONFIG,
}


def variant_config(variant: Variant) -> VariantConfig:
    """バリアントの設定を返す。"""
    return VARIANT_CONFIGS[variant]


_KING: list[Direction] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]  # 全8方向

_GOLD: list[Direction] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, 0),
]  # 金将と同じ動き（斜め後ろを除く6方向）

_SILVER: list[Direction] = [
    (-1, -1), (-1, 0), (-1, 1),
    (1, -1), (1, 1),
]  # 銀将と同じ動き（前3方向 + 斜め後ろ2方向）

# 移動方向の定義: (行の変化, 列の変化) のリスト
# 先手（FIRST）視点で定義。後手（SECOND）は成分ごとに符号反転（盤面180度回転）。
PIECE_MOVES: dict[PieceType, list[Direction]] = {
    PieceType.LION: _KING,
    PieceType.GIRAFFE: [(-1, 0), (0, -1), (0, 1), (1, 0)],  # 縦横4方向
    PieceType.ELEPHANT: [(-1, -1), (-1, 1), (1, -1), (1, 1)],  # 斜め4方向
    PieceType.CHICK: [(-1, 0)],  # 1マス前のみ
    PieceType.CHICKEN: _GOLD,
    PieceType.DOG: _GOLD,
    PieceType.CAT: _SILVER,
    PieceType.HEN: _GOLD,
    PieceType.CAT_P: _GOLD,
}

# バリアントごとの登場駒種（カタログ順）
VARIANT_PIECE_TYPES: dict[Variant, tuple[PieceType, ...]] = {
    Variant.STANDARD: (
        PieceType.LION,
        PieceType.GIRAFFE,
        PieceType.ELEPHANT,
        PieceType.CHICK,
        PieceType.CHICKEN,
    ),
    Variant.GORO: (
        PieceType.LION,
        PieceType.CHICK,
        PieceType.DOG,
        PieceType.CAT,
        PieceType.HEN,
        PieceType.CAT_P,
    ),
}

_PROMOTIONS: dict[Variant, dict[PieceType, PieceType]] = {
    Variant.STANDARD: {PieceType.CHICK: PieceType.CHICKEN},
    Variant.GORO: {
        PieceType.CHICK: PieceType.HEN,
        PieceType.CAT: PieceType.CAT_P,
    },
}

# 成り駒 → 元の駒（取られたら元に戻って相手の持ち駒になる）
_DEMOTIONS: dict[PieceType, PieceType] = {
    PieceType.CHICKEN: PieceType.CHICK,
    PieceType.HEN: PieceType.CHICK,
    PieceType.CAT_P: PieceType.CAT,
}


def piece_directions(
    piece_type: PieceType,
    owner: Player,
    variant: Variant = Variant.STANDARD,
) -> list[Direction]:
    """Return the single-step offsets for a piece.

    駒の移動方向（相対座標）を返す。後手は成分ごとに符号を反転する。
    どの駒も1マスしか動かない（飛び駒はない）。
    """
    if piece_type not in VARIANT_PIECE_TYPES[variant]:
        msg = f"{piece_type.name} does not exist in the {variant.value} variant"
        raise ValueError(msg)
    deltas = PIECE_MOVES[piece_type]
    if owner == Player.SECOND:
        return [(-dr, -dc) for dr, dc in deltas]
    return list(deltas)


def promoted_form(
    piece_type: PieceType,
    variant: Variant = Variant.STANDARD,
) -> PieceType | None:
    """成った後の駒種を返す。成れない駒は None。"""
    return _PROMOTIONS[variant].get(piece_type)


def demoted_form(piece_type: PieceType) -> PieceType:
    """成り駒を元の駒種に戻す。成り駒以外はそのまま。"""
    return _DEMOTIONS.get(piece_type, piece_type)


def is_lion(piece_type: PieceType) -> bool:
    return piece_type == PieceType.LION


def is_promoted(piece_type: PieceType) -> bool:
    return piece_type in _DEMOTIONS


def hand_piece_types(variant: Variant) -> tuple[PieceType, ...]:
    """Piece kinds that can sit in a hand, in catalog order.

    持ち駒になり得る駒種（ライオンと成り駒は持ち駒にならない）。
    """
    return tuple(
        pt
        for pt in VARIANT_PIECE_TYPES[variant]
        if not is_lion(pt) and not is_promoted(pt)
    )
