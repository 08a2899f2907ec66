"""Exceptions raised when a caller breaks the rules-engine contract.

ルールエンジンの契約違反を表す例外。
合法手がない状態はエラーではなく、空リスト / None で表す。
"""

from __future__ import annotations


class RulesError(ValueError):
    """契約違反の基底クラス。"""


class IllegalMoveError(RulesError):
    """生成器が作らない手（持っていない駒の打ち、他人の駒の移動など）。"""


class GameOverError(RulesError):
    """勝敗が決まった局面に対して手を指そうとした / 探索しようとした。"""


class PromotionChoiceRequired(RulesError):
    """成りが任意の手で、成る/成らないが指定されていない。"""
