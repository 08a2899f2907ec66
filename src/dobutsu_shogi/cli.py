"""CLI entry point for dobutsu-shogi — Human vs Minimax AI.

コマンドラインで動くどうぶつしょうぎ対局プログラム。
プレイヤー（先手）対ミニマックスAI（後手）で対局できる。

起動方法: `dobutsu-cli --variant goro --depth 2 --coin-flip`
"""

from __future__ import annotations

import argparse
import logging
import random

from dobutsu_shogi.engine.minimax import DIFFICULTY_DEPTHS, SearchConfig, search
from dobutsu_shogi.game.display import format_move, state_to_str
from dobutsu_shogi.game.errors import RulesError
from dobutsu_shogi.game.moves import all_legal_moves
from dobutsu_shogi.game.rules import PromotionOption, apply_move, promotion_option
from dobutsu_shogi.game.state import GameState, create_initial_state
from dobutsu_shogi.game.types import Player, Variant


def coin_flip(rng: random.Random | None = None) -> Player:
    """コイントスで先手番を決める。"""
    rng = rng or random.Random()
    return Player.FIRST if rng.random() < 0.5 else Player.SECOND


def _ask_promotion() -> bool:
    while True:
        answer = input("Promote? [y/n]: ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Enter y or n.")


def _human_turn(state: GameState) -> GameState | None:
    """Prompt for a move; return the new state, or None if the user quits."""
    moves = all_legal_moves(state, state.turn)
    print("Legal moves:")
    for i, m in enumerate(moves):
        print(f"  {i}: {format_move(m)}")
    print()

    # 入力検証ループ（正しい番号が入力されるまで繰り返す）
    while True:
        try:
            idx = int(input("Your move (number): "))
            if not 0 <= idx < len(moves):
                print(f"Invalid: choose 0-{len(moves) - 1}")
                continue
            move = moves[idx]
            promote = None
            if promotion_option(state.board, move) is PromotionOption.OPTIONAL:
                promote = _ask_promotion()
            return apply_move(state, move, promote)
        except RulesError as exc:
            print(f"Rejected: {exc}")
        except ValueError:
            print("Enter a number.")
        except (EOFError, KeyboardInterrupt):
            print("\nGame aborted.")
            return None


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play どうぶつしょうぎ against a minimax AI")
    parser.add_argument(
        "--variant",
        choices=[v.value for v in Variant],
        default=Variant.STANDARD.value,
        help="board variant (standard 3x4 or goro 5x6)",
    )
    depth = parser.add_mutually_exclusive_group()
    depth.add_argument("--depth", type=int, default=3, help="AI search depth")
    depth.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTY_DEPTHS),
        help="named search depth preset",
    )
    parser.add_argument(
        "--coin-flip",
        action="store_true",
        help="decide the first player randomly",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run a Human (FIRST) vs Minimax AI (SECOND) game.

    ゲームの流れ:
    1. 盤面を表示
    2. 人間の番なら合法手一覧を表示して番号入力を求める
    3. AI の番ならミニマックス探索で応答する
    4. 終局まで繰り返す
    """
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    variant = Variant(args.variant)
    depth = DIFFICULTY_DEPTHS[args.difficulty] if args.difficulty else args.depth
    config = SearchConfig(depth=depth)

    first = coin_flip() if args.coin_flip else Player.FIRST
    print("=== どうぶつしょうぎ ===")
    print("You are FIRST (uppercase). AI is SECOND (lowercase).")
    print(f"{first.name} moves first.")
    print()

    state = create_initial_state(variant, first)

    while state.winner is None and all_legal_moves(state, state.turn):
        print(state_to_str(state))
        print()

        if state.turn == Player.FIRST:
            next_state = _human_turn(state)
            if next_state is None:
                return
            state = next_state
        else:
            result = search(state, config)
            if result.move is None:
                break
            print(f"AI plays: {format_move(result.move, bool(result.promote))}")
            state = apply_move(state, result.move, result.promote)

        print()

    # 終局: 結果を表示
    print(state_to_str(state))
    print()
    if state.winner == Player.FIRST:
        print("You win!")
    elif state.winner == Player.SECOND:
        print("AI wins!")
    else:
        print("No legal move left.")


if __name__ == "__main__":
    main()
