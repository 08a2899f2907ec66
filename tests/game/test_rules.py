"""Tests for the state transition (apply_move)."""

import pytest

from dobutsu_shogi.game.board import Board, Piece, Position
from dobutsu_shogi.game.errors import (
    GameOverError,
    IllegalMoveError,
    PromotionChoiceRequired,
)
from dobutsu_shogi.game.moves import Move
from dobutsu_shogi.game.rules import (
    PromotionOption,
    apply_move,
    is_legal,
    promotion_option,
)
from dobutsu_shogi.game.state import GameState, create_initial_state
from dobutsu_shogi.game.types import PieceType, Player, Variant

F_LION = Piece(PieceType.LION, Player.FIRST)
S_LION = Piece(PieceType.LION, Player.SECOND)


def _state(
    pieces: dict[tuple[int, int], Piece],
    turn: Player = Player.FIRST,
    variant: Variant = Variant.STANDARD,
    **kwargs: object,
) -> GameState:
    board = Board.from_pieces(pieces, variant=variant)
    return GameState(board=board, turn=turn, **kwargs)  # type: ignore[arg-type]


def _board_move(state: GameState, src: tuple[int, int], dst: tuple[int, int]) -> Move:
    piece = state.board.piece_at(*src)
    assert piece is not None
    return Move(to=Position(*dst), piece=piece, from_=Position(*src))


class TestBoardMoves:
    def test_chick_advance_from_initial(self) -> None:
        state = create_initial_state()
        new_state = apply_move(state, _board_move(state, (2, 1), (1, 1)))
        assert new_state.board.piece_at(1, 1) == Piece(PieceType.CHICK, Player.FIRST)
        assert new_state.board.piece_at(2, 1) is None
        assert new_state.turn == Player.SECOND
        # 後手のひよこを取った
        assert new_state.hand(Player.FIRST) == (PieceType.CHICK,)

    def test_apply_does_not_mutate(self) -> None:
        state = create_initial_state()
        apply_move(state, _board_move(state, (3, 1), (2, 0)))
        assert state == create_initial_state()

    def test_chick_promotes_on_last_row(self) -> None:
        state = _state({
            (1, 0): Piece(PieceType.CHICK, Player.FIRST),
            (3, 2): F_LION,
            (0, 2): S_LION,
        })
        new_state = apply_move(state, _board_move(state, (1, 0), (0, 0)))
        assert new_state.board.piece_at(0, 0) == Piece(PieceType.CHICKEN, Player.FIRST)

    def test_second_chick_promotes_on_row_three(self) -> None:
        state = _state(
            {
                (2, 0): Piece(PieceType.CHICK, Player.SECOND),
                (3, 2): F_LION,
                (0, 2): S_LION,
            },
            turn=Player.SECOND,
        )
        new_state = apply_move(state, _board_move(state, (2, 0), (3, 0)))
        assert new_state.board.piece_at(3, 0) == Piece(PieceType.CHICKEN, Player.SECOND)

    def test_other_pieces_do_not_promote(self) -> None:
        state = _state({
            (1, 0): Piece(PieceType.GIRAFFE, Player.FIRST),
            (3, 2): F_LION,
            (0, 2): S_LION,
        })
        new_state = apply_move(state, _board_move(state, (1, 0), (0, 0)))
        assert new_state.board.piece_at(0, 0) == Piece(PieceType.GIRAFFE, Player.FIRST)

    def test_capturing_chicken_gives_chick(self) -> None:
        state = _state({
            (3, 0): Piece(PieceType.GIRAFFE, Player.FIRST),
            (2, 0): Piece(PieceType.CHICKEN, Player.SECOND),
            (3, 2): F_LION,
            (0, 1): S_LION,
        })
        new_state = apply_move(state, _board_move(state, (3, 0), (2, 0)))
        assert new_state.hand(Player.FIRST) == (PieceType.CHICK,)
        assert new_state.board.piece_at(2, 0) == Piece(PieceType.GIRAFFE, Player.FIRST)


class TestDrops:
    def test_drop_places_piece_and_consumes_hand(self) -> None:
        state = create_initial_state()
        state = GameState(board=state.board, hands=((PieceType.CHICK, PieceType.CHICK), ()))
        move = Move(to=Position(1, 0), piece=Piece(PieceType.CHICK, Player.FIRST))
        new_state = apply_move(state, move)
        assert new_state.board.piece_at(1, 0) == Piece(PieceType.CHICK, Player.FIRST)
        assert new_state.hand(Player.FIRST) == (PieceType.CHICK,)
        assert new_state.turn == Player.SECOND

    def test_drop_does_not_promote(self) -> None:
        """相手の後ろ段に打ったひよこは成らない。"""
        state = _state(
            {(3, 2): F_LION, (0, 1): S_LION},
            hands=((PieceType.CHICK,), ()),
        )
        move = Move(to=Position(0, 0), piece=Piece(PieceType.CHICK, Player.FIRST))
        assert promotion_option(state.board, move) is PromotionOption.NONE
        new_state = apply_move(state, move)
        assert new_state.board.piece_at(0, 0) == Piece(PieceType.CHICK, Player.FIRST)

    def test_drop_absent_kind_fails(self) -> None:
        state = create_initial_state()
        move = Move(to=Position(1, 0), piece=Piece(PieceType.GIRAFFE, Player.FIRST))
        with pytest.raises(IllegalMoveError):
            apply_move(state, move)

    def test_drop_on_occupied_square_fails(self) -> None:
        state = GameState(hands=((PieceType.CHICK,), ()))
        move = Move(to=Position(2, 1), piece=Piece(PieceType.CHICK, Player.FIRST))
        with pytest.raises(IllegalMoveError):
            apply_move(state, move)


class TestContractViolations:
    def test_moving_opponent_piece(self) -> None:
        state = create_initial_state()
        move = Move(to=Position(2, 1), piece=Piece(PieceType.CHICK, Player.SECOND), from_=Position(1, 1))
        with pytest.raises(IllegalMoveError):
            apply_move(state, move)

    def test_piece_mismatch(self) -> None:
        state = create_initial_state()
        move = Move(to=Position(2, 0), piece=Piece(PieceType.GIRAFFE, Player.FIRST), from_=Position(3, 1))
        with pytest.raises(IllegalMoveError):
            apply_move(state, move)

    def test_finished_game(self) -> None:
        state = GameState(winner=Player.SECOND)
        move = Move(to=Position(1, 1), piece=Piece(PieceType.CHICK, Player.FIRST), from_=Position(2, 1))
        with pytest.raises(GameOverError):
            apply_move(state, move)

    def test_is_legal(self) -> None:
        state = create_initial_state()
        assert is_legal(state, _board_move(state, (3, 1), (2, 2)))
        lion_jump = Move(to=Position(1, 1), piece=F_LION, from_=Position(3, 1))
        assert not is_legal(state, lion_jump)


class TestLionCapture:
    def test_capturing_lion_wins(self) -> None:
        state = _state({
            (1, 1): Piece(PieceType.GIRAFFE, Player.FIRST),
            (0, 1): S_LION,
            (3, 1): F_LION,
        })
        new_state = apply_move(state, _board_move(state, (1, 1), (0, 1)))
        assert new_state.winner == Player.FIRST
        assert new_state.is_terminal
        # ライオンは持ち駒にならない
        assert new_state.hand(Player.FIRST) == ()

    def test_second_captures_lion(self) -> None:
        state = _state(
            {(2, 1): F_LION, (1, 1): S_LION},
            turn=Player.SECOND,
        )
        new_state = apply_move(state, _board_move(state, (1, 1), (2, 1)))
        assert new_state.winner == Player.SECOND


class TestTryRule:
    def _entered(self) -> GameState:
        state = _state({(1, 0): F_LION, (2, 2): S_LION})
        return apply_move(state, _board_move(state, (1, 0), (0, 0)))

    def test_reaching_home_row_sets_pending(self) -> None:
        state = self._entered()
        assert state.try_pending == Player.FIRST
        assert state.winner is None
        assert state.turn == Player.SECOND

    def test_survived_lion_wins(self) -> None:
        state = self._entered()
        final = apply_move(state, _board_move(state, (2, 2), (2, 1)))
        assert final.winner == Player.FIRST
        assert final.turn == Player.SECOND  # 決着後は手番が固定される

    def test_captured_lion_does_not_win(self) -> None:
        state = _state({
            (1, 0): F_LION,
            (0, 1): Piece(PieceType.GIRAFFE, Player.SECOND),
            (3, 2): S_LION,
        })
        state = apply_move(state, _board_move(state, (1, 0), (0, 0)))
        assert state.try_pending == Player.FIRST
        final = apply_move(state, _board_move(state, (0, 1), (0, 0)))
        assert final.winner == Player.SECOND

    def test_pending_cleared_when_not_in_home_row(self) -> None:
        state = _state({(2, 0): F_LION, (1, 2): S_LION})
        new_state = apply_move(state, _board_move(state, (2, 0), (1, 0)))
        assert new_state.try_pending is None

    def test_second_player_try(self) -> None:
        state = _state({(2, 2): S_LION, (1, 0): F_LION}, turn=Player.SECOND)
        state = apply_move(state, _board_move(state, (2, 2), (3, 2)))
        assert state.try_pending == Player.SECOND
        final = apply_move(state, _board_move(state, (1, 0), (0, 0)))
        # 先手のライオンも後ろ段に入ったが、先に後手のトライが成立する
        assert final.winner == Player.SECOND


class TestGoroPromotion:
    def _cat_state(self) -> GameState:
        return _state(
            {
                (2, 0): Piece(PieceType.CAT, Player.FIRST),
                (5, 2): F_LION,
                (0, 4): S_LION,
            },
            variant=Variant.GORO,
        )

    def test_cat_promotion_is_optional(self) -> None:
        state = self._cat_state()
        move = _board_move(state, (2, 0), (1, 0))
        assert promotion_option(state.board, move) is PromotionOption.OPTIONAL

    def test_choice_required(self) -> None:
        state = self._cat_state()
        with pytest.raises(PromotionChoiceRequired):
            apply_move(state, _board_move(state, (2, 0), (1, 0)))

    def test_promote_and_decline(self) -> None:
        state = self._cat_state()
        move = _board_move(state, (2, 0), (1, 0))
        promoted = apply_move(state, move, promote=True)
        declined = apply_move(state, move, promote=False)
        assert promoted.board.piece_at(1, 0) == Piece(PieceType.CAT_P, Player.FIRST)
        assert declined.board.piece_at(1, 0) == Piece(PieceType.CAT, Player.FIRST)

    def test_cat_outside_zone(self) -> None:
        state = _state(
            {(3, 0): Piece(PieceType.CAT, Player.FIRST), (5, 2): F_LION, (0, 4): S_LION},
            variant=Variant.GORO,
        )
        move = _board_move(state, (3, 0), (2, 0))
        assert promotion_option(state.board, move) is PromotionOption.NONE
        with pytest.raises(IllegalMoveError):
            apply_move(state, move, promote=True)

    def test_goro_chick_forced_to_hen(self) -> None:
        state = _state(
            {(2, 2): Piece(PieceType.CHICK, Player.FIRST), (5, 2): F_LION, (0, 4): S_LION},
            variant=Variant.GORO,
        )
        move = _board_move(state, (2, 2), (1, 2))
        assert promotion_option(state.board, move) is PromotionOption.FORCED
        new_state = apply_move(state, move)
        assert new_state.board.piece_at(1, 2) == Piece(PieceType.HEN, Player.FIRST)
        with pytest.raises(IllegalMoveError):
            apply_move(state, move, promote=False)

    def test_capturing_promoted_cat_gives_cat(self) -> None:
        state = _state(
            {
                (4, 0): Piece(PieceType.CAT_P, Player.SECOND),
                (5, 1): Piece(PieceType.DOG, Player.FIRST),
                (5, 2): F_LION,
                (0, 4): S_LION,
            },
            variant=Variant.GORO,
        )
        new_state = apply_move(state, _board_move(state, (5, 1), (4, 0)))
        assert new_state.hand(Player.FIRST) == (PieceType.CAT,)
