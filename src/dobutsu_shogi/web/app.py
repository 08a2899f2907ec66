"""FastAPI web application for playing どうぶつしょうぎ against the AI.

FastAPI を使ったどうぶつしょうぎ Web API。
探索は重いので、イベントループを止めないようワーカースレッドで実行する。

エンドポイント:
  POST /api/new-game       — 新規対局を開始（ゲームIDを返す）
  POST /api/move           — プレイヤーが手を指す（AIが応答して次局面を返す）
  GET  /api/state/{id}     — 現在の局面情報を取得
  GET  /api/moves/{id}     — 1つの駒の移動先 / 持ち駒の打てるマス
  POST /api/best-move      — 局面と深さを受け取り最善手を返す（状態を持たないワーカー）
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from dobutsu_shogi.engine.minimax import SearchConfig, SearchResult, search
from dobutsu_shogi.engine.random_player import random_move
from dobutsu_shogi.game.board import Board, Piece, Position
from dobutsu_shogi.game.display import board_to_str, format_move
from dobutsu_shogi.game.errors import RulesError
from dobutsu_shogi.game.moves import (
    Move,
    all_legal_moves,
    legal_drop_positions,
    legal_moves_from,
)
from dobutsu_shogi.game.rules import apply_move, is_legal, promotion_option
from dobutsu_shogi.game.state import GameState, create_initial_state
from dobutsu_shogi.game.types import (
    VARIANT_PIECE_TYPES,
    PieceType,
    Player,
    Variant,
    hand_piece_types,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Dobutsu Shogi")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_games: dict[str, dict[str, Any]] = {}
# 保持する対局数の上限。超えたら古い対局から捨てる
_MAX_GAMES = 1000

AIFn = Callable[[GameState], SearchResult]


class PositionModel(BaseModel):
    row: int
    col: int


class PieceModel(BaseModel):
    type: str  # 駒種名（"LION", "CHICK" など）
    owner: int  # 所有者（0=先手, 1=後手）


class MoveModel(BaseModel):
    """指し手のスキーマ。from が null なら持ち駒打ち。"""

    model_config = ConfigDict(populate_by_name=True)

    from_: PositionModel | None = Field(default=None, alias="from")
    to: PositionModel
    piece: PieceModel


class StateModel(BaseModel):
    """局面のスキーマ（/api/best-move の入力）。"""

    variant: str = "standard"
    squares: list[PieceModel | None]
    hands: list[list[str]] = [[], []]
    turn: int = 0
    winner: int | None = None
    try_pending: int | None = None


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    variant: str = "standard"  # "standard"（3×4）or "goro"（5×6）
    ai_type: str = "minimax"  # AI種別: "minimax" or "random"
    depth: int = Field(default=3, ge=1, le=6)  # ミニマックスの探索深さ
    coin_flip: bool = False  # True ならコイントスで先手を決める


class MoveRequest(BaseModel):
    """指し手リクエストのスキーマ。"""

    game_id: str
    move: MoveModel
    promote: bool | None = None  # 成りが任意の手でだけ指定する


class BestMoveRequest(BaseModel):
    state: StateModel
    depth: int = Field(default=3, ge=1, le=6)


def _parse_variant(name: str) -> Variant:
    try:
        return Variant(name)
    except ValueError:
        raise HTTPException(400, f"Unknown variant: {name}") from None


def _get_ai_fn(ai_type: str, depth: int) -> AIFn:
    """Get the AI move function based on type.

    AI種別に応じた手選択関数を返す。
    """
    if ai_type == "random":
        # ランダムAI（最弱、動作確認用）
        def random_fn(state: GameState) -> SearchResult:
            move, promote = random_move(state)
            return SearchResult(move=move, promote=promote, score=0.0)

        return random_fn
    if ai_type == "minimax":
        config = SearchConfig(depth=depth)
        return lambda state: search(state, config)
    raise HTTPException(400, f"Unknown AI type: {ai_type}")


def _position_to_dict(pos: Position) -> dict[str, int]:
    return {"row": pos.row, "col": pos.col}


def _move_to_dict(move: Move) -> dict[str, Any]:
    return {
        "from": _position_to_dict(move.from_) if move.from_ is not None else None,
        "to": _position_to_dict(move.to),
        "piece": {"type": move.piece.piece_type.name, "owner": move.piece.owner.value},
    }


def _move_from_model(model: MoveModel) -> Move:
    try:
        piece = Piece(PieceType[model.piece.type], Player(model.piece.owner))
    except (KeyError, ValueError):
        raise HTTPException(400, f"Unknown piece: {model.piece}") from None
    from_ = Position(model.from_.row, model.from_.col) if model.from_ is not None else None
    return Move(to=Position(model.to.row, model.to.col), piece=piece, from_=from_)


def _optional_player(value: int | None) -> Player | None:
    return Player(value) if value is not None else None


def _state_from_model(model: StateModel) -> GameState:
    """Rebuild a GameState from its JSON form.

    JSON から局面を復元する。形式が不正なら 400 を返す。
    """
    variant = _parse_variant(model.variant)
    if not model.squares:
        raise HTTPException(400, "Invalid state: squares must not be empty")
    try:
        squares = tuple(
            Piece(PieceType[sq.type], Player(sq.owner)) if sq is not None else None
            for sq in model.squares
        )
        board = Board(variant=variant, squares=squares)
        for _, piece in board.pieces():
            if piece.piece_type not in VARIANT_PIECE_TYPES[variant]:
                raise ValueError(f"{piece.piece_type.name} is not part of the {variant.value} variant")
        if len(model.hands) != 2:
            raise ValueError("hands must have two entries")
        for player in Player:
            lions = sum(
                1 for _, p in board.pieces() if p.owner == player and p.piece_type == PieceType.LION
            )
            if lions > 1:
                raise ValueError(f"{player.name} has {lions} lions")
        hands = tuple(tuple(sorted(PieceType[name] for name in hand)) for hand in model.hands)
        if any(pt not in hand_piece_types(variant) for hand in hands for pt in hand):
            raise ValueError("hands may only hold unpromoted non-lion pieces of the variant")
        turn = Player(model.turn)
        try_pending = _optional_player(model.try_pending)
        if try_pending is not None and try_pending == turn:
            raise ValueError("try_pending must be the player who just moved")
        return GameState(
            board=board,
            hands=(hands[0], hands[1]),
            turn=turn,
            winner=_optional_player(model.winner),
            try_pending=try_pending,
        )
    except (KeyError, ValueError) as exc:
        raise HTTPException(400, f"Invalid state: {exc}") from None


def _state_to_dict(state: GameState) -> dict[str, Any]:
    """Convert game state to JSON-serializable dict.

    局面情報を JSON 形式（辞書）に変換する。
    """
    board = state.board
    squares: list[dict[str, Any] | None] = []
    for piece in board.squares:
        if piece is None:
            squares.append(None)
        else:
            squares.append({"type": piece.piece_type.name, "owner": piece.owner.value})

    return {
        "variant": state.variant.value,
        "rows": board.rows,
        "cols": board.cols,
        "squares": squares,
        "hands": [[pt.name for pt in hand] for hand in state.hands],
        "turn": state.turn.value,  # 手番（0=先手, 1=後手）
        "winner": state.winner.value if state.winner is not None else None,
        "try_pending": state.try_pending.value if state.try_pending is not None else None,
        "legal_moves": [_move_to_dict(m) for m in all_legal_moves(state, state.turn)],
        "board_display": board_to_str(board, state.hands),
    }


def _get_game(game_id: str) -> dict[str, Any]:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return game


async def _ai_reply(game: dict[str, Any], state: GameState) -> tuple[GameState, dict[str, Any] | None]:
    """AI の手番なら別スレッドで探索して1手指す。"""
    if state.winner is not None or state.turn != game["ai_player"]:
        return state, None
    result: SearchResult = await asyncio.to_thread(game["ai_fn"], state)
    if result.move is None:
        return state, None
    logger.info("AI plays %s", format_move(result.move, bool(result.promote)))
    state = apply_move(state, result.move, result.promote)
    return state, {"move": _move_to_dict(result.move), "promote": result.promote}


@app.post("/api/new-game")
async def new_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。

    人間は常に先手（FIRST）側、AI は後手（SECOND）側。
    コイントスで AI が先に指すことになった場合は AI の初手を返す。
    """
    variant = _parse_variant(req.variant)
    ai_fn = _get_ai_fn(req.ai_type, req.depth)
    first = random.choice(list(Player)) if req.coin_flip else Player.FIRST

    game_id = str(uuid.uuid4())[:8]  # 短いIDを生成
    game: dict[str, Any] = {
        "state": create_initial_state(variant, first),
        "ai_fn": ai_fn,
        "ai_player": Player.SECOND,
    }
    while len(_games) >= _MAX_GAMES:
        _games.pop(next(iter(_games)))  # dict は挿入順なので先頭が最古
    _games[game_id] = game
    logger.info("New %s game %s (%s first)", variant.value, game_id, first.name)

    state, ai_move = await _ai_reply(game, game["state"])
    game["state"] = state
    return {"game_id": game_id, "first_player": first.value, "state": _state_to_dict(state), "ai_move": ai_move}


@app.post("/api/move")
async def make_move(req: MoveRequest) -> dict[str, Any]:
    """プレイヤーの手を受け取り、AIが応答して次の局面を返す。

    処理フロー:
    1. プレイヤーの手を検証して適用
    2. AI の手番ならワーカースレッドで最善手を計算
    3. AI の手を適用して新局面を返す
    """
    game = _get_game(req.game_id)
    state: GameState = game["state"]

    if state.winner is not None:
        raise HTTPException(400, "Game is already over")
    if state.turn == game["ai_player"]:
        raise HTTPException(400, "It is the AI's turn")

    move = _move_from_model(req.move)
    if not is_legal(state, move):
        logger.warning("Illegal move in game %s: %s", req.game_id, req.move)
        raise HTTPException(400, "Illegal move")
    try:
        state = apply_move(state, move, req.promote)
    except RulesError as exc:
        raise HTTPException(400, str(exc)) from None

    state, ai_move = await _ai_reply(game, state)
    game["state"] = state
    return {"state": _state_to_dict(state), "player_move": _move_to_dict(move), "ai_move": ai_move}


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する。"""
    return _state_to_dict(_get_game(game_id)["state"])


@app.get("/api/moves/{game_id}")
async def get_moves(game_id: str, row: int | None = None, col: int | None = None) -> dict[str, Any]:
    """Destinations for the piece at (row, col), or drop squares if omitted.

    盤上の駒を選んだときの移動先、または持ち駒を選んだときの打てるマスを返す。
    """
    state: GameState = _get_game(game_id)["state"]
    board = state.board
    if row is None or col is None:
        targets = legal_drop_positions(board)
        promotions: list[str] = []
    else:
        if not board.in_bounds(row, col):
            raise HTTPException(400, f"({row}, {col}) is outside the board")
        origin = Position(row, col)
        targets = legal_moves_from(board, origin)
        piece = board.piece_at(row, col)
        promotions = []
        if piece is not None:
            promotions = [
                promotion_option(board, Move(to=t, piece=piece, from_=origin)).value
                for t in targets
            ]
    return {"targets": [_position_to_dict(p) for p in targets], "promotions": promotions}


@app.post("/api/best-move")
async def best_move_endpoint(req: BestMoveRequest) -> dict[str, Any]:
    """Stateless search worker: {state, depth} in, move or null out.

    状態を持たない探索ワーカー。呼び出し側は結果だけを受け取る。
    """
    state = _state_from_model(req.state)
    if state.winner is not None:
        raise HTTPException(400, "Game is already over")
    result = await asyncio.to_thread(search, state, SearchConfig(depth=req.depth))
    if result.move is None:
        return {"move": None, "promote": None, "score": result.score, "nodes": result.nodes}
    return {
        "move": _move_to_dict(result.move),
        "promote": result.promote,
        "score": result.score,
        "nodes": result.nodes,
    }


def main() -> None:
    """Run the web server.

    `dobutsu-web` または `python -m dobutsu_shogi.web.app` で起動する。
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
