"""Fruitful Fortune FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request

from fortune.config import settings
from fortune.errors import ErrorCode, GameError
from fortune.events import LoggingEventListener
from fortune.logic.game import FortuneGame
from fortune.logic.machine import AsyncioScheduler
from fortune.logic.modifiers import UnknownModifierTarget, describe_modifier
from fortune.logic.reels import ReelMismatch
from fortune.middleware import ErrorHandlerMiddleware
from fortune.protocol import (
    CatalogResponse,
    GlyphInfo,
    HighScoreRequest,
    HighScoresResponse,
    ModifierRequest,
    ModifierResponse,
    PatternInfo,
    ReelStoppedRequest,
    ReelStoppedResponse,
    SpinRequest,
    SpinResponse,
)
from fortune.storage import store
from fortune.validators import (
    explain_spin_refusal,
    validate_reel_report,
    validate_spin_request,
)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect storage, restore the saved game and build the core."""
    await store.connect()
    restored = await store.load_state()
    if restored is None:
        logger.info("No saved game state; starting fresh")
    game = FortuneGame.create(
        settings,
        store=store,
        scheduler=AsyncioScheduler(),
        initial_state=restored,
    )
    game.bus.subscribe_all(LoggingEventListener())
    app.state.game = game
    yield
    await store.flush()
    await store.close()


app = FastAPI(
    title="Fruitful Fortune",
    version="0.1.0",
    description="Slot machine core: board generation, win detection and spin lifecycle",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)


def get_game(request: Request) -> FortuneGame:
    return request.app.state.game


def _state(game: FortuneGame) -> dict:
    return game.machine.get_state().to_json_dict()


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/state")
async def get_state(game: FortuneGame = Depends(get_game)) -> dict:
    """Current game state snapshot."""
    return _state(game)


@app.post("/spin")
async def spin(body: SpinRequest, game: FortuneGame = Depends(get_game)) -> dict:
    """
    Start a spin.

    Returns the target board column-major; the reel layer animates it and
    reports each reel through POST /reels/stopped.
    """
    validate_spin_request(body)

    board = game.request_spin(body.bet)
    if board is None:
        error = explain_spin_refusal(game.machine, body.bet)
        if error.code == ErrorCode.INSUFFICIENT_FUNDS:
            game.check_game_over()
        raise error

    reels = [[row[col].type for row in board] for col in range(game.columns)]
    return SpinResponse(reels=reels, state=_state(game)).model_dump(mode="json")


@app.post("/reels/stopped")
async def reel_stopped(
    body: ReelStoppedRequest, game: FortuneGame = Depends(get_game)
) -> dict:
    """
    Report one stopped reel; the last one resolves the spin.

    Reports must match the board returned by POST /spin.
    """
    validate_reel_report(body)

    try:
        result = game.reel_stopped(body.reelIndex, body.glyphs)
    except ReelMismatch as e:
        raise GameError(ErrorCode.INVALID_REQUEST, str(e))
    if result is not None:
        game.check_game_over()

    return ReelStoppedResponse(
        complete=result is not None,
        reelsStopped=game.reels.stopped_count if result is None else game.columns,
        result=result.to_json_dict() if result is not None else None,
        state=_state(game),
    ).model_dump(mode="json")


@app.post("/menu/new-game")
async def new_game(game: FortuneGame = Depends(get_game)) -> dict:
    game.new_game()
    return _state(game)


@app.post("/menu/sandbox")
async def sandbox(game: FortuneGame = Depends(get_game)) -> dict:
    game.sandbox()
    return _state(game)


@app.post("/menu/quit")
async def quit_to_menu(game: FortuneGame = Depends(get_game)) -> dict:
    """Leave the current game for the menu."""
    if not game.machine.return_to_menu():
        raise GameError(
            ErrorCode.ACTION_REFUSED,
            f"Cannot quit while {game.machine.current_state.value}.",
        )
    return _state(game)


@app.get("/high-scores")
async def get_high_scores() -> dict:
    return HighScoresResponse(highScores=await store.load_high_scores()).model_dump()


@app.post("/high-scores")
async def add_high_score(body: HighScoreRequest) -> dict:
    entries = await store.add_high_score(body.name, body.score)
    return HighScoresResponse(highScores=entries).model_dump()


@app.get("/catalog")
async def catalog(game: FortuneGame = Depends(get_game)) -> dict:
    """Glyph values and weights, pattern multipliers, economy fingerprint."""
    economy = game.economy
    response = CatalogResponse(
        glyphs=[
            GlyphInfo(
                type=g.type,
                name=g.name,
                emoji=g.emoji,
                payoutValue=g.payout_value,
                rarityWeight=g.rarity_weight,
                weightPercentage=economy.glyphs.weight_percentage(g.type),
            )
            for g in economy.glyphs
        ],
        patterns=[
            PatternInfo(
                type=p.type,
                group=p.group,
                name=p.name,
                description=p.description,
                multiplier=p.multiplier,
                mask=p.mask,
            )
            for p in economy.patterns
        ],
        fingerprint=economy.fingerprint(),
    )
    return response.model_dump(mode="json")


@app.post("/modifiers")
async def apply_modifier(
    body: ModifierRequest, game: FortuneGame = Depends(get_game)
) -> dict:
    """Apply a charm bought by the progression/shop layer."""
    try:
        applied = game.machine.apply_modifier(body.modifier)
    except UnknownModifierTarget as e:
        raise GameError(ErrorCode.UNKNOWN_MODIFIER_TARGET, str(e))

    return ModifierResponse(
        applied=applied,
        description=describe_modifier(body.modifier),
        fingerprint=game.economy.fingerprint(),
        state=_state(game),
    ).model_dump()
