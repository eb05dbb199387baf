"""Request validators for the HTTP shell."""
from fortune.config import settings
from fortune.errors import ErrorCode, GameError
from fortune.logic.machine import SpinStateMachine
from fortune.logic.models import GameStateType
from fortune.protocol import ReelStoppedRequest, SpinRequest


def validate_bet(request: SpinRequest) -> None:
    """Raise INVALID_BET if the bet is not an allowed amount."""
    if request.bet not in settings.allowed_bets:
        raise GameError(
            ErrorCode.INVALID_BET,
            f"Bet amount {request.bet} not allowed. Allowed: {settings.allowed_bets}",
        )


def explain_spin_refusal(machine: SpinStateMachine, bet: int) -> GameError:
    """Map a refused start_spin to the error the client should see."""
    if machine.current_state == GameStateType.IDLE and machine.coins < bet:
        return GameError(
            ErrorCode.INSUFFICIENT_FUNDS,
            f"Balance {machine.coins} is below the bet of {bet}.",
        )
    return GameError(
        ErrorCode.SPIN_REFUSED,
        f"Cannot spin while {machine.current_state.value}.",
    )


def validate_reel_report(request: ReelStoppedRequest) -> None:
    """Raise INVALID_REQUEST if the reel index or column height is off the board."""
    if not 0 <= request.reelIndex < settings.columns:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"reelIndex must be in [0, {settings.columns - 1}].",
        )
    if len(request.glyphs) != settings.rows:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"Each reel reports exactly {settings.rows} glyphs.",
        )


def validate_spin_request(request: SpinRequest) -> None:
    """Run all validations on spin request."""
    validate_bet(request)
