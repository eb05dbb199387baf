"""Spin state machine: bets, spin lifecycle, payouts and player stats."""
import asyncio
import logging
from typing import Any, Callable, Protocol

from fortune.config import settings
from fortune.events import EventBus, EventType
from fortune.logic.economy import EconomyContext
from fortune.logic.models import (
    ACTIVE_STATES,
    GameState,
    GameStateType,
    PlayerStats,
    SpinResult,
    default_game_state,
)
from fortune.logic.modifiers import GlobalMultiplierModifier, Modifier, apply_modifier


logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Deferred-callback source for the celebration timer."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        ...


class AsyncioScheduler:
    """Schedules callbacks on the running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        return asyncio.get_running_loop().call_later(delay, callback)


class SnapshotSink(Protocol):
    """Receives the persisted layout after every mutation. Must not block."""

    def save_state_nowait(self, payload: dict[str, Any]) -> None:
        ...


# States a restored snapshot cannot resume in: the spin was lost with the process
_IN_FLIGHT_STATES = frozenset({
    GameStateType.SPINNING,
    GameStateType.EVALUATING,
    GameStateType.CELEBRATING,
})


class SpinStateMachine:
    """
    Owns GameState and every transition of the spin lifecycle.

    MENU -> IDLE (new game / sandbox)
    IDLE -> SPINNING (start_spin) -> EVALUATING (end_spin)
    EVALUATING -> CELEBRATING (wins) -> IDLE after the celebration delay
    EVALUATING -> IDLE (no wins)
    active -> GAMEOVER (game_over) -> MENU (return_to_menu)

    Every mutation publishes GAME_STATE_CHANGED with a snapshot and hands the
    persisted layout to the snapshot sink. Readers only ever get copies.
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        economy: EconomyContext | None = None,
        store: SnapshotSink | None = None,
        scheduler: Scheduler | None = None,
        initial_state: GameState | None = None,
        starting_coins: int = settings.starting_coins,
        sandbox_coins: int = settings.sandbox_coins,
        celebration_delay_ms: int = settings.celebration_delay_ms,
        max_recent_spins: int = settings.max_recent_spins,
        strict_modifiers: bool = settings.debug,
    ):
        self.bus = bus or EventBus()
        self.economy = economy or EconomyContext.default()
        self._store = store
        self._scheduler = scheduler or AsyncioScheduler()
        self.starting_coins = starting_coins
        self.sandbox_coins = sandbox_coins
        self.celebration_delay = celebration_delay_ms / 1000
        self.max_recent_spins = max_recent_spins
        self.strict_modifiers = strict_modifiers
        self._celebration: Cancellable | None = None

        self._state = initial_state or default_game_state(starting_coins)
        if self._state.current_state in _IN_FLIGHT_STATES:
            self.reset_to_idle()

    # === Reads ===

    def get_state(self) -> GameState:
        """Deep copy of the current state."""
        return self._state.model_copy(deep=True)

    @property
    def current_state(self) -> GameStateType:
        return self._state.current_state

    @property
    def coins(self) -> int:
        return self._state.player_stats.coins

    @property
    def current_multiplier(self) -> float:
        return self._state.current_multiplier

    @property
    def celebration_pending(self) -> bool:
        return self._celebration is not None

    def can_bet(self, bet: int) -> bool:
        """Whether start_spin(bet) would be accepted right now."""
        state = self._state
        return (
            state.current_state == GameStateType.IDLE
            and state.can_spin
            and bet > 0
            and state.player_stats.coins >= bet
        )

    @property
    def is_out_of_coins(self) -> bool:
        """Game-over condition: broke with no spin in flight."""
        return (
            self._state.player_stats.coins <= 0
            and self._state.current_state == GameStateType.IDLE
        )

    # === Mutations ===

    def set_state(self, **updates: Any) -> None:
        """Replace fields of the state, publish a snapshot and persist."""
        self._state = self._state.model_copy(update=updates)
        self.bus.publish(EventType.GAME_STATE_CHANGED, state=self.get_state())
        self._persist()

    def _update_stats(self, **updates: Any) -> PlayerStats:
        return self._state.player_stats.model_copy(update=updates)

    def start_spin(self, bet: int) -> bool:
        """
        Deduct the bet and enter SPINNING.

        Silently refused (returns False, no state change) unless IDLE, able
        to spin and holding at least bet coins.
        """
        if not self.can_bet(bet):
            logger.debug(
                "Spin refused: state=%s can_spin=%s coins=%d bet=%d",
                self._state.current_state.value,
                self._state.can_spin,
                self._state.player_stats.coins,
                bet,
            )
            return False

        self.deduct_coins(bet)
        self.set_state(
            current_state=GameStateType.SPINNING,
            player_stats=self._update_stats(
                total_spins=self._state.player_stats.total_spins + 1
            ),
            can_spin=False,
            current_spin_result=None,
        )
        self.bus.publish(
            EventType.SPIN_STARTED,
            current_coins=self._state.player_stats.coins,
            spin_cost=bet,
        )
        return True

    def end_spin(self, result: SpinResult) -> bool:
        """
        Evaluate a finished spin. Ignored unless SPINNING.

        Winning spins credit total_payout exactly once and celebrate; losing
        spins return straight to IDLE.
        """
        if self._state.current_state != GameStateType.SPINNING:
            logger.debug("end_spin ignored in state %s", self._state.current_state.value)
            return False

        self.set_state(
            current_state=GameStateType.EVALUATING,
            current_spin_result=result,
        )
        recent_spins = [result, *self._state.recent_spins][: self.max_recent_spins]

        if result.wins:
            self.add_coins(result.total_payout)
            stats = self._state.player_stats
            self.set_state(
                player_stats=self._update_stats(
                    total_wins=stats.total_wins + 1,
                    largest_win=max(stats.largest_win, result.total_payout),
                ),
                current_state=GameStateType.CELEBRATING,
                recent_spins=recent_spins,
            )
            self.bus.publish(
                EventType.WINS_EVALUATED,
                wins=[win.to_json_dict() for win in result.wins],
                is_jackpot=result.is_jackpot,
            )
            self.bus.publish(
                EventType.PAYOUT_CALCULATED,
                amount=result.total_payout,
                multiplier=self._state.current_multiplier,
            )
            self.bus.publish(
                EventType.CELEBRATION_STARTED,
                amount=result.total_payout,
                is_jackpot=result.is_jackpot,
            )
            self._celebration = self._scheduler.call_later(
                self.celebration_delay, self._finish_celebration
            )
        else:
            self.set_state(
                current_state=GameStateType.IDLE,
                can_spin=True,
                recent_spins=recent_spins,
            )

        self.bus.publish(EventType.SPIN_ENDED, result=result.to_json_dict())
        return True

    def _finish_celebration(self) -> None:
        self._celebration = None
        if self._state.current_state != GameStateType.CELEBRATING:
            return
        self.set_state(current_state=GameStateType.IDLE, can_spin=True)
        self.bus.publish(EventType.CELEBRATION_ENDED)

    def _cancel_celebration(self) -> None:
        if self._celebration is not None:
            self._celebration.cancel()
            self._celebration = None

    def add_coins(self, amount: int) -> None:
        if amount <= 0:
            return
        stats = self._update_stats(coins=self._state.player_stats.coins + amount)
        self.set_state(player_stats=stats)
        self.bus.publish(EventType.COINS_ADDED, amount=amount, new_balance=stats.coins)

    def deduct_coins(self, amount: int) -> bool:
        """Take coins from the balance. False (and no change) if short."""
        if amount <= 0:
            return True
        if self._state.player_stats.coins < amount:
            return False
        stats = self._update_stats(coins=self._state.player_stats.coins - amount)
        self.set_state(player_stats=stats)
        self.bus.publish(EventType.COINS_DEDUCTED, amount=amount, new_balance=stats.coins)
        return True

    def update_multiplier(self, new_multiplier: float) -> None:
        """Set the session multiplier. Non-positive values are ignored."""
        if new_multiplier <= 0:
            return
        old_multiplier = self._state.current_multiplier
        self.set_state(current_multiplier=new_multiplier)
        self.bus.publish(
            EventType.MULTIPLIER_CHANGED,
            old_multiplier=old_multiplier,
            new_multiplier=new_multiplier,
        )

    def apply_modifier(self, modifier: Modifier) -> bool:
        """Apply a charm: global ones to the session multiplier, the rest to the economy."""
        if isinstance(modifier, GlobalMultiplierModifier):
            target = self._state.current_multiplier + modifier.value
            if target <= 0:
                logger.warning("Ignoring global multiplier change to %s", target)
                return False
            self.update_multiplier(target)
            changed = True
        else:
            changed = apply_modifier(self.economy, modifier, strict=self.strict_modifiers)

        if changed:
            logger.info(
                "Modifier %s applied; economy fingerprint %s",
                modifier.kind,
                self.economy.fingerprint(),
            )
            self.bus.publish(
                EventType.MODIFIER_APPLIED,
                modifier=modifier.model_dump(mode="json"),
            )
        return changed

    # === Lifecycle commands ===

    def reset_state(self, coins: int | None = None) -> None:
        """Replace the whole state with defaults. Cancels a pending celebration."""
        self._cancel_celebration()
        self._state = default_game_state(self.starting_coins if coins is None else coins)
        self.bus.publish(EventType.GAME_STATE_CHANGED, state=self.get_state())
        self._persist()

    def new_game(self) -> None:
        """Fresh run: default stats and a default economy."""
        self.economy.reset()
        self.reset_state()

    def sandbox(self) -> None:
        """Fresh run with a very large coin balance."""
        self.economy.reset()
        self.reset_state(coins=self.sandbox_coins)

    def reset_to_idle(self) -> None:
        """Drop any in-flight spin and make the game spinnable again."""
        logger.info("Resetting game state to IDLE")
        self._cancel_celebration()
        self.set_state(
            current_state=GameStateType.IDLE,
            can_spin=True,
            current_spin_result=None,
        )

    def game_over(self) -> bool:
        """Enter GAMEOVER from any active state. The caller decides when."""
        if self._state.current_state not in ACTIVE_STATES:
            return False
        self._cancel_celebration()
        self.set_state(current_state=GameStateType.GAMEOVER, can_spin=False)
        self.bus.publish(
            EventType.GAME_OVER,
            player_stats=self._state.player_stats.to_json_dict(),
        )
        return True

    def return_to_menu(self) -> bool:
        """GAMEOVER or IDLE -> MENU."""
        if self._state.current_state not in (GameStateType.GAMEOVER, GameStateType.IDLE):
            return False
        self.set_state(current_state=GameStateType.MENU, can_spin=False)
        return True

    # === Persistence ===

    def to_snapshot(self) -> dict[str, Any]:
        """The persisted camelCase layout of the current state."""
        return self._state.to_json_dict()

    @staticmethod
    def from_snapshot(payload: dict[str, Any]) -> GameState:
        return GameState.model_validate(payload)

    def _persist(self) -> None:
        """Best-effort write. Failures are logged, never raised."""
        if self._store is None:
            return
        try:
            self._store.save_state_nowait(self.to_snapshot())
        except Exception as e:
            logger.error("Failed to persist game state: %s", e)
