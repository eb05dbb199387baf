"""Pytest fixtures for backend tests."""
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from fortune.events import EventBus, GameEvent
from fortune.logic.economy import EconomyContext
from fortune.logic.glyphs import GlyphCatalog, GlyphType
from fortune.logic.machine import SpinStateMachine
from fortune.logic.patterns import Board
from fortune.logic.rng import SeededRNG
from fortune.main import app
from fortune.storage import RedisStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (long simulations)"
    )


# Shorthand for building boards by hand
P = GlyphType.PINEAPPLE
G = GlyphType.GRAPE
S = GlyphType.STRAWBERRY
W = GlyphType.WATERMELON
O = GlyphType.ORANGE
L = GlyphType.LEMON
C = GlyphType.CHERRY

# 3x5 board with no pattern match anywhere
NO_WIN_ROWS = [
    [P, G, S, W, O],
    [L, C, P, G, S],
    [W, O, L, C, P],
]

ALL_CHERRY_ROWS = [[C] * 5 for _ in range(3)]


def make_board(rows: list[list[GlyphType]], catalog: GlyphCatalog | None = None) -> Board:
    """Row-major board of fresh instances from glyph types."""
    catalog = catalog or GlyphCatalog.default()
    return [
        [catalog.create_instance(glyph_type, r, c) for c, glyph_type in enumerate(row)]
        for r, row in enumerate(rows)
    ]


def to_reels(rows: list[list[GlyphType]]) -> list[list[GlyphType]]:
    """Column-major reels from row-major glyph types."""
    return [list(column) for column in zip(*rows)]


class MockRedis:
    """Mock Redis client for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(
        self, key: str, value: str, nx: bool = False, ex: int | None = None
    ) -> bool | None:
        if nx and key in self._store:
            return None
        self._store[key] = value
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._store[key] = value
        return True

    async def delete(self, key: str) -> int:
        if key in self._store:
            del self._store[key]
            return 1
        return 0

    async def close(self) -> None:
        pass

    def clear(self) -> None:
        self._store.clear()


class FailingRedis(MockRedis):
    """Mock Redis whose writes always fail."""

    async def set(self, key: str, value: str, nx: bool = False, ex: int | None = None):
        raise ConnectionError("redis unavailable")


class ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by the test: callbacks run only on advance()."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [h for h in self.handles if h.due <= self.now and not h.cancelled]
        self.handles = [h for h in self.handles if h not in due and not h.cancelled]
        for handle in due:
            handle.callback()

    @property
    def pending(self) -> int:
        return sum(1 for h in self.handles if not h.cancelled)


class RecordingStore:
    """Snapshot sink that keeps every payload it is handed."""

    def __init__(self):
        self.snapshots: list[dict[str, Any]] = []

    def save_state_nowait(self, payload: dict[str, Any]) -> None:
        self.snapshots.append(payload)


class FailingStore:
    """Snapshot sink that always raises."""

    def save_state_nowait(self, payload: dict[str, Any]) -> None:
        raise RuntimeError("disk full")


class RecordingListener:
    """Event listener that records everything published."""

    def __init__(self):
        self.events: list[GameEvent] = []

    def __call__(self, event: GameEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [event.type.value for event in self.events]

    def get_events(self, event_type: str) -> list[GameEvent]:
        return [e for e in self.events if e.type.value == event_type]


@pytest.fixture
def economy() -> EconomyContext:
    return EconomyContext.default()


@pytest.fixture
def rng() -> SeededRNG:
    return SeededRNG(12345)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def bus(listener: RecordingListener) -> EventBus:
    """Event bus with a recording listener attached to every type."""
    bus = EventBus()
    bus.subscribe_all(listener)
    return bus


@pytest.fixture
def machine(
    bus: EventBus,
    economy: EconomyContext,
    recording_store: RecordingStore,
    scheduler: ManualScheduler,
) -> SpinStateMachine:
    """State machine with 100 coins, a 3s celebration and a manual clock."""
    return SpinStateMachine(
        bus=bus,
        economy=economy,
        store=recording_store,
        scheduler=scheduler,
        starting_coins=100,
        sandbox_coins=1_000_000,
        celebration_delay_ms=3000,
        max_recent_spins=10,
        strict_modifiers=False,
    )


@pytest.fixture
def mock_redis() -> MockRedis:
    """Create a fresh mock Redis for each test."""
    return MockRedis()


@pytest.fixture
def redis_store_with_mock(mock_redis: MockRedis) -> Generator[RedisStore, None, None]:
    """Create RedisStore with mock client."""
    store = RedisStore()
    store._client = mock_redis
    yield store
    mock_redis.clear()


@pytest.fixture
def client_with_mock_redis(mock_redis: MockRedis) -> Generator[TestClient, None, None]:
    """Create TestClient with mocked Redis."""
    from fortune.storage import store

    # Patch the global store client
    original_client = store._client
    store._client = mock_redis

    with TestClient(app) as client:
        yield client

    # Restore original
    store._client = original_client
    mock_redis.clear()
