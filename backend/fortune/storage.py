"""Redis-backed key-value persistence for game state and high scores."""
import asyncio
import json
import logging
from typing import Any

import redis.asyncio as redis
from pydantic import ValidationError

from fortune.config import settings
from fortune.highscores import HighScoreEntry, insert_high_score, top_scores
from fortune.logic.models import GameState


logger = logging.getLogger(__name__)


class RedisStore:
    """
    Redis client for state snapshots and the high-score table.

    Snapshot writes from the state machine are fire-and-forget: they are
    scheduled as tasks and never raise into the caller.
    """

    STATE_KEY = settings.state_key
    HIGH_SCORES_KEY = settings.high_scores_key
    HIGH_SCORES_LIMIT = settings.high_scores_limit

    def __init__(self, redis_url: str | None = None):
        self._url = redis_url or settings.redis_url
        self._client: redis.Redis | None = None
        self._latest: dict[str, Any] | None = None
        self._writer: asyncio.Task | None = None
        self._write_errors = 0

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client, raise if not connected."""
        if self._client is None:
            raise RuntimeError("Redis not connected")
        return self._client

    @property
    def write_errors(self) -> int:
        return self._write_errors

    # === Game state ===

    async def load_state(self) -> GameState | None:
        """
        Load the saved game state.

        Missing or corrupt snapshots return None; the failure is logged.
        """
        try:
            cached = await self.client.get(self.STATE_KEY)
        except Exception as e:
            logger.error("Failed to load game state: %s", e)
            return None
        if cached is None:
            return None
        try:
            return GameState.model_validate(json.loads(cached))
        except (ValueError, ValidationError) as e:
            logger.error("Discarding corrupt game state snapshot: %s", e)
            return None

    async def save_state(self, payload: dict[str, Any]) -> None:
        """Write a state snapshot."""
        await self.client.set(self.STATE_KEY, json.dumps(payload))

    async def clear_state(self) -> None:
        await self.client.delete(self.STATE_KEY)

    def save_state_nowait(self, payload: dict[str, Any]) -> None:
        """
        Queue a snapshot write on the running loop without waiting for it.

        One writer task drains the queue and only the newest pending payload
        is kept.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; game state not persisted")
            return
        self._latest = payload
        writer = self._writer
        if writer is None or writer.done() or writer.get_loop() is not loop:
            self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._latest is not None:
            payload, self._latest = self._latest, None
            await self._safe_save(payload)

    async def _safe_save(self, payload: dict[str, Any]) -> None:
        try:
            await self.save_state(payload)
        except Exception as e:
            self._write_errors += 1
            logger.warning(
                "Game state write failed (count=%d): %s", self._write_errors, str(e)
            )

    async def flush(self) -> None:
        """Wait until every queued snapshot has been written."""
        while self._writer is not None and not self._writer.done():
            await self._writer

    # === High scores ===

    async def load_high_scores(self) -> list[HighScoreEntry]:
        """Saved high scores, best first. Corrupt data reads as empty."""
        cached = await self.client.get(self.HIGH_SCORES_KEY)
        if cached is None:
            return []
        try:
            entries = [HighScoreEntry.model_validate(e) for e in json.loads(cached)]
        except (ValueError, TypeError, ValidationError) as e:
            logger.error("Failed to load high scores: %s", e)
            return []
        return top_scores(entries, self.HIGH_SCORES_LIMIT)

    async def add_high_score(self, name: str, score: int) -> list[HighScoreEntry]:
        """Insert a score, keep the top entries and save. Returns the new table."""
        entries = insert_high_score(
            await self.load_high_scores(), name, score, self.HIGH_SCORES_LIMIT
        )
        await self.client.set(
            self.HIGH_SCORES_KEY,
            json.dumps([entry.model_dump() for entry in entries]),
        )
        return entries


# Global instance
store = RedisStore()
