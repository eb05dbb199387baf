"""High-score table: top scores, descending."""
from datetime import date

from pydantic import BaseModel


class HighScoreEntry(BaseModel):
    """One row of the high-score table."""

    name: str
    score: int
    date: str


def insert_high_score(
    entries: list[HighScoreEntry],
    name: str,
    score: int,
    limit: int = 10,
    today: date | None = None,
) -> list[HighScoreEntry]:
    """
    Return a new table with the entry added, sorted by score descending and
    cut to limit rows. Ties keep their earlier position.
    """
    stamp = (today or date.today()).isoformat()
    updated = [*entries, HighScoreEntry(name=name, score=score, date=stamp)]
    updated.sort(key=lambda entry: entry.score, reverse=True)
    return updated[:limit]


def top_scores(entries: list[HighScoreEntry], limit: int = 10) -> list[HighScoreEntry]:
    return sorted(entries, key=lambda entry: entry.score, reverse=True)[:limit]
