"""Request and response models for the HTTP shell."""
from pydantic import BaseModel, Field

from fortune.highscores import HighScoreEntry
from fortune.logic.glyphs import GlyphType
from fortune.logic.modifiers import Modifier
from fortune.logic.patterns import PatternType


# === Request Models ===


class SpinRequest(BaseModel):
    """POST /spin body."""

    bet: int = Field(default=1, description="Must be in allowed_bets")


class ReelStoppedRequest(BaseModel):
    """POST /reels/stopped body: one reel's final column, top to bottom."""

    reelIndex: int
    glyphs: list[GlyphType]


class HighScoreRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=32)
    score: int = Field(..., ge=0)


class ModifierRequest(BaseModel):
    """POST /modifiers body."""

    modifier: Modifier


# === Response Models ===


class SpinResponse(BaseModel):
    """Target board, column-major (one list per reel)."""

    reels: list[list[GlyphType]]
    state: dict


class ReelStoppedResponse(BaseModel):
    complete: bool
    reelsStopped: int
    result: dict | None = None
    state: dict


class GlyphInfo(BaseModel):
    type: GlyphType
    name: str
    emoji: str
    payoutValue: float
    rarityWeight: float
    weightPercentage: float


class PatternInfo(BaseModel):
    type: PatternType
    group: str
    name: str
    description: str
    multiplier: float
    mask: list[list[int]]


class CatalogResponse(BaseModel):
    glyphs: list[GlyphInfo]
    patterns: list[PatternInfo]
    fingerprint: str


class ModifierResponse(BaseModel):
    applied: bool
    description: str
    fingerprint: str
    state: dict


class HighScoresResponse(BaseModel):
    highScores: list[HighScoreEntry] = Field(default_factory=list)
