from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegionType(str, Enum):
    """Provenance of a draft region. Closed: every switch over it handles both cases."""

    MANUAL = "manual"
    AUTO = "auto"


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0, description="Zero-based line index.")
    column: int = Field(..., ge=0, description="Zero-based character offset within the line.")

    def as_tuple(self):
        return (self.line, self.column)

    def is_before(self, other: "Position") -> bool:
        return self.as_tuple() < other.as_tuple()


class Range(BaseModel):
    """
    Half-open span (start inclusive, end exclusive) over a document.
    The end never precedes the start.
    """

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.end.is_before(self.start):
            raise ValueError(f"Range end {self.end.as_tuple()} precedes start {self.start.as_tuple()}")
        return self

    @classmethod
    def from_coords(cls, start_line: int, start_column: int, end_line: int, end_column: int) -> "Range":
        return cls(
            start=Position(line=start_line, column=start_column),
            end=Position(line=end_line, column=end_column),
        )

    def overlaps(self, other: "Range") -> bool:
        # Touching ranges count as overlapping.
        return not (self.end.is_before(other.start) or other.end.is_before(self.start))


class ConfidenceBreakdown(BaseModel):
    """
    Audit trail for one scoring decision.
    Identical input always yields an identical breakdown.
    """

    model_config = ConfigDict(frozen=True)

    base_score: float = Field(..., description="Final score before clamping.")
    natural_language_score: float = Field(..., ge=0.0, le=1.0)
    incomplete_latex: bool = False
    multi_line: bool = False
    has_formatted_latex: bool = False
    is_short_text: bool = False
    factors: List[str] = Field(default_factory=list, description="Positive contributions with their magnitude.")
    penalties: List[str] = Field(default_factory=list, description="Negative contributions or disqualifying reasons.")


class ScoreResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    confidence: float = Field(..., ge=0.0, le=1.0)
    breakdown: ConfidenceBreakdown


class DraftRegion(BaseModel):
    """
    A span of document text flagged as unpolished content pending rewriting.

    For manual regions `range` covers the fence lines while `text` holds only
    the content between them.
    """

    model_config = ConfigDict(frozen=True)

    range: Range
    text: str
    type: RegionType
    confidence: float = Field(..., ge=0.0, le=1.0)
    breakdown: Optional[ConfidenceBreakdown] = None

    @property
    def is_manual(self) -> bool:
        return self.type == RegionType.MANUAL

    def is_actionable(self, threshold: float) -> bool:
        """True when the rewrite trigger should act on this region."""
        return self.confidence >= threshold and bool(self.text.strip())
