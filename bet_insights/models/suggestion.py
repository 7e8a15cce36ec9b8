from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from .enums import BetType, Side


class RateLimitInfo(BaseModel):
    """Remaining provider quota as reported by the last response headers."""

    requests_remaining: Optional[int] = None
    requests_limit: Optional[int] = None


class Suggestion(BaseModel):
    """A scored recommendation for one upcoming match. Never persisted."""

    match_id: Optional[int] = None
    home_team: str
    away_team: str
    league: Optional[str] = None
    kickoff_utc: Optional[datetime] = None

    confidence: int = Field(..., ge=0, le=100)
    favored_side: Optional[Side] = None
    suggested_bet_type: BetType
    warnings: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)

    # Evidence snapshot
    home_win_rate: Optional[float] = None
    away_win_rate: Optional[float] = None
    championship_win_rate: Optional[float] = None
    relevant_bets: int = 0

    @computed_field  # type: ignore[misc]
    @property
    def rationale(self) -> List[str]:
        """Warnings first, supporting reasons after."""
        return [*self.warnings, *self.reasons]

    @property
    def favored_team(self) -> Optional[str]:
        if self.favored_side == Side.HOME:
            return self.home_team
        if self.favored_side == Side.AWAY:
            return self.away_team
        return None


class SuggestionReport(BaseModel):
    """Ranked suggestions for one day plus the rollups shown alongside them."""

    suggestions: List[Suggestion] = Field(default_factory=list)
    total_matches: int = 0
    suggested_matches: int = 0
    high_confidence_matches: int = 0
    provider_warnings: List[str] = Field(default_factory=list)
    provider_disabled: bool = False
    pending_enrichment: int = 0
    rate_limit: Optional[RateLimitInfo] = None
