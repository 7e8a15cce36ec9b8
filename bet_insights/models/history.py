from typing import Dict, Optional

from pydantic import BaseModel, Field, computed_field

from .enums import BetType


class HistoryRecord(BaseModel):
    """Win/loss tally of the user's decided bets for one team, championship or bet type."""

    key: str
    total_bets: int = 0
    wins: int = 0
    losses: int = 0

    @property
    def decided_bets(self) -> int:
        return self.wins + self.losses

    @computed_field  # type: ignore[misc]
    @property
    def win_rate(self) -> float:
        """Percentage of decided bets won; 0 when nothing was decided."""
        decided = self.wins + self.losses
        if decided == 0:
            return 0.0
        return self.wins / decided * 100


class HistorySummary(BaseModel):
    """Output of one aggregation pass over a wallet's finished bets."""

    teams: Dict[str, HistoryRecord] = Field(default_factory=dict)
    championships: Dict[str, HistoryRecord] = Field(default_factory=dict)
    bet_types: Dict[BetType, HistoryRecord] = Field(default_factory=dict)

    def team(self, name: str) -> Optional[HistoryRecord]:
        return self.teams.get(name)

    def championship(self, name: str) -> Optional[HistoryRecord]:
        return self.championships.get(name)
