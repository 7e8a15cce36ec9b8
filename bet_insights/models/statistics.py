from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from .enums import BetResult


class Wallet(BaseModel):
    """Shared bankroll; only its balances are read here."""

    id: str
    name: str = ""
    balance: float = 0.0
    initial_balance: float = 0.0


class PerformanceRecord(BaseModel):
    """Counts and money for one grouping key (team, championship, bet type, weekday, ...)."""

    key: str
    label: Optional[str] = None
    total_bets: int = 0
    wins: int = 0
    losses: int = 0
    pending: int = 0
    total_staked: float = 0.0
    total_return: float = 0.0

    @computed_field  # type: ignore[misc]
    @property
    def win_rate(self) -> float:
        decided = self.wins + self.losses
        return self.wins / decided * 100 if decided else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def profit(self) -> float:
        return self.total_return - self.total_staked

    @computed_field  # type: ignore[misc]
    @property
    def roi(self) -> float:
        if self.total_staked <= 0:
            return 0.0
        return (self.total_return - self.total_staked) / self.total_staked * 100


class GeneralStats(BaseModel):
    total_bets: int = 0
    wins: int = 0
    losses: int = 0
    pending: int = 0
    total_staked: float = 0.0
    total_return: float = 0.0
    win_rate: float = 0.0
    profit: float = 0.0
    roi: float = 0.0
    roi_capital: float = 0.0
    initial_balance: float = 0.0
    current_balance: float = 0.0


class Streak(BaseModel):
    result: Optional[BetResult] = None  # None when nothing has settled yet
    count: int = 0


class ProfitPoint(BaseModel):
    match_date: date
    cumulative_profit: float


class PerformanceReport(BaseModel):
    general: GeneralStats = Field(default_factory=GeneralStats)
    teams: List[PerformanceRecord] = Field(default_factory=list)
    championships: List[PerformanceRecord] = Field(default_factory=list)
    bet_types: List[PerformanceRecord] = Field(default_factory=list)
    weekdays: List[PerformanceRecord] = Field(default_factory=list)
    odds_ranges: List[PerformanceRecord] = Field(default_factory=list)
    most_bet_teams: List[PerformanceRecord] = Field(default_factory=list)
    current_streak: Streak = Field(default_factory=Streak)
    best_bet_type: Optional[PerformanceRecord] = None
    worst_bet_type: Optional[PerformanceRecord] = None
    profit_evolution: List[ProfitPoint] = Field(default_factory=list)
