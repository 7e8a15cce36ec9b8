from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import BetResult, BetType, DECIDED_RESULTS


class FinishedBet(BaseModel):
    """A single wager on one match, as stored in the 'bets' table."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    wallet_id: Optional[str] = None
    team_a: str
    team_b: str
    championship: str
    match_date: Optional[date] = None
    bet_type: BetType
    bet_type_description: Optional[str] = None  # Free text for BetType.OTHER
    amount: float = Field(0.0, ge=0, description="Stake.")
    odds: float = Field(1.0, ge=0)
    result: BetResult
    return_amount: float = Field(0.0, ge=0, description="Payout.")

    @property
    def is_decided(self) -> bool:
        return self.result in DECIDED_RESULTS

    @property
    def profit(self) -> float:
        return self.return_amount - self.amount


class BetLeg(BaseModel):
    """One match pick inside a combined bet ('combined_bet_items' row)."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    team_a: str
    team_b: str
    championship: str
    bet_type: BetType
    bet_type_description: Optional[str] = None


class CombinedBet(BaseModel):
    """A parlay: one stake, one payout and one outcome shared by every leg."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    wallet_id: Optional[str] = None
    match_date: Optional[date] = None
    amount: float = Field(0.0, ge=0)
    odds: float = Field(1.0, ge=0)
    result: BetResult
    return_amount: float = Field(0.0, ge=0)
    legs: List[BetLeg] = Field(default_factory=list, alias="items")

    @property
    def is_decided(self) -> bool:
        return self.result in DECIDED_RESULTS

    @property
    def profit(self) -> float:
        return self.return_amount - self.amount

    def stake_per_leg(self) -> float:
        return self.amount / (len(self.legs) or 1)

    def return_per_leg(self) -> float:
        return self.return_amount / (len(self.legs) or 1)
