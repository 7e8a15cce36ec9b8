from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from .enums import FormResult, MeetingWinner


class FormMatch(BaseModel):
    """A recent match seen from one team's perspective."""

    opponent: str
    result: FormResult
    score: str  # "goals_for-goals_against"
    home: bool


class RecentFormRecord(BaseModel):
    """A team's last N completed matches, in provider order."""

    team_id: Optional[int] = None
    team_name: str
    form: List[FormResult] = Field(default_factory=list)
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    last_matches: List[FormMatch] = Field(default_factory=list)

    @property
    def matches_played(self) -> int:
        return len(self.form)

    @property
    def has_data(self) -> bool:
        return bool(self.form)

    @computed_field  # type: ignore[misc]
    @property
    def form_score(self) -> Optional[float]:
        """Win percentage over matches with a known score, None without any."""
        if not self.form:
            return None
        return self.wins / len(self.form) * 100


class HeadToHeadMeeting(BaseModel):
    date: Optional[datetime] = None
    home_team: str
    away_team: str
    score: str  # "home-away" as played
    winner: MeetingWinner


class HeadToHeadRecord(BaseModel):
    """Direct meetings between team A and team B, goals attributed per team."""

    team_a_name: str
    team_b_name: str
    team_a_wins: int = 0
    team_b_wins: int = 0
    draws: int = 0
    team_a_goals: int = 0
    team_b_goals: int = 0
    meetings: List[HeadToHeadMeeting] = Field(default_factory=list)

    @property
    def total_meetings(self) -> int:
        return self.team_a_wins + self.team_b_wins + self.draws

    @property
    def win_gap(self) -> int:
        return abs(self.team_a_wins - self.team_b_wins)

    @computed_field  # type: ignore[misc]
    @property
    def favored_team(self) -> Optional[str]:
        if self.team_a_wins > self.team_b_wins:
            return self.team_a_name
        if self.team_b_wins > self.team_a_wins:
            return self.team_b_name
        return None


class MatchEvidence(BaseModel):
    """Provider evidence gathered for one upcoming match during a refresh cycle."""

    home_form: Optional[RecentFormRecord] = None
    away_form: Optional[RecentFormRecord] = None
    head_to_head: Optional[HeadToHeadRecord] = None
