from datetime import datetime
from typing import Optional

from pydantic import BaseModel, computed_field

from .enums import FINISHED_STATUSES, LIVE_STATUSES, SCHEDULED_STATUSES, Side


class MatchTeam(BaseModel):
    """One side of a fixture as reported by the provider."""

    team_id: int
    name: str
    logo: Optional[str] = None


class Match(BaseModel):
    """A fixture returned by the match provider."""

    match_id: int
    kickoff_utc: datetime
    status_short: str
    status_long: Optional[str] = None
    home_team: MatchTeam
    away_team: MatchTeam
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    league_id: Optional[int] = None
    league_name: str = ""
    country: Optional[str] = None

    @property
    def is_scheduled(self) -> bool:
        return self.status_short in SCHEDULED_STATUSES

    @property
    def is_live(self) -> bool:
        return self.status_short in LIVE_STATUSES

    @property
    def is_finished(self) -> bool:
        return self.status_short in FINISHED_STATUSES

    @property
    def has_score(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    def side_of(self, team_id: int, team_name: Optional[str] = None) -> Optional[Side]:
        """Which side the given team played in this fixture, if any."""
        if self.home_team.team_id == team_id:
            return Side.HOME
        if self.away_team.team_id == team_id:
            return Side.AWAY
        # Provider ids can be missing in cached/legacy payloads; fall back to the name
        if team_name:
            if self.home_team.name == team_name:
                return Side.HOME
            if self.away_team.name == team_name:
                return Side.AWAY
        return None

    @computed_field  # type: ignore[misc]
    @property
    def description(self) -> str:
        """A human-readable description of the fixture."""
        return (
            f"{self.league_name}: {self.home_team.name} vs {self.away_team.name} "
            f"({self.kickoff_utc.strftime('%Y-%m-%d %H:%M')} UTC)"
        )
