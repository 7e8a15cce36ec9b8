"""Shared pytest fixtures and model factories for bet-insights tests."""
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from bet_insights.models.bet import BetLeg, CombinedBet, FinishedBet
from bet_insights.models.enums import BetResult, BetType, FormResult
from bet_insights.models.evidence import RecentFormRecord
from bet_insights.models.history import HistoryRecord
from bet_insights.models.match import Match, MatchTeam

KICKOFF = datetime(2024, 5, 12, 19, 0, tzinfo=timezone.utc)


def make_bet(
    team_a: str = "Flamengo",
    team_b: str = "Palmeiras",
    championship: str = "Brasileirão Série A",
    bet_type: BetType = BetType.TEAM_A,
    result: BetResult = BetResult.WIN,
    amount: float = 10.0,
    odds: float = 2.0,
    return_amount: Optional[float] = None,
    match_date: Optional[date] = date(2024, 5, 12),
    **kwargs,
) -> FinishedBet:
    if return_amount is None:
        return_amount = amount * odds if result == BetResult.WIN else 0.0
    return FinishedBet(
        team_a=team_a,
        team_b=team_b,
        championship=championship,
        bet_type=bet_type,
        result=result,
        amount=amount,
        odds=odds,
        return_amount=return_amount,
        match_date=match_date,
        **kwargs,
    )


def make_leg(
    team_a: str = "Flamengo",
    team_b: str = "Palmeiras",
    championship: str = "Brasileirão Série A",
    bet_type: BetType = BetType.TEAM_A,
) -> BetLeg:
    return BetLeg(team_a=team_a, team_b=team_b, championship=championship, bet_type=bet_type)


def make_combined(
    legs: List[BetLeg],
    result: BetResult = BetResult.WIN,
    amount: float = 10.0,
    odds: float = 4.0,
    return_amount: Optional[float] = None,
    match_date: Optional[date] = date(2024, 5, 12),
) -> CombinedBet:
    if return_amount is None:
        return_amount = amount * odds if result == BetResult.WIN else 0.0
    return CombinedBet(
        legs=legs,
        result=result,
        amount=amount,
        odds=odds,
        return_amount=return_amount,
        match_date=match_date,
    )


def make_match(
    match_id: int = 1,
    home_id: int = 127,
    home: str = "Flamengo",
    away_id: int = 121,
    away: str = "Palmeiras",
    home_goals: Optional[int] = None,
    away_goals: Optional[int] = None,
    status: str = "NS",
    league: str = "Brasileirão Série A",
    kickoff: datetime = KICKOFF,
) -> Match:
    return Match(
        match_id=match_id,
        kickoff_utc=kickoff,
        status_short=status,
        home_team=MatchTeam(team_id=home_id, name=home),
        away_team=MatchTeam(team_id=away_id, name=away),
        home_goals=home_goals,
        away_goals=away_goals,
        league_id=71,
        league_name=league,
    )


def make_finished(match_id: int, home_id: int, home: str, away_id: int, away: str, score: str, days_ago: int = 7) -> Match:
    home_goals, away_goals = (int(g) for g in score.split("-"))
    return make_match(
        match_id=match_id,
        home_id=home_id,
        home=home,
        away_id=away_id,
        away=away,
        home_goals=home_goals,
        away_goals=away_goals,
        status="FT",
        kickoff=KICKOFF - timedelta(days=days_ago),
    )


def history(key: str, wins: int, losses: int) -> HistoryRecord:
    return HistoryRecord(key=key, total_bets=wins + losses, wins=wins, losses=losses)


def form(team_name: str, results: str, team_id: Optional[int] = None) -> RecentFormRecord:
    """Form record from a string such as 'WWDLW'."""
    sequence = [FormResult(r) for r in results]
    return RecentFormRecord(
        team_id=team_id,
        team_name=team_name,
        form=sequence,
        wins=sequence.count(FormResult.WIN),
        draws=sequence.count(FormResult.DRAW),
        losses=sequence.count(FormResult.LOSS),
    )


def fixture_payload(
    match_id: int,
    home: Dict,
    away: Dict,
    goals: Optional[Dict] = None,
    status: str = "NS",
    kickoff: str = "2024-05-12T19:00:00+00:00",
) -> Dict:
    """Raw API-Football fixture object."""
    return {
        "fixture": {
            "id": match_id,
            "date": kickoff,
            "timestamp": 1715540400,
            "status": {"short": status, "long": "Not Started"},
        },
        "league": {"id": 71, "name": "Brasileirão Série A", "country": "Brazil"},
        "teams": {"home": home, "away": away},
        "goals": goals or {"home": None, "away": None},
    }


@pytest.fixture
def flamengo() -> Dict:
    return {"id": 127, "name": "Flamengo", "logo": "https://media.api-sports.io/football/teams/127.png"}


@pytest.fixture
def palmeiras() -> Dict:
    return {"id": 121, "name": "Palmeiras", "logo": "https://media.api-sports.io/football/teams/121.png"}
