from typing import Iterable, Optional

from loguru import logger

from bet_insights.models.enums import MeetingWinner, Side
from bet_insights.models.evidence import HeadToHeadMeeting, HeadToHeadRecord
from bet_insights.models.match import Match


def analyze_head_to_head(
    team_a_id: Optional[int],
    team_a_name: str,
    team_b_id: Optional[int],
    team_b_name: str,
    meetings: Iterable[Match],
) -> HeadToHeadRecord:
    """Tabulates direct meetings between team A and team B.

    Goals and wins are attributed to the team, not to the home/away slot it
    occupied in a particular meeting. Only raw counts are produced here.
    """
    record = HeadToHeadRecord(team_a_name=team_a_name, team_b_name=team_b_name)

    for match in meetings:
        if not match.has_score:
            continue
        side_a = match.side_of(team_a_id if team_a_id is not None else -1, team_a_name)
        if side_a is None:
            logger.debug(
                f"Fixture {match.match_id} is not a meeting of {team_a_name} and {team_b_name}."
            )
            continue

        a_is_home = side_a == Side.HOME
        goals_a = match.home_goals if a_is_home else match.away_goals
        goals_b = match.away_goals if a_is_home else match.home_goals
        record.team_a_goals += goals_a
        record.team_b_goals += goals_b

        if goals_a > goals_b:
            record.team_a_wins += 1
        elif goals_b > goals_a:
            record.team_b_wins += 1
        else:
            record.draws += 1

        if match.home_goals > match.away_goals:
            winner = MeetingWinner.HOME
        elif match.away_goals > match.home_goals:
            winner = MeetingWinner.AWAY
        else:
            winner = MeetingWinner.DRAW
        record.meetings.append(
            HeadToHeadMeeting(
                date=match.kickoff_utc,
                home_team=match.home_team.name,
                away_team=match.away_team.name,
                score=f"{match.home_goals}-{match.away_goals}",
                winner=winner,
            )
        )

    return record
