from typing import Iterable, Optional

from loguru import logger

from bet_insights.models.enums import FormResult, Side
from bet_insights.models.evidence import FormMatch, RecentFormRecord
from bet_insights.models.match import Match


def empty_form(team_id: Optional[int], team_name: str) -> RecentFormRecord:
    """The record used when no form data could be obtained for a team."""
    return RecentFormRecord(team_id=team_id, team_name=team_name)


def _classify(goals_for: int, goals_against: int) -> FormResult:
    if goals_for > goals_against:
        return FormResult.WIN
    if goals_for < goals_against:
        return FormResult.LOSS
    return FormResult.DRAW


def evaluate_form(
    team_id: Optional[int], team_name: str, matches: Iterable[Match]
) -> RecentFormRecord:
    """Builds a team's recent-form record from its latest finished matches.

    Matches are kept in the order given (the provider's order, not re-sorted by
    date). Matches without both goal counts are skipped and do not appear in
    the form sequence.
    """
    record = empty_form(team_id, team_name)

    for match in matches:
        if not match.has_score:
            continue
        side = match.side_of(team_id if team_id is not None else -1, team_name)
        if side is None:
            logger.debug(f"{team_name} did not play in fixture {match.match_id}, skipping.")
            continue

        is_home = side == Side.HOME
        goals_for = match.home_goals if is_home else match.away_goals
        goals_against = match.away_goals if is_home else match.home_goals
        opponent = match.away_team.name if is_home else match.home_team.name
        result = _classify(goals_for, goals_against)

        record.form.append(result)
        record.goals_for += goals_for
        record.goals_against += goals_against
        if result == FormResult.WIN:
            record.wins += 1
        elif result == FormResult.LOSS:
            record.losses += 1
        else:
            record.draws += 1
        record.last_matches.append(
            FormMatch(
                opponent=opponent,
                result=result,
                score=f"{goals_for}-{goals_against}",
                home=is_home,
            )
        )

    return record
