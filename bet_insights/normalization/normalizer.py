from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from bet_insights.models.match import Match, MatchTeam


class NormalizationError(Exception):
    """Raised when a raw provider fixture cannot be turned into a Match."""

    pass


def _parse_kickoff(raw_date: Optional[str], raw_timestamp: Optional[int]) -> datetime:
    if raw_date:
        try:
            # API-Football sends '2024-05-12T16:00:00+00:00'; older payloads use 'Z'
            parsed = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
        except ValueError:
            logger.debug(f"Unparseable fixture date '{raw_date}', trying timestamp.")
    if raw_timestamp is not None:
        return datetime.fromtimestamp(int(raw_timestamp), tz=timezone.utc)
    raise NormalizationError(f"Fixture has no usable kickoff time (date={raw_date!r})")


def _parse_team(raw_team: Dict[str, Any]) -> MatchTeam:
    return MatchTeam(
        team_id=raw_team["id"],
        name=raw_team["name"],
        logo=raw_team.get("logo"),
    )


def normalize_match(raw: Dict[str, Any]) -> Match:
    """Converts one API-Football fixture object into a Match."""
    try:
        fixture = raw["fixture"]
        league = raw.get("league") or {}
        teams = raw["teams"]
        goals = raw.get("goals") or {}
        status = fixture.get("status") or {}

        return Match(
            match_id=fixture["id"],
            kickoff_utc=_parse_kickoff(fixture.get("date"), fixture.get("timestamp")),
            status_short=status.get("short") or "TBD",
            status_long=status.get("long"),
            home_team=_parse_team(teams["home"]),
            away_team=_parse_team(teams["away"]),
            home_goals=goals.get("home"),
            away_goals=goals.get("away"),
            league_id=league.get("id"),
            league_name=league.get("name") or "",
            country=league.get("country"),
        )
    except NormalizationError:
        raise
    except (KeyError, TypeError, ValidationError) as e:
        raise NormalizationError(f"Malformed fixture payload: {e}") from e


def normalize_matches(raw_fixtures: List[Dict[str, Any]]) -> List[Match]:
    """Normalizes a provider 'response' list, skipping fixtures that cannot be parsed."""
    matches: List[Match] = []
    skipped = 0
    for raw in raw_fixtures:
        try:
            matches.append(normalize_match(raw))
        except NormalizationError as e:
            skipped += 1
            fixture_id = (raw.get("fixture") or {}).get("id") if isinstance(raw, dict) else None
            logger.warning(f"Skipping fixture {fixture_id}: {e}")

    if skipped:
        logger.info(f"Normalized {len(matches)} fixtures, skipped {skipped} malformed.")
    return matches
