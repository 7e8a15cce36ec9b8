from typing import Dict, Iterable, List, Optional

from loguru import logger

from bet_insights.models.evidence import MatchEvidence
from bet_insights.models.history import HistorySummary
from bet_insights.models.match import Match
from bet_insights.models.suggestion import Suggestion, SuggestionReport
from .confidence_scorer import MatchupInputs, score_matchup

HIGH_CONFIDENCE_THRESHOLD = 65


def build_matchup_inputs(
    match: Match, history: HistorySummary, evidence: Optional[MatchEvidence] = None
) -> MatchupInputs:
    """Joins the user's history and any provider evidence for one fixture."""
    evidence = evidence or MatchEvidence()
    home = match.home_team.name
    away = match.away_team.name
    return MatchupInputs(
        home_team=home,
        away_team=away,
        match_id=match.match_id,
        league=match.league_name or None,
        kickoff_utc=match.kickoff_utc,
        home_history=history.team(home),
        away_history=history.team(away),
        championship_history=history.championship(match.league_name),
        home_form=evidence.home_form,
        away_form=evidence.away_form,
        head_to_head=evidence.head_to_head,
        bet_type_history=history.bet_types,
    )


def rank_suggestions(
    matches: Iterable[Match],
    history: HistorySummary,
    evidence_by_match: Optional[Dict[int, MatchEvidence]] = None,
) -> SuggestionReport:
    """Scores every upcoming match of the day and orders the emitted suggestions.

    Matches that already started or finished are counted but never scored.
    Ties keep the order of the input list.
    """
    evidence_by_match = evidence_by_match or {}
    matches = list(matches)
    suggestions: List[Suggestion] = []

    for match in matches:
        if not match.is_scheduled:
            continue
        inputs = build_matchup_inputs(match, history, evidence_by_match.get(match.match_id))
        suggestion = score_matchup(inputs)
        if suggestion is not None:
            suggestions.append(suggestion)

    # sorted() is stable, so equal confidences keep input order
    suggestions = sorted(suggestions, key=lambda s: s.confidence, reverse=True)
    high_confidence = sum(1 for s in suggestions if s.confidence >= HIGH_CONFIDENCE_THRESHOLD)

    logger.info(
        f"Ranked {len(suggestions)} suggestions out of {len(matches)} matches "
        f"({high_confidence} high confidence)."
    )
    return SuggestionReport(
        suggestions=suggestions,
        total_matches=len(matches),
        suggested_matches=len(suggestions),
        high_confidence_matches=high_confidence,
    )
