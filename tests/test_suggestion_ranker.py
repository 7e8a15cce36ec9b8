from bet_insights.calculation.history_aggregator import aggregate_history
from bet_insights.calculation.suggestion_ranker import (
    build_matchup_inputs,
    rank_suggestions,
)
from bet_insights.models.enums import BetResult
from bet_insights.models.evidence import MatchEvidence

from conftest import form, make_bet, make_match

# Bets placed in a different competition than the fixtures, so no championship bonus applies
CUP = "Copa do Brasil"


def _bets_on(team: str, opponent: str, wins: int, losses: int):
    results = [BetResult.WIN] * wins + [BetResult.LOSS] * losses
    return [
        make_bet(team_a=team, team_b=opponent, championship=CUP, result=result)
        for result in results
    ]


class TestBuildMatchupInputs:
    def test_joins_history_and_evidence(self):
        """Should look up both teams and the championship by name."""
        history = aggregate_history(_bets_on("Flamengo", "Bahia", 4, 1))
        match = make_match(home="Flamengo", away="Palmeiras", league=CUP)
        evidence = MatchEvidence(home_form=form("Flamengo", "WWW"))

        inputs = build_matchup_inputs(match, history, evidence)

        assert inputs.home_history.wins == 4
        assert inputs.away_history is None
        assert inputs.championship_history.total_bets == 5
        assert inputs.home_form.wins == 3
        assert inputs.match_id == match.match_id


class TestRankSuggestions:
    def test_sorted_by_confidence_with_stable_ties(self):
        """Should order by confidence descending and keep input order among equals."""
        bets = (
            _bets_on("Flamengo", "Bahia", 4, 1)  # 80% -> 64
            + _bets_on("Santos", "Bahia", 3, 2)  # 60% -> 48
            + _bets_on("Grêmio", "Bahia", 3, 2)  # 60% -> 48
        )
        history = aggregate_history(bets)
        matches = [
            make_match(match_id=1, home="Santos", away="Ceará"),
            make_match(match_id=2, home="Flamengo", away="Vitória"),
            make_match(match_id=3, home="Grêmio", away="Cuiabá"),
        ]

        report = rank_suggestions(matches, history)

        confidences = [s.confidence for s in report.suggestions]
        assert confidences == sorted(confidences, reverse=True)
        assert [s.match_id for s in report.suggestions] == [2, 1, 3]

    def test_rollups(self):
        """Should count considered, suggested and high-confidence matches."""
        history = aggregate_history(
            _bets_on("Flamengo", "Bahia", 4, 1) + _bets_on("Santos", "Bahia", 3, 2)
        )
        matches = [
            make_match(match_id=1, home="Flamengo", away="Vitória"),
            make_match(match_id=2, home="Santos", away="Ceará"),
            make_match(match_id=3, home="Juventude", away="Cuiabá"),
        ]

        report = rank_suggestions(matches, history)

        assert report.total_matches == 3
        assert report.suggested_matches == 2
        assert report.high_confidence_matches == 0

    def test_only_upcoming_matches_are_scored(self):
        """Should skip matches that are live or finished."""
        history = aggregate_history(_bets_on("Flamengo", "Bahia", 4, 1))
        matches = [
            make_match(match_id=1, home="Flamengo", away="Vitória", status="1H"),
            make_match(match_id=2, home="Flamengo", away="Vitória", status="FT", home_goals=1, away_goals=0),
        ]

        report = rank_suggestions(matches, history)

        assert report.suggestions == []
        assert report.total_matches == 2

    def test_uses_evidence_by_match_id(self):
        """Should score with provider evidence when it exists for the match."""
        history = aggregate_history([])
        matches = [make_match(match_id=7, home="Flamengo", away="Palmeiras")]
        evidence = {
            7: MatchEvidence(
                home_form=form("Flamengo", "WWWWW"), away_form=form("Palmeiras", "LLLLL")
            )
        }

        report = rank_suggestions(matches, history, evidence)

        assert report.suggested_matches == 1
        assert report.high_confidence_matches == 1
        assert report.suggestions[0].confidence == 70

    def test_no_evidence(self):
        """Should return an empty report rather than fail when nothing is known."""
        report = rank_suggestions([make_match()], aggregate_history([]))

        assert report.suggestions == []
        assert report.suggested_matches == 0
