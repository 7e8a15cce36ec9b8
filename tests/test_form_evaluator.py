from bet_insights.calculation.form_evaluator import empty_form, evaluate_form
from bet_insights.models.enums import FormResult

from conftest import make_finished, make_match


class TestEvaluateForm:
    def test_counts_results_from_team_perspective(self):
        """Should classify each match as W/D/L for the evaluated team, home or away."""
        matches = [
            make_finished(1, 127, "Flamengo", 121, "Palmeiras", "2-0"),
            make_finished(2, 131, "Corinthians", 127, "Flamengo", "1-1"),
            make_finished(3, 126, "São Paulo", 127, "Flamengo", "3-1"),
            make_finished(4, 127, "Flamengo", 118, "Bahia", "0-1"),
            make_finished(5, 124, "Fluminense", 127, "Flamengo", "0-2"),
        ]
        record = evaluate_form(127, "Flamengo", matches)

        assert record.form == [
            FormResult.WIN,
            FormResult.DRAW,
            FormResult.LOSS,
            FormResult.LOSS,
            FormResult.WIN,
        ]
        assert (record.wins, record.draws, record.losses) == (2, 1, 2)
        assert record.goals_for == 6
        assert record.goals_against == 5
        assert record.form_score == 40.0

    def test_keeps_provider_order(self):
        """Should not re-sort matches by date."""
        newer = make_finished(1, 127, "Flamengo", 121, "Palmeiras", "0-3", days_ago=1)
        older = make_finished(2, 127, "Flamengo", 121, "Palmeiras", "3-0", days_ago=30)

        record = evaluate_form(127, "Flamengo", [older, newer])

        assert record.form == [FormResult.WIN, FormResult.LOSS]

    def test_skips_matches_without_score(self):
        """Should leave matches with an unknown goal count out of the sequence."""
        matches = [
            make_finished(1, 127, "Flamengo", 121, "Palmeiras", "2-1"),
            make_match(match_id=2, home_id=127, away_id=121, status="PST"),
        ]
        record = evaluate_form(127, "Flamengo", matches)

        assert record.matches_played == 1
        assert record.form_score == 100.0

    def test_last_match_summaries(self):
        """Should describe each match with opponent, score and venue."""
        record = evaluate_form(
            127, "Flamengo", [make_finished(1, 131, "Corinthians", 127, "Flamengo", "1-3")]
        )

        summary = record.last_matches[0]
        assert summary.opponent == "Corinthians"
        assert summary.score == "3-1"
        assert summary.home is False
        assert summary.result == FormResult.WIN

    def test_no_matches(self):
        """Should report no form score rather than zero when nothing is known."""
        record = evaluate_form(127, "Flamengo", [])

        assert record.has_data is False
        assert record.form_score is None
        assert record == empty_form(127, "Flamengo")

    def test_falls_back_to_team_name(self):
        """Should recognise the team by name when the id is unknown."""
        record = evaluate_form(
            None, "Flamengo", [make_finished(1, 127, "Flamengo", 121, "Palmeiras", "1-0")]
        )

        assert record.wins == 1
