from datetime import datetime, timezone

import pytest

from bet_insights.normalization.normalizer import (
    NormalizationError,
    normalize_match,
    normalize_matches,
)

from conftest import fixture_payload


class TestNormalizeMatch:
    def test_scheduled_fixture(self, flamengo, palmeiras):
        """Should map teams, league, status and kickoff of a not-started fixture."""
        match = normalize_match(fixture_payload(1035000, flamengo, palmeiras))

        assert match.match_id == 1035000
        assert match.home_team.team_id == 127
        assert match.away_team.name == "Palmeiras"
        assert match.league_name == "Brasileirão Série A"
        assert match.country == "Brazil"
        assert match.kickoff_utc == datetime(2024, 5, 12, 19, 0, tzinfo=timezone.utc)
        assert match.is_scheduled
        assert match.has_score is False

    def test_finished_fixture(self, flamengo, palmeiras):
        match = normalize_match(
            fixture_payload(1, flamengo, palmeiras, {"home": 3, "away": 1}, status="FT")
        )

        assert match.is_finished
        assert (match.home_goals, match.away_goals) == (3, 1)

    def test_kickoff_converted_to_utc(self, flamengo, palmeiras):
        """Should convert local offsets to UTC."""
        match = normalize_match(
            fixture_payload(1, flamengo, palmeiras, kickoff="2024-05-12T16:00:00-03:00")
        )

        assert match.kickoff_utc == datetime(2024, 5, 12, 19, 0, tzinfo=timezone.utc)

    def test_falls_back_to_timestamp(self, flamengo, palmeiras):
        raw = fixture_payload(1, flamengo, palmeiras)
        raw["fixture"]["date"] = None

        match = normalize_match(raw)

        assert match.kickoff_utc == datetime.fromtimestamp(1715540400, tz=timezone.utc)

    def test_missing_teams(self, flamengo):
        """Should raise NormalizationError when a team is missing."""
        raw = fixture_payload(1, flamengo, flamengo)
        del raw["teams"]["away"]

        with pytest.raises(NormalizationError):
            normalize_match(raw)


class TestNormalizeMatches:
    def test_skips_malformed(self, flamengo, palmeiras):
        """Should keep parseable fixtures and skip the rest."""
        raws = [fixture_payload(1, flamengo, palmeiras), {"fixture": {"id": 2}}, "garbage"]

        matches = normalize_matches(raws)

        assert [m.match_id for m in matches] == [1]
