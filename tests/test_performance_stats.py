from datetime import date

import pytest

from bet_insights.calculation.performance_stats import (
    build_performance_report,
    current_streak,
    profit_evolution,
)
from bet_insights.models.enums import BetResult, BetType
from bet_insights.models.statistics import Wallet

from conftest import make_bet, make_combined, make_leg


def _record(records, key):
    return next(r for r in records if r.key == key)


class TestGeneralStats:
    def test_totals_and_roi(self):
        """Should count pending bets but only settle money for finished ones."""
        bets = [
            make_bet(result=BetResult.WIN, amount=10, odds=2.5),  # +15
            make_bet(result=BetResult.LOSS, amount=10),  # -10
            make_bet(result=BetResult.PENDING, amount=50),
        ]
        wallet = Wallet(id="w1", name="Main", balance=1200, initial_balance=1000)

        general = build_performance_report(bets, wallet=wallet).general

        assert general.total_bets == 3
        assert (general.wins, general.losses, general.pending) == (1, 1, 1)
        assert general.total_staked == 20
        assert general.total_return == 25
        assert general.profit == 5
        assert general.win_rate == 50.0
        assert general.roi == pytest.approx(25.0)
        assert general.roi_capital == pytest.approx(20.0)
        assert general.current_balance == 1200

    def test_no_wallet(self):
        general = build_performance_report([]).general

        assert general.roi_capital == 0
        assert general.win_rate == 0


class TestGroupings:
    def test_combined_money_split_across_legs(self):
        """Should attribute a combined bet's stake and payout evenly to its legs."""
        combined = make_combined(
            legs=[
                make_leg("Flamengo", "Palmeiras", bet_type=BetType.TEAM_A),
                make_leg("Arsenal", "Chelsea", "Premier League", bet_type=BetType.OVER),
            ],
            amount=10,
            odds=4.0,
            result=BetResult.WIN,
        )

        report = build_performance_report([], [combined])

        arsenal = _record(report.teams, "Arsenal")
        assert arsenal.total_staked == 5
        assert arsenal.total_return == 20
        assert arsenal.wins == 1
        premier = _record(report.championships, "Premier League")
        assert premier.profit == 15
        over = _record(report.bet_types, BetType.OVER.value)
        assert over.label == "Over (more goals)"
        # The whole bet counts once per odds range
        assert _record(report.odds_ranges, "3.01 - 5.00").total_staked == 10

    def test_bet_types_only_listed_when_used(self):
        report = build_performance_report([make_bet(bet_type=BetType.DRAW)])

        assert [r.key for r in report.bet_types] == ["draw"]

    def test_sorted_by_profit(self):
        bets = [
            make_bet(team_a="Santos", team_b="Bahia", result=BetResult.LOSS),
            make_bet(team_a="Flamengo", team_b="Vitória", result=BetResult.WIN),
        ]

        report = build_performance_report(bets)

        profits = [r.profit for r in report.teams]
        assert profits == sorted(profits, reverse=True)

    def test_weekdays(self):
        """Should bucket by the weekday of the match date, Monday first."""
        report = build_performance_report(
            [make_bet(match_date=date(2024, 5, 12)), make_bet(match_date=date(2024, 5, 13))]
        )

        assert [r.key for r in report.weekdays][0] == "Monday"
        assert _record(report.weekdays, "Sunday").total_bets == 1
        assert _record(report.weekdays, "Monday").total_bets == 1

    def test_odds_range_boundaries(self):
        bets = [make_bet(odds=1.5), make_bet(odds=1.51), make_bet(odds=5.01)]

        report = build_performance_report(bets)

        assert [r.total_bets for r in report.odds_ranges] == [1, 1, 0, 0, 1]

    def test_best_and_worst_bet_type(self):
        """Should rank bet types with at least three bets by win rate."""
        bets = (
            [make_bet(bet_type=BetType.OVER, result=BetResult.WIN)] * 3
            + [make_bet(bet_type=BetType.UNDER, result=BetResult.LOSS)] * 3
            + [make_bet(bet_type=BetType.DRAW, result=BetResult.WIN)] * 2
        )

        report = build_performance_report(bets)

        assert report.best_bet_type.key == "over"
        assert report.worst_bet_type.key == "under"

    def test_most_bet_teams_limit(self):
        bets = [make_bet(team_a=f"Team {i}", team_b=f"Rival {i}") for i in range(8)]

        report = build_performance_report(bets)

        assert len(report.most_bet_teams) == 10

    def test_date_filter(self):
        bets = [make_bet(match_date=date(2024, 4, 1)), make_bet(match_date=date(2024, 5, 1))]

        report = build_performance_report(bets, date_from=date(2024, 4, 15))

        assert report.general.total_bets == 1


class TestStreakAndEvolution:
    def test_current_streak(self):
        """Should count the run of the most recent settled result."""
        bets = [
            make_bet(result=BetResult.LOSS, match_date=date(2024, 5, 1)),
            make_bet(result=BetResult.WIN, match_date=date(2024, 5, 2)),
            make_bet(result=BetResult.WIN, match_date=date(2024, 5, 3)),
            make_bet(result=BetResult.PENDING, match_date=date(2024, 5, 4)),
        ]

        streak = current_streak(bets)

        assert streak.result == BetResult.WIN
        assert streak.count == 2

    def test_no_settled_bets(self):
        assert current_streak([make_bet(result=BetResult.PENDING)]).count == 0

    def test_profit_evolution_is_cumulative_per_date(self):
        bets = [
            make_bet(result=BetResult.WIN, amount=10, odds=2.0, match_date=date(2024, 5, 1)),
            make_bet(result=BetResult.LOSS, amount=5, match_date=date(2024, 5, 1)),
            make_bet(result=BetResult.LOSS, amount=10, match_date=date(2024, 5, 2)),
        ]

        points = profit_evolution(bets)

        assert [(p.match_date, p.cumulative_profit) for p in points] == [
            (date(2024, 5, 1), 5.0),
            (date(2024, 5, 2), -5.0),
        ]

    def test_profit_evolution_keeps_last_30_dates(self):
        bets = [make_bet(match_date=date(2024, 1, 1 + i)) for i in range(31)]

        points = profit_evolution(bets)

        assert len(points) == 30
        assert points[0].match_date == date(2024, 1, 2)
