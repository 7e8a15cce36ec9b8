"""Wallet performance statistics.

Groups a wallet's bets (pending included) by team, championship, bet type,
weekday and odds range, and derives the headline numbers: win rate, profit,
ROI on stake and on capital, current streak, best/worst bet type and the
cumulative profit curve.

Money only counts once a bet is settled. When a combined bet is attributed
to teams, championships or bet types its stake and payout are split evenly
across the legs; weekday, odds range and the general totals use the whole
combined bet.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple, Union

from loguru import logger

from bet_insights.models.bet import CombinedBet, FinishedBet
from bet_insights.models.enums import BET_TYPE_LABELS, BetResult, BetType
from bet_insights.models.statistics import (
    GeneralStats,
    PerformanceRecord,
    PerformanceReport,
    ProfitPoint,
    Streak,
    Wallet,
)
from bet_insights.utils.misc_utils import percentage

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# (label, min, max) inclusive on both ends
ODDS_RANGES: List[Tuple[str, float, float]] = [
    ("1.00 - 1.50", 1.00, 1.50),
    ("1.51 - 2.00", 1.51, 2.00),
    ("2.01 - 3.00", 2.01, 3.00),
    ("3.01 - 5.00", 3.01, 5.00),
    ("5.01+", 5.01, float("inf")),
]

MIN_BETS_FOR_RANKING = 3
MOST_BET_TEAMS_LIMIT = 10
PROFIT_EVOLUTION_POINTS = 30

AnyBet = Union[FinishedBet, CombinedBet]


def _tally(
    record: PerformanceRecord, result: BetResult, staked: float, returned: float
) -> None:
    record.total_bets += 1
    if result == BetResult.WIN:
        record.wins += 1
    elif result == BetResult.LOSS:
        record.losses += 1
    elif result == BetResult.PENDING:
        record.pending += 1
        return
    record.total_staked += staked
    record.total_return += returned


def _record_for(records: Dict[str, PerformanceRecord], key: str) -> PerformanceRecord:
    record = records.get(key)
    if record is None:
        record = PerformanceRecord(key=key)
        records[key] = record
    return record


def _by_profit(records: Iterable[PerformanceRecord]) -> List[PerformanceRecord]:
    return sorted(records, key=lambda r: r.profit, reverse=True)


def _odds_range_index(odds: float) -> Optional[int]:
    for index, (_, low, high) in enumerate(ODDS_RANGES):
        if low <= odds <= high:
            return index
    return None


def _in_period(bet: AnyBet, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is None and date_to is None:
        return True
    if bet.match_date is None:
        return False
    if date_from is not None and bet.match_date < date_from:
        return False
    if date_to is not None and bet.match_date > date_to:
        return False
    return True


def _general_stats(all_bets: List[AnyBet], wallet: Optional[Wallet]) -> GeneralStats:
    stats = GeneralStats(total_bets=len(all_bets))
    for bet in all_bets:
        if bet.result == BetResult.WIN:
            stats.wins += 1
        elif bet.result == BetResult.LOSS:
            stats.losses += 1
        elif bet.result == BetResult.PENDING:
            stats.pending += 1
        if bet.result != BetResult.PENDING:
            stats.total_staked += bet.amount
            stats.total_return += bet.return_amount

    stats.profit = stats.total_return - stats.total_staked
    stats.win_rate = percentage(stats.wins, stats.wins + stats.losses)
    stats.roi = percentage(stats.profit, stats.total_staked)
    if wallet is not None:
        stats.initial_balance = wallet.initial_balance
        stats.current_balance = wallet.balance
        if wallet.initial_balance > 0:
            stats.roi_capital = percentage(
                wallet.balance - wallet.initial_balance, wallet.initial_balance
            )
    return stats


def current_streak(all_bets: Iterable[AnyBet]) -> Streak:
    """Result of the most recently dated settled bet and how many in a row share it."""
    settled = [b for b in all_bets if b.result != BetResult.PENDING]
    if not settled:
        return Streak()
    # Stable sort; undated bets are treated as the oldest
    settled.sort(key=lambda b: b.match_date or date.min, reverse=True)
    latest = settled[0].result
    count = 0
    for bet in settled:
        if bet.result != latest:
            break
        count += 1
    return Streak(result=latest, count=count)


def profit_evolution(all_bets: Iterable[AnyBet]) -> List[ProfitPoint]:
    """Cumulative profit at the end of each match date, last 30 dates only."""
    settled = [
        b for b in all_bets if b.result != BetResult.PENDING and b.match_date is not None
    ]
    settled.sort(key=lambda b: b.match_date)

    by_date: Dict[date, float] = {}
    cumulative = 0.0
    for bet in settled:
        cumulative += bet.profit
        by_date[bet.match_date] = cumulative

    points = [ProfitPoint(match_date=d, cumulative_profit=p) for d, p in by_date.items()]
    return points[-PROFIT_EVOLUTION_POINTS:]


def build_performance_report(
    bets: Iterable[FinishedBet],
    combined_bets: Iterable[CombinedBet] = (),
    wallet: Optional[Wallet] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> PerformanceReport:
    bets = [b for b in bets if _in_period(b, date_from, date_to)]
    combined_bets = [c for c in combined_bets if _in_period(c, date_from, date_to)]
    all_bets: List[AnyBet] = [*bets, *combined_bets]

    teams: Dict[str, PerformanceRecord] = {}
    championships: Dict[str, PerformanceRecord] = {}
    bet_types: Dict[str, PerformanceRecord] = {
        bet_type.value: PerformanceRecord(key=bet_type.value, label=BET_TYPE_LABELS[bet_type])
        for bet_type in BetType
    }
    weekdays = [PerformanceRecord(key=day) for day in WEEKDAYS]
    odds_ranges = [PerformanceRecord(key=label) for label, _, _ in ODDS_RANGES]

    for bet in bets:
        for team in (bet.team_a, bet.team_b):
            _tally(_record_for(teams, team), bet.result, bet.amount, bet.return_amount)
        _tally(_record_for(championships, bet.championship), bet.result, bet.amount, bet.return_amount)
        _tally(bet_types[BetType(bet.bet_type).value], bet.result, bet.amount, bet.return_amount)

    for combined in combined_bets:
        stake = combined.stake_per_leg()
        payout = combined.return_per_leg()
        for leg in combined.legs:
            for team in (leg.team_a, leg.team_b):
                _tally(_record_for(teams, team), combined.result, stake, payout)
            _tally(_record_for(championships, leg.championship), combined.result, stake, payout)
            _tally(bet_types[BetType(leg.bet_type).value], combined.result, stake, payout)

    for bet in all_bets:
        if bet.match_date is not None:
            _tally(weekdays[bet.match_date.weekday()], bet.result, bet.amount, bet.return_amount)
        index = _odds_range_index(bet.odds)
        if index is not None:
            _tally(odds_ranges[index], bet.result, bet.amount, bet.return_amount)

    team_records = _by_profit(teams.values())
    bet_type_records = _by_profit(r for r in bet_types.values() if r.total_bets > 0)

    ranked_types = sorted(
        (r for r in bet_type_records if r.total_bets >= MIN_BETS_FOR_RANKING),
        key=lambda r: r.win_rate,
        reverse=True,
    )

    report = PerformanceReport(
        general=_general_stats(all_bets, wallet),
        teams=team_records,
        championships=_by_profit(championships.values()),
        bet_types=bet_type_records,
        weekdays=weekdays,
        odds_ranges=odds_ranges,
        most_bet_teams=sorted(team_records, key=lambda r: r.total_bets, reverse=True)[
            :MOST_BET_TEAMS_LIMIT
        ],
        current_streak=current_streak(all_bets),
        best_bet_type=ranked_types[0] if ranked_types else None,
        worst_bet_type=ranked_types[-1] if ranked_types else None,
        profit_evolution=profit_evolution(all_bets),
    )
    logger.info(
        f"Performance report built from {len(bets)} bets and {len(combined_bets)} combined bets."
    )
    return report
