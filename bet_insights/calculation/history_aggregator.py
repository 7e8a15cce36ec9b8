from typing import Dict, Iterable, Optional

from loguru import logger

from bet_insights.models.bet import CombinedBet, FinishedBet
from bet_insights.models.enums import BetResult, BetType
from bet_insights.models.history import HistoryRecord, HistorySummary


class InputContractViolation(ValueError):
    """Upstream handed the aggregator data it promised never to send."""

    pass


def _credit(records: Dict, key, won: bool, label: Optional[str] = None) -> None:
    record = records.get(key)
    if record is None:
        record = HistoryRecord(key=label or str(key))
        records[key] = record
    record.total_bets += 1
    if won:
        record.wins += 1
    else:
        record.losses += 1


def _check_bet_type(bet_type, owner: str) -> BetType:
    if isinstance(bet_type, BetType):
        return bet_type
    try:
        return BetType(bet_type)
    except ValueError as e:
        raise InputContractViolation(f"{owner} has unknown bet type {bet_type!r}") from e


def _is_countable(result: BetResult, owner: str) -> bool:
    if result == BetResult.PENDING:
        raise InputContractViolation(f"{owner} is still pending; filter pending bets first")
    return result in (BetResult.WIN, BetResult.LOSS)


def aggregate_history(
    bets: Iterable[FinishedBet],
    combined_bets: Iterable[CombinedBet] = (),
) -> HistorySummary:
    """Folds a wallet's finished bets into per-team, per-championship and per-bet-type tallies.

    Every leg of a combined bet is credited with the parent's single outcome;
    counts are never split across legs. Void results (draw refunds, cashouts)
    are not decided and are left out.
    """
    teams: Dict[str, HistoryRecord] = {}
    championships: Dict[str, HistoryRecord] = {}
    bet_types: Dict[BetType, HistoryRecord] = {
        bet_type: HistoryRecord(key=bet_type.value) for bet_type in BetType
    }
    skipped_void = 0

    for bet in bets:
        owner = f"Bet {bet.id or '?'}"
        bet_type = _check_bet_type(bet.bet_type, owner)
        if not _is_countable(bet.result, owner):
            skipped_void += 1
            continue
        won = bet.result == BetResult.WIN
        for team in (bet.team_a, bet.team_b):
            _credit(teams, team, won)
        _credit(championships, bet.championship, won)
        _credit(bet_types, bet_type, won, label=bet_type.value)

    for combined in combined_bets:
        owner = f"Combined bet {combined.id or '?'}"
        if len(combined.legs) < 2:
            raise InputContractViolation(
                f"{owner} has {len(combined.legs)} leg(s); combined bets need at least 2"
            )
        leg_types = [_check_bet_type(leg.bet_type, owner) for leg in combined.legs]
        if not _is_countable(combined.result, owner):
            skipped_void += 1
            continue
        won = combined.result == BetResult.WIN
        for leg, bet_type in zip(combined.legs, leg_types):
            for team in (leg.team_a, leg.team_b):
                _credit(teams, team, won)
            _credit(championships, leg.championship, won)
            _credit(bet_types, bet_type, won, label=bet_type.value)

    logger.debug(
        f"Aggregated history: {len(teams)} teams, {len(championships)} championships"
        f" ({skipped_void} void bets ignored)."
    )
    return HistorySummary(teams=teams, championships=championships, bet_types=bet_types)
