"""Confidence scoring for upcoming matches.

Cross-references the user's own betting history on both teams and the
championship with each team's recent form and their head-to-head record,
and turns that into a 0-100 confidence for a suggested bet.

Pipeline per match:
1. Eligibility gate (enough evidence to say anything at all)
2. Scenario decision table, evaluated in priority order, first match wins
3. Head-to-head adjustment
4. Championship adjustment
5. Bet type selection, clamp to [0, 100], emission gate
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from bet_insights.models.enums import BetType, Side
from bet_insights.models.evidence import HeadToHeadRecord, RecentFormRecord
from bet_insights.models.history import HistoryRecord
from bet_insights.models.suggestion import Suggestion
from bet_insights.utils.misc_utils import clamp, round_half_up

MIN_DECIDED_BETS = 3  # Sample size below which a win rate is not trusted
MIN_EMIT_CONFIDENCE = 45
H2H_MIN_MEETINGS = 3
H2H_MIN_WIN_GAP = 2
BEST_BET_TYPE_MIN_BETS = 5


def _other(side: Side) -> Side:
    return Side.AWAY if side == Side.HOME else Side.HOME


class MatchupInputs(BaseModel):
    """Everything known about one upcoming match. Every evidence field may be absent."""

    home_team: str
    away_team: str
    match_id: Optional[int] = None
    league: Optional[str] = None
    kickoff_utc: Optional[datetime] = None

    home_history: Optional[HistoryRecord] = None
    away_history: Optional[HistoryRecord] = None
    championship_history: Optional[HistoryRecord] = None
    home_form: Optional[RecentFormRecord] = None
    away_form: Optional[RecentFormRecord] = None
    head_to_head: Optional[HeadToHeadRecord] = None
    bet_type_history: Dict[BetType, HistoryRecord] = Field(default_factory=dict)

    def name(self, side: Side) -> str:
        return self.home_team if side == Side.HOME else self.away_team

    def history(self, side: Side) -> Optional[HistoryRecord]:
        return self.home_history if side == Side.HOME else self.away_history

    def decided(self, side: Side) -> int:
        record = self.history(side)
        return record.decided_bets if record else 0

    def rate(self, side: Side) -> float:
        record = self.history(side)
        return record.win_rate if record else 0.0

    def has_history(self, side: Side) -> bool:
        return self.decided(side) >= MIN_DECIDED_BETS

    def form(self, side: Side) -> Optional[RecentFormRecord]:
        return self.home_form if side == Side.HOME else self.away_form

    def form_score(self, side: Side) -> float:
        """Recent form score, 0 when the team has no form data."""
        record = self.form(side)
        if record is None or record.form_score is None:
            return 0.0
        return record.form_score

    def has_form(self, side: Side) -> bool:
        record = self.form(side)
        return record is not None and record.has_data


class Assessment(BaseModel):
    """Working state while one match is being scored."""

    scenario: Optional[str] = None
    favored: Optional[Side] = None
    confidence: float = 0.0
    warnings: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)


# --- Rationale wording ---


def _history_reason(m: MatchupInputs, side: Side) -> str:
    return (
        f"{m.name(side)} wins {m.rate(side):.1f}% of your bets "
        f"({m.decided(side)} bets)"
    )


def _form_reason(m: MatchupInputs, side: Side) -> str:
    record = m.form(side)
    wins = record.wins if record else 0
    played = record.matches_played if record else 0
    return f"{m.name(side)} won {wins} of its last {played} matches"


# --- Scenario 1: both teams historically strong ---


def _both_strong_applies(m: MatchupInputs) -> bool:
    return (
        m.has_history(Side.HOME)
        and m.has_history(Side.AWAY)
        and m.rate(Side.HOME) >= 65
        and m.rate(Side.AWAY) >= 65
    )


def _score_both_strong(m: MatchupInputs, a: Assessment) -> None:
    a.confidence = 45
    a.warnings.append(
        f"Historically balanced matchup: you win {m.rate(Side.HOME):.1f}% of bets on "
        f"{m.home_team} and {m.rate(Side.AWAY):.1f}% on {m.away_team}"
    )
    form_diff = m.form_score(Side.HOME) - m.form_score(Side.AWAY)
    if abs(form_diff) >= 30:
        side = Side.HOME if form_diff > 0 else Side.AWAY
        a.favored = side
        a.confidence = 50 + abs(form_diff) / 4
        a.reasons.append(_form_reason(m, side))
    else:
        a.warnings.append("Recent form is also balanced between both teams")


# --- Scenario 2: clear mismatch ---


def _mismatch_sides(m: MatchupInputs) -> Optional[Tuple[Side, Side]]:
    for strong, weak in ((Side.HOME, Side.AWAY), (Side.AWAY, Side.HOME)):
        if (
            m.has_history(strong)
            and m.has_history(weak)
            and m.rate(strong) >= 60
            and m.rate(weak) < 45
        ):
            return strong, weak
    return None


def _clear_mismatch_applies(m: MatchupInputs) -> bool:
    return _mismatch_sides(m) is not None


def _score_clear_mismatch(m: MatchupInputs, a: Assessment) -> None:
    strong, weak = _mismatch_sides(m)
    rate_diff = m.rate(strong) - m.rate(weak)
    a.favored = strong
    a.confidence = 75 + min(rate_diff / 5, 15)
    a.reasons.append(_history_reason(m, strong))
    a.reasons.append(
        f"{m.name(weak)} wins only {m.rate(weak):.1f}% of your bets ({m.decided(weak)} bets)"
    )
    if m.form_score(weak) - m.form_score(strong) > 30:
        a.confidence -= 15
        a.warnings.append(
            f"Recent form contradicts the historical edge: {m.name(weak)} at "
            f"{m.form_score(weak):.0f}% vs {m.form_score(strong):.0f}% for {m.name(strong)}"
        )


# --- Scenario 3: moderate historical edge ---


def _moderate_edge_applies(m: MatchupInputs) -> bool:
    if not (m.has_history(Side.HOME) and m.has_history(Side.AWAY)):
        return False
    rate_gap = abs(m.rate(Side.HOME) - m.rate(Side.AWAY))
    form_gap = abs(m.form_score(Side.HOME) - m.form_score(Side.AWAY))
    return rate_gap >= 25 or form_gap >= 40


def _score_moderate_edge(m: MatchupInputs, a: Assessment) -> None:
    rate_diff = m.rate(Side.HOME) - m.rate(Side.AWAY)
    if rate_diff > 0:
        side = Side.HOME
    elif rate_diff < 0:
        side = Side.AWAY
    else:
        # Identical win rates: the edge came from form
        side = Side.HOME if m.form_score(Side.HOME) >= m.form_score(Side.AWAY) else Side.AWAY
    a.favored = side
    a.confidence = 55 + min(abs(rate_diff) / 3, 20)
    a.reasons.append(_history_reason(m, side))
    if m.form_score(side) >= 60:
        a.confidence += 5
        a.reasons.append(_form_reason(m, side))


# --- Scenario 4: recent form only ---


def _form_only_applies(m: MatchupInputs) -> bool:
    return (
        not m.has_history(Side.HOME)
        and not m.has_history(Side.AWAY)
        and (m.has_form(Side.HOME) or m.has_form(Side.AWAY))
    )


def _score_form_only(m: MatchupInputs, a: Assessment) -> None:
    home_score = m.form_score(Side.HOME)
    away_score = m.form_score(Side.AWAY)
    leader = Side.HOME if home_score >= away_score else Side.AWAY
    leader_score = max(home_score, away_score)

    if abs(home_score - away_score) >= 40:
        a.favored = leader
        a.confidence = 0.6 * leader_score
        a.reasons.append(_form_reason(m, leader))
        trailing = m.form(_other(leader))
        if trailing is not None and trailing.losses >= 3:
            a.confidence += 10
            a.reasons.append(
                f"{m.name(_other(leader))} lost {trailing.losses} of its last "
                f"{trailing.matches_played} matches"
            )
    elif leader_score >= 60:
        a.favored = leader
        a.confidence = 0.5 * leader_score
        a.warnings.append(
            "Based on recent form only: you have no betting history with these teams"
        )


# --- Scenario 5: only one side has betting history ---


def _single_side_sides(m: MatchupInputs) -> Optional[Tuple[Side, Side]]:
    for known, unknown in ((Side.HOME, Side.AWAY), (Side.AWAY, Side.HOME)):
        if m.has_history(known) and m.rate(known) >= 55 and not m.has_history(unknown):
            return known, unknown
    return None


def _single_side_applies(m: MatchupInputs) -> bool:
    return _single_side_sides(m) is not None


def _score_single_side(m: MatchupInputs, a: Assessment) -> None:
    known, unknown = _single_side_sides(m)
    a.favored = known
    a.confidence = 0.8 * m.rate(known)
    a.reasons.append(_history_reason(m, known))
    if m.form_score(unknown) >= 70:
        a.confidence -= 15
        a.warnings.append(
            f"{m.name(unknown)} is in strong recent form "
            f"({m.form_score(unknown):.0f}% wins in its last "
            f"{m.form(unknown).matches_played} matches)"
        )


Scenario = Tuple[
    str,
    Callable[[MatchupInputs], bool],
    Callable[[MatchupInputs, Assessment], None],
]

# Priority order matters: the first scenario whose predicate holds is the only one applied
SCENARIOS: List[Scenario] = [
    ("both_strong", _both_strong_applies, _score_both_strong),
    ("clear_mismatch", _clear_mismatch_applies, _score_clear_mismatch),
    ("moderate_edge", _moderate_edge_applies, _score_moderate_edge),
    ("form_only", _form_only_applies, _score_form_only),
    ("single_side_history", _single_side_applies, _score_single_side),
]


# --- Gates and adjustments ---


def is_eligible(m: MatchupInputs) -> bool:
    """Whether there is enough evidence to score the match at all."""
    championship = m.championship_history
    return (
        m.has_history(Side.HOME)
        or m.has_history(Side.AWAY)
        or (championship is not None and championship.decided_bets >= MIN_DECIDED_BETS)
        or m.has_form(Side.HOME)
        or m.has_form(Side.AWAY)
    )


def classify(m: MatchupInputs) -> Assessment:
    """Runs the scenario decision table and returns the resulting assessment."""
    assessment = Assessment()
    for name, applies, score in SCENARIOS:
        if applies(m):
            assessment.scenario = name
            score(m, assessment)
            break
    # With no favorite the confidence stays whatever the scenario left (0 when none ran)
    return assessment


def _apply_head_to_head(m: MatchupInputs, a: Assessment) -> None:
    h2h = m.head_to_head
    if h2h is None or h2h.total_meetings < H2H_MIN_MEETINGS:
        return

    # Orient the record to this fixture's home/away teams
    if h2h.team_a_name == m.away_team and h2h.team_b_name == m.home_team:
        home_wins, away_wins = h2h.team_b_wins, h2h.team_a_wins
    else:
        home_wins, away_wins = h2h.team_a_wins, h2h.team_b_wins

    if abs(home_wins - away_wins) < H2H_MIN_WIN_GAP:
        return

    leader = Side.HOME if home_wins > away_wins else Side.AWAY
    a.reasons.append(
        f"{m.name(leader)} won {max(home_wins, away_wins)} of "
        f"{h2h.total_meetings} head-to-head meetings"
    )
    if a.favored is None:
        return
    if a.favored == leader:
        a.confidence += 5
    else:
        a.confidence -= 5
        a.warnings.append(
            f"Head-to-head favors {m.name(leader)}, not {m.name(a.favored)}"
        )


def _apply_championship(m: MatchupInputs, a: Assessment) -> None:
    championship = m.championship_history
    if championship is None:
        return
    bets = championship.decided_bets
    rate = championship.win_rate
    if bets < MIN_DECIDED_BETS or rate < 55:
        return
    a.confidence += rate * min(bets / 20, 0.15)
    if rate >= 60:
        a.reasons.append(
            f"You win {rate:.1f}% of your bets in {championship.key} ({bets} bets)"
        )


def best_bet_type(records: Dict[BetType, HistoryRecord]) -> BetType:
    """Historically most successful bet type with enough decided bets, else draw."""
    qualified = [
        (bet_type, record)
        for bet_type, record in records.items()
        if record.decided_bets >= BEST_BET_TYPE_MIN_BETS
    ]
    if not qualified:
        return BetType.DRAW
    return max(qualified, key=lambda item: item[1].win_rate)[0]


def score_matchup(m: MatchupInputs) -> Optional[Suggestion]:
    """Scores one upcoming match. Returns None when no suggestion should be shown."""
    if not is_eligible(m):
        return None

    assessment = classify(m)
    _apply_head_to_head(m, assessment)
    _apply_championship(m, assessment)

    if assessment.favored == Side.HOME:
        bet_type = BetType.TEAM_A
    elif assessment.favored == Side.AWAY:
        bet_type = BetType.TEAM_B
    else:
        bet_type = best_bet_type(m.bet_type_history)

    final = clamp(assessment.confidence, 0, 100)
    logger.debug(
        f"{m.home_team} vs {m.away_team}: scenario={assessment.scenario} "
        f"favored={assessment.favored} confidence={final:.2f}"
    )

    # Gate on the unrounded value
    if final < MIN_EMIT_CONFIDENCE:
        return None
    if not assessment.warnings and not assessment.reasons:
        return None

    return Suggestion(
        match_id=m.match_id,
        home_team=m.home_team,
        away_team=m.away_team,
        league=m.league,
        kickoff_utc=m.kickoff_utc,
        confidence=round_half_up(final),
        favored_side=assessment.favored,
        suggested_bet_type=bet_type,
        warnings=assessment.warnings,
        reasons=assessment.reasons,
        home_win_rate=m.home_history.win_rate if m.home_history else None,
        away_win_rate=m.away_history.win_rate if m.away_history else None,
        championship_win_rate=(
            m.championship_history.win_rate if m.championship_history else None
        ),
        relevant_bets=m.decided(Side.HOME) + m.decided(Side.AWAY),
    )
