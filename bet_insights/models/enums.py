from enum import Enum


class BetType(str, Enum):
    TEAM_A = "team_a"  # Home / first-listed team wins
    TEAM_B = "team_b"  # Away / second-listed team wins
    DRAW = "draw"
    TEAM_A_OR_DRAW = "team_a_or_draw"
    TEAM_B_OR_DRAW = "team_b_or_draw"
    TEAM_A_OR_TEAM_B = "team_a_or_team_b"
    OVER = "over"
    UNDER = "under"
    BOTH_SCORE_YES = "both_score_yes"
    BOTH_SCORE_NO = "both_score_no"
    OTHER = "other"


BET_TYPE_LABELS = {
    BetType.TEAM_A: "Team A",
    BetType.TEAM_B: "Team B",
    BetType.DRAW: "Draw",
    BetType.TEAM_A_OR_DRAW: "Team A or Draw",
    BetType.TEAM_B_OR_DRAW: "Team B or Draw",
    BetType.TEAM_A_OR_TEAM_B: "Team A or Team B",
    BetType.OVER: "Over (more goals)",
    BetType.UNDER: "Under (fewer goals)",
    BetType.BOTH_SCORE_YES: "Both Teams Score - Yes",
    BetType.BOTH_SCORE_NO: "Both Teams Score - No",
    BetType.OTHER: "Other",
}


class BetResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"  # Stake returned
    PENDING = "pending"
    CASHOUT = "cashout"


DECIDED_RESULTS = {BetResult.WIN, BetResult.LOSS}


class FormResult(str, Enum):
    WIN = "W"
    DRAW = "D"
    LOSS = "L"


class Side(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"


class MeetingWinner(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"
    DRAW = "DRAW"


# API-Football short status codes
SCHEDULED_STATUSES = {"TBD", "NS"}
LIVE_STATUSES = {"1H", "HT", "2H", "ET", "BT", "P", "LIVE"}
FINISHED_STATUSES = {"FT", "AET", "PEN", "AWD", "WO"}
