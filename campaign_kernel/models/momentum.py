"""Candidate momentum, swing-state analysis and campaign-level summaries."""

from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class MomentumDirection(str, Enum):
    SURGING = "SURGING"         # >= +2 per game week
    RISING = "RISING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"
    COLLAPSING = "COLLAPSING"   # <= -2 per game week


class SwingStateCategory(str, Enum):
    TOSS_UP = "TOSS_UP"
    LEAN_DEMOCRATIC = "LEAN_DEMOCRATIC"
    LEAN_REPUBLICAN = "LEAN_REPUBLICAN"
    LIKELY_DEMOCRATIC = "LIKELY_DEMOCRATIC"
    LIKELY_REPUBLICAN = "LIKELY_REPUBLICAN"
    SAFE_DEMOCRATIC = "SAFE_DEMOCRATIC"
    SAFE_REPUBLICAN = "SAFE_REPUBLICAN"


class VolatilityTrend(str, Enum):
    INCREASING = "INCREASING"
    STABLE = "STABLE"
    DECREASING = "DECREASING"


class MarginTrend(str, Enum):
    WIDENING = "WIDENING"
    NARROWING = "NARROWING"
    STABLE = "STABLE"


class OverallTrend(str, Enum):
    FAVORING_INCUMBENT = "FAVORING_INCUMBENT"
    FAVORING_CHALLENGER = "FAVORING_CHALLENGER"
    TOSS_UP = "TOSS_UP"


class CandidateMomentum(BaseModel):
    candidate_id: str
    current_support: float = 0.0

    weekly_change: float = 0.0              # Per game week
    monthly_change: float = 0.0             # Per game month
    direction: MomentumDirection = MomentumDirection.STABLE

    volatility: float = Field(default=0.0, ge=0)
    volatility_trend: VolatilityTrend = VolatilityTrend.STABLE

    peak_support: float = 0.0
    low_support: float = 0.0
    days_from_peak: int = 0                 # Game days

    projected_support: float = Field(default=0.0, ge=0, le=100)
    confidence: float = Field(default=0.0, ge=0, le=1)


class SwingStateAnalysis(BaseModel):
    state_code: str
    state_name: str
    electoral_votes: int

    leading_candidate: str = ""
    margin: float = 0.0                     # Positive favours the Democrat
    category: SwingStateCategory = SwingStateCategory.TOSS_UP

    competitiveness_score: float = Field(default=0.5, ge=0, le=1)
    electoral_weight: float = 0.0
    priority_rank: int = 0

    margin_trend: MarginTrend = MarginTrend.STABLE
    recent_shift: float = 0.0
    volatility: float = 0.0

    win_probability: Dict[str, float] = {}


class CampaignMomentumSummary(BaseModel):
    campaign_id: str
    timestamp: datetime

    national_momentum: List[CandidateMomentum] = []
    swing_states: List[SwingStateAnalysis] = []
    toss_up_states: List[SwingStateAnalysis] = []

    electoral_vote_projection: Dict[str, int] = {}
    paths_to_victory: int = 0

    overall_trend: OverallTrend = OverallTrend.TOSS_UP
    confidence: float = Field(default=0.0, ge=0, le=1)
