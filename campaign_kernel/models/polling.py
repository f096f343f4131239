"""Poll snapshots, demographic poll breakdowns, trends and projections."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from campaign_kernel.models.demographics import (
    IssueProfile,
    PoliticalIssue,
    StateDemographics,
)


class PollType(str, Enum):
    NATIONAL = "NATIONAL"
    STATE = "STATE"
    DISTRICT = "DISTRICT"
    TRACKING = "TRACKING"
    EXIT = "EXIT"


class DemographicSegment(str, Enum):
    """Coarse segments reported on general-purpose polls."""
    AGE_18_29 = "AGE_18_29"
    AGE_30_44 = "AGE_30_44"
    AGE_45_64 = "AGE_45_64"
    AGE_65_PLUS = "AGE_65_PLUS"
    MALE = "MALE"
    FEMALE = "FEMALE"
    WHITE = "WHITE"
    BLACK = "BLACK"
    HISPANIC = "HISPANIC"
    ASIAN = "ASIAN"
    COLLEGE_GRAD = "COLLEGE_GRAD"
    NO_COLLEGE = "NO_COLLEGE"
    URBAN = "URBAN"
    SUBURBAN = "SUBURBAN"
    RURAL = "RURAL"


class Party(str, Enum):
    DEMOCRAT = "DEMOCRAT"
    REPUBLICAN = "REPUBLICAN"
    INDEPENDENT = "INDEPENDENT"


class TrendDirection(str, Enum):
    RISING = "RISING"
    FALLING = "FALLING"
    STABLE = "STABLE"


# --- Coarse polls ---

class CandidatePollResult(BaseModel):
    candidate_id: str
    candidate_name: str
    support: float = Field(ge=0, le=100)
    margin_of_error: float
    trend_delta: float = 0.0
    demographics: Dict[DemographicSegment, float] = {}


class PollSnapshot(BaseModel):
    """
    Point-in-time poll result. Immutable; later polls read earlier ones
    only to compute deltas.
    """

    poll_id: str
    timestamp: datetime
    game_week: int

    poll_type: PollType
    geography: str                          # "NATIONAL" or a state code
    sample_size: int = Field(gt=0)
    margin_of_error: float

    candidates: List[CandidatePollResult]
    undecided: float = Field(ge=0, le=100)

    volatility: float = Field(ge=0)
    reliability: float = Field(ge=0, le=1)


class PollCandidate(BaseModel):
    """Input to a general-purpose poll: one candidate's standing."""
    id: str
    name: str
    base_support: float = Field(ge=0, le=100)
    hours_offline: float = Field(default=0.0, ge=0)


class TrendPoint(BaseModel):
    timestamp: datetime
    support: Dict[str, float]               # Candidate ID -> support


class PollingTrend(BaseModel):
    candidate_id: str
    candidate_name: str = ""
    geography: str
    points: List[TrendPoint] = []
    trend_direction: TrendDirection = TrendDirection.STABLE
    momentum: float = 0.0                   # Mean change per poll
    peak_support: float = 0.0
    low_support: float = 0.0


class StateWeight(BaseModel):
    state_code: str
    electoral_votes: int
    competitiveness: float = Field(ge=0, le=1)
    weight: float


# --- Demographic polls ---

class CandidateIssueProfile(BaseModel):
    """A candidate as seen by the demographic polling model."""

    candidate_id: str
    candidate_name: str
    party: Party
    issue_positions: IssueProfile
    base_support: float = Field(ge=0, le=100)
    charisma_bonus: float = Field(default=0.0, ge=0, le=20)
    incumbent_bonus: float = Field(default=0.0, ge=0, le=10)


class IssueDriver(BaseModel):
    issue: PoliticalIssue
    alignment_score: float
    importance: float


class DemographicPollBreakdown(BaseModel):
    group_key: str
    group_label: str
    support: float = Field(ge=0, le=100)
    turnout_likelihood: float = Field(ge=0, le=1)
    effective_votes: float = 0.0            # support x turnout x population share
    trend_delta: float = 0.0
    issue_drivers: List[IssueDriver] = []


class DemographicCandidateResult(BaseModel):
    candidate_id: str
    candidate_name: str
    overall_support: float
    demographic_breakdown: List[DemographicPollBreakdown]


class DemographicPollSnapshot(BaseModel):
    poll_id: str
    timestamp: datetime
    geography: str
    candidates: List[DemographicCandidateResult]
    state_demographics: Optional[StateDemographics] = None
    turnout_projection: float = Field(ge=0, le=1)
    competitiveness: float = Field(ge=0, le=1)


class CrosstabCell(BaseModel):
    label1: str
    label2: str
    support: Dict[str, float]               # Candidate ID -> mean support
    sample_share: float = Field(ge=0, le=1)


class CrosstabResult(BaseModel):
    dimension1: str
    dimension2: str
    cells: List[CrosstabCell]


class CandidateProjection(BaseModel):
    electoral_votes: int = 0
    states: List[str] = []


class ElectoralProjection(BaseModel):
    by_candidate: Dict[str, CandidateProjection]
    leader: Optional[str] = None
