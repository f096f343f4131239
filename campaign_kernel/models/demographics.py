"""Demographic groups, issue profiles and demographic appeal results."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DemographicRace(str, Enum):
    WHITE = "WHITE"
    BLACK = "BLACK"
    HISPANIC = "HISPANIC"
    ASIAN = "ASIAN"
    NATIVE_AMERICAN = "NATIVE_AMERICAN"
    OTHER = "OTHER"


class DemographicClass(str, Enum):
    WEALTHY = "WEALTHY"             # Top 20% income
    MIDDLE_CLASS = "MIDDLE_CLASS"   # 20th-80th percentile
    LOWER_CLASS = "LOWER_CLASS"     # Bottom 20%


class DemographicGender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class PoliticalIssue(str, Enum):
    HEALTHCARE = "HEALTHCARE"               # -5 market, +5 universal
    IMMIGRATION = "IMMIGRATION"             # -5 restrictive, +5 open
    TAXES = "TAXES"                         # -5 cut/flat, +5 progressive
    ENVIRONMENT = "ENVIRONMENT"             # -5 deregulate, +5 green
    GUNS = "GUNS"                           # -5 unrestricted, +5 strict control
    ABORTION = "ABORTION"                   # -5 ban, +5 unrestricted access
    MILITARY = "MILITARY"                   # -5 isolationist, +5 interventionist
    EDUCATION = "EDUCATION"                 # -5 privatize, +5 public investment
    SOCIAL_SECURITY = "SOCIAL_SECURITY"     # -5 privatize/cut, +5 expand
    CRIMINAL_JUSTICE = "CRIMINAL_JUSTICE"   # -5 tough on crime, +5 reform
    TRADE = "TRADE"                         # -5 protectionist, +5 free trade
    MINIMUM_WAGE = "MINIMUM_WAGE"           # -5 abolish, +5 high minimum


class PositionLabel(str, Enum):
    EXTREMELY_LEFT = "EXTREMELY_LEFT"
    LEFT_WING = "LEFT_WING"
    SOMEWHAT_LEFT = "SOMEWHAT_LEFT"
    CENTER_LEFT = "CENTER_LEFT"
    CENTRIST = "CENTRIST"
    CENTER_RIGHT = "CENTER_RIGHT"
    SOMEWHAT_RIGHT = "SOMEWHAT_RIGHT"
    RIGHT_WING = "RIGHT_WING"
    EXTREMELY_RIGHT = "EXTREMELY_RIGHT"


ALL_POLITICAL_ISSUES: List[PoliticalIssue] = list(PoliticalIssue)

ALL_DEMOGRAPHIC_KEYS: List[str] = [
    f"{race}_{demo_class}_{gender}"
    for race in ("WHITE", "BLACK", "HISPANIC")
    for demo_class in ("WEALTHY", "MIDDLE_CLASS", "LOWER_CLASS")
    for gender in ("MALE", "FEMALE")
]


class IssueProfile(BaseModel):
    """
    Positions (-5 to +5) and importance weights (0 to 1) across issues.

    Used for both candidates and voter groups. Missing issues read as a
    neutral position; missing or zero weights read as 0.5.
    """
    positions: Dict[PoliticalIssue, float] = {}
    weights: Dict[PoliticalIssue, float] = {}


class DemographicGroup(BaseModel):
    """One of the 18 canonical race x class x gender voter segments."""

    key: str
    race: DemographicRace
    demo_class: DemographicClass
    gender: DemographicGender
    label: str                              # e.g. "White Middle Class Men"

    base_issue_profile: IssueProfile
    base_turnout: float = Field(ge=0.0, le=1.0)
    enthusiasm: float = Field(default=0.5, ge=0.0, le=1.0)

    social_position: float = Field(ge=-5.0, le=5.0)
    economic_position: float = Field(ge=-5.0, le=5.0)


class IssueBreakdown(BaseModel):
    issue: PoliticalIssue
    candidate_position: float
    voter_position: float
    difference: float
    weight: float
    contribution: float


class IssueAlignmentResult(BaseModel):
    overall_alignment: float = Field(ge=0.0, le=100.0)
    issue_breakdown: List[IssueBreakdown]


class SpecialEffect(BaseModel):
    """A targeted campaign effect on a group's appeal, in percentage points."""
    source: str
    description: str = ""
    modifier: float = Field(ge=-20.0, le=20.0)


class DemographicAppeal(BaseModel):
    demographic_key: str
    candidate_id: str
    issue_alignment: float = Field(ge=0.0, le=100.0)
    awareness: float = Field(ge=0.0, le=100.0)
    enthusiasm: float
    special_effects: List[SpecialEffect] = []
    special_effect_total: float = 0.0
    raw_appeal: float
    final_appeal: float = Field(ge=0.0, le=100.0)


class DemographicPollResult(BaseModel):
    """Candidate standing within one demographic group of a state."""
    demographic_key: str
    label: str
    population_share: float = Field(ge=0.0, le=100.0)
    estimated_turnout: float = Field(ge=0.0, le=100.0)
    social_position: float
    social_label: PositionLabel
    economic_position: float
    economic_label: PositionLabel
    candidate_appeal: float = Field(ge=0.0, le=100.0)
    vote_share: float
    special_effects: float = 0.0


class StatePollingSummary(BaseModel):
    state_code: str
    candidate_id: str
    total_projected_vote_share: float
    average_social_position: float
    average_social_label: PositionLabel
    average_economic_position: float
    average_economic_label: PositionLabel
    demographics: List[DemographicPollResult]
    previous_vote_share: Optional[float] = None
    vote_share_change: Optional[float] = None
    poll_timestamp: datetime
    sample_size: int = Field(gt=0)
    margin_of_error: float


class StateDemographics(BaseModel):
    """Population composition of a state across the demographic keys."""
    state_code: str
    state_name: str
    composition: Dict[str, float]           # Key -> population percent
    turnout_modifier: float = Field(default=1.0, ge=0.5, le=1.5)
