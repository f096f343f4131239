"""Campaign State — the snapshot owned by the Campaign Phase Machine."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CampaignPhase(str, Enum):
    ANNOUNCEMENT = "ANNOUNCEMENT"   # Exploration, organizing
    FUNDRAISING = "FUNDRAISING"     # Donor outreach, events
    ACTIVE = "ACTIVE"               # Advertising, debates, rallies
    RESOLUTION = "RESOLUTION"       # Final push to election day


class CampaignStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class CampaignOffice(str, Enum):
    PRESIDENT = "PRESIDENT"
    SENATE = "SENATE"
    HOUSE = "HOUSE"
    GOVERNOR = "GOVERNOR"


class PerformedAction(BaseModel):
    """Audit trail entry for an action taken during a phase."""
    action: str
    phase: CampaignPhase
    timestamp: datetime


class CampaignState(BaseModel):
    """
    Complete campaign lifecycle snapshot.

    Only the phase machine produces new values of this model; every
    transition returns a fresh copy and leaves the input untouched.
    """

    campaign_id: str
    company_id: str
    candidate_name: str
    office: CampaignOffice

    current_phase: CampaignPhase = CampaignPhase.ANNOUNCEMENT
    status: CampaignStatus = CampaignStatus.RUNNING

    started_at: datetime
    current_phase_started_at: datetime
    last_updated_at: datetime
    completed_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None     # Set while status is PAUSED

    target_state: Optional[str] = None      # Senate/House/Governor races
    election_week: int = Field(ge=0)         # Game week of the election

    real_hours_elapsed: float = Field(default=0.0, ge=0.0)
    phase_progress: float = Field(default=0.0, ge=0.0, le=1.0)

    actions_performed: List[PerformedAction] = []


class PhaseTransitionResult(BaseModel):
    """Outcome of attempting to advance a campaign to its next phase."""
    success: bool
    new_phase: Optional[CampaignPhase] = None
    status: Optional[CampaignStatus] = None
    message: str
    timestamp: datetime


class ActionValidationResult(BaseModel):
    """Whether a phase-gated action key is currently permitted."""
    allowed: bool
    reason: Optional[str] = None
    allowed_actions: Optional[List[str]] = None
