"""Player actions, their results, and the per-campaign action queue."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ActionCategory(str, Enum):
    ADVERTISING = "ADVERTISING"
    GROUND_GAME = "GROUND_GAME"
    FUNDRAISING = "FUNDRAISING"
    MEDIA = "MEDIA"
    LOBBYING = "LOBBYING"
    OPPOSITION = "OPPOSITION"


class ActionType(str, Enum):
    # Advertising
    TV_AD_NATIONAL = "TV_AD_NATIONAL"
    TV_AD_STATE = "TV_AD_STATE"
    RADIO_AD = "RADIO_AD"
    DIGITAL_AD = "DIGITAL_AD"
    BILLBOARD = "BILLBOARD"
    MAILER = "MAILER"

    # Ground game
    RALLY = "RALLY"
    TOWN_HALL = "TOWN_HALL"
    CANVASSING = "CANVASSING"
    PHONE_BANK = "PHONE_BANK"
    VOTER_REGISTRATION = "VOTER_REGISTRATION"
    GOTV_OPERATION = "GOTV_OPERATION"

    # Fundraising
    FUNDRAISING_EVENT = "FUNDRAISING_EVENT"
    ONLINE_CAMPAIGN = "ONLINE_CAMPAIGN"
    DONOR_CALL = "DONOR_CALL"
    PAC_COORDINATION = "PAC_COORDINATION"
    SMALL_DOLLAR_PUSH = "SMALL_DOLLAR_PUSH"

    # Media
    PRESS_RELEASE = "PRESS_RELEASE"
    PRESS_CONFERENCE = "PRESS_CONFERENCE"
    INTERVIEW = "INTERVIEW"
    OP_ED = "OP_ED"
    SOCIAL_MEDIA_CAMPAIGN = "SOCIAL_MEDIA_CAMPAIGN"
    ENDORSEMENT_ANNOUNCEMENT = "ENDORSEMENT_ANNOUNCEMENT"

    # Lobbying
    LEGISLATIVE_MEETING = "LEGISLATIVE_MEETING"
    COALITION_BUILDING = "COALITION_BUILDING"
    POLICY_SPEECH = "POLICY_SPEECH"
    INDUSTRY_OUTREACH = "INDUSTRY_OUTREACH"

    # Opposition
    OPPOSITION_RESEARCH = "OPPOSITION_RESEARCH"
    ATTACK_AD = "ATTACK_AD"
    RAPID_RESPONSE = "RAPID_RESPONSE"
    FACT_CHECK_CAMPAIGN = "FACT_CHECK_CAMPAIGN"


class ActionIntensity(str, Enum):
    MINIMAL = "MINIMAL"     # 0.5x cost, 0.4x effect
    LOW = "LOW"             # 0.75x cost, 0.6x effect
    STANDARD = "STANDARD"   # 1x cost, 1x effect
    HIGH = "HIGH"           # 1.5x cost, 1.3x effect
    MAXIMUM = "MAXIMUM"     # 2x cost, 1.5x effect


class ActionResultStatus(str, Enum):
    PENDING = "PENDING"           # Scheduled but not started
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    BACKFIRED = "BACKFIRED"       # Completed with an adverse outcome


class ActionCost(BaseModel):
    """Resources consumed by an action after intensity scaling."""
    money: float = Field(ge=0)
    action_points: int = Field(ge=0)
    time_hours: float = Field(ge=0)     # Real hours to complete


class ActionCatalogEntry(BaseModel):
    """Human-facing description of one action type."""
    action_type: ActionType
    display_name: str
    category: ActionCategory
    category_name: str
    base_cost: ActionCost
    cooldown_hours: float = Field(ge=0)


class ActionResult(BaseModel):
    """
    Outcome of executing one action.

    Backfires are data here, not errors: a backfired action still yields a
    complete result with did_backfire set and negative deltas.
    """
    status: ActionResultStatus
    polling_shift: float = 0.0
    reputation_change: float = 0.0
    funds_raised: float = 0.0
    new_donors: int = 0

    demographic_effects: Optional[Dict[str, float]] = None
    state_effects: Optional[Dict[str, float]] = None

    endorsement_triggered: bool = False
    scandal_triggered: bool = False
    media_boost: float = 0.0

    did_backfire: bool = False
    backfire_reason: Optional[str] = None

    calculation_details: str
    timestamp: datetime


class PlayerAction(BaseModel):
    """A single queued or executing campaign action."""

    id: str
    campaign_id: str
    player_id: str

    action_type: ActionType
    intensity: ActionIntensity = ActionIntensity.STANDARD
    status: ActionResultStatus

    target_states: List[str] = []
    target_demographics: List[str] = []
    target_issues: List[str] = []

    initiated_at: datetime
    scheduled_for: Optional[datetime] = None
    completes_at: datetime
    completed_at: Optional[datetime] = None

    final_cost: ActionCost
    result: Optional[ActionResult] = None

    seed: str                       # Drives every random draw of the outcome
    schema_version: int = 1


class ActionQueue(BaseModel):
    """Per-campaign resource ledger for actions."""

    campaign_id: str

    action_points_remaining: int = Field(ge=0)
    action_points_max: int = Field(ge=1)
    action_points_reset_at: datetime

    pending: List[PlayerAction] = []
    in_progress: List[PlayerAction] = []

    cooldowns: Dict[ActionType, datetime] = {}    # Expiry per action type
    weekly_usage: Dict[ActionType, int] = {}
    week_started_at: datetime


class EligibilityResult(BaseModel):
    """Validation outcome; errors block the action, warnings do not."""
    valid: bool
    errors: List[str] = []
    warnings: List[str] = []


class QueuedImpactEstimate(BaseModel):
    """Expected (pre-roll) effect of a set of queued actions."""
    estimated_polling_shift: float
    estimated_funds_raised: float
    total_cost: float
    total_action_points: int
