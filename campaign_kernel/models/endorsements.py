"""Endorsements and their stacked polling effect."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Endorsement(BaseModel):
    endorser_id: str
    endorser_name: str
    base_influence: float = Field(ge=0)     # Polling points at full strength
    endorser_polling: float = Field(ge=0, le=100)
    endorsed_at: datetime
    is_reciprocal: bool = False


class EndorsementContribution(BaseModel):
    endorser_id: str
    endorser_name: str
    base_influence: float
    diminishing_multiplier: float
    effective_boost: float


class EndorsementImpact(BaseModel):
    total_boost: float
    breakdown: List[EndorsementContribution] = []
    reciprocal_bonus_applied: bool = False
    reciprocal_bonus_amount: float = 0.0
    credibility_transfer: float = 0.0


class EndorsementValidation(BaseModel):
    valid: bool
    errors: List[str] = []
    cooldown_hours_remaining: Optional[float] = None
