"""Advertising buys and campaign-level ad performance."""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class AdMediaType(str, Enum):
    TELEVISION = "TELEVISION"       # Broadcast, broad reach
    CABLE = "CABLE"
    RADIO = "RADIO"
    DIGITAL = "DIGITAL"
    PRINT = "PRINT"
    OUTDOOR = "OUTDOOR"             # Billboards
    DIRECT_MAIL = "DIRECT_MAIL"


class AdBuy(BaseModel):
    """One purchase of advertising in a single ad cycle."""

    ad_buy_id: str
    campaign_id: str
    timestamp: datetime
    game_week: int

    media_type: AdMediaType
    geography: str                  # "NATIONAL" or a state code
    budget: float = Field(ge=0)

    impressions: int = Field(ge=0)
    cpm: float = Field(ge=0)
    effectiveness: float = Field(ge=0, le=1)
    polling_impact: float = Field(ge=0, le=10)

    market_size: int = Field(ge=0)
    competitor_spend: float = Field(default=0.0, ge=0)


class AdCampaignSummary(BaseModel):
    campaign_id: str
    total_spent: float = 0.0
    total_impressions: int = 0
    average_cpm: float = 0.0
    average_effectiveness: float = 0.0
    estimated_polling_gain: float = 0.0

    spend_by_media: Dict[AdMediaType, float] = {}
    impressions_by_media: Dict[AdMediaType, int] = {}

    cost_per_point: float = 0.0
    efficiency: float = Field(default=0.0, ge=0, le=1)
