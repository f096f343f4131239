"""
Ad Spend Cycle — cost, reach and diminishing returns for advertising buys.

Ad cycles run every 8.5 real minutes. Each buy converts a budget into
impressions at a market-adjusted CPM; persuasion effectiveness decays with
cumulative prior spend on the same media type.

Behavioral Contract:
- Effectiveness equals the media base at zero prior spend and never falls
  below 10% of it
- A single buy moves polling by at most 10 points
- Budget allocation always sums to the total budget
- Cadence checks are pure functions of (last, now)
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from campaign_kernel.clock.seeded import clamp, round_half_up, round_int
from campaign_kernel.clock.timescale import as_utc, game_week_of, to_epoch_ms
from campaign_kernel.models.ads import AdBuy, AdCampaignSummary, AdMediaType
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig

logger = logging.getLogger(__name__)

BASE_CPM: Dict[AdMediaType, float] = {
    AdMediaType.TELEVISION: 35,
    AdMediaType.CABLE: 18,
    AdMediaType.RADIO: 8,
    AdMediaType.DIGITAL: 12,
    AdMediaType.PRINT: 15,
    AdMediaType.OUTDOOR: 10,
    AdMediaType.DIRECT_MAIL: 500,
}

BASE_EFFECTIVENESS: Dict[AdMediaType, float] = {
    AdMediaType.TELEVISION: 0.75,
    AdMediaType.CABLE: 0.65,
    AdMediaType.RADIO: 0.45,
    AdMediaType.DIGITAL: 0.60,
    AdMediaType.PRINT: 0.40,
    AdMediaType.OUTDOOR: 0.35,
    AdMediaType.DIRECT_MAIL: 0.70,
}

DIMINISHING_SCALE_FACTOR = 0.15
MIN_EFFECTIVENESS_FACTOR = 0.1
SATURATION_THRESHOLD = 1_000_000

MAX_POLLING_IMPACT = 10.0

# Cost per polling point treated as par (efficiency 1.0 at or below it)
PAR_COST_PER_POINT = 50_000


def calculate_cpm(
    media_type: AdMediaType,
    market_size: float,
    competitiveness: float = 0.5,
) -> float:
    """Cost per thousand impressions, scaled up for large or contested markets."""
    market_multiplier = 0.5
    if market_size > 0:
        market_multiplier = 1 + math.log10(market_size / 1_000_000) * 0.1
    competition_multiplier = 1 + competitiveness * 0.3
    return BASE_CPM[media_type] * max(0.5, market_multiplier) * competition_multiplier


def calculate_impressions(budget: float, cpm: float) -> float:
    if cpm <= 0:
        return 0.0
    return budget / cpm * 1000


def calculate_effectiveness(media_type: AdMediaType, prior_spend: float) -> float:
    """
    Persuasion effectiveness after prior spend on the same media type.

    base / (1 + spend / 1M) ^ 0.15, floored at 10% of base.
    """
    base = BASE_EFFECTIVENESS[media_type]
    if prior_spend <= 0:
        return base

    spend_factor = 1 + prior_spend / SATURATION_THRESHOLD
    diminishing = 1 / spend_factor ** DIMINISHING_SCALE_FACTOR
    return clamp(base * max(MIN_EFFECTIVENESS_FACTOR, diminishing), 0.0, 1.0)


def calculate_polling_impact(
    impressions: float, market_size: float, effectiveness: float
) -> float:
    if market_size <= 0:
        return 0.0
    penetration = impressions / market_size
    return min(MAX_POLLING_IMPACT, penetration * effectiveness * 100)


def execute_ad_buy(
    campaign_id: str,
    media_type: AdMediaType,
    geography: str,
    budget: float,
    market_size: int,
    now: datetime,
    prior_spend: float = 0.0,
    competitor_spend: float = 0.0,
) -> AdBuy:
    """Price and score one ad buy."""
    competitiveness = min(1.0, competitor_spend / max(1.0, budget))
    cpm = calculate_cpm(media_type, market_size, competitiveness)
    impressions = calculate_impressions(budget, cpm)
    effectiveness = calculate_effectiveness(media_type, prior_spend)
    impact = calculate_polling_impact(impressions, market_size, effectiveness)

    now = as_utc(now)
    buy = AdBuy(
        ad_buy_id=f"ad-{to_epoch_ms(now)}-{campaign_id}",
        campaign_id=campaign_id,
        timestamp=now,
        game_week=game_week_of(now),
        media_type=media_type,
        geography=geography,
        budget=budget,
        impressions=round_int(impressions),
        cpm=round_half_up(cpm, 2),
        effectiveness=round_half_up(effectiveness, 3),
        polling_impact=round_half_up(impact, 2),
        market_size=market_size,
        competitor_spend=competitor_spend,
    )
    logger.debug(
        "Ad buy %s: %s in %s, $%.0f -> %d impressions, impact %.2f",
        buy.ad_buy_id, media_type.value, geography, budget,
        buy.impressions, buy.polling_impact,
    )
    return buy


def aggregate_ad_performance(
    buys: List[AdBuy], campaign_id: str
) -> AdCampaignSummary:
    """Totals, per-media breakdown and ROI for one campaign's buys."""
    campaign_buys = [buy for buy in buys if buy.campaign_id == campaign_id]
    if not campaign_buys:
        return AdCampaignSummary(campaign_id=campaign_id)

    total_spent = sum(buy.budget for buy in campaign_buys)
    total_impressions = sum(buy.impressions for buy in campaign_buys)
    polling_gain = sum(buy.polling_impact for buy in campaign_buys)

    average_cpm = (
        total_spent / total_impressions * 1000
        if total_spent > 0 and total_impressions > 0 else 0.0
    )
    average_effectiveness = (
        sum(buy.effectiveness for buy in campaign_buys) / len(campaign_buys)
    )

    spend_by_media: Dict[AdMediaType, float] = {}
    impressions_by_media: Dict[AdMediaType, int] = {}
    for buy in campaign_buys:
        spend_by_media[buy.media_type] = spend_by_media.get(buy.media_type, 0.0) + buy.budget
        impressions_by_media[buy.media_type] = (
            impressions_by_media.get(buy.media_type, 0) + buy.impressions
        )

    cost_per_point = total_spent / polling_gain if polling_gain > 0 else 0.0
    efficiency = clamp(PAR_COST_PER_POINT / max(1.0, cost_per_point), 0.0, 1.0)

    return AdCampaignSummary(
        campaign_id=campaign_id,
        total_spent=round_half_up(total_spent, 2),
        total_impressions=total_impressions,
        average_cpm=round_half_up(average_cpm, 2),
        average_effectiveness=round_half_up(average_effectiveness, 3),
        estimated_polling_gain=round_half_up(polling_gain, 2),
        spend_by_media=spend_by_media,
        impressions_by_media=impressions_by_media,
        cost_per_point=round_half_up(cost_per_point, 2),
        efficiency=round_half_up(efficiency, 3),
    )


def optimize_budget_allocation(
    total_budget: float,
    market_size: float,
    prior_spend_by_media: Optional[Dict[AdMediaType, float]] = None,
) -> Dict[AdMediaType, float]:
    """
    Split a budget across media types in proportion to effectiveness per
    dollar, given what has already been spent on each. Keys are ordered
    from most to least efficient.
    """
    prior_spend_by_media = prior_spend_by_media or {}
    scores = []
    for media_type in AdMediaType:
        effectiveness = calculate_effectiveness(
            media_type, prior_spend_by_media.get(media_type, 0.0)
        )
        impressions_per_dollar = 1000 / calculate_cpm(media_type, market_size, 0.5)
        scores.append((media_type, effectiveness * impressions_per_dollar))

    scores.sort(key=lambda item: item[1], reverse=True)
    total_score = sum(score for _, score in scores)

    return {
        media_type: total_budget * score / total_score if total_score > 0 else 0.0
        for media_type, score in scores
    }


def get_next_ad_cycle_time(
    last_cycle: datetime, config: SimulationConfig = DEFAULT_CONFIG
) -> datetime:
    return as_utc(last_cycle) + timedelta(minutes=config.ad_cycle_interval_minutes)


def is_ad_cycle_due(
    last_cycle: datetime, now: datetime, config: SimulationConfig = DEFAULT_CONFIG
) -> bool:
    return as_utc(now) >= get_next_ad_cycle_time(last_cycle, config)
