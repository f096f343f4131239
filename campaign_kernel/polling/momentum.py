"""
Momentum Tracking — candidate momentum and swing-state analysis from
polling trends.

Weekly and monthly changes are measured in game time: one game week is one
real hour, one game month is 720 game hours.

Behavioral Contract:
- Direction thresholds: SURGING >= 2, RISING >= 0.5, STABLE > -0.5,
  DECLINING > -2, otherwise COLLAPSING
- Volatility is the population standard deviation of support
- Win probabilities for the leader stay within [0.5, 0.99]
- Swing-state margins are signed: positive favours the Democrat
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from campaign_kernel.clock.seeded import clamp, round_half_up
from campaign_kernel.clock.timescale import (
    GAME_TIME,
    TIME_SCALE,
    as_utc,
    game_to_real_hours,
    real_hours_between,
)
from campaign_kernel.demographics.states import STATE_NAMES, get_electoral_votes
from campaign_kernel.models.election import StateMomentum
from campaign_kernel.models.momentum import (
    CampaignMomentumSummary,
    CandidateMomentum,
    MarginTrend,
    MomentumDirection,
    OverallTrend,
    SwingStateAnalysis,
    SwingStateCategory,
    VolatilityTrend,
)
from campaign_kernel.models.polling import PollingTrend, TrendPoint

logger = logging.getLogger(__name__)

SURGING_THRESHOLD = 2.0
RISING_THRESHOLD = 0.5
DECLINING_THRESHOLD = -0.5
COLLAPSING_THRESHOLD = -2.0

TOSS_UP_MARGIN = 3.0
LEAN_MARGIN = 7.0
LIKELY_MARGIN = 15.0

MARGIN_SHIFT_THRESHOLD = 0.5
EV_LEAD_THRESHOLD = 50
EV_TO_WIN = 270

WEEK = timedelta(hours=game_to_real_hours(GAME_TIME["WEEK"]))
MONTH = timedelta(hours=game_to_real_hours(GAME_TIME["MONTH"]))


def calculate_momentum_direction(weekly_change: float) -> MomentumDirection:
    if weekly_change >= SURGING_THRESHOLD:
        return MomentumDirection.SURGING
    if weekly_change >= RISING_THRESHOLD:
        return MomentumDirection.RISING
    if weekly_change > DECLINING_THRESHOLD:
        return MomentumDirection.STABLE
    if weekly_change > COLLAPSING_THRESHOLD:
        return MomentumDirection.DECLINING
    return MomentumDirection.COLLAPSING


def calculate_swing_state_category(margin: float) -> SwingStateCategory:
    """Classify a signed margin (positive favours the Democrat)."""
    lead = abs(margin)
    if lead < TOSS_UP_MARGIN:
        return SwingStateCategory.TOSS_UP
    democratic = margin > 0
    if lead < LEAN_MARGIN:
        return (SwingStateCategory.LEAN_DEMOCRATIC if democratic
                else SwingStateCategory.LEAN_REPUBLICAN)
    if lead < LIKELY_MARGIN:
        return (SwingStateCategory.LIKELY_DEMOCRATIC if democratic
                else SwingStateCategory.LIKELY_REPUBLICAN)
    return (SwingStateCategory.SAFE_DEMOCRATIC if democratic
            else SwingStateCategory.SAFE_REPUBLICAN)


def calculate_volatility(values: List[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def calculate_win_probability(lead: float, volatility: float) -> float:
    """Leader's win probability from a lead in points and support volatility."""
    margin_factor = min(1.0, abs(lead) / 10)
    volatility_penalty = min(0.3, volatility / 10)
    return clamp(0.5 + margin_factor * 0.4 - volatility_penalty, 0.5, 0.99)


def _points_for(trend: PollingTrend, candidate_id: str) -> List[TrendPoint]:
    points = [p for p in trend.points if candidate_id in p.support]
    return sorted(points, key=lambda p: p.timestamp)


def _latest_at_or_before(points: List[TrendPoint], cutoff: datetime) -> Optional[TrendPoint]:
    eligible = [p for p in points if as_utc(p.timestamp) <= cutoff]
    return eligible[-1] if eligible else None


def calculate_candidate_momentum(
    trend: PollingTrend, candidate_id: str, now: datetime
) -> CandidateMomentum:
    points = _points_for(trend, candidate_id)
    if not points:
        return CandidateMomentum(candidate_id=candidate_id)

    now = as_utc(now)
    series = [p.support[candidate_id] for p in points]
    current = series[-1]

    week_old = _latest_at_or_before(points, now - WEEK)
    weekly_change = current - week_old.support[candidate_id] if week_old else 0.0
    month_old = _latest_at_or_before(points, now - MONTH)
    monthly_change = current - month_old.support[candidate_id] if month_old else 0.0

    volatility = calculate_volatility(series)
    recent, older = series[-5:], series[-10:-5]
    volatility_trend = VolatilityTrend.STABLE
    if older:
        recent_volatility = calculate_volatility(recent)
        older_volatility = calculate_volatility(older)
        if recent_volatility > older_volatility * 1.2:
            volatility_trend = VolatilityTrend.INCREASING
        elif recent_volatility < older_volatility * 0.8:
            volatility_trend = VolatilityTrend.DECREASING

    peak = max(series)
    peak_point = points[series.index(peak)]
    game_hours_since_peak = real_hours_between(peak_point.timestamp, now) * TIME_SCALE
    days_from_peak = max(0, int(game_hours_since_peak // GAME_TIME["DAY"]))

    data_quality = min(1.0, len(points) / 10)
    volatility_factor = max(0.0, 1 - volatility / 10)

    return CandidateMomentum(
        candidate_id=candidate_id,
        current_support=round_half_up(current, 2),
        weekly_change=round_half_up(weekly_change, 2),
        monthly_change=round_half_up(monthly_change, 2),
        direction=calculate_momentum_direction(weekly_change),
        volatility=round_half_up(volatility, 2),
        volatility_trend=volatility_trend,
        peak_support=round_half_up(peak, 2),
        low_support=round_half_up(min(series), 2),
        days_from_peak=days_from_peak,
        projected_support=round_half_up(clamp(current + weekly_change, 0.0, 100.0), 2),
        confidence=round_half_up(data_quality * volatility_factor, 2),
    )


def _margin_at(point: TrendPoint, dem_id: str, rep_id: str) -> float:
    return point.support.get(dem_id, 0.0) - point.support.get(rep_id, 0.0)


def analyze_swing_state(
    state_code: str,
    trend: PollingTrend,
    dem_candidate_id: str,
    rep_candidate_id: str,
    now: datetime,
) -> SwingStateAnalysis:
    code = state_code.upper()
    electoral_votes = get_electoral_votes(code)
    state_name = STATE_NAMES[code]

    points = [
        p for p in sorted(trend.points, key=lambda p: p.timestamp)
        if dem_candidate_id in p.support and rep_candidate_id in p.support
    ]
    if not points:
        return SwingStateAnalysis(
            state_code=code,
            state_name=state_name,
            electoral_votes=electoral_votes,
            electoral_weight=electoral_votes * 0.5,
        )

    now = as_utc(now)
    margin = _margin_at(points[-1], dem_candidate_id, rep_candidate_id)
    leader = ""
    if margin > 0:
        leader = dem_candidate_id
    elif margin < 0:
        leader = rep_candidate_id
    trailer = rep_candidate_id if leader == dem_candidate_id else dem_candidate_id

    competitiveness = clamp(1 - abs(margin) / 20, 0.0, 1.0)

    margin_trend = MarginTrend.STABLE
    recent_shift = 0.0
    week_old = _latest_at_or_before(points, now - WEEK)
    if week_old is not None:
        recent_shift = abs(margin) - abs(_margin_at(week_old, dem_candidate_id, rep_candidate_id))
        if abs(recent_shift) > MARGIN_SHIFT_THRESHOLD:
            margin_trend = MarginTrend.WIDENING if recent_shift > 0 else MarginTrend.NARROWING

    volatility = max(
        calculate_volatility([p.support[cid] for p in points])
        for cid in (dem_candidate_id, rep_candidate_id)
    )

    if leader:
        leader_probability = calculate_win_probability(margin, volatility)
        win_probability = {
            leader: round_half_up(leader_probability, 3),
            trailer: round_half_up(1 - leader_probability, 3),
        }
    else:
        win_probability = {dem_candidate_id: 0.5, rep_candidate_id: 0.5}

    return SwingStateAnalysis(
        state_code=code,
        state_name=state_name,
        electoral_votes=electoral_votes,
        leading_candidate=leader,
        margin=round_half_up(margin, 2),
        category=calculate_swing_state_category(margin),
        competitiveness_score=round_half_up(competitiveness, 3),
        electoral_weight=round_half_up(electoral_votes * competitiveness, 2),
        margin_trend=margin_trend,
        recent_shift=round_half_up(recent_shift, 2),
        volatility=round_half_up(volatility, 2),
        win_probability=win_probability,
    )


def build_state_momentum(
    state_code: str,
    trend: PollingTrend,
    candidate_a_id: str,
    candidate_b_id: str,
    now: datetime,
) -> StateMomentum:
    """Weekly changes for both candidates, ready for election resolution."""
    a = calculate_candidate_momentum(trend, candidate_a_id, now)
    b = calculate_candidate_momentum(trend, candidate_b_id, now)
    return StateMomentum(
        state=state_code.upper(),
        a_weekly_change=a.weekly_change,
        b_weekly_change=b.weekly_change,
    )


def calculate_campaign_momentum_summary(
    campaign_id: str,
    national_trend: PollingTrend,
    state_trends: Dict[str, PollingTrend],
    dem_candidate_id: str,
    rep_candidate_id: str,
    now: datetime,
    incumbent_id: Optional[str] = None,
) -> CampaignMomentumSummary:
    """
    National momentum, ranked swing states and an EV projection. Each state
    goes to its current leader; exact ties award nobody.
    """
    now = as_utc(now)
    candidate_ids = [dem_candidate_id, rep_candidate_id]
    incumbent_id = incumbent_id or dem_candidate_id

    national = [
        calculate_candidate_momentum(national_trend, cid, now) for cid in candidate_ids
    ]

    analyses = [
        analyze_swing_state(code, trend, dem_candidate_id, rep_candidate_id, now)
        for code, trend in state_trends.items()
    ]
    analyses.sort(key=lambda a: a.electoral_weight, reverse=True)
    ranked = [
        analysis.model_copy(update={"priority_rank": rank})
        for rank, analysis in enumerate(analyses, start=1)
    ]

    projection = {cid: 0 for cid in candidate_ids}
    for analysis in ranked:
        if analysis.leading_candidate:
            projection[analysis.leading_candidate] += analysis.electoral_votes

    overall = OverallTrend.TOSS_UP
    leader = max(national, key=lambda m: m.current_support)
    if abs(projection[dem_candidate_id] - projection[rep_candidate_id]) > EV_LEAD_THRESHOLD:
        overall = (OverallTrend.FAVORING_INCUMBENT if leader.candidate_id == incumbent_id
                   else OverallTrend.FAVORING_CHALLENGER)

    summary = CampaignMomentumSummary(
        campaign_id=campaign_id,
        timestamp=now,
        national_momentum=national,
        swing_states=ranked,
        toss_up_states=[a for a in ranked if a.category == SwingStateCategory.TOSS_UP],
        electoral_vote_projection=projection,
        paths_to_victory=sum(1 for votes in projection.values() if votes >= EV_TO_WIN),
        overall_trend=overall,
        confidence=round_half_up(sum(m.confidence for m in national) / len(national), 2),
    )
    logger.debug(
        "Momentum summary for %s: %d states analysed, trend %s",
        campaign_id, len(ranked), overall.value,
    )
    return summary
