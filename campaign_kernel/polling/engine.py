"""
Polling Engine — general-purpose poll snapshots and trend analysis.

The coarse sibling of the demographic polling integration: tracking, exit
and ad-hoc polls built from each candidate's current standing, with a
margin of error per poll type, seeded demographic jitter, and dampening of
swings for players who have been offline.

Behavioral Contract:
- Offline dampening is applied once, when a delta is applied, never
  retroactively to earlier polls
- Support and demographic segments stay within [0, 100]
- Demographic jitter is a pure function of the poll instant and candidate order
- Poll cadence (25 real minutes) is checked by the caller, never timed here
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from campaign_kernel.clock.seeded import clamp, round_half_up
from campaign_kernel.clock.timescale import as_utc, game_week_of, to_epoch_ms
from campaign_kernel.demographics.states import get_electoral_votes
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig
from campaign_kernel.models.polling import (
    CandidatePollResult,
    DemographicSegment,
    PollCandidate,
    PollingTrend,
    PollSnapshot,
    PollType,
    StateWeight,
    TrendDirection,
    TrendPoint,
)

logger = logging.getLogger(__name__)

SAMPLE_SIZES: Dict[PollType, int] = {
    PollType.NATIONAL: 1200,
    PollType.STATE: 650,
    PollType.DISTRICT: 400,
    PollType.TRACKING: 800,
    PollType.EXIT: 1000,
}

BASE_MARGIN_OF_ERROR: Dict[PollType, float] = {
    PollType.NATIONAL: 2.8,
    PollType.STATE: 3.8,
    PollType.DISTRICT: 4.9,
    PollType.TRACKING: 3.5,
    PollType.EXIT: 3.1,
}

# (hours offline below which it applies, multiplier)
OFFLINE_DAMPENING = [
    (1, 1.0),
    (4, 0.75),
    (12, 0.5),
]
HEAVY_DAMPENING = 0.25

# Segment -> (jitter offset, variance in points)
SEGMENT_VARIANCE: Dict[DemographicSegment, tuple] = {
    DemographicSegment.AGE_18_29: (1, 10),
    DemographicSegment.AGE_30_44: (2, 10),
    DemographicSegment.AGE_45_64: (3, 10),
    DemographicSegment.AGE_65_PLUS: (4, 10),
    DemographicSegment.MALE: (5, 5),
    DemographicSegment.FEMALE: (6, 5),
    DemographicSegment.COLLEGE_GRAD: (7, 8),
    DemographicSegment.NO_COLLEGE: (8, 8),
    DemographicSegment.URBAN: (9, 6),
    DemographicSegment.SUBURBAN: (10, 6),
    DemographicSegment.RURAL: (11, 6),
    DemographicSegment.WHITE: (12, 7),
    DemographicSegment.BLACK: (13, 7),
    DemographicSegment.HISPANIC: (14, 7),
    DemographicSegment.ASIAN: (15, 7),
}

TREND_THRESHOLD = 0.5


def calculate_margin_of_error(
    poll_type: PollType,
    sample_size: Optional[int] = None,
    methodology_factor: float = 1.0,
) -> float:
    """
    Margin of error in points. A non-canonical sample size is recomputed
    as 1/sqrt(n) x 100; the canonical size uses the poll type's base MOE.
    """
    if sample_size and sample_size != SAMPLE_SIZES[poll_type]:
        return 1 / math.sqrt(sample_size) * 100 * methodology_factor
    return BASE_MARGIN_OF_ERROR[poll_type] * methodology_factor


def calculate_volatility_dampening(hours_offline: float) -> float:
    for threshold, multiplier in OFFLINE_DAMPENING:
        if hours_offline < threshold:
            return multiplier
    return HEAVY_DAMPENING


def apply_volatility_dampening(delta: float, hours_offline: float) -> float:
    return delta * calculate_volatility_dampening(hours_offline)


def _jitter(seed: int, offset: int, variance: float) -> float:
    x = math.sin(seed + offset) * 10000
    fraction = x - math.floor(x)
    return -variance + fraction * 2 * variance


def generate_demographic_breakdown(
    overall_support: float, seed: int
) -> Dict[DemographicSegment, float]:
    """Per-segment support jittered around the overall figure."""
    return {
        segment: round_half_up(
            clamp(overall_support + _jitter(seed, offset, variance), 0.0, 100.0), 1
        )
        for segment, (offset, variance) in SEGMENT_VARIANCE.items()
    }


def build_polling_trend(
    snapshots: List[PollSnapshot],
    candidate_id: str,
    geography: str,
    candidate_name: str = "",
) -> PollingTrend:
    """
    Time series for one candidate in one geography. Momentum is the mean
    change per poll; direction flips at +/-0.5.
    """
    relevant = sorted(
        (s for s in snapshots if s.geography == geography),
        key=lambda s: s.timestamp,
    )
    if not relevant:
        return PollingTrend(
            candidate_id=candidate_id, candidate_name=candidate_name, geography=geography
        )

    points = [
        TrendPoint(
            timestamp=s.timestamp,
            support={c.candidate_id: c.support for c in s.candidates},
        )
        for s in relevant
    ]
    series = [p.support.get(candidate_id, 0.0) for p in points]
    observed = [value for value in series if value > 0]

    momentum = 0.0
    if len(series) > 1:
        deltas = [curr - prev for prev, curr in zip(series, series[1:])]
        momentum = sum(deltas) / len(deltas)

    if momentum > TREND_THRESHOLD:
        direction = TrendDirection.RISING
    elif momentum < -TREND_THRESHOLD:
        direction = TrendDirection.FALLING
    else:
        direction = TrendDirection.STABLE

    return PollingTrend(
        candidate_id=candidate_id,
        candidate_name=candidate_name,
        geography=geography,
        points=points,
        trend_direction=direction,
        momentum=round_half_up(momentum, 2),
        peak_support=round_half_up(max(observed), 1) if observed else 0.0,
        low_support=round_half_up(min(observed), 1) if observed else 0.0,
    )


def calculate_state_weights(competitiveness_by_state: Dict[str, float]) -> List[StateWeight]:
    """Polling priority per state: electoral votes x competitiveness, highest first."""
    weights = []
    for state_code, competitiveness in competitiveness_by_state.items():
        votes = get_electoral_votes(state_code)
        weights.append(StateWeight(
            state_code=state_code.upper(),
            electoral_votes=votes,
            competitiveness=competitiveness,
            weight=votes * competitiveness,
        ))
    weights.sort(key=lambda w: w.weight, reverse=True)
    return weights


class PollingEngine:
    """Conducts coarse polls and tracks the polling cadence."""

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self.config = config

    @property
    def poll_interval(self) -> timedelta:
        return timedelta(minutes=self.config.poll_interval_minutes)

    def conduct_poll(
        self,
        poll_type: PollType,
        geography: str,
        candidates: List[PollCandidate],
        now: datetime,
        previous: Optional[PollSnapshot] = None,
        sample_size: Optional[int] = None,
        methodology_factor: float = 1.0,
    ) -> PollSnapshot:
        """
        Poll every candidate. Each candidate's move since the previous poll
        is dampened by how long that player has been offline.
        """
        now = as_utc(now)
        timestamp_ms = to_epoch_ms(now)
        sample_size = sample_size or SAMPLE_SIZES[poll_type]
        margin_of_error = calculate_margin_of_error(poll_type, sample_size, methodology_factor)

        prior = {}
        if previous is not None:
            prior = {c.candidate_id: c.support for c in previous.candidates}

        results = []
        for index, candidate in enumerate(candidates):
            previous_support = prior.get(candidate.id, candidate.base_support)
            delta = apply_volatility_dampening(
                candidate.base_support - previous_support, candidate.hours_offline
            )
            support = clamp(previous_support + delta, 0.0, 100.0)
            results.append(CandidatePollResult(
                candidate_id=candidate.id,
                candidate_name=candidate.name,
                support=round_half_up(support, 1),
                margin_of_error=round_half_up(margin_of_error, 1),
                trend_delta=round_half_up(delta, 1),
                demographics=generate_demographic_breakdown(support, timestamp_ms + index),
            ))

        total_support = sum(r.support for r in results)
        volatility = (
            sum(abs(r.trend_delta) for r in results) / len(results) / 100
            if results else 0.0
        )
        reliability = clamp(1 - margin_of_error / 10, 0.0, 1.0)

        snapshot = PollSnapshot(
            poll_id=f"poll-{timestamp_ms}-{geography}",
            timestamp=now,
            game_week=game_week_of(now),
            poll_type=poll_type,
            geography=geography,
            sample_size=sample_size,
            margin_of_error=round_half_up(margin_of_error, 1),
            candidates=results,
            undecided=round_half_up(max(0.0, 100 - total_support), 1),
            volatility=round_half_up(volatility, 3),
            reliability=round_half_up(reliability, 2),
        )
        logger.debug(
            "Poll %s (%s) conducted for %d candidates",
            snapshot.poll_id, poll_type.value, len(results),
        )
        return snapshot

    def get_next_poll_time(self, last_poll: datetime) -> datetime:
        return as_utc(last_poll) + self.poll_interval

    def is_poll_due(self, last_poll: datetime, now: datetime) -> bool:
        return as_utc(now) >= self.get_next_poll_time(last_poll)
