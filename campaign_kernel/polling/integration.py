"""
Demographic Polling Integration — state and national polls built from the
18 demographic groups.

Per-group support combines the candidate's baseline, party lean, issue
alignment, live action effects, personal bonuses and seeded noise. State
polls weight groups by the state's population composition and turnout;
national polls weight every group equally.

Behavioral Contract:
- Support per group is clamped to [0, 100]
- Noise is a pure function of the poll seed, group and candidate
- Unknown state codes raise UnknownStateError
- Converting to a coarse PollSnapshot never mutates the source poll
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from campaign_kernel.clock.seeded import clamp, round_half_up, simple_hash
from campaign_kernel.clock.timescale import as_utc, game_week_of, to_epoch_ms
from campaign_kernel.demographics.engine import (
    build_demographic_group,
    calculate_issue_alignment,
    parse_demographic_key,
)
from campaign_kernel.demographics.states import (
    get_electoral_votes,
    get_state_composition,
    get_swing_states,
)
from campaign_kernel.models.demographics import ALL_DEMOGRAPHIC_KEYS
from campaign_kernel.models.polling import (
    CandidateIssueProfile,
    CandidatePollResult,
    CandidateProjection,
    CrosstabCell,
    CrosstabResult,
    DemographicCandidateResult,
    DemographicPollBreakdown,
    DemographicPollSnapshot,
    DemographicSegment,
    ElectoralProjection,
    IssueDriver,
    Party,
    PollSnapshot,
    PollType,
)

logger = logging.getLogger(__name__)

__all__ = [
    "PARTY_DEMOGRAPHIC_LEAN",
    "calculate_competitiveness",
    "calculate_demographic_support",
    "generate_crosstab",
    "generate_national_poll",
    "generate_state_poll",
    "generate_swing_state_polls",
    "get_swing_states",
    "project_electoral_votes",
    "to_poll_snapshot",
]

# Positive leans Democratic, negative leans Republican
PARTY_DEMOGRAPHIC_LEAN: Dict[str, float] = {
    "WHITE_LOWER_CLASS_MALE": -15,
    "WHITE_LOWER_CLASS_FEMALE": -8,
    "WHITE_MIDDLE_CLASS_MALE": -12,
    "WHITE_MIDDLE_CLASS_FEMALE": -3,
    "WHITE_WEALTHY_MALE": -18,
    "WHITE_WEALTHY_FEMALE": -5,
    "BLACK_LOWER_CLASS_MALE": 65,
    "BLACK_LOWER_CLASS_FEMALE": 75,
    "BLACK_MIDDLE_CLASS_MALE": 55,
    "BLACK_MIDDLE_CLASS_FEMALE": 70,
    "BLACK_WEALTHY_MALE": 40,
    "BLACK_WEALTHY_FEMALE": 55,
    "HISPANIC_LOWER_CLASS_MALE": 15,
    "HISPANIC_LOWER_CLASS_FEMALE": 25,
    "HISPANIC_MIDDLE_CLASS_MALE": 10,
    "HISPANIC_MIDDLE_CLASS_FEMALE": 20,
    "HISPANIC_WEALTHY_MALE": 5,
    "HISPANIC_WEALTHY_FEMALE": 15,
}

PARTY_LEAN_FACTOR = 0.5
ALIGNMENT_SWING = 30                # +/- 15 points across the alignment range
NATIONAL_GROUP_WEIGHT = 1 / len(ALL_DEMOGRAPHIC_KEYS)
COMPETITIVENESS_SPAN = 20           # A 20+ point lead is not competitive

CROSSTAB_DIMENSIONS: Dict[str, List[str]] = {
    "race": ["WHITE", "BLACK", "HISPANIC"],
    "class": ["LOWER_CLASS", "MIDDLE_CLASS", "WEALTHY"],
    "gender": ["MALE", "FEMALE"],
}

SNAPSHOT_RELIABILITY = 0.85

ActionEffects = Dict[str, Dict[str, float]]   # Candidate ID -> group key -> bonus


def calculate_demographic_support(
    candidate: CandidateIssueProfile,
    group_key: str,
    action_effects: Optional[Dict[str, float]] = None,
    seed: str = "default",
) -> DemographicPollBreakdown:
    """Support for a candidate within one demographic group."""
    group = build_demographic_group(group_key)
    action_effects = action_effects or {}

    support = candidate.base_support

    lean = PARTY_DEMOGRAPHIC_LEAN.get(group_key, 0.0)
    if candidate.party == Party.DEMOCRAT:
        support += lean * PARTY_LEAN_FACTOR
    elif candidate.party == Party.REPUBLICAN:
        support -= lean * PARTY_LEAN_FACTOR

    alignment = calculate_issue_alignment(
        candidate.issue_positions, group.base_issue_profile
    )
    support += (alignment.overall_alignment / 100 - 0.5) * ALIGNMENT_SWING

    support += action_effects.get(group_key, 0.0)
    support += candidate.charisma_bonus + candidate.incumbent_bonus

    noise_hash = simple_hash(f"{seed}{group_key}{candidate.candidate_id}")
    support += (noise_hash % 400 - 200) / 100

    drivers = sorted(alignment.issue_breakdown, key=lambda b: b.weight, reverse=True)[:3]

    return DemographicPollBreakdown(
        group_key=group_key,
        group_label=group.label,
        support=round_half_up(clamp(support, 0.0, 100.0), 1),
        turnout_likelihood=round_half_up(group.base_turnout, 2),
        issue_drivers=[
            IssueDriver(
                issue=item.issue,
                alignment_score=item.contribution,
                importance=item.weight,
            )
            for item in drivers
        ],
    )


def _previous_support(
    previous: Optional[DemographicPollSnapshot], candidate_id: str, group_key: str
) -> Optional[float]:
    if previous is None:
        return None
    for candidate in previous.candidates:
        if candidate.candidate_id != candidate_id:
            continue
        for breakdown in candidate.demographic_breakdown:
            if breakdown.group_key == group_key:
                return breakdown.support
    return None


def _breakdowns(
    candidate: CandidateIssueProfile,
    seed: str,
    weights: Dict[str, float],
    action_effects: ActionEffects,
    previous: Optional[DemographicPollSnapshot],
) -> List[DemographicPollBreakdown]:
    effects = action_effects.get(candidate.candidate_id, {})
    breakdowns = []
    for key in ALL_DEMOGRAPHIC_KEYS:
        breakdown = calculate_demographic_support(candidate, key, effects, seed)
        effective_votes = breakdown.support * breakdown.turnout_likelihood * weights[key]
        prior = _previous_support(previous, candidate.candidate_id, key)
        trend_delta = round_half_up(breakdown.support - prior, 1) if prior is not None else 0.0
        breakdowns.append(breakdown.model_copy(update={
            "effective_votes": effective_votes,
            "trend_delta": trend_delta,
        }))
    return breakdowns


def calculate_competitiveness(results: List[DemographicCandidateResult]) -> float:
    """1 for a dead heat, 0 once the leader is 20+ points ahead."""
    supports = sorted((r.overall_support for r in results), reverse=True)
    margin = supports[0] - supports[1] if len(supports) >= 2 else 100.0
    return round_half_up(max(0.0, 1 - margin / COMPETITIVENESS_SPAN), 2)


def _turnout_projection(results: List[DemographicCandidateResult]) -> float:
    if not results or not results[0].demographic_breakdown:
        return 0.0
    breakdown = results[0].demographic_breakdown
    return round_half_up(
        sum(b.turnout_likelihood for b in breakdown) / len(breakdown), 2
    )


def generate_state_poll(
    state_code: str,
    candidates: List[CandidateIssueProfile],
    now: datetime,
    action_effects: Optional[ActionEffects] = None,
    previous: Optional[DemographicPollSnapshot] = None,
) -> DemographicPollSnapshot:
    """State poll weighted by the state's population composition."""
    demographics = get_state_composition(state_code)
    code = demographics.state_code
    now = as_utc(now)
    timestamp_ms = to_epoch_ms(now)
    seed = f"poll-{code}-{timestamp_ms}"
    weights = {key: demographics.composition[key] / 100 for key in ALL_DEMOGRAPHIC_KEYS}

    results = []
    for candidate in candidates:
        breakdowns = _breakdowns(
            candidate, seed, weights, action_effects or {}, previous
        )
        total_effective = sum(b.effective_votes for b in breakdowns)
        total_weight = sum(weights[b.group_key] * b.turnout_likelihood for b in breakdowns)
        overall = (
            total_effective / total_weight if total_weight > 0 else candidate.base_support
        )
        results.append(DemographicCandidateResult(
            candidate_id=candidate.candidate_id,
            candidate_name=candidate.candidate_name,
            overall_support=round_half_up(overall, 1),
            demographic_breakdown=breakdowns,
        ))

    logger.debug("State poll %s generated for %d candidates", code, len(results))
    return DemographicPollSnapshot(
        poll_id=f"demo-poll-{code}-{timestamp_ms}",
        timestamp=now,
        geography=code,
        candidates=results,
        state_demographics=demographics,
        turnout_projection=_turnout_projection(results),
        competitiveness=calculate_competitiveness(results),
    )


def generate_swing_state_polls(
    candidates: List[CandidateIssueProfile],
    now: datetime,
    action_effects: Optional[ActionEffects] = None,
    previous_polls: Optional[Dict[str, DemographicPollSnapshot]] = None,
) -> Dict[str, DemographicPollSnapshot]:
    """One state poll per swing state, keyed by state code."""
    previous_polls = previous_polls or {}
    return {
        code: generate_state_poll(
            code, candidates, now, action_effects, previous_polls.get(code)
        )
        for code in get_swing_states()
    }


def generate_national_poll(
    candidates: List[CandidateIssueProfile],
    now: datetime,
    action_effects: Optional[ActionEffects] = None,
    previous: Optional[DemographicPollSnapshot] = None,
) -> DemographicPollSnapshot:
    """National poll; every demographic group carries equal weight."""
    now = as_utc(now)
    timestamp_ms = to_epoch_ms(now)
    seed = f"poll-NATIONAL-{timestamp_ms}"
    weights = {key: NATIONAL_GROUP_WEIGHT for key in ALL_DEMOGRAPHIC_KEYS}

    results = []
    for candidate in candidates:
        breakdowns = _breakdowns(
            candidate, seed, weights, action_effects or {}, previous
        )
        overall = sum(b.support for b in breakdowns) / len(breakdowns)
        results.append(DemographicCandidateResult(
            candidate_id=candidate.candidate_id,
            candidate_name=candidate.candidate_name,
            overall_support=round_half_up(overall, 1),
            demographic_breakdown=breakdowns,
        ))

    logger.debug("National poll generated for %d candidates", len(results))
    return DemographicPollSnapshot(
        poll_id=f"demo-poll-NATIONAL-{timestamp_ms}",
        timestamp=now,
        geography="NATIONAL",
        candidates=results,
        turnout_projection=_turnout_projection(results),
        competitiveness=calculate_competitiveness(results),
    )


def _dimension_value(key: str, dimension: str) -> str:
    race, demo_class, gender = parse_demographic_key(key)
    return {"race": race, "class": demo_class, "gender": gender}[dimension].value


def generate_crosstab(
    snapshot: DemographicPollSnapshot, dimension1: str, dimension2: str
) -> CrosstabResult:
    """
    Average support per cell of a two-way race/class/gender table.

    Groups are matched on their parsed components, so "MALE" never matches
    a female group.
    """
    for dimension in (dimension1, dimension2):
        if dimension not in CROSSTAB_DIMENSIONS:
            raise ValueError(f"Unknown crosstab dimension: {dimension}")

    cells = []
    for value1 in CROSSTAB_DIMENSIONS[dimension1]:
        for value2 in CROSSTAB_DIMENSIONS[dimension2]:
            matching = [
                key for key in ALL_DEMOGRAPHIC_KEYS
                if _dimension_value(key, dimension1) == value1
                and _dimension_value(key, dimension2) == value2
            ]
            if not matching:
                continue

            support = {}
            for candidate in snapshot.candidates:
                values = [
                    b.support for b in candidate.demographic_breakdown
                    if b.group_key in matching
                ]
                support[candidate.candidate_id] = (
                    round_half_up(sum(values) / len(values), 1) if values else 0.0
                )

            cells.append(CrosstabCell(
                label1=value1,
                label2=value2,
                support=support,
                sample_share=round_half_up(len(matching) / len(ALL_DEMOGRAPHIC_KEYS), 2),
            ))

    return CrosstabResult(dimension1=dimension1, dimension2=dimension2, cells=cells)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _coarse_segments(breakdowns: List[DemographicPollBreakdown]) -> Dict[DemographicSegment, float]:
    by_component: Dict[str, List[float]] = {}
    for breakdown in breakdowns:
        race, demo_class, gender = parse_demographic_key(breakdown.group_key)
        for component in (race.value, demo_class.value, gender.value):
            by_component.setdefault(component, []).append(breakdown.support)

    # Class stands in for education on coarse polls
    college = by_component.get("MIDDLE_CLASS", []) + by_component.get("WEALTHY", [])
    return {
        DemographicSegment.WHITE: _mean(by_component.get("WHITE", [])),
        DemographicSegment.BLACK: _mean(by_component.get("BLACK", [])),
        DemographicSegment.HISPANIC: _mean(by_component.get("HISPANIC", [])),
        DemographicSegment.MALE: _mean(by_component.get("MALE", [])),
        DemographicSegment.FEMALE: _mean(by_component.get("FEMALE", [])),
        DemographicSegment.NO_COLLEGE: _mean(by_component.get("LOWER_CLASS", [])),
        DemographicSegment.COLLEGE_GRAD: _mean(college),
    }


def to_poll_snapshot(
    snapshot: DemographicPollSnapshot, poll_type: Optional[PollType] = None
) -> PollSnapshot:
    """Collapse a demographic poll into the coarse PollSnapshot shape."""
    if poll_type is None:
        poll_type = PollType.NATIONAL if snapshot.geography == "NATIONAL" else PollType.STATE
    national = poll_type == PollType.NATIONAL
    margin_of_error = 2.8 if national else 3.8

    candidates = []
    for candidate in snapshot.candidates:
        breakdown = candidate.demographic_breakdown
        candidates.append(CandidatePollResult(
            candidate_id=candidate.candidate_id,
            candidate_name=candidate.candidate_name,
            support=candidate.overall_support,
            margin_of_error=margin_of_error,
            trend_delta=round_half_up(_mean([b.trend_delta for b in breakdown]), 1),
            demographics=_coarse_segments(breakdown),
        ))

    total_support = sum(c.support for c in candidates)
    return PollSnapshot(
        poll_id=snapshot.poll_id,
        timestamp=snapshot.timestamp,
        game_week=game_week_of(snapshot.timestamp),
        poll_type=poll_type,
        geography=snapshot.geography,
        sample_size=1200 if national else 650,
        margin_of_error=margin_of_error,
        candidates=candidates,
        undecided=round_half_up(max(0.0, 100 - total_support), 1),
        volatility=abs(_mean([c.trend_delta for c in candidates])) / 10,
        reliability=SNAPSHOT_RELIABILITY,
    )


def project_electoral_votes(
    state_polls: Dict[str, DemographicPollSnapshot],
    candidate_ids: Optional[List[str]] = None,
) -> ElectoralProjection:
    """Award each polled state's electoral votes to its local leader."""
    by_candidate = {cid: CandidateProjection() for cid in candidate_ids or []}

    for state_code, poll in state_polls.items():
        if not poll.candidates:
            continue
        votes = get_electoral_votes(state_code)
        leader = max(poll.candidates, key=lambda c: c.overall_support)
        projection = by_candidate.setdefault(leader.candidate_id, CandidateProjection())
        projection.electoral_votes += votes
        projection.states.append(state_code.upper())

    leader_id = None
    if by_candidate:
        leader_id = max(by_candidate, key=lambda cid: by_candidate[cid].electoral_votes)
    return ElectoralProjection(by_candidate=by_candidate, leader=leader_id)
