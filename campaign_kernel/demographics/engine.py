"""
Demographics Engine — canonical voter groups and candidate appeal scoring.

Each group is a race x class x gender combination with a base issue profile
built from fixed rule tables (race, then class, then gender), a turnout
propensity, and derived social/economic position scalars.

Behavioral Contract:
- Group construction is pure and deterministic; groups are read-only
  reference data
- Positions are clamped to [-5, 5], weights to [0, 1], turnout to [0.2, 0.95]
- Alignment, appeal and turnout outputs never leave their declared ranges
- Unknown demographic keys raise UnknownDemographicKeyError
"""

import math
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from campaign_kernel.clock.seeded import clamp, round_half_up
from campaign_kernel.errors import UnknownDemographicKeyError
from campaign_kernel.models.demographics import (
    ALL_DEMOGRAPHIC_KEYS,
    ALL_POLITICAL_ISSUES,
    DemographicAppeal,
    DemographicClass,
    DemographicGender,
    DemographicGroup,
    DemographicPollResult,
    DemographicRace,
    IssueAlignmentResult,
    IssueBreakdown,
    IssueProfile,
    PoliticalIssue,
    PositionLabel,
    SpecialEffect,
    StatePollingSummary,
)

PI = PoliticalIssue

SOCIAL_ISSUES = [PI.ABORTION, PI.GUNS, PI.IMMIGRATION, PI.CRIMINAL_JUSTICE]
ECONOMIC_ISSUES = [PI.TAXES, PI.MINIMUM_WAGE, PI.HEALTHCARE, PI.SOCIAL_SECURITY, PI.TRADE]

APPEAL_WEIGHTS = {
    "issue_alignment": 0.60,
    "awareness": 0.25,
    "special_effects": 0.15,
}

DEFAULT_ISSUE_WEIGHTS: Dict[PoliticalIssue, float] = {
    PI.HEALTHCARE: 0.8,
    PI.IMMIGRATION: 0.5,
    PI.TAXES: 0.7,
    PI.ENVIRONMENT: 0.4,
    PI.GUNS: 0.6,
    PI.ABORTION: 0.5,
    PI.MILITARY: 0.4,
    PI.EDUCATION: 0.6,
    PI.SOCIAL_SECURITY: 0.5,
    PI.CRIMINAL_JUSTICE: 0.5,
    PI.TRADE: 0.3,
    PI.MINIMUM_WAGE: 0.6,
}

BASE_TURNOUT_BY_CLASS: Dict[DemographicClass, float] = {
    DemographicClass.WEALTHY: 0.80,
    DemographicClass.MIDDLE_CLASS: 0.65,
    DemographicClass.LOWER_CLASS: 0.45,
}

TURNOUT_MODIFIER_BY_RACE: Dict[DemographicRace, float] = {
    DemographicRace.WHITE: 1.05,
    DemographicRace.BLACK: 0.95,
    DemographicRace.HISPANIC: 0.85,
    DemographicRace.ASIAN: 0.90,
    DemographicRace.NATIVE_AMERICAN: 0.80,
    DemographicRace.OTHER: 0.90,
}

# Rule tables. "set" replaces a value, "add" shifts it.
RACE_RULES: Dict[DemographicRace, Dict[str, Dict[PoliticalIssue, float]]] = {
    DemographicRace.WHITE: {
        "set": {PI.IMMIGRATION: 0.5, PI.GUNS: 1.0, PI.MILITARY: 1.0},
    },
    DemographicRace.BLACK: {
        "set": {
            PI.HEALTHCARE: 3.0,
            PI.CRIMINAL_JUSTICE: 4.0,
            PI.MINIMUM_WAGE: 3.5,
            PI.EDUCATION: 2.5,
        },
        "weights": {PI.CRIMINAL_JUSTICE: 0.9},
    },
    DemographicRace.HISPANIC: {
        "set": {
            PI.IMMIGRATION: 2.5,
            PI.HEALTHCARE: 2.0,
            PI.MINIMUM_WAGE: 2.5,
            PI.ABORTION: -0.5,
        },
        "weights": {PI.IMMIGRATION: 0.8},
    },
    DemographicRace.ASIAN: {
        "set": {PI.EDUCATION: 3.0, PI.IMMIGRATION: 1.5, PI.ENVIRONMENT: 1.5},
        "weights": {PI.EDUCATION: 0.9},
    },
    DemographicRace.NATIVE_AMERICAN: {
        "set": {PI.ENVIRONMENT: 3.5, PI.HEALTHCARE: 3.0, PI.CRIMINAL_JUSTICE: 2.5},
        "weights": {PI.ENVIRONMENT: 0.9},
    },
    DemographicRace.OTHER: {},
}

CLASS_RULES: Dict[DemographicClass, Dict[str, Dict[PoliticalIssue, float]]] = {
    DemographicClass.WEALTHY: {
        "set": {
            PI.TAXES: -3.0,
            PI.MINIMUM_WAGE: -2.5,
            PI.TRADE: 2.0,
            PI.SOCIAL_SECURITY: -1.5,
        },
        "weights": {PI.TAXES: 0.95},
    },
    DemographicClass.MIDDLE_CLASS: {
        "set": {PI.TAXES: -0.5},
        "add": {PI.HEALTHCARE: 0.5, PI.EDUCATION: 0.5},
    },
    DemographicClass.LOWER_CLASS: {
        "set": {PI.TAXES: 2.5, PI.MINIMUM_WAGE: 3.5, PI.SOCIAL_SECURITY: 3.0},
        "add": {PI.HEALTHCARE: 1.5},
        "weights": {PI.MINIMUM_WAGE: 0.9, PI.HEALTHCARE: 0.9},
    },
}

GENDER_RULES: Dict[DemographicGender, Dict[str, Dict[PoliticalIssue, float]]] = {
    DemographicGender.FEMALE: {
        "add": {PI.ABORTION: 1.0, PI.HEALTHCARE: 0.5, PI.EDUCATION: 0.5, PI.GUNS: -1.0},
        "add_weights": {PI.HEALTHCARE: 0.1, PI.EDUCATION: 0.1},
    },
    DemographicGender.MALE: {
        "add": {PI.GUNS: 0.5, PI.MILITARY: 0.5, PI.TAXES: -0.5},
    },
}

RACE_LABELS = {
    DemographicRace.WHITE: "White",
    DemographicRace.BLACK: "Black",
    DemographicRace.HISPANIC: "Hispanic",
    DemographicRace.ASIAN: "Asian",
    DemographicRace.NATIVE_AMERICAN: "Native American",
    DemographicRace.OTHER: "Other",
}
CLASS_LABELS = {
    DemographicClass.WEALTHY: "Wealthy",
    DemographicClass.MIDDLE_CLASS: "Middle Class",
    DemographicClass.LOWER_CLASS: "Lower Class",
}
GENDER_LABELS = {
    DemographicGender.MALE: "Men",
    DemographicGender.FEMALE: "Women",
}


def _apply_rules(
    rules: Dict[str, Dict[PoliticalIssue, float]],
    positions: Dict[PoliticalIssue, float],
    weights: Dict[PoliticalIssue, float],
) -> None:
    """Apply one rule table to working position/weight maps."""
    positions.update(rules.get("set", {}))
    for issue, delta in rules.get("add", {}).items():
        positions[issue] += delta
    weights.update(rules.get("weights", {}))
    for issue, delta in rules.get("add_weights", {}).items():
        weights[issue] += delta


def get_base_issue_profile(
    race: DemographicRace,
    demo_class: DemographicClass,
    gender: DemographicGender,
) -> IssueProfile:
    """Base issue profile from the race, class and gender rule tables."""
    positions = {issue: 0.0 for issue in ALL_POLITICAL_ISSUES}
    weights = dict(DEFAULT_ISSUE_WEIGHTS)

    _apply_rules(RACE_RULES[race], positions, weights)
    _apply_rules(CLASS_RULES[demo_class], positions, weights)
    _apply_rules(GENDER_RULES[gender], positions, weights)

    return IssueProfile(
        positions={i: clamp(positions[i], -5.0, 5.0) for i in ALL_POLITICAL_ISSUES},
        weights={i: clamp(weights[i], 0.0, 1.0) for i in ALL_POLITICAL_ISSUES},
    )


def calculate_base_turnout(race: DemographicRace, demo_class: DemographicClass) -> float:
    return clamp(
        BASE_TURNOUT_BY_CLASS[demo_class] * TURNOUT_MODIFIER_BY_RACE[race],
        0.2,
        0.95,
    )


def _issue_weight(profile: IssueProfile, issue: PoliticalIssue) -> float:
    """Importance weight; missing or zero weights count as 0.5."""
    return profile.weights.get(issue) or 0.5


def _weighted_position(profile: IssueProfile, issues: List[PoliticalIssue]) -> float:
    weighted_sum = 0.0
    total_weight = 0.0
    for issue in issues:
        weight = _issue_weight(profile, issue)
        weighted_sum += profile.positions.get(issue, 0.0) * weight
        total_weight += weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def calculate_social_position(profile: IssueProfile) -> float:
    return _weighted_position(profile, SOCIAL_ISSUES)


def calculate_economic_position(profile: IssueProfile) -> float:
    return _weighted_position(profile, ECONOMIC_ISSUES)


def parse_demographic_key(
    key: str,
) -> Tuple[DemographicRace, DemographicClass, DemographicGender]:
    """
    Split a key such as "NATIVE_AMERICAN_MIDDLE_CLASS_FEMALE" into its
    (race, class, gender) triple.
    """
    parts = key.split("_")
    if len(parts) < 3:
        raise UnknownDemographicKeyError(f"Unknown demographic key: {key}")

    gender_part = parts[-1]
    if parts[-2] == "CLASS" and len(parts) >= 4:
        class_part = f"{parts[-3]}_CLASS"
        race_part = "_".join(parts[:-3])
    else:
        class_part = parts[-2]
        race_part = "_".join(parts[:-2])

    try:
        return (
            DemographicRace(race_part),
            DemographicClass(class_part),
            DemographicGender(gender_part),
        )
    except ValueError:
        raise UnknownDemographicKeyError(f"Unknown demographic key: {key}") from None


def get_demographic_label(
    race: DemographicRace,
    demo_class: DemographicClass,
    gender: DemographicGender,
) -> str:
    return f"{RACE_LABELS[race]} {CLASS_LABELS[demo_class]} {GENDER_LABELS[gender]}"


def get_position_label(position: float) -> PositionLabel:
    if position <= -4:
        return PositionLabel.EXTREMELY_LEFT
    if position <= -2:
        return PositionLabel.LEFT_WING
    if position <= -1:
        return PositionLabel.SOMEWHAT_LEFT
    if position <= -0.5:
        return PositionLabel.CENTER_LEFT
    if position <= 0.5:
        return PositionLabel.CENTRIST
    if position <= 1:
        return PositionLabel.CENTER_RIGHT
    if position <= 2:
        return PositionLabel.SOMEWHAT_RIGHT
    if position <= 4:
        return PositionLabel.RIGHT_WING
    return PositionLabel.EXTREMELY_RIGHT


@lru_cache(maxsize=None)
def build_demographic_group(key: str) -> DemographicGroup:
    """Construct the reference group for a key. Cached; treat as read-only."""
    race, demo_class, gender = parse_demographic_key(key)
    profile = get_base_issue_profile(race, demo_class, gender)
    return DemographicGroup(
        key=key,
        race=race,
        demo_class=demo_class,
        gender=gender,
        label=get_demographic_label(race, demo_class, gender),
        base_issue_profile=profile,
        base_turnout=calculate_base_turnout(race, demo_class),
        enthusiasm=0.5,
        social_position=round_half_up(calculate_social_position(profile), 2),
        economic_position=round_half_up(calculate_economic_position(profile), 2),
    )


def get_all_demographic_groups() -> List[DemographicGroup]:
    return [build_demographic_group(key) for key in ALL_DEMOGRAPHIC_KEYS]


# --- Appeal ---

def calculate_issue_alignment(
    candidate: IssueProfile, voter: IssueProfile
) -> IssueAlignmentResult:
    """
    Importance-weighted agreement between two profiles, 0-100.

    A full 10-point gap on the -5..+5 scale is 0% alignment on that issue.
    """
    breakdown = []
    weighted_sum = 0.0
    total_weight = 0.0

    for issue in ALL_POLITICAL_ISSUES:
        candidate_pos = candidate.positions.get(issue, 0.0)
        voter_pos = voter.positions.get(issue, 0.0)
        weight = _issue_weight(voter, issue)
        difference = abs(candidate_pos - voter_pos)
        alignment = max(0.0, 100 - difference * 10)
        contribution = alignment * weight
        weighted_sum += contribution
        total_weight += weight
        breakdown.append(IssueBreakdown(
            issue=issue,
            candidate_position=candidate_pos,
            voter_position=voter_pos,
            difference=difference,
            weight=weight,
            contribution=contribution,
        ))

    overall = weighted_sum / total_weight if total_weight > 0 else 50.0
    return IssueAlignmentResult(
        overall_alignment=clamp(round_half_up(overall, 1), 0.0, 100.0),
        issue_breakdown=breakdown,
    )


def calculate_demographic_appeal(
    candidate_id: str,
    candidate_profile: IssueProfile,
    candidate_awareness: float,
    group: DemographicGroup,
    special_effects: Optional[List[SpecialEffect]] = None,
) -> DemographicAppeal:
    """
    Appeal = 0.60 x alignment + 0.25 x awareness + 0.15 x (50 + effects),
    scaled by an enthusiasm modifier of 1 + (enthusiasm - 50) / 200 and
    clamped to 0-100.
    """
    special_effects = special_effects or []
    issue_alignment = calculate_issue_alignment(
        candidate_profile, group.base_issue_profile
    ).overall_alignment
    awareness = clamp(candidate_awareness, 0.0, 100.0)
    enthusiasm = (issue_alignment * 0.7 + awareness * 0.3) * group.enthusiasm * 2
    effect_total = sum(effect.modifier for effect in special_effects)

    raw_appeal = (
        issue_alignment * APPEAL_WEIGHTS["issue_alignment"]
        + awareness * APPEAL_WEIGHTS["awareness"]
        + (50 + effect_total) * APPEAL_WEIGHTS["special_effects"]
    )
    enthusiasm_modifier = 1 + (enthusiasm - 50) / 200
    final_appeal = clamp(raw_appeal * enthusiasm_modifier, 0.0, 100.0)

    return DemographicAppeal(
        demographic_key=group.key,
        candidate_id=candidate_id,
        issue_alignment=issue_alignment,
        awareness=awareness,
        enthusiasm=round_half_up(enthusiasm, 1),
        special_effects=special_effects,
        special_effect_total=effect_total,
        raw_appeal=round_half_up(raw_appeal, 1),
        final_appeal=round_half_up(final_appeal, 1),
    )


# --- Vote share ---

def calculate_turnout(
    group: DemographicGroup,
    state_turnout_modifier: float = 1.0,
    enthusiasm: float = 0.5,
) -> float:
    """Expected turnout (0-1); enthusiasm swings it between 0.8x and 1.2x."""
    enthusiasm_modifier = 0.8 + enthusiasm * 0.4
    return clamp(
        group.base_turnout * state_turnout_modifier * enthusiasm_modifier, 0.0, 1.0
    )


def calculate_vote_share(
    population_percent: float, turnout_percent: float, appeal_percent: float
) -> float:
    return population_percent * turnout_percent * appeal_percent / 10000


def generate_demographic_poll_result(
    group: DemographicGroup,
    population_percent: float,
    appeal: DemographicAppeal,
    turnout: float,
) -> DemographicPollResult:
    vote_share = calculate_vote_share(
        population_percent, turnout * 100, appeal.final_appeal
    )
    return DemographicPollResult(
        demographic_key=group.key,
        label=group.label,
        population_share=round_half_up(population_percent, 2),
        estimated_turnout=round_half_up(turnout * 100, 1),
        social_position=group.social_position,
        social_label=get_position_label(group.social_position),
        economic_position=group.economic_position,
        economic_label=get_position_label(group.economic_position),
        candidate_appeal=appeal.final_appeal,
        vote_share=round_half_up(vote_share, 2),
        special_effects=appeal.special_effect_total,
    )


def calculate_state_average_position(
    results: List[DemographicPollResult], position_type: str
) -> float:
    """Population x turnout weighted mean of "social" or "economic" position."""
    weighted_sum = 0.0
    total_weight = 0.0
    for result in results:
        weight = result.population_share * result.estimated_turnout
        position = (
            result.social_position if position_type == "social"
            else result.economic_position
        )
        weighted_sum += position * weight
        total_weight += weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def generate_state_polling_summary(
    state_code: str,
    candidate_id: str,
    results: List[DemographicPollResult],
    now: datetime,
    sample_size: int = 1000,
    previous: Optional[StatePollingSummary] = None,
) -> StatePollingSummary:
    total_vote_share = sum(result.vote_share for result in results)
    social = calculate_state_average_position(results, "social")
    economic = calculate_state_average_position(results, "economic")

    vote_share_change = None
    if previous is not None:
        vote_share_change = round_half_up(
            total_vote_share - previous.total_projected_vote_share, 2
        )

    return StatePollingSummary(
        state_code=state_code,
        candidate_id=candidate_id,
        total_projected_vote_share=round_half_up(total_vote_share, 2),
        average_social_position=round_half_up(social, 2),
        average_social_label=get_position_label(social),
        average_economic_position=round_half_up(economic, 2),
        average_economic_label=get_position_label(economic),
        demographics=results,
        previous_vote_share=(
            previous.total_projected_vote_share if previous else None
        ),
        vote_share_change=vote_share_change,
        poll_timestamp=now,
        sample_size=sample_size,
        margin_of_error=round_half_up(1 / math.sqrt(sample_size) * 100, 1),
    )
