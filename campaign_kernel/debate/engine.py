"""
Debate Engine — deterministic single-shot scoring of debate performances.

Performance is a weighted blend of charisma, knowledge and composure,
adjusted for preparation, fatigue, scandal baggage, opposition research
and a small seeded jitter. Persuasion and momentum follow from how far the
performance lands from 50.

Behavioral Contract:
- Pure: the same participant, seed and research give the same result
- Performance is clamped to [0, 100], persuasion to [-5, 5], momentum
  to [-2, 2]
- Research bonuses are capped at +20 per attacker, penalties at 15 per target
"""

import logging
from typing import List, Optional, Tuple

from campaign_kernel.clock.seeded import clamp, round_half_up, seeded_random
from campaign_kernel.models.debate import (
    DebateOutcome,
    DebateParticipant,
    DebateResult,
    OppositionResearch,
)

logger = logging.getLogger(__name__)

CHARISMA_WEIGHT = 0.35
KNOWLEDGE_WEIGHT = 0.35
COMPOSURE_WEIGHT = 0.30

PREPARATION_FACTOR = 0.2
FATIGUE_FACTOR = 0.15
SCANDAL_PENALTY_FLOOR = -20.0
JITTER_RANGE = 5.0                  # +/- 2.5

MAX_RESEARCH_BONUS = 20.0
MAX_RESEARCH_PENALTY = 15.0

PERSUASION_LIMIT = 5.0
MOMENTUM_FACTOR = 0.4
MOMENTUM_LIMIT = 2.0


def _research_adjustments(
    candidate_id: str, research: List[OppositionResearch]
) -> Tuple[float, float]:
    """Capped (bonus, penalty) for a candidate from all research in play."""
    bonus = sum(r.attacker_bonus for r in research if r.attacker_id == candidate_id)
    penalty = sum(r.defender_penalty for r in research if r.target_id == candidate_id)
    return min(MAX_RESEARCH_BONUS, bonus), min(MAX_RESEARCH_PENALTY, penalty)


def score_debate_performance(
    participant: DebateParticipant,
    seed: str,
    research: Optional[List[OppositionResearch]] = None,
) -> DebateResult:
    base = (
        participant.charisma * CHARISMA_WEIGHT
        + participant.knowledge * KNOWLEDGE_WEIGHT
        + participant.composure * COMPOSURE_WEIGHT
    )
    preparation_bonus = participant.preparation * PREPARATION_FACTOR
    fatigue_penalty = participant.fatigue * FATIGUE_FACTOR
    scandal_penalty = clamp(participant.scandal_penalty, SCANDAL_PENALTY_FLOOR, 0.0)
    jitter = (seeded_random(f"{seed}-jitter") - 0.5) * JITTER_RANGE
    research_bonus, research_penalty = _research_adjustments(
        participant.candidate_id, research or []
    )

    performance = clamp(
        base
        + preparation_bonus
        - fatigue_penalty
        + scandal_penalty
        + jitter
        + research_bonus
        - research_penalty,
        0.0,
        100.0,
    )
    persuasion = clamp((performance - 50) / 10, -PERSUASION_LIMIT, PERSUASION_LIMIT)
    momentum = clamp(persuasion * MOMENTUM_FACTOR, -MOMENTUM_LIMIT, MOMENTUM_LIMIT)

    return DebateResult(
        candidate_id=participant.candidate_id,
        seed=seed,
        base_score=round_half_up(base, 2),
        preparation_bonus=round_half_up(preparation_bonus, 2),
        fatigue_penalty=round_half_up(fatigue_penalty, 2),
        scandal_penalty=round_half_up(scandal_penalty, 2),
        jitter=round_half_up(jitter, 2),
        research_bonus=round_half_up(research_bonus, 2),
        research_penalty=round_half_up(research_penalty, 2),
        performance_score=round_half_up(performance, 2),
        persuasion_delta=round_half_up(persuasion, 2),
        momentum_impact=round_half_up(momentum, 2),
    )


def score_debate(
    participants: List[DebateParticipant],
    seed: str,
    research: Optional[List[OppositionResearch]] = None,
) -> DebateOutcome:
    """Score every participant and rank them; each gets its own derived seed."""
    results = [
        score_debate_performance(p, f"{seed}-{p.candidate_id}", research)
        for p in participants
    ]
    results.sort(key=lambda r: r.performance_score, reverse=True)

    winner_id = None
    if len(results) == 1 or (
        len(results) > 1 and results[0].performance_score > results[1].performance_score
    ):
        winner_id = results[0].candidate_id

    logger.info(
        "Debate %s scored for %d participants, winner %s",
        seed, len(results), winner_id or "none (tie)",
    )
    return DebateOutcome(seed=seed, results=results, winner_id=winner_id)
