"""
Election Resolution — final-day tally from per-state outcomes.

Converts each state's margin (optionally nudged by last-week momentum) into
electoral votes, House seats and a win probability, estimates the popular
vote, awards Senate delegation votes to the popular-vote leader, and names
a winner only when someone reaches the electoral-vote threshold.

Behavioral Contract:
- Momentum can shift a margin by at most 1.5 points
- Margins within 0.01 are ties: EVs and House seats split floor/ceil (A/B)
- Margins within 0.5 are flagged for recount, ties included
- Low turnout is informational and never changes the tally
- No winner below 270 EVs; that is a valid outcome, not an error
"""

import logging
import math
from typing import Dict, List, Optional

from campaign_kernel.clock.seeded import clamp, round_half_up
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig
from campaign_kernel.models.election import (
    CandidateTally,
    DelegationConfig,
    ElectionResolutionResult,
    StateMomentum,
    StateOutcome,
    StateResolution,
)

logger = logging.getLogger(__name__)


def calculate_momentum_adjustment(
    momentum: Optional[StateMomentum], config: SimulationConfig = DEFAULT_CONFIG
) -> float:
    if momentum is None:
        return 0.0
    raw = (momentum.a_weekly_change - momentum.b_weekly_change) * config.momentum_margin_scale
    return clamp(raw, -config.momentum_margin_cap, config.momentum_margin_cap)


def calculate_state_win_probability(margin: float, volatility: float = 0.0) -> float:
    """Probability that the state's leader holds it, in [0.5, 0.99]."""
    margin_factor = min(1.0, abs(margin) / 10)
    volatility_penalty = min(0.3, volatility / 10)
    return clamp(0.5 + margin_factor * 0.4 - volatility_penalty, 0.5, 0.99)


def _resolve_state(
    outcome: StateOutcome,
    candidate_a: str,
    candidate_b: str,
    momentum: Optional[StateMomentum],
    config: SimulationConfig,
) -> StateResolution:
    adjustment = calculate_momentum_adjustment(momentum, config)
    margin = outcome.margin + adjustment

    if abs(margin) <= config.tie_margin:
        return StateResolution(
            state=outcome.state,
            original_margin=outcome.margin,
            momentum_adjustment=round_half_up(adjustment, 2),
            adjusted_margin=round_half_up(margin, 2),
            winner=None,
            electoral_votes_a=outcome.electoral_votes // 2,
            electoral_votes_b=math.ceil(outcome.electoral_votes / 2),
            house_seats_a=outcome.house_seats // 2,
            house_seats_b=math.ceil(outcome.house_seats / 2),
            win_probability={candidate_a: 0.5, candidate_b: 0.5},
        )

    a_wins = margin > 0
    probability = round_half_up(
        calculate_state_win_probability(margin, outcome.volatility), 3
    )
    return StateResolution(
        state=outcome.state,
        original_margin=outcome.margin,
        momentum_adjustment=round_half_up(adjustment, 2),
        adjusted_margin=round_half_up(margin, 2),
        winner=candidate_a if a_wins else candidate_b,
        electoral_votes_a=outcome.electoral_votes if a_wins else 0,
        electoral_votes_b=0 if a_wins else outcome.electoral_votes,
        house_seats_a=outcome.house_seats if a_wins else 0,
        house_seats_b=0 if a_wins else outcome.house_seats,
        win_probability={
            candidate_a: probability if a_wins else round_half_up(1 - probability, 3),
            candidate_b: round_half_up(1 - probability, 3) if a_wins else probability,
        },
    )


def estimate_popular_vote(
    outcomes: List[StateOutcome], adjusted_margins: Dict[str, float]
) -> float:
    """
    Candidate A's share of the two-way popular vote, in percent. Each state
    contributes 50 + margin/2, weighted by EV x turnout as a population proxy.
    """
    total_weight = 0.0
    weighted_share = 0.0
    for outcome in outcomes:
        weight = outcome.electoral_votes * outcome.turnout
        weighted_share += weight * (50 + adjusted_margins[outcome.state] / 2)
        total_weight += weight
    return weighted_share / total_weight if total_weight > 0 else 50.0


def resolve_election(
    candidate_a: str,
    candidate_b: str,
    outcomes: List[StateOutcome],
    momentum: Optional[List[StateMomentum]] = None,
    delegation: Optional[DelegationConfig] = None,
    config: SimulationConfig = DEFAULT_CONFIG,
) -> ElectionResolutionResult:
    """Resolve the election. Positive margins in outcomes favour candidate A."""
    delegation = delegation or DelegationConfig()
    momentum_by_state = {m.state: m for m in momentum or []}

    states = []
    ties = []
    recounts = []
    low_turnout = []
    adjusted_margins = {}

    for outcome in outcomes:
        state_momentum = momentum_by_state.get(outcome.state)
        resolution = _resolve_state(
            outcome, candidate_a, candidate_b, state_momentum, config
        )
        states.append(resolution)
        margin = outcome.margin + calculate_momentum_adjustment(state_momentum, config)
        adjusted_margins[outcome.state] = margin

        if resolution.winner is None:
            ties.append(outcome.state)
        if abs(margin) <= config.recount_margin:
            recounts.append(outcome.state)
        if outcome.turnout < config.low_turnout_threshold:
            low_turnout.append(outcome.state)

    tally_a = CandidateTally(
        electoral_votes=sum(s.electoral_votes_a for s in states),
        house_votes=sum(s.house_seats_a for s in states),
    )
    tally_b = CandidateTally(
        electoral_votes=sum(s.electoral_votes_b for s in states),
        house_votes=sum(s.house_seats_b for s in states),
    )

    popular_a = estimate_popular_vote(outcomes, adjusted_margins)
    tally_a.popular_vote = round_half_up(popular_a, 2)
    tally_b.popular_vote = round_half_up(100 - popular_a, 2)
    if popular_a > 50:
        tally_a.senate_votes = delegation.senate_votes_per_player
    elif popular_a < 50:
        tally_b.senate_votes = delegation.senate_votes_per_player

    winner = None
    if tally_a.electoral_votes >= config.electoral_votes_to_win:
        winner = candidate_a
    elif tally_b.electoral_votes >= config.electoral_votes_to_win:
        winner = candidate_b

    result = ElectionResolutionResult(
        winner=winner,
        tallies={candidate_a: tally_a, candidate_b: tally_b},
        ties=ties,
        recounts=recounts,
        low_turnout_states=low_turnout,
        states=states,
        total_electoral_votes=sum(o.electoral_votes for o in outcomes),
    )
    logger.info(
        "Election resolved: %s %d EV, %s %d EV, winner %s (%d ties, %d recounts)",
        candidate_a, tally_a.electoral_votes, candidate_b, tally_b.electoral_votes,
        winner or "none", len(ties), len(recounts),
    )
    return result
