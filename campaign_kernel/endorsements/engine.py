"""
Endorsements — stacked polling boosts with diminishing returns.

Endorsements are ranked by influence; the i-th strongest is worth 0.6^i of
its base influence. A reciprocal endorsement lifts the whole stack by 10%.
Each endorser may endorse once per game year (52 real hours).

Behavioral Contract:
- Validation failures are returned, never raised
- Stacking order never depends on input order
- Cooldown checks are pure functions of (last endorsement, now)
"""

import logging
from datetime import datetime
from typing import List, Optional

from campaign_kernel.clock.seeded import round_half_up
from campaign_kernel.clock.timescale import real_hours_between
from campaign_kernel.models.endorsements import (
    Endorsement,
    EndorsementContribution,
    EndorsementImpact,
    EndorsementValidation,
)

logger = logging.getLogger(__name__)

DIMINISHING_RETURNS_FACTOR = 0.6
RECIPROCAL_BONUS_MULTIPLIER = 1.10
CREDIBILITY_FACTOR = 0.02

GAME_WEEKS_PER_YEAR = 52
ENDORSEMENT_COOLDOWN_HOURS = GAME_WEEKS_PER_YEAR    # One real hour per game week


def calculate_credibility_transfer(endorser_polling: float, endorsee_polling: float) -> float:
    """Positive when a stronger candidate lends credibility to a weaker one."""
    return (endorser_polling - endorsee_polling) * CREDIBILITY_FACTOR


def calculate_endorsement_impact(
    endorsements: List[Endorsement], endorsee_polling: float
) -> EndorsementImpact:
    ranked = sorted(endorsements, key=lambda e: e.base_influence, reverse=True)

    subtotal = 0.0
    breakdown = []
    for index, endorsement in enumerate(ranked):
        multiplier = DIMINISHING_RETURNS_FACTOR ** index
        boost = endorsement.base_influence * multiplier
        subtotal += boost
        breakdown.append(EndorsementContribution(
            endorser_id=endorsement.endorser_id,
            endorser_name=endorsement.endorser_name,
            base_influence=endorsement.base_influence,
            diminishing_multiplier=round_half_up(multiplier, 4),
            effective_boost=round_half_up(boost, 2),
        ))

    reciprocal = any(e.is_reciprocal for e in endorsements)
    total = subtotal * RECIPROCAL_BONUS_MULTIPLIER if reciprocal else subtotal
    credibility = sum(
        calculate_credibility_transfer(e.endorser_polling, endorsee_polling)
        for e in endorsements
    )

    return EndorsementImpact(
        total_boost=round_half_up(total, 2),
        breakdown=breakdown,
        reciprocal_bonus_applied=reciprocal,
        reciprocal_bonus_amount=round_half_up(total - subtotal, 2),
        credibility_transfer=round_half_up(credibility, 2),
    )


def get_endorsement_cooldown_remaining(
    last_endorsement_at: Optional[datetime], now: datetime
) -> float:
    """Real hours until the endorser may endorse again (0 when free)."""
    if last_endorsement_at is None:
        return 0.0
    elapsed = real_hours_between(last_endorsement_at, now)
    return max(0.0, ENDORSEMENT_COOLDOWN_HOURS - elapsed)


def can_make_endorsement(last_endorsement_at: Optional[datetime], now: datetime) -> bool:
    return get_endorsement_cooldown_remaining(last_endorsement_at, now) == 0


def validate_endorsement_request(
    endorser_id: str,
    endorsee_id: str,
    last_endorsement_at: Optional[datetime],
    now: datetime,
    endorser_active: bool = True,
) -> EndorsementValidation:
    errors = []
    if endorser_id == endorsee_id:
        errors.append("Cannot endorse yourself")

    remaining = get_endorsement_cooldown_remaining(last_endorsement_at, now)
    if remaining > 0:
        errors.append(f"Endorsement cooldown active ({remaining:.1f} hours remaining)")

    if not endorser_active:
        errors.append("Endorser is not an active candidate")

    if errors:
        logger.debug("Endorsement %s -> %s rejected: %s", endorser_id, endorsee_id, errors)
    return EndorsementValidation(
        valid=not errors,
        errors=errors,
        cooldown_hours_remaining=remaining if remaining > 0 else None,
    )
