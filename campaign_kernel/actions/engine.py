"""
Action Engine — validates, costs, executes and queues campaign actions.

Every outcome is derived from the action's seed string through the seeded
PRNG, so an action replays to an identical result. Backfire is rolled first
and then reshapes every other effect.

Behavioral Contract:
- Eligibility failures are returned as human-readable errors, never raised
- execute_action always returns a complete ActionResult; backfire is data
- Queue operations return new ActionQueue values; inputs are not mutated
- Action points never go negative; resets happen only once now >= reset time
- Day and week boundaries are UTC midnight and UTC Sunday
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from campaign_kernel.actions.catalog import (
    ACTION_BASE_COSTS,
    ACTION_COOLDOWNS,
    INTENSITY_EFFECT_MULTIPLIERS,
    calculate_final_cost,
    get_action_category,
)
from campaign_kernel.clock.seeded import (
    round_half_up,
    round_int,
    seeded_gaussian,
    seeded_random,
)
from campaign_kernel.clock.timescale import (
    add_hours,
    as_utc,
    next_utc_midnight,
    to_epoch_ms,
    utc_week_start,
)
from campaign_kernel.models.actions import (
    ActionCategory,
    ActionIntensity,
    ActionQueue,
    ActionResult,
    ActionResultStatus,
    ActionType,
    EligibilityResult,
    PlayerAction,
    QueuedImpactEstimate,
)
from campaign_kernel.models.campaign import CampaignPhase
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig
from campaign_kernel.phase.machine import PHASE_GATED_ACTIONS

logger = logging.getLogger(__name__)


# (base shift %, volatility, duration in game days) at STANDARD intensity
BASE_POLLING_EFFECTS: Dict[ActionType, Tuple[float, float, int]] = {
    ActionType.TV_AD_NATIONAL: (1.5, 0.3, 7),
    ActionType.TV_AD_STATE: (2.0, 0.25, 5),
    ActionType.RADIO_AD: (0.5, 0.2, 3),
    ActionType.DIGITAL_AD: (0.8, 0.4, 2),
    ActionType.BILLBOARD: (0.3, 0.1, 14),
    ActionType.MAILER: (0.6, 0.2, 5),
    ActionType.RALLY: (1.8, 0.35, 4),
    ActionType.TOWN_HALL: (1.0, 0.2, 3),
    ActionType.CANVASSING: (0.7, 0.15, 5),
    ActionType.PHONE_BANK: (0.5, 0.2, 3),
    ActionType.VOTER_REGISTRATION: (0.3, 0.1, 30),
    ActionType.GOTV_OPERATION: (2.5, 0.3, 3),
    ActionType.PRESS_RELEASE: (0.3, 0.3, 2),
    ActionType.PRESS_CONFERENCE: (0.8, 0.4, 3),
    ActionType.INTERVIEW: (0.6, 0.35, 2),
    ActionType.OP_ED: (0.4, 0.2, 5),
    ActionType.SOCIAL_MEDIA_CAMPAIGN: (0.5, 0.5, 1),
    ActionType.ENDORSEMENT_ANNOUNCEMENT: (1.2, 0.25, 7),
    ActionType.LEGISLATIVE_MEETING: (0.2, 0.1, 3),
    ActionType.COALITION_BUILDING: (0.3, 0.15, 10),
    ActionType.POLICY_SPEECH: (0.8, 0.3, 5),
    ActionType.INDUSTRY_OUTREACH: (0.2, 0.1, 7),
    ActionType.ATTACK_AD: (2.0, 0.5, 5),
    ActionType.RAPID_RESPONSE: (0.5, 0.3, 2),
    ActionType.FACT_CHECK_CAMPAIGN: (0.6, 0.25, 3),
}

BASE_REPUTATION_EFFECTS: Dict[ActionType, float] = {
    ActionType.TOWN_HALL: 3,
    ActionType.PRESS_CONFERENCE: 2,
    ActionType.INTERVIEW: 2,
    ActionType.OP_ED: 3,
    ActionType.ENDORSEMENT_ANNOUNCEMENT: 5,
    ActionType.POLICY_SPEECH: 4,
    ActionType.COALITION_BUILDING: 2,
    ActionType.ATTACK_AD: -2,
    ActionType.RAPID_RESPONSE: 1,
    ActionType.FACT_CHECK_CAMPAIGN: 2,
}

# (base dollars raised, new donors)
BASE_FUNDRAISING_EFFECTS: Dict[ActionType, Tuple[float, int]] = {
    ActionType.FUNDRAISING_EVENT: (150000, 50),
    ActionType.ONLINE_CAMPAIGN: (50000, 500),
    ActionType.DONOR_CALL: (25000, 10),
    ActionType.PAC_COORDINATION: (500000, 5),
    ActionType.SMALL_DOLLAR_PUSH: (30000, 1000),
}

# Action types absent here never backfire
BACKFIRE_CHANCES: Dict[ActionType, float] = {
    ActionType.TV_AD_NATIONAL: 0.02,
    ActionType.TV_AD_STATE: 0.02,
    ActionType.RALLY: 0.05,
    ActionType.PRESS_CONFERENCE: 0.08,
    ActionType.INTERVIEW: 0.10,
    ActionType.SOCIAL_MEDIA_CAMPAIGN: 0.12,
    ActionType.ATTACK_AD: 0.25,
    ActionType.OPPOSITION_RESEARCH: 0.15,
    ActionType.RAPID_RESPONSE: 0.08,
}

WEEKLY_LIMITS: Dict[ActionType, int] = {
    ActionType.RALLY: 3,
    ActionType.TOWN_HALL: 5,
    ActionType.PRESS_CONFERENCE: 4,
    ActionType.TV_AD_NATIONAL: 2,
    ActionType.ATTACK_AD: 2,
}

# Action type -> phase-gated action keys that authorize it.
# Types not listed authorize through their lowercased name.
PHASE_ACTION_KEYS: Dict[ActionType, List[str]] = {
    ActionType.FUNDRAISING_EVENT: ["host_fundraising_event"],
    ActionType.DONOR_CALL: ["donor_outreach", "initial_donor_outreach"],
    ActionType.TV_AD_NATIONAL: ["purchase_advertising", "final_advertising_push"],
    ActionType.TV_AD_STATE: ["purchase_advertising", "final_advertising_push"],
    ActionType.DIGITAL_AD: ["purchase_advertising", "final_advertising_push"],
    ActionType.RALLY: ["conduct_rally", "last_minute_events"],
    ActionType.INTERVIEW: ["media_appearances"],
    ActionType.GOTV_OPERATION: ["gotv_operations"],
    ActionType.CANVASSING: ["voter_outreach"],
    ActionType.PHONE_BANK: ["voter_outreach"],
}

MEDIA_ACTIONS = (
    ActionType.PRESS_RELEASE,
    ActionType.PRESS_CONFERENCE,
    ActionType.INTERVIEW,
    ActionType.RALLY,
    ActionType.TV_AD_NATIONAL,
)

BACKFIRE_REASONS: Dict[ActionCategory, List[str]] = {
    ActionCategory.ADVERTISING: [
        "Ad contained factual errors that went viral",
        "Production quality issues made the campaign look unprofessional",
        "Message resonated poorly with target audience",
        "Competitor effectively countered with rapid response",
    ],
    ActionCategory.GROUND_GAME: [
        "Event was poorly attended due to weather",
        "Protestors disrupted the event",
        "Volunteer mishap created negative press",
        "Location choice caused controversy",
    ],
    ActionCategory.FUNDRAISING: [
        "Major donor publicly withdrew support",
        "FEC filing issues raised questions",
        "Event costs exceeded revenue",
        "Donor controversy emerged",
    ],
    ActionCategory.MEDIA: [
        "Gaffe during interview went viral",
        "Press conference question caught candidate off-guard",
        "Social media post was misinterpreted",
        "Op-ed was criticized as out of touch",
    ],
    ActionCategory.LOBBYING: [
        "Meeting leaked to press with negative framing",
        "Coalition partner backed out publicly",
        "Policy position proved unpopular",
        "Industry ties became attack fodder",
    ],
    ActionCategory.OPPOSITION: [
        "Attack ad deemed too negative, backlash ensued",
        "Opposition research was based on faulty information",
        "Rapid response was seen as desperate",
        "Fact check was itself fact-checked and found wanting",
    ],
}


def _format_money(amount: float) -> str:
    """Thousands-separated dollar figure."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def generate_action_seed(
    campaign_id: str, action_type: ActionType, now: datetime
) -> str:
    """Seed string from which every outcome of an action is derived."""
    return f"action-{campaign_id}-{action_type.value}-{to_epoch_ms(now)}"


def get_backfire_reason(action_type: ActionType, seed: str) -> str:
    reasons = BACKFIRE_REASONS[get_action_category(action_type)]
    index = math.floor(seeded_random(seed + "-reason") * len(reasons))
    return reasons[index]


def is_phase_allowed(action_type: ActionType, phase: CampaignPhase) -> bool:
    """Whether phase gating permits an action type. Active permits all."""
    if phase == CampaignPhase.ACTIVE:
        return True
    allowed = PHASE_GATED_ACTIONS.get(phase, [])
    keys = PHASE_ACTION_KEYS.get(action_type, [action_type.value.lower()])
    return any(key in allowed for key in keys)


def execute_action(action: PlayerAction) -> ActionResult:
    """
    Resolve an action into its effects.

    Pure function of the action: identical actions (same seed, type,
    intensity and targeting) yield identical results.
    """
    seed = action.seed
    action_type = action.action_type
    effect_multiplier = INTENSITY_EFFECT_MULTIPLIERS[action.intensity]

    backfire_chance = BACKFIRE_CHANCES.get(action_type, 0.0)
    did_backfire = seeded_random(seed + "-backfire") < backfire_chance

    polling_shift = 0.0
    polling_effect = BASE_POLLING_EFFECTS.get(action_type)
    if polling_effect is not None:
        base_shift, volatility, _duration_days = polling_effect
        base_shift *= effect_multiplier
        polling_shift = seeded_gaussian(
            seed + "-poll", base_shift, base_shift * volatility
        )
        if action.target_states:
            polling_shift *= 1.2
        if action.target_demographics:
            polling_shift *= 1.15
        if did_backfire:
            polling_shift = -abs(polling_shift) * 0.5

    reputation_change = 0.0
    reputation_effect = BASE_REPUTATION_EFFECTS.get(action_type)
    if reputation_effect is not None:
        mean = reputation_effect * effect_multiplier
        reputation_change = seeded_gaussian(seed + "-rep", mean, abs(mean) * 0.2)
        if did_backfire:
            reputation_change = -abs(reputation_change) * 1.5

    funds_raised = 0.0
    new_donors = 0
    fundraising_effect = BASE_FUNDRAISING_EFFECTS.get(action_type)
    if fundraising_effect is not None:
        base_amount, base_donors = fundraising_effect
        amount = base_amount * effect_multiplier
        donors = round_int(base_donors * effect_multiplier)
        funds_raised = max(0.0, seeded_gaussian(seed + "-funds", amount, amount * 0.3))
        new_donors = max(
            0, round_int(seeded_gaussian(seed + "-donors", donors, donors * 0.25))
        )
        if did_backfire:
            funds_raised *= 0.3
            new_donors = round_int(new_donors * 0.3)

    demographic_effects = {
        key: polling_shift * 1.5 for key in action.target_demographics
    }
    state_effects = {state: polling_shift * 1.3 for state in action.target_states}

    endorsement_triggered = not did_backfire and (
        action_type == ActionType.ENDORSEMENT_ANNOUNCEMENT
        or seeded_random(seed + "-endorse") < 0.05
    )
    scandal_triggered = did_backfire and seeded_random(seed + "-scandal") < 0.3

    media_boost = 0.0
    if action_type in MEDIA_ACTIONS:
        media_boost = seeded_gaussian(seed + "-media", 0.3, 0.15) * effect_multiplier
        if did_backfire:
            media_boost = -abs(media_boost) * 2

    details = [
        f"Action: {action_type.value} @ {action.intensity.value}",
        f"Polling: {polling_shift:.2f}%",
        f"Reputation: {reputation_change:.1f}",
    ]
    if funds_raised > 0:
        details.append(f"Raised: ${_format_money(round_int(funds_raised))}")
    if did_backfire:
        details.append("BACKFIRE!")

    backfire_reason = None
    if did_backfire:
        backfire_reason = get_backfire_reason(action_type, seed)
        logger.warning(
            "Action %s (%s) backfired: %s%s",
            action.id,
            action_type.value,
            backfire_reason,
            " [scandal]" if scandal_triggered else "",
        )

    result = ActionResult(
        status=(
            ActionResultStatus.BACKFIRED if did_backfire
            else ActionResultStatus.COMPLETED
        ),
        polling_shift=round_half_up(polling_shift, 2),
        reputation_change=round_half_up(reputation_change, 1),
        funds_raised=round_int(funds_raised),
        new_donors=new_donors,
        demographic_effects=demographic_effects or None,
        state_effects=state_effects or None,
        endorsement_triggered=endorsement_triggered,
        scandal_triggered=scandal_triggered,
        media_boost=round_half_up(media_boost, 2),
        did_backfire=did_backfire,
        backfire_reason=backfire_reason,
        calculation_details=" | ".join(details),
        timestamp=action.completes_at,
    )
    logger.debug("Executed %s: %s", action.id, result.calculation_details)
    return result


class ActionEngine:
    """
    Campaign action lifecycle: eligibility, creation, execution, and the
    per-campaign action queue.
    """

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self.config = config

    # --- Eligibility ---

    def validate_eligibility(
        self,
        action_type: ActionType,
        phase: CampaignPhase,
        queue: ActionQueue,
        funds: float,
        now: datetime,
        intensity: ActionIntensity = ActionIntensity.STANDARD,
    ) -> EligibilityResult:
        """
        Check whether an action may be performed.

        Checks, in order: phase gating, action points, funds, cooldown,
        weekly cap. All failures are collected rather than short-circuited.
        """
        errors: List[str] = []
        warnings: List[str] = []
        now = as_utc(now)

        if not is_phase_allowed(action_type, phase):
            errors.append(
                f"Action {action_type.value} not allowed in {phase.value} phase"
            )

        cost = calculate_final_cost(action_type, intensity)
        if queue.action_points_remaining < cost.action_points:
            errors.append(
                f"Insufficient action points: need {cost.action_points}, "
                f"have {queue.action_points_remaining}"
            )

        if funds < cost.money:
            errors.append(
                f"Insufficient funds: need ${_format_money(cost.money)}, "
                f"have ${_format_money(funds)}"
            )

        cooldown_expires = queue.cooldowns.get(action_type)
        if cooldown_expires is not None and as_utc(cooldown_expires) > now:
            remaining = (as_utc(cooldown_expires) - now).total_seconds() / 3600
            errors.append(f"Action on cooldown: {math.ceil(remaining)}h remaining")

        limit = WEEKLY_LIMITS.get(action_type)
        if limit and queue.weekly_usage.get(action_type, 0) >= limit:
            errors.append(
                f"Weekly limit reached: {limit} {action_type.value} per week"
            )

        if cost.money > funds * 0.5:
            warnings.append("This action will use more than 50% of your funds")

        backfire_chance = BACKFIRE_CHANCES.get(action_type, 0.0)
        if backfire_chance > 0.1:
            warnings.append(
                f"High backfire risk: {round_int(backfire_chance * 100)}% chance"
            )

        return EligibilityResult(valid=not errors, errors=errors, warnings=warnings)

    # --- Creation and execution ---

    def create_player_action(
        self,
        campaign_id: str,
        player_id: str,
        action_type: ActionType,
        now: datetime,
        intensity: ActionIntensity = ActionIntensity.STANDARD,
        target_states: Optional[List[str]] = None,
        target_demographics: Optional[List[str]] = None,
        target_issues: Optional[List[str]] = None,
        scheduled_for: Optional[datetime] = None,
    ) -> PlayerAction:
        """Stamp cost, timing and seed onto a new action."""
        now = as_utc(now)
        final_cost = calculate_final_cost(action_type, intensity)
        start = as_utc(scheduled_for) if scheduled_for else now

        return PlayerAction(
            id=f"action-{campaign_id}-{to_epoch_ms(now)}-{uuid4().hex[:9]}",
            campaign_id=campaign_id,
            player_id=player_id,
            action_type=action_type,
            intensity=intensity,
            status=(
                ActionResultStatus.PENDING if scheduled_for
                else ActionResultStatus.IN_PROGRESS
            ),
            target_states=target_states or [],
            target_demographics=target_demographics or [],
            target_issues=target_issues or [],
            initiated_at=now,
            scheduled_for=as_utc(scheduled_for) if scheduled_for else None,
            completes_at=add_hours(start, final_cost.time_hours),
            final_cost=final_cost,
            seed=generate_action_seed(campaign_id, action_type, now),
        )

    def execute_action(self, action: PlayerAction) -> ActionResult:
        return execute_action(action)

    # --- Queue management ---

    def create_action_queue(self, campaign_id: str, now: datetime) -> ActionQueue:
        points = self.config.action_points_per_day
        return ActionQueue(
            campaign_id=campaign_id,
            action_points_remaining=points,
            action_points_max=points,
            action_points_reset_at=next_utc_midnight(now),
            week_started_at=utc_week_start(now),
        )

    def update_queue_after_action(
        self, queue: ActionQueue, action: PlayerAction, now: datetime
    ) -> ActionQueue:
        """Deduct points, start the cooldown and count weekly usage."""
        now = as_utc(now)
        action_type = action.action_type
        remaining = max(
            0, queue.action_points_remaining - action.final_cost.action_points
        )

        cooldowns = dict(queue.cooldowns)
        cooldowns[action_type] = add_hours(now, ACTION_COOLDOWNS[action_type])

        current_week_start = utc_week_start(now)
        if current_week_start > as_utc(queue.week_started_at):
            weekly_usage = {action_type: 1}
            week_started_at = current_week_start
        else:
            weekly_usage = dict(queue.weekly_usage)
            weekly_usage[action_type] = weekly_usage.get(action_type, 0) + 1
            week_started_at = queue.week_started_at

        return queue.model_copy(update={
            "action_points_remaining": remaining,
            "cooldowns": cooldowns,
            "weekly_usage": weekly_usage,
            "week_started_at": week_started_at,
        })

    def check_and_reset_action_points(
        self, queue: ActionQueue, now: datetime
    ) -> ActionQueue:
        """Restore full action points once the daily reset has passed."""
        now = as_utc(now)
        if now < as_utc(queue.action_points_reset_at):
            return queue
        return queue.model_copy(update={
            "action_points_remaining": queue.action_points_max,
            "action_points_reset_at": next_utc_midnight(now),
        })

    def enqueue_action(self, queue: ActionQueue, action: PlayerAction) -> ActionQueue:
        """Place an action on the pending or in-progress list by its status."""
        if action.status == ActionResultStatus.PENDING:
            return queue.model_copy(update={"pending": [*queue.pending, action]})
        return queue.model_copy(update={"in_progress": [*queue.in_progress, action]})

    def process_pending_actions(
        self, queue: ActionQueue, now: datetime
    ) -> Tuple[ActionQueue, List[PlayerAction]]:
        """Start every pending action whose scheduled time has arrived."""
        now = as_utc(now)
        started: List[PlayerAction] = []
        still_pending: List[PlayerAction] = []

        for action in queue.pending:
            if action.scheduled_for and as_utc(action.scheduled_for) <= now:
                started.append(action.model_copy(
                    update={"status": ActionResultStatus.IN_PROGRESS}
                ))
            else:
                still_pending.append(action)

        updated = queue.model_copy(update={
            "pending": still_pending,
            "in_progress": [*queue.in_progress, *started],
        })
        return updated, started

    def process_completed_actions(
        self, queue: ActionQueue, now: datetime
    ) -> Tuple[ActionQueue, List[PlayerAction]]:
        """Execute every in-progress action whose completion time has passed."""
        now = as_utc(now)
        completed: List[PlayerAction] = []
        still_running: List[PlayerAction] = []

        for action in queue.in_progress:
            if as_utc(action.completes_at) <= now:
                result = execute_action(action)
                completed.append(action.model_copy(update={
                    "status": result.status,
                    "completed_at": now,
                    "result": result,
                }))
            else:
                still_running.append(action)

        return queue.model_copy(update={"in_progress": still_running}), completed

    # --- Utilities ---

    def get_available_actions(
        self,
        phase: CampaignPhase,
        queue: ActionQueue,
        now: datetime,
        funds: float = math.inf,
    ) -> List[ActionType]:
        """Action types currently performable at STANDARD intensity."""
        now = as_utc(now)
        available = []
        for action_type in ActionType:
            expires = queue.cooldowns.get(action_type)
            if expires is not None and as_utc(expires) > now:
                continue
            base_cost = ACTION_BASE_COSTS[action_type]
            if queue.action_points_remaining < base_cost.action_points:
                continue
            eligibility = self.validate_eligibility(
                action_type, phase, queue, funds, now
            )
            if eligibility.valid:
                available.append(action_type)
        return available

    @staticmethod
    def get_time_until_reset(queue: ActionQueue, now: datetime) -> str:
        remaining = (
            as_utc(queue.action_points_reset_at) - as_utc(now)
        ).total_seconds()
        if remaining <= 0:
            return "Now"
        hours = int(remaining // 3600)
        minutes = int((remaining % 3600) // 60)
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @staticmethod
    def estimate_queued_impact(queue: ActionQueue) -> QueuedImpactEstimate:
        """Expected (mean) effects of every pending and in-progress action."""
        polling = 0.0
        funds = 0.0
        total_cost = 0.0
        total_points = 0

        for action in [*queue.pending, *queue.in_progress]:
            multiplier = INTENSITY_EFFECT_MULTIPLIERS[action.intensity]
            polling_effect = BASE_POLLING_EFFECTS.get(action.action_type)
            if polling_effect is not None:
                polling += polling_effect[0] * multiplier
            fundraising_effect = BASE_FUNDRAISING_EFFECTS.get(action.action_type)
            if fundraising_effect is not None:
                funds += fundraising_effect[0] * multiplier
            total_cost += action.final_cost.money
            total_points += action.final_cost.action_points

        return QueuedImpactEstimate(
            estimated_polling_shift=round_half_up(polling, 2),
            estimated_funds_raised=round_int(funds),
            total_cost=total_cost,
            total_action_points=total_points,
        )
