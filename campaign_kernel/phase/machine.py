"""
Campaign Phase Machine — the lifecycle FSM of a campaign.

Four linear phases (Announcement -> Fundraising -> Active -> Resolution)
advance on real elapsed time. The total default duration is 26 real hours,
which is 26 game weeks at the 168x time scale.

Behavioral Contract:
- Every operation is a pure function of (state, now); no wall-clock reads
- Returns a new CampaignState on every change, never mutates the input
- Phases only move forward; Resolution is terminal and completes the campaign
- Pause/resume shifts start timestamps by the pause duration, so a pause
  neither grants nor costs phase progress
- Only Completed or Abandoned campaigns may be restarted
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from campaign_kernel.clock.timescale import as_utc, real_hours_between
from campaign_kernel.models.campaign import (
    ActionValidationResult,
    CampaignOffice,
    CampaignPhase,
    CampaignState,
    CampaignStatus,
    PerformedAction,
    PhaseTransitionResult,
)
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig

logger = logging.getLogger(__name__)


PHASE_TRANSITIONS: Dict[CampaignPhase, Optional[CampaignPhase]] = {
    CampaignPhase.ANNOUNCEMENT: CampaignPhase.FUNDRAISING,
    CampaignPhase.FUNDRAISING: CampaignPhase.ACTIVE,
    CampaignPhase.ACTIVE: CampaignPhase.RESOLUTION,
    CampaignPhase.RESOLUTION: None,
}

PHASE_GATED_ACTIONS: Dict[CampaignPhase, List[str]] = {
    CampaignPhase.ANNOUNCEMENT: [
        "declare_candidacy",
        "build_exploratory_committee",
        "gather_petition_signatures",
        "initial_donor_outreach",
    ],
    CampaignPhase.FUNDRAISING: [
        "host_fundraising_event",
        "donor_outreach",
        "pac_formation",
        "campaign_finance_filing",
        "build_campaign_infrastructure",
    ],
    CampaignPhase.ACTIVE: [
        "purchase_advertising",
        "schedule_debate",
        "conduct_rally",
        "release_policy_position",
        "commission_polling",
        "voter_outreach",
        "media_appearances",
    ],
    CampaignPhase.RESOLUTION: [
        "final_advertising_push",
        "gotv_operations",
        "last_minute_events",
        "monitor_early_voting",
        "prepare_concession_victory_speech",
    ],
}


def get_allowed_actions(phase: CampaignPhase) -> List[str]:
    """Phase-gated action keys permitted during a phase."""
    return list(PHASE_GATED_ACTIONS[phase])


class CampaignPhaseMachine:
    """
    Drives a campaign through its phases.

    Holds only configuration (phase durations); campaign state is always
    passed in and returned.
    """

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self.config = config

    def phase_duration(self, phase: CampaignPhase) -> float:
        """Real-hour duration of a phase."""
        return self.config.phase_durations_hours[phase.value]

    @property
    def total_duration(self) -> float:
        return self.config.total_campaign_hours

    def initialize_campaign(
        self,
        campaign_id: str,
        company_id: str,
        candidate_name: str,
        office: CampaignOffice,
        election_week: int,
        now: datetime,
        target_state: Optional[str] = None,
    ) -> CampaignState:
        """Create a running campaign in the Announcement phase."""
        now = as_utc(now)
        return CampaignState(
            campaign_id=campaign_id,
            company_id=company_id,
            candidate_name=candidate_name,
            office=office,
            current_phase=CampaignPhase.ANNOUNCEMENT,
            status=CampaignStatus.RUNNING,
            started_at=now,
            current_phase_started_at=now,
            last_updated_at=now,
            target_state=target_state,
            election_week=election_week,
        )

    def update_campaign_progress(
        self, state: CampaignState, now: datetime
    ) -> CampaignState:
        """
        Recompute elapsed time and phase progress, auto-advancing the phase
        once its duration has fully elapsed.

        Non-running campaigns are returned unchanged.
        """
        if state.status != CampaignStatus.RUNNING:
            return state

        now = as_utc(now)
        total_elapsed = max(0.0, real_hours_between(state.started_at, now))
        phase_elapsed = max(
            0.0, real_hours_between(state.current_phase_started_at, now)
        )
        phase_progress = min(
            phase_elapsed / self.phase_duration(state.current_phase), 1.0
        )

        updated = state.model_copy(update={
            "real_hours_elapsed": total_elapsed,
            "phase_progress": phase_progress,
            "last_updated_at": now,
        })

        if phase_progress < 1:
            return updated

        transition = self.transition_to_next_phase(updated, now)
        if not transition.success or transition.new_phase is None:
            return updated

        if transition.status == CampaignStatus.COMPLETED:
            logger.info(
                "Campaign %s completed at %s", state.campaign_id, now.isoformat()
            )
            return updated.model_copy(update={
                "status": CampaignStatus.COMPLETED,
                "completed_at": now,
                "phase_progress": 1.0,
            })

        logger.info(
            "Campaign %s advanced %s -> %s",
            state.campaign_id,
            state.current_phase.value,
            transition.new_phase.value,
        )
        return updated.model_copy(update={
            "current_phase": transition.new_phase,
            "current_phase_started_at": now,
            "phase_progress": 0.0,
        })

    def transition_to_next_phase(
        self, state: CampaignState, now: datetime
    ) -> PhaseTransitionResult:
        """Determine the next phase; a terminal phase reports completion."""
        now = as_utc(now)
        if state.status != CampaignStatus.RUNNING:
            return PhaseTransitionResult(
                success=False,
                message=f"Cannot transition: campaign status is {state.status.value}",
                timestamp=now,
            )

        next_phase = PHASE_TRANSITIONS[state.current_phase]
        if next_phase is None:
            return PhaseTransitionResult(
                success=True,
                new_phase=state.current_phase,
                status=CampaignStatus.COMPLETED,
                message="Campaign completed - terminal phase reached",
                timestamp=now,
            )

        return PhaseTransitionResult(
            success=True,
            new_phase=next_phase,
            status=CampaignStatus.RUNNING,
            message=(
                f"Transitioned from {state.current_phase.value} "
                f"to {next_phase.value}"
            ),
            timestamp=now,
        )

    def validate_action(
        self, state: CampaignState, action_key: str
    ) -> ActionValidationResult:
        """Check an action key against the current phase whitelist."""
        if state.status != CampaignStatus.RUNNING:
            return ActionValidationResult(
                allowed=False,
                reason=f"Campaign is {state.status.value}, not running",
            )

        allowed_actions = get_allowed_actions(state.current_phase)
        if action_key in allowed_actions:
            return ActionValidationResult(allowed=True)

        return ActionValidationResult(
            allowed=False,
            reason=(
                f"Action '{action_key}' not permitted during "
                f"{state.current_phase.value} phase"
            ),
            allowed_actions=allowed_actions,
        )

    def record_action(
        self, state: CampaignState, action_key: str, now: datetime
    ) -> CampaignState:
        now = as_utc(now)
        entry = PerformedAction(
            action=action_key, phase=state.current_phase, timestamp=now
        )
        return state.model_copy(update={
            "actions_performed": [*state.actions_performed, entry],
            "last_updated_at": now,
        })

    def pause_campaign(self, state: CampaignState, now: datetime) -> CampaignState:
        """Suspend a running campaign; other statuses are returned unchanged."""
        if state.status != CampaignStatus.RUNNING:
            return state
        return state.model_copy(update={
            "status": CampaignStatus.PAUSED,
            "paused_at": as_utc(now),
            "last_updated_at": as_utc(now),
        })

    def resume_campaign(self, state: CampaignState, now: datetime) -> CampaignState:
        """Resume a paused campaign, shifting its clocks past the pause."""
        if state.status != CampaignStatus.PAUSED:
            return state

        now = as_utc(now)
        paused_at = state.paused_at or state.last_updated_at
        pause_duration = now - as_utc(paused_at)
        return state.model_copy(update={
            "status": CampaignStatus.RUNNING,
            "started_at": as_utc(state.started_at) + pause_duration,
            "current_phase_started_at": (
                as_utc(state.current_phase_started_at) + pause_duration
            ),
            "paused_at": None,
            "last_updated_at": now,
        })

    def abandon_campaign(self, state: CampaignState, now: datetime) -> CampaignState:
        """Terminate a campaign. Already-terminal campaigns are unchanged."""
        if state.status in (CampaignStatus.COMPLETED, CampaignStatus.ABANDONED):
            return state

        now = as_utc(now)
        logger.info("Campaign %s abandoned", state.campaign_id)
        return state.model_copy(update={
            "status": CampaignStatus.ABANDONED,
            "completed_at": now,
            "last_updated_at": now,
        })

    def get_campaign_completion(self, state: CampaignState) -> float:
        """Overall completion percentage (0-100)."""
        if state.status == CampaignStatus.COMPLETED:
            return 100.0
        if state.status != CampaignStatus.RUNNING:
            return 0.0
        return min(state.real_hours_elapsed / self.total_duration * 100, 100.0)

    def get_phase_time_remaining(self, state: CampaignState) -> float:
        """Real hours left in the current phase."""
        if state.status != CampaignStatus.RUNNING:
            return 0.0
        duration = self.phase_duration(state.current_phase)
        return max(duration - state.phase_progress * duration, 0.0)

    @staticmethod
    def can_restart_campaign(state: CampaignState) -> bool:
        return state.status in (
            CampaignStatus.COMPLETED,
            CampaignStatus.ABANDONED,
        )
