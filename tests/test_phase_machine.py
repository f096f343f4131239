"""Tests for the Campaign Phase Machine."""

from datetime import datetime, timedelta, timezone

from campaign_kernel.models.campaign import (
    CampaignOffice,
    CampaignPhase,
    CampaignState,
    CampaignStatus,
)
from campaign_kernel.phase.machine import CampaignPhaseMachine, get_allowed_actions

T0 = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def _hours(n: float) -> datetime:
    return T0 + timedelta(hours=n)


def _make_campaign(machine: CampaignPhaseMachine) -> CampaignState:
    return machine.initialize_campaign(
        campaign_id="campaign_1",
        company_id="company_1",
        candidate_name="Jane Doe",
        office=CampaignOffice.PRESIDENT,
        election_week=26,
        now=T0,
    )


class TestInitialization:
    def setup_method(self):
        self.machine = CampaignPhaseMachine()

    def test_starts_in_announcement(self):
        state = _make_campaign(self.machine)
        assert state.current_phase == CampaignPhase.ANNOUNCEMENT
        assert state.status == CampaignStatus.RUNNING
        assert state.started_at == T0
        assert state.current_phase_started_at == T0
        assert state.phase_progress == 0.0

    def test_naive_now_is_treated_as_utc(self):
        state = self.machine.initialize_campaign(
            "c2", "co", "John Roe", CampaignOffice.SENATE, 26,
            datetime(2026, 3, 4, 12, 0), target_state="PA",
        )
        assert state.started_at == T0
        assert state.target_state == "PA"


class TestProgress:
    def setup_method(self):
        self.machine = CampaignPhaseMachine()
        self.state = _make_campaign(self.machine)

    def test_partial_progress(self):
        updated = self.machine.update_campaign_progress(self.state, _hours(2))
        assert updated.current_phase == CampaignPhase.ANNOUNCEMENT
        assert updated.phase_progress == 0.5
        assert updated.real_hours_elapsed == 2.0
        assert updated.last_updated_at == _hours(2)

    def test_input_state_is_not_mutated(self):
        self.machine.update_campaign_progress(self.state, _hours(5))
        assert self.state.current_phase == CampaignPhase.ANNOUNCEMENT
        assert self.state.phase_progress == 0.0

    def test_auto_advances_when_phase_elapses(self):
        updated = self.machine.update_campaign_progress(self.state, _hours(4))
        assert updated.current_phase == CampaignPhase.FUNDRAISING
        assert updated.current_phase_started_at == _hours(4)
        assert updated.phase_progress == 0.0

    def test_full_lifecycle_completes_in_resolution(self):
        state = self.state
        for hours, phase in [
            (4, CampaignPhase.FUNDRAISING),
            (12, CampaignPhase.ACTIVE),
            (22, CampaignPhase.RESOLUTION),
        ]:
            state = self.machine.update_campaign_progress(state, _hours(hours))
            assert state.current_phase == phase
            assert state.status == CampaignStatus.RUNNING

        state = self.machine.update_campaign_progress(state, _hours(26))
        assert state.status == CampaignStatus.COMPLETED
        assert state.current_phase == CampaignPhase.RESOLUTION
        assert state.phase_progress == 1.0
        assert state.completed_at == _hours(26)
        assert self.machine.get_campaign_completion(state) == 100.0

    def test_completion_percentage(self):
        updated = self.machine.update_campaign_progress(self.state, _hours(2))
        assert self.machine.get_campaign_completion(updated) == 2 / 26 * 100

    def test_phase_time_remaining(self):
        updated = self.machine.update_campaign_progress(self.state, _hours(1))
        assert self.machine.get_phase_time_remaining(updated) == 3.0

    def test_non_running_campaign_is_unchanged(self):
        paused = self.machine.pause_campaign(self.state, _hours(1))
        assert self.machine.update_campaign_progress(paused, _hours(10)) is paused


class TestTransitions:
    def setup_method(self):
        self.machine = CampaignPhaseMachine()
        self.state = _make_campaign(self.machine)

    def test_next_phase(self):
        result = self.machine.transition_to_next_phase(self.state, _hours(4))
        assert result.success
        assert result.new_phase == CampaignPhase.FUNDRAISING
        assert result.status == CampaignStatus.RUNNING
        assert result.message == "Transitioned from ANNOUNCEMENT to FUNDRAISING"

    def test_terminal_phase_reports_completion(self):
        state = self.state.model_copy(update={"current_phase": CampaignPhase.RESOLUTION})
        result = self.machine.transition_to_next_phase(state, _hours(26))
        assert result.success
        assert result.new_phase == CampaignPhase.RESOLUTION
        assert result.status == CampaignStatus.COMPLETED

    def test_paused_campaign_cannot_transition(self):
        paused = self.machine.pause_campaign(self.state, _hours(1))
        result = self.machine.transition_to_next_phase(paused, _hours(2))
        assert not result.success
        assert result.message == "Cannot transition: campaign status is PAUSED"


class TestActionGating:
    def setup_method(self):
        self.machine = CampaignPhaseMachine()
        self.state = _make_campaign(self.machine)

    def test_allowed_action(self):
        result = self.machine.validate_action(self.state, "declare_candidacy")
        assert result.allowed
        assert result.reason is None

    def test_disallowed_action_lists_alternatives(self):
        result = self.machine.validate_action(self.state, "conduct_rally")
        assert not result.allowed
        assert result.reason == "Action 'conduct_rally' not permitted during ANNOUNCEMENT phase"
        assert result.allowed_actions == get_allowed_actions(CampaignPhase.ANNOUNCEMENT)

    def test_paused_campaign_rejects_actions(self):
        paused = self.machine.pause_campaign(self.state, _hours(1))
        result = self.machine.validate_action(paused, "declare_candidacy")
        assert not result.allowed
        assert result.reason == "Campaign is PAUSED, not running"

    def test_phase_whitelists(self):
        assert len(get_allowed_actions(CampaignPhase.ANNOUNCEMENT)) == 4
        assert len(get_allowed_actions(CampaignPhase.FUNDRAISING)) == 5
        assert len(get_allowed_actions(CampaignPhase.ACTIVE)) == 7
        assert len(get_allowed_actions(CampaignPhase.RESOLUTION)) == 5

    def test_record_action(self):
        updated = self.machine.record_action(self.state, "declare_candidacy", _hours(1))
        assert len(updated.actions_performed) == 1
        entry = updated.actions_performed[0]
        assert entry.action == "declare_candidacy"
        assert entry.phase == CampaignPhase.ANNOUNCEMENT
        assert self.state.actions_performed == []


class TestPauseResumeAbandon:
    def setup_method(self):
        self.machine = CampaignPhaseMachine()
        self.state = _make_campaign(self.machine)

    def test_pause_neither_grants_nor_costs_progress(self):
        paused = self.machine.pause_campaign(self.state, _hours(1))
        assert paused.status == CampaignStatus.PAUSED

        resumed = self.machine.resume_campaign(paused, _hours(3))
        assert resumed.status == CampaignStatus.RUNNING
        assert resumed.started_at == _hours(2)
        assert resumed.current_phase_started_at == _hours(2)

        updated = self.machine.update_campaign_progress(resumed, _hours(4))
        assert updated.current_phase == CampaignPhase.ANNOUNCEMENT
        assert updated.phase_progress == 0.5

    def test_action_recorded_while_paused_keeps_pause_length(self):
        running = self.machine.update_campaign_progress(self.state, _hours(1))
        paused = self.machine.pause_campaign(running, _hours(1))
        assert paused.paused_at == _hours(1)

        recorded = self.machine.record_action(paused, "declare_candidacy", _hours(3))
        resumed = self.machine.resume_campaign(recorded, _hours(5))
        assert resumed.paused_at is None
        assert resumed.started_at == _hours(4)

        updated = self.machine.update_campaign_progress(resumed, _hours(5))
        assert updated.real_hours_elapsed == 1.0
        assert updated.phase_progress == 0.25

    def test_resume_running_campaign_is_noop(self):
        assert self.machine.resume_campaign(self.state, _hours(1)) is self.state

    def test_abandon(self):
        abandoned = self.machine.abandon_campaign(self.state, _hours(1))
        assert abandoned.status == CampaignStatus.ABANDONED
        assert abandoned.completed_at == _hours(1)
        assert self.machine.get_campaign_completion(abandoned) == 0.0
        assert CampaignPhaseMachine.can_restart_campaign(abandoned)

    def test_abandon_terminal_campaign_is_noop(self):
        abandoned = self.machine.abandon_campaign(self.state, _hours(1))
        assert self.machine.abandon_campaign(abandoned, _hours(2)) is abandoned

    def test_running_campaign_cannot_restart(self):
        assert not CampaignPhaseMachine.can_restart_campaign(self.state)
