"""Tests for the action catalogue and Action Engine."""

from datetime import datetime, timedelta, timezone

import pytest

from campaign_kernel.actions.catalog import (
    ACTION_BASE_COSTS,
    calculate_final_cost,
    describe_action,
    get_action_catalog,
    get_action_category,
    get_action_display_name,
    parse_action_type,
)
from campaign_kernel.actions.engine import (
    BACKFIRE_REASONS,
    ActionEngine,
    execute_action,
    generate_action_seed,
    is_phase_allowed,
)
from campaign_kernel.clock.timescale import to_epoch_ms
from campaign_kernel.errors import UnknownActionTypeError
from campaign_kernel.models.actions import (
    ActionCategory,
    ActionIntensity,
    ActionResultStatus,
    ActionType,
    PlayerAction,
)
from campaign_kernel.models.campaign import CampaignPhase

UTC = timezone.utc
NOW = datetime(2026, 3, 4, 15, 30, tzinfo=UTC)    # A Wednesday


def _make_action(
    action_type: ActionType = ActionType.TV_AD_NATIONAL,
    seed: str = "s1",
    intensity: ActionIntensity = ActionIntensity.STANDARD,
    target_states=None,
    target_demographics=None,
) -> PlayerAction:
    cost = calculate_final_cost(action_type, intensity)
    return PlayerAction(
        id=f"action-{seed}",
        campaign_id="campaign_1",
        player_id="player_1",
        action_type=action_type,
        intensity=intensity,
        status=ActionResultStatus.IN_PROGRESS,
        target_states=target_states or [],
        target_demographics=target_demographics or [],
        initiated_at=NOW,
        completes_at=NOW + timedelta(hours=cost.time_hours),
        final_cost=cost,
        seed=seed,
    )


class TestCatalog:
    def test_standard_cost(self):
        cost = calculate_final_cost(ActionType.TV_AD_NATIONAL, ActionIntensity.STANDARD)
        assert cost.money == 500000
        assert cost.action_points == 3
        assert cost.time_hours == 4

    def test_intensity_scales_cost(self):
        cost = calculate_final_cost(ActionType.TV_AD_NATIONAL, ActionIntensity.HIGH)
        assert cost.money == 750000
        assert cost.action_points == 5
        assert cost.time_hours == 6

    def test_action_points_never_below_one(self):
        cost = calculate_final_cost(ActionType.DIGITAL_AD, ActionIntensity.MINIMAL)
        assert cost.action_points == 1

    def test_every_type_has_a_cost_and_category(self):
        for action_type in ActionType:
            assert action_type in ACTION_BASE_COSTS
            assert isinstance(get_action_category(action_type), ActionCategory)

    def test_unknown_action_type_fails_fast(self):
        with pytest.raises(UnknownActionTypeError):
            parse_action_type("SKYWRITING")

    def test_describe_action(self):
        entry = describe_action("RALLY")
        assert entry.display_name == "Campaign Rally"
        assert entry.category == ActionCategory.GROUND_GAME
        assert entry.category_name == "Ground Game"
        assert entry.base_cost.money == 50000
        assert entry.cooldown_hours == 12
        assert get_action_display_name(ActionType.OP_ED) == "Op-Ed Publication"

    def test_catalog_covers_every_type(self):
        catalog = get_action_catalog()
        assert [entry.action_type for entry in catalog] == list(ActionType)
        assert len(catalog) == 31
        assert all(entry.display_name for entry in catalog)


class TestPhaseGating:
    def test_active_permits_everything(self):
        for action_type in ActionType:
            assert is_phase_allowed(action_type, CampaignPhase.ACTIVE)

    def test_announcement_permits_donor_calls_only_via_mapping(self):
        assert is_phase_allowed(ActionType.DONOR_CALL, CampaignPhase.ANNOUNCEMENT)
        assert not is_phase_allowed(ActionType.TV_AD_NATIONAL, CampaignPhase.ANNOUNCEMENT)

    def test_resolution_permits_gotv(self):
        assert is_phase_allowed(ActionType.GOTV_OPERATION, CampaignPhase.RESOLUTION)
        assert is_phase_allowed(ActionType.RALLY, CampaignPhase.RESOLUTION)
        assert not is_phase_allowed(ActionType.OP_ED, CampaignPhase.RESOLUTION)


class TestExecution:
    def test_same_seed_same_result(self):
        first = execute_action(_make_action(seed="s1"))
        second = execute_action(_make_action(seed="s1"))
        assert first.polling_shift == second.polling_shift
        assert first.reputation_change == second.reputation_change
        assert first.did_backfire == second.did_backfire
        assert first == second

    def test_engine_delegates_to_pure_function(self):
        action = _make_action(seed="s1")
        assert ActionEngine().execute_action(action) == execute_action(action)

    def test_result_shape(self):
        action = _make_action(seed="s1")
        result = execute_action(action)
        assert result.timestamp == action.completes_at
        assert result.calculation_details.startswith("Action: TV_AD_NATIONAL @ STANDARD")
        assert result.funds_raised == 0
        assert result.demographic_effects is None
        assert result.state_effects is None

    def test_targeting_produces_effects(self):
        action = _make_action(
            seed="targeted",
            target_states=["PA", "MI"],
            target_demographics=["WHITE_MIDDLE_CLASS_FEMALE"],
        )
        result = execute_action(action)
        assert set(result.state_effects) == {"PA", "MI"}
        assert result.state_effects["PA"] == pytest.approx(result.polling_shift * 1.3, abs=0.02)
        assert result.demographic_effects["WHITE_MIDDLE_CLASS_FEMALE"] == pytest.approx(
            result.polling_shift * 1.5, abs=0.02
        )

    def test_backfire_reshapes_effects(self):
        results = [
            execute_action(_make_action(ActionType.ATTACK_AD, seed=f"attack-{i}"))
            for i in range(200)
        ]
        backfired = [r for r in results if r.did_backfire]
        assert backfired
        for result in backfired:
            assert result.status == ActionResultStatus.BACKFIRED
            assert result.polling_shift <= 0
            assert result.reputation_change <= 0
            assert not result.endorsement_triggered
            assert result.backfire_reason in BACKFIRE_REASONS[ActionCategory.OPPOSITION]
            assert "BACKFIRE!" in result.calculation_details
        for result in results:
            if result.scandal_triggered:
                assert result.did_backfire

    def test_types_without_backfire_chance_never_backfire(self):
        for i in range(50):
            result = execute_action(_make_action(ActionType.DONOR_CALL, seed=f"call-{i}"))
            assert not result.did_backfire
            assert result.status == ActionResultStatus.COMPLETED
            assert result.funds_raised >= 0
            assert result.new_donors >= 0

    def test_endorsement_announcement_always_triggers(self):
        result = execute_action(
            _make_action(ActionType.ENDORSEMENT_ANNOUNCEMENT, seed="endorse")
        )
        assert result.endorsement_triggered

    def test_non_media_actions_have_no_media_boost(self):
        result = execute_action(_make_action(ActionType.CANVASSING, seed="door"))
        assert result.media_boost == 0


class TestCreation:
    def setup_method(self):
        self.engine = ActionEngine()

    def test_immediate_action(self):
        action = self.engine.create_player_action(
            "campaign_1", "player_1", ActionType.TV_AD_NATIONAL, NOW
        )
        assert action.status == ActionResultStatus.IN_PROGRESS
        assert action.completes_at == NOW + timedelta(hours=4)
        assert action.seed == f"action-campaign_1-TV_AD_NATIONAL-{to_epoch_ms(NOW)}"
        assert action.seed == generate_action_seed("campaign_1", ActionType.TV_AD_NATIONAL, NOW)
        assert action.id.startswith(f"action-campaign_1-{to_epoch_ms(NOW)}-")

    def test_scheduled_action(self):
        later = NOW + timedelta(hours=2)
        action = self.engine.create_player_action(
            "campaign_1", "player_1", ActionType.RALLY, NOW, scheduled_for=later
        )
        assert action.status == ActionResultStatus.PENDING
        assert action.scheduled_for == later
        assert action.completes_at == later + timedelta(hours=4)

    def test_ids_unique_seeds_deterministic(self):
        a = self.engine.create_player_action("c", "p", ActionType.RALLY, NOW)
        b = self.engine.create_player_action("c", "p", ActionType.RALLY, NOW)
        assert a.id != b.id
        assert a.seed == b.seed


class TestEligibility:
    def setup_method(self):
        self.engine = ActionEngine()
        self.queue = self.engine.create_action_queue("campaign_1", NOW)

    def test_eligible(self):
        result = self.engine.validate_eligibility(
            ActionType.RALLY, CampaignPhase.ACTIVE, self.queue, 1_000_000, NOW
        )
        assert result.valid
        assert result.errors == []

    def test_wrong_phase(self):
        result = self.engine.validate_eligibility(
            ActionType.TV_AD_NATIONAL, CampaignPhase.ANNOUNCEMENT, self.queue, 10_000_000, NOW
        )
        assert not result.valid
        assert "Action TV_AD_NATIONAL not allowed in ANNOUNCEMENT phase" in result.errors

    def test_insufficient_funds_and_warning(self):
        result = self.engine.validate_eligibility(
            ActionType.TV_AD_NATIONAL, CampaignPhase.ACTIVE, self.queue, 100_000, NOW
        )
        assert "Insufficient funds: need $500,000, have $100,000" in result.errors
        assert "This action will use more than 50% of your funds" in result.warnings

    def test_insufficient_action_points(self):
        queue = self.queue.model_copy(update={"action_points_remaining": 2})
        result = self.engine.validate_eligibility(
            ActionType.TV_AD_NATIONAL, CampaignPhase.ACTIVE, queue, 10_000_000, NOW
        )
        assert result.errors == ["Insufficient action points: need 3, have 2"]

    def test_cooldown(self):
        action = _make_action(ActionType.TV_AD_NATIONAL)
        queue = self.engine.update_queue_after_action(self.queue, action, NOW)
        result = self.engine.validate_eligibility(
            ActionType.TV_AD_NATIONAL, CampaignPhase.ACTIVE, queue, 10_000_000, NOW
        )
        assert "Action on cooldown: 8h remaining" in result.errors

    def test_weekly_limit(self):
        queue = self.queue.model_copy(update={"weekly_usage": {ActionType.RALLY: 3}})
        result = self.engine.validate_eligibility(
            ActionType.RALLY, CampaignPhase.ACTIVE, queue, 10_000_000, NOW
        )
        assert result.errors == ["Weekly limit reached: 3 RALLY per week"]

    def test_errors_are_collected(self):
        queue = self.queue.model_copy(update={"action_points_remaining": 0})
        result = self.engine.validate_eligibility(
            ActionType.TV_AD_NATIONAL, CampaignPhase.ANNOUNCEMENT, queue, 0, NOW
        )
        assert len(result.errors) == 3

    def test_high_backfire_warning(self):
        result = self.engine.validate_eligibility(
            ActionType.ATTACK_AD, CampaignPhase.ACTIVE, self.queue, 10_000_000, NOW
        )
        assert result.valid
        assert "High backfire risk: 25% chance" in result.warnings


class TestQueue:
    def setup_method(self):
        self.engine = ActionEngine()
        self.queue = self.engine.create_action_queue("campaign_1", NOW)

    def test_new_queue(self):
        assert self.queue.action_points_remaining == 10
        assert self.queue.action_points_max == 10
        assert self.queue.action_points_reset_at == datetime(2026, 3, 5, tzinfo=UTC)
        assert self.queue.week_started_at == datetime(2026, 3, 1, tzinfo=UTC)

    def test_update_after_action(self):
        action = _make_action(ActionType.TV_AD_NATIONAL)
        updated = self.engine.update_queue_after_action(self.queue, action, NOW)
        assert updated.action_points_remaining == 7
        assert updated.cooldowns[ActionType.TV_AD_NATIONAL] == NOW + timedelta(hours=8)
        assert updated.weekly_usage == {ActionType.TV_AD_NATIONAL: 1}
        assert self.queue.action_points_remaining == 10
        assert self.queue.weekly_usage == {}

    def test_action_points_never_negative(self):
        queue = self.queue.model_copy(update={"action_points_remaining": 2})
        updated = self.engine.update_queue_after_action(
            queue, _make_action(ActionType.TV_AD_NATIONAL), NOW
        )
        assert updated.action_points_remaining == 0

    def test_weekly_usage_resets_on_new_week(self):
        action = _make_action(ActionType.RALLY)
        queue = self.engine.update_queue_after_action(self.queue, action, NOW)
        monday = datetime(2026, 3, 9, 10, 0, tzinfo=UTC)
        queue = self.engine.update_queue_after_action(
            queue, _make_action(ActionType.DONOR_CALL), monday
        )
        assert queue.weekly_usage == {ActionType.DONOR_CALL: 1}
        assert queue.week_started_at == datetime(2026, 3, 8, tzinfo=UTC)

    def test_daily_reset(self):
        queue = self.queue.model_copy(update={"action_points_remaining": 1})
        before = datetime(2026, 3, 4, 23, 59, tzinfo=UTC)
        assert self.engine.check_and_reset_action_points(queue, before) is queue

        midnight = datetime(2026, 3, 5, tzinfo=UTC)
        reset = self.engine.check_and_reset_action_points(queue, midnight)
        assert reset.action_points_remaining == 10
        assert reset.action_points_reset_at == datetime(2026, 3, 6, tzinfo=UTC)

    def test_pending_actions_start_when_scheduled(self):
        later = NOW + timedelta(hours=2)
        action = self.engine.create_player_action(
            "campaign_1", "player_1", ActionType.RALLY, NOW, scheduled_for=later
        )
        queue = self.engine.enqueue_action(self.queue, action)
        assert len(queue.pending) == 1

        queue, started = self.engine.process_pending_actions(queue, NOW + timedelta(hours=1))
        assert started == []
        assert len(queue.pending) == 1

        queue, started = self.engine.process_pending_actions(queue, later)
        assert len(started) == 1
        assert started[0].status == ActionResultStatus.IN_PROGRESS
        assert queue.pending == []
        assert len(queue.in_progress) == 1

    def test_completed_actions_are_executed(self):
        action = self.engine.create_player_action(
            "campaign_1", "player_1", ActionType.TV_AD_NATIONAL, NOW
        )
        queue = self.engine.enqueue_action(self.queue, action)

        queue, completed = self.engine.process_completed_actions(queue, NOW + timedelta(hours=3))
        assert completed == []

        done_at = NOW + timedelta(hours=4)
        queue, completed = self.engine.process_completed_actions(queue, done_at)
        assert queue.in_progress == []
        assert len(completed) == 1
        finished = completed[0]
        assert finished.result is not None
        assert finished.completed_at == done_at
        assert finished.status in (ActionResultStatus.COMPLETED, ActionResultStatus.BACKFIRED)

    def test_time_until_reset(self):
        assert ActionEngine.get_time_until_reset(self.queue, NOW) == "8h 30m"
        late = datetime(2026, 3, 4, 23, 45, tzinfo=UTC)
        assert ActionEngine.get_time_until_reset(self.queue, late) == "15m"
        after = datetime(2026, 3, 5, 0, 1, tzinfo=UTC)
        assert ActionEngine.get_time_until_reset(self.queue, after) == "Now"

    def test_available_actions(self):
        available = self.engine.get_available_actions(
            CampaignPhase.ANNOUNCEMENT, self.queue, NOW
        )
        assert ActionType.DONOR_CALL in available
        assert ActionType.TV_AD_NATIONAL not in available

        queue = self.engine.update_queue_after_action(
            self.queue, _make_action(ActionType.DONOR_CALL), NOW
        )
        available = self.engine.get_available_actions(CampaignPhase.ANNOUNCEMENT, queue, NOW)
        assert ActionType.DONOR_CALL not in available

    def test_available_actions_respect_funds(self):
        available = self.engine.get_available_actions(
            CampaignPhase.ACTIVE, self.queue, NOW, funds=10_000
        )
        assert ActionType.DONOR_CALL in available
        assert ActionType.TV_AD_NATIONAL not in available

    def test_estimate_queued_impact(self):
        queue = self.engine.enqueue_action(self.queue, _make_action(ActionType.TV_AD_NATIONAL))
        queue = self.engine.enqueue_action(queue, _make_action(ActionType.FUNDRAISING_EVENT))
        estimate = ActionEngine.estimate_queued_impact(queue)
        assert estimate.estimated_polling_shift == 1.5
        assert estimate.estimated_funds_raised == 150000
        assert estimate.total_cost == 525000
        assert estimate.total_action_points == 5
