"""Tests for the Polling Engine."""

from datetime import datetime, timedelta, timezone

import pytest

from campaign_kernel.clock.timescale import to_epoch_ms
from campaign_kernel.models.config import SimulationConfig
from campaign_kernel.models.polling import (
    DemographicSegment,
    PollCandidate,
    PollType,
    TrendDirection,
)
from campaign_kernel.polling.engine import (
    SEGMENT_VARIANCE,
    PollingEngine,
    apply_volatility_dampening,
    build_polling_trend,
    calculate_margin_of_error,
    calculate_state_weights,
    calculate_volatility_dampening,
    generate_demographic_breakdown,
)

NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def _make_candidate(candidate_id="cand", base_support=50.0, hours_offline=0.0):
    return PollCandidate(
        id=candidate_id,
        name=candidate_id.title(),
        base_support=base_support,
        hours_offline=hours_offline,
    )


class TestMarginOfError:
    def test_canonical_sample(self):
        assert calculate_margin_of_error(PollType.NATIONAL) == 2.8
        assert calculate_margin_of_error(PollType.NATIONAL, 1200) == 2.8

    def test_custom_sample(self):
        assert calculate_margin_of_error(PollType.NATIONAL, 400) == pytest.approx(5.0)

    def test_methodology_factor(self):
        assert calculate_margin_of_error(PollType.STATE, None, 1.5) == pytest.approx(5.7)


class TestDampening:
    def test_thresholds(self):
        assert calculate_volatility_dampening(0.5) == 1.0
        assert calculate_volatility_dampening(1) == 0.75
        assert calculate_volatility_dampening(4) == 0.5
        assert calculate_volatility_dampening(12) == 0.25
        assert calculate_volatility_dampening(100) == 0.25

    def test_apply(self):
        assert apply_volatility_dampening(8.0, 2) == 6.0


class TestBreakdown:
    def test_segments_within_variance(self):
        breakdown = generate_demographic_breakdown(50.0, 123456)
        assert len(breakdown) == 15
        for segment, value in breakdown.items():
            _, variance = SEGMENT_VARIANCE[segment]
            assert 50 - variance - 0.05 <= value <= 50 + variance + 0.05

    def test_clamped(self):
        breakdown = generate_demographic_breakdown(99.0, 42)
        assert all(0 <= value <= 100 for value in breakdown.values())

    def test_deterministic(self):
        assert generate_demographic_breakdown(40.0, 7) == generate_demographic_breakdown(40.0, 7)


class TestConductPoll:
    def setup_method(self):
        self.engine = PollingEngine()

    def test_first_poll(self):
        poll = self.engine.conduct_poll(
            PollType.NATIONAL, "NATIONAL", [_make_candidate(base_support=45)], NOW
        )
        assert poll.poll_id == f"poll-{to_epoch_ms(NOW)}-NATIONAL"
        assert poll.sample_size == 1200
        assert poll.margin_of_error == 2.8
        assert poll.reliability == 0.72
        assert poll.candidates[0].support == 45
        assert poll.candidates[0].trend_delta == 0
        assert poll.undecided == 55
        assert DemographicSegment.RURAL in poll.candidates[0].demographics

    def test_offline_player_moves_slowly(self):
        previous = self.engine.conduct_poll(
            PollType.STATE, "PA", [_make_candidate(base_support=40)], NOW
        )
        poll = self.engine.conduct_poll(
            PollType.STATE, "PA",
            [_make_candidate(base_support=50, hours_offline=5)],
            NOW + timedelta(minutes=25),
            previous=previous,
        )
        assert poll.candidates[0].support == 45.0
        assert poll.candidates[0].trend_delta == 5.0

    def test_online_player_moves_fully(self):
        previous = self.engine.conduct_poll(
            PollType.STATE, "PA", [_make_candidate(base_support=40)], NOW
        )
        poll = self.engine.conduct_poll(
            PollType.STATE, "PA", [_make_candidate(base_support=50)],
            NOW + timedelta(minutes=25), previous=previous,
        )
        assert poll.candidates[0].support == 50.0


class TestTrends:
    def setup_method(self):
        self.engine = PollingEngine()

    def _make_series(self, values, geography="NATIONAL"):
        return [
            self.engine.conduct_poll(
                PollType.NATIONAL, geography, [_make_candidate(base_support=v)],
                NOW + timedelta(hours=i),
            )
            for i, v in enumerate(values)
        ]

    def test_rising(self):
        trend = build_polling_trend(self._make_series([40, 42, 44]), "cand", "NATIONAL")
        assert trend.trend_direction == TrendDirection.RISING
        assert trend.momentum == 2
        assert trend.peak_support == 44
        assert trend.low_support == 40
        assert len(trend.points) == 3

    def test_stable(self):
        trend = build_polling_trend(self._make_series([40, 40.4, 40.2]), "cand", "NATIONAL")
        assert trend.trend_direction == TrendDirection.STABLE

    def test_other_geography_ignored(self):
        trend = build_polling_trend(self._make_series([40, 42], "PA"), "cand", "NATIONAL")
        assert trend.points == []
        assert trend.trend_direction == TrendDirection.STABLE


class TestStateWeights:
    def test_sorted_by_weight(self):
        weights = calculate_state_weights({"CA": 0.1, "PA": 0.9})
        assert [w.state_code for w in weights] == ["PA", "CA"]
        assert weights[0].weight == pytest.approx(17.1)
        assert weights[1].weight == pytest.approx(5.4)


class TestCadence:
    def test_poll_interval(self):
        engine = PollingEngine()
        assert engine.get_next_poll_time(NOW) == NOW + timedelta(minutes=25)
        assert not engine.is_poll_due(NOW, NOW + timedelta(minutes=24))
        assert engine.is_poll_due(NOW, NOW + timedelta(minutes=25))

    def test_custom_interval(self):
        engine = PollingEngine(SimulationConfig(poll_interval_minutes=5))
        assert engine.is_poll_due(NOW, NOW + timedelta(minutes=5))
