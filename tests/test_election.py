"""Tests for Election Resolution."""

import pytest

from campaign_kernel.election.resolution import (
    calculate_momentum_adjustment,
    calculate_state_win_probability,
    resolve_election,
)
from campaign_kernel.models.config import SimulationConfig
from campaign_kernel.models.election import DelegationConfig, StateMomentum, StateOutcome


def _make_outcome(state, margin, electoral_votes=10, house_seats=0, turnout=60.0, volatility=0.0):
    return StateOutcome(
        state=state,
        electoral_votes=electoral_votes,
        house_seats=house_seats,
        turnout=turnout,
        margin=margin,
        volatility=volatility,
    )


class TestMomentumAdjustment:
    def test_capped(self):
        assert calculate_momentum_adjustment(
            StateMomentum(state="PA", a_weekly_change=5, b_weekly_change=0)
        ) == 1.5
        assert calculate_momentum_adjustment(
            StateMomentum(state="PA", a_weekly_change=0, b_weekly_change=5)
        ) == -1.5

    def test_scaled(self):
        assert calculate_momentum_adjustment(
            StateMomentum(state="PA", a_weekly_change=1, b_weekly_change=0)
        ) == 0.5

    def test_absent(self):
        assert calculate_momentum_adjustment(None) == 0.0


class TestStateResolution:
    def test_split_decision_has_no_winner(self):
        result = resolve_election("a", "b", [_make_outcome("PA", 5), _make_outcome("MI", -5)])
        assert result.tallies["a"].electoral_votes == 10
        assert result.tallies["b"].electoral_votes == 10
        assert result.winner is None
        assert result.ties == []
        assert result.recounts == []
        assert result.tallies["a"].popular_vote == 50
        assert result.tallies["a"].senate_votes == 0
        assert result.tallies["b"].senate_votes == 0
        assert result.total_electoral_votes == 20

    def test_tie_splits_votes(self):
        result = resolve_election(
            "a", "b", [_make_outcome("NV", 0.005, electoral_votes=5, house_seats=3)]
        )
        state = result.states[0]
        assert state.winner is None
        assert (state.electoral_votes_a, state.electoral_votes_b) == (2, 3)
        assert (state.house_seats_a, state.house_seats_b) == (1, 2)
        assert state.win_probability == {"a": 0.5, "b": 0.5}
        assert result.ties == ["NV"]
        assert result.recounts == ["NV"]

    def test_recount(self):
        result = resolve_election("a", "b", [_make_outcome("WI", 0.4)])
        assert result.states[0].winner == "a"
        assert result.recounts == ["WI"]
        assert result.ties == []

    def test_momentum_flips_state(self):
        result = resolve_election(
            "a", "b",
            [_make_outcome("AZ", -0.3)],
            momentum=[StateMomentum(state="AZ", a_weekly_change=1, b_weekly_change=0)],
        )
        state = result.states[0]
        assert state.momentum_adjustment == 0.5
        assert state.adjusted_margin == pytest.approx(0.2)
        assert state.winner == "a"

    def test_low_turnout_is_informational(self):
        result = resolve_election("a", "b", [_make_outcome("MS", -8, turnout=30)])
        assert result.low_turnout_states == ["MS"]
        assert result.states[0].winner == "b"

    def test_win_probability(self):
        result = resolve_election("a", "b", [_make_outcome("OH", 10)])
        assert result.states[0].win_probability == {"a": 0.9, "b": 0.1}
        assert calculate_state_win_probability(-10) == pytest.approx(0.9)
        assert calculate_state_win_probability(1, 10) == 0.5


class TestElectionOutcome:
    def test_threshold_wins(self):
        result = resolve_election(
            "a", "b", [_make_outcome("XX", 5, electoral_votes=270, house_seats=20)]
        )
        assert result.winner == "a"
        assert result.tallies["a"].house_votes == 20

    def test_senate_votes_follow_popular_vote(self):
        result = resolve_election(
            "a", "b",
            [_make_outcome("TX", -6, electoral_votes=40)],
            delegation=DelegationConfig(senate_votes_per_player=2),
        )
        assert result.tallies["b"].senate_votes == 2
        assert result.tallies["a"].senate_votes == 0
        assert result.tallies["b"].popular_vote == 53

    def test_custom_threshold(self):
        config = SimulationConfig(electoral_votes_to_win=10)
        result = resolve_election("a", "b", [_make_outcome("PA", 5)], config=config)
        assert result.winner == "a"
