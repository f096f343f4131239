"""Tests for Endorsements."""

from datetime import datetime, timedelta, timezone

import pytest

from campaign_kernel.endorsements.engine import (
    calculate_credibility_transfer,
    calculate_endorsement_impact,
    can_make_endorsement,
    get_endorsement_cooldown_remaining,
    validate_endorsement_request,
)
from campaign_kernel.models.endorsements import Endorsement

NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def _make_endorsement(endorser_id, influence, polling=50.0, reciprocal=False):
    return Endorsement(
        endorser_id=endorser_id,
        endorser_name=endorser_id.title(),
        base_influence=influence,
        endorser_polling=polling,
        endorsed_at=NOW,
        is_reciprocal=reciprocal,
    )


class TestImpact:
    def test_diminishing_returns_ranked_by_influence(self):
        impact = calculate_endorsement_impact(
            [_make_endorsement("small", 3), _make_endorsement("big", 5)], 50
        )
        assert impact.total_boost == 6.8
        assert [c.endorser_id for c in impact.breakdown] == ["big", "small"]
        assert impact.breakdown[1].diminishing_multiplier == 0.6
        assert impact.breakdown[1].effective_boost == 1.8
        assert not impact.reciprocal_bonus_applied
        assert impact.reciprocal_bonus_amount == 0

    def test_reciprocal_bonus(self):
        impact = calculate_endorsement_impact(
            [_make_endorsement("small", 3), _make_endorsement("big", 5, reciprocal=True)], 50
        )
        assert impact.reciprocal_bonus_applied
        assert impact.total_boost == 7.48
        assert impact.reciprocal_bonus_amount == 0.68

    def test_credibility_transfer(self):
        assert calculate_credibility_transfer(60, 50) == pytest.approx(0.2)
        impact = calculate_endorsement_impact(
            [_make_endorsement("a", 3, polling=60), _make_endorsement("b", 2, polling=40)], 50
        )
        assert impact.credibility_transfer == 0

    def test_no_endorsements(self):
        impact = calculate_endorsement_impact([], 50)
        assert impact.total_boost == 0
        assert impact.breakdown == []


class TestCooldown:
    def test_remaining(self):
        last = NOW - timedelta(hours=10)
        assert get_endorsement_cooldown_remaining(last, NOW) == pytest.approx(42)
        assert not can_make_endorsement(last, NOW)

    def test_expired(self):
        last = NOW - timedelta(hours=52)
        assert get_endorsement_cooldown_remaining(last, NOW) == 0
        assert can_make_endorsement(last, NOW)

    def test_never_endorsed(self):
        assert get_endorsement_cooldown_remaining(None, NOW) == 0
        assert can_make_endorsement(None, NOW)


class TestValidation:
    def test_valid(self):
        result = validate_endorsement_request("a", "b", None, NOW)
        assert result.valid
        assert result.errors == []
        assert result.cooldown_hours_remaining is None

    def test_cooldown_message(self):
        result = validate_endorsement_request("a", "b", NOW - timedelta(hours=10), NOW)
        assert not result.valid
        assert result.errors == ["Endorsement cooldown active (42.0 hours remaining)"]
        assert result.cooldown_hours_remaining == pytest.approx(42)

    def test_self_and_inactive(self):
        result = validate_endorsement_request("a", "a", None, NOW, endorser_active=False)
        assert not result.valid
        assert result.errors == [
            "Cannot endorse yourself",
            "Endorser is not an active candidate",
        ]
