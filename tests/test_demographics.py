"""Tests for the Demographics Engine and state reference data."""

import pytest

from campaign_kernel.demographics.engine import (
    build_demographic_group,
    calculate_base_turnout,
    calculate_demographic_appeal,
    calculate_issue_alignment,
    calculate_turnout,
    calculate_vote_share,
    generate_demographic_poll_result,
    get_all_demographic_groups,
    get_base_issue_profile,
    get_position_label,
    parse_demographic_key,
)
from campaign_kernel.demographics.states import (
    get_all_state_codes,
    get_electoral_votes,
    get_house_seats,
    get_state_composition,
    get_swing_states,
)
from campaign_kernel.errors import UnknownDemographicKeyError, UnknownStateError
from campaign_kernel.models.demographics import (
    ALL_DEMOGRAPHIC_KEYS,
    ALL_POLITICAL_ISSUES,
    DemographicClass,
    DemographicGender,
    DemographicRace,
    IssueProfile,
    PoliticalIssue,
    PositionLabel,
    SpecialEffect,
)


def _make_profile(position: float) -> IssueProfile:
    return IssueProfile(
        positions={issue: position for issue in ALL_POLITICAL_ISSUES},
        weights={issue: 0.5 for issue in ALL_POLITICAL_ISSUES},
    )


class TestGroups:
    def test_eighteen_canonical_groups(self):
        assert len(ALL_DEMOGRAPHIC_KEYS) == 18
        groups = get_all_demographic_groups()
        assert [g.key for g in groups] == ALL_DEMOGRAPHIC_KEYS

    def test_parse_multi_word_key(self):
        assert parse_demographic_key("NATIVE_AMERICAN_MIDDLE_CLASS_FEMALE") == (
            DemographicRace.NATIVE_AMERICAN,
            DemographicClass.MIDDLE_CLASS,
            DemographicGender.FEMALE,
        )

    def test_parse_simple_key(self):
        assert parse_demographic_key("WHITE_WEALTHY_MALE") == (
            DemographicRace.WHITE,
            DemographicClass.WEALTHY,
            DemographicGender.MALE,
        )

    def test_unknown_keys_raise(self):
        with pytest.raises(UnknownDemographicKeyError):
            parse_demographic_key("BOGUS")
        with pytest.raises(UnknownDemographicKeyError):
            parse_demographic_key("PURPLE_WEALTHY_MALE")

    def test_label(self):
        assert build_demographic_group("WHITE_WEALTHY_MALE").label == "White Wealthy Men"

    def test_groups_are_cached(self):
        assert build_demographic_group("BLACK_LOWER_CLASS_FEMALE") is build_demographic_group(
            "BLACK_LOWER_CLASS_FEMALE"
        )


class TestIssueProfiles:
    def test_rules_stack_race_class_gender(self):
        profile = get_base_issue_profile(
            DemographicRace.BLACK, DemographicClass.LOWER_CLASS, DemographicGender.FEMALE
        )
        assert profile.positions[PoliticalIssue.HEALTHCARE] == pytest.approx(5.0)
        assert profile.weights[PoliticalIssue.HEALTHCARE] == pytest.approx(1.0)

    def test_wealthy_men_on_taxes(self):
        profile = get_base_issue_profile(
            DemographicRace.WHITE, DemographicClass.WEALTHY, DemographicGender.MALE
        )
        assert profile.positions[PoliticalIssue.TAXES] == pytest.approx(-3.5)

    def test_positions_and_weights_in_range(self):
        for group in get_all_demographic_groups():
            profile = group.base_issue_profile
            assert all(-5 <= p <= 5 for p in profile.positions.values())
            assert all(0 <= w <= 1 for w in profile.weights.values())
            assert -5 <= group.social_position <= 5
            assert -5 <= group.economic_position <= 5


class TestTurnout:
    def test_base_turnout(self):
        assert calculate_base_turnout(
            DemographicRace.WHITE, DemographicClass.WEALTHY
        ) == pytest.approx(0.84)
        assert calculate_base_turnout(
            DemographicRace.HISPANIC, DemographicClass.LOWER_CLASS
        ) == pytest.approx(0.3825)

    def test_enthusiasm_scales_turnout(self):
        group = build_demographic_group("WHITE_MIDDLE_CLASS_MALE")
        low = calculate_turnout(group, enthusiasm=0.0)
        high = calculate_turnout(group, enthusiasm=1.0)
        assert low == pytest.approx(group.base_turnout * 0.8)
        assert high == pytest.approx(min(1.0, group.base_turnout * 1.2))


class TestPositionLabels:
    def test_labels(self):
        assert get_position_label(-4.5) == PositionLabel.EXTREMELY_LEFT
        assert get_position_label(-2) == PositionLabel.LEFT_WING
        assert get_position_label(-0.75) == PositionLabel.CENTER_LEFT
        assert get_position_label(0.0) == PositionLabel.CENTRIST
        assert get_position_label(0.5) == PositionLabel.CENTRIST
        assert get_position_label(1.5) == PositionLabel.SOMEWHAT_RIGHT
        assert get_position_label(4.5) == PositionLabel.EXTREMELY_RIGHT


class TestAppeal:
    def test_identical_profiles_fully_aligned(self):
        profile = _make_profile(2.0)
        assert calculate_issue_alignment(profile, profile).overall_alignment == 100

    def test_opposite_extremes_not_aligned(self):
        result = calculate_issue_alignment(_make_profile(5.0), _make_profile(-5.0))
        assert result.overall_alignment == 0
        assert len(result.issue_breakdown) == len(ALL_POLITICAL_ISSUES)

    def test_appeal_in_range(self):
        group = build_demographic_group("HISPANIC_MIDDLE_CLASS_FEMALE")
        appeal = calculate_demographic_appeal("cand", _make_profile(1.0), 70, group)
        assert appeal.demographic_key == group.key
        assert 0 <= appeal.final_appeal <= 100

    def test_special_effects_raise_appeal(self):
        group = build_demographic_group("HISPANIC_MIDDLE_CLASS_FEMALE")
        plain = calculate_demographic_appeal("cand", _make_profile(1.0), 50, group)
        boosted = calculate_demographic_appeal(
            "cand", _make_profile(1.0), 50, group,
            [SpecialEffect(source="endorsement", modifier=10)],
        )
        assert boosted.special_effect_total == 10
        assert boosted.final_appeal > plain.final_appeal

    def test_vote_share(self):
        assert calculate_vote_share(10, 60, 50) == pytest.approx(3.0)

    def test_poll_result(self):
        group = build_demographic_group("WHITE_WEALTHY_MALE")
        appeal = calculate_demographic_appeal("cand", _make_profile(-1.0), 60, group)
        result = generate_demographic_poll_result(group, 10.0, appeal, 0.6)
        assert result.estimated_turnout == 60
        assert result.vote_share == pytest.approx(
            10 * 60 * appeal.final_appeal / 10000, abs=0.01
        )


class TestStates:
    def test_every_state_and_dc(self):
        assert len(get_all_state_codes()) == 51

    def test_electoral_college_totals(self):
        codes = get_all_state_codes()
        assert sum(get_electoral_votes(c) for c in codes) == 538
        assert sum(get_house_seats(c) for c in codes) == 436

    def test_compositions_sum_to_100(self):
        for code in get_all_state_codes():
            composition = get_state_composition(code).composition
            assert set(composition) == set(ALL_DEMOGRAPHIC_KEYS)
            assert sum(composition.values()) == pytest.approx(100, abs=0.01)

    def test_lookup_is_case_insensitive(self):
        assert get_state_composition("pa").state_code == "PA"
        assert get_electoral_votes("pa") == 19

    def test_unknown_state_raises(self):
        with pytest.raises(UnknownStateError):
            get_state_composition("ZZ")
        with pytest.raises(UnknownStateError):
            get_electoral_votes("ZZ")

    def test_swing_states(self):
        swing = get_swing_states()
        assert len(swing) == 12
        assert "PA" in swing
