"""
State reference data: electoral votes, House delegations, swing states and
per-state demographic composition.

Composition tables are built from race, class and gender splits and checked
on import: every state's 18 population shares must sum to 100.
"""

from typing import Dict, List, Tuple

from campaign_kernel.clock.seeded import round_half_up
from campaign_kernel.errors import CampaignDataError, UnknownStateError
from campaign_kernel.models.demographics import ALL_DEMOGRAPHIC_KEYS, StateDemographics

ELECTORAL_VOTES: Dict[str, int] = {
    "CA": 54, "TX": 40, "FL": 30, "NY": 28, "PA": 19, "IL": 19, "OH": 17,
    "GA": 16, "NC": 16, "MI": 15, "NJ": 14, "VA": 13, "WA": 12, "AZ": 11,
    "MA": 11, "TN": 11, "IN": 11, "MD": 10, "MN": 10, "MO": 10, "WI": 10,
    "CO": 10, "SC": 9, "AL": 9, "LA": 8, "KY": 8, "OR": 8, "OK": 7,
    "CT": 7, "UT": 6, "IA": 6, "NV": 6, "AR": 6, "MS": 6, "KS": 6,
    "NM": 5, "NE": 5, "WV": 4, "ID": 4, "HI": 4, "NH": 4, "ME": 4,
    "MT": 4, "RI": 4, "DE": 3, "SD": 3, "ND": 3, "AK": 3, "VT": 3,
    "WY": 3, "DC": 3,
}

HOUSE_SEATS: Dict[str, int] = {
    "AL": 7, "AK": 1, "AZ": 9, "AR": 4, "CA": 52, "CO": 8, "CT": 5,
    "DE": 1, "FL": 28, "GA": 14, "HI": 2, "ID": 2, "IL": 17, "IN": 9,
    "IA": 4, "KS": 4, "KY": 6, "LA": 6, "ME": 2, "MD": 8, "MA": 9,
    "MI": 13, "MN": 8, "MS": 4, "MO": 8, "MT": 2, "NE": 3, "NV": 4,
    "NH": 2, "NJ": 12, "NM": 3, "NY": 26, "NC": 14, "ND": 1, "OH": 15,
    "OK": 5, "OR": 6, "PA": 17, "RI": 2, "SC": 7, "SD": 1, "TN": 9,
    "TX": 38, "UT": 4, "VT": 1, "VA": 11, "WA": 10, "WV": 2, "WI": 8,
    "WY": 1, "DC": 1,
}

STATE_NAMES: Dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut",
    "DE": "Delaware", "FL": "Florida", "GA": "Georgia", "HI": "Hawaii",
    "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine",
    "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan",
    "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico",
    "NY": "New York", "NC": "North Carolina", "ND": "North Dakota",
    "OH": "Ohio", "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania",
    "RI": "Rhode Island", "SC": "South Carolina", "SD": "South Dakota",
    "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming", "DC": "District of Columbia",
}

SWING_STATES: List[str] = [
    "PA", "MI", "WI", "AZ", "GA", "NV", "NC", "FL", "OH", "IA", "TX", "MN",
]

REGIONS: Dict[str, List[str]] = {
    "NORTHEAST": ["CT", "DE", "ME", "MD", "MA", "NH", "NJ", "RI", "VT", "DC"],
    "SOUTH": ["AL", "AR", "KY", "LA", "MS", "OK", "SC", "TN", "VA", "WV"],
    "MIDWEST": ["IL", "IN", "KS", "MO", "NE", "ND", "SD"],
    "WEST": ["AK", "CO", "HI", "ID", "MT", "NM", "OR", "UT", "WA", "WY"],
}

# (white, black, hispanic) race split, (wealthy, middle, lower) class split,
# turnout modifier
Profile = Tuple[Tuple[float, float, float], Tuple[float, float, float], float]

REGIONAL_PROFILES: Dict[str, Profile] = {
    "NORTHEAST": ((68, 16, 16), (22, 56, 22), 1.05),
    "SOUTH": ((66, 26, 8), (16, 54, 30), 0.95),
    "MIDWEST": ((80, 11, 9), (18, 60, 22), 1.0),
    "WEST": ((72, 4, 24), (20, 58, 22), 1.0),
}

STATE_PROFILES: Dict[str, Profile] = {
    "CA": ((45, 7, 48), (24, 50, 26), 0.95),
    "TX": ((47, 13, 40), (18, 52, 30), 0.9),
    "FL": ((60, 16, 24), (18, 54, 28), 1.0),
    "NY": ((62, 18, 20), (24, 50, 26), 0.95),
    "PA": ((80, 11, 9), (18, 58, 24), 1.05),
    "MI": ((79, 15, 6), (16, 58, 26), 1.1),
    "WI": ((86, 6, 8), (18, 62, 20), 1.15),
    "AZ": ((62, 5, 33), (18, 56, 26), 1.0),
    "GA": ((58, 33, 9), (18, 54, 28), 1.0),
    "NV": ((54, 10, 36), (16, 56, 28), 0.95),
    "NC": ((68, 22, 10), (17, 56, 27), 1.0),
    "OH": ((82, 13, 5), (16, 58, 26), 1.0),
    "IA": ((90, 4, 6), (17, 62, 21), 1.05),
    "MN": ((87, 7, 6), (22, 60, 18), 1.2),
}

GENDER_SPLIT: Dict[str, float] = {"MALE": 49.0, "FEMALE": 51.0}

_RACE_ORDER = ("WHITE", "BLACK", "HISPANIC")
_CLASS_ORDER = ("WEALTHY", "MIDDLE_CLASS", "LOWER_CLASS")


def _profile_for(state_code: str) -> Profile:
    if state_code in STATE_PROFILES:
        return STATE_PROFILES[state_code]
    for region, members in REGIONS.items():
        if state_code in members:
            return REGIONAL_PROFILES[region]
    raise CampaignDataError(f"No demographic profile for state {state_code}")


def _build_composition(profile: Profile) -> Dict[str, float]:
    """Expand race x class x gender splits into the 18 population shares."""
    race_split, class_split, _ = profile
    race_share = dict(zip(_RACE_ORDER, race_split))
    class_share = dict(zip(_CLASS_ORDER, class_split))
    race_total = sum(race_split)
    class_total = sum(class_split)

    composition = {}
    for race in _RACE_ORDER:
        for demo_class in _CLASS_ORDER:
            for gender, gender_share in GENDER_SPLIT.items():
                key = f"{race}_{demo_class}_{gender}"
                share = (
                    race_share[race] / race_total
                    * class_share[demo_class] / class_total
                    * gender_share
                )
                composition[key] = round_half_up(share, 2)

    # Rounding drift lands on the largest group
    drift = round_half_up(100.0 - sum(composition.values()), 2)
    largest = max(composition, key=composition.get)
    composition[largest] = round_half_up(composition[largest] + drift, 2)
    return composition


def _validate_composition(state_code: str, composition: Dict[str, float]) -> None:
    if set(composition) != set(ALL_DEMOGRAPHIC_KEYS):
        raise CampaignDataError(
            f"Composition for {state_code} does not cover every demographic key"
        )
    total = sum(composition.values())
    if abs(total - 100.0) > 0.01:
        raise CampaignDataError(
            f"Composition for {state_code} sums to {total:.2f}, expected 100"
        )


def _load_state_demographics() -> Dict[str, StateDemographics]:
    tables = {}
    for state_code, name in STATE_NAMES.items():
        profile = _profile_for(state_code)
        composition = _build_composition(profile)
        _validate_composition(state_code, composition)
        tables[state_code] = StateDemographics(
            state_code=state_code,
            state_name=name,
            composition=composition,
            turnout_modifier=profile[2],
        )
    return tables


STATE_DEMOGRAPHICS: Dict[str, StateDemographics] = _load_state_demographics()


def _normalize(state_code: str) -> str:
    return state_code.strip().upper()


def get_state_composition(state_code: str) -> StateDemographics:
    """Demographic composition for a state; unknown codes raise."""
    code = _normalize(state_code)
    if code not in STATE_DEMOGRAPHICS:
        raise UnknownStateError(f"Unknown state: {state_code}")
    return STATE_DEMOGRAPHICS[code]


def get_electoral_votes(state_code: str) -> int:
    code = _normalize(state_code)
    if code not in ELECTORAL_VOTES:
        raise UnknownStateError(f"Unknown state: {state_code}")
    return ELECTORAL_VOTES[code]


def get_house_seats(state_code: str) -> int:
    code = _normalize(state_code)
    if code not in HOUSE_SEATS:
        raise UnknownStateError(f"Unknown state: {state_code}")
    return HOUSE_SEATS[code]


def get_swing_states() -> List[str]:
    return list(SWING_STATES)


def get_all_state_codes() -> List[str]:
    return list(STATE_NAMES)
