"""
Action catalogue: static reference tables for every campaign action type.

Costs are quoted at STANDARD intensity; intensity multipliers scale money,
action points and duration. Cooldowns are in real hours.
"""

from typing import Dict, List, Union

from campaign_kernel.clock.seeded import round_int
from campaign_kernel.errors import UnknownActionTypeError
from campaign_kernel.models.actions import (
    ActionCatalogEntry,
    ActionCategory,
    ActionCost,
    ActionIntensity,
    ActionType,
)

DEFAULT_ACTION_POINTS_PER_DAY = 10

INTENSITY_COST_MULTIPLIERS: Dict[ActionIntensity, float] = {
    ActionIntensity.MINIMAL: 0.5,
    ActionIntensity.LOW: 0.75,
    ActionIntensity.STANDARD: 1.0,
    ActionIntensity.HIGH: 1.5,
    ActionIntensity.MAXIMUM: 2.0,
}

INTENSITY_EFFECT_MULTIPLIERS: Dict[ActionIntensity, float] = {
    ActionIntensity.MINIMAL: 0.4,
    ActionIntensity.LOW: 0.6,
    ActionIntensity.STANDARD: 1.0,
    ActionIntensity.HIGH: 1.3,
    ActionIntensity.MAXIMUM: 1.5,
}

CATEGORY_ACTIONS: Dict[ActionCategory, List[ActionType]] = {
    ActionCategory.ADVERTISING: [
        ActionType.TV_AD_NATIONAL,
        ActionType.TV_AD_STATE,
        ActionType.RADIO_AD,
        ActionType.DIGITAL_AD,
        ActionType.BILLBOARD,
        ActionType.MAILER,
    ],
    ActionCategory.GROUND_GAME: [
        ActionType.RALLY,
        ActionType.TOWN_HALL,
        ActionType.CANVASSING,
        ActionType.PHONE_BANK,
        ActionType.VOTER_REGISTRATION,
        ActionType.GOTV_OPERATION,
    ],
    ActionCategory.FUNDRAISING: [
        ActionType.FUNDRAISING_EVENT,
        ActionType.ONLINE_CAMPAIGN,
        ActionType.DONOR_CALL,
        ActionType.PAC_COORDINATION,
        ActionType.SMALL_DOLLAR_PUSH,
    ],
    ActionCategory.MEDIA: [
        ActionType.PRESS_RELEASE,
        ActionType.PRESS_CONFERENCE,
        ActionType.INTERVIEW,
        ActionType.OP_ED,
        ActionType.SOCIAL_MEDIA_CAMPAIGN,
        ActionType.ENDORSEMENT_ANNOUNCEMENT,
    ],
    ActionCategory.LOBBYING: [
        ActionType.LEGISLATIVE_MEETING,
        ActionType.COALITION_BUILDING,
        ActionType.POLICY_SPEECH,
        ActionType.INDUSTRY_OUTREACH,
    ],
    ActionCategory.OPPOSITION: [
        ActionType.OPPOSITION_RESEARCH,
        ActionType.ATTACK_AD,
        ActionType.RAPID_RESPONSE,
        ActionType.FACT_CHECK_CAMPAIGN,
    ],
}

# (money, action points, real hours) at STANDARD intensity
ACTION_BASE_COSTS: Dict[ActionType, ActionCost] = {
    action_type: ActionCost(money=money, action_points=points, time_hours=hours)
    for action_type, (money, points, hours) in {
        ActionType.TV_AD_NATIONAL: (500000, 3, 4),
        ActionType.TV_AD_STATE: (75000, 2, 2),
        ActionType.RADIO_AD: (15000, 1, 1),
        ActionType.DIGITAL_AD: (25000, 1, 0.5),
        ActionType.BILLBOARD: (10000, 1, 2),
        ActionType.MAILER: (20000, 1, 3),
        ActionType.RALLY: (50000, 3, 4),
        ActionType.TOWN_HALL: (15000, 2, 2),
        ActionType.CANVASSING: (5000, 2, 3),
        ActionType.PHONE_BANK: (8000, 2, 2),
        ActionType.VOTER_REGISTRATION: (3000, 1, 4),
        ActionType.GOTV_OPERATION: (100000, 4, 6),
        ActionType.FUNDRAISING_EVENT: (25000, 2, 3),
        ActionType.ONLINE_CAMPAIGN: (5000, 1, 1),
        ActionType.DONOR_CALL: (1000, 1, 1),
        ActionType.PAC_COORDINATION: (10000, 2, 2),
        ActionType.SMALL_DOLLAR_PUSH: (3000, 1, 1),
        ActionType.PRESS_RELEASE: (2000, 1, 0.5),
        ActionType.PRESS_CONFERENCE: (10000, 2, 1),
        ActionType.INTERVIEW: (5000, 1, 1),
        ActionType.OP_ED: (3000, 1, 2),
        ActionType.SOCIAL_MEDIA_CAMPAIGN: (8000, 1, 0.5),
        ActionType.ENDORSEMENT_ANNOUNCEMENT: (15000, 2, 1),
        ActionType.LEGISLATIVE_MEETING: (20000, 2, 2),
        ActionType.COALITION_BUILDING: (30000, 3, 4),
        ActionType.POLICY_SPEECH: (15000, 2, 2),
        ActionType.INDUSTRY_OUTREACH: (25000, 2, 3),
        ActionType.OPPOSITION_RESEARCH: (50000, 3, 6),
        ActionType.ATTACK_AD: (100000, 3, 2),
        ActionType.RAPID_RESPONSE: (15000, 2, 0.5),
        ActionType.FACT_CHECK_CAMPAIGN: (10000, 1, 1),
    }.items()
}

ACTION_COOLDOWNS: Dict[ActionType, float] = {
    ActionType.TV_AD_NATIONAL: 8,
    ActionType.TV_AD_STATE: 4,
    ActionType.RADIO_AD: 2,
    ActionType.DIGITAL_AD: 1,
    ActionType.BILLBOARD: 24,
    ActionType.MAILER: 12,
    ActionType.RALLY: 12,
    ActionType.TOWN_HALL: 8,
    ActionType.CANVASSING: 4,
    ActionType.PHONE_BANK: 4,
    ActionType.VOTER_REGISTRATION: 6,
    ActionType.GOTV_OPERATION: 24,
    ActionType.FUNDRAISING_EVENT: 8,
    ActionType.ONLINE_CAMPAIGN: 4,
    ActionType.DONOR_CALL: 2,
    ActionType.PAC_COORDINATION: 12,
    ActionType.SMALL_DOLLAR_PUSH: 4,
    ActionType.PRESS_RELEASE: 2,
    ActionType.PRESS_CONFERENCE: 6,
    ActionType.INTERVIEW: 4,
    ActionType.OP_ED: 12,
    ActionType.SOCIAL_MEDIA_CAMPAIGN: 1,
    ActionType.ENDORSEMENT_ANNOUNCEMENT: 24,
    ActionType.LEGISLATIVE_MEETING: 12,
    ActionType.COALITION_BUILDING: 24,
    ActionType.POLICY_SPEECH: 8,
    ActionType.INDUSTRY_OUTREACH: 12,
    ActionType.OPPOSITION_RESEARCH: 24,
    ActionType.ATTACK_AD: 12,
    ActionType.RAPID_RESPONSE: 2,
    ActionType.FACT_CHECK_CAMPAIGN: 6,
}

ACTION_DISPLAY_NAMES: Dict[ActionType, str] = {
    ActionType.TV_AD_NATIONAL: "National TV Advertisement",
    ActionType.TV_AD_STATE: "State TV Advertisement",
    ActionType.RADIO_AD: "Radio Advertisement",
    ActionType.DIGITAL_AD: "Digital Advertisement",
    ActionType.BILLBOARD: "Billboard Campaign",
    ActionType.MAILER: "Direct Mail Campaign",
    ActionType.RALLY: "Campaign Rally",
    ActionType.TOWN_HALL: "Town Hall Meeting",
    ActionType.CANVASSING: "Door-to-Door Canvassing",
    ActionType.PHONE_BANK: "Phone Banking",
    ActionType.VOTER_REGISTRATION: "Voter Registration Drive",
    ActionType.GOTV_OPERATION: "Get Out The Vote Operation",
    ActionType.FUNDRAISING_EVENT: "Fundraising Event",
    ActionType.ONLINE_CAMPAIGN: "Online Fundraising Campaign",
    ActionType.DONOR_CALL: "Donor Call Session",
    ActionType.PAC_COORDINATION: "PAC Coordination",
    ActionType.SMALL_DOLLAR_PUSH: "Small Dollar Donation Push",
    ActionType.PRESS_RELEASE: "Press Release",
    ActionType.PRESS_CONFERENCE: "Press Conference",
    ActionType.INTERVIEW: "Media Interview",
    ActionType.OP_ED: "Op-Ed Publication",
    ActionType.SOCIAL_MEDIA_CAMPAIGN: "Social Media Campaign",
    ActionType.ENDORSEMENT_ANNOUNCEMENT: "Endorsement Announcement",
    ActionType.LEGISLATIVE_MEETING: "Legislative Meeting",
    ActionType.COALITION_BUILDING: "Coalition Building",
    ActionType.POLICY_SPEECH: "Policy Speech",
    ActionType.INDUSTRY_OUTREACH: "Industry Outreach",
    ActionType.OPPOSITION_RESEARCH: "Opposition Research",
    ActionType.ATTACK_AD: "Attack Advertisement",
    ActionType.RAPID_RESPONSE: "Rapid Response",
    ActionType.FACT_CHECK_CAMPAIGN: "Fact Check Campaign",
}

CATEGORY_DISPLAY_NAMES: Dict[ActionCategory, str] = {
    ActionCategory.ADVERTISING: "Advertising",
    ActionCategory.GROUND_GAME: "Ground Game",
    ActionCategory.FUNDRAISING: "Fundraising",
    ActionCategory.MEDIA: "Media & PR",
    ActionCategory.LOBBYING: "Lobbying",
    ActionCategory.OPPOSITION: "Opposition",
}


def parse_action_type(value: Union[str, ActionType]) -> ActionType:
    """Coerce a raw value into an ActionType, failing fast on unknown names."""
    try:
        return ActionType(value)
    except ValueError:
        raise UnknownActionTypeError(f"Unknown action type: {value}") from None


def get_action_category(action_type: Union[str, ActionType]) -> ActionCategory:
    action_type = parse_action_type(action_type)
    for category, types in CATEGORY_ACTIONS.items():
        if action_type in types:
            return category
    raise UnknownActionTypeError(f"Unknown action type: {action_type}")


def calculate_final_cost(
    action_type: ActionType, intensity: ActionIntensity
) -> ActionCost:
    """Scale an action's base cost by its intensity multiplier."""
    base = ACTION_BASE_COSTS[parse_action_type(action_type)]
    multiplier = INTENSITY_COST_MULTIPLIERS[intensity]
    return ActionCost(
        money=round_int(base.money * multiplier),
        action_points=max(1, round_int(base.action_points * multiplier)),
        time_hours=base.time_hours * multiplier,
    )


def get_action_display_name(action_type: Union[str, ActionType]) -> str:
    return ACTION_DISPLAY_NAMES[parse_action_type(action_type)]


def describe_action(action_type: Union[str, ActionType]) -> ActionCatalogEntry:
    """Display names, category, base cost and cooldown for one action type."""
    action_type = parse_action_type(action_type)
    category = get_action_category(action_type)
    return ActionCatalogEntry(
        action_type=action_type,
        display_name=ACTION_DISPLAY_NAMES[action_type],
        category=category,
        category_name=CATEGORY_DISPLAY_NAMES[category],
        base_cost=ACTION_BASE_COSTS[action_type],
        cooldown_hours=ACTION_COOLDOWNS[action_type],
    )


def get_action_catalog() -> List[ActionCatalogEntry]:
    return [describe_action(action_type) for action_type in ActionType]
