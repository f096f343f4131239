"""Simulation configuration shared by the campaign engines."""

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from campaign_kernel.models.campaign import CampaignPhase


def _default_phase_durations() -> Dict[str, float]:
    return {
        "ANNOUNCEMENT": 4,
        "FUNDRAISING": 8,
        "ACTIVE": 10,
        "RESOLUTION": 4,
    }


class SimulationConfig(BaseModel):
    """Tunable constants for a campaign simulation."""

    action_points_per_day: int = Field(default=10, ge=1)
    phase_durations_hours: Dict[str, float] = Field(
        default_factory=_default_phase_durations
    )
    ad_cycle_interval_minutes: float = Field(default=8.5, gt=0)
    poll_interval_minutes: float = Field(default=25, gt=0)
    electoral_votes_to_win: int = Field(default=270, ge=1)
    low_turnout_threshold: float = Field(default=35.0, ge=0, le=100)
    recount_margin: float = Field(default=0.5, ge=0)
    tie_margin: float = Field(default=0.01, ge=0)
    momentum_margin_scale: float = Field(default=0.5, gt=0)
    momentum_margin_cap: float = Field(default=1.5, ge=0)

    @field_validator("phase_durations_hours")
    @classmethod
    def _every_phase_has_positive_duration(cls, value: Dict[str, float]) -> Dict[str, float]:
        missing = [phase.value for phase in CampaignPhase if phase.value not in value]
        if missing:
            raise ValueError(f"Missing phase durations: {', '.join(missing)}")
        for phase, hours in value.items():
            if hours <= 0:
                raise ValueError(f"Phase {phase} duration must be positive, got {hours}")
        return value

    @property
    def total_campaign_hours(self) -> float:
        return sum(self.phase_durations_hours.values())


DEFAULT_CONFIG = SimulationConfig()
