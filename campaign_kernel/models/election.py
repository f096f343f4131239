"""Election-day inputs and the resolved electoral outcome."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StateOutcome(BaseModel):
    """Final standing in one state. A positive margin favours candidate A."""
    state: str
    electoral_votes: int = Field(ge=0)
    house_seats: int = Field(default=0, ge=0)
    turnout: float = Field(ge=0, le=100)    # Percent
    margin: float                           # Percentage points, A minus B
    volatility: float = Field(default=0.0, ge=0)


class StateMomentum(BaseModel):
    """Last-week polling change for each candidate in a state."""
    state: str
    a_weekly_change: float = 0.0
    b_weekly_change: float = 0.0


class DelegationConfig(BaseModel):
    senate_votes_per_player: int = Field(default=1, ge=0)


class StateResolution(BaseModel):
    state: str
    original_margin: float
    momentum_adjustment: float = 0.0
    adjusted_margin: float
    winner: Optional[str] = None            # None on a tie
    electoral_votes_a: int = 0
    electoral_votes_b: int = 0
    house_seats_a: int = 0
    house_seats_b: int = 0
    win_probability: Dict[str, float] = {}


class CandidateTally(BaseModel):
    electoral_votes: int = 0
    popular_vote: float = 0.0               # Percent of the estimated total
    senate_votes: int = 0
    house_votes: int = 0


class ElectionResolutionResult(BaseModel):
    """Final tally. winner is None when nobody reaches the EV threshold."""

    winner: Optional[str] = None
    tallies: Dict[str, CandidateTally]

    ties: List[str] = []
    recounts: List[str] = []
    low_turnout_states: List[str] = []

    states: List[StateResolution] = []
    total_electoral_votes: int = 0
