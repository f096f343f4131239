"""Debate participants, opposition research and scored performances."""

from typing import List, Optional

from pydantic import BaseModel, Field


class DebateParticipant(BaseModel):
    candidate_id: str
    charisma: float = Field(ge=0, le=100)
    knowledge: float = Field(ge=0, le=100)
    composure: float = Field(ge=0, le=100)
    preparation: float = Field(default=0.0, ge=0, le=100)
    fatigue: float = Field(default=0.0, ge=0, le=100)
    scandal_penalty: float = 0.0            # Clamped to [-20, 0] when scored


class OppositionResearch(BaseModel):
    """Dirt one candidate brings to a debate against another."""
    attacker_id: str
    target_id: str
    attacker_bonus: float = Field(ge=0)     # Capped at 20 per attacker
    defender_penalty: float = Field(ge=0)   # Capped at 15 per target


class DebateResult(BaseModel):
    candidate_id: str
    seed: str

    base_score: float
    preparation_bonus: float
    fatigue_penalty: float
    scandal_penalty: float
    jitter: float
    research_bonus: float = 0.0
    research_penalty: float = 0.0

    performance_score: float = Field(ge=0, le=100)
    persuasion_delta: float = Field(ge=-5, le=5)
    momentum_impact: float = Field(ge=-2, le=2)


class DebateOutcome(BaseModel):
    seed: str
    results: List[DebateResult]             # Best performance first
    winner_id: Optional[str] = None         # None on a tie for first
