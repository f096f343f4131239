"""Campaign Kernel data models."""

from campaign_kernel.models.actions import (
    ActionCatalogEntry,
    ActionCategory,
    ActionCost,
    ActionIntensity,
    ActionQueue,
    ActionResult,
    ActionResultStatus,
    ActionType,
    EligibilityResult,
    PlayerAction,
    QueuedImpactEstimate,
)
from campaign_kernel.models.ads import AdBuy, AdCampaignSummary, AdMediaType
from campaign_kernel.models.campaign import (
    ActionValidationResult,
    CampaignOffice,
    CampaignPhase,
    CampaignState,
    CampaignStatus,
    PerformedAction,
    PhaseTransitionResult,
)
from campaign_kernel.models.config import DEFAULT_CONFIG, SimulationConfig
from campaign_kernel.models.debate import (
    DebateOutcome,
    DebateParticipant,
    DebateResult,
    OppositionResearch,
)
from campaign_kernel.models.demographics import (
    ALL_DEMOGRAPHIC_KEYS,
    ALL_POLITICAL_ISSUES,
    DemographicAppeal,
    DemographicClass,
    DemographicGender,
    DemographicGroup,
    DemographicPollResult,
    DemographicRace,
    IssueAlignmentResult,
    IssueProfile,
    PoliticalIssue,
    PositionLabel,
    SpecialEffect,
    StateDemographics,
    StatePollingSummary,
)
from campaign_kernel.models.election import (
    CandidateTally,
    DelegationConfig,
    ElectionResolutionResult,
    StateMomentum,
    StateOutcome,
    StateResolution,
)
from campaign_kernel.models.endorsements import (
    Endorsement,
    EndorsementImpact,
    EndorsementValidation,
)
from campaign_kernel.models.momentum import (
    CampaignMomentumSummary,
    CandidateMomentum,
    MomentumDirection,
    SwingStateAnalysis,
    SwingStateCategory,
)
from campaign_kernel.models.polling import (
    CandidateIssueProfile,
    CandidatePollResult,
    CrosstabResult,
    DemographicPollSnapshot,
    DemographicSegment,
    ElectoralProjection,
    Party,
    PollCandidate,
    PollingTrend,
    PollSnapshot,
    PollType,
    StateWeight,
    TrendDirection,
)

__all__ = [
    "ALL_DEMOGRAPHIC_KEYS",
    "ALL_POLITICAL_ISSUES",
    "ActionCatalogEntry",
    "ActionCategory",
    "ActionCost",
    "ActionIntensity",
    "ActionQueue",
    "ActionResult",
    "ActionResultStatus",
    "ActionType",
    "ActionValidationResult",
    "AdBuy",
    "AdCampaignSummary",
    "AdMediaType",
    "CampaignMomentumSummary",
    "CampaignOffice",
    "CampaignPhase",
    "CampaignState",
    "CampaignStatus",
    "CandidateIssueProfile",
    "CandidateMomentum",
    "CandidatePollResult",
    "CandidateTally",
    "CrosstabResult",
    "DEFAULT_CONFIG",
    "DebateOutcome",
    "DebateParticipant",
    "DebateResult",
    "DelegationConfig",
    "DemographicAppeal",
    "DemographicClass",
    "DemographicGender",
    "DemographicGroup",
    "DemographicPollResult",
    "DemographicPollSnapshot",
    "DemographicRace",
    "DemographicSegment",
    "ElectionResolutionResult",
    "ElectoralProjection",
    "EligibilityResult",
    "Endorsement",
    "EndorsementImpact",
    "EndorsementValidation",
    "IssueAlignmentResult",
    "IssueProfile",
    "MomentumDirection",
    "OppositionResearch",
    "Party",
    "PerformedAction",
    "PhaseTransitionResult",
    "PlayerAction",
    "PoliticalIssue",
    "PollCandidate",
    "PollSnapshot",
    "PollType",
    "PollingTrend",
    "PositionLabel",
    "QueuedImpactEstimate",
    "SimulationConfig",
    "SpecialEffect",
    "StateDemographics",
    "StateMomentum",
    "StateOutcome",
    "StatePollingSummary",
    "StateResolution",
    "StateWeight",
    "SwingStateAnalysis",
    "SwingStateCategory",
    "TrendDirection",
]
