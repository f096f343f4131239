"""
Campaign Kernel API — FastAPI endpoints.

A stateless pass-through over the simulation engines. Callers send the
campaign state, action queue or poll history they hold and receive the
updated values back; nothing is stored between requests.

Exposes:
- Campaign lifecycle (initialize, progress, pause/resume/abandon, gating)
- Action catalogue, eligibility, creation, execution and queue upkeep
- Ad buys and budget allocation
- Debate scoring
- Demographic groups and state reference data
- Demographic polls (state, national, swing states), crosstabs and EV projections
- Coarse polls, polling trends and momentum summaries
- Endorsements
- Election resolution
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from campaign_kernel.actions.catalog import describe_action, get_action_catalog
from campaign_kernel.actions.engine import ActionEngine
from campaign_kernel.ads.cycle import (
    aggregate_ad_performance,
    execute_ad_buy,
    optimize_budget_allocation,
)
from campaign_kernel.clock.timescale import as_utc
from campaign_kernel.debate.engine import score_debate
from campaign_kernel.demographics.engine import (
    build_demographic_group,
    get_all_demographic_groups,
)
from campaign_kernel.demographics.states import (
    get_electoral_votes,
    get_house_seats,
    get_state_composition,
    get_swing_states,
)
from campaign_kernel.election.resolution import resolve_election
from campaign_kernel.endorsements.engine import (
    calculate_endorsement_impact,
    validate_endorsement_request,
)
from campaign_kernel.errors import (
    CampaignDataError,
    UnknownActionTypeError,
    UnknownStateError,
)
from campaign_kernel.models.actions import (
    ActionIntensity,
    ActionQueue,
    ActionType,
    PlayerAction,
)
from campaign_kernel.models.ads import AdBuy, AdMediaType
from campaign_kernel.models.campaign import CampaignOffice, CampaignPhase, CampaignState
from campaign_kernel.models.config import SimulationConfig
from campaign_kernel.models.debate import DebateParticipant, OppositionResearch
from campaign_kernel.models.election import DelegationConfig, StateMomentum, StateOutcome
from campaign_kernel.models.endorsements import Endorsement
from campaign_kernel.models.polling import (
    CandidateIssueProfile,
    DemographicPollSnapshot,
    PollCandidate,
    PollingTrend,
    PollSnapshot,
    PollType,
)
from campaign_kernel.phase.machine import CampaignPhaseMachine, get_allowed_actions
from campaign_kernel.polling.engine import PollingEngine, build_polling_trend
from campaign_kernel.polling.integration import (
    generate_crosstab,
    generate_national_poll,
    generate_state_poll,
    generate_swing_state_polls,
    project_electoral_votes,
)
from campaign_kernel.polling.momentum import calculate_campaign_momentum_summary


# --- Request/Response Models ---

class CampaignInitRequest(BaseModel):
    campaign_id: str
    company_id: str
    candidate_name: str
    office: CampaignOffice
    election_week: int = Field(ge=0)
    target_state: Optional[str] = None
    now: Optional[datetime] = None


class CampaignStateRequest(BaseModel):
    state: CampaignState
    now: Optional[datetime] = None


class CampaignActionKeyRequest(BaseModel):
    state: CampaignState
    action_key: str


class EligibilityRequest(BaseModel):
    action_type: ActionType
    phase: CampaignPhase
    queue: ActionQueue
    funds: float
    intensity: ActionIntensity = ActionIntensity.STANDARD
    now: Optional[datetime] = None


class ActionCreateRequest(BaseModel):
    campaign_id: str
    player_id: str
    action_type: ActionType
    intensity: ActionIntensity = ActionIntensity.STANDARD
    target_states: List[str] = []
    target_demographics: List[str] = []
    target_issues: List[str] = []
    scheduled_for: Optional[datetime] = None
    now: Optional[datetime] = None


class ActionExecuteRequest(BaseModel):
    action: PlayerAction


class AvailableActionsRequest(BaseModel):
    phase: CampaignPhase
    queue: ActionQueue
    funds: Optional[float] = None
    now: Optional[datetime] = None


class QueueCreateRequest(BaseModel):
    campaign_id: str
    now: Optional[datetime] = None


class QueueAfterActionRequest(BaseModel):
    queue: ActionQueue
    action: PlayerAction
    now: Optional[datetime] = None


class QueueTickRequest(BaseModel):
    queue: ActionQueue
    now: Optional[datetime] = None


class AdBuyRequest(BaseModel):
    campaign_id: str
    media_type: AdMediaType
    geography: str
    budget: float = Field(ge=0)
    market_size: int = Field(ge=0)
    prior_spend: float = Field(default=0.0, ge=0)
    competitor_spend: float = Field(default=0.0, ge=0)
    now: Optional[datetime] = None


class AdOptimizeRequest(BaseModel):
    total_budget: float = Field(ge=0)
    market_size: float = Field(ge=0)
    prior_spend_by_media: Dict[AdMediaType, float] = {}


class AdSummaryRequest(BaseModel):
    campaign_id: str
    buys: List[AdBuy]


class DebateRequest(BaseModel):
    seed: str
    participants: List[DebateParticipant]
    research: List[OppositionResearch] = []


class PollRequest(BaseModel):
    candidates: List[CandidateIssueProfile]
    action_effects: Dict[str, Dict[str, float]] = {}
    previous: Optional[DemographicPollSnapshot] = None
    now: Optional[datetime] = None


class SwingPollRequest(BaseModel):
    candidates: List[CandidateIssueProfile]
    action_effects: Dict[str, Dict[str, float]] = {}
    previous_polls: Dict[str, DemographicPollSnapshot] = {}
    now: Optional[datetime] = None


class PollConductRequest(BaseModel):
    poll_type: PollType
    geography: str
    candidates: List[PollCandidate]
    previous: Optional[PollSnapshot] = None
    sample_size: Optional[int] = Field(default=None, gt=0)
    methodology_factor: float = Field(default=1.0, gt=0)
    now: Optional[datetime] = None


class TrendRequest(BaseModel):
    snapshots: List[PollSnapshot]
    candidate_id: str
    geography: str
    candidate_name: str = ""


class MomentumSummaryRequest(BaseModel):
    campaign_id: str
    national_trend: PollingTrend
    state_trends: Dict[str, PollingTrend] = {}
    dem_candidate_id: str
    rep_candidate_id: str
    incumbent_id: Optional[str] = None
    now: Optional[datetime] = None


class CrosstabRequest(BaseModel):
    snapshot: DemographicPollSnapshot
    dimension1: str
    dimension2: str


class ProjectionRequest(BaseModel):
    state_polls: Dict[str, DemographicPollSnapshot]
    candidate_ids: List[str] = []


class EndorsementImpactRequest(BaseModel):
    endorsements: List[Endorsement]
    endorsee_polling: float = Field(ge=0, le=100)


class EndorsementValidateRequest(BaseModel):
    endorser_id: str
    endorsee_id: str
    last_endorsement_at: Optional[datetime] = None
    endorser_active: bool = True
    now: Optional[datetime] = None


class ElectionRequest(BaseModel):
    candidate_a: str
    candidate_b: str
    outcomes: List[StateOutcome]
    momentum: List[StateMomentum] = []
    delegation: DelegationConfig = DelegationConfig()


def _now(value: Optional[datetime]) -> datetime:
    return as_utc(value) if value else datetime.now(timezone.utc)


def _unprocessable(error: CampaignDataError) -> HTTPException:
    return HTTPException(422, str(error))


# --- Application Factory ---

def create_app(config: Optional[SimulationConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Campaign Kernel API",
        description="Political campaign simulation engines",
        version="0.1.0",
    )

    # Initialize components
    config = config or SimulationConfig()
    phase_machine = CampaignPhaseMachine(config)
    action_engine = ActionEngine(config)
    polling_engine = PollingEngine(config)

    # Store components on app state for access in endpoints
    app.state.config = config
    app.state.phase_machine = phase_machine
    app.state.action_engine = action_engine
    app.state.polling_engine = polling_engine

    # === CAMPAIGN LIFECYCLE ===

    @app.post("/campaigns")
    def initialize_campaign(req: CampaignInitRequest):
        """Start a campaign in the Announcement phase."""
        state = phase_machine.initialize_campaign(
            campaign_id=req.campaign_id,
            company_id=req.company_id,
            candidate_name=req.candidate_name,
            office=req.office,
            election_week=req.election_week,
            now=_now(req.now),
            target_state=req.target_state,
        )
        return state.model_dump(mode="json")

    @app.post("/campaigns/progress")
    def update_progress(req: CampaignStateRequest):
        """Advance elapsed time and auto-transition phases."""
        state = phase_machine.update_campaign_progress(req.state, _now(req.now))
        return {
            "state": state.model_dump(mode="json"),
            "completion": phase_machine.get_campaign_completion(state),
            "phase_time_remaining": phase_machine.get_phase_time_remaining(state),
            "can_restart": phase_machine.can_restart_campaign(state),
        }

    @app.post("/campaigns/pause")
    def pause_campaign(req: CampaignStateRequest):
        return phase_machine.pause_campaign(req.state, _now(req.now)).model_dump(mode="json")

    @app.post("/campaigns/resume")
    def resume_campaign(req: CampaignStateRequest):
        return phase_machine.resume_campaign(req.state, _now(req.now)).model_dump(mode="json")

    @app.post("/campaigns/abandon")
    def abandon_campaign(req: CampaignStateRequest):
        return phase_machine.abandon_campaign(req.state, _now(req.now)).model_dump(mode="json")

    @app.post("/campaigns/validate-action")
    def validate_campaign_action(req: CampaignActionKeyRequest):
        """Check a phase-gated action key against the campaign's phase."""
        return phase_machine.validate_action(req.state, req.action_key).model_dump(mode="json")

    @app.get("/phases/{phase}/actions")
    def get_phase_actions(phase: CampaignPhase):
        """Action keys permitted during a phase."""
        return get_allowed_actions(phase)

    # === ACTIONS ===

    @app.get("/actions/catalog")
    def action_catalog():
        return [entry.model_dump(mode="json") for entry in get_action_catalog()]

    @app.get("/actions/catalog/{action_type}")
    def action_catalog_entry(action_type: str):
        try:
            entry = describe_action(action_type.upper())
        except UnknownActionTypeError:
            raise HTTPException(404, "Action type not found")
        return entry.model_dump(mode="json")

    @app.post("/actions/eligibility")
    def check_eligibility(req: EligibilityRequest):
        result = action_engine.validate_eligibility(
            req.action_type, req.phase, req.queue, req.funds, _now(req.now), req.intensity
        )
        return result.model_dump(mode="json")

    @app.post("/actions")
    def create_action(req: ActionCreateRequest):
        """Stamp cost, timing and seed onto a new action."""
        action = action_engine.create_player_action(
            campaign_id=req.campaign_id,
            player_id=req.player_id,
            action_type=req.action_type,
            now=_now(req.now),
            intensity=req.intensity,
            target_states=req.target_states,
            target_demographics=req.target_demographics,
            target_issues=req.target_issues,
            scheduled_for=req.scheduled_for,
        )
        return action.model_dump(mode="json")

    @app.post("/actions/execute")
    def execute_action(req: ActionExecuteRequest):
        """Resolve an action into its effects (deterministic per seed)."""
        return action_engine.execute_action(req.action).model_dump(mode="json")

    @app.post("/actions/available")
    def available_actions(req: AvailableActionsRequest):
        now = _now(req.now)
        if req.funds is None:
            available = action_engine.get_available_actions(req.phase, req.queue, now)
        else:
            available = action_engine.get_available_actions(
                req.phase, req.queue, now, req.funds
            )
        return [action_type.value for action_type in available]

    # === ACTION QUEUE ===

    @app.post("/queues")
    def create_queue(req: QueueCreateRequest):
        return action_engine.create_action_queue(
            req.campaign_id, _now(req.now)
        ).model_dump(mode="json")

    @app.post("/queues/after-action")
    def update_queue_after_action(req: QueueAfterActionRequest):
        """Deduct points, start the cooldown and enqueue the action."""
        queue = action_engine.update_queue_after_action(req.queue, req.action, _now(req.now))
        queue = action_engine.enqueue_action(queue, req.action)
        return queue.model_dump(mode="json")

    @app.post("/queues/tick")
    def tick_queue(req: QueueTickRequest):
        """Reset points, start due actions and execute finished ones."""
        now = _now(req.now)
        queue = action_engine.check_and_reset_action_points(req.queue, now)
        queue, started = action_engine.process_pending_actions(queue, now)
        queue, completed = action_engine.process_completed_actions(queue, now)
        return {
            "queue": queue.model_dump(mode="json"),
            "started": [a.model_dump(mode="json") for a in started],
            "completed": [a.model_dump(mode="json") for a in completed],
            "time_until_reset": action_engine.get_time_until_reset(queue, now),
            "queued_impact": action_engine.estimate_queued_impact(queue).model_dump(mode="json"),
        }

    # === ADVERTISING ===

    @app.post("/ads/buy")
    def buy_ads(req: AdBuyRequest):
        buy = execute_ad_buy(
            campaign_id=req.campaign_id,
            media_type=req.media_type,
            geography=req.geography,
            budget=req.budget,
            market_size=req.market_size,
            now=_now(req.now),
            prior_spend=req.prior_spend,
            competitor_spend=req.competitor_spend,
        )
        return buy.model_dump(mode="json")

    @app.post("/ads/optimize")
    def optimize_ads(req: AdOptimizeRequest):
        allocation = optimize_budget_allocation(
            req.total_budget, req.market_size, req.prior_spend_by_media
        )
        return {media_type.value: amount for media_type, amount in allocation.items()}

    @app.post("/ads/summary")
    def summarize_ads(req: AdSummaryRequest):
        return aggregate_ad_performance(req.buys, req.campaign_id).model_dump(mode="json")

    # === DEBATES ===

    @app.post("/debates/score")
    def score_debate_endpoint(req: DebateRequest):
        if not req.participants:
            raise HTTPException(422, "A debate needs at least one participant")
        return score_debate(req.participants, req.seed, req.research).model_dump(mode="json")

    # === DEMOGRAPHICS ===

    @app.get("/demographics/groups")
    def list_demographic_groups():
        return [g.model_dump(mode="json") for g in get_all_demographic_groups()]

    @app.get("/demographics/groups/{key}")
    def get_demographic_group(key: str):
        try:
            group = build_demographic_group(key)
        except CampaignDataError:
            raise HTTPException(404, "Demographic group not found")
        return group.model_dump(mode="json")

    @app.get("/states/swing")
    def list_swing_states():
        return get_swing_states()

    @app.get("/states/{state_code}")
    def get_state(state_code: str):
        """Electoral votes, House seats and population composition."""
        try:
            composition = get_state_composition(state_code)
        except UnknownStateError:
            raise HTTPException(404, "State not found")
        return {
            "state_code": composition.state_code,
            "electoral_votes": get_electoral_votes(state_code),
            "house_seats": get_house_seats(state_code),
            "demographics": composition.model_dump(mode="json"),
        }

    # === POLLING ===

    @app.post("/polls/state/{state_code}")
    def state_poll(state_code: str, req: PollRequest):
        try:
            poll = generate_state_poll(
                state_code, req.candidates, _now(req.now), req.action_effects, req.previous
            )
        except UnknownStateError:
            raise HTTPException(404, "State not found")
        except CampaignDataError as exc:
            raise _unprocessable(exc)
        return poll.model_dump(mode="json")

    @app.post("/polls/national")
    def national_poll(req: PollRequest):
        try:
            poll = generate_national_poll(
                req.candidates, _now(req.now), req.action_effects, req.previous
            )
        except CampaignDataError as exc:
            raise _unprocessable(exc)
        return poll.model_dump(mode="json")

    @app.post("/polls/swing")
    def swing_polls(req: SwingPollRequest):
        try:
            polls = generate_swing_state_polls(
                req.candidates, _now(req.now), req.action_effects, req.previous_polls
            )
        except CampaignDataError as exc:
            raise _unprocessable(exc)
        return {code: poll.model_dump(mode="json") for code, poll in polls.items()}

    @app.post("/polls/conduct")
    def conduct_poll(req: PollConductRequest):
        poll = polling_engine.conduct_poll(
            req.poll_type,
            req.geography,
            req.candidates,
            _now(req.now),
            previous=req.previous,
            sample_size=req.sample_size,
            methodology_factor=req.methodology_factor,
        )
        return poll.model_dump(mode="json")

    @app.post("/polls/trend")
    def polling_trend(req: TrendRequest):
        return build_polling_trend(
            req.snapshots, req.candidate_id, req.geography, req.candidate_name
        ).model_dump(mode="json")

    @app.post("/polls/crosstab")
    def crosstab(req: CrosstabRequest):
        try:
            result = generate_crosstab(req.snapshot, req.dimension1, req.dimension2)
        except ValueError as exc:
            raise HTTPException(422, str(exc))
        return result.model_dump(mode="json")

    @app.post("/polls/projection")
    def projection(req: ProjectionRequest):
        try:
            result = project_electoral_votes(req.state_polls, req.candidate_ids)
        except CampaignDataError as exc:
            raise _unprocessable(exc)
        return result.model_dump(mode="json")

    # === MOMENTUM ===

    @app.post("/momentum/summary")
    def momentum_summary(req: MomentumSummaryRequest):
        try:
            summary = calculate_campaign_momentum_summary(
                req.campaign_id,
                req.national_trend,
                req.state_trends,
                req.dem_candidate_id,
                req.rep_candidate_id,
                _now(req.now),
                incumbent_id=req.incumbent_id,
            )
        except UnknownStateError:
            raise HTTPException(404, "State not found")
        return summary.model_dump(mode="json")

    # === ENDORSEMENTS ===

    @app.post("/endorsements/impact")
    def endorsement_impact(req: EndorsementImpactRequest):
        return calculate_endorsement_impact(
            req.endorsements, req.endorsee_polling
        ).model_dump(mode="json")

    @app.post("/endorsements/validate")
    def validate_endorsement(req: EndorsementValidateRequest):
        result = validate_endorsement_request(
            req.endorser_id,
            req.endorsee_id,
            req.last_endorsement_at,
            _now(req.now),
            req.endorser_active,
        )
        return result.model_dump(mode="json")

    # === ELECTION ===

    @app.post("/elections/resolve")
    def resolve(req: ElectionRequest):
        """Final-day tally from per-state outcomes."""
        result = resolve_election(
            req.candidate_a,
            req.candidate_b,
            req.outcomes,
            momentum=req.momentum,
            delegation=req.delegation,
            config=config,
        )
        return result.model_dump(mode="json")

    return app
