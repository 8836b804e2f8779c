"""FastAPI application for skillswap."""

from __future__ import annotations

from fastapi import FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from skillswap.core import MatchRequestService, ProfileDirectory, SkillCatalog, require_identity
from skillswap.dashboard import Dashboard
from skillswap.discovery import discover
from skillswap.errors import (
    AuthRequiredError,
    InvalidTransitionError,
    MatchNotFoundError,
    PersistenceError,
    SchemaError,
    SkillNotFoundError,
    SkillSwapError,
    ValidationError,
)
from skillswap.models import (
    ALL_CATEGORIES,
    DashboardView,
    DiscoverableSkill,
    FilterSpec,
    ListingType,
    MatchRequest,
    Profile,
    Skill,
    SkillCategory,
    SkillLevel,
)
from skillswap.store import InMemoryRecordStore, RecordStore

_STATUS_CODES: list[tuple[type[SkillSwapError], int]] = [
    (InvalidTransitionError, 409),
    (ValidationError, 422),
    (AuthRequiredError, 401),
    (SkillNotFoundError, 404),
    (MatchNotFoundError, 404),
    (PersistenceError, 503),
    (SchemaError, 502),
]


class SkillCreateRequest(BaseModel):
    """Request body for adding a skill. Values are validated by the catalog."""

    title: str = ""
    description: str = ""
    category: str = ""
    level: str = ""
    listing_type: str = ListingType.TEACH.value


class SkillUpdateRequest(BaseModel):
    is_active: bool


class ConnectionRequest(BaseModel):
    """Request body for sending a connection request."""

    skill_id: str
    message: str | None = None


class DiscoverResponse(BaseModel):
    """Filtered listings with their owner profiles and the category choices."""

    skills: list[DiscoverableSkill]
    categories: list[SkillCategory]
    total_candidates: int


class ProfileRequest(BaseModel):
    username: str
    full_name: str
    bio: str | None = None


def _status_for(exc: SkillSwapError) -> int:
    for error_cls, code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            return code
    return 400


def create_app(store: RecordStore | None = None) -> FastAPI:
    """Build the API around ``store`` (a fresh in-memory store by default)."""
    store = store if store is not None else InMemoryRecordStore()
    profiles = ProfileDirectory(store)
    catalog = SkillCatalog(store, profiles)
    matches = MatchRequestService(store)
    dashboard = Dashboard(catalog, matches, profiles)

    app = FastAPI(title="SkillSwap", version="0.1.0")

    @app.exception_handler(SkillSwapError)
    async def _domain_error(request: Request, exc: SkillSwapError) -> JSONResponse:
        return JSONResponse(status_code=_status_for(exc), content={"detail": exc.user_message()})

    @app.post("/api/skills", response_model=Skill, status_code=201)
    def create_skill(body: SkillCreateRequest, x_user_id: str | None = Header(default=None)) -> Skill:
        """Add a skill listing for the signed-in user."""
        return catalog.create_skill(x_user_id, body.model_dump())

    @app.get("/api/skills/mine", response_model=list[Skill])
    def my_skills(x_user_id: str | None = Header(default=None)) -> list[Skill]:
        """List the signed-in user's own skills, newest first."""
        return catalog.list_own_skills(require_identity(x_user_id, "listing your skills"))

    @app.get("/api/skills/discover", response_model=DiscoverResponse)
    def discover_skills(
        search: str = "",
        category: str = ALL_CATEGORIES,
        listing_type: ListingType = Query(default=ListingType.TEACH, alias="type"),
        x_user_id: str | None = Header(default=None),
    ) -> DiscoverResponse:
        """Browse other members' active skills with optional filters."""
        candidates = catalog.list_discoverable(x_user_id)
        result = discover(candidates, FilterSpec(search_term=search, category=category, listing_type=listing_type))
        return DiscoverResponse.model_validate(result.model_dump())

    @app.get("/api/skills/options")
    def skill_options() -> dict[str, list[str]]:
        """Choices offered by the skill creation form."""
        return {
            "categories": [c.value for c in SkillCategory],
            "levels": [lvl.value for lvl in SkillLevel],
            "listing_types": [t.value for t in ListingType],
        }

    @app.patch("/api/skills/{skill_id}", response_model=Skill)
    def update_skill(skill_id: str, body: SkillUpdateRequest, x_user_id: str | None = Header(default=None)) -> Skill:
        """Show or hide one of your skills in discovery."""
        return catalog.set_active(x_user_id, skill_id, body.is_active)

    @app.post("/api/matches", response_model=MatchRequest, status_code=201)
    def create_match(body: ConnectionRequest, x_user_id: str | None = Header(default=None)) -> MatchRequest:
        """Send a connection request for a skill."""
        require_identity(x_user_id, "sending a connection request")
        return matches.request_connection(x_user_id, catalog.get_skill(body.skill_id), body.message)

    @app.get("/api/matches", response_model=list[MatchRequest])
    def list_matches(x_user_id: str | None = Header(default=None)) -> list[MatchRequest]:
        """List every request the signed-in user takes part in."""
        return matches.list_for_user(require_identity(x_user_id, "listing connection requests"))

    @app.post("/api/matches/{match_id}/accept", response_model=MatchRequest)
    def accept_match(match_id: str, x_user_id: str | None = Header(default=None)) -> MatchRequest:
        return matches.accept(x_user_id, match_id)

    @app.post("/api/matches/{match_id}/decline", response_model=MatchRequest)
    def decline_match(match_id: str, x_user_id: str | None = Header(default=None)) -> MatchRequest:
        return matches.decline(x_user_id, match_id)

    @app.post("/api/matches/{match_id}/cancel", response_model=MatchRequest)
    def cancel_match(match_id: str, x_user_id: str | None = Header(default=None)) -> MatchRequest:
        return matches.cancel(x_user_id, match_id)

    @app.get("/api/dashboard", response_model=DashboardView)
    def get_dashboard(x_user_id: str | None = Header(default=None)) -> DashboardView:
        """Own skills split by listing type, with summary counts."""
        return dashboard.for_user(x_user_id)

    @app.put("/api/profile", response_model=Profile)
    def put_profile(body: ProfileRequest, x_user_id: str | None = Header(default=None)) -> Profile:
        """Create or replace the signed-in user's profile."""
        user_id = require_identity(x_user_id, "editing your profile")
        return profiles.register(Profile(user_id=user_id, **body.model_dump()))

    return app
