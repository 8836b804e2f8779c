"""Core logic for skillswap: skill catalog, profiles and match requests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from skillswap.errors import (
    AuthRequiredError,
    InvalidTransitionError,
    MatchNotFoundError,
    PersistenceError,
    SkillNotFoundError,
    ValidationError,
)
from skillswap.models import (
    DiscoverableSkill,
    ListingType,
    MatchRequest,
    MatchStatus,
    Profile,
    Skill,
    SkillDraft,
    parse_match_request,
    parse_profile,
    parse_skill,
)
from skillswap.store import PROFILES, SKILL_MATCHES, SKILLS, RecordStore, StoreError

__all__ = [
    "DEFAULT_MESSAGE_TEMPLATE",
    "SkillCatalog",
    "ProfileDirectory",
    "MatchRequestService",
    "require_identity",
    "skill_added_message",
    "connection_sent_message",
]

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_TEMPLATE = "Hi! I'm interested in learning {title}."

T = TypeVar("T")


def require_identity(user_id: str | None, action: str) -> str:
    """Return ``user_id`` or raise if the caller is signed out.

    Raises:
        AuthRequiredError: If ``user_id`` is None or blank.
    """
    if user_id is None or not str(user_id).strip():
        raise AuthRequiredError(action)
    return user_id


def _guarded(action: str, call: Callable[..., T], *args: Any) -> T:
    """Run a store call, converting store failures into PersistenceError."""
    try:
        return call(*args)
    except StoreError as exc:
        logger.warning("Store call failed while trying to %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}", str(exc)) from exc


def skill_added_message(listing_type: ListingType) -> str:
    return f"Your {listing_type.label} skill has been added."


def connection_sent_message(skill: Skill) -> str:
    return f"Your request to learn {skill.title} has been sent."


class ProfileDirectory:
    """Read access to member profiles held by the identity collaborator."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def get(self, user_id: str) -> Profile | None:
        """Return the profile for ``user_id``, or None if it has none."""
        rows = _guarded("load profile", self._store.select, PROFILES, {"user_id": user_id}, False)
        return parse_profile(rows[0]) if rows else None

    def lookup(self, user_ids: Iterable[str]) -> dict[str, Profile]:
        """Fetch the profiles of several users in one call.

        Args:
            user_ids: Identities to look up. Duplicates are ignored.

        Returns:
            Mapping of user_id to Profile. Users without a profile are absent.
        """
        wanted = list(dict.fromkeys(user_ids))
        if not wanted:
            return {}
        rows = _guarded("load profiles", self._store.select_in, PROFILES, "user_id", wanted)
        profiles = (parse_profile(row) for row in rows)
        return {profile.user_id: profile for profile in profiles}

    def register(self, profile: Profile) -> Profile:
        """Create or replace the profile stored for ``profile.user_id``."""
        row = _guarded("save profile", self._store.upsert, PROFILES, "user_id", profile.to_record())
        return parse_profile(row)


class SkillCatalog:
    """Create and list skill listings."""

    def __init__(self, store: RecordStore, profiles: ProfileDirectory | None = None) -> None:
        self._store = store
        self._profiles = profiles or ProfileDirectory(store)

    def create_skill(self, owner_id: str | None, fields: Mapping[str, Any] | SkillDraft) -> Skill:
        """Validate and persist a new listing for ``owner_id``.

        Args:
            owner_id: Identity of the submitting user.
            fields: Submitted title, description, category, level and
                listing_type.

        Returns:
            The stored Skill with its store-assigned id and created_at.

        Raises:
            AuthRequiredError: If no owner identity is given.
            ValidationError: If a field is empty or outside its enumeration.
                Raised before the store is called.
            PersistenceError: If the insert fails.
        """
        owner_id = require_identity(owner_id, "adding a skill")
        draft = SkillDraft.from_fields(fields)
        row = _guarded("add skill", self._store.insert, SKILLS, draft.to_record(owner_id))
        skill = parse_skill(row)
        logger.info("Skill %s (%s) created by %s", skill.id, skill.listing_type.value, owner_id)
        return skill

    def get_skill(self, skill_id: str) -> Skill:
        """Retrieve a skill by its ID.

        Raises:
            SkillNotFoundError: If no skill has this ID.
        """
        rows = _guarded("load skill", self._store.select, SKILLS, {"id": skill_id}, False)
        if not rows:
            raise SkillNotFoundError(skill_id)
        return parse_skill(rows[0])

    def list_own_skills(self, owner_id: str) -> list[Skill]:
        """All skills owned by ``owner_id``, newest first, active or not."""
        rows = _guarded("load your skills", self._store.select, SKILLS, {"user_id": owner_id})
        return [parse_skill(row) for row in rows]

    def list_discoverable(self, exclude_owner_id: str | None) -> list[DiscoverableSkill]:
        """Active skills of other members, newest first, joined with owner profiles.

        Owners without a profile record get a placeholder profile instead of
        failing the listing.

        Args:
            exclude_owner_id: The browsing user, whose own skills are removed.
                None when browsing signed out.
        """
        rows = _guarded("load skills", self._store.select, SKILLS)
        # Records without is_active count as active.
        skills = [
            s
            for s in (parse_skill(row) for row in rows)
            if s.is_active and s.owner_id != exclude_owner_id
        ]
        profiles = self._profiles.lookup(s.owner_id for s in skills)

        missing = {s.owner_id for s in skills} - profiles.keys()
        if missing:
            logger.debug("No profile for %d owner(s); using placeholder", len(missing))

        return [
            DiscoverableSkill(
                **skill.model_dump(),
                profile=profiles.get(skill.owner_id) or Profile.placeholder(skill.owner_id),
            )
            for skill in skills
        ]

    def set_active(self, owner_id: str | None, skill_id: str, active: bool) -> Skill:
        """Show or hide one of the owner's skills in discovery.

        Raises:
            AuthRequiredError: If no owner identity is given.
            SkillNotFoundError: If the skill does not exist.
            ValidationError: If the skill belongs to someone else.
        """
        owner_id = require_identity(owner_id, "changing a skill")
        skill = self.get_skill(skill_id)
        if skill.owner_id != owner_id:
            raise ValidationError("Only the owner can change this skill", ["owner_id"])
        row = _guarded("update skill", self._store.update, SKILLS, skill_id, {"is_active": active})
        logger.info("Skill %s is_active=%s", skill_id, active)
        return parse_skill(row)


# Allowed status moves and the party permitted to make each one.
_TRANSITIONS: dict[MatchStatus, dict[MatchStatus, str]] = {
    MatchStatus.PENDING: {
        MatchStatus.ACCEPTED: "provider",
        MatchStatus.DECLINED: "provider",
        MatchStatus.CANCELLED: "requester",
    },
    MatchStatus.ACCEPTED: {},
    MatchStatus.DECLINED: {},
    MatchStatus.CANCELLED: {},
}


class MatchRequestService:
    """Create connection requests and move them through their lifecycle."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def request_connection(
        self,
        requester_id: str | None,
        skill: Skill,
        message: str | None = None,
    ) -> MatchRequest:
        """Send a connection request to the owner of ``skill``.

        Repeated calls for the same requester and skill create separate
        requests; there is no deduplication.

        Args:
            requester_id: The signed-in user sending the request.
            skill: The listing that triggered the request.
            message: Optional text. Blank or absent uses the default template.

        Returns:
            The stored MatchRequest, in pending status.

        Raises:
            AuthRequiredError: If the requester is signed out. Nothing is stored.
            ValidationError: If the requester owns the skill or the skill is
                inactive.
            PersistenceError: If the insert fails.
        """
        requester_id = require_identity(requester_id, "sending a connection request")
        if requester_id == skill.owner_id:
            raise ValidationError("You cannot request your own skill", ["requester_id"])
        if not skill.is_active:
            raise ValidationError("This skill is not accepting requests", ["skill_id"])
        if message is None or not message.strip():
            message = DEFAULT_MESSAGE_TEMPLATE.format(title=skill.title)

        record = {
            "requester_id": requester_id,
            "provider_id": skill.owner_id,
            "skill_id": skill.id,
            "message": message,
            "status": MatchStatus.PENDING.value,
        }
        row = _guarded("send connection request", self._store.insert, SKILL_MATCHES, record)
        match = parse_match_request(row)
        logger.info("Match request %s: %s -> %s for skill %s", match.id, requester_id, skill.owner_id, skill.id)
        return match

    def get(self, match_id: str) -> MatchRequest:
        rows = _guarded("load connection request", self._store.select, SKILL_MATCHES, {"id": match_id}, False)
        if not rows:
            raise MatchNotFoundError(match_id)
        return parse_match_request(rows[0])

    def incoming(self, user_id: str) -> list[MatchRequest]:
        """Requests where ``user_id`` is the provider, newest first."""
        rows = _guarded("load connection requests", self._store.select, SKILL_MATCHES, {"provider_id": user_id})
        return [parse_match_request(row) for row in rows]

    def outgoing(self, user_id: str) -> list[MatchRequest]:
        """Requests sent by ``user_id``, newest first."""
        rows = _guarded("load connection requests", self._store.select, SKILL_MATCHES, {"requester_id": user_id})
        return [parse_match_request(row) for row in rows]

    def list_for_user(self, user_id: str) -> list[MatchRequest]:
        """Every request ``user_id`` takes part in, newest first."""
        combined = self.incoming(user_id) + self.outgoing(user_id)
        return sorted(combined, key=lambda m: m.created_at, reverse=True)

    def accept(self, actor_id: str | None, match_id: str) -> MatchRequest:
        return self._transition(actor_id, match_id, MatchStatus.ACCEPTED)

    def decline(self, actor_id: str | None, match_id: str) -> MatchRequest:
        return self._transition(actor_id, match_id, MatchStatus.DECLINED)

    def cancel(self, actor_id: str | None, match_id: str) -> MatchRequest:
        return self._transition(actor_id, match_id, MatchStatus.CANCELLED)

    def _transition(self, actor_id: str | None, match_id: str, target: MatchStatus) -> MatchRequest:
        actor_id = require_identity(actor_id, f"marking a request {target.value}")
        match = self.get(match_id)
        allowed = _TRANSITIONS[match.status]
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot move request from {match.status.value} to {target.value}",
                ["status"],
            )
        party = allowed[target]
        expected = match.provider_id if party == "provider" else match.requester_id
        if actor_id != expected:
            raise ValidationError(f"Only the {party} can mark this request {target.value}", [f"{party}_id"])

        row = _guarded("update connection request", self._store.update, SKILL_MATCHES, match_id, {"status": target.value})
        logger.info("Match request %s: %s -> %s by %s", match_id, match.status.value, target.value, actor_id)
        return parse_match_request(row)
