"""Pydantic models and record narrowing for skillswap."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    SerializeAsAny,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from skillswap.errors import SchemaError, ValidationError

__all__ = [
    "ListingType",
    "SkillLevel",
    "SkillCategory",
    "MatchStatus",
    "Skill",
    "SkillDraft",
    "Profile",
    "DiscoverableSkill",
    "MatchRequest",
    "FilterSpec",
    "DiscoveryResult",
    "DashboardSummary",
    "DashboardView",
    "ALL_CATEGORIES",
    "PLACEHOLDER_USERNAME",
    "PLACEHOLDER_FULL_NAME",
    "parse_skill",
    "parse_profile",
    "parse_match_request",
]

ALL_CATEGORIES = "all"
PLACEHOLDER_USERNAME = "Unknown"
PLACEHOLDER_FULL_NAME = "Unknown User"


class ListingType(str, enum.Enum):
    """Whether a listing offers instruction or seeks it."""

    TEACH = "teach"
    LEARN = "learn"

    @classmethod
    def from_query(cls, value: str | None) -> ListingType:
        """Pre-seed value for the creation form; unknown values fall back to teach."""
        if value in (cls.TEACH.value, cls.LEARN.value):
            return cls(value)
        return cls.TEACH

    @property
    def label(self) -> str:
        return "teaching" if self is ListingType.TEACH else "learning"


class SkillLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SkillCategory(str, enum.Enum):
    """Fixed set of categories a listing may be filed under."""

    TECHNOLOGY = "Technology"
    LANGUAGES = "Languages"
    ARTS_AND_CRAFTS = "Arts & Crafts"
    MUSIC = "Music"
    SPORTS_AND_FITNESS = "Sports & Fitness"
    COOKING = "Cooking"
    BUSINESS = "Business"
    WRITING = "Writing"
    PHOTOGRAPHY = "Photography"
    DIY_AND_HOME = "DIY & Home"
    OTHER = "Other"


class MatchStatus(str, enum.Enum):
    """Lifecycle of a match request. Every request starts as pending."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not MatchStatus.PENDING


def _coerce_enum(enum_cls: type[enum.Enum], value: object) -> enum.Enum | None:
    """Return the member whose value matches ``value`` case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    wanted = value.strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == wanted:
            return member
    return None


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Skill(BaseModel):
    """A single teach-or-learn listing owned by one user."""

    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: SkillCategory
    listing_type: ListingType
    level: SkillLevel
    owner_id: str = Field(min_length=1)
    is_active: bool = True
    created_at: datetime

    def to_record(self) -> dict[str, Any]:
        """Return the storage-shaped mapping for this skill."""
        data = self.model_dump(mode="json", include=set(Skill.model_fields))
        data["user_id"] = data.pop("owner_id")
        data["skill_type"] = data.pop("listing_type")
        return data


class SkillDraft(BaseModel):
    """Validated fields submitted for a new skill, before the store assigns an id."""

    title: str
    description: str
    category: SkillCategory
    level: SkillLevel
    listing_type: ListingType

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any] | SkillDraft) -> SkillDraft:
        """Validate loosely typed form fields.

        Args:
            fields: Mapping of submitted values. ``skill_type`` is accepted
                as an alias of ``listing_type``.

        Returns:
            The validated draft with enumerations coerced.

        Raises:
            ValidationError: Listing every field that is empty or outside
                its enumeration.
        """
        if isinstance(fields, SkillDraft):
            return fields
        raw = dict(fields)
        if "listing_type" not in raw and "skill_type" in raw:
            raw["listing_type"] = raw["skill_type"]

        bad: list[str] = []
        for name in ("title", "description"):
            if _is_blank(raw.get(name)) or not isinstance(raw.get(name), str):
                bad.append(name)
        coerced: dict[str, enum.Enum | None] = {
            "category": _coerce_enum(SkillCategory, raw.get("category")),
            "level": _coerce_enum(SkillLevel, raw.get("level")),
            "listing_type": _coerce_enum(ListingType, raw.get("listing_type")),
        }
        bad.extend(name for name, member in coerced.items() if member is None)
        if bad:
            raise ValidationError("Invalid skill submission", bad)

        return cls(
            title=raw["title"].strip(),
            description=raw["description"].strip(),
            **coerced,
        )

    def to_record(self, owner_id: str) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "level": self.level.value,
            "skill_type": self.listing_type.value,
            "user_id": owner_id,
            "is_active": True,
        }


class Profile(BaseModel):
    """Public profile of a member, owned by the identity collaborator."""

    user_id: str
    username: str
    full_name: str
    bio: str | None = None

    @classmethod
    def placeholder(cls, user_id: str) -> Profile:
        """Profile shown for listings whose owner has no profile record."""
        return cls(
            user_id=user_id,
            username=PLACEHOLDER_USERNAME,
            full_name=PLACEHOLDER_FULL_NAME,
        )

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class DiscoverableSkill(Skill):
    """An active listing joined with its owner's profile."""

    profile: Profile


class MatchRequest(BaseModel):
    """A one-way expression of interest from a requester to a listing owner."""

    id: str
    requester_id: str = Field(min_length=1)
    provider_id: str = Field(min_length=1)
    skill_id: str
    message: str
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime

    @model_validator(mode="after")
    def check_distinct_parties(self) -> MatchRequest:
        if self.requester_id == self.provider_id:
            raise ValueError("requester_id and provider_id must differ")
        return self

    def involves(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.provider_id)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class FilterSpec(BaseModel):
    """Discovery filter choices. ``listing_type`` is always applied."""

    search_term: str = ""
    category: str = ALL_CATEGORIES
    listing_type: ListingType = ListingType.TEACH

    @field_validator("category", mode="before")
    @classmethod
    def category_value(cls, value: object) -> object:
        """Normalise to the category's canonical spelling; ``"all"`` in any case stays ``"all"``."""
        if isinstance(value, str) and value.strip().lower() == ALL_CATEGORIES:
            return ALL_CATEGORIES
        member = _coerce_enum(SkillCategory, value)
        return member.value if member is not None else value


class DiscoveryResult(BaseModel):
    """Filtered listings plus the category choices derived from all candidates."""

    skills: list[SerializeAsAny[Skill]] = Field(default_factory=list)
    categories: list[SkillCategory] = Field(default_factory=list)
    total_candidates: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return not self.skills


class DashboardSummary(BaseModel):
    """A user's own listings split by listing type, with summary counts."""

    teaching: list[Skill] = Field(default_factory=list)
    learning: list[Skill] = Field(default_factory=list)
    teach_count: int = Field(default=0, ge=0)
    learn_count: int = Field(default=0, ge=0)
    connections: int = Field(default=0, ge=0, description="Pending or accepted match requests.")


class DashboardView(BaseModel):
    """Everything the dashboard shows for one signed-in user."""

    user_id: str
    profile: Profile | None = None
    summary: DashboardSummary

    @property
    def display_name(self) -> str:
        return self.profile.username if self.profile else "User"


# ---------------------------------------------------------------------------
# Record narrowing
# ---------------------------------------------------------------------------


def _narrow(
    entity: str,
    model: type[BaseModel],
    data: dict[str, Any],
    required: tuple[str, ...],
    enums: dict[str, type[enum.Enum]],
) -> Any:
    problems = [f"missing '{name}'" for name in required if _is_blank(data.get(name))]
    for name, enum_cls in enums.items():
        if name not in data or _is_blank(data[name]):
            continue
        member = _coerce_enum(enum_cls, data[name])
        if member is None:
            problems.append(f"'{name}' has unexpected value {data[name]!r}")
        else:
            data[name] = member
    if problems:
        raise SchemaError(entity, problems)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise SchemaError(
            entity,
            [f"'{'.'.join(str(p) for p in err['loc'])}': {err['msg']}" for err in exc.errors()],
        ) from exc


def parse_skill(record: Mapping[str, Any]) -> Skill:
    """Narrow a store record into a Skill.

    Accepts both storage column names (``user_id``, ``skill_type``) and
    domain names (``owner_id``, ``listing_type``).

    Raises:
        SchemaError: If a required field is missing or a discriminant is
            outside its enumeration.
    """
    data = dict(record)
    if "owner_id" not in data and "user_id" in data:
        data["owner_id"] = data.pop("user_id")
    if "listing_type" not in data and "skill_type" in data:
        data["listing_type"] = data.pop("skill_type")
    return _narrow(
        "skill",
        Skill,
        data,
        required=("id", "title", "description", "category", "listing_type", "level", "owner_id", "created_at"),
        enums={"category": SkillCategory, "listing_type": ListingType, "level": SkillLevel},
    )


def parse_profile(record: Mapping[str, Any]) -> Profile:
    """Narrow a store record into a Profile."""
    return _narrow(
        "profile",
        Profile,
        dict(record),
        required=("user_id", "username", "full_name"),
        enums={},
    )


def parse_match_request(record: Mapping[str, Any]) -> MatchRequest:
    """Narrow a store record into a MatchRequest. A missing status reads as pending."""
    data = dict(record)
    data.setdefault("status", MatchStatus.PENDING.value)
    return _narrow(
        "match request",
        MatchRequest,
        data,
        required=("id", "requester_id", "provider_id", "skill_id", "message", "created_at"),
        enums={"status": MatchStatus},
    )
