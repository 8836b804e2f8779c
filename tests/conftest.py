"""Shared test fixtures for skillswap."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from skillswap.core import MatchRequestService, ProfileDirectory, SkillCatalog
from skillswap.dashboard import Dashboard
from skillswap.models import (
    ListingType,
    Profile,
    Skill,
    SkillCategory,
    SkillLevel,
)
from skillswap.store import InMemoryRecordStore, StoreError


def make_skill(
    skill_id: str,
    title: str,
    listing_type: ListingType = ListingType.TEACH,
    category: SkillCategory = SkillCategory.MUSIC,
    owner_id: str = "u1",
    description: str = "A friendly introduction",
    level: SkillLevel = SkillLevel.BEGINNER,
    is_active: bool = True,
) -> Skill:
    """Build a Skill without going through a store."""
    return Skill(
        id=skill_id,
        title=title,
        description=description,
        category=category,
        listing_type=listing_type,
        level=level,
        owner_id=owner_id,
        is_active=is_active,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class FailingStore(InMemoryRecordStore):
    """Store whose writes (or every call) fail, for persistence error paths."""

    def __init__(self, fail_reads: bool = False) -> None:
        super().__init__()
        self.fail_reads = fail_reads
        self.insert_calls = 0

    def insert(self, table: str, record: Any) -> dict[str, Any]:
        self.insert_calls += 1
        raise StoreError("connection reset by peer")

    def select(self, table: str, filters: Any = None, order_by_created_desc: bool = True) -> list[dict[str, Any]]:
        if self.fail_reads:
            raise StoreError("service unavailable")
        return super().select(table, filters, order_by_created_desc)


@pytest.fixture()
def guitar_fields() -> dict[str, str]:
    """Return valid form fields for a teach listing."""
    return {
        "title": "Guitar Basics",
        "description": "Chords, strumming and your first songs",
        "category": "Music",
        "level": "beginner",
        "listing_type": "teach",
    }


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def profiles(store: InMemoryRecordStore) -> ProfileDirectory:
    """Return a ProfileDirectory with profiles for u1 and u2 (u3 has none)."""
    directory = ProfileDirectory(store)
    directory.register(Profile(user_id="u1", username="alice", full_name="Alice Smith"))
    directory.register(Profile(user_id="u2", username="bob", full_name="Bob Jones", bio="Drummer"))
    return directory


@pytest.fixture()
def catalog(store: InMemoryRecordStore, profiles: ProfileDirectory) -> SkillCatalog:
    return SkillCatalog(store, profiles)


@pytest.fixture()
def matches(store: InMemoryRecordStore) -> MatchRequestService:
    return MatchRequestService(store)


@pytest.fixture()
def dashboard(catalog: SkillCatalog, matches: MatchRequestService, profiles: ProfileDirectory) -> Dashboard:
    return Dashboard(catalog, matches, profiles)


@pytest.fixture()
def u1_guitar(catalog: SkillCatalog, guitar_fields: dict[str, str]) -> Skill:
    """Return a teach listing owned by u1, stored in the catalog."""
    return catalog.create_skill("u1", guitar_fields)
