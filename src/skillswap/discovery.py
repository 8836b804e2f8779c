"""Discovery filter engine: search, category and listing-type filtering.

Pure functions over an already-fetched candidate list. Nothing here touches
the store, so the engine can be re-run on every keystroke or on a stale
candidate list without side effects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from skillswap.models import ALL_CATEGORIES, DiscoveryResult, FilterSpec, Skill, SkillCategory

__all__ = ["filter_skills", "available_categories", "discover"]

S = TypeVar("S", bound=Skill)


def _matches_term(skill: Skill, term: str) -> bool:
    return (
        term in skill.title.lower()
        or term in skill.description.lower()
        or term in skill.category.value.lower()
    )


def filter_skills(candidates: Sequence[S], spec: FilterSpec) -> list[S]:
    """Narrow candidates by listing type, search term and category.

    Stages run in this order, each narrowing the previous result:

    1. ``listing_type`` must equal ``spec.listing_type`` (always applied).
    2. A non-empty search term must appear, case-insensitively, in the
       title, description or category.
    3. Unless ``spec.category`` is ``"all"``, the category must match.

    Args:
        candidates: Skills in display order, usually newest first.
        spec: The filter choices.

    Returns:
        The surviving skills in their input order. May be empty.
    """
    filtered = [s for s in candidates if s.listing_type == spec.listing_type]

    term = spec.search_term.strip().lower()
    if term:
        filtered = [s for s in filtered if _matches_term(s, term)]

    if spec.category != ALL_CATEGORIES:
        filtered = [s for s in filtered if s.category.value == spec.category]

    return filtered


def available_categories(candidates: Sequence[Skill]) -> list[SkillCategory]:
    """Distinct categories of the full candidate list, in first-seen order."""
    seen: dict[SkillCategory, None] = {}
    for skill in candidates:
        seen.setdefault(skill.category, None)
    return list(seen)


def discover(candidates: Sequence[Skill], spec: FilterSpec) -> DiscoveryResult:
    """Filter candidates and bundle the category choices for the filter UI.

    Categories come from ``candidates``, not from the filtered result, so
    the choices do not shrink while the user narrows the list.
    """
    return DiscoveryResult(
        skills=filter_skills(candidates, spec),
        categories=available_categories(candidates),
        total_candidates=len(candidates),
    )
