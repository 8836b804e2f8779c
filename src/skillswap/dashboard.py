"""Dashboard aggregation over a user's own skills and connection requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from skillswap.core import MatchRequestService, ProfileDirectory, SkillCatalog, require_identity
from skillswap.models import DashboardSummary, DashboardView, ListingType, MatchRequest, MatchStatus, Skill

__all__ = ["CONNECTION_STATUSES", "summarize", "Dashboard"]

logger = logging.getLogger(__name__)

CONNECTION_STATUSES = frozenset({MatchStatus.PENDING, MatchStatus.ACCEPTED})


def summarize(
    skills: Sequence[Skill],
    matches: Sequence[MatchRequest] | None = None,
    user_id: str | None = None,
) -> DashboardSummary:
    """Partition skills by listing type and count connections.

    Args:
        skills: The owner's skills, in display order.
        matches: Match requests to count as connections. Only those that
            involve ``user_id`` (when given) and are pending or accepted
            count.
        user_id: The dashboard owner.

    Returns:
        A DashboardSummary whose teaching and learning lists keep the input order.
    """
    teaching = [s for s in skills if s.listing_type == ListingType.TEACH]
    learning = [s for s in skills if s.listing_type == ListingType.LEARN]
    connections = sum(
        1
        for m in matches or ()
        if m.status in CONNECTION_STATUSES and (user_id is None or m.involves(user_id))
    )
    return DashboardSummary(
        teaching=teaching,
        learning=learning,
        teach_count=len(teaching),
        learn_count=len(learning),
        connections=connections,
    )


class Dashboard:
    """Loads everything the dashboard shows for a signed-in user."""

    def __init__(
        self,
        catalog: SkillCatalog,
        matches: MatchRequestService,
        profiles: ProfileDirectory,
    ) -> None:
        self._catalog = catalog
        self._matches = matches
        self._profiles = profiles

    def for_user(self, user_id: str | None) -> DashboardView:
        user_id = require_identity(user_id, "viewing the dashboard")
        skills = self._catalog.list_own_skills(user_id)
        summary = summarize(skills, self._matches.list_for_user(user_id), user_id)
        logger.debug(
            "Dashboard for %s: %d teaching, %d learning, %d connections",
            user_id,
            summary.teach_count,
            summary.learn_count,
            summary.connections,
        )
        return DashboardView(user_id=user_id, profile=self._profiles.get(user_id), summary=summary)
