"""Tests for the dashboard aggregator."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import make_skill
from skillswap.core import MatchRequestService, SkillCatalog
from skillswap.dashboard import Dashboard, summarize
from skillswap.errors import AuthRequiredError
from skillswap.models import ListingType, MatchRequest, MatchStatus, Skill


def _match(match_id: str, requester: str, provider: str, status: MatchStatus) -> MatchRequest:
    return MatchRequest(
        id=match_id,
        requester_id=requester,
        provider_id=provider,
        skill_id="s1",
        message="hi",
        status=status,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestSummarize:
    """Tests for summarize()."""

    def test_partitions_and_keeps_order(self) -> None:
        skills = [
            make_skill("a", "A"),
            make_skill("b", "B", listing_type=ListingType.LEARN),
            make_skill("c", "C"),
            make_skill("d", "D", listing_type=ListingType.LEARN),
        ]
        summary = summarize(skills)
        assert [s.id for s in summary.teaching] == ["a", "c"]
        assert [s.id for s in summary.learning] == ["b", "d"]
        assert summary.teach_count == 2
        assert summary.learn_count == 2

    @pytest.mark.parametrize("teach,learn", [(0, 0), (3, 0), (0, 2), (4, 5)])
    def test_partition_sizes_add_up(self, teach: int, learn: int) -> None:
        skills: list[Skill] = [make_skill(f"t{i}", "T") for i in range(teach)]
        skills += [make_skill(f"l{i}", "L", listing_type=ListingType.LEARN) for i in range(learn)]
        summary = summarize(skills)
        assert len(summary.teaching) + len(summary.learning) == len(skills)

    def test_no_matches_means_no_connections(self) -> None:
        assert summarize([make_skill("a", "A")]).connections == 0

    def test_connections_count_pending_and_accepted(self) -> None:
        matches = [
            _match("m1", "u2", "u1", MatchStatus.PENDING),
            _match("m2", "u1", "u3", MatchStatus.ACCEPTED),
            _match("m3", "u4", "u1", MatchStatus.DECLINED),
            _match("m4", "u1", "u5", MatchStatus.CANCELLED),
            _match("m5", "u6", "u7", MatchStatus.ACCEPTED),
        ]
        assert summarize([], matches, user_id="u1").connections == 2


class TestDashboard:
    """Tests for Dashboard.for_user()."""

    def test_view_for_user(
        self,
        dashboard: Dashboard,
        catalog: SkillCatalog,
        matches: MatchRequestService,
        guitar_fields: dict[str, str],
        u1_guitar: Skill,
    ) -> None:
        catalog.create_skill("u1", {**guitar_fields, "title": "Italian", "category": "Languages", "listing_type": "learn"})
        catalog.create_skill("u2", {**guitar_fields, "title": "Bass"})
        matches.request_connection("u2", u1_guitar)

        view = dashboard.for_user("u1")
        assert view.display_name == "alice"
        assert view.summary.teach_count == 1
        assert view.summary.learn_count == 1
        assert view.summary.connections == 1

    def test_user_without_profile(self, dashboard: Dashboard) -> None:
        view = dashboard.for_user("u3")
        assert view.profile is None
        assert view.display_name == "User"
        assert view.summary.teach_count == 0

    def test_signed_out(self, dashboard: Dashboard) -> None:
        with pytest.raises(AuthRequiredError):
            dashboard.for_user(None)
