"""Quickstart examples for skillswap.

Demonstrates adding skills, browsing with filters, sending and answering
connection requests, and the dashboard summary.

Run this file directly to verify your installation:

    python examples/quickstart.py

No external services are required; everything runs in-memory.
"""

from skillswap.core import MatchRequestService, ProfileDirectory, SkillCatalog
from skillswap.dashboard import Dashboard
from skillswap.discovery import discover
from skillswap.errors import AuthRequiredError, ValidationError
from skillswap.models import FilterSpec, ListingType, Profile
from skillswap.store import InMemoryRecordStore


def _services() -> tuple[ProfileDirectory, SkillCatalog, MatchRequestService]:
    store = InMemoryRecordStore()
    profiles = ProfileDirectory(store)
    profiles.register(Profile(user_id="alice", username="alice", full_name="Alice Moreau"))
    profiles.register(Profile(user_id="bob", username="bob", full_name="Bob Okafor", bio="Weekend baker"))
    return profiles, SkillCatalog(store, profiles), MatchRequestService(store)


# ---------------------------------------------------------------------------
# Demo 1: Add skills and browse
# ---------------------------------------------------------------------------


def demo_add_and_browse() -> None:
    """Add a few listings then browse them as another member."""
    print("\n--- Demo 1: Add and Browse ---")

    _, catalog, _ = _services()
    catalog.create_skill(
        "alice",
        {
            "title": "Guitar Basics",
            "description": "Open chords, strumming patterns and your first three songs.",
            "category": "Music",
            "level": "beginner",
            "listing_type": "teach",
        },
    )
    catalog.create_skill(
        "alice",
        {
            "title": "Conversational Spanish",
            "description": "Looking for a patient partner for weekly practice.",
            "category": "Languages",
            "level": "intermediate",
            "listing_type": "learn",
        },
    )
    catalog.create_skill(
        "bob",
        {
            "title": "Sourdough Bread",
            "description": "Keeping a starter alive and baking a proper loaf.",
            "category": "Cooking",
            "level": "advanced",
            "listing_type": "teach",
        },
    )

    # Bob browses: his own listing is excluded before filtering
    candidates = catalog.list_discoverable("bob")
    owners = {c.id: c.profile for c in candidates}
    for spec in (
        FilterSpec(listing_type=ListingType.TEACH),
        FilterSpec(listing_type=ListingType.LEARN, search_term="spanish"),
        FilterSpec(listing_type=ListingType.TEACH, category="Cooking"),
    ):
        result = discover(candidates, spec)
        print(f"{spec.listing_type.value:<5} search={spec.search_term!r:<10} category={spec.category:<8}"
              f" -> {len(result.skills)} result(s)")
        for skill in result.skills:
            print(f"  {skill.title} ({skill.level.value}) by {owners[skill.id].full_name}")
    print(f"Category choices: {[c.value for c in result.categories]}")


# ---------------------------------------------------------------------------
# Demo 2: Connection requests
# ---------------------------------------------------------------------------


def demo_connection_requests() -> None:
    """Send a request, accept it, and show the dashboard counts."""
    print("\n--- Demo 2: Connection Requests ---")

    profiles, catalog, matches = _services()
    guitar = catalog.create_skill(
        "alice",
        {
            "title": "Guitar Basics",
            "description": "Open chords and strumming.",
            "category": "Music",
            "level": "beginner",
            "listing_type": "teach",
        },
    )

    request = matches.request_connection("bob", guitar)
    print(f"Request {request.id[:8]}: {request.message!r} status={request.status.value}")

    accepted = matches.accept("alice", request.id)
    print(f"After accept: status={accepted.status.value}")

    view = Dashboard(catalog, matches, profiles).for_user("alice")
    summary = view.summary
    print(f"Dashboard for {view.display_name}: teaching={summary.teach_count} "
          f"learning={summary.learn_count} connections={summary.connections}")


# ---------------------------------------------------------------------------
# Demo 3: Error handling
# ---------------------------------------------------------------------------


def demo_error_handling() -> None:
    """Show the errors raised for bad input and missing identity."""
    print("\n--- Demo 3: Error Handling ---")

    _, catalog, matches = _services()
    try:
        catalog.create_skill("alice", {"title": "Knitting", "category": "Crafts"})
    except ValidationError as error:
        print(f"ValidationError: {error.user_message()}")

    skill = catalog.create_skill(
        "alice",
        {"title": "Chess", "description": "Openings.", "category": "Other", "level": "beginner", "listing_type": "teach"},
    )
    try:
        matches.request_connection(None, skill)
    except AuthRequiredError as error:
        print(f"AuthRequiredError: {error.user_message()}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run all skillswap quickstart demos."""
    print("=== skillswap Quickstart ===")
    demo_add_and_browse()
    demo_connection_requests()
    demo_error_handling()
    print("\nAll demos completed successfully.")


if __name__ == "__main__":
    main()
