"""CLI entry point for skillswap."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path

import click

import yaml  # type: ignore[import-untyped]

from skillswap.api import create_app
from skillswap.config import get_settings
from skillswap.core import (
    MatchRequestService,
    ProfileDirectory,
    SkillCatalog,
    connection_sent_message,
    require_identity,
    skill_added_message,
)
from skillswap.dashboard import Dashboard
from skillswap.discovery import discover
from skillswap.errors import SkillSwapError
from skillswap.logging_setup import configure_logging
from skillswap.models import (
    ALL_CATEGORIES,
    FilterSpec,
    ListingType,
    MatchRequest,
    Profile,
    Skill,
    SkillCategory,
    SkillLevel,
)
from skillswap.store import JsonFileRecordStore, RecordStore, StoreError


@dataclass
class Services:
    """Services bound to the CLI's record store and acting identity."""

    user: str | None
    store: RecordStore
    profiles: ProfileDirectory
    catalog: SkillCatalog
    matches: MatchRequestService
    dashboard: Dashboard


pass_services = click.make_pass_decorator(Services)


class SkillSwapGroup(click.Group):
    """Report domain errors as a single line instead of a traceback."""

    def invoke(self, ctx: click.Context) -> object:
        try:
            return super().invoke(ctx)
        except SkillSwapError as exc:
            click.echo(f"Error: {exc.user_message()}", err=True)
            ctx.exit(1)


def _skill_line(skill: Skill) -> str:
    status = "" if skill.is_active else "  (inactive)"
    return (
        f"[{skill.id}] {skill.title}  {skill.listing_type.value}/{skill.level.value}  "
        f"category={skill.category.value}{status}"
    )


def _match_line(match: MatchRequest, user_id: str) -> str:
    direction = "to" if match.requester_id == user_id else "from"
    other = match.provider_id if direction == "to" else match.requester_id
    return f"[{match.id}] {match.status.value:<9} {direction} {other}  skill={match.skill_id}  \"{match.message}\""


def _load_skill_file(path: Path) -> dict[str, object]:
    """Read skill fields from a YAML or JSON file.

    Raises:
        click.ClickException: If the file cannot be parsed or does not hold a
            mapping of fields.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw) or {}
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"Cannot parse skill file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise click.ClickException(f"Skill file {path} must contain a mapping of fields")
    return data


@click.group(cls=SkillSwapGroup)
@click.version_option()
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON data file (default: SKILLSWAP_DATA_FILE or ~/.skillswap/data.json).",
)
@click.option("--user", default=None, help="Identity to act as (default: SKILLSWAP_USER).")
@click.option("--log-level", default=None, help="Logging level (default: SKILLSWAP_LOG_LEVEL).")
@click.pass_context
def main(ctx: click.Context, data_file: Path | None, user: str | None, log_level: str | None) -> None:
    """SkillSwap: list skills to teach or learn and connect with other members."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    try:
        store = JsonFileRecordStore(data_file or settings.data_file)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    profiles = ProfileDirectory(store)
    catalog = SkillCatalog(store, profiles)
    matches = MatchRequestService(store)
    ctx.obj = Services(
        user=user or settings.user,
        store=store,
        profiles=profiles,
        catalog=catalog,
        matches=matches,
        dashboard=Dashboard(catalog, matches, profiles),
    )


@main.command("profile")
@click.option("--username", required=True, help="Public username.")
@click.option("--full-name", required=True, help="Full name shown on listings.")
@click.option("--bio", default=None, help="Optional short bio.")
@pass_services
def profile(services: Services, username: str, full_name: str, bio: str | None) -> None:
    """Create or update your profile."""
    user_id = require_identity(services.user, "editing your profile")
    saved = services.profiles.register(Profile(user_id=user_id, username=username, full_name=full_name, bio=bio))
    click.echo(f"Profile saved for {saved.username} ({saved.full_name}).")


@main.command("add")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a skill YAML/JSON file instead of options.",
)
@click.option("--type", "listing_type", default=None, help="teach or learn (default: teach).")
@click.option("--title", default="", help="Skill title.")
@click.option("--description", default="", help="What you will teach or want to learn.")
@click.option(
    "--category",
    default="",
    help=f"One of: {', '.join(c.value for c in SkillCategory)}.",
)
@click.option("--level", default="", help=f"One of: {', '.join(lvl.value for lvl in SkillLevel)}.")
@pass_services
def add(
    services: Services,
    config: Path | None,
    listing_type: str | None,
    title: str,
    description: str,
    category: str,
    level: str,
) -> None:
    """Add a skill you can teach or want to learn."""
    if config is not None:
        fields = _load_skill_file(config)
        if listing_type is not None:
            fields["listing_type"] = listing_type
    else:
        fields = {
            "title": title,
            "description": description,
            "category": category,
            "level": level,
            "listing_type": ListingType.from_query(listing_type).value,
        }
    skill = services.catalog.create_skill(services.user, fields)
    click.echo(f"Skill added successfully! {skill_added_message(skill.listing_type)} (ID: {skill.id})")


@main.command("mine")
@pass_services
def mine(services: Services) -> None:
    """List your own skills, newest first."""
    user_id = require_identity(services.user, "listing your skills")
    skills = services.catalog.list_own_skills(user_id)
    if not skills:
        click.echo("You have not added any skills yet.")
        return
    for skill in skills:
        click.echo(_skill_line(skill))


@main.command("browse")
@click.option("--search", default="", help="Text to look for in title, description or category.")
@click.option("--category", default=ALL_CATEGORIES, show_default=True, help="Category filter.")
@click.option(
    "--type",
    "listing_type",
    type=click.Choice([t.value for t in ListingType]),
    default=ListingType.TEACH.value,
    show_default=True,
    help="Show teaching or learning listings.",
)
@pass_services
def browse(services: Services, search: str, category: str, listing_type: str) -> None:
    """Browse other members' active skills."""
    candidates = services.catalog.list_discoverable(services.user)
    result = discover(
        candidates,
        FilterSpec(search_term=search, category=category, listing_type=ListingType(listing_type)),
    )
    if result.categories:
        click.echo(f"Categories: {', '.join(c.value for c in result.categories)}")
    if result.is_empty:
        click.echo("No skills found matching your criteria.")
        return
    by_id = {c.id: c for c in candidates}
    for skill in result.skills:
        owner = by_id[skill.id].profile
        click.echo(f"{_skill_line(skill)}  by {owner.full_name} (@{owner.username})")


@main.command("connect")
@click.argument("skill_id")
@click.option("--message", default=None, help="Message to the skill owner.")
@pass_services
def connect(services: Services, skill_id: str, message: str | None) -> None:
    """Send a connection request for SKILL_ID."""
    require_identity(services.user, "sending a connection request")
    skill = services.catalog.get_skill(skill_id)
    match = services.matches.request_connection(services.user, skill, message)
    click.echo(f"Connection request sent! {connection_sent_message(skill)} (ID: {match.id})")


@main.command("requests")
@pass_services
def requests(services: Services) -> None:
    """List connection requests you sent or received."""
    user_id = require_identity(services.user, "listing connection requests")
    matches = services.matches.list_for_user(user_id)
    if not matches:
        click.echo("No connection requests.")
        return
    for match in matches:
        click.echo(_match_line(match, user_id))


@main.command("accept")
@click.argument("match_id")
@pass_services
def accept(services: Services, match_id: str) -> None:
    """Accept a connection request you received."""
    match = services.matches.accept(services.user, match_id)
    click.echo(f"Request {match.id} accepted.")


@main.command("decline")
@click.argument("match_id")
@pass_services
def decline(services: Services, match_id: str) -> None:
    """Decline a connection request you received."""
    match = services.matches.decline(services.user, match_id)
    click.echo(f"Request {match.id} declined.")


@main.command("cancel")
@click.argument("match_id")
@pass_services
def cancel(services: Services, match_id: str) -> None:
    """Cancel a connection request you sent."""
    match = services.matches.cancel(services.user, match_id)
    click.echo(f"Request {match.id} cancelled.")


@main.command("dashboard")
@pass_services
def dashboard(services: Services) -> None:
    """Show your skills and summary counts."""
    view = services.dashboard.for_user(services.user)
    summary = view.summary
    click.echo(f"Welcome, {view.display_name}")
    click.echo(
        f"Teaching: {summary.teach_count}  Learning: {summary.learn_count}  "
        f"Connections: {summary.connections}"
    )
    for heading, skills in (("Skills I Teach", summary.teaching), ("Skills I Want to Learn", summary.learning)):
        click.echo(f"\n{heading}:")
        if not skills:
            click.echo("  (none)")
        for skill in skills:
            click.echo(f"  {_skill_line(skill)}")


@main.command("serve")
@click.option("--port", default=None, type=int, help="Port to listen on (default: SKILLSWAP_API_PORT).")
@click.option("--host", default=None, help="Host to bind (default: SKILLSWAP_API_HOST).")
@pass_services
def serve(services: Services, port: int | None, host: str | None) -> None:
    """Start the skillswap API server on the same data file as the CLI."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    try:
        import uvicorn  # type: ignore[import-untyped]
    except ImportError:
        click.echo("uvicorn is required. Install with: pip install uvicorn", err=True)
        sys.exit(1)
    click.echo(f"Starting skillswap API on http://{host}:{port}")
    uvicorn.run(create_app(services.store), host=host, port=port)


if __name__ == "__main__":
    main()
