"""Flask CLI commands for seeding a development database."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from feed.core.extensions import db
from feed.core.notifications import get_channel
from feed.core.storage import get_image_store
from feed.services import (
    Authenticated,
    IdentityService,
    PostCreateIn,
    PostService,
    ServiceContext,
    UserRegisterIn,
)
from feed.services._shared.errors import ConflictError

LOGGER = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo-password"
DEMO_NAME = "Demo User"
DEMO_POSTS = [
    ("First light", "Morning walk along the river before work.", "images/demo-1.png"),
    ("Lunch break", "Tried the new noodle place around the corner.", "images/demo-2.jpg"),
    ("Weekend plans", "Packing for a two day hike in the hills.", "images/demo-3.jpeg"),
]


def _ensure_non_production() -> None:
    """Abort seeding when running with the production configuration."""
    if str(current_app.config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("The 'flask seed' commands are restricted to non-production environments.")


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for seeding.")
def seed_cli(verbose: bool) -> None:
    """Collection of database seeding commands."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@seed_cli.command("demo")
@click.option("--reset", is_flag=True, help="Drop and recreate all tables first.")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def demo_command(reset: bool, yes: bool) -> None:
    """Create a demo user with a few posts through the service layer."""
    _ensure_non_production()

    if reset:
        if not yes:
            click.confirm("This will DROP all application tables and recreate them. Continue?", abort=True)
        LOGGER.info("Recreating database schema...")
        db.session.remove()
        db.drop_all()
    db.create_all()

    try:
        user = IdentityService().register(
            UserRegisterIn(email=DEMO_EMAIL, password=DEMO_PASSWORD, name=DEMO_NAME)
        )
    except ConflictError:
        click.echo(f"Demo user {DEMO_EMAIL} already exists; nothing to do.")
        return

    posts = PostService(
        ctx=ServiceContext(identity=Authenticated(user_id=user.id)),
        images=get_image_store(),
        channel=get_channel(),
    )
    for title, content, image_url in DEMO_POSTS:
        created = posts.create(PostCreateIn(title=title, content=content, image_url=image_url))
        LOGGER.debug("Seeded post %s", created.id)

    click.echo(f"Seeded user {DEMO_EMAIL} (password: {DEMO_PASSWORD}) with {len(DEMO_POSTS)} posts.")
