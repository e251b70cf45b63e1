"""CLI command for seeding the admin account.

Usage:
    coursehub seed
    coursehub seed --username admin --password secret
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

import typer

from coursehub.config import settings

app = typer.Typer(help="Create the admin user if it does not exist")


async def _seed(username: str, password: str) -> bool:
    from coursehub.observability import configure_logging
    from coursehub.persistence.db import Database
    from coursehub.persistence.repositories import UserRepository
    from coursehub.security.tokens import TokenService
    from coursehub.services.auth import AuthService

    configure_logging(json_format=False, level=settings.log_level)
    tokens = TokenService(
        settings.jwt_secret,
        issuer=settings.jwt_issuer,
        expiry=timedelta(hours=settings.jwt_expiry_hours),
    )
    database = Database(settings.database_url)
    try:
        await database.create_schema()
        async with database.session() as session:
            return await AuthService(UserRepository(session), tokens).ensure_admin(
                username, password
            )
    finally:
        await database.dispose()


@app.callback(invoke_without_command=True)
def seed(
    username: str = typer.Option(settings.admin_username, "--username", "-u"),
    password: str = typer.Option(settings.admin_password, "--password", "-p"),
) -> None:
    """Create the admin user if it does not exist."""
    created = asyncio.run(_seed(username, password))
    if created:
        typer.echo(f"Created admin user '{username}'")
    else:
        typer.echo(f"Admin user '{username}' already exists")
