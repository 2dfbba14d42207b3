"""
Retail Ops CLI.

Command-line interface for common operations: schema bootstrap, seeding,
development tokens and health checks.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table

from rest_api.models import Base
from rest_api.seed import seed
from shared.config.constants import Roles
from shared.config.settings import settings
from shared.infrastructure import db as database
from shared.security.auth import sign_jwt
from shared.utils.health import check_database

API_VERSION = "0.1.0"

app = typer.Typer(
    name="retail-ops",
    help="Retail Ops back-office CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init():
    """Create all tables on the configured database."""
    console.print(f"[blue]Creating tables ({settings.environment})[/blue]")
    Base.metadata.create_all(bind=database.engine)
    console.print("[green]✓ Tables created[/green]")


@app.command()
def db_seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding production"),
):
    """Seed roles and the initial super admin."""
    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    with database.get_db_context() as db:
        seed(db)
    console.print("[green]✓ Seed complete[/green]")


# =============================================================================
# Auth Commands
# =============================================================================

@app.command()
def token(
    user_id: int = typer.Argument(..., help="User id for the sub claim"),
    role: str = typer.Option(Roles.ADMIN, help=f"One of: {', '.join(Roles.ALL)}"),
    project_id: int | None = typer.Option(None, help="Project claim (omit to resolve from the user row)"),
    ttl_minutes: int = typer.Option(60, help="Token lifetime in minutes"),
):
    """Issue a bearer token for local testing."""
    if settings.environment == "production":
        console.print("[red]Development tokens are disabled in production[/red]")
        raise typer.Exit(1)
    if role not in Roles.ALL:
        console.print(f"[red]Unknown role: {role}[/red]")
        raise typer.Exit(1)

    payload = {"sub": user_id, "role": role}
    if project_id is not None:
        payload["project_id"] = project_id
    typer.echo(sign_jwt(payload, ttl_seconds=ttl_minutes * 60))


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health():
    """Check database connectivity."""
    result = check_database(database.SessionLocal)

    table = Table(title="Dependency Health")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    if result.is_healthy:
        table.add_row(result.component, "✓ Healthy", f"{result.latency_ms:.0f}ms")
    else:
        table.add_row(result.component, f"✗ {result.error}", "-")
    console.print(table)

    if not result.is_healthy:
        raise typer.Exit(1)


@app.command()
def config_check():
    """Validate settings the way production startup does."""
    errors = settings.validate_production_secrets()
    if not errors:
        console.print(f"[green]✓ Configuration OK ({settings.environment})[/green]")
        return
    for error in errors:
        console.print(f"[red]✗ {error}[/red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Retail Ops Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", API_VERSION)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
