"""Review site CLI - Main entry point."""
import typer
from rich.console import Console
from rich.table import Table

from reviewsite.cli import admin
from reviewsite.logging_config import setup_logging

app = typer.Typer(
    name="reviewsite",
    help="Music review site - reviews, moderation and likes",
    add_completion=True,
)

console = Console()

app.add_typer(admin.app, name="admin", help="Admin commands")


@app.callback()
def main():
    """Music review site command line."""
    setup_logging()


@app.command()
def version():
    """Show version information."""
    from reviewsite import __version__
    console.print(f"Music Review Site v{__version__}")


@app.command()
def status():
    """Check system status."""
    from sqlalchemy import text
    from reviewsite import database

    table = Table(title="Review Site Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")

    db = database.SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        table.add_row("Database", "Connected")
    except Exception as e:
        table.add_row("Database", f"[red]Error: {e}[/red]")
    finally:
        db.close()

    console.print(table)


@app.command("init-db")
def init_db():
    """Create all tables (development databases; use alembic in production)."""
    from reviewsite import database
    import reviewsite.models  # noqa: F401  registers tables on Base.metadata

    db = database.SessionLocal()
    try:
        database.Base.metadata.create_all(bind=db.get_bind())
    finally:
        db.close()
    console.print("[green]Database tables created[/green]")


if __name__ == "__main__":
    app()
