"""Review site CLI - Admin commands."""
import typer
from rich.console import Console
from rich.table import Table

from reviewsite.exceptions import ReviewSiteError

app = typer.Typer()
console = Console()


def get_db_session():
    """Get a database session."""
    from reviewsite import database
    return database.SessionLocal()


def _fail(error: ReviewSiteError):
    console.print(f"[red]{error.message}[/red]")
    raise typer.Exit(1)


@app.command("create-user")
def create_user(
    username: str = typer.Argument(..., help="Username for new user"),
    email: str = typer.Argument(..., help="Email address"),
    is_admin: bool = typer.Option(False, "--admin", help="Grant admin privileges"),
):
    """Create a new user."""
    from reviewsite.database import transaction
    from reviewsite.models.user import User

    db = get_db_session()
    try:
        existing = db.query(User).filter(
            (User.username == username) | (User.email == email)
        ).first()
        if existing:
            console.print(f"[red]User '{username}' or email '{email}' already exists[/red]")
            raise typer.Exit(1)

        with transaction(db):
            db.add(User(username=username, email=email, is_admin=is_admin))

        role = "admin" if is_admin else "user"
        console.print(f"[green]{role.capitalize()} '{username}' created successfully[/green]")
    finally:
        db.close()


@app.command("list-users")
def list_users():
    """List all users."""
    from reviewsite.models.user import User

    db = get_db_session()
    try:
        users = db.query(User).filter(User.deleted_at.is_(None)).order_by(User.username).all()

        table = Table(title="Users")
        table.add_column("ID", style="dim")
        table.add_column("Username", style="cyan")
        table.add_column("Email")
        table.add_column("Admin")

        for u in users:
            table.add_row(str(u.id), u.username, u.email, "yes" if u.is_admin else "")

        console.print(table)
    finally:
        db.close()


@app.command("pending")
def pending():
    """List reviews waiting for moderation."""
    from reviewsite.services.reviews import ReviewService

    db = get_db_session()
    try:
        reviews = ReviewService(db).pending()
        if not reviews:
            console.print("No reviews pending moderation")
            return

        table = Table(title="Pending Reviews")
        table.add_column("ID", style="dim")
        table.add_column("Author")
        table.add_column("Target", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Text")

        for review in reviews:
            target = review.target
            table.add_row(
                str(review.id),
                str(review.user_id),
                f"{target.kind.value} {target.id}",
                str(review.final_score),
                (review.text or "")[:60],
            )

        console.print(table)
    finally:
        db.close()


def _moderate(review_id: int, admin_username: str, decision: str):
    from reviewsite.models.review import ModerationDecision
    from reviewsite.services.identity import resolve_actor_by_username
    from reviewsite.services.reviews import ReviewService

    db = get_db_session()
    try:
        actor = resolve_actor_by_username(db, admin_username)
        review = ReviewService(db).moderate(actor, review_id, ModerationDecision(decision))
        console.print(f"[green]Review {review.id} {review.status}[/green] (score {review.final_score})")
    except ReviewSiteError as e:
        _fail(e)
    finally:
        db.close()


@app.command("approve")
def approve(
    review_id: int = typer.Argument(..., help="Review ID"),
    admin_username: str = typer.Option(..., "--as", help="Admin username performing the moderation"),
):
    """Approve a pending review."""
    _moderate(review_id, admin_username, "approve")


@app.command("reject")
def reject(
    review_id: int = typer.Argument(..., help="Review ID"),
    admin_username: str = typer.Option(..., "--as", help="Admin username performing the moderation"),
):
    """Reject a pending review."""
    _moderate(review_id, admin_username, "reject")


@app.command("recalc-ratings")
def recalc_ratings():
    """Recalculate average ratings for every album and track."""
    from reviewsite.services.reviews import ReviewService

    db = get_db_session()
    try:
        count = ReviewService(db).recalculate_all_ratings()
        console.print(f"[green]Recalculated {count} average ratings[/green]")
    finally:
        db.close()


@app.command("badges")
def badges(username: str = typer.Argument(..., help="Username")):
    """Show the badges a user has earned."""
    from reviewsite.services.badges import BadgeService
    from reviewsite.services.identity import resolve_actor_by_username

    db = get_db_session()
    try:
        actor = resolve_actor_by_username(db, username)
        earned = BadgeService(db).for_user(actor.id)
        if not earned:
            console.print(f"{username} has no badges yet")
            return

        table = Table(title=f"Badges for {username}")
        table.add_column("Badge", style="cyan")
        table.add_column("Description")

        for badge in earned:
            table.add_row(f"{badge.icon} {badge.name}", badge.description)

        console.print(table)
    except ReviewSiteError as e:
        _fail(e)
    finally:
        db.close()
