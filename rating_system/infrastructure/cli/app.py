"""Rating system CLI - Main application entry point and app structure."""

from typing import Annotated
from uuid import UUID

from rich.console import Console
import typer

from rating_system import __version__ as VERSION
from rating_system.config import (
    Settings,
    get_logger,
    load_settings,
    log_startup_info,
    setup_loguru_logger,
)
from rating_system.domain.pagination import PageParams
from rating_system.infrastructure.cli.async_helpers import (
    async_command,
    engine_scope,
    rating_service_scope,
)
from rating_system.infrastructure.cli.ui import (
    display_average,
    display_comments,
    display_rating,
    display_reviews,
)
from rating_system.infrastructure.persistence.database.db_models import init_db

# Initialize console and logger with reasonable width
console = Console(width=100)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"Rating system v{VERSION} - ratings, reviews and comments for services",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

PageOption = Annotated[int, typer.Option("--page", "-p", help="1-based page number")]
LimitOption = Annotated[
    int | None, typer.Option("--limit", "-l", help="Items per page (default from settings)")
]
SortByOption = Annotated[
    str, typer.Option("--sort-by", "-s", help="Sort field; unknown fields sort by created_at")
]
DirectionOption = Annotated[
    str, typer.Option("--direction", "-d", help="Sort direction: asc or desc")
]


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _page_params(
    settings: Settings, page: int, limit: int | None, sort_by: str, direction: str
) -> PageParams:
    return PageParams.from_page(
        page=page,
        limit=limit if limit is not None else settings.service.default_page_size,
        sort_by=sort_by,
        sort_direction=direction,
    )


@app.command(name="init-db", rich_help_panel="⚙️ System")
@async_command
async def init_db_command(ctx: typer.Context) -> None:
    """Create database tables if they do not exist."""
    async with engine_scope(_settings(ctx)) as engine:
        await init_db(engine)
    console.print("[green]✓[/green] Database schema ready")


@app.command(name="rate", rich_help_panel="⭐ Ratings")
@async_command
async def rate_command(
    ctx: typer.Context,
    user_id: Annotated[UUID, typer.Argument(help="Rating user")],
    service_id: Annotated[UUID, typer.Argument(help="Rated service")],
    score: Annotated[int, typer.Argument(help="Score from 1 to 5")],
) -> None:
    """Rate a service. Rating again replaces the previous score."""
    async with rating_service_scope(_settings(ctx)) as service:
        rating = await service.create_rating(user_id, service_id, score)
    display_rating(rating)


@app.command(name="average", rich_help_panel="⭐ Ratings")
@async_command
async def average_command(
    ctx: typer.Context,
    service_id: Annotated[UUID, typer.Argument(help="Service to summarize")],
) -> None:
    """Show the average score of a service."""
    async with rating_service_scope(_settings(ctx)) as service:
        average = await service.get_average_rating(service_id)
    display_average(average)


@app.command(name="reviews", rich_help_panel="📝 Reviews")
@async_command
async def reviews_command(
    ctx: typer.Context,
    service_id: Annotated[UUID, typer.Argument(help="Service whose reviews to list")],
    page: PageOption = 1,
    limit: LimitOption = None,
    sort_by: SortByOption = "",
    direction: DirectionOption = "desc",
) -> None:
    """List reviews for a service, newest first."""
    settings = _settings(ctx)
    params = _page_params(settings, page, limit, sort_by, direction)
    async with rating_service_scope(settings) as service:
        result = await service.list_reviews_by_service(service_id, params)
    display_reviews(result)


@app.command(name="comments", rich_help_panel="📝 Reviews")
@async_command
async def comments_command(
    ctx: typer.Context,
    review_id: Annotated[UUID, typer.Argument(help="Review whose comments to list")],
    page: PageOption = 1,
    limit: LimitOption = None,
    sort_by: SortByOption = "",
    direction: DirectionOption = "desc",
) -> None:
    """List comments on a review, oldest first."""
    settings = _settings(ctx)
    params = _page_params(settings, page, limit, sort_by, direction)
    async with rating_service_scope(settings) as service:
        result = await service.list_comments_by_review(review_id, params)
    display_comments(result)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]Rating system[/bold bright_blue] [dim]v{VERSION}[/dim]")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize the rating system CLI."""
    settings = load_settings()

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = settings

    # Setup logging first
    setup_loguru_logger(settings, verbose)
    log_startup_info(settings)


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
