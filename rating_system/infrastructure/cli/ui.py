"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from business logic.
"""

from collections.abc import Callable
from datetime import datetime
import functools
from typing import Any

from rich.console import Console
from rich.table import Table
import typer

from rating_system.config import get_logger
from rating_system.domain.entities import AverageRating, Comment, Rating, ReviewWithRating
from rating_system.domain.errors import RatingSystemError, StorageError
from rating_system.domain.pagination import Page

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

_PREVIEW_LENGTH = 60


def command_error_handler[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    This decorator wraps a command function to:
    1. Provide consistent error handling using Typer's Exit mechanism
    2. Log errors using Loguru with proper context
    3. Display user-friendly error messages with Rich

    Domain errors other than storage failures are the user's to fix, so they
    are shown without a traceback.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.removesuffix("_command").replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except RatingSystemError as e:
                if isinstance(e, StorageError):
                    logger.exception(f"Storage failure during {operation}")
                else:
                    logger.info(f"{operation} rejected ({e.kind}): {e}")
                console.print(f"\n[bold red]✗ {operation} failed ({e.kind}):[/bold red] {e}")
                raise typer.Exit(code=1) from e

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def _when(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def _preview(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= _PREVIEW_LENGTH:
        return text
    return text[: _PREVIEW_LENGTH - 1] + "…"


def _stars(score: int) -> str:
    return "★" * score + "☆" * (5 - score)


def display_rating(rating: Rating) -> None:
    """Print a stored rating."""
    console.print(
        f"[green]✓[/green] Rating [bold]{rating.score}[/bold] {_stars(rating.score)} "
        f"stored for service [cyan]{rating.service_id}[/cyan]"
    )
    console.print(f"[dim]id {rating.id} · updated {_when(rating.updated_at)}[/dim]")


def display_average(average: AverageRating) -> None:
    """Print the aggregate score of a service."""
    if average.total_ratings == 0:
        console.print(f"[yellow]No ratings yet for service {average.service_id}[/yellow]")
        return
    console.print(
        f"Service [cyan]{average.service_id}[/cyan]: "
        f"[bold]{average.average_score:.2f}[/bold] "
        f"from {average.total_ratings} rating(s)"
    )


def _page_caption(page: Page[Any]) -> str:
    caption = f"Page {page.params.page} of {max(page.page_count, 1)} · {page.total} total"
    if page.has_next:
        caption += " · more with --page"
    return caption


def display_reviews(page: Page[ReviewWithRating]) -> None:
    """Render a page of reviews as a table."""
    if not page.items:
        console.print(f"[yellow]No reviews on this page ({page.total} total)[/yellow]")
        return

    table = Table(title="Reviews", caption=_page_caption(page), show_lines=False)
    table.add_column("Score", justify="center", style="bold")
    table.add_column("Title", style="cyan")
    table.add_column("Content")
    table.add_column("Created", style="dim")
    table.add_column("ID", style="dim", overflow="fold")

    for review in page.items:
        table.add_row(
            str(review.score),
            _preview(review.title),
            _preview(review.content),
            _when(review.created_at),
            str(review.id),
        )
    console.print(table)


def display_comments(page: Page[Comment]) -> None:
    """Render a page of comments as a table."""
    if not page.items:
        console.print(f"[yellow]No comments on this page ({page.total} total)[/yellow]")
        return

    table = Table(title="Comments", caption=_page_caption(page))
    table.add_column("Created", style="dim")
    table.add_column("User", style="cyan", overflow="fold")
    table.add_column("Content")

    for comment in page.items:
        table.add_row(_when(comment.created_at), str(comment.user_id), _preview(comment.content))
    console.print(table)
