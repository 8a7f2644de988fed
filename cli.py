from __future__ import annotations
import asyncio
from typing import Optional

import typer
from loguru import logger

from config import settings
from deps import get_query_service, shutdown_clients
from services.post_query_service import Listing
from utils.logging import setup_logging
from views.presenters import format_date

app = typer.Typer(pretty_exceptions_show_locals=False)


def _run(coro) -> Listing:
    async def _inner():
        try:
            return await coro
        finally:
            await shutdown_clients()
    return asyncio.run(_inner())


def _exit_on_error(listing: Listing) -> None:
    if listing.error:
        logger.error(listing.error)
        raise typer.Exit(code=1)


@app.command("serve")
def serve(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False):
    """API 서버를 실행합니다."""
    import uvicorn

    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "main:app",
        host=host or settings.APP_HOST,
        port=port or settings.APP_PORT,
        reload=reload,
    )


@app.command("posts")
def posts(
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t"),
    search: Optional[str] = typer.Option(None, "--search", "-q"),
):
    """글 목록을 최신순으로 출력합니다."""
    setup_logging(settings.LOG_LEVEL)
    listing = _run(get_query_service().list_posts(category_slug=category, tag_slug=tag, search_term=search))
    _exit_on_error(listing)
    for p in listing.items:
        cat = p.category.name if p.category else "-"
        tags = ", ".join(t.name for t in p.tags)
        typer.echo(f"{format_date(p.published_at):>13}  [{cat}] {p.title}  ({p.slug})  {tags}")
    typer.echo(f"{len(listing.items)} article(s)")


@app.command("categories")
def categories():
    """카테고리 목록을 출력합니다."""
    setup_logging(settings.LOG_LEVEL)
    listing = _run(get_query_service().list_categories())
    _exit_on_error(listing)
    for c in listing.items:
        typer.echo(f"{c.slug}\t{c.name}")


@app.command("tags")
def tags():
    """태그 목록을 출력합니다."""
    setup_logging(settings.LOG_LEVEL)
    listing = _run(get_query_service().list_tags())
    _exit_on_error(listing)
    for t in listing.items:
        typer.echo(f"{t.slug}\t{t.name}")


if __name__ == "__main__":
    app()
