"""
Command line access to the gist blog.

Usage:
    gistblog list-posts
    gistblog import-posts posts/ extra.md
    gistblog export-posts backup/
"""

import logging
from pathlib import Path

import click

from gistblog.dependencies import build_posts_service
from gistblog.errors import BlogError
from gistblog.importer import export_posts, import_files
from gistblog.repos.gist_repo import GistStore
from gistblog.settings import settings

logger = logging.getLogger(__name__)


def _service(ctx: click.Context):
    obj = ctx.obj
    if obj.get("service") is None:
        try:
            store = GistStore(
                settings.GIST_ID,
                token=obj.get("token") or settings.GITHUB_TOKEN,
                api_url=settings.GITHUB_API_URL,
            )
        except ValueError as e:
            raise click.ClickException(str(e))
        ctx.call_on_close(store.close)
        obj["service"] = build_posts_service(store, settings)
    return obj["service"]


@click.group()
@click.option("--token", default=None, help="GitHub token (defaults to GITHUB_TOKEN)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, token, verbose: bool) -> None:
    """Manage blog posts stored in a GitHub Gist."""
    ctx.ensure_object(dict)
    ctx.obj["token"] = token
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@main.command("list-posts")
@click.pass_context
def list_posts(ctx: click.Context) -> None:
    """List every post, drafts included, newest first."""
    try:
        posts = _service(ctx).list_all_posts()
    except BlogError as e:
        raise click.ClickException(str(e))
    for post in posts:
        click.echo(f"{post.get('filename')}\t{post.get('status')}\t{post.get('title')}")


@main.command("import-posts")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-n", "--dry-run", is_flag=True, help="Parse files without writing")
@click.pass_context
def import_posts(ctx: click.Context, paths, dry_run: bool) -> None:
    """Create posts from local Markdown files with YAML front matter."""
    try:
        service = None if dry_run else _service(ctx)
        created = import_files(service, paths, dry_run=dry_run)
    except BlogError as e:
        raise click.ClickException(str(e))
    verb = "Would import" if dry_run else "Imported"
    click.echo(f"{verb} {len(created)} post(s)")


@main.command("export-posts")
@click.argument("target", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def export(ctx: click.Context, target: Path) -> None:
    """Write every post file in the gist into TARGET."""
    try:
        written = export_posts(_service(ctx), target)
    except BlogError as e:
        raise click.ClickException(str(e))
    click.echo(f"Exported {len(written)} post(s) to {target}")


if __name__ == "__main__":
    main()
