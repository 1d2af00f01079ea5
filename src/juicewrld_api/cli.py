"""CLI entry point for the Juice WRLD API client."""

import json
from pathlib import Path

import click
from loguru import logger

from .api.client import JuiceWRLDClient
from .config import ClientConfig
from .errors import JuiceWRLDError

log = logger.bind(stage="cli")


def _find_config_file() -> Path | None:
    """Look for .env in cwd."""
    candidate = Path.cwd() / ".env"
    return candidate if candidate.is_file() else None


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _client(ctx: click.Context) -> JuiceWRLDClient:
    return ctx.obj


@click.group()
@click.option("--base-url", default=None, help="Override the API base URL.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    default=None,
    help="Path to .env file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    base_url: str | None,
    verbose: bool,
    config_file: str | None,
) -> None:
    """Query the Juice WRLD discography API."""
    env_file = Path(config_file) if config_file else _find_config_file()

    config_kwargs: dict[str, str] = {}
    if base_url:
        config_kwargs["base_url"] = base_url
    if verbose:
        config_kwargs["log_level"] = "DEBUG"

    config = ClientConfig(_env_file=env_file, **config_kwargs)
    config.setup_logging()
    log.debug(f"Config loaded (env file: {env_file})")

    client = JuiceWRLDClient(config=config)
    ctx.obj = client
    ctx.call_on_close(client.close)


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except JuiceWRLDError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.argument("song_id", type=int)
@click.pass_context
def song(ctx: click.Context, song_id: int) -> None:
    """Show one song's metadata."""
    result = _run(_client(ctx).get_song, song_id)
    _echo_json(result.model_dump(mode="json"))


@main.command()
@click.argument("query")
@click.option("--category", default=None, help="Filter by category.")
@click.option("--year", type=int, default=None, help="Filter by year.")
@click.option("--tag", "tags", multiple=True, help="Filter by tag (repeatable).")
@click.option("--limit", type=int, default=20, show_default=True)
@click.option("--offset", type=int, default=0, show_default=True)
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    category: str | None,
    year: int | None,
    tags: tuple[str, ...],
    limit: int,
    offset: int,
) -> None:
    """Search songs."""
    result = _run(
        _client(ctx).search_songs,
        query,
        category=category,
        year=year,
        tags=list(tags),
        limit=limit,
        offset=offset,
    )
    click.echo(f"{result.total} result(s)")
    for item in result.songs:
        click.echo(f"{item.id}\t{item.name}\t{item.era.name}")


@main.command()
@click.argument("song_id", type=int)
@click.pass_context
def play(ctx: click.Context, song_id: int) -> None:
    """Resolve a playable stream URL for a song."""
    result = _run(_client(ctx).play_song, song_id)
    _echo_json(result.to_dict())


@main.command()
@click.argument("path", default="")
@click.option("--search", "search_query", default=None, help="Recursive name search.")
@click.pass_context
def browse(ctx: click.Context, path: str, search_query: str | None) -> None:
    """List a directory on the file server."""
    listing = _run(_client(ctx).browse_files, path, search_query)
    click.echo(f"{listing.current_path or '/'}: {listing.total_directories} dir(s), "
               f"{listing.total_files} file(s)")
    for item in listing.items:
        marker = "/" if item.is_directory else ""
        click.echo(f"{item.name}{marker}\t{item.size_human}")


@main.command()
@click.argument("file_path")
@click.argument("dest", type=click.Path(dir_okay=False))
@click.pass_context
def download(ctx: click.Context, file_path: str, dest: str) -> None:
    """Download a file from the file server to DEST."""
    saved = _run(_client(ctx).download_file_to, file_path, dest)
    click.echo(f"Saved {saved}")


@main.group("zip")
def zip_group() -> None:
    """Server-side zip jobs."""


@zip_group.command("start")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def zip_start(ctx: click.Context, paths: tuple[str, ...]) -> None:
    job_id = _run(_client(ctx).start_zip_job, list(paths))
    click.echo(job_id)


@zip_group.command("status")
@click.argument("job_id")
@click.pass_context
def zip_status(ctx: click.Context, job_id: str) -> None:
    status = _run(_client(ctx).get_zip_job_status, job_id)
    _echo_json(status.to_dict())


@zip_group.command("cancel")
@click.argument("job_id")
@click.pass_context
def zip_cancel(ctx: click.Context, job_id: str) -> None:
    _run(_client(ctx).cancel_zip_job, job_id)
    click.echo(f"Cancelled {job_id}")
