"""CLI entrypoint for imgsync."""

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text

from imgsync.config import SyncConfig, load_config, load_config_from_env
from imgsync.errors import ConfigError, SourceUnavailable
from imgsync.log import setup_logging
from imgsync.models import SyncReport

app = typer.Typer(
    name="imgsync",
    help="Sync images from a GitHub folder into Cloudinary",
    no_args_is_help=True,
)
console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML config path (default: environment variables)"),
]
LogLevelOption = Annotated[str, typer.Option(help="Log level")]
LogFileOption = Annotated[Path | None, typer.Option(help="Also append logs to this file")]


def _load(config: Path | None, require_github: bool = True) -> SyncConfig:
    load_dotenv()
    try:
        if config is not None:
            sync_config = load_config(config)
        else:
            sync_config = load_config_from_env(require_github=require_github)
        if require_github:
            sync_config.require_github()
        return sync_config
    except (ConfigError, FileNotFoundError) as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(code=2) from e


def print_failures(report: SyncReport):
    """Show failed items in a table."""
    if not report.failed:
        return
    table = Table(title=f"Failed uploads ({report.failed_count})", show_header=True)
    table.add_column("File")
    table.add_column("Error", style="red")
    for item in report.failed:
        table.add_row(Text(item.file), Text(item.error))
    console.print(table)


@app.command()
def sync(
    config: ConfigOption = None,
    folder: Annotated[str | None, typer.Option(help="Repository folder to list")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="List eligible images only")] = False,
    progress: Annotated[bool, typer.Option(help="Show a progress bar")] = False,
    log_level: LogLevelOption = "INFO",
    log_file: LogFileOption = None,
):
    """Run one sync of the GitHub folder into Cloudinary."""
    from imgsync.pipeline import preview_sync, run_scheduled
    from imgsync.sources import GitHubLister

    setup_logging(log_level, log_file)
    sync_config = _load(config)

    if dry_run:
        console.print("[yellow]DRY RUN - no uploads will be made[/yellow]")
        lister = GitHubLister(sync_config.require_github())
        try:
            planned = preview_sync(lister, sync_config, folder_path=folder)
        except SourceUnavailable as e:
            console.print(str(e), style="red", markup=False)
            raise typer.Exit(code=1) from e

        table = Table(title=f"Eligible images ({len(planned)})", show_header=True)
        table.add_column("File")
        table.add_column("Public ID")
        for descriptor, target in planned:
            table.add_row(descriptor.name, f"{target.destination_folder}/{target.identifier}")
        console.print(table)
        return

    response = run_scheduled(sync_config, folder_path=folder, progress=progress)
    console.print_json(data=response.body)

    if not response.ok:
        raise typer.Exit(code=1)

    print_failures(SyncReport(**response.body))


@app.command()
def local(
    folder: Annotated[Path, typer.Argument(help="Local folder with images")],
    config: ConfigOption = None,
    progress: Annotated[bool, typer.Option(help="Show a progress bar")] = True,
    log_level: LogLevelOption = "INFO",
    log_file: LogFileOption = None,
):
    """Upload the images in a local folder to Cloudinary."""
    from imgsync.hosting import CloudinaryUploader
    from imgsync.pipeline import sync_local_folder

    setup_logging(log_level, log_file)
    sync_config = _load(config, require_github=False)
    uploader = CloudinaryUploader.from_config(sync_config)

    try:
        report = sync_local_folder(folder, uploader, sync_config, progress=progress)
    except SourceUnavailable as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(code=1) from e

    console.print(f"\n[green]Uploaded {report.succeeded} of {report.total} images[/green]")
    for item in report.uploaded:
        console.print(f"  {item.file} -> {item.url}")
    print_failures(report)


@app.command()
def version():
    """Show version information."""
    from imgsync import __version__

    console.print(f"imgsync version {__version__}")


if __name__ == "__main__":
    app()
