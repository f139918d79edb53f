"""covmerge show command - list the sources of one profile."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from covmerge.core.errors import CovMergeError
from covmerge.profile import Profile, merge_profile, read_profile


@click.command()
@click.argument("profile", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_command(profile: Path, as_json: bool) -> None:
    """Show mode and per-source block counts of PROFILE, duplicates collapsed."""
    summary = Profile()
    try:
        parsed = read_profile(profile)
        if parsed is None:
            raise click.ClickException(f"Profile {profile} is absent or empty.")
        merge_profile(summary, parsed, path=str(profile))
    except CovMergeError as e:
        raise click.ClickException(str(e)) from e

    mode = summary.mode.value  # type: ignore[union-attr]
    rows = [(path, len(summary.sources[path])) for path in sorted(summary.sources)]

    if as_json:
        click.echo(
            json.dumps(
                {
                    "mode": mode,
                    "sources": [{"path": path, "blocks": n} for path, n in rows],
                    "blocks": summary.block_count,
                }
            )
        )
        return

    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("source", style="cyan")
    table.add_column("blocks", justify="right")
    for path, n in rows:
        table.add_row(path, str(n))

    console = Console()
    console.print(f"mode: [bold]{mode}[/bold]")
    console.print(table)
