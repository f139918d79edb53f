"""covmerge merge command - merge profile files into one summary profile."""

import json
from pathlib import Path

import click
from rich.console import Console

from covmerge.config.models import CovMergeConfig
from covmerge.core.errors import CovMergeError
from covmerge.profile import MergeSession


@click.command()
@click.argument("profiles", nargs=-1, required=True)
@click.option(
    "-o",
    "--output",
    required=True,
    help="Summary profile to write. Relative paths go to the output directory.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory relative profile names are resolved against.",
)
@click.option(
    "--overflow",
    type=click.Choice(["saturate", "error"]),
    default=None,
    help="Handling of execution counts exceeding 2**32-1 (default: saturate).",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def merge_command(
    ctx: click.Context,
    profiles: tuple[str, ...],
    output: str,
    output_dir: Path | None,
    overflow: str | None,
    as_json: bool,
) -> None:
    """Merge PROFILES, in the given order, into one summary profile.

    List the main process profile first, then those of re-executed children.
    Missing or empty profiles are skipped.
    """
    config: CovMergeConfig = (ctx.obj or {}).get("config") or CovMergeConfig()
    merge_config = config.merge.model_copy(
        update={
            k: v
            for k, v in (
                ("output_dir", str(output_dir) if output_dir else None),
                ("overflow", overflow),
            )
            if v is not None
        }
    )

    session = MergeSession.from_config(merge_config)
    try:
        session.merge_all(profiles)
        if session.summary.mode is None:
            raise click.ClickException("No coverage profile data found in any input file.")
        written = session.write(output)
    except CovMergeError as e:
        raise click.ClickException(str(e)) from e

    summary = session.summary
    if as_json:
        click.echo(
            json.dumps(
                {
                    "output": str(written),
                    "mode": summary.mode.value,  # type: ignore[union-attr]
                    "merged": [str(p) for p in session.merged],
                    "absent": [str(p) for p in session.absent],
                    "sources": len(summary.sources),
                    "blocks": summary.block_count,
                }
            )
        )
        return

    console = Console(stderr=True)
    console.print(
        f"[green]Merged[/green] {len(session.merged)} profile(s) "
        f"(mode: [cyan]{summary.mode.value}[/cyan]): "  # type: ignore[union-attr]
        f"{len(summary.sources)} sources, {summary.block_count} blocks -> {written}"
    )
    for path in session.absent:
        console.print(f"  [yellow]skipped[/yellow] {path} (absent or empty)")
