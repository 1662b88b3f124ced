"""partitions CLI entry point."""

import logging
import sys

import click

from partitions import __version__
from partitions.lilypond_compiler import DEFAULT_LILYPOND, compile_sheets
from partitions.sheet_finder import SheetFilter, load_sheets
from partitions.sheet_models import Clef, Format, Instrument, Token, Tone, Voice


def _token_choice(token_type: type[Token]) -> click.Choice:
    """A click choice over the canonical tokens of ``token_type``."""
    return click.Choice(token_type.tokens())


def _parse_token(token_type: type[Token], value: str | None) -> Token | None:
    return None if value is None else token_type.parse(value)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="partitions")
def main() -> None:
    """partitions — build and manage the band's music sheets."""


# ── lilypond subcommand ────────────────────────────────────────────────────────

@main.command()
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=1),
    default=None,
    metavar="N",
    help="Only compile the first N selected sheets (handy for a quick check).",
)
@click.option(
    "--music-path",
    "-m",
    type=click.Path(file_okay=False),
    default="music",
    show_default=True,
    help="Path to the music sources.",
)
@click.option("--title", "-t", default=None, help="Only compile the selected title.")
@click.option(
    "--instrument", "-i", type=_token_choice(Instrument), default=None,
    help="Only compile the selected instrument.",
)
@click.option(
    "--voice", "-v", type=_token_choice(Voice), default=None,
    help="Only compile the selected voice.",
)
@click.option(
    "--clef", "-c", type=_token_choice(Clef), default=None,
    help="Only compile the selected clef.",
)
@click.option(
    "--format", "-f", "format_", type=_token_choice(Format), default=None,
    help="Only compile the selected format.",
)
@click.option(
    "--tone", "-o", type=_token_choice(Tone), default=None,
    help="Only compile the selected tone.",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of parallel lilypond runs. Defaults to the number of CPUs.",
)
@click.option(
    "--lilypond",
    "lilypond_bin",
    envvar="PARTITIONS_LILYPOND",
    default=DEFAULT_LILYPOND,
    show_default=True,
    metavar="PATH",
    help="lilypond executable to run.",
)
@click.option("--verbose", is_flag=True, help="Log skipped sources and engine errors.")
def lilypond(
    limit: int | None,
    music_path: str,
    title: str | None,
    instrument: str | None,
    voice: str | None,
    clef: str | None,
    format_: str | None,
    tone: str | None,
    jobs: int | None,
    lilypond_bin: str,
    verbose: bool,
) -> None:
    """
    Compile the ly files into pdf.

    Sources are read from MUSIC_PATH/<category>/<title>/<a4|carnet>/*.ly and
    written to pdf/<format>/. One status line is printed per sheet, in the
    order the runs finish.

    \b
    Examples:
      partitions lilypond
      partitions lilypond -t Valse -f a4
      partitions lilypond -i trombone -c clef_fa --limit 2
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    sheet_filter = SheetFilter(
        title=title,
        instrument=_parse_token(Instrument, instrument),
        voice=_parse_token(Voice, voice),
        clef=_parse_token(Clef, clef),
        format=_parse_token(Format, format_),
        tone=_parse_token(Tone, tone),
    )

    try:
        sheets = load_sheets(music_path, sheet_filter)
    except OSError as exc:
        click.echo(f"  ERROR: Could not read music sources — {exc}", err=True)
        sys.exit(1)

    if not sheets:
        click.echo("  WARNING: No music sheet matches the selection.", err=True)
        return

    compile_sheets(sheets, limit, lilypond=lilypond_bin, jobs=jobs)
