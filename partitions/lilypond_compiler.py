"""LilypondCompiler: renders MusicSheet sources to PDF with the lilypond engine."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Final

import click

from partitions.sheet_models import MusicSheet

logger = logging.getLogger(__name__)

DEFAULT_LILYPOND: Final[str] = "lilypond"

# Fixed engine flags: PDF output at 300 dpi, no point-and-click links so
# the output does not depend on where the sources live.
LILYPOND_FLAGS: Final[tuple[str, ...]] = (
    "-fpdf",
    "-dresolution=300",
    "-dpoint-and-click=#f",
)


@dataclass(frozen=True)
class CompilationResult:
    """
    Outcome of one lilypond run.

    Attributes:
        sheet:      The compiled sheet.
        returncode: Engine exit code, or ``None`` if the engine could not be started.
    """

    sheet: MusicSheet
    returncode: int | None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def status(self) -> str:
        if self.returncode is None:
            return "exit status: unknown"
        if self.returncode < 0:
            # Killed by a signal: subprocess reports -N.
            number = -self.returncode
            try:
                return f"signal: {number} ({signal.Signals(number).name})"
            except ValueError:
                return f"signal: {number}"
        return f"exit status: {self.returncode}"

    def __str__(self) -> str:
        return f"{self.sheet.description}: {self.status}"


class LilypondCompiler:
    """
    Compiles sheets concurrently, one lilypond process per sheet.

    Each sheet runs on a worker thread of a fixed-size pool; the only wait
    is on the engine process. Sheets share nothing but their read-only
    records, and every sheet writes its own output path, so no locking is
    needed.

    Status lines are echoed as each process finishes. Their order is the
    completion order, not the input order: expect any permutation. A
    failing sheet never stops the others and there is no timeout.
    """

    def __init__(
        self,
        lilypond: str = DEFAULT_LILYPOND,
        jobs: int | None = None,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        """
        Args:
            lilypond: Engine executable, looked up on PATH when not a path.
            jobs:     Worker threads; defaults to the number of CPUs.
            echo:     Sink for the per-sheet status lines.
        """
        self.lilypond = lilypond
        self.jobs = jobs or os.cpu_count() or 1
        self.echo = echo

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _run(self, sheet: MusicSheet) -> CompilationResult:
        command = self.build_command(sheet)
        logger.debug("Running %s", " ".join(command))
        try:
            sheet.output_dir.mkdir(parents=True, exist_ok=True)
            # The engine echoes source names in whatever encoding they have.
            completed = subprocess.run(
                command, capture_output=True, text=True, errors="replace", check=False
            )
        except OSError as exc:
            logger.warning("Could not run %s on %s: %s", self.lilypond, sheet.source, exc)
            result = CompilationResult(sheet=sheet, returncode=None)
        else:
            if completed.returncode != 0:
                logger.warning("%s failed:\n%s", sheet.source, completed.stderr)
            result = CompilationResult(sheet=sheet, returncode=completed.returncode)

        self.echo(str(result))
        return result

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_command(self, sheet: MusicSheet) -> list[str]:
        """Engine command line for one sheet; the source is the last argument."""
        return [self.lilypond, "-o", str(sheet.pdf), *LILYPOND_FLAGS, str(sheet.source)]

    def compile(
        self,
        sheets: Sequence[MusicSheet],
        limit: int | None = None,
    ) -> list[CompilationResult]:
        """
        Compile ``sheets`` and return one result per sheet, in input order.

        Args:
            sheets: Sheets to compile.
            limit:  Only compile the first ``limit`` sheets.
        """
        if limit is not None:
            sheets = sheets[:limit]
        if not sheets:
            return []

        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            return list(executor.map(self._run, sheets))


def compile_sheets(
    sheets: Sequence[MusicSheet],
    limit: int | None = None,
    *,
    lilypond: str = DEFAULT_LILYPOND,
    jobs: int | None = None,
    echo: Callable[[str], None] = click.echo,
) -> list[CompilationResult]:
    """Compile ``sheets`` with a one-off LilypondCompiler."""
    compiler = LilypondCompiler(lilypond=lilypond, jobs=jobs, echo=echo)
    return compiler.compile(sheets, limit=limit)
