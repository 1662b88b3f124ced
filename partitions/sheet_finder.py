"""Find the LilyPond sources of the music library and select the ones to build."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Final

from partitions.sheet_decoder import SOURCE_SUFFIX, DecodeError, decode
from partitions.sheet_models import Clef, Format, Instrument, MusicSheet, Tone, Voice

logger = logging.getLogger(__name__)

FORMAT_DIRS: Final[frozenset[str]] = frozenset(fmt.value for fmt in Format)


@dataclass(frozen=True)
class SheetFilter:
    """
    Selection of sheets to compile.

    Every field left to ``None`` matches anything; set fields must all match.
    """

    title: str | None = None
    instrument: Instrument | None = None
    voice: Voice | None = None
    clef: Clef | None = None
    format: Format | None = None
    tone: Tone | None = None

    def matches(self, sheet: MusicSheet) -> bool:
        for field in fields(self):
            wanted = getattr(self, field.name)
            if wanted is not None and getattr(sheet, field.name) != wanted:
                return False
        return True

    def apply(self, sheets: Iterable[MusicSheet]) -> Iterator[MusicSheet]:
        return (sheet for sheet in sheets if self.matches(sheet))


def find_sources(music_path: Path | str) -> Iterator[Path]:
    """
    Yield every ``.ly`` file sitting directly in an ``a4`` or ``carnet`` directory.

    Directories are walked in sorted order so the result is stable from one
    run to the next.

    Raises:
        FileNotFoundError: If ``music_path`` is not a directory.
    """
    root = Path(music_path)
    if not root.is_dir():
        raise FileNotFoundError(f"Music directory not found: {root}")

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        directory = Path(dirpath)
        if directory.name not in FORMAT_DIRS:
            continue
        for filename in sorted(filenames):
            path = directory / filename
            if path.suffix == SOURCE_SUFFIX and path.is_file():
                yield path


def decode_sources(paths: Iterable[Path]) -> Iterator[MusicSheet]:
    """Decode each path, dropping the ones that do not follow the naming convention."""
    for path in paths:
        try:
            yield decode(path)
        except DecodeError as exc:
            logger.debug("Skipping %s", exc)


def load_sheets(
    music_path: Path | str,
    sheet_filter: SheetFilter | None = None,
) -> list[MusicSheet]:
    """Find, decode and filter the sheets of the library rooted at ``music_path``."""
    sheets = decode_sources(find_sources(music_path))
    if sheet_filter is not None:
        sheets = sheet_filter.apply(sheets)
    result = list(sheets)
    logger.info("Selected %d sheet(s) under %s", len(result), music_path)
    return result
