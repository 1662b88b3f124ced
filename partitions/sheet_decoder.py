"""Decode a MusicSheet from a LilyPond source path.

Sources follow the library layout::

    <music>/<category>/<title>/<format>/<instrument>[_<voice>_<tone>[_<clef>]].ly

Decoding only reads the path string, never the filesystem.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Final

from partitions.sheet_models import (
    Category,
    Clef,
    Format,
    Instrument,
    MusicSheet,
    Tone,
    Voice,
)

SOURCE_SUFFIX: Final[str] = ".ly"
PDF_ROOT: Final[Path] = Path("pdf")

# First tokens that only make sense joined with the next one
# ("grosse_caisse", "saxophone_alto", ...). Kept by hand: a new two-word
# Instrument needs its prefix added here too.
TWO_TOKEN_PREFIXES: Final[frozenset[str]] = frozenset({"grosse", "caisse", "saxophone"})


class DecodeError(ValueError):
    """A source path that does not follow the naming convention."""

    def __init__(self, path: PurePath | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class BadSuffixError(DecodeError):
    pass


class MissingComponentError(DecodeError):
    pass


class UnknownFormatError(DecodeError):
    pass


class UnknownCategoryError(DecodeError):
    pass


class UnknownInstrumentError(DecodeError):
    pass


class MissingVoiceError(DecodeError):
    pass


class UnknownVoiceError(DecodeError):
    pass


class MissingToneError(DecodeError):
    pass


class UnknownToneError(DecodeError):
    pass


def output_name(
    title: str,
    instrument: Instrument,
    voice: Voice | None,
    tone: Tone | None,
    clef: Clef,
) -> str:
    """
    Build the PDF basename for a sheet.

    Only the bass clef is marked: treble and drums parts share the plain name.
    """
    parts = [title, str(instrument)]
    if voice is not None:
        parts.append(str(voice))
    if tone is not None:
        parts.append(str(tone))
    if clef is Clef.CLEF_FA:
        parts.append(str(clef))
    return "_".join(parts)


def _parse_instrument(path: PurePath, tokens: list[str]) -> Instrument:
    token = tokens.pop(0)
    if token in TWO_TOKEN_PREFIXES:
        if not tokens:
            raise UnknownInstrumentError(path, f"incomplete instrument name '{token}'")
        token = f"{token}_{tokens.pop(0)}"
    try:
        return Instrument.parse(token)
    except ValueError:
        raise UnknownInstrumentError(path, f"unknown instrument '{token}'") from None


def _parse_voice(path: PurePath, tokens: list[str]) -> Voice:
    if not tokens:
        raise MissingVoiceError(path, "missing voice in filename")
    token = tokens.pop(0)
    try:
        return Voice.parse(token)
    except ValueError:
        raise UnknownVoiceError(path, f"unknown voice '{token}'") from None


def _parse_tone(path: PurePath, tokens: list[str]) -> Tone:
    if not tokens:
        raise MissingToneError(path, "missing tone in filename")
    token = tokens.pop(0)
    try:
        return Tone.parse(token)
    except ValueError:
        raise UnknownToneError(path, f"unknown tone '{token}'") from None


def _parse_clef(tokens: list[str]) -> Clef:
    # Anything left over that is not a known clef reads as treble.
    try:
        return Clef.parse("_".join(tokens))
    except ValueError:
        return Clef.CLEF_SOL


def decode(source: Path | str) -> MusicSheet:
    """
    Decode the metadata carried by a source path.

    Args:
        source: Path of a ``.ly`` file inside an ``a4`` or ``carnet`` directory.

    Returns:
        The decoded MusicSheet, with its derived ``pdf`` path.

    Raises:
        DecodeError: One of its subclasses, naming the first component
            that does not match the convention.
    """
    path = Path(source)
    if not path.name.endswith(SOURCE_SUFFIX):
        raise BadSuffixError(path, f"filename does not end with '{SOURCE_SUFFIX}'")
    stem = path.name[: -len(SOURCE_SUFFIX)]

    parents = path.parts[:-1]
    if len(parents) < 3:
        raise MissingComponentError(path, "expected <category>/<title>/<format>/ directories")
    category_name, title, format_name = parents[-3:]

    try:
        format_ = Format.parse(format_name)
    except ValueError:
        raise UnknownFormatError(path, f"unknown format '{format_name}'") from None
    try:
        category = Category.parse(category_name)
    except ValueError:
        raise UnknownCategoryError(path, f"unknown category '{category_name}'") from None

    tokens = stem.split("_")
    instrument = _parse_instrument(path, tokens)

    voice: Voice | None
    tone: Tone | None
    if instrument.is_percussion:
        clef, voice, tone = Clef.CLEF_DRUMS, None, None
    else:
        voice = _parse_voice(path, tokens)
        tone = _parse_tone(path, tokens)
        clef = _parse_clef(tokens)

    pdf = PDF_ROOT / str(format_) / output_name(title, instrument, voice, tone, clef)
    return MusicSheet(
        source=path,
        pdf=pdf,
        instrument=instrument,
        clef=clef,
        voice=voice,
        tone=tone,
        title=title,
        format=format_,
        category=category,
    )
