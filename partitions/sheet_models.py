"""Data models for music sheets: the taxonomy enums and the decoded record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Token(str, Enum):
    """
    A closed set of filename tokens.

    ``parse`` maps a token back to its member, ``str()`` renders the
    canonical token. Unknown tokens raise ``ValueError``.
    """

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> Token:
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unknown {cls.__name__.lower()} '{token}'.") from None

    @classmethod
    def tokens(cls) -> list[str]:
        """Canonical tokens, in declaration order."""
        return [member.value for member in cls]


class Instrument(Token):
    BARYTON = "baryton"
    BASSE = "basse"
    BUGLE = "bugle"
    CAISSE_CLAIRE = "caisse_claire"
    CLARINETTE = "clarinette"
    CONTREBASSE = "contrebasse"
    COR = "cor"
    EUPHONIUM = "euphonium"
    FLUTE = "flute"
    GROSSE_CAISSE = "grosse_caisse"
    PICCOLO = "piccolo"
    SAXOPHONE_ALTO = "saxophone_alto"
    SAXOPHONE_BARYTON = "saxophone_baryton"
    SAXOPHONE_SOPRANO = "saxophone_soprano"
    SAXOPHONE_TENOR = "saxophone_tenor"
    TROMBONE = "trombone"
    TROMPETTE = "trompette"
    TUBA = "tuba"

    @property
    def is_percussion(self) -> bool:
        """Drums carry neither voice nor tone and always read the drums clef."""
        return self in (Instrument.CAISSE_CLAIRE, Instrument.GROSSE_CAISSE)


class Voice(Token):
    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    SOLO = "Solo"

    @classmethod
    def parse(cls, token: str) -> Voice:
        # Deliberately lenient: unlike every other token, voices match in any
        # case, since the library writes them both ways ("II" and "ii").
        for member in cls:
            if member.value.lower() == token.lower():
                return member
        raise ValueError(f"Unknown voice '{token}'.")


class Clef(Token):
    CLEF_FA = "clef_fa"
    CLEF_SOL = "clef_sol"
    CLEF_DRUMS = "clef_drums"


class Tone(Token):
    UT = "ut"
    MIB = "mib"
    FA = "fa"
    SIB = "sib"


class Format(Token):
    A4 = "a4"
    CARNET = "carnet"


class Category(Token):
    CONCERTS = "concerts"
    ANIMATIONS = "animations"
    MARCHES = "marches"


@dataclass(frozen=True)
class MusicSheet:
    """
    One decoded LilyPond source and the PDF it compiles to.

    Attributes:
        source:     Path of the ``.ly`` file.
        pdf:        Output path handed to ``lilypond -o`` (the engine adds ``.pdf``).
        instrument: Instrument the part is written for.
        clef:       Always set; ``CLEF_DRUMS`` for percussion.
        voice:      ``None`` for percussion.
        tone:       ``None`` for percussion.
        title:      Name of the piece (the directory above the format directory).
        format:     Page layout, also the parent directory name.
        category:   Repertoire section the piece belongs to.
    """

    source: Path
    pdf: Path
    instrument: Instrument
    clef: Clef
    voice: Voice | None
    tone: Tone | None
    title: str
    format: Format
    category: Category

    @property
    def output_dir(self) -> Path:
        return self.pdf.parent

    @property
    def description(self) -> str:
        """Human-readable label, e.g. ``Valse - trombone sib II (Clef de Fa) [a4]``."""
        description = f"{self.title} - {self.instrument}"
        if self.tone is not None:
            description += f" {self.tone}"
        if self.voice is not None:
            description += f" {self.voice}"
        if self.clef is Clef.CLEF_FA:
            description += " (Clef de Fa)"
        return f"{description} [{self.format}]"
