"""partitions: build the band's LilyPond music sheets into PDFs."""

__version__ = "0.1.0"
